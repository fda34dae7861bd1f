"""
Native CUDA integration (runtime library bindings).
"""
