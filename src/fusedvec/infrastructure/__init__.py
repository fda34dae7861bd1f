"""
Infrastructure layer: device arrays, configuration, functors, execution
backends, allocators and the vector engine.
"""
