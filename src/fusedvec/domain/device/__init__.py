"""
Device descriptors used to select an execution backend.
"""

from ._device import Device, DeviceType

__all__ = [Device.__name__, DeviceType.__name__]
