"""
Block device identity and shared folder mount units.
"""
from .errors import BlockDeviceError, DeviceNotFoundError, DeviceTimeoutError
from .blockdevice import BaseBlockDevice, BlockDevice, BlockDeviceSettings, wait_for_device
from .ordering import by_id_priority, sort_by_id_names
from .mountunits import MountUnitGenerator, SharedFolder, load_shared_folders, render_unit

__all__ = [
    "BlockDeviceError",
    "DeviceNotFoundError",
    "DeviceTimeoutError",
    "BaseBlockDevice",
    "BlockDevice",
    "BlockDeviceSettings",
    "wait_for_device",
    "by_id_priority",
    "sort_by_id_names",
    "MountUnitGenerator",
    "SharedFolder",
    "load_shared_folders",
    "render_unit",
]
