import os
from typing import Any, Dict, List

import psutil
from flask import current_app

from nasstore.storage.blockdevice import BlockDevice, BlockDeviceSettings, wait_for_device


def get_block_device_settings() -> BlockDeviceSettings:
    """Block device settings taken from the application config."""
    return BlockDeviceSettings.from_config(current_app.config)


def format_device_path(device):
    """
    Ensure device name is properly formatted by adding the /dev/ prefix if needed.

    Args:
        device (str): Device name or path ('sda', 'disk/by-id/ata-...', '/dev/sda')

    Returns:
        tuple: (formatted_device_path, device_name)
    """
    dev_root = current_app.config.get('DEV_ROOT', '/dev')
    if device.startswith('/'):
        device_path = device
    else:
        device_path = os.path.join(dev_root, device)
    return device_path, os.path.basename(device_path)


def get_mount_points(device: BlockDevice) -> List[str]:
    """
    Mount points of the device, matched against its canonical file and symlinks.
    """
    device_files = set(device.device_files())
    mount_points = []
    for partition in psutil.disk_partitions(all=True):
        if partition.device in device_files or os.path.realpath(partition.device) == device.canonical_device_file:
            mount_points.append(partition.mountpoint)
    return mount_points


def get_device_info(device: str) -> Dict[str, Any]:
    """
    Identity summary of an existing block device.

    Raises:
        DeviceNotFoundError: If the device does not exist or cannot be queried
    """
    device_path, _ = format_device_path(device)
    block_device = BlockDevice.resolve(device_path, get_block_device_settings())
    info = block_device.to_dict()
    info['mountPoints'] = get_mount_points(block_device)
    current_app.logger.info(f"[DISKMAN] Resolved {device_path} to {info['predictableDeviceFile']}")
    return info


def wait_for_device_info(device: str, timeout: int) -> Dict[str, Any]:
    """
    Wait for a device to appear and return its identity summary.

    Raises:
        DeviceTimeoutError: If the device did not appear in time
        DeviceNotFoundError: If the device cannot be queried once it appeared
    """
    device_path, _ = format_device_path(device)
    current_app.logger.info(f"[DISKMAN] Waiting up to {timeout}s for {device_path}")
    block_device = wait_for_device(device_path, timeout, get_block_device_settings())
    info = block_device.to_dict()
    info['mountPoints'] = get_mount_points(block_device)
    return info
