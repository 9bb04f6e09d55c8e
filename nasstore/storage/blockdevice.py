"""
Block device identity.

Wraps `blockdev`, `udevadm` and sysfs to answer identity questions about a
block device node: canonical path, stable symlinks, size and geometry,
major:minor numbers and udev properties. Results are cached per instance;
construct a new BlockDevice to get fresh values.

Usage:
    device = BlockDevice.resolve('/dev/disk/by-id/ata-ST4000DM004_ZFN0A1B2')
    device.canonical_device_file    # '/dev/sdb'
    device.predictable_device_file()
    device.size()
"""
import os
import stat
import time
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from nasstore.utils.utils import execute_command
from .errors import DeviceNotFoundError, DeviceTimeoutError
from .ordering import sort_by_id_names

logger = logging.getLogger('homeserver')

Runner = Callable[[List[str]], Tuple[bool, str, str]]


@dataclass
class BlockDeviceSettings:
    """Where to find device nodes, sysfs and the query binaries."""
    dev_root: str = '/dev'
    sysfs_root: str = '/sys'
    blockdev_bin: str = '/usr/sbin/blockdev'
    udevadm_bin: str = '/usr/bin/udevadm'
    runner: Runner = execute_command

    @classmethod
    def from_config(cls, config: Mapping[str, Any], runner: Optional[Runner] = None) -> 'BlockDeviceSettings':
        """Build settings from a Flask config (or any mapping with the same keys)."""
        return cls(
            dev_root=config.get('DEV_ROOT', cls.dev_root),
            sysfs_root=config.get('SYSFS_ROOT', cls.sysfs_root),
            blockdev_bin=config.get('BLOCKDEV_BIN', cls.blockdev_bin),
            udevadm_bin=config.get('UDEVADM_BIN', cls.udevadm_bin),
            runner=runner or execute_command,
        )


def is_block_device(path: str) -> bool:
    """True if path (following symlinks) is a block device node."""
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def parse_udev_properties(output: str) -> Dict[str, str]:
    """
    Parse `udevadm info --query=property` output.

    Expected format::
        DEVNAME=/dev/sda
        DEVTYPE=disk
        ID_BUS=ata
        DEVLINKS=/dev/disk/by-id/ata-... /dev/disk/by-path/pci-...
    """
    properties = {}
    for line in output.splitlines():
        line = line.strip()
        if '=' not in line:
            continue
        key, value = line.split('=', 1)
        properties[key] = value
    return properties


def format_bytes(size: int) -> str:
    """Binary size string, e.g. 3.64 TiB."""
    value = float(size)
    for unit in ('B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB'):
        if value < 1024 or unit == 'PiB':
            break
        value /= 1024
    if unit == 'B':
        return f"{int(value)} B"
    return f"{value:.2f} {unit}"


class BaseBlockDevice(ABC):
    """Capability interface for block device backends."""

    @property
    @abstractmethod
    def device_file(self) -> str:
        pass

    @property
    @abstractmethod
    def canonical_device_file(self) -> str:
        pass

    @abstractmethod
    def exists(self) -> bool:
        pass

    @abstractmethod
    def symlinks(self) -> List[str]:
        pass

    @abstractmethod
    def predictable_device_file(self) -> str:
        pass

    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def block_size(self) -> int:
        pass

    @abstractmethod
    def sector_size(self) -> int:
        pass

    @abstractmethod
    def device_number(self) -> str:
        pass

    def device_name(self, canonical: bool = False) -> str:
        """Basename of the device file, e.g. 'sda' or 'ata-ST4000DM004_ZFN0A1B2'."""
        path = self.canonical_device_file if canonical else self.device_file
        return os.path.basename(path)

    def major(self) -> int:
        return int(self.device_number().split(':')[0])

    def minor(self) -> int:
        return int(self.device_number().split(':')[1])


class BlockDevice(BaseBlockDevice):
    """Block device queried through blockdev, udevadm and sysfs."""

    def __init__(self, device_file: str, settings: Optional[BlockDeviceSettings] = None):
        self.settings = settings or BlockDeviceSettings()
        self._device_file = device_file
        self._canonical_device_file = os.path.realpath(device_file)
        self._udev_properties: Optional[Dict[str, str]] = None
        self._blockdev_cache: Dict[str, int] = {}
        self._device_number: Optional[str] = None

    @classmethod
    def resolve(cls, device_file: str, settings: Optional[BlockDeviceSettings] = None) -> 'BlockDevice':
        """
        Create a BlockDevice for an existing device node or symlink.

        Raises:
            DeviceNotFoundError: If the path is not a block device
        """
        device = cls(device_file, settings)
        if not device.exists():
            raise DeviceNotFoundError(device_file, f"Device '{device_file}' not found")
        return device

    def __repr__(self):
        return f"<BlockDevice {self._device_file!r} -> {self._canonical_device_file!r}>"

    @property
    def device_file(self) -> str:
        return self._device_file

    @property
    def canonical_device_file(self) -> str:
        return self._canonical_device_file

    def exists(self) -> bool:
        return is_block_device(self._canonical_device_file)

    # --- udev ---

    def udev_properties(self, force: bool = False) -> Dict[str, str]:
        """
        All udev properties of the device, fetched once and cached.

        Args:
            force: Query udev again instead of using the cache

        Raises:
            DeviceNotFoundError: If udevadm fails for this device
        """
        if self._udev_properties is None or force:
            command = [
                self.settings.udevadm_bin, 'info', '--query=property',
                f'--name={self._canonical_device_file}'
            ]
            success, stdout, stderr = self.settings.runner(command)
            if not success:
                raise DeviceNotFoundError(
                    self._device_file,
                    f"Failed to get udev properties of device '{self._device_file}': {stderr}"
                )
            self._udev_properties = parse_udev_properties(stdout)
            logger.debug(f"Loaded {len(self._udev_properties)} udev properties for {self._device_file}")
        return dict(self._udev_properties)

    def has_udev_property(self, name: str) -> bool:
        return name in self.udev_properties()

    def udev_property(self, name: str) -> str:
        """
        Raises:
            DeviceNotFoundError: If the property does not exist
        """
        properties = self.udev_properties()
        if name not in properties:
            raise DeviceNotFoundError(
                self._device_file,
                f"Udev property '{name}' not found for device '{self._device_file}'"
            )
        return properties[name]

    def _udev_property_or_empty(self, name: str) -> str:
        return self.udev_properties().get(name, '')

    def model(self) -> str:
        return self._udev_property_or_empty('ID_MODEL').replace('_', ' ').strip()

    def vendor(self) -> str:
        return self._udev_property_or_empty('ID_VENDOR').replace('_', ' ').strip()

    def serial_number(self) -> str:
        return self._udev_property_or_empty('ID_SERIAL_SHORT') or self._udev_property_or_empty('ID_SERIAL')

    def wwn(self) -> str:
        return self._udev_property_or_empty('ID_WWN')

    # --- device files ---

    def symlinks(self) -> List[str]:
        """
        Stable symlinks pointing at the device, in udev order.
        Names relative to the device root ('disk/by-id/...') are made absolute.
        """
        properties = self.udev_properties()
        if 'DEVLINKS' not in properties:
            return []
        links = []
        for link in properties['DEVLINKS'].split():
            if not link.startswith('/'):
                link = os.path.join(self.settings.dev_root, link)
            links.append(link)
        return links

    def device_files(self) -> List[str]:
        """Canonical device file followed by all symlinks."""
        return [self._canonical_device_file] + self.symlinks()

    def _symlinks_in(self, namespace: str) -> List[str]:
        prefix = os.path.join(self.settings.dev_root, 'disk', namespace) + '/'
        return [link for link in self.symlinks() if link.startswith(prefix) and len(link) > len(prefix)]

    def device_files_by_id(self) -> List[str]:
        """/dev/disk/by-id links, best first."""
        return sort_by_id_names(self._symlinks_in('by-id'))

    def device_files_by_path(self) -> List[str]:
        return self._symlinks_in('by-path')

    def has_device_file_by_id(self) -> bool:
        return bool(self.device_files_by_id())

    def has_device_file_by_path(self) -> bool:
        return bool(self.device_files_by_path())

    def device_file_by_id(self) -> Optional[str]:
        links = self.device_files_by_id()
        return links[0] if links else None

    def device_file_by_path(self) -> Optional[str]:
        links = self.device_files_by_path()
        return links[0] if links else None

    def predictable_device_file(self) -> str:
        """
        Device file that survives reboots and enclosure/cable reordering.
        Order: best by-id link, first by-path link, canonical device file.
        """
        return self.device_file_by_id() or self.device_file_by_path() or self._canonical_device_file

    # --- blockdev ---

    def _blockdev(self, option: str) -> int:
        if option not in self._blockdev_cache:
            command = [self.settings.blockdev_bin, option, self._canonical_device_file]
            success, stdout, stderr = self.settings.runner(command)
            if not success:
                raise DeviceNotFoundError(
                    self._device_file,
                    f"Failed to get '{option}' of device '{self._device_file}': {stderr}"
                )
            try:
                self._blockdev_cache[option] = int(stdout.split()[0])
            except (IndexError, ValueError):
                raise DeviceNotFoundError(
                    self._device_file,
                    f"Unexpected '{option}' output for device '{self._device_file}': {stdout!r}"
                )
        return self._blockdev_cache[option]

    def size(self) -> int:
        """Size in bytes."""
        return self._blockdev('--getsize64')

    def block_size(self) -> int:
        return self._blockdev('--getbsz')

    def sector_size(self) -> int:
        """Logical sector size in bytes."""
        return self._blockdev('--getss')

    # --- sysfs ---

    def device_number(self) -> str:
        """
        'major:minor' as listed in /sys/class/block/<name>/dev.

        Raises:
            DeviceNotFoundError: If the sysfs entry is missing
        """
        if self._device_number is None:
            path = os.path.join(self.settings.sysfs_root, 'class', 'block',
                                self.device_name(canonical=True), 'dev')
            try:
                with open(path, 'r') as f:
                    self._device_number = f.read().strip()
            except OSError as e:
                raise DeviceNotFoundError(
                    self._device_file,
                    f"Failed to read device number of '{self._device_file}': {e}"
                )
        return self._device_number

    # --- summary ---

    def description(self) -> str:
        """Human readable label, e.g. 'ST4000DM004 [/dev/sdb, 3.64 TiB]'."""
        label = self.model() or self.device_name(canonical=True)
        try:
            return f"{label} [{self._canonical_device_file}, {format_bytes(self.size())}]"
        except DeviceNotFoundError:
            return f"{label} [{self._canonical_device_file}]"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'deviceFile': self._device_file,
            'canonicalDeviceFile': self._canonical_device_file,
            'deviceName': self.device_name(canonical=True),
            'predictableDeviceFile': self.predictable_device_file(),
            'deviceFileById': self.device_file_by_id(),
            'deviceFileByPath': self.device_file_by_path(),
            'symlinks': self.symlinks(),
            'size': self.size(),
            'blockSize': self.block_size(),
            'sectorSize': self.sector_size(),
            'major': self.major(),
            'minor': self.minor(),
            'model': self.model(),
            'vendor': self.vendor(),
            'serialNumber': self.serial_number(),
            'wwn': self.wwn(),
            'description': self.description(),
        }


def wait_for_device(device_file: str, timeout: int,
                    settings: Optional[BlockDeviceSettings] = None) -> BlockDevice:
    """
    Poll once per second until device_file exists as a block device.

    Args:
        device_file: Device node or symlink to wait for
        timeout: Seconds to wait; 0 checks once

    Returns:
        BlockDevice: The device, resolved after it appeared

    Raises:
        DeviceTimeoutError: If the device did not appear in time
    """
    waited = 0
    while not is_block_device(device_file):
        if waited >= timeout:
            logger.warning(f"Gave up waiting for {device_file} after {waited}s")
            raise DeviceTimeoutError(device_file, timeout)
        time.sleep(1)
        waited += 1
    if waited:
        logger.info(f"Device {device_file} appeared after {waited}s")
    return BlockDevice.resolve(device_file, settings)
