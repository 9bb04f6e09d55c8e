"""
Block device errors.
"""


class BlockDeviceError(Exception):
    """Base error for block device queries. Carries the device path."""

    def __init__(self, device_file: str, message: str):
        super().__init__(message)
        self.device_file = device_file


class DeviceNotFoundError(BlockDeviceError):
    """Device node, udev property or query result is not available."""
    pass


class DeviceTimeoutError(BlockDeviceError):
    """Device did not show up within the waiting period."""

    def __init__(self, device_file: str, timeout: int):
        super().__init__(
            device_file,
            f"Device '{device_file}' not found after a waiting period of {timeout} seconds"
        )
        self.timeout = timeout
