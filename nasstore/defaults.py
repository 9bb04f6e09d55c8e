"""
Default system paths shared by the web configuration and the command line tools.
"""
import os


def get_config_path() -> str:
    """Path of the JSON configuration database."""
    return os.environ.get('NASSTORE_CONFIG', '/etc/nasstore/nasstore.json')


FACTORY_CONFIG = '/etc/nasstore/nasstore.factory'
HOMESERVER_LOG_DIR = '/var/log/homeserver'

# Block device queries
DEV_ROOT = '/dev'
SYSFS_ROOT = '/sys'
BLOCKDEV_BIN = '/usr/sbin/blockdev'
UDEVADM_BIN = '/usr/bin/udevadm'

# Shared folder mount units
SYSTEMCTL_BIN = '/usr/bin/systemctl'
SUDO_BIN = '/usr/bin/sudo'
SYSTEMD_UNIT_DIR = '/etc/systemd/system'
SHAREDFOLDERS_DIR = '/sharedfolders'
MOUNT_UNITS_COMMAND = '/usr/local/bin/nasstore-mount-units'
