from typing import Any, Dict, List, Tuple

import psutil
from flask import current_app

from nasstore.utils.utils import execute_command, get_config
from nasstore.storage.mountunits import load_shared_folders


def get_mounted_paths() -> set:
    """All currently mounted paths, bind mounts included."""
    return {partition.mountpoint for partition in psutil.disk_partitions(all=True)}


def list_shared_folders() -> List[Dict[str, Any]]:
    """
    Shared folders from the configuration with their unit name and mount state.
    """
    folders = load_shared_folders(get_config(), current_app.config['SHAREDFOLDERS_DIR'])
    mounted = get_mounted_paths()
    result = []
    for folder in folders:
        entry = folder.to_dict()
        entry['mounted'] = folder.where in mounted
        result.append(entry)
    return result


def apply_mount_units() -> Tuple[bool, str]:
    """
    Regenerate the mount units by running the mount unit command through sudo.

    Returns:
        tuple: (success, output or error message)
    """
    command = [
        current_app.config['SUDO_BIN'],
        current_app.config['MOUNT_UNITS_COMMAND'],
        '--config', current_app.config['NASSTORE_CONFIG'],
        '--factory-config', current_app.config['FACTORY_CONFIG'],
        '--systemctl', current_app.config['SYSTEMCTL_BIN'],
        '--unit-dir', current_app.config['SYSTEMD_UNIT_DIR'],
        '--sharedfolders-dir', current_app.config['SHAREDFOLDERS_DIR'],
    ]
    current_app.logger.info("[SHAREDFOLDERS] Regenerating shared folder mount units")
    success, stdout, stderr = execute_command(command)
    current_app.logger.info(f"[SHAREDFOLDERS] Mount unit command result - success: {success}")

    if not success:
        current_app.logger.error(f"[SHAREDFOLDERS] Failed to regenerate mount units: {stderr or stdout}")
        return False, stderr or stdout
    return True, stdout
