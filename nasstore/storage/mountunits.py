"""
Shared folder mount units.

Every shared folder is a directory on one of the configured mounts
(global.mounts) that gets bind-mounted to <sharedfolders_dir>/<name>.
The bind mounts are plain systemd .mount units, regenerated from the
configuration whenever shared folders change:

    "global": {
        "mounts": {
            "nas": {"device": "sdb1", "mountPoint": "/mnt/nas"}
        },
        "sharedFolders": [
            {"uuid": "...", "name": "media", "mount": "nas", "reldirpath": "media/"}
        ]
    }

produces /etc/systemd/system/sharedfolders-media.mount binding
/mnt/nas/media to /sharedfolders/media.
"""
import os
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from nasstore.utils.utils import execute_systemctl_command
from .systemd import escape_path, unit_name

logger = logging.getLogger('homeserver')

UNIT_TEMPLATE = """\
# This file is generated by nasstore-mount-units. Do not edit.
[Unit]
Description=Mount shared folder {name} to {where}
DefaultDependencies=no
Conflicts=umount.target
Before=local-fs.target umount.target
RequiresMountsFor={mount_dir}

[Mount]
What={what}
Where={where}
Type=none
Options=bind,nofail

[Install]
WantedBy=local-fs.target
"""

SystemctlRunner = Callable[..., Tuple[bool, str]]


def build_path(*parts: str) -> str:
    """Join path parts, collapsing duplicate and trailing slashes."""
    joined = '/'.join(part for part in parts if part)
    segments = [segment for segment in joined.split('/') if segment]
    prefix = '/' if joined.startswith('/') else ''
    return prefix + '/'.join(segments) if segments else prefix or '.'


def _unit_value(value: str) -> str:
    # '%' starts a systemd specifier
    return value.replace('%', '%%')


@dataclass
class SharedFolder:
    uuid: str
    name: str
    mount: str
    reldirpath: str
    mount_dir: str
    what: str
    where: str
    comment: str = ''

    @property
    def unit_name(self) -> str:
        return unit_name(self.where)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'uuid': self.uuid,
            'name': self.name,
            'mount': self.mount,
            'reldirpath': self.reldirpath,
            'comment': self.comment,
            'what': self.what,
            'where': self.where,
            'unitName': self.unit_name,
        }


def load_shared_folders(config: Dict[str, Any], sharedfolders_dir: str = '/sharedfolders') -> List[SharedFolder]:
    """
    Build SharedFolder records from the configuration.
    Entries without a name or with an unknown mount are skipped.
    """
    global_config = config.get('global', {})
    mounts = global_config.get('mounts', {})
    folders = []

    for entry in global_config.get('sharedFolders', []):
        name = entry.get('name', '')
        if not name or name in ('.', '..') or '/' in name:
            logger.warning(f"Skipping shared folder with invalid name: {name!r}")
            continue

        mount_key = entry.get('mount', '')
        mount = mounts.get(mount_key) or {}
        mount_dir = mount.get('mountPoint')
        if not mount_dir:
            logger.warning(f"Skipping shared folder '{name}': mount '{mount_key}' is not configured")
            continue

        reldirpath = entry.get('reldirpath', '')
        folders.append(SharedFolder(
            uuid=entry.get('uuid', ''),
            name=name,
            mount=mount_key,
            reldirpath=reldirpath,
            mount_dir=mount_dir,
            what=build_path(mount_dir, reldirpath),
            where=build_path(sharedfolders_dir, name),
            comment=entry.get('comment', ''),
        ))

    return folders


def render_unit(folder: SharedFolder) -> str:
    """Unit file text for a shared folder bind mount."""
    return UNIT_TEMPLATE.format(
        name=_unit_value(folder.name),
        where=_unit_value(folder.where),
        what=_unit_value(folder.what),
        mount_dir=_unit_value(folder.mount_dir),
    )


@dataclass
class RegenerateResult:
    written: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class MountUnitGenerator:
    """
    Writes and removes the shared folder mount units in a systemd unit directory.
    Only units named after the shared folder root are touched.
    """

    def __init__(self, unit_dir: str = '/etc/systemd/system',
                 sharedfolders_dir: str = '/sharedfolders',
                 systemctl_bin: str = '/usr/bin/systemctl',
                 systemctl: Optional[SystemctlRunner] = None):
        self.unit_dir = unit_dir
        self.sharedfolders_dir = sharedfolders_dir
        self.systemctl_bin = systemctl_bin
        self._systemctl = systemctl or execute_systemctl_command

    @property
    def unit_prefix(self) -> str:
        return escape_path(self.sharedfolders_dir) + '-'

    def systemctl(self, command: str, unit: Optional[str] = None) -> Tuple[bool, str]:
        return self._systemctl(command, unit, systemctl=self.systemctl_bin)

    def existing_units(self) -> List[str]:
        """Names of the shared folder units currently in the unit directory."""
        if not os.path.isdir(self.unit_dir):
            return []
        return sorted(
            name for name in os.listdir(self.unit_dir)
            if name.startswith(self.unit_prefix) and name.endswith('.mount')
            and os.path.isfile(os.path.join(self.unit_dir, name))
        )

    def render_units(self, config: Dict[str, Any]) -> Dict[str, str]:
        """Unit name -> unit text for every configured shared folder."""
        units = {}
        for folder in load_shared_folders(config, self.sharedfolders_dir):
            if folder.unit_name in units:
                logger.warning(f"Skipping duplicate shared folder '{folder.name}' ({folder.unit_name})")
                continue
            units[folder.unit_name] = render_unit(folder)
        return units

    def regenerate(self, config: Dict[str, Any], enable: bool = True) -> RegenerateResult:
        """
        Replace all shared folder units with freshly rendered ones.

        Args:
            config: Parsed configuration
            enable: Disable old units, enable new ones and reload systemd

        Returns:
            RegenerateResult: Written and removed unit paths plus failed systemctl calls

        Raises:
            ValueError: If a unit path cannot be escaped
        """
        # Rendering can raise, so it happens before any unit is removed
        units = self.render_units(config)
        result = RegenerateResult()

        for name in self.existing_units():
            if enable:
                success, output = self.systemctl('disable', name)
                if not success:
                    logger.warning(f"Failed to disable {name}: {output}")
            path = os.path.join(self.unit_dir, name)
            os.remove(path)
            result.removed.append(path)
            logger.debug(f"Removed mount unit {path}")

        if units:
            os.makedirs(self.unit_dir, exist_ok=True)

        for name, text in units.items():
            path = os.path.join(self.unit_dir, name)
            with open(path, 'w') as f:
                f.write(text)
            result.written.append(path)
            logger.info(f"Wrote mount unit {path}")

        if enable:
            success, output = self.systemctl('daemon-reload')
            if not success:
                logger.error(f"systemctl daemon-reload failed: {output}")
                result.failed.append('daemon-reload')
            for name in units:
                success, output = self.systemctl('enable', name)
                if not success:
                    logger.error(f"Failed to enable {name}: {output}")
                    result.failed.append(name)

        return result
