"""Shared pytest fixtures: fake command runner and a throwaway sysfs tree."""
import pytest

UDEV_OUTPUT = """\
DEVNAME=/dev/sdb
DEVTYPE=disk
ID_BUS=ata
ID_MODEL=ST4000DM004-2CV104
ID_VENDOR=ATA
ID_SERIAL=ST4000DM004-2CV104_ZFN0A1B2
ID_SERIAL_SHORT=ZFN0A1B2
ID_WWN=0x5000c500b1234567
DEVLINKS=/dev/disk/by-path/pci-0000:00:17.0-ata-2 /dev/disk/by-id/wwn-0x5000c500b1234567 /dev/disk/by-id/ata-ST4000DM004-2CV104_ZFN0A1B2
"""


class FakeRunner:
    """
    Stands in for execute_command. Responses are keyed by the first
    argument after the binary ('info', '--getsize64', ...).
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, command):
        self.calls.append(list(command))
        return self.responses.get(command[1], (False, '', f"unexpected command: {' '.join(command)}"))

    def count(self, key):
        return sum(1 for call in self.calls if call[1] == key)


@pytest.fixture
def fake_runner():
    return FakeRunner({
        'info': (True, UDEV_OUTPUT, ''),
        '--getsize64': (True, '4000787030016', ''),
        '--getbsz': (True, '4096', ''),
        '--getss': (True, '512', ''),
    })


@pytest.fixture
def sysfs_root(tmp_path):
    root = tmp_path / 'sys'
    device_dir = root / 'class' / 'block' / 'sdb'
    device_dir.mkdir(parents=True)
    (device_dir / 'dev').write_text('8:16\n')
    return str(root)
