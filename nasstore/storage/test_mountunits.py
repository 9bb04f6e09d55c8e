import os

import pytest

from nasstore.storage.mountunits import (
    MountUnitGenerator,
    build_path,
    load_shared_folders,
    render_unit,
)

CONFIG = {
    'global': {
        'mounts': {
            'nas': {'device': 'sdb1', 'mountPoint': '/mnt/nas'},
            'nas_backup': {'device': 'sdc1', 'mountPoint': '/mnt/nas_backup/'},
        },
        'sharedFolders': [
            {'uuid': 'a1', 'name': 'media', 'mount': 'nas', 'reldirpath': 'media/'},
            {'uuid': 'b2', 'name': 'backups', 'mount': 'nas_backup', 'reldirpath': '/daily//',
             'comment': 'nightly rsync'},
            {'uuid': 'c3', 'name': 'orphan', 'mount': 'usb', 'reldirpath': 'orphan'},
            {'uuid': 'd4', 'name': 'bad/name', 'mount': 'nas', 'reldirpath': 'x'},
        ],
    }
}


class RecordingSystemctl:
    def __init__(self, failing=()):
        self.calls = []
        self.failing = set(failing)

    def __call__(self, command, unit=None, systemctl='/usr/bin/systemctl'):
        self.calls.append((command, unit))
        if command in self.failing or unit in self.failing:
            return False, 'Failed to execute operation'
        return True, ''


def test_build_path():
    assert build_path('/mnt/nas', 'media/') == '/mnt/nas/media'
    assert build_path('/mnt/nas_backup/', '/daily//') == '/mnt/nas_backup/daily'
    assert build_path('/mnt/nas', '') == '/mnt/nas'
    assert build_path('/', '') == '/'


def test_load_shared_folders():
    folders = load_shared_folders(CONFIG)
    assert [folder.name for folder in folders] == ['media', 'backups']

    media, backups = folders
    assert media.what == '/mnt/nas/media'
    assert media.where == '/sharedfolders/media'
    assert media.mount_dir == '/mnt/nas'
    assert media.unit_name == 'sharedfolders-media.mount'
    assert backups.what == '/mnt/nas_backup/daily'
    assert backups.comment == 'nightly rsync'


def test_load_shared_folders_custom_root():
    folders = load_shared_folders(CONFIG, '/srv/shares/')
    assert folders[0].where == '/srv/shares/media'
    assert folders[0].unit_name == 'srv-shares-media.mount'


def test_load_shared_folders_empty_config():
    assert load_shared_folders({}) == []


def test_render_unit():
    text = render_unit(load_shared_folders(CONFIG)[0])
    lines = text.splitlines()
    assert '[Unit]' in lines
    assert 'Description=Mount shared folder media to /sharedfolders/media' in lines
    assert 'DefaultDependencies=no' in lines
    assert 'RequiresMountsFor=/mnt/nas' in lines
    assert '[Mount]' in lines
    assert 'What=/mnt/nas/media' in lines
    assert 'Where=/sharedfolders/media' in lines
    assert 'Type=none' in lines
    assert 'Options=bind,nofail' in lines
    assert '[Install]' in lines
    assert 'WantedBy=local-fs.target' in lines


def test_render_unit_escapes_specifiers():
    config = {'global': {
        'mounts': {'nas': {'mountPoint': '/mnt/nas'}},
        'sharedFolders': [{'name': '100%', 'mount': 'nas', 'reldirpath': '100%'}],
    }}
    text = render_unit(load_shared_folders(config)[0])
    assert 'What=/mnt/nas/100%%' in text.splitlines()


class TestMountUnitGenerator:

    @pytest.fixture
    def unit_dir(self, tmp_path):
        path = tmp_path / 'system'
        path.mkdir()
        (path / 'sharedfolders-stale.mount').write_text('[Mount]\n')
        (path / 'mnt-nas.mount').write_text('[Mount]\n')
        (path / 'sharedfolders-media.service').write_text('[Service]\n')
        return path

    def test_existing_units_only_lists_own_mount_units(self, unit_dir):
        generator = MountUnitGenerator(str(unit_dir), systemctl=RecordingSystemctl())
        assert generator.existing_units() == ['sharedfolders-stale.mount']

    def test_existing_units_without_unit_dir(self, tmp_path):
        generator = MountUnitGenerator(str(tmp_path / 'missing'), systemctl=RecordingSystemctl())
        assert generator.existing_units() == []

    def test_regenerate(self, unit_dir):
        systemctl = RecordingSystemctl()
        generator = MountUnitGenerator(str(unit_dir), systemctl=systemctl)

        result = generator.regenerate(CONFIG)

        assert result.ok
        assert result.removed == [str(unit_dir / 'sharedfolders-stale.mount')]
        assert sorted(os.path.basename(path) for path in result.written) == [
            'sharedfolders-backups.mount', 'sharedfolders-media.mount'
        ]
        assert not (unit_dir / 'sharedfolders-stale.mount').exists()
        assert (unit_dir / 'mnt-nas.mount').exists()
        assert (unit_dir / 'sharedfolders-media.service').exists()
        assert 'What=/mnt/nas/media' in (unit_dir / 'sharedfolders-media.mount').read_text()

        assert systemctl.calls[0] == ('disable', 'sharedfolders-stale.mount')
        assert ('daemon-reload', None) in systemctl.calls
        assert ('enable', 'sharedfolders-media.mount') in systemctl.calls
        assert ('enable', 'sharedfolders-backups.mount') in systemctl.calls
        assert systemctl.calls.index(('daemon-reload', None)) < systemctl.calls.index(('enable', 'sharedfolders-media.mount'))

    def test_regenerate_is_idempotent(self, unit_dir):
        generator = MountUnitGenerator(str(unit_dir), systemctl=RecordingSystemctl())
        generator.regenerate(CONFIG)
        second = generator.regenerate(CONFIG)
        assert len(second.removed) == 2
        assert generator.existing_units() == ['sharedfolders-backups.mount', 'sharedfolders-media.mount']

    def test_regenerate_without_enable(self, unit_dir):
        systemctl = RecordingSystemctl()
        generator = MountUnitGenerator(str(unit_dir), systemctl=systemctl)
        result = generator.regenerate(CONFIG, enable=False)
        assert len(result.written) == 2
        assert systemctl.calls == []

    def test_regenerate_records_enable_failures(self, unit_dir):
        systemctl = RecordingSystemctl(failing={'sharedfolders-media.mount'})
        generator = MountUnitGenerator(str(unit_dir), systemctl=systemctl)
        result = generator.regenerate(CONFIG)
        assert not result.ok
        assert result.failed == ['sharedfolders-media.mount']
        assert (unit_dir / 'sharedfolders-media.mount').exists()

    def test_regenerate_with_no_shared_folders_removes_everything(self, unit_dir):
        generator = MountUnitGenerator(str(unit_dir), systemctl=RecordingSystemctl())
        result = generator.regenerate({'global': {}})
        assert result.written == []
        assert generator.existing_units() == []


@pytest.mark.parametrize('name', ['.', '..', 'a/b', ''])
def test_load_shared_folders_skips_invalid_names(name):
    config = {'global': {
        'mounts': {'nas': {'mountPoint': '/mnt/nas'}},
        'sharedFolders': [
            {'name': name, 'mount': 'nas', 'reldirpath': 'x'},
            {'name': 'media', 'mount': 'nas', 'reldirpath': 'media'},
        ],
    }}
    folders = load_shared_folders(config)
    assert [folder.name for folder in folders] == ['media']
    assert all(folder.unit_name.startswith('sharedfolders-') for folder in folders)


def test_render_units_keeps_first_of_duplicate_names(caplog):
    config = {'global': {
        'mounts': {'nas': {'mountPoint': '/mnt/nas'}, 'usb': {'mountPoint': '/mnt/usb'}},
        'sharedFolders': [
            {'name': 'media', 'mount': 'nas', 'reldirpath': 'media'},
            {'name': 'media', 'mount': 'usb', 'reldirpath': 'media'},
        ],
    }}
    generator = MountUnitGenerator('/nonexistent', systemctl=RecordingSystemctl())
    with caplog.at_level('WARNING', logger='homeserver'):
        units = generator.render_units(config)
    assert list(units) == ['sharedfolders-media.mount']
    assert 'What=/mnt/nas/media' in units['sharedfolders-media.mount']
    assert 'duplicate shared folder' in caplog.text


def test_failed_render_leaves_existing_units(tmp_path):
    unit_dir = tmp_path / 'system'
    unit_dir.mkdir()
    (unit_dir / 'sharedfolders-media.mount').write_text('[Mount]\n')
    systemctl = RecordingSystemctl()
    generator = MountUnitGenerator(str(unit_dir), sharedfolders_dir='/sharedfolders/../srv',
                                   systemctl=systemctl)

    with pytest.raises(ValueError):
        generator.regenerate(CONFIG)

    assert (unit_dir / 'sharedfolders-media.mount').exists()
    assert systemctl.calls == []
