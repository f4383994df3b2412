from types import SimpleNamespace

import pytest


windows = pytest.importorskip('drivemap.storage.windows')


@pytest.mark.parametrize(
    ('serial', 'expected'),
    [
        ('vol0123456789abcdef0_00000001.', 'vol-0123456789abcdef0'),
        ('vol-0123abcd', 'vol-0123abcd'),
        ('AWS1234567890', None),
        (None, None),
    ],
)
def test_get_ebs_volume_id(serial, expected):
    assert windows.get_ebs_volume_id(serial) == expected


def make_wmi_volume(**kwargs):
    attrs = {
        'DeviceID': '\\\\?\\Volume{1}\\',
        'DriveLetter': None,
        'Label': None,
        'BootVolume': False,
        'SystemVolume': False,
    }
    attrs.update(kwargs)
    return SimpleNamespace(**attrs)


def make_disk(**kwargs):
    attrs = {
        'Model': windows.EBS_MODEL,
        'SerialNumber': 'vol0abc12345_00000001.',
        'IsBoot': False,
        'IsSystem': False,
    }
    attrs.update(kwargs)
    return SimpleNamespace(**attrs)


def test_make_volume():
    backend = windows.WindowsBackend.__new__(windows.WindowsBackend)
    volume = backend._make_volume(
        make_wmi_volume(DriveLetter='E:', Label='DATA '), make_disk()
    )
    assert volume.id == 'vol-0abc12345'
    assert volume.letter == 'E:'
    assert volume.label == 'DATA'
    assert volume.is_candidate is True


def test_make_volume_not_candidate():
    backend = windows.WindowsBackend.__new__(windows.WindowsBackend)
    boot = backend._make_volume(
        make_wmi_volume(DriveLetter='C:'), make_disk(IsBoot=True)
    )
    assert boot.is_boot is True
    assert boot.is_candidate is False
    local = backend._make_volume(
        make_wmi_volume(), make_disk(Model='NVMe Instance Storage')
    )
    assert local.id == '\\\\?\\Volume{1}\\'
    assert local.is_candidate is False
    orphan = backend._make_volume(make_wmi_volume(), None)
    assert orphan.is_candidate is False


class FakeCimv2:
    def __init__(self, *volumes):
        self.volumes = volumes
        self.queries = []

    def Win32_Volume(self, **kwargs):  # noqa: N802
        self.queries.append(kwargs)
        return [
            vol
            for vol in self.volumes
            if all(getattr(vol, k) == v for k, v in kwargs.items())
        ]


def test_set_letter_queries_single_volume():
    vol = make_wmi_volume(DriveLetter='E:', Put_=lambda: None)
    backend = windows.WindowsBackend.__new__(windows.WindowsBackend)
    backend.cimv2 = FakeCimv2(make_wmi_volume(DeviceID='other'), vol)
    volume = backend._make_volume(vol, make_disk())
    backend.set_letter(volume, 'F:')
    assert vol.DriveLetter == 'F:'
    assert backend.cimv2.queries == [{'DeviceID': '\\\\?\\Volume{1}\\'}]


def test_set_label_missing_volume():
    backend = windows.WindowsBackend.__new__(windows.WindowsBackend)
    backend.cimv2 = FakeCimv2()
    volume = backend._make_volume(make_wmi_volume(), make_disk())
    with pytest.raises(windows.MutationError, match='not present'):
        backend.set_label(volume, 'DATA')
