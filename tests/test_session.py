import pytest

from drivemap.config import Config
from drivemap.exceptions import EnumerationError
from drivemap.session import Session
from drivemap.storage import Volume
from drivemap.tags import StaticTagLookup


@pytest.fixture
def config(tmp_path, monkeypatch):
    for env in Config.ENVIRONMENT:
        monkeypatch.delenv(env, raising=False)
    return Config(tmp_path / 'drivemap.toml')


@pytest.fixture
def backend(make_backend):
    return make_backend(
        Volume('boot', letter='C', label='Windows', is_boot=True),
        Volume('vol-a', letter='E', label='DATA', is_candidate=True),
        Volume('vol-b', letter='F', label='LOGS', is_candidate=True),
        Volume('vol-c', letter='G', label='', is_candidate=True),
        Volume('ephemeral', letter='H', label='Temporary Storage'),
    )


@pytest.fixture
def lookup():
    return StaticTagLookup(
        {
            'vol-a': {'DriveLetter': 'F', 'DriveLabel': 'DATA'},
            'vol-b': {'DriveLetter': 'E:', 'DriveLabel': 'LOGS'},
            'vol-c': {'DriveLetter': 'C', 'DriveLabel': 'SYSTEM'},
            'ephemeral': {'DriveLetter': 'T', 'DriveLabel': 'SCRATCH'},
        }
    )


def test_remap(config, backend, lookup):
    with Session(config, backend=backend, lookup=lookup) as session:
        report = session.remap()
    assert backend.calls == [
        ('label', 'vol-c', 'SYSTEM'),
        ('letter', 'vol-b', 'D:'),
        ('letter', 'vol-a', 'F:'),
        ('letter', 'vol-b', 'E:'),
    ]
    assert backend.state()['ephemeral'] == ('H:', 'Temporary Storage')
    assert len(report.errors) == 1
    assert 'C: is reserved' in str(report.errors[0])


def test_reserved_letter_still_relabels(config, backend, lookup):
    session = Session(config, backend=backend, lookup=lookup)
    assignments = session.get_assignments(session.get_topology())
    assert [a.volume_id for a in assignments] == ['vol-a', 'vol-b', 'vol-c']
    session.remap()
    assert backend.state()['vol-c'] == ('G:', 'SYSTEM')


def test_nothing_tagged(config, backend):
    session = Session(config, backend=backend, lookup=StaticTagLookup({}))
    report = session.remap()
    assert report.mutations == []
    assert report.converged


def test_enumeration_failure(config, backend, lookup):
    backend.broken = True
    session = Session(config, backend=backend, lookup=lookup)
    with pytest.raises(EnumerationError):
        session.remap()


def test_static_lookup_from_config(config, backend, tmp_path):
    path = tmp_path / 'tags.yaml'
    path.write_text('vol-c:\n  DriveLetter: K\n  DriveLabel: WEB\n')
    config['tags']['file'] = str(path)
    session = Session(config, backend=backend)
    assert isinstance(session.lookup, StaticTagLookup)
    report = session.remap()
    assert backend.calls == [
        ('label', 'vol-c', 'WEB'),
        ('letter', 'vol-c', 'K:'),
    ]
    assert report.converged
