import pytest

from drivemap.exceptions import EnumerationError
from drivemap.resolver import TopologyResolver
from drivemap.storage import Volume


def test_resolve(make_backend):
    backend = make_backend(
        Volume(
            'boot',
            letter='C',
            label='Windows',
            is_candidate=True,
            is_boot=True,
        ),
        Volume('vol-a', letter='e', label='DATA', is_candidate=True),
        Volume('vol-b', label='', is_candidate=True),
        Volume('ephemeral', letter='F'),
        extra_letters={'Z:'},
    )
    topology = TopologyResolver(backend).resolve()
    assert [v.id for v in topology] == ['boot', 'vol-a', 'vol-b', 'ephemeral']
    assert [v.id for v in topology.candidates()] == ['vol-a', 'vol-b']
    assert topology.find_by_id('boot').is_candidate is False
    assert topology.find_by_letter('E').id == 'vol-a'
    assert topology.find_by_label('DATA').id == 'vol-a'
    assert topology.find_by_label('') is None
    assert topology.find_by_id('vol-b').label is None
    assert topology.used_letters() == {'C:', 'E:', 'F:', 'Z:'}


def test_enumeration_failure(make_backend):
    backend = make_backend(Volume('vol-a', letter='E'))
    backend.broken = True
    with pytest.raises(EnumerationError):
        TopologyResolver(backend).resolve()
