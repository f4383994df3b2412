import pytest

from drivemap.exceptions import EnumerationError, MutationError
from drivemap.storage import StorageBackend, Volume


class FakeBackend(StorageBackend):
    """In-memory volume table which refuses letter collisions."""

    def __init__(self, volumes, extra_letters=()):
        self.volumes = {v.id: Volume(**vars(v)) for v in volumes}
        self.extra_letters = set(extra_letters)
        self.calls = []
        self.fail_on = set()
        self.broken = False

    def list_volumes(self):
        if self.broken:
            raise EnumerationError('driver failure')
        return [Volume(**vars(v)) for v in self.volumes.values()]

    def list_used_letters(self):
        return super().list_used_letters() | self.extra_letters

    def set_letter(self, volume, letter):
        if (volume.id, letter) in self.fail_on:
            raise MutationError(volume.id, 'rejected')
        for other in self.volumes.values():
            assert other.id == volume.id or other.letter != letter, (
                f'{letter} is already taken by {other.id}'
            )
        self.calls.append(('letter', volume.id, letter))
        self.volumes[volume.id].letter = letter

    def set_label(self, volume, label):
        if (volume.id, label) in self.fail_on:
            raise MutationError(volume.id, 'rejected')
        self.calls.append(('label', volume.id, label))
        self.volumes[volume.id].label = label

    def state(self):
        return {v.id: (v.letter, v.label) for v in self.volumes.values()}


@pytest.fixture
def make_backend():
    def factory(*volumes, extra_letters=()):
        return FakeBackend(volumes, extra_letters)

    return factory
