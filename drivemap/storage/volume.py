# This file is part of Drivemap
#
# Drivemap is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Drivemap is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Drivemap.  If not, see <http://www.gnu.org/licenses/>.

"""Volume records and in-memory topology."""

from collections.abc import Iterator
from dataclasses import dataclass

from drivemap.utils.letters import normalize_letter


@dataclass
class Volume:
    """
    Mounted logical volume.

    :ivar id: EBS volume ID for candidate volumes, OS volume path
        for others.
    :ivar device_id: OS volume path, e.g. ``\\\\?\\Volume{GUID}\\``.
    :ivar letter: Drive letter in ``X:`` form or None.
    :ivar label: File system label or None.
    :ivar is_candidate: True if volume is backed by EBS and can be
        remapped.
    :ivar is_boot: True for boot and system volumes.
    """

    id: str
    device_id: str | None = None
    letter: str | None = None
    label: str | None = None
    is_candidate: bool = False
    is_boot: bool = False

    def __post_init__(self):
        if self.letter:
            self.letter = normalize_letter(self.letter)
        else:
            self.letter = None
        self.label = self.label or None


class Topology:
    """
    Volumes observed at the beginning of a remap pass.

    Lookups are served from memory. Volume records are updated by
    the remapper after each successful mutation, so topology always
    reflects the last known state of the system within the pass.
    """

    def __init__(self, volumes: list[Volume]):
        """Initialise Topology."""
        self.volumes = list(volumes)
        self.extra_letters = set()

    def __iter__(self) -> Iterator[Volume]:
        """Iterate over volumes in enumeration order."""
        return iter(self.volumes)

    def __len__(self) -> int:
        """Return number of volumes."""
        return len(self.volumes)

    def candidates(self) -> list[Volume]:
        """Return volumes eligible for remapping."""
        return [v for v in self.volumes if v.is_candidate and not v.is_boot]

    def find_by_id(self, volume_id: str) -> Volume | None:
        """Return volume by its ID or None."""
        for volume in self.volumes:
            if volume.id == volume_id:
                return volume
        return None

    def find_by_label(self, label: str) -> Volume | None:
        """Return the first volume having `label` or None."""
        if not label:
            return None
        for volume in self.volumes:
            if volume.label == label:
                return volume
        return None

    def find_by_letter(self, letter: str) -> Volume | None:
        """Return volume mounted at `letter` or None."""
        if not letter:
            return None
        letter = normalize_letter(letter)
        for volume in self.volumes:
            if volume.letter == letter:
                return volume
        return None

    def used_letters(self) -> set[str]:
        """
        Return all letters in use.

        Includes letters taken by objects which are not volumes,
        e.g. mapped network drives, see :attr:`extra_letters`.
        """
        letters = {v.letter for v in self.volumes if v.letter}
        return letters | self.extra_letters
