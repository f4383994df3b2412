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

"""Converge volume labels and drive letters to desired state."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from .exceptions import (
    DrivemapError,
    InvalidLetterError,
    MutationError,
    NoScratchLetterError,
    RemapError,
)
from .storage import StorageBackend, Topology, Volume
from .tags import Assignment, get_desired_mapping
from .utils.letters import (
    RESERVED_LETTERS,
    get_scratch_letter,
    normalize_letter,
)


log = logging.getLogger(__name__)


class Mutation(NamedTuple):
    """Single volume change."""

    volume_id: str
    attribute: str
    old: str | None
    new: str

    def __str__(self) -> str:
        """Return human readable change description."""
        return f'{self.volume_id}: {self.attribute} {self.old} -> {self.new}'


@dataclass
class RemapReport:
    """Changes made and failures met during remap pass."""

    mutations: list[Mutation] = field(default_factory=list)
    errors: list[DrivemapError] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        """True if there were no failures."""
        return not self.errors


class Remapper:
    """
    Drive letters remapper.

    Only one volume can hold a drive letter and the storage
    subsystem has no atomic swap, so a volume occupying the desired
    letter is parked at the scratch letter first::

        displaced -> scratch
        target    -> desired letter
        displaced -> letter vacated by target

    Every change is applied immediately. Failed changes are not
    rolled back, the pass continues with the next label.
    """

    def __init__(
        self,
        backend: StorageBackend,
        topology: Topology,
        scratch_letter: str | None,
        *,
        reserved: Iterable[str] = RESERVED_LETTERS,
        dry_run: bool = False,
    ):
        """
        Initialise Remapper.

        :param backend: Storage backend to apply changes with.
        :param topology: Volumes captured at the start of the pass.
        :param scratch_letter: Free letter for parking volumes, None
            if there is no free letter.
        :param reserved: Letters never used as scratch letter or
            as desired letter.
        :param dry_run: Do not call backend, change topology only.
        """
        self.backend = backend
        self.topology = topology
        self.scratch_letter = (
            normalize_letter(scratch_letter) if scratch_letter else None
        )
        self.reserved = tuple(normalize_letter(x) for x in reserved)
        self.dry_run = dry_run
        self.report = RemapReport()

    def _set_letter(self, volume: Volume, letter: str) -> None:
        if not self.dry_run:
            self.backend.set_letter(volume, letter)
        log.info('Move volume=%s %s -> %s', volume.id, volume.letter, letter)
        self.report.mutations.append(
            Mutation(volume.id, 'letter', volume.letter, letter)
        )
        volume.letter = letter

    def _set_label(self, volume: Volume, label: str) -> None:
        if not self.dry_run:
            self.backend.set_label(volume, label)
        log.info('Relabel volume=%s %r -> %r', volume.id, volume.label, label)
        self.report.mutations.append(
            Mutation(volume.id, 'label', volume.label, label)
        )
        volume.label = label

    def _locate(self, item: Assignment) -> Volume | None:
        """
        Find assigned volume by label or letter it had at lookup time.

        Labels are not unique, so the volume ID decides between
        several volumes sharing the same label.
        """
        if item.label:
            found = [v for v in self.topology if v.label == item.label]
        elif item.letter:
            found = [v for v in self.topology if v.letter == item.letter]
        else:
            found = []
        for volume in found:
            if volume.id == item.volume_id:
                return volume
        return self.topology.find_by_id(item.volume_id)

    def relabel(self, assignments: Iterable[Assignment]) -> RemapReport:
        """Set desired labels. Drive letters are not changed."""
        for item in assignments:
            volume = self._locate(item)
            if volume is None:
                log.warning('Volume %s is not present', item.volume_id)
                continue
            if volume.label == item.desired_label:
                continue
            try:
                self._set_label(volume, item.desired_label)
            except MutationError as e:
                log.error('Relabel failed: %s', e)  # noqa: TRY400
                self.report.errors.append(e)
        return self.report

    def _find_target(self, label: str, volume_id: str | None) -> Volume | None:
        """
        Find candidate volume labeled `label`.

        If `volume_id` is set, only the volume with that ID is
        accepted, so an untagged volume sharing the label is never
        moved instead of the tagged one.
        """
        for volume in self.topology.candidates():
            if volume.label != label:
                continue
            if volume_id is None or volume.id == volume_id:
                return volume
        return None

    def _converge(
        self, label: str, letter: str, volume_id: str | None = None
    ) -> None:
        target = self._find_target(label, volume_id)
        if target is None:
            log.debug('No candidate volume labeled %s, skip', label)
            return
        if target.letter == letter:
            log.debug('Volume %s is already at %s', label, letter)
            return
        if letter in self.reserved:
            raise RemapError(f'{letter} is reserved')
        if letter in self.topology.extra_letters:
            raise RemapError(f'{letter} is taken by a non-volume drive')
        displaced = self.topology.find_by_letter(letter)
        if displaced is not None and displaced.is_boot:
            raise RemapError(f'{letter} is taken by boot volume')
        if displaced is not None and self.scratch_letter is None:
            raise NoScratchLetterError(label, letter)
        vacated = target.letter
        if displaced is not None:
            self._set_letter(displaced, self.scratch_letter)
        self._set_letter(target, letter)
        if displaced is None:
            return
        if vacated is not None:
            self._set_letter(displaced, vacated)
        else:
            log.warning(
                'Volume %s had no letter, %s stays at %s',
                label,
                displaced.id,
                displaced.letter,
            )

    def remap(
        self,
        mapping: dict[str, str],
        owners: dict[str, str] | None = None,
    ) -> RemapReport:
        """
        Move labeled candidate volumes to desired letters.

        :param mapping: Desired label to letter mapping.
        :param owners: Label to volume ID mapping. Labels present here
            are matched to the tagged volume only.
        """
        owners = owners or {}
        for label, desired in mapping.items():
            try:
                self._converge(
                    label, normalize_letter(desired), owners.get(label)
                )
            except (RemapError, InvalidLetterError) as e:
                log.error('Cannot remap %s: %s', label, e)  # noqa: TRY400
                self.report.errors.append(e)
            if self.scratch_letter and self.topology.find_by_letter(
                self.scratch_letter
            ):
                self.scratch_letter = get_scratch_letter(
                    self.topology.used_letters(), self.reserved
                )
                log.info('New scratch letter: %s', self.scratch_letter)
        return self.report

    def run(self, assignments: Iterable[Assignment]) -> RemapReport:
        """Relabel volumes, then move them to desired letters."""
        assignments = list(assignments)
        self.relabel(assignments)
        # same last-wins rule as the desired mapping
        owners = {a.desired_label: a.volume_id for a in assignments}
        return self.remap(get_desired_mapping(assignments), owners)
