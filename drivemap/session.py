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

"""Remap session manager."""

import logging
from contextlib import AbstractContextManager
from pathlib import Path
from types import TracebackType

from .config import Config
from .remapper import Remapper, RemapReport
from .resolver import TopologyResolver
from .storage import StorageBackend, Topology
from .tags import (
    Assignment,
    EC2TagLookup,
    StaticTagLookup,
    TagLookup,
    get_assignments,
)
from .utils.letters import get_scratch_letter


log = logging.getLogger(__name__)


def get_default_backend() -> StorageBackend:
    """Return WMI storage backend."""
    from .storage.windows import WindowsBackend

    return WindowsBackend()


class Session(AbstractContextManager):
    """Remap session context manager."""

    def __init__(
        self,
        config: Config | None = None,
        backend: StorageBackend | None = None,
        lookup: TagLookup | None = None,
    ):
        """
        Initialise session.

        :param config: Configuration. Loaded from default location
            if not set.
        :param backend: Storage backend, WMI backend by default.
        :param lookup: Tags source. Static tags file is used if it is
            set in config, EC2 API otherwise.
        """
        self.config = config if config is not None else Config()
        log.debug('Config=%s', self.config)
        self.backend = backend or get_default_backend()
        self._lookup = lookup

    def __enter__(self):
        """Return Session object."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_traceback: TracebackType | None,
    ):
        """Nothing to release."""

    @property
    def lookup(self) -> TagLookup:
        """Tags source, created on first use."""
        if self._lookup is None:
            tags_file = self.config['tags']['file']
            if tags_file:
                log.info('Reading tags from %s', tags_file)
                self._lookup = StaticTagLookup.from_file(Path(tags_file))
            else:
                self._lookup = EC2TagLookup(
                    region=self.config['aws']['region'],
                    profile=self.config['aws']['profile'],
                )
        return self._lookup

    @property
    def reserved_letters(self) -> list[str]:
        """Letters never used for remapping."""
        return self.config['remap']['reserved']

    def get_topology(self) -> Topology:
        """Return current volumes."""
        return TopologyResolver(self.backend).resolve()

    def get_assignments(self, topology: Topology) -> list[Assignment]:
        """
        Return desired labels and letters of candidate volumes.

        Assignments with a reserved letter are kept: such volumes are
        still relabeled, the remapper reports the letter as reserved.
        """
        return get_assignments(
            topology.candidates(),
            self.lookup,
            letter_tag=self.config['tags']['letter'],
            label_tag=self.config['tags']['label'],
        )

    def remap(self, *, dry_run: bool = False) -> RemapReport:
        """
        Run remap pass.

        :param dry_run: Log changes without applying them.
        :raise: :class:`EnumerationError`
        """
        log.info('Resolving volumes topology...')
        topology = self.get_topology()
        log.info('Looking up volume tags...')
        assignments = self.get_assignments(topology)
        if not assignments:
            log.info('No tagged volumes found')
            return RemapReport()
        scratch = get_scratch_letter(
            topology.used_letters(), self.reserved_letters
        )
        log.info('Scratch letter: %s', scratch)
        remapper = Remapper(
            self.backend,
            topology,
            scratch,
            reserved=self.reserved_letters,
            dry_run=dry_run,
        )
        report = remapper.run(assignments)
        log.info(
            'Remap finished: %s changes, %s errors',
            len(report.mutations),
            len(report.errors),
        )
        return report
