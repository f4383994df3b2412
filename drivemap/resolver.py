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

"""Resolve current disk topology."""

import logging

from .exceptions import DrivemapError, EnumerationError
from .storage import StorageBackend, Topology
from .utils.letters import normalize_letter


log = logging.getLogger(__name__)


class TopologyResolver:
    """Read volumes from storage backend into :class:`Topology`."""

    def __init__(self, backend: StorageBackend):
        """
        Initialise TopologyResolver.

        :param backend: Storage management backend.
        """
        self.backend = backend

    def resolve(self) -> Topology:
        """
        Return topology snapshot.

        Boot volumes are never candidates even if the backend
        reports them as such.

        :raise: :class:`EnumerationError`
        """
        try:
            volumes = self.backend.list_volumes()
            used_letters = {
                normalize_letter(x) for x in self.backend.list_used_letters()
            }
        except EnumerationError:
            raise
        except DrivemapError as e:
            raise EnumerationError(e) from e
        for volume in volumes:
            if volume.is_boot:
                volume.is_candidate = False
            log.debug(
                'Volume id=%s letter=%s label=%s candidate=%s',
                volume.id,
                volume.letter,
                volume.label,
                volume.is_candidate,
            )
        topology = Topology(volumes)
        topology.extra_letters = used_letters - topology.used_letters()
        log.info(
            'Resolved %s volumes, %s candidates',
            len(topology),
            len(topology.candidates()),
        )
        return topology
