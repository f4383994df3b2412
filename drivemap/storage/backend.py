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

"""Storage management interface."""

from abc import ABC, abstractmethod

from .volume import Volume


class StorageBackend(ABC):
    """
    An abstract storage management class.

    Implementations read and change the live volume table of the
    operating system. Letters are passed in ``X:`` form.
    """

    @abstractmethod
    def list_volumes(self) -> list[Volume]:
        """
        Return all visible volumes.

        :raise: :class:`EnumerationError`
        """
        raise NotImplementedError

    def list_used_letters(self) -> set[str]:
        """Return letters taken by any object in the system."""
        return {v.letter for v in self.list_volumes() if v.letter}

    @abstractmethod
    def set_letter(self, volume: Volume, letter: str) -> None:
        """
        Assign `letter` to volume.

        :raise: :class:`MutationError`
        """
        raise NotImplementedError

    @abstractmethod
    def set_label(self, volume: Volume, label: str) -> None:
        """
        Change volume file system label.

        :raise: :class:`MutationError`
        """
        raise NotImplementedError
