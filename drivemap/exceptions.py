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

"""Exceptions."""


class DrivemapError(Exception):
    """Basic exception class."""


class ConfigLoaderError(DrivemapError):
    """Something went wrong when loading configuration."""


class EnumerationError(DrivemapError):
    """Disk and volume topology cannot be enumerated."""


class TagLookupError(DrivemapError):
    """Something went wrong when fetching volume tags."""

    def __init__(self, msg: str, volume_id: str | None = None):
        """Initialise TagLookupError."""
        self.volume_id = volume_id
        if volume_id is not None:
            msg = f"cannot get tags for volume '{volume_id}': {msg}"
        super().__init__(msg)


class InvalidLetterError(ValueError, DrivemapError):
    """Drive letter is not valid."""

    def __init__(self, value: str):
        """Initialise InvalidLetterError."""
        super().__init__(f"invalid drive letter: '{value}'")


class RemapError(DrivemapError):
    """Something went wrong while converging drive letters."""


class NoScratchLetterError(RemapError):
    """Swap is required, but there is no free letter to park a volume."""

    def __init__(self, label: str, letter: str):
        """Initialise NoScratchLetterError."""
        self.label = label
        self.letter = letter
        super().__init__(
            f"cannot move '{label}' to {letter}: "
            'no free scratch letter to park the occupying volume'
        )


class MutationError(RemapError):
    """Storage subsystem rejected a letter or label change."""

    def __init__(self, volume_id: str, msg: str):
        """Initialise MutationError."""
        self.volume_id = volume_id
        super().__init__(f"cannot change volume '{volume_id}': {msg}")
