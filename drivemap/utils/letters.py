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

"""Auxiliary functions for working with drive letters."""

import string
from collections.abc import Iterable

from drivemap.exceptions import InvalidLetterError


SEPARATOR = ':'

# Floppy drives and the system drive
RESERVED_LETTERS = ('A:', 'B:', 'C:')


def normalize_letter(value: str) -> str:
    """
    Return drive letter in ``X:`` form.

    .. code-block:: shell-session

       >>> normalize_letter('e')
       'E:'
       >>> normalize_letter(' F: ')
       'F:'

    :raise: :class:`InvalidLetterError`
    """
    letter = str(value).strip().upper().removesuffix(SEPARATOR)
    if len(letter) != 1 or letter not in string.ascii_uppercase:
        raise InvalidLetterError(value)
    return letter + SEPARATOR


def get_scratch_letter(
    used: Iterable[str],
    reserved: Iterable[str] = RESERVED_LETTERS,
    *,
    from_end: bool = False,
) -> str | None:
    """
    Return free drive letter or None if all letters are taken.

    .. code-block:: shell-session

       >>> get_scratch_letter(['C:', 'D:', 'E:'])
       'F:'
       >>> get_scratch_letter(['D:', 'F:'])
       'E:'
       >>> get_scratch_letter(['D:', 'E:'], from_end=True)
       'Z:'

    :param used: Letters currently assigned to any volume.
    :param reserved: Letters that are never handed out.
    :param from_end: If True select a letter starting from the
        end of the alphabet.
    """
    taken = {normalize_letter(x) for x in [*used, *reserved]}
    free = [
        x + SEPARATOR
        for x in string.ascii_uppercase
        if x + SEPARATOR not in taken
    ]
    if not free:
        return None
    return free[-1 if from_end else 0]
