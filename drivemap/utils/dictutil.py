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

"""Dict tools."""

import copy


def override(defaults: dict, values: dict) -> dict:
    """
    Return deep copy of `defaults` updated with `values`.

    Nested dicts are updated key by key, any other value replaces
    the default one. Keys missing in `defaults` are appended.

    .. code-block:: shell-session

       >>> from drivemap.utils import dictutil
       >>> defaults = {
       ...     'tags': {'letter': 'DriveLetter', 'label': 'DriveLabel'},
       ...     'remap': {'reserved': ['A', 'B', 'C']},
       ... }
       >>> dictutil.override(defaults, {'tags': {'file': 'tags.yaml'}})
       {'tags': {'letter': 'DriveLetter', 'label': 'DriveLabel',
       'file': 'tags.yaml'}, 'remap': {'reserved': ['A', 'B', 'C']}}

    :param defaults: Dict with default values, is not modified.
    :param values: A dict whose values take precedence.
    """
    result = copy.deepcopy(defaults)
    for key, value in values.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = override(result[key], value)
        else:
            result[key] = value
    return result
