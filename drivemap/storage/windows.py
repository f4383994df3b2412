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

"""Manage Windows volumes via WMI."""

import logging
import re
from typing import Any

import wmi

from drivemap.exceptions import EnumerationError, MutationError

from .backend import StorageBackend
from .volume import Volume


log = logging.getLogger(__name__)

EBS_MODEL = 'Amazon Elastic Block Store'
STORAGE_NAMESPACE = 'root/Microsoft/Windows/Storage'
DRIVE_TYPE_FIXED = 3
VOLUME_PATH_PREFIX = '\\\\?\\Volume{'


def get_ebs_volume_id(serial: str | None) -> str | None:
    r"""
    Return EBS volume ID from NVMe disk serial number.

    Nitro instances expose EBS volume ID as disk serial number
    without the dash, e.g. ``vol0123456789abcdef0_00000001.``.

    .. code-block:: shell-session

       >>> get_ebs_volume_id('vol0123456789abcdef0_00000001.')
       'vol-0123456789abcdef0'
       >>> get_ebs_volume_id('AWS-1234') is None
       True
    """
    if not serial:
        return None
    match = re.match(r'^vol-?([0-9a-f]{8,17})', serial.strip())
    if match is None:
        return None
    return f'vol-{match.group(1)}'


class WindowsBackend(StorageBackend):
    """Storage backend based on Windows Management Instrumentation."""

    def __init__(self):
        """Connect to WMI namespaces."""
        try:
            self.cimv2 = wmi.WMI()
            self.storage = wmi.WMI(namespace=STORAGE_NAMESPACE)
        except wmi.x_wmi as e:
            raise EnumerationError(f'cannot connect to WMI: {e}') from e

    def _get_volume_disks(self) -> dict[str, Any]:
        """Return mapping of volume paths to MSFT_Disk objects."""
        disks = {disk.Number: disk for disk in self.storage.MSFT_Disk()}
        owners = {}
        for partition in self.storage.MSFT_Partition():
            disk = disks.get(partition.DiskNumber)
            for path in partition.AccessPaths or ():
                if path.startswith(VOLUME_PATH_PREFIX):
                    owners[path] = disk
        return owners

    def _make_volume(self, vol: Any, disk: Any | None) -> Volume:
        is_boot = bool(vol.BootVolume or vol.SystemVolume)
        ebs_id = None
        if disk is not None:
            is_boot = is_boot or bool(disk.IsBoot or disk.IsSystem)
            if (disk.Model or '').strip() == EBS_MODEL:
                ebs_id = get_ebs_volume_id(disk.SerialNumber)
        return Volume(
            id=ebs_id or vol.DeviceID,
            device_id=vol.DeviceID,
            letter=vol.DriveLetter,
            label=(vol.Label or '').strip(),
            is_candidate=ebs_id is not None and not is_boot,
            is_boot=is_boot,
        )

    def list_volumes(self) -> list[Volume]:
        """Return fixed volumes in WMI enumeration order."""
        try:
            owners = self._get_volume_disks()
            volumes = [
                self._make_volume(vol, owners.get(vol.DeviceID))
                for vol in self.cimv2.Win32_Volume(DriveType=DRIVE_TYPE_FIXED)
            ]
        except wmi.x_wmi as e:
            raise EnumerationError(f'cannot enumerate volumes: {e}') from e
        log.debug('Found %s volumes', len(volumes))
        return volumes

    def list_used_letters(self) -> set[str]:
        """Return letters of all logical disks including network ones."""
        try:
            return {
                disk.DeviceID.upper()
                for disk in self.cimv2.Win32_LogicalDisk()
                if disk.DeviceID
            }
        except wmi.x_wmi as e:
            raise EnumerationError(f'cannot list logical disks: {e}') from e

    def _get_wmi_volume(self, volume: Volume) -> Any:
        # wmi quotes keyword values with repr(), backslashes get escaped
        found = self.cimv2.Win32_Volume(DeviceID=volume.device_id)
        if not found:
            raise MutationError(volume.id, 'volume is not present anymore')
        return found[0]

    def set_letter(self, volume: Volume, letter: str) -> None:
        """Assign drive letter to Win32_Volume."""
        log.info('Set letter %s for volume=%s', letter, volume.id)
        try:
            vol = self._get_wmi_volume(volume)
            vol.DriveLetter = letter
            vol.Put_()
        except wmi.x_wmi as e:
            raise MutationError(volume.id, str(e)) from e

    def set_label(self, volume: Volume, label: str) -> None:
        """Change Win32_Volume label."""
        log.info('Set label %s for volume=%s', label, volume.id)
        try:
            vol = self._get_wmi_volume(volume)
            vol.Label = label
            vol.Put_()
        except wmi.x_wmi as e:
            raise MutationError(volume.id, str(e)) from e
