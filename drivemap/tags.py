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

"""Volume tags and desired drive letters."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any, NamedTuple

import boto3
import yaml
from botocore.exceptions import BotoCoreError, ClientError
from botocore.utils import InstanceMetadataRegionFetcher
from pydantic import RootModel, ValidationError

from .exceptions import InvalidLetterError, TagLookupError
from .storage import Volume
from .utils.letters import normalize_letter


log = logging.getLogger(__name__)

LETTER_TAG = 'DriveLetter'
LABEL_TAG = 'DriveLabel'

# NTFS volume label limit
MAX_LABEL_LENGTH = 32


class TagLookup(ABC):
    """An abstract volume tags source."""

    @abstractmethod
    def get_tags(self, volume_id: str) -> dict[str, str]:
        """
        Return all tags of volume.

        :raise: :class:`TagLookupError`
        """
        raise NotImplementedError

    def lookup_tag(self, volume_id: str, tag_name: str) -> str | None:
        """Return tag value or None if volume has no such tag."""
        return self.get_tags(volume_id).get(tag_name)


class EC2TagLookup(TagLookup):
    """Fetch EBS volume tags from EC2 API."""

    def __init__(
        self,
        region: str | None = None,
        profile: str | None = None,
        client: Any | None = None,
    ):
        """
        Initialise EC2TagLookup.

        :param region: AWS region. If not set, region is taken from
            boto3 session or instance metadata service.
        :param profile: AWS credentials profile name.
        :param client: Preconfigured EC2 client.
        """
        self._cache = {}
        if client is not None:
            self.client = client
            return
        try:
            session = boto3.session.Session(
                region_name=region, profile_name=profile
            )
            region = session.region_name or get_instance_region()
            log.info('Using AWS region %s', region)
            self.client = session.client('ec2', region_name=region)
        except BotoCoreError as e:
            raise TagLookupError(f'cannot create EC2 client: {e}') from e

    def get_tags(self, volume_id: str) -> dict[str, str]:
        """Return volume tags. Tags are requested once per volume."""
        if volume_id in self._cache:
            return self._cache[volume_id]
        log.debug('Fetching tags for volume=%s', volume_id)
        try:
            response = self.client.describe_tags(
                Filters=[
                    {'Name': 'resource-id', 'Values': [volume_id]},
                ]
            )
        except (BotoCoreError, ClientError) as e:
            raise TagLookupError(str(e), volume_id) from e
        tags = {tag['Key']: tag['Value'] for tag in response['Tags']}
        self._cache[volume_id] = tags
        return tags


class TagFileSchema(RootModel):
    """Static tags file schema: volume ID to tags mapping."""

    root: dict[str, dict[str, str | int]]


class StaticTagLookup(TagLookup):
    """
    Volume tags from YAML file.

    .. code-block:: yaml

       vol-0123456789abcdef0:
         DriveLetter: E
         DriveLabel: DATA
    """

    def __init__(self, tags: dict[str, dict[str, str]]):
        """Initialise StaticTagLookup."""
        self.tags = tags

    @classmethod
    def from_file(cls, path: Path) -> 'StaticTagLookup':
        """
        Load tags from YAML file.

        :raise: :class:`TagLookupError`
        """
        try:
            with Path(path).open(encoding='utf-8') as file:
                data = yaml.load(file, Loader=yaml.SafeLoader) or {}
            schema = TagFileSchema.model_validate(data)
        except (OSError, yaml.YAMLError) as e:
            raise TagLookupError(f'cannot read tags file {path}: {e}') from e
        except ValidationError as e:
            raise TagLookupError(f'invalid tags file {path}: {e}') from e
        return cls(
            {
                volume_id: {key: str(value) for key, value in tags.items()}
                for volume_id, tags in schema.root.items()
            }
        )

    def get_tags(self, volume_id: str) -> dict[str, str]:
        """Return volume tags from file."""
        return self.tags.get(volume_id, {})


class Assignment(NamedTuple):
    """
    Desired label and letter of a volume.

    Current label and letter are captured when tags were looked up
    and are used to locate the volume later in the pass.
    """

    volume_id: str
    label: str | None
    letter: str | None
    desired_label: str
    desired_letter: str


def get_instance_region() -> str | None:
    """Return region of the EC2 instance from instance metadata."""
    return InstanceMetadataRegionFetcher().retrieve_region()


def get_assignments(
    volumes: Iterable[Volume],
    lookup: TagLookup,
    letter_tag: str = LETTER_TAG,
    label_tag: str = LABEL_TAG,
) -> list[Assignment]:
    """
    Return assignments for tagged volumes.

    Volumes without both tags, with unusable tag values or with
    failed tags lookup are skipped.
    """
    assignments = []
    for volume in volumes:
        try:
            letter = lookup.lookup_tag(volume.id, letter_tag)
            label = lookup.lookup_tag(volume.id, label_tag)
        except TagLookupError as e:
            log.warning('Skip volume=%s: %s', volume.id, e)
            continue
        if not letter or not label:
            log.debug(
                'Volume %s has no %s/%s tags', volume.id, letter_tag, label_tag
            )
            continue
        try:
            letter = normalize_letter(letter)
        except InvalidLetterError as e:
            log.warning('Skip volume=%s: %s', volume.id, e)
            continue
        if len(label) > MAX_LABEL_LENGTH:
            log.warning(
                'Skip volume=%s: label %r exceeds %s characters',
                volume.id,
                label,
                MAX_LABEL_LENGTH,
            )
            continue
        assignments.append(
            Assignment(
                volume_id=volume.id,
                label=volume.label,
                letter=volume.letter,
                desired_label=label,
                desired_letter=letter,
            )
        )
    return assignments


def get_desired_mapping(assignments: Iterable[Assignment]) -> dict[str, str]:
    """Return label to letter mapping. Last assignment wins."""
    mapping = {}
    for item in assignments:
        previous = mapping.get(item.desired_label)
        if previous is not None and previous != item.desired_letter:
            log.warning(
                'Duplicate label %s: %s overrides %s',
                item.desired_label,
                item.desired_letter,
                previous,
            )
        mapping[item.desired_label] = item.desired_letter
    return mapping
