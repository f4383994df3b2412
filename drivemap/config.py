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

"""Configuration loader."""

__all__ = ['Config', 'ConfigSchema']

import os
import tomllib
from collections import UserDict
from pathlib import Path
from typing import ClassVar

from pydantic import ValidationError, field_validator

from .common import EntityModel
from .exceptions import ConfigLoaderError
from .utils import dictutil
from .utils.letters import normalize_letter


class LogConfigSchema(EntityModel):
    """Logger config schema."""

    level: str | None = None
    file: str | None = None


class AWSConfigSchema(EntityModel):
    """AWS access config schema."""

    region: str | None = None
    profile: str | None = None


class TagsConfigSchema(EntityModel):
    """Tag names and static tags source."""

    letter: str
    label: str
    file: str | None = None


class RemapConfigSchema(EntityModel):
    """Remap pass settings."""

    reserved: list[str]

    @field_validator('reserved')
    @classmethod
    def _normalize_reserved(cls, value: list[str]) -> list[str]:
        return [normalize_letter(x) for x in value]


class ConfigSchema(EntityModel):
    """Configuration file schema."""

    log: LogConfigSchema
    aws: AWSConfigSchema
    tags: TagsConfigSchema
    remap: RemapConfigSchema


class Config(UserDict):
    """
    UserDict for storing configuration.

    Environment variables prefix is ``DRVMAP_``. Environment variables
    have higher priority than configuration file.

    :cvar Path DEFAULT_CONFIG_FILE:
        :file:`%PROGRAMDATA%\\drivemap\\drivemap.toml`
    :cvar dict DEFAULT_CONFIGURATION:
    """

    DEFAULT_CONFIG_FILE = Path(
        os.getenv('PROGRAMDATA', 'C:/ProgramData'), 'drivemap', 'drivemap.toml'
    )
    DEFAULT_CONFIGURATION: ClassVar[dict] = {
        'log': {
            'level': None,
            'file': None,
        },
        'aws': {
            'region': None,
            'profile': None,
        },
        'tags': {
            'letter': 'DriveLetter',
            'label': 'DriveLabel',
            'file': None,
        },
        'remap': {
            'reserved': ['A:', 'B:', 'C:'],
        },
    }
    ENVIRONMENT: ClassVar[dict] = {
        'DRVMAP_LOG': ('log', 'level'),
        'DRVMAP_AWS_REGION': ('aws', 'region'),
        'DRVMAP_AWS_PROFILE': ('aws', 'profile'),
        'DRVMAP_TAGS_FILE': ('tags', 'file'),
    }

    def __init__(self, file: Path | None = None):
        """
        Initialise Config.

        :param file: Path to configuration file. If `file` is None
            use default path from :attr:`Config.DEFAULT_CONFIG_FILE`.
        """
        self.file = Path(file) if file else self.DEFAULT_CONFIG_FILE
        try:
            if self.file.exists():
                with self.file.open('rb') as configfile:
                    loaded = tomllib.load(configfile)
            else:
                loaded = {}
        except tomllib.TOMLDecodeError as etoml:
            raise ConfigLoaderError(
                f'Bad TOML syntax: {self.file}: {etoml}'
            ) from etoml
        except (OSError, ValueError) as eread:
            raise ConfigLoaderError(
                f'Config read error: {self.file}: {eread}'
            ) from eread
        config = dictutil.override(self.DEFAULT_CONFIGURATION, loaded)
        for env, (section, key) in self.ENVIRONMENT.items():
            value = os.getenv(env)
            if value and isinstance(config.get(section), dict):
                config[section][key] = value
        try:
            schema = ConfigSchema(**config)
        except ValidationError as e:
            raise ConfigLoaderError(f'Invalid config: {self.file}: {e}') from e
        super().__init__(schema.model_dump())
