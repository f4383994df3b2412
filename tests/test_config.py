import pytest

from drivemap.config import Config
from drivemap.exceptions import ConfigLoaderError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env in Config.ENVIRONMENT:
        monkeypatch.delenv(env, raising=False)


def test_defaults(tmp_path):
    config = Config(tmp_path / 'missing.toml')
    assert config['tags'] == {
        'letter': 'DriveLetter',
        'label': 'DriveLabel',
        'file': None,
    }
    assert config['remap']['reserved'] == ['A:', 'B:', 'C:']
    assert config['aws']['region'] is None


def test_file_overrides_defaults(tmp_path):
    path = tmp_path / 'drivemap.toml'
    path.write_text(
        '[aws]\n'
        'region = "eu-west-1"\n'
        '[tags]\n'
        'label = "Name"\n'
        '[remap]\n'
        'reserved = ["a", "b", "c", "d"]\n',
        encoding='utf-8',
    )
    config = Config(path)
    assert config['aws']['region'] == 'eu-west-1'
    assert config['tags']['label'] == 'Name'
    assert config['tags']['letter'] == 'DriveLetter'
    assert config['remap']['reserved'] == ['A:', 'B:', 'C:', 'D:']


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / 'drivemap.toml'
    path.write_text('[aws]\nregion = "eu-west-1"\n', encoding='utf-8')
    monkeypatch.setenv('DRVMAP_AWS_REGION', 'us-east-2')
    monkeypatch.setenv('DRVMAP_TAGS_FILE', 'tags.yaml')
    config = Config(path)
    assert config['aws']['region'] == 'us-east-2'
    assert config['tags']['file'] == 'tags.yaml'


@pytest.mark.parametrize(
    'content',
    [
        '[aws\n',
        '[unknown]\nkey = 1\n',
        '[remap]\nreserved = ["AB"]\n',
    ],
)
def test_invalid_config(tmp_path, content):
    path = tmp_path / 'drivemap.toml'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(ConfigLoaderError):
        Config(path)
