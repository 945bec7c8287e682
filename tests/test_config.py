import textwrap

import pytest

from isomesh.config import TerrainConfig, config_from_dict, load_config
from isomesh.errors import InvalidConfiguration
from isomesh.field import NoiseConfig
from isomesh.grid import Grid


def test_defaults():
    config = TerrainConfig()
    assert (config.width, config.height, config.depth) == (60.0, 60.0, 60.0)
    assert config.sample_size == 10.0
    assert config.iso_level == 0.0
    assert config.seed == 0
    assert config.noise == NoiseConfig()
    assert config.grid() == Grid(3, 3, 3, 10.0)


def test_config_from_dict():
    config = config_from_dict({
        'width': 40,
        'sample_size': 5,
        'iso_level': 1.5,
        'noise': {'num_octaves': 2, 'noise_weight': 3.0},
    })
    assert config.width == 40
    assert config.iso_level == 1.5
    assert config.noise.num_octaves == 2
    assert config.noise.noise_weight == 3.0
    assert config.noise.lacunarity == 2.0
    assert config.grid().x_max == 4


@pytest.mark.parametrize('data', [
    {'colour': 'red'},
    {'noise': {'octaves': 3}},
    {'noise': [1, 2]},
    {'sample_size': 0},
    {'width': -5},
    {'noise': {'num_octaves': 0}},
    ['width', 60],
    {'width': '60'},
    {'height': float('inf')},
    {'depth': float('nan')},
    {'sample_size': True},
    {'iso_level': None},
    {'iso_level': float('-inf')},
    {'seed': 1.5},
    {'noise': {'lacunarity': 'fast'}},
    {'noise': {'persistence': float('nan')}},
    {'noise': {'noise_weight': None}},
])
def test_invalid_config(data):
    with pytest.raises(InvalidConfiguration):
        config_from_dict(data)


def test_load_config_rejects_infinite_width(tmp_path):
    path = tmp_path / 'terrain.yaml'
    path.write_text('width: .inf\n', encoding='utf-8')
    with pytest.raises(InvalidConfiguration):
        load_config(path)


def test_noise_section_is_copied():
    noise = NoiseConfig(num_octaves=2)
    config = config_from_dict({'noise': noise})
    noise.num_octaves = 5
    assert config.noise.num_octaves == 2


def test_load_config(tmp_path):
    path = tmp_path / 'terrain.yaml'
    path.write_text(textwrap.dedent("""
        width: 80
        height: 40
        depth: 80
        sample_size: 4
        seed: 7
        noise:
          num_octaves: 3
          floor_offset: 2.5
    """), encoding='utf-8')

    config = load_config(path)
    assert config.seed == 7
    assert config.noise.num_octaves == 3
    assert config.noise.floor_offset == 2.5
    assert config.grid() == Grid(10, 5, 10, 4)


def test_load_empty_config(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('', encoding='utf-8')
    assert load_config(path) == TerrainConfig()


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text('- 1\n- 2\n', encoding='utf-8')
    with pytest.raises(InvalidConfiguration):
        load_config(str(path))


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / 'nope.yaml')
