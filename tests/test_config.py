"""Tests for grid_cleaning_sim.config."""

from pathlib import Path

import pytest
import yaml

from grid_cleaning_sim.config import SimulationConfig, load_config

DEMO_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "demo.yaml"


def write_config(tmp_path: Path, raw: dict) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(yaml.safe_dump(raw))
    return path


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("")
    config = load_config(path)
    assert config.grid.size == 10
    assert config.timing.tick == 100
    assert config.timing.mission_step_interval == 500
    assert config.missions.jump_budget == 10
    assert config.agents == []
    assert config.max_ticks == SimulationConfig().max_ticks


def test_full_scenario(tmp_path: Path) -> None:
    path = write_config(tmp_path, {
        'grid': {'size': 8},
        'timing': {'tick': 50, 'move_step_interval': 250},
        'missions': {'jump_size': 3, 'sweep_wall_hit_limit': 4},
        'layout': {
            'walls': [{'type': 'rectangle', 'row': 2, 'col': 2, 'width': 3},
                      {'type': 'points', 'coords': [[5, 5], [6, 6]]}],
            'random_walls': {'count': 2},
            'dirty': [[1, 1]],
        },
        'agents': [{'category': 'cleaner', 'kind': 'smart_pathfinder',
                    'row': 3, 'col': 4, 'max_steps': 20}],
        'simulation': {'max_ticks': 50, 'seed': 3, 'start': ['cleaners']},
        'export': {'csv': False, 'gif': True},
    })
    config = load_config(path)
    assert config.grid.size == 8
    assert config.timing.tick == 50
    assert config.timing.move_step_interval == 250
    assert config.timing.agent_clean_interval == 200
    assert config.missions.jump_size == 3
    assert config.missions.sweep_wall_hit_limit == 4
    assert config.missions.jump_budget == 10
    assert config.layout.walls[0].data == {'row': 2, 'col': 2, 'height': 1, 'width': 3}
    assert config.layout.walls[1].data['coords'] == [(5, 5), (6, 6)]
    assert config.layout.random_walls.count == 2
    assert config.layout.random_walls.max_length == 4
    assert config.layout.dirty == [[1, 1]]
    spec = config.agents[0]
    assert (spec.category, spec.kind) == ('cleaner', 'smart_pathfinder')
    assert spec.params == {'row': 3, 'col': 4, 'max_steps': 20}
    assert config.start == ['cleaners']
    assert config.max_ticks == 50
    assert config.seed == 3
    assert not config.csv_enabled
    assert config.snapshot_enabled
    assert config.gif_enabled


def test_demo_config_loads() -> None:
    config = load_config(DEMO_CONFIG)
    assert config.seed == 7
    assert len(config.agents) == 5


@pytest.mark.parametrize("raw", [
    {'grid': {'size': 0}},
    {'layout': {'walls': [{'type': 'circle'}]}},
    {'layout': {'random_walls': {'min_length': 3, 'max_length': 2}}},
    {'agents': [{'category': 'vacuum'}]},
    {'simulation': {'start': ['everything']}},
])
def test_invalid_values(tmp_path: Path, raw: dict) -> None:
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path, raw))


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")
