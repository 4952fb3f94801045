"""End-to-end tests for the command line entry point."""

import csv
from pathlib import Path

import yaml

from grid_cleaning_sim.main import main

SCENARIO = {
    'grid': {'size': 6},
    'layout': {'dirty': [[2, 2], [5, 5]]},
    'agents': [
        {'category': 'polluter', 'kind': 'jumping', 'row': 1, 'col': 1},
        {'category': 'cleaner', 'kind': 'complete_sweep'},
        {'category': 'plain', 'row': 3, 'col': 3},
        {'category': 'cleaner', 'kind': 'smart_pathfinder', 'row': 0, 'col': 1},
    ],
    'simulation': {'max_ticks': 40, 'seed': 5,
                   'start': ['simulation', 'polluters', 'cleaners']},
}


def write_scenario(tmp_path: Path) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(yaml.safe_dump(SCENARIO))
    return path


def test_run_writes_outputs(tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    code = main(['--config', str(write_scenario(tmp_path)),
                 '--out-dir', str(out_dir), '--gif', '--quiet'])
    assert code == 0
    assert (out_dir / 'final_state.png').exists()
    assert (out_dir / 'simulation.gif').exists()

    with open(out_dir / 'simulation_log.csv', newline='') as f:
        rows = list(csv.DictReader(f))
    # the smart cleaner at row 0 is rejected; three agents per tick
    assert len(rows) == 3 * 40
    assert {r['category'] for r in rows} == {'polluter', 'cleaner', 'plain'}

    with open(out_dir / 'metrics_log.csv', newline='') as f:
        metrics = list(csv.DictReader(f))
    assert len(metrics) == 40
    assert metrics[-1]['total_agents'] == '3'


def test_overrides_disable_exports(tmp_path: Path, capsys) -> None:
    out_dir = tmp_path / "out"
    code = main(['--config', str(write_scenario(tmp_path)),
                 '--out-dir', str(out_dir), '--ticks', '5',
                 '--no-csv', '--no-snapshot'])
    assert code == 0
    assert not (out_dir / 'simulation_log.csv').exists()
    assert not (out_dir / 'final_state.png').exists()
    output = capsys.readouterr().out
    assert "Created: 3 agents (1 rejected)" in output
    assert "Total Ticks:           5 (500 ms)" in output


def test_missing_config(tmp_path: Path, capsys) -> None:
    assert main(['--config', str(tmp_path / 'missing.yaml')]) == 1
    assert "not found" in capsys.readouterr().err


def test_invalid_config(tmp_path: Path, capsys) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump({'agents': [{'category': 'robot'}]}))
    assert main(['--config', str(path)]) == 1
    assert "Error loading config" in capsys.readouterr().err
