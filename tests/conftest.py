"""Shared fixtures for the grid cleaning simulation tests."""

import pytest

from grid_cleaning_sim.config import MissionConfig, SimulationConfig
from grid_cleaning_sim.model.engine import SimulationEngine
from grid_cleaning_sim.model.grid import GridState


@pytest.fixture
def grid() -> GridState:
    return GridState(10)


@pytest.fixture
def mission_config() -> MissionConfig:
    return MissionConfig()


@pytest.fixture
def engine() -> SimulationEngine:
    return SimulationEngine(SimulationConfig(seed=1))
