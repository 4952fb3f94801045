"""Model package for the grid cleaning simulation."""

from .state import AgentSnapshot, SimulationState
from .grid import GridState
from .agent import Agent, AgentCategory, Direction, MissionKind
from .pathfinder import find_path, manhattan, search
from .missions import (
    CellAction,
    MissionStrategy,
    StraightLineMission,
    JumpingMission,
    FreeRandomMission,
    CompleteSweepMission,
    SmartPathfinderMission,
    create_mission,
)
from .scheduler import SimulationScheduler, Timeline
from .registry import AgentRegistry
from .engine import SimulationEngine

__all__ = [
    'AgentSnapshot',
    'SimulationState',
    'GridState',
    'Agent',
    'AgentCategory',
    'Direction',
    'MissionKind',
    'find_path',
    'manhattan',
    'search',
    'CellAction',
    'MissionStrategy',
    'StraightLineMission',
    'JumpingMission',
    'FreeRandomMission',
    'CompleteSweepMission',
    'SmartPathfinderMission',
    'create_mission',
    'SimulationScheduler',
    'Timeline',
    'AgentRegistry',
    'SimulationEngine',
]
