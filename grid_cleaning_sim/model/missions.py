"""Mission strategies executed one discrete step at a time by polluters and cleaners."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type

import numpy as np

from ..config import MissionConfig
from .agent import Agent, MissionKind
from .grid import GridState
from .pathfinder import nearest_cell, search

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class CellAction(Enum):
    """What a mission does to each cell it visits."""
    POLLUTE = "pollute"
    CLEAN = "clean"


def make_rng(row: int, col: int, seed: Optional[int] = None) -> np.random.Generator:
    """
    Private random source for one mission.

    Seeded from wall-clock nanoseconds mixed with the spawn cell, or from
    ``seed`` mixed with the spawn cell when a run must be reproducible.
    """
    base = time.time_ns() if seed is None else seed
    return np.random.default_rng([base, row, col])


class MissionStrategy(ABC):
    """
    Base class for the five mission variants.

    Subclasses keep all of their progress in a single state dataclass built
    by ``_fresh_state`` from the agent's current position; ``reset`` swaps
    in a new one. Once ``complete`` is set, ``step`` returns True without
    touching the grid.
    """

    kind: MissionKind

    def __init__(self, agent: Agent, grid: GridState, action: CellAction,
                 config: MissionConfig):
        self.agent = agent
        self.grid = grid
        self.action = action
        self.config = config
        self.complete = False
        self.failed = False
        self.state = self._fresh_state()

    def step(self, step_index: int = 0) -> bool:
        """Execute one mission step. Returns True once the mission is over."""
        if self.complete:
            return True
        self._step(step_index)
        return self.complete

    def reset(self) -> None:
        """Restart from the agent's current cell."""
        self.complete = False
        self.failed = False
        self.state = self._fresh_state()
        logger.debug("%s mission reset at (%d, %d)", self.name,
                     self.agent.row + 1, self.agent.col + 1)

    @property
    def name(self) -> str:
        return f"{self.action.value}/{self.kind.value}"

    def _act(self, row: int, col: int) -> bool:
        if self.action == CellAction.POLLUTE:
            return self.grid.dirty(row, col)
        return self.grid.clean(row, col)

    def _finish(self, failed: bool = False, reason: str = "") -> None:
        self.complete = True
        self.failed = failed
        if failed:
            logger.info("Agent %d %s mission aborted: %s", self.agent.id,
                        self.name, reason)
        else:
            logger.info("Agent %d %s mission complete", self.agent.id, self.name)

    @abstractmethod
    def _fresh_state(self):
        """Build the initial progress state from the agent's position."""

    @abstractmethod
    def _step(self, step_index: int) -> None:
        """Advance the mission by one step (only called while incomplete)."""

    @abstractmethod
    def progress(self) -> float:
        """Completion percentage in [0, 100]."""

    def describe(self) -> str:
        if self.failed:
            status = "FAILED"
        elif self.complete:
            status = "DONE"
        else:
            status = f"{self.progress():.1f}%"
        return (f"{type(self).__name__} [{self.action.value}, "
                f"at ({self.agent.row + 1}, {self.agent.col + 1}), {status}]")


@dataclass
class StraightLineState:
    column: int
    row: int
    cells_done: int = 0


class StraightLineMission(MissionStrategy):
    """Walk down a fixed column one row per step, acting on each cell."""

    kind = MissionKind.STRAIGHT_LINE

    def _fresh_state(self) -> StraightLineState:
        return StraightLineState(column=self.agent.col, row=self.agent.row)

    def _step(self, step_index: int) -> None:
        s = self.state
        if s.row >= self.grid.size:
            self._finish()
            return
        if self.grid.is_wall(s.row, s.column):
            self._finish(failed=True,
                         reason=f"wall at ({s.row + 1}, {s.column + 1})")
            return

        self.agent.set_grid_position_with_wall_check(s.row, s.column)
        self._act(s.row, s.column)
        s.cells_done += 1
        s.row += 1

        if s.row >= self.grid.size:
            self._finish()

    def progress(self) -> float:
        return self.state.cells_done / self.grid.size * 100.0


@dataclass
class JumpingState:
    row: int
    col: int
    jumps: int = 0
    consecutive_wall_hits: int = 0


class JumpingMission(MissionStrategy):
    """
    Jump diagonally by ``jump_size`` rows and columns per step, wrapping at
    the grid edges, for a bounded number of jumps.

    A wall target is skipped but still spends a jump.
    """

    kind = MissionKind.JUMPING

    def __init__(self, agent: Agent, grid: GridState, action: CellAction,
                 config: MissionConfig, jump_size: Optional[int] = None):
        self.jump_size = max(1, jump_size if jump_size is not None
                             else config.jump_size)
        self.jump_budget = max(1, config.jump_budget)
        super().__init__(agent, grid, action, config)

    def _fresh_state(self) -> JumpingState:
        return JumpingState(row=self.agent.row, col=self.agent.col)

    def _step(self, step_index: int) -> None:
        s = self.state
        if self.grid.is_wall(s.row, s.col):
            s.consecutive_wall_hits += 1
            logger.debug("Agent %d: wall at jump target (%d, %d), skipping",
                         self.agent.id, s.row + 1, s.col + 1)
        else:
            self.agent.set_grid_position(s.row, s.col)
            self._act(s.row, s.col)
            s.consecutive_wall_hits = 0
        s.jumps += 1

        size = self.grid.size
        s.row = (s.row + self.jump_size) % size
        s.col = (s.col + self.jump_size) % size

        if s.consecutive_wall_hits >= self.config.max_consecutive_wall_hits:
            self._finish(failed=True, reason="too many wall hits")
        elif s.jumps >= self.jump_budget:
            self._finish()

    def progress(self) -> float:
        return self.state.jumps / self.jump_budget * 100.0


@dataclass
class FreeRandomState:
    actions: int = 0


class FreeRandomMission(MissionStrategy):
    """Act on the current cell, then wander to a random walkable neighbor."""

    kind = MissionKind.FREE_RANDOM

    def __init__(self, agent: Agent, grid: GridState, action: CellAction,
                 config: MissionConfig, max_actions: Optional[int] = None,
                 seed: Optional[int] = None):
        if max_actions is None:
            max_actions = (config.free_polluter_budget
                           if action == CellAction.POLLUTE
                           else config.free_cleaner_budget)
        self.max_actions = max(1, max_actions)
        self.seed = seed
        self.rng = make_rng(agent.row, agent.col, seed)
        super().__init__(agent, grid, action, config)

    def _fresh_state(self) -> FreeRandomState:
        return FreeRandomState()

    def reset(self) -> None:
        self.rng = make_rng(self.agent.row, self.agent.col, self.seed)
        super().reset()

    def _step(self, step_index: int) -> None:
        s = self.state
        row, col = self.agent.position
        if self.grid.is_wall(row, col):
            self._finish(failed=True, reason=f"standing on wall at ({row + 1}, {col + 1})")
            return

        self._act(row, col)
        s.actions += 1
        if s.actions >= self.max_actions:
            self._finish()
            return

        moves = self.grid.walkable_neighbors(row, col)
        if not moves:
            self._finish(failed=True, reason="surrounded by walls")
            return
        next_row, next_col = moves[int(self.rng.integers(len(moves)))]
        self.agent.set_grid_position_with_wall_check(next_row, next_col)

    def progress(self) -> float:
        return self.state.actions / self.max_actions * 100.0


def sweep_order(size: int) -> List[Cell]:
    """Boustrophedon order: 1-based odd rows left to right, even rows right to left."""
    order = []
    for row in range(size):
        cols = range(size) if row % 2 == 0 else range(size - 1, -1, -1)
        order.extend((row, col) for col in cols)
    return order


@dataclass
class CompleteSweepState:
    order: List[Cell]
    index: int = 0
    visited: int = 0
    consecutive_wall_hits: int = 0


class CompleteSweepMission(MissionStrategy):
    """
    Visit every cell of the grid exactly once in zigzag order.

    The order is the boustrophedon sequence rotated to begin at the agent's
    current cell, so a sweep from (1, 1) is the plain row-by-row zigzag.
    """

    kind = MissionKind.COMPLETE_SWEEP

    def _fresh_state(self) -> CompleteSweepState:
        order = sweep_order(self.grid.size)
        start = order.index(self.agent.position) if self.grid.in_bounds(
            *self.agent.position) else 0
        return CompleteSweepState(order=order[start:] + order[:start])

    def _step(self, step_index: int) -> None:
        s = self.state
        row, col = s.order[s.index]
        s.index += 1

        if self.grid.is_wall(row, col):
            s.consecutive_wall_hits += 1
            if s.consecutive_wall_hits > self.config.sweep_wall_hit_limit:
                self._finish(failed=True, reason="too many wall hits")
                return
        else:
            self.agent.set_grid_position(row, col)
            self._act(row, col)
            s.visited += 1
            s.consecutive_wall_hits = 0

        if s.index >= len(s.order):
            self._finish()

    def progress(self) -> float:
        return self.state.index / len(self.state.order) * 100.0

    def cells_remaining(self) -> int:
        return len(self.state.order) - self.state.index


@dataclass
class SmartPathfinderState:
    path: List[Cell] = field(default_factory=list)
    path_index: int = 0
    target: Optional[Cell] = None
    steps_taken: int = 0


class SmartPathfinderMission(MissionStrategy):
    """
    Head for the nearest dirty cell along an A* route, cleaning every cell
    entered, until no dirt is left or the step budget runs out.
    """

    kind = MissionKind.SMART_PATHFINDER

    def __init__(self, agent: Agent, grid: GridState, action: CellAction,
                 config: MissionConfig, max_steps: Optional[int] = None):
        if max_steps is None:
            max_steps = config.smart_step_budget or grid.size * grid.size
        self.max_steps = max(1, max_steps)
        super().__init__(agent, grid, action, config)

    def _fresh_state(self) -> SmartPathfinderState:
        return SmartPathfinderState()

    def _step(self, step_index: int) -> None:
        s = self.state
        dirty = self.grid.dirty_cells()
        if not dirty:
            self._finish()
            return
        if s.steps_taken >= self.max_steps:
            self._finish()
            return

        here = self.agent.position
        if (s.target is None or not self.grid.is_dirty(*s.target)
                or s.path_index >= len(s.path)):
            if self.grid.is_dirty(*here):
                self._act(*here)
                s.steps_taken += 1
                s.target, s.path, s.path_index = None, [], 0
                return
            s.target, s.path = self._route(here, dirty)
            s.path_index = 0
            if s.target is None:
                self._finish(failed=True, reason="no reachable dirty cell")
                return
            logger.debug("Agent %d routing to (%d, %d) in %d steps",
                         self.agent.id, s.target[0] + 1, s.target[1] + 1,
                         len(s.path))

        next_cell = s.path[s.path_index]
        if not self.agent.set_grid_position_with_wall_check(*next_cell):
            self._finish(failed=True,
                         reason=f"route blocked at ({next_cell[0] + 1}, {next_cell[1] + 1})")
            return
        s.path_index += 1
        s.steps_taken += 1
        self._act(*next_cell)

        if next_cell == s.target:
            s.target, s.path, s.path_index = None, [], 0

    def _route(self, here: Cell, dirty: List[Cell]) -> Tuple[Optional[Cell], List[Cell]]:
        """Nearest dirty cell with a wall-free route to it, and that route."""
        candidates = list(dirty)
        while candidates:
            target = nearest_cell(here, candidates)
            path = search(self.grid, here, target)
            if path is not None:
                return target, path
            logger.debug("Agent %d: no route to (%d, %d), skipping",
                         self.agent.id, target[0] + 1, target[1] + 1)
            candidates.remove(target)
        return None, []

    def progress(self) -> float:
        return self.state.steps_taken / self.max_steps * 100.0


MISSION_TYPES: Dict[MissionKind, Type[MissionStrategy]] = {
    MissionKind.STRAIGHT_LINE: StraightLineMission,
    MissionKind.JUMPING: JumpingMission,
    MissionKind.FREE_RANDOM: FreeRandomMission,
    MissionKind.COMPLETE_SWEEP: CompleteSweepMission,
    MissionKind.SMART_PATHFINDER: SmartPathfinderMission,
}

POLLUTER_KINDS = (MissionKind.STRAIGHT_LINE, MissionKind.JUMPING,
                  MissionKind.FREE_RANDOM)
CLEANER_KINDS = tuple(MissionKind)


def create_mission(kind: MissionKind, agent: Agent, grid: GridState,
                   action: CellAction, config: MissionConfig,
                   **params) -> MissionStrategy:
    """Instantiate the strategy for ``kind``; raises ValueError for invalid combinations."""
    allowed = POLLUTER_KINDS if action == CellAction.POLLUTE else CLEANER_KINDS
    if kind not in allowed:
        raise ValueError(f"No {action.value} mission of kind {kind.value}")
    return MISSION_TYPES[kind](agent, grid, action, config, **params)
