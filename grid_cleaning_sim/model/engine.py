"""Simulation engine: the command/query boundary consumed by a GUI or the CLI."""

import logging
import numpy as np
from typing import Any, Callable, Dict, List, Optional, Union

from .grid import GridState
from .agent import Agent, AgentCategory, Direction, MissionKind
from .registry import AgentRegistry, mission_timeline_name
from .scheduler import SimulationScheduler
from .state import AgentSnapshot, SimulationState
from ..config import SimulationConfig

logger = logging.getLogger(__name__)

AGENTS_TIMELINE = "agents"
MOVEMENT_TIMELINE = "movement"
MISSION_TIMELINES = {
    AgentCategory.POLLUTER: "polluters",
    AgentCategory.CLEANER: "cleaners",
}

# Extra integer parameters accepted per mission kind
KIND_PARAMS = {
    MissionKind.STRAIGHT_LINE: (),
    MissionKind.JUMPING: ('jump_size',),
    MissionKind.FREE_RANDOM: ('max_actions',),
    MissionKind.COMPLETE_SWEEP: (),
    MissionKind.SMART_PATHFINDER: ('max_steps',),
}

Number = Union[int, str, None]


def parse_int(value: Number) -> Optional[int]:
    """
    Read an integer form field.

    Missing values (None or blank text) give None; anything else that is
    not an integer raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, (int, np.integer)):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    return int(text)


def parse_kind(kind: Union[MissionKind, str]) -> MissionKind:
    """Accept a MissionKind, its value or a label like "Straight Line"."""
    if isinstance(kind, MissionKind):
        return kind
    key = str(kind).strip().lower().replace(' ', '_').replace('-', '_')
    aliases = {'free_movement': 'free_random', 'free': 'free_random',
               'complete_grid': 'complete_sweep', 'complete': 'complete_sweep',
               'smart_cleaner': 'smart_pathfinder', 'smart': 'smart_pathfinder',
               'straight': 'straight_line', 'jump': 'jumping'}
    return MissionKind(aliases.get(key, key))


def parse_category(category: Union[AgentCategory, str]) -> AgentCategory:
    if isinstance(category, AgentCategory):
        return category
    key = str(category).strip().lower()
    return AgentCategory(key[:-1] if key.endswith('s') else key)


class SimulationEngine:
    """
    Owns the grid, the agent registry and the scheduler.

    All coordinates at this boundary are 1-based; internally they are
    0-based. Commands never raise for bad input: they return False or None
    and log why.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.size = self.config.grid.size

        self.grid = GridState(self.size)
        self._listener: Optional[Callable[[int], None]] = None
        self.peak_dirty = 0
        self._setup_layout()
        self.grid.set_listener(self._on_grid_changed)

        timing = self.config.timing
        self.scheduler = SimulationScheduler(timing.tick)
        self.registry = AgentRegistry(self.grid, self.config.missions,
                                      self.scheduler, seed=self.config.seed)

        self.scheduler.register(AGENTS_TIMELINE, timing.agent_clean_interval,
                                self._clean_under_plain_agents)
        self.scheduler.register(MOVEMENT_TIMELINE, timing.move_step_interval,
                                self._advance_moving_agents)
        for category, name in MISSION_TIMELINES.items():
            self.scheduler.register(
                name, timing.mission_step_interval,
                lambda index, category=category: self._step_category(category, index))

    def _setup_layout(self) -> None:
        """Configure walls and initial dirt from config."""
        layout = self.config.layout
        for wall_spec in layout.walls:
            if wall_spec.wall_type == "rectangle":
                self.grid.add_wall_rectangle(
                    wall_spec.data['row'] - 1, wall_spec.data['col'] - 1,
                    wall_spec.data['height'], wall_spec.data['width']
                )
            elif wall_spec.wall_type == "points":
                self.grid.add_wall_points(
                    [(r - 1, c - 1) for r, c in wall_spec.data['coords']])
        if layout.random_walls is not None:
            spec = layout.random_walls
            self.grid.generate_random_walls(self.rng, spec.count,
                                            spec.min_length, spec.max_length)
        for row, col in layout.dirty:
            self.grid.dirty(row - 1, col - 1)
        self.peak_dirty = self.grid.dirty_count

    def _on_grid_changed(self, dirty_count: int) -> None:
        self.peak_dirty = max(self.peak_dirty, dirty_count)
        if self._listener is not None:
            self._listener(dirty_count)

    def set_listener(self, listener: Optional[Callable[[int], None]]) -> None:
        """Subscribe to dirty-count changes."""
        self._listener = listener

    # ------------------------------------------------------------------
    # Timeline callbacks

    def _clean_under_plain_agents(self, step_index: int) -> bool:
        for agent in self.registry.list(AgentCategory.PLAIN):
            if not agent.moving:
                self.grid.clean(agent.row, agent.col)
        return False

    def _advance_moving_agents(self, step_index: int) -> bool:
        still_moving = False
        for agent in self.registry.list():
            if agent.moving and agent.advance_move():
                still_moving = True
        return not still_moving

    def _step_category(self, category: AgentCategory, step_index: int) -> bool:
        all_complete = True
        for agent in self.registry.list(category):
            if agent.mission.complete:
                continue
            agent.mission.step(step_index)
            if not agent.mission.complete:
                all_complete = False
        if all_complete:
            logger.info("All %s missions complete", category.value)
        return all_complete

    # ------------------------------------------------------------------
    # Agent commands

    def _random_coordinate(self) -> int:
        return int(self.rng.integers(1, self.size + 1))

    def create_agent(self, row: Number, col: Number) -> Optional[Agent]:
        """Create a plain agent that cleans the cell it rests on."""
        try:
            r, c = parse_int(row), parse_int(col)
        except ValueError:
            logger.warning("Invalid agent position: %r, %r", row, col)
            return None
        if r is None or c is None:
            logger.warning("Agent position required")
            return None
        return self.registry.create(AgentCategory.PLAIN, r - 1, c - 1)

    def create_polluter(self, kind: Union[MissionKind, str],
                        **params: Any) -> Optional[Agent]:
        return self._create_mission_agent(AgentCategory.POLLUTER, kind, params)

    def create_cleaner(self, kind: Union[MissionKind, str],
                       **params: Any) -> Optional[Agent]:
        return self._create_mission_agent(AgentCategory.CLEANER, kind, params)

    def _create_mission_agent(self, category: AgentCategory,
                              kind: Union[MissionKind, str],
                              params: Dict[str, Any]) -> Optional[Agent]:
        try:
            kind = parse_kind(kind)
        except ValueError:
            logger.warning("Unknown %s kind: %r", category.value, kind)
            return None

        try:
            values = {name: parse_int(value) for name, value in params.items()}
        except ValueError:
            logger.warning("Invalid %s parameters: %r", category.value, params)
            return None

        row, col = values.pop('row', None), values.pop('col', None)
        if kind == MissionKind.STRAIGHT_LINE:
            row = 1 if row is None else row
        elif kind == MissionKind.COMPLETE_SWEEP:
            row = 1 if row is None else row
            col = 1 if col is None else col
        row = self._random_coordinate() if row is None else row
        col = self._random_coordinate() if col is None else col

        extra = {}
        for name, value in values.items():
            if name not in KIND_PARAMS[kind]:
                logger.warning("Ignoring parameter %s for %s", name, kind.value)
            elif value is not None:
                extra[name] = value

        return self.registry.create(category, row - 1, col - 1, kind, **extra)

    def get_agent(self, agent_id: int) -> Optional[Agent]:
        return self.registry.get(agent_id)

    def remove_agent(self, agent_id: int) -> bool:
        agent = self.registry.get(agent_id)
        if agent is None:
            return False
        return self.registry.remove(agent)

    def clear_all(self) -> None:
        self.registry.clear_all()

    def move_agent_cardinal(self, agent_id: int,
                            direction: Union[Direction, str]) -> bool:
        agent = self.registry.get(agent_id)
        if agent is None:
            return False
        if not isinstance(direction, Direction):
            try:
                direction = Direction[str(direction).strip().upper()]
            except KeyError:
                logger.warning("Unknown direction: %r", direction)
                return False
        return agent.move(direction)

    def move_agent_to(self, agent_id: int, row: Number, col: Number) -> bool:
        """Start an animated move; steps are taken on the movement timeline."""
        agent = self.registry.get(agent_id)
        if agent is None:
            return False
        try:
            r, c = parse_int(row), parse_int(col)
        except ValueError:
            logger.warning("Invalid target: %r, %r", row, col)
            return False
        if r is None or c is None:
            return False
        if not agent.move_to_position(r - 1, c - 1):
            return False
        if agent.moving:
            self.scheduler.start(MOVEMENT_TIMELINE)
        return True

    # ------------------------------------------------------------------
    # Grid commands

    def reset_grid(self) -> None:
        self.grid.reset()

    def dirty_cell(self, row: Number, col: Number) -> bool:
        return self._cell_command(self.grid.dirty, row, col)

    def clean_cell(self, row: Number, col: Number) -> bool:
        return self._cell_command(self.grid.clean, row, col)

    def set_wall(self, row: Number, col: Number, is_wall: bool = True) -> bool:
        return self._cell_command(
            lambda r, c: self.grid.set_wall(r, c, is_wall), row, col)

    def _cell_command(self, command: Callable[[int, int], bool],
                      row: Number, col: Number) -> bool:
        try:
            r, c = parse_int(row), parse_int(col)
        except ValueError:
            logger.warning("Invalid cell input: %r, %r", row, col)
            return False
        if r is None or c is None:
            return False
        return command(r - 1, c - 1)

    # ------------------------------------------------------------------
    # Loops

    def start_simulation(self) -> bool:
        """Start the plain-agent cleaning loop."""
        return self.scheduler.start(AGENTS_TIMELINE)

    def stop_simulation(self) -> bool:
        return self.scheduler.stop(AGENTS_TIMELINE)

    def simulation_running(self) -> bool:
        return self.scheduler.is_running(AGENTS_TIMELINE)

    def _mission_timeline(self, category: Union[AgentCategory, str]) -> Optional[str]:
        try:
            return MISSION_TIMELINES.get(parse_category(category))
        except ValueError:
            return None

    def start_missions(self, category: Union[AgentCategory, str]) -> bool:
        name = self._mission_timeline(category)
        if name is None:
            logger.warning("No mission loop for %r", category)
            return False
        return self.scheduler.start(name)

    def stop_missions(self, category: Union[AgentCategory, str]) -> bool:
        name = self._mission_timeline(category)
        return name is not None and self.scheduler.stop(name)

    def missions_running(self, category: Union[AgentCategory, str]) -> bool:
        name = self._mission_timeline(category)
        return name is not None and self.scheduler.is_running(name)

    def start_single_mission(self, agent_id: int) -> bool:
        """
        Drive one agent's mission on its own timeline until it completes.

        The agent's category loop is stopped first.
        """
        agent = self.registry.get(agent_id)
        if agent is None or agent.mission is None:
            logger.warning("Agent %s has no mission", agent_id)
            return False
        self.scheduler.stop(MISSION_TIMELINES[agent.category])

        mission = agent.mission
        name = mission_timeline_name(agent.id)
        self.scheduler.register(name, self.config.timing.mission_step_interval,
                                mission.step, start=True)
        return True

    def reset_mission(self, agent_id: int) -> bool:
        agent = self.registry.get(agent_id)
        if agent is None or agent.mission is None:
            return False
        agent.mission.reset()
        return True

    # ------------------------------------------------------------------
    # Time

    def tick(self) -> int:
        return self.scheduler.tick()

    def advance(self, duration: int) -> int:
        return self.scheduler.advance(duration)

    def step(self) -> SimulationState:
        """Advance one tick and return the resulting state."""
        self.scheduler.tick()
        return self.snapshot()

    def is_idle(self) -> bool:
        return self.scheduler.is_idle()

    def is_finished(self) -> bool:
        """Check if a scenario run should terminate."""
        return (self.scheduler.ticks >= self.config.max_ticks or
                self.scheduler.is_idle())

    def run_until_idle(self, max_ticks: Optional[int] = None) -> int:
        """Tick until no timeline is running. Returns the ticks taken."""
        limit = self.config.max_ticks if max_ticks is None else max_ticks
        ticks = 0
        while ticks < limit and not self.scheduler.is_idle():
            self.scheduler.tick()
            ticks += 1
        return ticks

    # ------------------------------------------------------------------
    # Queries

    def dirty_count(self) -> int:
        return self.grid.dirty_count

    def is_dirty(self, row: Number, col: Number) -> bool:
        return self._cell_command(self.grid.is_dirty, row, col)

    def is_wall(self, row: Number, col: Number) -> bool:
        return self._cell_command(self.grid.is_wall, row, col)

    def _category_filter(self, category: Union[AgentCategory, str]) -> Optional[AgentCategory]:
        try:
            return parse_category(category)
        except ValueError:
            logger.warning("Unknown agent category: %r", category)
            return None

    def agent_count(self, category: Union[AgentCategory, str, None] = None) -> int:
        if category is None:
            return self.registry.count()
        parsed = self._category_filter(category)
        return 0 if parsed is None else self.registry.count(parsed)

    def agents(self, category: Union[AgentCategory, str, None] = None) -> List[Agent]:
        if category is None:
            return self.registry.list()
        parsed = self._category_filter(category)
        return [] if parsed is None else self.registry.list(parsed)

    def snapshot(self) -> SimulationState:
        """Create immutable snapshot of current simulation state."""
        agent_snapshots = [
            AgentSnapshot(
                agent_id=a.id,
                category=a.category.value,
                kind=a.kind.value if a.kind else None,
                row=a.row + 1,
                col=a.col + 1,
                moving=a.moving,
                state=_agent_state(a),
                color=a.color
            )
            for a in self.registry.list()
        ]

        missions = [a.mission for a in self.registry.list() if a.mission]
        total_cells = self.size * self.size
        metrics = {
            'dirty_count': self.grid.dirty_count,
            'peak_dirty': self.peak_dirty,
            'dirty_fraction': self.grid.dirty_count / total_cells,
            'wall_count': self.grid.wall_count(),
            'total_agents': self.registry.count(),
            'polluters': self.registry.count(AgentCategory.POLLUTER),
            'cleaners': self.registry.count(AgentCategory.CLEANER),
            'missions_complete': sum(1 for m in missions if m.complete and not m.failed),
            'missions_failed': sum(1 for m in missions if m.failed),
            'missions_active': sum(1 for m in missions if not m.complete),
        }

        return SimulationState(
            tick=self.scheduler.ticks,
            time=self.scheduler.now,
            agents=agent_snapshots,
            dirty=self.grid.dirty_cells_mask.copy(),
            walls=self.grid.walls.copy(),
            metrics=metrics
        )


def _agent_state(agent: Agent) -> str:
    if agent.mission is None:
        return "moving" if agent.moving else "idle"
    if agent.mission.failed:
        return "failed"
    if agent.mission.complete:
        return "complete"
    return "active"
