"""Authoritative list of agents and their missions."""

import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from ..config import MissionConfig
from .agent import Agent, AgentCategory, MissionKind
from .grid import GridState
from .missions import CellAction, create_mission

if TYPE_CHECKING:
    from .scheduler import SimulationScheduler

logger = logging.getLogger(__name__)

CATEGORY_ACTIONS = {
    AgentCategory.POLLUTER: CellAction.POLLUTE,
    AgentCategory.CLEANER: CellAction.CLEAN,
}


def mission_timeline_name(agent_id: int) -> str:
    """Scheduler timeline name of an agent's single-agent mission loop."""
    return f"mission:{agent_id}"


class AgentRegistry:
    """
    Creates, indexes and removes agents.

    Agents are kept in insertion order, both globally and per category.
    Coordinates are 0-based.
    """

    def __init__(self, grid: GridState, mission_config: MissionConfig,
                 scheduler: Optional["SimulationScheduler"] = None,
                 seed: Optional[int] = None):
        self.grid = grid
        self.mission_config = mission_config
        self.scheduler = scheduler
        self.seed = seed
        self._agents: Dict[int, Agent] = {}
        self._by_category: Dict[AgentCategory, Dict[int, Agent]] = {
            category: {} for category in AgentCategory
        }
        self._next_id = 1

    def create(self, category: AgentCategory, row: int, col: int,
               kind: Optional[MissionKind] = None, **params) -> Optional[Agent]:
        """
        Create an agent at (row, col).

        Returns None when the cell is out of range or a wall, or when the
        category/kind combination has no mission.
        """
        if not self.grid.in_bounds(row, col):
            logger.warning("Rejected %s at (%d, %d): out of range",
                           category.value, row + 1, col + 1)
            return None
        if self.grid.is_wall(row, col):
            logger.warning("Rejected %s at (%d, %d): wall cell",
                           category.value, row + 1, col + 1)
            return None

        agent_id = self._next_id
        if category == AgentCategory.PLAIN:
            agent = Agent(agent_id, row, col, self.grid)
        else:
            if kind is None:
                logger.warning("Rejected %s: no mission kind", category.value)
                return None
            agent = Agent(agent_id, row, col, self.grid, category=category,
                          kind=kind)
            if kind == MissionKind.FREE_RANDOM and self.seed is not None:
                params.setdefault('seed', self.seed + agent_id)
            try:
                agent.mission = create_mission(
                    kind, agent, self.grid, CATEGORY_ACTIONS[category],
                    self.mission_config, **params)
            except ValueError as e:
                logger.warning("Rejected %s: %s", category.value, e)
                return None

        self._next_id += 1
        self._agents[agent_id] = agent
        self._by_category[category][agent_id] = agent
        logger.debug("Created %r", agent)
        return agent

    def get(self, agent_id: int) -> Optional[Agent]:
        return self._agents.get(agent_id)

    def remove(self, agent: Agent) -> bool:
        """Detach an agent from every index and cancel its single-agent loop."""
        if self._agents.pop(agent.id, None) is None:
            return False
        self._by_category[agent.category].pop(agent.id, None)
        agent.moving = False
        if self.scheduler is not None:
            self.scheduler.unregister(mission_timeline_name(agent.id))
        logger.debug("Removed %r", agent)
        return True

    def clear_all(self) -> None:
        for agent in list(self._agents.values()):
            self.remove(agent)

    def count(self, category: Optional[AgentCategory] = None) -> int:
        if category is None:
            return len(self._agents)
        return len(self._by_category[category])

    def list(self, category: Optional[AgentCategory] = None) -> List[Agent]:
        if category is None:
            return list(self._agents.values())
        return list(self._by_category[category].values())

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent: Agent) -> bool:
        return self._agents.get(agent.id) is agent
