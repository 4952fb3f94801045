"""Agent implementation: discrete grid position and wall-aware movement."""

import logging
from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING

from .grid import GridState

if TYPE_CHECKING:
    from .missions import MissionStrategy

logger = logging.getLogger(__name__)


class AgentCategory(Enum):
    """Top-level agent categories."""
    PLAIN = "plain"
    POLLUTER = "polluter"
    CLEANER = "cleaner"


class MissionKind(Enum):
    """Mission variants available to polluters and cleaners."""
    STRAIGHT_LINE = "straight_line"
    JUMPING = "jumping"
    FREE_RANDOM = "free_random"
    COMPLETE_SWEEP = "complete_sweep"
    SMART_PATHFINDER = "smart_pathfinder"


class Direction(Enum):
    """Cardinal directions as (d_row, d_col) offsets."""
    UP = (-1, 0)
    DOWN = (1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)


# Display colors per category / kind (rendering hints only)
AGENT_COLORS = {
    (AgentCategory.PLAIN, None): '#1E90FF',
    (AgentCategory.POLLUTER, MissionKind.STRAIGHT_LINE): '#8B0000',
    (AgentCategory.POLLUTER, MissionKind.JUMPING): '#FF4500',
    (AgentCategory.POLLUTER, MissionKind.FREE_RANDOM): '#DC143C',
    (AgentCategory.CLEANER, MissionKind.STRAIGHT_LINE): '#ADD8E6',
    (AgentCategory.CLEANER, MissionKind.JUMPING): '#00BFFF',
    (AgentCategory.CLEANER, MissionKind.FREE_RANDOM): '#00FFFF',
    (AgentCategory.CLEANER, MissionKind.COMPLETE_SWEEP): '#1E90FF',
    (AgentCategory.CLEANER, MissionKind.SMART_PATHFINDER): '#008B8B',
}


class Agent:
    """
    Mobile entity that occupies one grid cell at a time.

    Movement modes:
    - cardinal single steps (immediate, bounds and wall checked)
    - animated transition toward a target, one cardinal step per
      ``advance_move`` call, vertical first then horizontal
    - teleports, with or without a wall check
    """

    def __init__(self, agent_id: int, row: int, col: int, grid: GridState,
                 category: AgentCategory = AgentCategory.PLAIN,
                 kind: Optional[MissionKind] = None,
                 radius: float = 1 / 3):
        self.id = agent_id
        self.grid = grid
        self.row = row
        self.col = col
        self.target_row = row
        self.target_col = col
        self.moving = False
        self.radius = radius
        self.category = category
        self.kind = kind
        self.color = AGENT_COLORS.get((category, kind), '#95A5A6')
        self.mission: Optional["MissionStrategy"] = None

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def move(self, direction: Direction) -> bool:
        """Move one cell in ``direction``. Returns False when blocked."""
        d_row, d_col = direction.value
        new_row, new_col = self.row + d_row, self.col + d_col
        if not self.grid.in_bounds(new_row, new_col):
            return False
        if self.grid.is_wall(new_row, new_col):
            logger.debug("Agent %d hit a wall moving %s", self.id,
                         direction.name.lower())
            return False
        self.row, self.col = new_row, new_col
        self.target_row, self.target_col = new_row, new_col
        return True

    def move_up(self) -> bool:
        return self.move(Direction.UP)

    def move_down(self) -> bool:
        return self.move(Direction.DOWN)

    def move_left(self) -> bool:
        return self.move(Direction.LEFT)

    def move_right(self) -> bool:
        return self.move(Direction.RIGHT)

    def move_to_position(self, target_row: int, target_col: int) -> bool:
        """
        Begin an animated move toward the target cell.

        Rejected when the target is out of range or a wall. A target equal
        to the current cell is accepted but starts no movement.
        """
        if not self.grid.in_bounds(target_row, target_col):
            return False
        if self.grid.is_wall(target_row, target_col):
            logger.debug("Agent %d cannot move to wall cell (%d, %d)",
                         self.id, target_row, target_col)
            return False

        self.target_row = target_row
        self.target_col = target_col
        self.moving = (self.row, self.col) != (target_row, target_col)
        return True

    def advance_move(self) -> bool:
        """
        Perform one step of an animated move.

        Returns True while the agent is still moving after this step,
        False once it has arrived or was stopped by a wall.
        """
        if not self.moving:
            return False

        next_row, next_col = self.row, self.col
        if self.row != self.target_row:
            next_row += 1 if self.row < self.target_row else -1
        elif self.col != self.target_col:
            next_col += 1 if self.col < self.target_col else -1
        else:
            self.moving = False
            return False

        if self.grid.is_wall(next_row, next_col):
            logger.debug("Agent %d path blocked by wall at (%d, %d)",
                         self.id, next_row, next_col)
            self.moving = False
            return False

        self.row, self.col = next_row, next_col
        if (self.row, self.col) == (self.target_row, self.target_col):
            self.moving = False
        return self.moving

    def set_grid_position(self, row: int, col: int) -> None:
        """Teleport without any check."""
        self.row, self.col = row, col
        self.target_row, self.target_col = row, col
        self.moving = False

    def set_grid_position_with_wall_check(self, row: int, col: int) -> bool:
        """Teleport unless the destination is out of range or a wall."""
        if not self.grid.is_walkable(row, col):
            logger.debug("Agent %d cannot teleport to (%d, %d)",
                         self.id, row, col)
            return False
        self.set_grid_position(row, col)
        return True

    @property
    def mission_complete(self) -> bool:
        return self.mission is not None and self.mission.complete

    def __repr__(self) -> str:
        kind = f", kind={self.kind.value}" if self.kind else ""
        return (f"Agent(id={self.id}, category={self.category.value}{kind}, "
                f"pos=({self.row + 1}, {self.col + 1}))")
