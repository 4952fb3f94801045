"""Grid state management for the grid cleaning simulation."""

import logging
import numpy as np
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
GridListener = Callable[[int], None]


class GridState:
    """
    Owns the N x N cell matrix: a dirt layer, a wall layer and the dirty counter.

    Coordinate convention: (row, col), 0-based, [row, col] for array indexing.
    Every mutation goes through this class so that ``dirty_count`` always
    equals the number of dirty cells.
    """

    # Von Neumann neighborhood (4-connected): up, down, left, right
    OFFSETS = [(-1, 0), (1, 0), (0, -1), (0, 1)]

    def __init__(self, size: int):
        self.size = size

        # Boolean masks: True = dirty / True = wall (impassable)
        self.dirty_cells_mask = np.zeros((size, size), dtype=bool)
        self.walls = np.zeros((size, size), dtype=bool)

        self._dirty_count = 0
        self._listener: Optional[GridListener] = None

    def set_listener(self, listener: Optional[GridListener]) -> None:
        """Register the single state-changed subscriber (None to detach)."""
        self._listener = listener

    def _notify(self) -> None:
        if self._listener is not None:
            self._listener(self._dirty_count)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def dirty(self, row: int, col: int) -> bool:
        """Mark a cell dirty. Returns False when nothing changed."""
        if not self.in_bounds(row, col):
            return False
        if self.walls[row, col] or self.dirty_cells_mask[row, col]:
            return False
        self.dirty_cells_mask[row, col] = True
        self._dirty_count += 1
        self._notify()
        return True

    def clean(self, row: int, col: int) -> bool:
        """Clean a cell. Returns False when nothing changed."""
        if not self.in_bounds(row, col):
            return False
        if self.walls[row, col] or not self.dirty_cells_mask[row, col]:
            return False
        self.dirty_cells_mask[row, col] = False
        self._dirty_count -= 1
        self._notify()
        return True

    def is_dirty(self, row: int, col: int) -> bool:
        if not self.in_bounds(row, col):
            return False
        return bool(self.dirty_cells_mask[row, col])

    def is_wall(self, row: int, col: int) -> bool:
        if not self.in_bounds(row, col):
            return False
        return bool(self.walls[row, col])

    def is_walkable(self, row: int, col: int) -> bool:
        """Check if cell is within bounds and not a wall."""
        return self.in_bounds(row, col) and not self.walls[row, col]

    def set_wall(self, row: int, col: int, is_wall: bool) -> bool:
        """Add or remove a wall. Dirt under a new wall is cleared first."""
        if not self.in_bounds(row, col):
            return False
        if bool(self.walls[row, col]) == is_wall:
            return False
        if is_wall and self.dirty_cells_mask[row, col]:
            self.dirty_cells_mask[row, col] = False
            self._dirty_count -= 1
        self.walls[row, col] = is_wall
        self._notify()
        return True

    def reset(self) -> None:
        """Clean every cell; walls are left in place."""
        self.dirty_cells_mask[:, :] = False
        self._dirty_count = 0
        self._notify()

    @property
    def dirty_count(self) -> int:
        return self._dirty_count

    def dirty_cells(self) -> List[Cell]:
        """All dirty cells in row-major order."""
        rows, cols = np.nonzero(self.dirty_cells_mask)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def walkable_neighbors(self, row: int, col: int) -> List[Cell]:
        """In-bounds, wall-free cardinal neighbors (up, down, left, right)."""
        neighbors = []
        for dr, dc in self.OFFSETS:
            nr, nc = row + dr, col + dc
            if self.is_walkable(nr, nc):
                neighbors.append((nr, nc))
        return neighbors

    def add_wall_rectangle(self, row: int, col: int,
                           height: int, width: int) -> None:
        """Mark rectangular region as wall."""
        # Clamp to grid boundaries
        row_end = min(row + height, self.size)
        col_end = min(col + width, self.size)
        for r in range(max(0, row), row_end):
            for c in range(max(0, col), col_end):
                self.set_wall(r, c, True)

    def add_wall_points(self, coords: List[Cell]) -> None:
        """Mark specific cells as walls."""
        for row, col in coords:
            self.set_wall(row, col, True)

    def generate_random_walls(self, rng: np.random.Generator, count: int,
                              min_length: int, max_length: int) -> int:
        """
        Place ``count`` straight wall segments at random.

        Each segment is horizontal or vertical with a length drawn from
        [min_length, max_length], clipped at the grid edge.
        Returns the number of wall cells added.
        """
        added = 0
        for _ in range(count):
            length = int(rng.integers(min_length, max_length + 1))
            horizontal = bool(rng.integers(0, 2))
            row = int(rng.integers(0, self.size))
            col = int(rng.integers(0, self.size))
            for i in range(length):
                r, c = (row, col + i) if horizontal else (row + i, col)
                if self.set_wall(r, c, True):
                    added += 1
        logger.debug("Generated %d random wall cells", added)
        return added

    def wall_count(self) -> int:
        return int(np.count_nonzero(self.walls))
