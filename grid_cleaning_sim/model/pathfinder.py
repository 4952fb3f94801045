"""Grid shortest-path search (A* with a Manhattan heuristic)."""

import heapq
from itertools import count
from typing import Dict, List, Optional, Set, Tuple

from .grid import GridState

Cell = Tuple[int, int]


def manhattan(a: Cell, b: Cell) -> int:
    """|d_row| + |d_col|."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def nearest_cell(origin: Cell, cells: List[Cell]) -> Optional[Cell]:
    """Closest cell by Manhattan distance; the first one listed wins ties."""
    best = None
    best_distance = None
    for cell in cells:
        distance = manhattan(origin, cell)
        if best_distance is None or distance < best_distance:
            best, best_distance = cell, distance
    return best


def search(grid: GridState, start: Cell, goal: Cell) -> Optional[List[Cell]]:
    """
    A* search over the 4-connected grid with unit step cost.

    The frontier is a heap ordered by f = g + h (h = Manhattan distance to
    the goal); ties go to the larger g, then to insertion order. Stale heap
    entries are skipped on pop rather than decreased in place.

    Returns the cells from start (exclusive) to goal (inclusive), an empty
    list when start == goal, or None when the goal is unreachable.
    """
    if start == goal:
        return []

    tie = count()
    best_g: Dict[Cell, int] = {start: 0}
    parent: Dict[Cell, Cell] = {}
    closed: Set[Cell] = set()
    frontier = [(manhattan(start, goal), 0, next(tie), start)]

    while frontier:
        _, neg_g, _, current = heapq.heappop(frontier)
        if current in closed:
            continue
        if current == goal:
            return _reconstruct(parent, start, goal)
        closed.add(current)

        g = -neg_g
        for neighbor in grid.walkable_neighbors(*current):
            if neighbor in closed:
                continue
            new_g = g + 1
            if new_g < best_g.get(neighbor, new_g + 1):
                best_g[neighbor] = new_g
                parent[neighbor] = current
                f = new_g + manhattan(neighbor, goal)
                heapq.heappush(frontier, (f, -new_g, next(tie), neighbor))

    return None


def _reconstruct(parent: Dict[Cell, Cell], start: Cell, goal: Cell) -> List[Cell]:
    path = []
    current = goal
    while current != start:
        path.append(current)
        current = parent[current]
    path.reverse()
    return path


def direct_path(start: Cell, goal: Cell) -> List[Cell]:
    """Vertical-then-horizontal path that ignores walls."""
    path = []
    row, col = start
    while row != goal[0]:
        row += 1 if row < goal[0] else -1
        path.append((row, col))
    while col != goal[1]:
        col += 1 if col < goal[1] else -1
        path.append((row, col))
    return path


def find_path(grid: GridState, start: Cell, goal: Cell) -> List[Cell]:
    """
    Wall-avoiding route from start to goal.

    Falls back to ``direct_path`` when no route exists, so the caller
    always gets some route; it may then run into a wall.
    """
    path = search(grid, start, goal)
    if path is None:
        return direct_path(start, goal)
    return path
