"""Cooperative tick scheduler driving named fixed-interval timelines."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Callback receives its timeline's step index; returning True stops the timeline.
TickCallback = Callable[[int], Optional[bool]]


@dataclass
class Timeline:
    """One independently startable/stoppable update loop."""
    name: str
    interval: int
    callback: TickCallback
    running: bool = False
    elapsed: int = 0
    step_index: int = 0


class SimulationScheduler:
    """
    Advances engine time in fixed ticks and fires every running timeline
    whose interval has elapsed.

    Time is measured in engine milliseconds and only moves when ``tick`` or
    ``advance`` is called. Within a tick, ready timelines fire in
    registration order, at most once each. A timeline stopped during a tick
    does not fire later in that tick.
    """

    def __init__(self, tick_interval: int = 100):
        if tick_interval <= 0:
            raise ValueError(f"tick interval must be positive, got {tick_interval}")
        self.tick_interval = tick_interval
        self.now = 0
        self.ticks = 0
        self._timelines: Dict[str, Timeline] = {}

    def register(self, name: str, interval: int, callback: TickCallback,
                 start: bool = False) -> Timeline:
        """Add a timeline (replacing any timeline of the same name)."""
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._timelines.pop(name, None)
        timeline = Timeline(name=name, interval=interval, callback=callback)
        self._timelines[name] = timeline
        if start:
            self.start(name)
        return timeline

    def unregister(self, name: str) -> bool:
        timeline = self._timelines.pop(name, None)
        if timeline is None:
            return False
        timeline.running = False
        return True

    def has_timeline(self, name: str) -> bool:
        return name in self._timelines

    def start(self, name: str) -> bool:
        """Start a stopped timeline. Returns False if unknown or already running."""
        timeline = self._timelines.get(name)
        if timeline is None or timeline.running:
            return False
        timeline.running = True
        timeline.elapsed = 0
        timeline.step_index = 0
        logger.debug("Timeline %s started", name)
        return True

    def stop(self, name: str) -> bool:
        timeline = self._timelines.get(name)
        if timeline is None or not timeline.running:
            return False
        timeline.running = False
        logger.debug("Timeline %s stopped after %d steps", name,
                     timeline.step_index)
        return True

    def is_running(self, name: str) -> bool:
        timeline = self._timelines.get(name)
        return timeline is not None and timeline.running

    def running_timelines(self) -> List[str]:
        return [t.name for t in self._timelines.values() if t.running]

    def is_idle(self) -> bool:
        return not any(t.running for t in self._timelines.values())

    def tick(self) -> int:
        """Advance one base tick. Returns the number of callbacks fired."""
        self.now += self.tick_interval
        self.ticks += 1
        fired = 0
        for timeline in list(self._timelines.values()):
            if not timeline.running:
                continue
            timeline.elapsed += self.tick_interval
            if timeline.elapsed < timeline.interval:
                continue
            timeline.elapsed -= timeline.interval
            index = timeline.step_index
            timeline.step_index += 1
            fired += 1
            if timeline.callback(index) and timeline.running:
                timeline.running = False
                logger.debug("Timeline %s finished after %d steps",
                             timeline.name, timeline.step_index)
        return fired

    def advance(self, duration: int) -> int:
        """Run as many whole ticks as fit in ``duration`` engine milliseconds."""
        fired = 0
        for _ in range(max(0, duration) // self.tick_interval):
            fired += self.tick()
        return fired
