"""Cosmetic spinning-digit animation for the stage display."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from .draw.engine import DrawEngine
from .draw.prf import group_scope, prf_stream

logger = logging.getLogger(__name__)

FRAME_INTERVAL = 0.05
SPIN_DURATION = 1.2


class Cancellable(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]
"""``scheduler(delay, callback)`` runs ``callback`` after ``delay`` seconds."""


def thread_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def spin_target(engine: DrawEngine) -> Optional[tuple[str, int, list[str]]]:
    """Return ``(scope, step, prefix)`` of the pair the next draw reveals.

    In group mode the step follows the most advanced card, so successive
    ticks spin different frames.
    """
    board = engine.board
    if board is not None:
        step = max((card.reveal.step for card in board.cards.values()), default=0) + 1
        return group_scope(board.group), step, []
    prize = engine.current_prize
    if prize is None:
        return None
    return prize.id, engine.reveal.step + 1, list(engine.reveal.pairs)


class SpinAnimation:
    """Cycle random pairs on screen, then show the already-committed result.

    The engine has committed the pair before the animation starts; the
    animation only decides when it becomes visible and releases the
    engine's in-flight guard at the end. Cancelling stops the frames and
    releases the guard immediately.
    """

    def __init__(
        self,
        engine: DrawEngine,
        on_frame: Callable[[str], None],
        on_done: Optional[Callable[[], None]] = None,
        *,
        scheduler: Scheduler = thread_timer,
        interval: float = FRAME_INTERVAL,
        duration: float = SPIN_DURATION,
    ) -> None:
        self._engine = engine
        self._on_frame = on_frame
        self._on_done = on_done
        self._scheduler = scheduler
        self._interval = interval
        self._duration = duration
        self._handle: Optional[Cancellable] = None
        self._frames_left = 0
        self._rng = None
        self.running = False

    def start(self, scope: str, step: int, prefix: list[str]) -> None:
        """Begin spinning for the pair at ``step`` of ``scope``."""
        self.cancel()
        self._rng = prf_stream(self._engine.seed, scope, step, prefix, salt="anim")
        self._frames_left = max(1, round(self._duration / self._interval))
        self.running = True
        self._schedule()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self.running:
            self.running = False
            self._engine.complete_display()

    def _schedule(self) -> None:
        self._handle = self._scheduler(self._interval, self._tick)

    def _tick(self) -> None:
        if not self.running:
            return
        self._frames_left -= 1
        if self._frames_left <= 0:
            self._handle = None
            self.running = False
            self._engine.complete_display()
            logger.debug("Spin finished")
            if self._on_done is not None:
                self._on_done()
            return
        self._on_frame(f"{int(self._rng() * 100):02d}")
        self._schedule()


__all__ = [
    "FRAME_INTERVAL",
    "SPIN_DURATION",
    "Scheduler",
    "SpinAnimation",
    "spin_target",
    "thread_timer",
]
