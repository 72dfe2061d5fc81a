import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Set

from models.trip_items import TripItem

logger = logging.getLogger(__name__)

UPCOMING_WINDOW = timedelta(hours=1)


def starts_at(item: TripItem) -> Optional[datetime]:
    if not item.start_time:
        return None
    hours, minutes = (int(part) for part in item.start_time.split(":"))
    return datetime(item.date.year, item.date.month, item.date.day, hours, minutes)


def due_items(items: Iterable[TripItem], now: datetime, window: timedelta = UPCOMING_WINDOW) -> List[TripItem]:
    """Open items starting between now and now + window (trip-local wall clock)."""
    due = []
    for item in items:
        if item.completed:
            continue
        start = starts_at(item)
        if start is not None and now <= start <= now + window:
            due.append(item)
    return due


class UpcomingItemMonitor:
    """Periodically reports items that start within the next hour.

    Read-only over the items returned by ``load_items``; each item is
    reported to ``notify`` once per monitor. start() and stop() may be
    called any number of times.
    """

    def __init__(
        self,
        load_items: Callable[[], Iterable[TripItem]],
        notify: Callable[[TripItem], None],
        interval: float,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.load_items = load_items
        self.notify = notify
        self.interval = interval
        self.clock = clock
        self._notified: Set[int] = set()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def check(self) -> List[TripItem]:
        due = due_items(self.load_items(), self.clock())
        # Forget items that have left the window
        self._notified &= {item.id for item in due}
        fresh = [item for item in due if item.id not in self._notified]
        for item in fresh:
            self._notified.add(item.id)
            self.notify(item)
        return fresh

    async def _run(self) -> None:
        while True:
            try:
                self.check()
            except Exception:
                logger.exception("Upcoming item check failed")
            await asyncio.sleep(self.interval)
