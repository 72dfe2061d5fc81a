import asyncio
from datetime import date, datetime

from models.trip_items import ItemType, TripItem
from services.reminders import UpcomingItemMonitor, due_items

NOW = datetime(2025, 4, 2, 8, 30)


def make_item(item_id, start_time, day=date(2025, 4, 2), completed=False):
    return TripItem(id=item_id, trip_id=1, type=ItemType.ACTIVITY, title=f"Item {item_id}",
                    date=day, start_time=start_time, completed=completed)


def test_due_items_within_the_hour():
    items = [
        make_item(1, "09:00"),
        make_item(2, "09:30"),
        make_item(3, "09:31"),
        make_item(4, "08:00"),
        make_item(5, None),
        make_item(6, "09:00", completed=True),
        make_item(7, "09:00", day=date(2025, 4, 3)),
    ]

    assert [item.id for item in due_items(items, NOW)] == [1, 2]


def test_due_items_across_midnight():
    late = datetime(2025, 4, 2, 23, 30)
    items = [make_item(1, "00:15", day=date(2025, 4, 3))]

    assert [item.id for item in due_items(items, late)] == [1]


def test_check_notifies_each_item_once():
    notified = []
    items = [make_item(1, "09:00")]
    monitor = UpcomingItemMonitor(lambda: items, notified.append, interval=60, clock=lambda: NOW)

    monitor.check()
    monitor.check()

    assert [item.id for item in notified] == [1]


def test_start_and_stop_are_idempotent():
    notified = []
    items = [make_item(1, "09:00")]

    async def scenario():
        monitor = UpcomingItemMonitor(lambda: items, notified.append, interval=0.01, clock=lambda: NOW)
        monitor.start()
        monitor.start()
        task = monitor._task
        await asyncio.sleep(0.05)
        assert monitor.running
        await monitor.stop()
        await monitor.stop()
        assert not monitor.running
        assert task.done()
        # Restart after stop
        monitor.start()
        assert monitor.running
        await monitor.stop()

    asyncio.run(scenario())
    assert [item.id for item in notified] == [1]


def test_failing_load_keeps_ticking():
    calls = []

    def load():
        calls.append(1)
        raise RuntimeError("store unavailable")

    async def scenario():
        monitor = UpcomingItemMonitor(load, lambda item: None, interval=0.01, clock=lambda: NOW)
        monitor.start()
        await asyncio.sleep(0.05)
        await monitor.stop()

    asyncio.run(scenario())
    assert len(calls) >= 2


def test_stop_without_start():
    monitor = UpcomingItemMonitor(lambda: [], lambda item: None, interval=1)
    asyncio.run(monitor.stop())
    assert not monitor.running


def test_started_items_are_forgotten():
    now = [NOW]
    items = [make_item(1, "09:00"), make_item(2, "10:00")]
    monitor = UpcomingItemMonitor(lambda: items, lambda item: None, interval=60, clock=lambda: now[0])

    monitor.check()
    assert monitor._notified == {1}

    now[0] = datetime(2025, 4, 2, 9, 15)
    assert [item.id for item in monitor.check()] == [2]
    assert monitor._notified == {2}
