"""
Connectivity monitor and device facade tests

Tests:
  1. Reconnect listeners fire exactly once per offline → online transition
  2. Listener failures are contained
  3. The probe loop drives state changes
  4. BoothClient syncs pending orders after reconnecting
"""
import asyncio

import pytest

from booth_client.client import BoothClient, Channel
from booth_client.connectivity import ConnectivityMonitor
from booth_client.errors import OrderValidationError
from conftest import make_request


class Recorder:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


@pytest.mark.asyncio
async def test_initial_online_state_does_not_fire():
    monitor = ConnectivityMonitor(initially_online=True)
    recorder = Recorder()
    monitor.on_reconnect(recorder)

    assert monitor.mark_online() is False
    await monitor.wait_idle()
    assert recorder.calls == 0


@pytest.mark.asyncio
async def test_one_trigger_per_transition():
    monitor = ConnectivityMonitor(initially_online=True)
    recorder = Recorder()
    monitor.on_reconnect(recorder)

    monitor.mark_offline()
    monitor.mark_offline()
    assert monitor.mark_online() is True
    assert monitor.mark_online() is False
    await monitor.wait_idle()
    assert recorder.calls == 1

    monitor.mark_offline()
    monitor.mark_online()
    await monitor.wait_idle()
    assert recorder.calls == 2
    assert monitor.reconnect_count == 2


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_others():
    monitor = ConnectivityMonitor(initially_online=False)
    recorder = Recorder()

    async def broken():
        raise RuntimeError("boom")

    monitor.on_reconnect(broken)
    monitor.on_reconnect(recorder)
    monitor.mark_online()
    await monitor.wait_idle()

    assert recorder.calls == 1
    assert monitor.is_online


@pytest.mark.asyncio
async def test_probe_loop_reports_reconnect():
    answers = iter([False, False, True])

    async def probe():
        return next(answers, True)

    monitor = ConnectivityMonitor(initially_online=True, probe=probe, probe_interval=0.01)
    recorder = Recorder()
    monitor.on_reconnect(recorder)

    monitor.start()
    for _ in range(200):
        if monitor.reconnect_count:
            break
        await asyncio.sleep(0.01)
    await monitor.stop()

    assert monitor.reconnect_count == 1
    assert recorder.calls == 1


# ─── Facade ────────────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_client_syncs_after_reconnect(fake_api, store):
    monitor = ConnectivityMonitor(initially_online=False)
    async with BoothClient(api=fake_api, store=store, monitor=monitor) as booth:
        result = await booth.submit(make_request())
        assert result.is_offline
        assert await booth.pending_count() == 1

        monitor.mark_online()
        await monitor.wait_idle()

        assert await booth.pending_count() == 0
        assert fake_api.calls == [result.pending.id]


@pytest.mark.asyncio
async def test_client_replays_leftovers_on_start(fake_api, store):
    await store.save_pending(make_request(), temp_id="TEMP-1-aaaaaa", created_at=100.0)
    monitor = ConnectivityMonitor(initially_online=True)

    async with BoothClient(api=fake_api, store=store, monitor=monitor) as booth:
        assert await booth.pending_count() == 0
    assert fake_api.calls == ["TEMP-1-aaaaaa"]


@pytest.mark.asyncio
async def test_pos_channel_allows_larger_quantities(fake_api, store):
    monitor = ConnectivityMonitor(initially_online=True)
    pos = BoothClient(channel=Channel.POS, api=fake_api, store=store, monitor=monitor)
    kiosk = BoothClient(channel=Channel.KIOSK, api=fake_api, store=store, monitor=monitor)

    big = make_request(lines=[("Pad Thai", 50.0, 25)])
    result = await pos.submit(big)
    assert result.order is not None

    with pytest.raises(OrderValidationError):
        await kiosk.submit(big)
