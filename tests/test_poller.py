import asyncio

import httpx
import pytest

from queue_monitor.services.backend import BackendClient
from queue_monitor.services.poller import ACTIVE, SUSPENDED, PollingController
from queue_monitor.services.resolver import DetailResolver
from queue_monitor.state import AppState


def _stats_requests(fake_backend):
    return sum(1 for method, path, params in fake_backend.requests if path == "stats")


def test_activate_polls_immediately_and_on_interval(fake_backend, make_client):
    fake_backend.stats["total_pending"] = 7
    state = AppState()

    async def scenario():
        poller = PollingController(DetailResolver(make_client()), state, interval=0.01)
        poller.activate()
        assert poller.status == ACTIVE
        await asyncio.sleep(0.05)
        await poller.stop()
        return poller

    poller = asyncio.run(scenario())

    assert poller.status == SUSPENDED
    assert _stats_requests(fake_backend) >= 2
    assert state.stats.pending == 7


def test_malformed_stats_keep_polling_alive(fake_backend, make_client):
    fake_backend.stats["registered_tasks"] = [{"name": "ping"}]

    async def scenario():
        poller = PollingController(DetailResolver(make_client()), AppState(), interval=0.01)
        poller.activate()
        await asyncio.sleep(0.05)
        status = poller.status
        await poller.stop()
        return status

    assert asyncio.run(scenario()) == ACTIVE
    assert _stats_requests(fake_backend) >= 2


def test_unexpected_error_is_logged_and_polling_continues(make_client, monkeypatch, caplog):
    resolver = DetailResolver(make_client())
    calls = []

    async def exploding_fetch():
        calls.append(1)
        raise RuntimeError("boom")

    monkeypatch.setattr(resolver, "fetch_stats", exploding_fetch)

    async def scenario():
        poller = PollingController(resolver, AppState(), interval=0.01)
        poller.activate()
        await asyncio.sleep(0.05)
        status = poller.status
        await poller.stop()
        return status

    assert asyncio.run(scenario()) == ACTIVE
    assert len(calls) >= 2
    assert "Dashboard poll failed unexpectedly" in caplog.text


def test_suspend_cancels_the_timer(fake_backend, make_client):
    async def scenario():
        poller = PollingController(DetailResolver(make_client()), AppState(), interval=0.01)
        poller.activate()
        await asyncio.sleep(0.03)
        poller.suspend()
        await asyncio.sleep(0)
        before = _stats_requests(fake_backend)
        await asyncio.sleep(0.05)
        return poller, before

    poller, before = asyncio.run(scenario())

    assert poller.status == SUSPENDED
    assert _stats_requests(fake_backend) == before


def test_activate_twice_keeps_one_task(make_client):
    async def scenario():
        poller = PollingController(DetailResolver(make_client()), AppState(), interval=10)
        poller.activate()
        task = poller._task
        poller.activate()
        same = poller._task is task
        await poller.stop()
        return same

    assert asyncio.run(scenario())


def test_failed_poll_keeps_stale_numbers(fake_backend, make_client):
    state = AppState()
    fake_backend.stats["total_success"] = 5
    poller = PollingController(DetailResolver(make_client()), state)

    first = asyncio.run(poller.refresh())
    fake_backend.broken.add("stats")
    second = asyncio.run(poller.refresh())

    assert first.success == 5
    assert second is None
    assert state.stats.success == 5


def test_response_for_a_hidden_dashboard_is_dropped(fake_backend, make_client):
    state = AppState()
    poller = PollingController(DetailResolver(make_client()), state)
    state.switch_view("jobs")

    assert asyncio.run(poller.refresh()) is None
    assert state.stats is None


def test_superseded_poll_is_not_applied(fake_backend, settings):
    state = AppState()

    async def slow_handler(request):
        await asyncio.sleep(0.02)
        return fake_backend.handle(request)

    async def scenario():
        client = BackendClient(settings, transport=httpx.MockTransport(slow_handler))
        poller = PollingController(DetailResolver(client), state)
        slow = asyncio.ensure_future(poller.refresh())
        await asyncio.sleep(0.005)
        # a newer poll is issued before the first one is applied
        state.begin("dashboard")
        return await slow

    assert asyncio.run(scenario()) is None
    assert state.stats is None


def test_unknown_view_is_rejected():
    with pytest.raises(ValueError):
        AppState().switch_view("settings")


def test_sequence_numbers_are_per_view():
    state = AppState()
    jobs_seq = state.begin("jobs")
    dash_seq = state.begin("dashboard")
    newer_jobs = state.begin("jobs")

    assert state.is_current("dashboard", dash_seq)
    assert not state.is_current("jobs", jobs_seq)
    assert state.is_current("jobs", newer_jobs)
