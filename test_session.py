"""
End-to-end through PanelSession: keystrokes in, tab views and search
outcomes out, all sharing one cache.
"""

import asyncio

import httpx

from conftest import FakeLoader, PLAN
from cache.dataset_cache import LoadState
from config.config import Settings
from controllers.session import PanelSession

CFG = Settings(SEARCH_DEBOUNCE_MS=20, SEARCH_RESULT_CAP=200, DEFAULT_TAB="core")
SETTLE = 0.1


def _session(loader, views, outcomes):
    return PanelSession(loader.fetch, cfg=CFG, plan=PLAN, on_results=outcomes.append, on_view=views.append)


def test_start_shows_default_tab():
    loader = FakeLoader()
    views, outcomes = [], []
    view = asyncio.run(_session(loader, views, outcomes).start())
    assert view.dataset == "core"
    assert views == [view]
    assert loader.calls == ["dog_core.json"]


def test_typing_searches_and_clearing_redisplays_active_tab():
    loader = FakeLoader()
    views, outcomes = [], []

    async def go():
        s = _session(loader, views, outcomes)
        await s.open_tab("parks")
        for raw in ("u", "up", "uptown"):
            s.on_input(raw)
        await asyncio.sleep(SETTLE)
        await s.settle()
        s.on_input("")
        await s.settle()

    asyncio.run(go())
    assert len(outcomes) == 1
    assert [r.title for r in outcomes[0].results] == ["Uptown Pet Clinic"]
    assert [v.dataset for v in views] == ["parks", "parks"]
    # parks partitions fetched once even though tab and search both wanted them
    assert loader.count("dog_parks_1.json") == 1


def test_tab_click_during_search_shares_fetch():
    loader = FakeLoader()
    views, outcomes = [], []

    async def go():
        s = _session(loader, views, outcomes)
        gate = loader.hold("dog_runs.json")
        s.on_input("run")
        await asyncio.sleep(SETTLE)
        tab = asyncio.ensure_future(s.open_tab("dogruns"))
        await asyncio.sleep(0.01)
        gate.set()
        await tab
        await s.settle()

    asyncio.run(go())
    assert loader.count("dog_runs.json") == 1
    assert views[-1].dataset == "dogruns"
    assert any(r.category == "Dog Run" for r in outcomes[0].results)


def test_async_sinks():
    loader = FakeLoader()
    seen = []

    async def sink(view):
        await asyncio.sleep(0)
        seen.append(view.dataset)

    async def go():
        s = PanelSession(loader.fetch, cfg=CFG, plan=PLAN, on_view=sink)
        await s.open_tab("clinics")
        s.close()

    asyncio.run(go())
    assert seen == ["clinics"]


def test_default_session_uses_http_loader():
    s = PanelSession(cfg=CFG)
    assert s.loader is not None
    assert str(s.loader.url_for(CFG.CORE_RESOURCE)).endswith("/dog_core.json")


def test_session_loader_uses_injected_fetch_settings():
    cfg = Settings(
        DATA_BASE_URL="http://panel.test/static/",
        FETCH_ATTEMPTS=2,
        FETCH_TIMEOUT=5.0,
        RETRY_MIN_WAIT=0,
        RETRY_MAX_WAIT=0,
    )
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(503)

    s = PanelSession(cfg=cfg, plan=PLAN, transport=httpx.MockTransport(handler))
    assert s.loader.attempts == 2
    assert s.loader.timeout == 5.0

    view = asyncio.run(s.open_tab("dogruns"))
    assert view.state is LoadState.FAILED
    assert seen == ["/static/dog_runs.json", "/static/dog_runs.json"]
