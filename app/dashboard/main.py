"""
Weather Station - Dashboard

Polls the API every few seconds and renders:
- Latest readings
- Line chart of the selected metric over the selected time frame
- Recent readings table
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.config import settings
from app.dashboard.poller import DashboardPoller
from app.dashboard.render import build_view, render_dashboard, render_error, render_loading, view_to_dict
from app.dashboard.state import DashboardState

# Setup logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start polling the API; close the HTTP client on shutdown."""
    state = DashboardState()
    poller = DashboardPoller(
        state,
        base_url=settings.api_base_url,
        interval=settings.poll_interval,
        timeout=settings.request_timeout,
    )
    app.state.dashboard = state
    app.state.poller = poller

    task = asyncio.create_task(poller.start())

    yield

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    await poller.close()
    logger.info("⏹️ Dashboard stopped")


app = FastAPI(
    title="Weather Station Dashboard",
    lifespan=lifespan,
)


def _build(request: Request, time_frame: str | None, metric: str | None):
    state: DashboardState = request.app.state.dashboard
    view = build_view(
        state,
        time_frame,
        metric,
        width=settings.chart_width,
        height=settings.chart_height,
    )
    return state, view


@app.get("/", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    time_frame: str | None = Query(None, alias="timeFrame"),
    metric: str | None = Query(None),
):
    """Dashboard page."""
    state, view = _build(request, time_frame, metric)

    if state.loading:
        return HTMLResponse(render_loading())
    if state.error:
        return HTMLResponse(render_error(state.error))
    return HTMLResponse(render_dashboard(view))


@app.get("/api/view")
async def dashboard_view(
    request: Request,
    time_frame: str | None = Query(None, alias="timeFrame"),
    metric: str | None = Query(None),
):
    """Dashboard view model as JSON."""
    state, view = _build(request, time_frame, metric)
    return view_to_dict(view, state)


@app.post("/retry")
async def retry(request: Request):
    """Manual retry from the error page."""
    poller: DashboardPoller = request.app.state.poller
    await poller.refresh()
    return RedirectResponse("/", status_code=303)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.dashboard_port)
