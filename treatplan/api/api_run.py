from fastapi import FastAPI, Query
from typing import Optional
import logging

from treatplan.api.routes import plan, reference
from treatplan.events.web_observers import start as start_event_observers, get_events as get_web_events

# Logging
logger = logging.getLogger("treatplan_app")

# Initialize FastAPI app
app = FastAPI(title="Treatment Plan API")

# Include routers
app.include_router(reference.router)
app.include_router(plan.router)


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for web notifications when the app starts."""
    start_event_observers()
    logger.info("Web observers for plan events started")


@app.get('/api/notifications')
def api_notifications(
    since: Optional[int] = Query(default=None, description="Return events with id greater than this value")
):
    """
    Return recent plan notifications (toasts, errors, commits, refresh requests).

    Client polling strategy:
        1. First call without 'since' to load the current backlog.
        2. Store 'next_cursor' from response.
        3. Subsequent polls: /api/notifications?since=<next_cursor>
    """
    return get_web_events(since)


@app.get('/health')
def health():
    return {"status": "ok", "open_plans": len(plan._editors)}
