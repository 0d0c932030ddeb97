import time
from fastapi import FastAPI, Depends, HTTPException, Header
from fastapi.responses import PlainTextResponse
from typing import Optional
from .subscription import ChangeSubscription
from .config import settings

app = FastAPI(title="Flickr Change Watch")
subscription: Optional[ChangeSubscription] = None

def get_token(x_token: Optional[str] = Header(None, alias="X-Token")):
    if settings.HTTP_SERVER_TOKEN and x_token != settings.HTTP_SERVER_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")

@app.get("/healthz")
def healthz():
    if not subscription or not subscription.active:
        return {"status": "starting"}

    if not subscription.last_poll:
        return {"status": "ok", "last_poll_age": None}

    age = time.time() - subscription.last_poll
    # Lenient: a few missed polls before reporting lag
    if age > (subscription.poll_interval / 1000.0) * 3 + 60:
        return {"status": "lagging", "last_poll_age": age}

    return {"status": "ok", "last_poll_age": age}

@app.get("/status", dependencies=[Depends(get_token)])
def status():
    if not subscription:
        return {"status": "not_ready"}

    return {
        "active": subscription.active,
        "watched_sets": len(subscription.watched),
        "loaded_sets": len(subscription.store.loaded_ids()),
        "pending_changes": subscription.changes.model_dump(),
        "last_poll": subscription.last_poll,
        "config": {
            "poll_interval_ms": subscription.poll_interval,
            "isolate_poll_failures": subscription.config.ISOLATE_POLL_FAILURES
        }
    }

@app.get("/metrics", response_class=PlainTextResponse)
def metrics():
    # Simple prometheus-style text format
    if not subscription:
        return ""

    s = subscription
    lines = [
        f'flickr_watch_active {int(s.active)}',
        f'flickr_watch_sets_watched {len(s.watched)}',
        f'flickr_watch_sets_loaded {len(s.store.loaded_ids())}',
        f'flickr_watch_last_poll_timestamp {s.last_poll}',
        f'flickr_watch_pending_set_changes {len(s.changes.sets)}',
    ]
    return "\n".join(lines)
