import time
import json
import logging
import inspect
import os
from typing import Optional
from functools import wraps

from fastapi import HTTPException

logger = logging.getLogger("lessoncraft.telemetry")

TELEMETRY_TABLE = "telemetry_events"


def _db_enabled() -> bool:
    return os.getenv("ENABLE_TELEMETRY_DB", "0") == "1"


def emit_event(event: str, *, route: str, version: str, student_id: Optional[str] = None,
               lesson_id: Optional[str] = None, difficulty: Optional[str] = None,
               error_type: Optional[str] = None, latency_ms: Optional[int] = None,
               ok: Optional[bool] = None, dropped_blocks: Optional[int] = None,
               padded: Optional[int] = None):
    row = {
        "event": event,
        "route": route,
        "version": version,
        "student_id": student_id,
        "lesson_id": lesson_id,
        "difficulty": difficulty,
        "error_type": error_type,
        "latency_ms": latency_ms,
        "ok": ok,
        "dropped_blocks": dropped_blocks,
        "padded": padded,
    }
    # one JSON object per line so log shippers can parse it
    logger.info("telemetry=%s", json.dumps({**row, "ts": time.time()}, separators=(",", ":")))

    if not _db_enabled():
        return
    try:
        from app.services.supabase_client import get_supabase_client
        get_supabase_client().table(TELEMETRY_TABLE).insert(row).execute()
    except Exception as e:
        # telemetry never fails the request
        logger.error("[telemetry.emit_event] %s", e, exc_info=True)


def _error_type(exc: Exception) -> str:
    if isinstance(exc, HTTPException):
        return f"HTTPException:{exc.status_code}"
    return exc.__class__.__name__


def _call_context(kwargs: dict) -> dict:
    """Pull student / lesson ids out of a route handler's resolved arguments."""
    body = kwargs.get("request") or kwargs.get("report")
    return {
        "student_id": kwargs.get("user_id"),
        "lesson_id": getattr(body, "lesson_id", None),
    }


def instrument(route: str, version: str):
    """Emit an `api_call` event with latency and outcome for every call of a route handler."""
    def report(t0: float, kwargs: dict, err: Optional[Exception]):
        emit_event(
            "api_call",
            route=route,
            version=version,
            latency_ms=int((time.perf_counter() - t0) * 1000),
            ok=err is None,
            error_type=_error_type(err) if err is not None else None,
            **_call_context(kwargs),
        )

    def deco(fn):
        if inspect.iscoroutinefunction(fn):
            @wraps(fn)
            async def wrapped_async(*args, **kwargs):
                t0 = time.perf_counter()
                err = None
                try:
                    return await fn(*args, **kwargs)
                except Exception as e:
                    err = e
                    raise
                finally:
                    report(t0, kwargs, err)
            return wrapped_async

        @wraps(fn)
        def wrapped(*args, **kwargs):
            t0 = time.perf_counter()
            err = None
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                err = e
                raise
            finally:
                report(t0, kwargs, err)
        return wrapped
    return deco
