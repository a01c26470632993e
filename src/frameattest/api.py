"""
frameattest API - Frame Responder.

    GET  /        frame card with the visit count (any non-POST method)
    POST /        validate the click, resolve the user, attest
    GET  /health  liveness

POST answers are text/plain:
    200  New attestation UID: 0x...
    400  Failed to validate message: <reason>
    500  An error occurred: <description>
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse

from frameattest import __version__
from frameattest.config import Settings
from frameattest.context import FrameContext, build_context
from frameattest.errors import FrameError, ValidationFailure
from frameattest.frame import parse_body, render_frame, trusted_message_bytes
from frameattest.security import apply_security, limiter, setup_structured_logging

FRAME_RATE_LIMIT = os.environ.get("FRAME_RATE_LIMIT", "60/minute")
FRAME_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

router = APIRouter()


def _context(request: Request) -> FrameContext:
    return request.app.state.frame


@router.get("/health")
async def health(request: Request):
    ctx = _context(request)
    return {
        "status": "ok",
        "version": __version__,
        "action": ctx.pipeline.action.name,
        "counter_store": type(ctx.counter.store).__name__,
    }


@router.api_route("/", methods=FRAME_METHODS)
@limiter.limit(FRAME_RATE_LIMIT)
async def frame(request: Request) -> Response:
    ctx = _context(request)
    if request.method != "POST":
        return HTMLResponse(render_frame(await _current_count(ctx), ctx.public_url))

    data = parse_body(request.headers.get("content-type"), await request.body())
    ctx.logger.debug("Frame POST", extra={"event": "frame_post", "fields": sorted(data)})

    try:
        await ctx.counter.increment()
    except Exception:
        ctx.logger.warning("Visit counter update failed", exc_info=True,
                           extra={"event": "visit_counter_failed"})

    try:
        outcome = await ctx.pipeline.run(trusted_message_bytes(data))
    except ValidationFailure as e:
        return PlainTextResponse(f"Failed to validate message: {e.reason}", status_code=400)
    except FrameError as e:
        ctx.logger.error("Frame action failed: %s", e, extra={
            "event": "frame_action_failed", "error": type(e).__name__,
        })
        return PlainTextResponse(f"An error occurred: {e}", status_code=500)
    except Exception:
        ctx.logger.exception("Unexpected error in frame pipeline",
                             extra={"event": "frame_action_crashed"})
        return PlainTextResponse("An error occurred: internal error", status_code=500)

    return PlainTextResponse(outcome.message, status_code=200)


async def _current_count(ctx: FrameContext) -> int:
    try:
        return await ctx.counter.read()
    except Exception:
        ctx.logger.warning("Visit counter read failed", exc_info=True,
                           extra={"event": "visit_counter_failed"})
        return 0


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the context from the environment unless one was injected."""
    owned = getattr(app.state, "frame", None) is None
    if owned:
        settings = Settings.from_env()
        log = setup_structured_logging(settings.log_level)
        app.state.frame = build_context(settings, log=log)
    await app.state.frame.start()
    try:
        yield
    finally:
        if owned:
            await app.state.frame.aclose()


def create_app(context: Optional[FrameContext] = None, *,
               allowed_origins: Optional[list[str]] = None) -> FastAPI:
    """Create the frame app. Without ``context`` it is built at startup from env."""
    if allowed_origins is None:
        env_origins = os.environ.get("ALLOWED_ORIGINS", "")
        if env_origins:
            allowed_origins = [o.strip() for o in env_origins.split(",") if o.strip()]

    app = FastAPI(
        title="frameattest",
        description="Farcaster frame that attests cast engagement on Base via EAS.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.frame = context
    apply_security(app, allowed_origins=allowed_origins)
    app.include_router(router)
    return app


app = create_app()
