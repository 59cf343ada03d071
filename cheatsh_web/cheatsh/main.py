from __future__ import annotations

import time
from datetime import datetime
from typing import Literal

from fastapi import FastAPI, Query, Response
from fastapi.responses import HTMLResponse, JSONResponse

from .config import settings
from .models import UsageError, UpstreamFailure
from .upstream import CheatShUpstream, UpstreamError
from .presentation.html_renderer import HtmlRenderer
from .presentation.presenters import create_presenter
from .logging_utils import setup_logger, log_relay, create_request_id


app = FastAPI(title="cheat.sh relay", version="0.1.0")

UPSTREAM = CheatShUpstream()
logger = setup_logger("cheatsh.relay")


def cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_origin,
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": "86400",
    }


@app.get("/health")
def health(response: Response):
    response.headers["Cache-Control"] = "no-store"
    return {
        "status": "ok",
        "service": "cheatsh-relay",
        "version": "0.1.0",
        "upstream": settings.upstream_url,
        "time": datetime.now().astimezone().isoformat()
    }


@app.options(settings.api_endpoint)
def cheat_preflight():
    return Response(status_code=204, headers=cors_headers())


@app.get(settings.api_endpoint)
async def cheat(
    q: str | None = Query(default=None, description="cheat.sh query, e.g. tar or python/list"),
    format: Literal["text", "html"] = Query(default="text", description="Raw text or a rendered HTML page"),
    theme: str | None = Query(default=None, description="HTML theme: light or dark"),
):
    request_id = create_request_id()
    start_time = time.time()

    if not q:
        log_relay(logger, request_id, "", 400, (time.time() - start_time) * 1000, output_format=format)
        return JSONResponse(
            status_code=400,
            content=UsageError(usage=f"{settings.api_endpoint}?q=tar").model_dump(),
            headers=cors_headers(),
        )

    try:
        upstream = await UPSTREAM.fetch(q)
    except UpstreamError as e:
        log_relay(
            logger, request_id, q, 500, (time.time() - start_time) * 1000,
            output_format=format, error=str(e)
        )
        return JSONResponse(
            status_code=500,
            content=UpstreamFailure(message=str(e)).model_dump(),
            headers=cors_headers(),
        )

    log_relay(
        logger, request_id, q, upstream.status_code, (time.time() - start_time) * 1000,
        body_length=len(upstream.text), output_format=format
    )

    headers = {"Cache-Control": "public, max-age=3600", **cors_headers()}

    if format == "html":
        markdown_text = create_presenter('sheet').to_markdown(upstream.text, q)
        html = HtmlRenderer(theme=theme).render(markdown_text, title=q, metadata={"query": q})
        return HTMLResponse(content=html, status_code=upstream.status_code, headers=headers)

    return Response(
        content=upstream.text,
        status_code=upstream.status_code,
        media_type="text/plain",
        headers=headers,
    )


# Path-style relay: GET /<query> answers with the provider's uncoloured text.
# Registered last so it never shadows the routes above.
@app.options("/{path:path}")
def path_preflight(path: str):
    return Response(status_code=204, headers=cors_headers())


@app.get("/{path:path}")
async def cheat_path(path: str):
    request_id = create_request_id()
    start_time = time.time()

    if not path:
        log_relay(logger, request_id, "", 400, (time.time() - start_time) * 1000)
        return JSONResponse(
            status_code=400,
            content=UsageError(
                error="Missing query path",
                usage="/tar",
                examples=["/tar", "/python/list", "/go/:learn", "/:list"],
            ).model_dump(),
            headers=cors_headers(),
        )

    try:
        upstream = await UPSTREAM.fetch_path(path)
    except UpstreamError as e:
        log_relay(logger, request_id, path, 500, (time.time() - start_time) * 1000, error=str(e))
        return JSONResponse(
            status_code=500,
            content=UpstreamFailure(message=str(e)).model_dump(),
            headers=cors_headers(),
        )

    log_relay(
        logger, request_id, path, upstream.status_code, (time.time() - start_time) * 1000,
        body_length=len(upstream.text)
    )
    return Response(
        content=upstream.text,
        status_code=upstream.status_code,
        media_type="text/plain",
        headers={"Cache-Control": "public, max-age=3600", **cors_headers()},
    )
