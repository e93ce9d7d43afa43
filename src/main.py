from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.catalog import router as catalog_router
from src.adapters.api.controllers.realtime import router as realtime_router
from src.adapters.api.controllers.relay import router as relay_router
from src.adapters.config import env_bool
from src.domain.exceptions import RoutingError

app = FastAPI(title="LiveTrack")
app.include_router(catalog_router)
app.include_router(realtime_router)
app.include_router(relay_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the map clients can display them.

    Starlette's default 500 handler may return plain text/HTML, which the
    rider and driver pages parse as JSON and display as `{}`.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = env_bool("LIVETRACK_REVEAL_ERRORS", False)

    if reveal or isinstance(exc, (FileNotFoundError, RoutingError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
