# shipquote/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shipquote.core.config import get_settings
from shipquote.core.logging import setup_logging
from shipquote.db.session import create_all

settings = get_settings()
setup_logging(settings.LOG_LEVEL, json=settings.JSON_LOG)
logger = logging.getLogger("shipquote")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # dev convenience: local sqlite works without running create_tables.py first
    if settings.ENV == "dev":
        create_all()
    logger.info("shipquote started env=%s", settings.ENV)
    yield


app = FastAPI(
    title="ShipQuote",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def _unhandled_exc(_req: Request, exc: Exception):
    logger.exception("UNHANDLED_EXC: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "internal error"}},
    )


@app.exception_handler(RequestValidationError)
async def _validation_exc(_req: Request, exc: RequestValidationError):
    # error ctx may carry exception objects (model validators)
    safe = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
    return JSONResponse(status_code=422, content={"detail": safe})


@app.exception_handler(HTTPException)
async def _http_exc(_req: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


from shipquote.api.routers.diag import router as diag_router  # noqa: E402
from shipquote.api.routers.shipping_config import router as shipping_config_router  # noqa: E402
from shipquote.api.routers.shipping_quote import router as shipping_quote_router  # noqa: E402
from shipquote.metrics import router as metrics_router  # noqa: E402

# quote
app.include_router(shipping_quote_router)

# admin configuration
app.include_router(shipping_config_router)

# ops
app.include_router(diag_router)
app.include_router(metrics_router)


@app.get("/")
async def root():
    return {"name": "ShipQuote", "version": "1.0.0"}
