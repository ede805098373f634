from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from billiards.config import config, environment
from billiards.database import database
from billiards.routes import auth, emailing, players, rankings, settings, tournaments
from billiards.utils.alembic import alembic_run_migrations
from billiards.utils.logging import logger


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    if config.auto_run_migrations:
        alembic_run_migrations()

    await database.connect()
    logger.info("Started billiards backend: environment=%s", environment.value)
    try:
        yield
    finally:
        await database.disconnect()


app = FastAPI(
    title="Billiards federation API",
    description="Tournament import, rankings and finale qualification for a billiards league",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: method=%s path=%s", request.method, request.url.path)
    return JSONResponse({"detail": str(exc)}, status_code=500)


for router in (
    auth.router,
    tournaments.router,
    rankings.router,
    players.router,
    settings.router,
    emailing.router,
):
    app.include_router(router)
