from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from .logging_config import get_logger, setup_logging
from .routers import rooms as rooms_router
from .routers import websockets as ws_router

setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

# -----------------------------
# FastAPI app instance
# -----------------------------

app = FastAPI(title="Room Relay")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Register routers
app.include_router(rooms_router.router)
app.include_router(ws_router.router)


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Server is running."


logger.info("Room relay application initialized")

__all__ = ["app"]
