import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from careline.config import (
    HEARTBEAT_SECONDS,
    HOST,
    LOG_LEVEL,
    PORT,
    SEED_PATH,
    SELECTIONS_PATH,
    STATIC_DIR,
)
from careline.routers import auth, doctors, patients
from careline.services.registry import Registry

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Careline...")
    # A seed that cannot be loaded aborts startup
    registry = Registry.from_files(SEED_PATH, SELECTIONS_PATH, heartbeat=HEARTBEAT_SECONDS)
    registry.start()
    app.state.registry = registry
    yield
    await registry.close()
    logger.info("Careline shut down")


app = FastAPI(
    title="Careline",
    description="Patient/doctor selection registry with live roster updates",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(auth.router)
app.include_router(patients.router)
app.include_router(doctors.router)

# Serve the browser client, if present
if Path(STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
