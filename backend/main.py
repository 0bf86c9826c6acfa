import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import admin, driver, tracking
from config import config
from db.database import create_tables, init_engine, is_database_available

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if init_engine() is not None:
        create_tables()
    else:
        logger.warning("Starting without a database connection")
    yield


app = FastAPI(title="Campus Bus Tracker API", lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(driver.router)
app.include_router(tracking.buses_router)
app.include_router(tracking.stops_router)
app.include_router(admin.router)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Campus Bus Tracker API"}


@app.get("/health")
def health():
    database_ok = is_database_available()
    return {
        "status": "ok" if database_ok else "degraded",
        "database": database_ok,
        "config": config.get_config_dict(),
    }
