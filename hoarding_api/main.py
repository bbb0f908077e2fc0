import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from hoarding_api.config import APP_NAME, APP_VERSION, settings
from hoarding_api.database import async_session, create_tables
from hoarding_api.logging_config import setup_logging
from hoarding_api.routers.assignments import router as assignments_router
from hoarding_api.routers.billings import router as billings_router
from hoarding_api.routers.contracts import router as contracts_router
from hoarding_api.routers.health import router as health_router
from hoarding_api.routers.hoardings import router as hoardings_router
from hoarding_api.routers.photos import router as photos_router
from hoarding_api.routers.search import router as search_router
from hoarding_api.routers.users import router as users_router
from hoarding_api.seed import seed_data
from hoarding_api.services.storage import URL_PREFIX, init_storage_dirs
from hoarding_api.utils.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    init_storage_dirs()
    await create_tables()
    if settings.seed_on_startup:
        async with async_session() as session:
            await seed_data(session)
        logger.info("Seed data loaded on startup")
    logger.info("%s %s started", APP_NAME, APP_VERSION)
    yield


app = FastAPI(
    title=APP_NAME,
    description="Backend API for hoarding rentals, photographer assignments, contracts and billing",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %d %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


register_exception_handlers(app)

app.include_router(users_router, prefix="/api")
app.include_router(hoardings_router, prefix="/api")
app.include_router(assignments_router, prefix="/api")
app.include_router(contracts_router, prefix="/api")
app.include_router(billings_router, prefix="/api")
app.include_router(photos_router, prefix="/api")
app.include_router(search_router, prefix="/api")
app.include_router(health_router)
app.include_router(health_router, prefix="/api", include_in_schema=False)

app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
