import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.bills import router as bills_router
from app.api.customers import router as customers_router
from app.api.products import router as products_router
from app.config import get_settings
from app.db.engine import get_engine, init_db, wait_for_database
from app.errors import ApiError

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    engine = get_engine()
    wait_for_database(engine, settings.db_connect_attempts, settings.db_connect_delay)
    if settings.create_schema:
        init_db(engine)
        logger.info("Database schema ensured")

    yield

    engine.dispose()


app = FastAPI(
    title="Bills API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ApiError)
def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error at %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(products_router)
app.include_router(customers_router)
app.include_router(bills_router)
