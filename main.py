import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file before the database config reads them
load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

from app.database.config import engine, Base  # noqa: E402
from app.database import models  # noqa: E402, F401
from app.errors import IssueTrackerError  # noqa: E402
from app.middleware.timing import timing_middleware  # noqa: E402
from app.routes.issues import router as issues_router  # noqa: E402


def resolve_log_level(name: str) -> int:
    """Numeric level for a LOG_LEVEL name, INFO when the name is unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(
    level=resolve_log_level(os.getenv("LOG_LEVEL", "INFO")),
    format="%(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create tables. A store that is down must not stop the server.
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception:
        logger.exception("Could not connect to the issue store, requests will fail until it is reachable")

    yield

    # Shutdown: Dispose of the engine
    await engine.dispose()

app = FastAPI(title="Issue Tracker", lifespan=lifespan)


@app.exception_handler(IssueTrackerError)
async def issue_tracker_error_handler(request: Request, exc: IssueTrackerError):
    """Business errors are reported in the body with HTTP 200."""
    logger.info(
        f"{request.method} {request.url.path} rejected: {exc.message}",
        extra={"error": exc.message},
    )
    return JSONResponse(status_code=200, content=exc.to_dict())


app.middleware("http")(timing_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",")],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(issues_router)
