import logging
from pathlib import Path

from fastapi import FastAPI

from stackdrop.api.routes import router
from stackdrop.config import settings_from_env

app = FastAPI(title="stackdrop", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_project_root = Path(__file__).resolve().parent.parent


@app.on_event("startup")
async def _startup() -> None:
    # Load .env (if present) and fail fast on a bad STACKDROP_* configuration.
    settings = settings_from_env(env_file=_project_root / ".env")
    logger.info("default game settings: %s", settings)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "stackdrop", "version": "0.1.0"}
