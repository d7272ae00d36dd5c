import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routes import habits, stats, export
from core.config import settings
from core.database import close_database
from core.dependencies import get_store
from core.logging_config import setup_logging
from core.scheduler import start_scheduler, stop_scheduler

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    await store.ensure_indexes()
    if settings.REMINDERS_ENABLED:
        start_scheduler()
    logger.info("%s started with %s storage", settings.APP_NAME, settings.STORAGE_BACKEND)
    yield
    stop_scheduler()
    close_database()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS
origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000", # Common alternative
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("API Error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(habits.router)
app.include_router(stats.router)
app.include_router(export.router)

@app.get("/")
def read_root():
    return {"message": "Welcome to HabitTrack API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
