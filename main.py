import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasktrack.config.settings import settings
from tasktrack.database import Base, engine
from tasktrack.routers import auth, user, task
from tasktrack.utils.errors import TaskTrackError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Task Tracking API")

# Policy, validation and persistence failures share one response shape
@app.exception_handler(TaskTrackError)
async def task_tracking_error_handler(request: Request, exc: TaskTrackError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

# CORS configuration
origins = [
    "http://localhost:3000",                  # Local development frontend
    "http://127.0.0.1:3000",                 # Alternative localhost
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Route registration
app.include_router(auth.router)
app.include_router(user.router)
app.include_router(task.router)

@app.on_event("startup")
async def startup_event():
    """Make sure the tables exist before serving requests"""
    logger.info("Starting Task Tracking API...")
    Base.metadata.create_all(bind=engine)

# Root route
@app.get("/")
def read_root():
    return {"message": "Task Tracking API"}

@app.get("/health")
def health():
  return {"status": "ok"}
