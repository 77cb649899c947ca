from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from hifdh_api import config
from hifdh_api.errors import HifdhError, InconsistentWriteError
from hifdh_api.routes import auth, goals, logs, overview, students
import logging

logging.basicConfig(level=config.log_level())
logger = logging.getLogger(__name__)

app = FastAPI(
    redirect_slashes=False,
    title="Hifdh Journal API",
    description="Daily Sabak, Sabak Dhor and Dhor logs with weekly goals for a Hifdh class",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.frontend_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HifdhError)
async def hifdh_error_handler(request: Request, exc: HifdhError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    body = {"detail": exc.message}
    if isinstance(exc, InconsistentWriteError):
        body["fields"] = exc.fields
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(students.router, prefix="/students", tags=["Students"])
app.include_router(logs.router, prefix="/logs", tags=["Daily Logs"])
app.include_router(goals.router, prefix="/goals", tags=["Weekly Goals"])
app.include_router(overview.router, prefix="/overview", tags=["Overview"])
