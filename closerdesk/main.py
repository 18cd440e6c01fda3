import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from closerdesk.api import admin_appointments, admin_closers, closer_portal, tasks
from closerdesk.core.config import settings
from closerdesk.core.database import Base, engine
from closerdesk.core.exceptions import CloserDeskError
from closerdesk.scheduler import start_scheduler, stop_scheduler

from closerdesk.models import *  # noqa: F401,F403  (register tables on Base)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="CloserDesk API",
    description="Appointments, closer assignment and call outcomes for the admin dashboard and closer portal",
    version="1.0.0",
)

# -------------------------
# CORS (Allow Frontend Cookies)
# -------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------
# Include Routers
# -------------------------
app.include_router(admin_appointments.router)
app.include_router(admin_closers.router)
app.include_router(closer_portal.router)
app.include_router(tasks.router)


# -------------------------
# Error handling
# -------------------------
@app.exception_handler(CloserDeskError)
async def closerdesk_error_handler(request: Request, exc: CloserDeskError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "Internal server error"},
    )


# -------------------------
# FastAPI lifecycle
# -------------------------
@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)
    start_scheduler()


@app.on_event("shutdown")
def shutdown():
    stop_scheduler()


@app.get("/")
def root():
    return {"status": "running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
