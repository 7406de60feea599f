# hr-dashboard/hr_dashboard/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from hr_dashboard.api.v1.api import api_router
from hr_dashboard.core.errors import AccessDenied, UpstreamFetchFailure
from hr_dashboard.core.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="HR Dashboard API")

# All report and sync routes live under /api/v1
app.include_router(api_router, prefix="/api/v1")

@app.exception_handler(UpstreamFetchFailure)
async def upstream_failure_handler(request: Request, exc: UpstreamFetchFailure):
    logger.error("Report failed on %s: %s", request.url.path, exc, extra={"source": exc.source})
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"Upstream source '{exc.source}' is unavailable", "source": exc.source},
    )

@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    logger.warning("Denied %s", exc, extra={"requester": exc.requester_email})
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Not allowed to view this employee's data"},
    )

@app.exception_handler(ValueError)
async def invalid_request_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

@app.get("/")
def read_root():
    return {"message": "Welcome to the HR Dashboard API"}
