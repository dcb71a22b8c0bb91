"""
FastAPI application entry point.

Serves the workflow router. Log output is plain text on stdout unless
TRIPDOCS_JSON_LOGS is set, in which case the service's own loggers write
JSON lines (optionally also to TRIPDOCS_LOG_FILE).
"""

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripdocs.graph.workflow_api import router as workflow_router
from tripdocs.shared.logging import setup_logging


def configure_logging() -> None:
    level = os.environ.get("TRIPDOCS_LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for noisy in ("httpcore", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if os.environ.get("TRIPDOCS_JSON_LOGS"):
        setup_logging(level=level, log_file=os.environ.get("TRIPDOCS_LOG_FILE"))


configure_logging()

app = FastAPI(
    title="Tripdocs",
    description="Turns uploaded travel bookings into a day-by-day itinerary",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(workflow_router)


@app.get("/")
async def root():
    """Service name and the workflow endpoints."""
    return {
        "name": "Tripdocs",
        "version": "0.1.0",
        "endpoints": {
            "start": "POST /api/workflows",
            "stream": "GET /api/workflows/{run_id}/stream",
            "status": "GET /api/workflows/{run_id}",
            "list": "GET /api/workflows",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
