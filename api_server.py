# ========================
# api_server.py
# ========================

"""
FastAPI Server for the Metro City Fuel RSP Pipeline

Serves monthly average price series for the chart front end. The dataset is
loaded once at startup and can be reloaded on demand.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from src.rsp_pipeline.orchestrator import RSPDashboard
from src.utils.config import Config
from src.utils.logging_setup import setup_logging
from src.utils.performance_monitor import get_system_stats

config = Config()

setup_logging(
    log_level=config.LOG_LEVEL,
    log_file=config.LOG_FILE or None,
    log_dir=config.LOG_DIR
)
logger = logging.getLogger(__name__)

dashboard = RSPDashboard(config)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load the dataset once before serving requests."""
    dataset = await dashboard.load()
    logger.info(f"Dataset ready: {len(dataset)} records from '{dataset.source}'")
    yield


app = FastAPI(
    title="Metro City Fuel RSP API",
    description="Monthly average retail selling prices of petrol and diesel in metro cities",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _parse_year(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Metro City Fuel RSP API",
        "version": "1.0.0",
        "endpoints": {
            "options": "/options - Selectable cities, fuel types, and years",
            "monthly_averages": "/monthly-averages?city=&fuel_type=&year= - Chart series",
            "dataset": "/dataset - Current dataset status",
            "reload": "/dataset/reload - Reload the dataset (POST)",
            "metrics": "/metrics - Load and fallback counters",
            "health": "/health - Health check",
            "api_docs": "/docs - API documentation"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    dataset = dashboard.dataset
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "dataset_loaded": dashboard.is_loaded,
        "using_fallback": dataset.is_fallback,
        "record_count": len(dataset),
        "system": get_system_stats()
    }


@app.get("/options")
async def get_options():
    """Values for the city, fuel type, and year selectors."""
    return dashboard.options()


@app.get("/monthly-averages")
async def get_monthly_averages(
    city: str = Query("", description="Metro city name, e.g. Mumbai"),
    fuel_type: str = Query("", description="petrol or diesel"),
    year: str = Query("", description="Calendar year between 2017 and 2025")
):
    """
    Monthly average RSP series for one selection.

    Invalid or empty selections return an all-zero series rather than an
    error, so the chart can always render.
    """
    parsed_year = _parse_year(year)
    series = dashboard.chart_series(city, fuel_type, parsed_year)
    payload = series.to_dict()
    payload['year'] = parsed_year if parsed_year is not None else year
    payload['using_fallback'] = dashboard.dataset.is_fallback
    return payload


@app.get("/dataset")
async def get_dataset_status():
    """Provenance of the dataset currently served."""
    return dashboard.status()


@app.post("/dataset/reload")
async def reload_dataset():
    """Reload the configured source, replacing the current dataset wholesale."""
    try:
        dataset = await dashboard.reload()
    except Exception as e:
        logger.error(f"Reload failed: {e}")
        raise HTTPException(status_code=500, detail=f"Reload failed: {str(e)}")

    return {
        "message": "Dataset reloaded",
        "dataset": dataset.summary()
    }


@app.get("/metrics")
async def get_metrics():
    """Load, skip, and fallback counters."""
    return dashboard.metrics.snapshot()


def start_server(host: str = config.API_HOST, port: int = config.API_PORT, reload: bool = False):
    """Start the FastAPI server."""
    logger.info(f"Starting Metro City Fuel RSP API server on {host}:{port}")
    uvicorn.run(
        "api_server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    start_server(reload=True)
