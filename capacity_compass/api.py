"""
FastAPI Backend for Sprint Capacity Compass

Provides a REST API over the capacity calculator and sprint analysis.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Optional, Union

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from .calculator import CapacityModel, derive_window_metrics
from .config import Config
from .integrations import AnalysisClient, AnalysisUnavailable
from .log import get_logger
from .planner import SprintPlanner
from .schemas import AnalysisResult
from .visualizer import Visualizer


# Global instances
config = Config()
visualizer = Visualizer()
logger = get_logger("capacity_compass.api", level=getattr(logging, config.log_level, logging.INFO))

# Numbers typed into a form may arrive as strings; they are coerced, not rejected
LooseNumber = Optional[Union[int, float, str]]


# Pydantic models for API
class ResourceInput(BaseModel):
    id: Optional[str] = None
    name: str = ""
    leaves: LooseNumber = 0
    holidays: LooseNumber = 0


class WindowInput(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    public_holidays: LooseNumber = 0


class SprintInput(WindowInput):
    resources: list[ResourceInput] = Field(default_factory=list)
    model: Optional[CapacityModel] = None


class ReportInput(SprintInput):
    analysis: Optional[AnalysisResult] = None


def build_planner(sprint: SprintInput) -> SprintPlanner:
    """Load a request into a fresh planning session."""
    ids = [item.id for item in sprint.resources if item.id]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=422, detail="Resource ids must be unique")

    capacity = config.capacity_config()
    if sprint.model is not None:
        capacity.model = sprint.model

    planner = SprintPlanner(config=capacity, with_default_resources=False)
    planner.set_start_date(sprint.start_date)
    if sprint.end_date is not None:
        planner.set_end_date(sprint.end_date)
    planner.set_public_holidays(sprint.public_holidays)

    for item in sprint.resources:
        resource = planner.add_resource(item.name, leaves=item.leaves, holidays=item.holidays)
        if item.id:
            resource.id = item.id

    return planner


def get_analysis_client() -> AnalysisClient:
    """Analysis client built from configuration."""
    if not config.analysis_api_key:
        raise HTTPException(status_code=503, detail="Analysis backend not configured")
    return AnalysisClient.from_config(config)


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Sprint Capacity Compass API starting up (capacity model: %s)", config.capacity_model.value)
    yield
    logger.info("Sprint Capacity Compass API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Sprint Capacity Compass",
    description="API for sprint capacity planning and AI sprint analysis",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "capacity_model": config.capacity_model.value,
        "integrations": {
            "analysis": config.analysis_api_key is not None
        }
    }


# Capacity endpoints
@app.post("/api/capacity/window")
async def get_window_metrics(window: WindowInput):
    """Calendar, weekend and working days of a sprint window."""
    metrics = derive_window_metrics(window.start_date, window.end_date, window.public_holidays)
    return metrics.to_dict()


@app.post("/api/capacity")
async def get_capacity(sprint: SprintInput):
    """Full capacity summary for a sprint plan."""
    planner = build_planner(sprint)
    summary = planner.summary()
    return {
        "start_date": planner.window.start_date.isoformat() if planner.window.start_date else None,
        "end_date": planner.window.end_date.isoformat() if planner.window.end_date else None,
        **summary.to_dict()
    }


# Analysis endpoint
@app.post("/api/analysis")
async def run_analysis(
    sprint: SprintInput,
    client: AnalysisClient = Depends(get_analysis_client)
):
    """Capacity summary plus risks and best practices from the language model."""
    planner = build_planner(sprint)
    capacity = planner.summary().to_dict()

    try:
        result = await planner.generate_analysis(client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AnalysisUnavailable as e:
        logger.error("Analysis unavailable: %s", e.reason)
        return JSONResponse(
            status_code=502,
            content={
                "detail": "Sprint analysis is unavailable, please retry",
                "reason": e.reason,
                "capacity": capacity,
                "analysis": None
            }
        )

    return {"capacity": capacity, "analysis": result.to_dict()}


# Report endpoints
@app.post("/api/reports/text")
async def get_text_report(report: ReportInput):
    """Text capacity report, with the analysis if one is supplied."""
    planner = build_planner(report)
    return {"report": visualizer.report(planner.window, planner.summary(), report.analysis, format="text")}


@app.post("/api/reports/html", response_class=HTMLResponse)
async def get_html_report(report: ReportInput):
    """HTML sprint report, ready for PDF export."""
    planner = build_planner(report)
    return visualizer.report(planner.window, planner.summary(), report.analysis, format="html")


# Run with: uvicorn capacity_compass.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
