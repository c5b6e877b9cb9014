"""
Sprint Capacity Compass

Plan sprint capacity from working days, holidays and leave, and get
AI-generated risks and best practices for the plan.
"""

__version__ = "1.0.0"

from .calculator import (
    CapacityCalculator,
    CapacityConfig,
    CapacityModel,
    CapacitySummary,
    Resource,
    ResourceCapacity,
    SprintWindow,
    StoryPointBreakdown,
    WindowMetrics,
    calculate_capacity,
    compute_story_points,
    derive_window_metrics,
    parse_non_negative_int_or_zero
)

from .schemas import (
    AnalysisRequest,
    AnalysisResult,
    ResourceLeave
)

from .integrations import (
    AnalysisClient,
    AnalysisUnavailable,
    analyze_sprint
)

from .planner import (
    SprintPlanner,
    AnalysisInProgress
)

from .prompt import render_analysis_prompt

from .visualizer import (
    Visualizer,
    TextReporter,
    HTMLReporter
)

__all__ = [
    # Version
    "__version__",

    # Calculator
    "CapacityCalculator",
    "CapacityConfig",
    "CapacityModel",
    "CapacitySummary",
    "Resource",
    "ResourceCapacity",
    "SprintWindow",
    "StoryPointBreakdown",
    "WindowMetrics",
    "calculate_capacity",
    "compute_story_points",
    "derive_window_metrics",
    "parse_non_negative_int_or_zero",

    # Analysis
    "AnalysisRequest",
    "AnalysisResult",
    "ResourceLeave",
    "AnalysisClient",
    "AnalysisUnavailable",
    "analyze_sprint",
    "render_analysis_prompt",

    # Planner
    "SprintPlanner",
    "AnalysisInProgress",

    # Visualizer
    "Visualizer",
    "TextReporter",
    "HTMLReporter",
]
