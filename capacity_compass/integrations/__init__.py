"""
Sprint Capacity Compass - Integrations

- Analysis: risks and best practices from a hosted language model
"""

from .analysis import (
    AnalysisClient,
    AnalysisUnavailable,
    analyze_sprint,
    parse_analysis_content
)

__all__ = [
    "AnalysisClient",
    "AnalysisUnavailable",
    "analyze_sprint",
    "parse_analysis_content",
]
