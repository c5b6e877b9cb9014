"""
Sprint Planner Session

Holds the form state of one planning session (window, resources, last
analysis) and recomputes capacity on demand.
"""

import uuid
from datetime import date, timedelta
from typing import Any, Callable, Optional

from .calculator import (
    CapacityCalculator,
    CapacityConfig,
    CapacitySummary,
    Resource,
    SprintWindow,
    parse_non_negative_int_or_zero
)
from .integrations.analysis import AnalysisClient, AnalysisUnavailable
from .log import get_logger
from .schemas import AnalysisRequest, AnalysisResult, ResourceLeave


logger = get_logger("capacity_compass.planner")

WEDNESDAY = 2

DEFAULT_RESOURCES = [
    ("Developer 1", 2),
    ("Developer 2", 0),
    ("QA Engineer", 1),
]

EDITABLE_FIELDS = ("name", "leaves", "holidays")


class AnalysisInProgress(Exception):
    """An analysis request is already pending for this session."""


def default_id_factory() -> str:
    return str(uuid.uuid4())


def is_conventional_start(day: date) -> bool:
    """Sprints conventionally start on a Wednesday. Informational only."""
    return day.weekday() == WEDNESDAY


class SprintPlanner:
    """
    One planning session.

    Usage:
        planner = SprintPlanner()
        planner.set_start_date(date(2024, 6, 5))
        planner.set_public_holidays(1)
        planner.add_resource("Designer", leaves=3)
        print(planner.summary().display_total)

        result = await planner.generate_analysis(AnalysisClient())
    """

    def __init__(
        self,
        config: Optional[CapacityConfig] = None,
        id_factory: Optional[Callable[[], str]] = None,
        with_default_resources: bool = True
    ):
        self.config = config or CapacityConfig()
        self.calculator = CapacityCalculator(self.config)
        self.id_factory = id_factory or default_id_factory
        self.window = SprintWindow()
        self.resources: list[Resource] = []

        self.last_analysis: Optional[AnalysisResult] = None
        self.last_analysis_error: Optional[str] = None
        self._analysis_in_flight = False

        if with_default_resources:
            for name, leaves in DEFAULT_RESOURCES:
                self.add_resource(name, leaves=leaves)

    # Window

    def set_start_date(self, start: Optional[date]):
        """Set the start date and derive the end date from the sprint length."""
        self.window.start_date = start
        if start is None:
            self.window.end_date = None
        else:
            length = max(1, self.config.sprint_length_days)
            self.window.end_date = start + timedelta(days=length - 1)

    def set_end_date(self, end: Optional[date]):
        """Override the derived end date."""
        self.window.end_date = end

    def set_public_holidays(self, value: Any):
        self.window.public_holidays = parse_non_negative_int_or_zero(value)

    # Resources

    def get_resource(self, resource_id: str) -> Resource:
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        raise KeyError(resource_id)

    def add_resource(
        self,
        name: Optional[str] = None,
        leaves: Any = 0,
        holidays: Any = 0
    ) -> Resource:
        """Append a resource row. Unnamed rows are called "Resource N"."""
        resource = Resource(
            id=self.id_factory(),
            name=name if name is not None else f"Resource {len(self.resources) + 1}",
            leaves=parse_non_negative_int_or_zero(leaves),
            holidays=parse_non_negative_int_or_zero(holidays)
        )
        self.resources.append(resource)
        return resource

    def remove_resource(self, resource_id: str) -> bool:
        """Remove a resource row. Returns False if no row had that id."""
        before = len(self.resources)
        self.resources = [r for r in self.resources if r.id != resource_id]
        return len(self.resources) < before

    def update_resource(self, resource_id: str, field: str, value: Any) -> Resource:
        """
        Edit one field of a resource row.

        Names are stored as text; leave and holiday counts are coerced to
        non-negative integers.

        Raises:
            KeyError: unknown resource id
            ValueError: field is not editable
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown resource field: {field}")

        resource = self.get_resource(resource_id)
        if field == "name":
            resource.name = "" if value is None else str(value)
        else:
            setattr(resource, field, parse_non_negative_int_or_zero(value))
        return resource

    # Derived figures

    def summary(self) -> CapacitySummary:
        return self.calculator.summarize(self.window, self.resources)

    def build_analysis_request(self) -> AnalysisRequest:
        """
        Snapshot the current plan for analysis.

        Raises:
            ValueError: start or end date not set
        """
        if not self.window.start_date or not self.window.end_date:
            raise ValueError("Sprint start and end dates are required for analysis")

        return AnalysisRequest(
            start_date=self.window.start_date.isoformat(),
            end_date=self.window.end_date.isoformat(),
            public_holidays=parse_non_negative_int_or_zero(self.window.public_holidays),
            resources=[ResourceLeave(name=r.name, leaves=r.leaves) for r in self.resources],
            total_story_points=self.summary().display_total
        )

    # Analysis

    @property
    def is_analyzing(self) -> bool:
        return self._analysis_in_flight

    async def generate_analysis(self, client: AnalysisClient) -> AnalysisResult:
        """
        Run one analysis round trip for the current plan.

        The request is captured before the call, so edits made while it is
        pending are not sent. Capacity figures stay available whether or not
        the analysis succeeds.

        Raises:
            AnalysisInProgress: another analysis is pending
            AnalysisUnavailable: the backend call failed
            ValueError: dates not set
        """
        if self._analysis_in_flight:
            raise AnalysisInProgress("An analysis request is already in progress")

        request = self.build_analysis_request()
        self._analysis_in_flight = True
        self.last_analysis = None
        self.last_analysis_error = None

        try:
            result = await client.analyze(request)
        except AnalysisUnavailable as e:
            self.last_analysis_error = e.reason
            logger.warning("Sprint analysis unavailable: %s", e.reason)
            raise
        finally:
            self._analysis_in_flight = False

        self.last_analysis = result
        return result
