"""
Sprint Capacity Calculator

Derives working-day metrics for a sprint window and each resource's
story-point contribution.
"""

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Optional


SATURDAY = 5
SUNDAY = 6


class CapacityModel(Enum):
    """How a resource's availability turns into story points."""
    PROPORTIONAL = "proportional"  # share of a nominal sprint x points per sprint
    LINEAR_RATE = "linear_rate"    # effective days x points per day


def parse_non_negative_int_or_zero(value: Any) -> int:
    """
    Coerce a user-entered count to a non-negative integer.

    Anything that cannot be read as a finite number (None, "", "abc", NaN,
    booleans) becomes 0. Negative numbers become 0. Fractions are truncated,
    so "2.7" and 2.7 both give 2.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0

    if not math.isfinite(number) or number <= 0:
        return 0
    return int(number)


@dataclass
class SprintWindow:
    """Date range and shared holidays of a sprint."""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    public_holidays: int = 0

    @property
    def is_valid(self) -> bool:
        if not self.start_date or not self.end_date:
            return False
        return self.end_date >= self.start_date


@dataclass
class Resource:
    """A team member and their planned time off."""
    id: str
    name: str
    leaves: int = 0
    holidays: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "leaves": self.leaves,
            "holidays": self.holidays
        }


@dataclass
class CapacityConfig:
    """Parameters of the capacity model."""
    model: CapacityModel = CapacityModel.PROPORTIONAL

    # Proportional model: 3 weeks x 5 weekdays
    nominal_working_days: int = 15
    story_points_per_sprint: float = 8.0

    # Linear-rate model
    story_points_per_day: float = 8.0

    # 21 calendar days, end = start + 20
    sprint_length_days: int = 21


@dataclass
class WindowMetrics:
    """Calendar breakdown of a sprint window."""
    total_calendar_days: int = 0
    total_weekend_days: int = 0
    base_working_days: int = 0

    def to_dict(self) -> dict:
        return {
            "total_calendar_days": self.total_calendar_days,
            "total_weekend_days": self.total_weekend_days,
            "base_working_days": self.base_working_days
        }


@dataclass
class ResourceCapacity:
    """One resource's share of the sprint."""
    resource_id: str
    name: str
    effective_days: int
    availability: float  # 0-1, share of the sprint the resource is present
    story_points: float

    def to_dict(self) -> dict:
        return {
            "id": self.resource_id,
            "name": self.name,
            "effective_days": self.effective_days,
            "availability_percentage": round(self.availability * 100),
            "story_points": round(self.story_points, 3)
        }


@dataclass
class StoryPointBreakdown:
    """Per-resource and total story points."""
    per_resource: dict[str, float] = field(default_factory=dict)
    total: float = 0.0


@dataclass
class CapacitySummary:
    """Everything the planner shows for a sprint."""
    model: CapacityModel
    public_holidays: int
    metrics: WindowMetrics
    resources: list[ResourceCapacity] = field(default_factory=list)
    available_days: int = 0

    @property
    def per_resource_story_points(self) -> dict[str, float]:
        return {r.resource_id: r.story_points for r in self.resources}

    @property
    def total_story_points(self) -> float:
        total = 0.0
        for r in self.resources:
            total += r.story_points
        return total

    @property
    def display_total(self) -> float:
        """Total rounded to one decimal, as displayed and sent for analysis."""
        return round(self.total_story_points, 1)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "model": self.model.value,
            "window": {
                **self.metrics.to_dict(),
                "public_holidays": self.public_holidays,
                "available_days": self.available_days
            },
            "resources": [r.to_dict() for r in self.resources],
            "total_story_points": self.display_total
        }


def derive_window_metrics(
    start_date: Optional[date],
    end_date: Optional[date],
    public_holidays: Any = 0
) -> WindowMetrics:
    """
    Count calendar, weekend and base working days in [start_date, end_date].

    A missing or inverted window yields all-zero metrics instead of raising.

    Example:
        >>> derive_window_metrics(date(2024, 6, 5), date(2024, 6, 25), 1)
        WindowMetrics(total_calendar_days=21, total_weekend_days=6, base_working_days=14)
    """
    if not start_date or not end_date:
        return WindowMetrics()

    calendar_days = (end_date - start_date).days + 1
    if calendar_days <= 0:
        return WindowMetrics()

    weekend_days = 0
    for offset in range(calendar_days):
        if (start_date + timedelta(days=offset)).weekday() in (SATURDAY, SUNDAY):
            weekend_days += 1

    holidays = parse_non_negative_int_or_zero(public_holidays)
    working_days = max(0, calendar_days - weekend_days - holidays)

    return WindowMetrics(
        total_calendar_days=calendar_days,
        total_weekend_days=weekend_days,
        base_working_days=working_days
    )


class CapacityCalculator:
    """
    Computes sprint capacity with one explicitly configured model.

    Usage:
        calculator = CapacityCalculator(CapacityConfig(model=CapacityModel.PROPORTIONAL))
        summary = calculator.summarize(window, resources)
        print(summary.display_total)
    """

    def __init__(self, config: Optional[CapacityConfig] = None):
        self.config = config or CapacityConfig()

    def window_metrics(self, window: SprintWindow) -> WindowMetrics:
        return derive_window_metrics(window.start_date, window.end_date, window.public_holidays)

    def available_days(self, public_holidays: Any) -> int:
        """Working days left in the nominal sprint after public holidays."""
        nominal = parse_non_negative_int_or_zero(self.config.nominal_working_days)
        return max(0, nominal - parse_non_negative_int_or_zero(public_holidays))

    def _proportional(self, resource: Resource, available_days: int) -> ResourceCapacity:
        leaves = parse_non_negative_int_or_zero(resource.leaves)
        effective_days = max(0, available_days - leaves)
        share = effective_days / available_days if available_days > 0 else 0.0
        points_per_sprint = max(0.0, float(self.config.story_points_per_sprint))

        return ResourceCapacity(
            resource_id=resource.id,
            name=resource.name,
            effective_days=effective_days,
            availability=share,
            story_points=share * points_per_sprint
        )

    def _linear_rate(self, resource: Resource, base_working_days: int) -> ResourceCapacity:
        leaves = parse_non_negative_int_or_zero(resource.leaves)
        holidays = parse_non_negative_int_or_zero(resource.holidays)
        effective_days = max(0, base_working_days - holidays - leaves)
        share = effective_days / base_working_days if base_working_days > 0 else 0.0
        points_per_day = max(0.0, float(self.config.story_points_per_day))

        return ResourceCapacity(
            resource_id=resource.id,
            name=resource.name,
            effective_days=effective_days,
            availability=share,
            story_points=effective_days * points_per_day
        )

    def resource_capacities(
        self,
        resources: list[Resource],
        public_holidays: Any = 0,
        base_working_days: int = 0
    ) -> list[ResourceCapacity]:
        """Capacity of each resource, in input order."""
        if self.config.model == CapacityModel.LINEAR_RATE:
            base = max(0, base_working_days)
            return [self._linear_rate(r, base) for r in resources]

        available = self.available_days(public_holidays)
        return [self._proportional(r, available) for r in resources]

    def story_points(
        self,
        resources: list[Resource],
        public_holidays: Any = 0,
        base_working_days: int = 0
    ) -> StoryPointBreakdown:
        """
        Story points per resource id and their sum.

        Args:
            resources: Resources in display order
            public_holidays: Shared holidays (proportional model)
            base_working_days: Working days of the window (linear-rate model)
        """
        breakdown = StoryPointBreakdown()
        for capacity in self.resource_capacities(resources, public_holidays, base_working_days):
            breakdown.per_resource[capacity.resource_id] = capacity.story_points
            breakdown.total += capacity.story_points
        return breakdown

    def summarize(self, window: SprintWindow, resources: list[Resource]) -> CapacitySummary:
        """Compute window metrics and story points together."""
        metrics = self.window_metrics(window)
        holidays = parse_non_negative_int_or_zero(window.public_holidays)
        capacities = self.resource_capacities(resources, holidays, metrics.base_working_days)

        if self.config.model == CapacityModel.LINEAR_RATE:
            available = metrics.base_working_days
        else:
            available = self.available_days(holidays)

        return CapacitySummary(
            model=self.config.model,
            public_holidays=holidays,
            metrics=metrics,
            resources=capacities,
            available_days=available
        )


def compute_story_points(
    resources: list[Resource],
    config: Optional[CapacityConfig] = None,
    public_holidays: Any = 0,
    base_working_days: int = 0
) -> StoryPointBreakdown:
    """
    Quick function to compute story points with a given model.

    Example:
        breakdown = compute_story_points(
            resources,
            CapacityConfig(model=CapacityModel.PROPORTIONAL),
            public_holidays=1
        )
        print(round(breakdown.total, 1))
    """
    calculator = CapacityCalculator(config)
    return calculator.story_points(resources, public_holidays, base_working_days)


def calculate_capacity(
    window: SprintWindow,
    resources: list[Resource],
    config: Optional[CapacityConfig] = None
) -> CapacitySummary:
    """Quick function to summarize a sprint's capacity."""
    return CapacityCalculator(config).summarize(window, resources)
