"""
Tests for the sprint planner session.
"""

import asyncio
import itertools
from datetime import date

import pytest

from capacity_compass.calculator import CapacityConfig, CapacityModel
from capacity_compass.integrations.analysis import AnalysisUnavailable
from capacity_compass.planner import AnalysisInProgress, SprintPlanner, is_conventional_start
from capacity_compass.schemas import AnalysisResult


def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


class FakeClient:
    """Stands in for AnalysisClient; records requests."""

    def __init__(self, result=None, error=None, gate=None):
        self.result = result or AnalysisResult(risks=["R"], best_practices=["B"])
        self.error = error
        self.gate = gate
        self.requests = []

    async def analyze(self, request):
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


class TestResources:
    """Tests for resource row management."""

    def test_default_resources(self):
        """Test the three starting rows."""
        planner = SprintPlanner(id_factory=sequential_ids())

        assert [(r.id, r.name, r.leaves) for r in planner.resources] == [
            ("id-1", "Developer 1", 2),
            ("id-2", "Developer 2", 0),
            ("id-3", "QA Engineer", 1),
        ]

    def test_add_resource_default_name(self):
        """Test that unnamed rows are numbered."""
        planner = SprintPlanner(id_factory=sequential_ids())
        resource = planner.add_resource()

        assert resource.id == "id-4"
        assert resource.name == "Resource 4"
        assert resource.leaves == 0

    def test_default_ids_are_unique(self):
        """Test the default uuid id factory."""
        planner = SprintPlanner()
        ids = [r.id for r in planner.resources]
        assert len(set(ids)) == len(ids)

    def test_remove_resource(self):
        """Test removing rows by id."""
        planner = SprintPlanner(id_factory=sequential_ids())

        assert planner.remove_resource("id-2") is True
        assert [r.id for r in planner.resources] == ["id-1", "id-3"]
        assert planner.remove_resource("missing") is False

    def test_update_resource_coerces_numbers(self):
        """Test that leave edits are coerced permissively."""
        planner = SprintPlanner(id_factory=sequential_ids())

        assert planner.update_resource("id-1", "leaves", "3").leaves == 3
        assert planner.update_resource("id-1", "leaves", "abc").leaves == 0
        assert planner.update_resource("id-1", "leaves", -2).leaves == 0
        assert planner.update_resource("id-1", "holidays", 1.9).holidays == 1
        assert planner.update_resource("id-1", "name", "Lead").name == "Lead"

    def test_update_unknown(self):
        """Test errors for unknown ids and fields."""
        planner = SprintPlanner(id_factory=sequential_ids())

        with pytest.raises(KeyError):
            planner.update_resource("missing", "leaves", 1)
        with pytest.raises(ValueError):
            planner.update_resource("id-1", "id", "other")


class TestWindow:
    """Tests for window handling."""

    def test_end_date_derived(self):
        """Test that the end date is start + 20 days."""
        planner = SprintPlanner()
        planner.set_start_date(date(2024, 6, 5))

        assert planner.window.end_date == date(2024, 6, 25)

    def test_clearing_start_clears_end(self):
        """Test that removing the start date clears the window."""
        planner = SprintPlanner()
        planner.set_start_date(date(2024, 6, 5))
        planner.set_start_date(None)

        assert planner.window.end_date is None
        assert planner.summary().metrics.total_calendar_days == 0

    def test_explicit_end_date(self):
        """Test overriding the end date."""
        planner = SprintPlanner()
        planner.set_start_date(date(2024, 6, 5))
        planner.set_end_date(date(2024, 6, 11))

        assert planner.summary().metrics.total_calendar_days == 7

    def test_public_holidays_coerced(self):
        """Test permissive holiday input."""
        planner = SprintPlanner()
        planner.set_public_holidays("x")
        assert planner.window.public_holidays == 0
        planner.set_public_holidays("2")
        assert planner.window.public_holidays == 2

    def test_conventional_start(self):
        """Test the Wednesday convention check."""
        assert is_conventional_start(date(2024, 6, 5))
        assert not is_conventional_start(date(2024, 6, 6))


class TestSummaryAndRequest:
    """Tests for derived figures and analysis snapshots."""

    def test_summary_default_session(self):
        """Test the default session with one public holiday."""
        planner = SprintPlanner(id_factory=sequential_ids())
        planner.set_start_date(date(2024, 6, 5))
        planner.set_public_holidays(1)

        summary = planner.summary()

        assert summary.metrics.base_working_days == 14
        assert summary.display_total == 22.3

    def test_linear_rate_session(self):
        """Test a session configured for the linear-rate model."""
        config = CapacityConfig(model=CapacityModel.LINEAR_RATE)
        planner = SprintPlanner(config=config, id_factory=sequential_ids(), with_default_resources=False)
        planner.set_start_date(date(2024, 6, 5))
        planner.set_public_holidays(1)
        planner.add_resource("Alice", leaves=2)

        assert planner.summary().total_story_points == 96

    def test_build_request(self):
        """Test the analysis snapshot."""
        planner = SprintPlanner(id_factory=sequential_ids())
        planner.set_start_date(date(2024, 6, 5))
        planner.set_public_holidays(1)

        request = planner.build_analysis_request()

        assert request.start_date == "2024-06-05"
        assert request.end_date == "2024-06-25"
        assert request.public_holidays == 1
        assert [(r.name, r.leaves) for r in request.resources] == [
            ("Developer 1", 2), ("Developer 2", 0), ("QA Engineer", 1)
        ]
        assert request.total_story_points == 22.3

    def test_build_request_requires_dates(self):
        """Test that dates must be resolved before analysis."""
        planner = SprintPlanner()

        with pytest.raises(ValueError):
            planner.build_analysis_request()


class TestGenerateAnalysis:
    """Tests for the guarded analysis round trip."""

    def make_planner(self):
        planner = SprintPlanner(id_factory=sequential_ids())
        planner.set_start_date(date(2024, 6, 5))
        return planner

    def test_success_stores_result(self):
        """Test that a successful analysis is kept."""
        planner = self.make_planner()
        client = FakeClient()

        result = asyncio.run(planner.generate_analysis(client))

        assert result.risks == ["R"]
        assert planner.last_analysis is result
        assert planner.last_analysis_error is None
        assert not planner.is_analyzing

    def test_failure_keeps_capacity(self):
        """Test that a failed analysis leaves capacity figures intact."""
        planner = self.make_planner()
        before = planner.summary().to_dict()
        client = FakeClient(error=AnalysisUnavailable("Backend returned HTTP 500"))

        with pytest.raises(AnalysisUnavailable):
            asyncio.run(planner.generate_analysis(client))

        assert planner.last_analysis is None
        assert planner.last_analysis_error == "Backend returned HTTP 500"
        assert not planner.is_analyzing
        assert planner.summary().to_dict() == before

    def test_second_request_rejected_while_in_flight(self):
        """Test the in-flight guard and snapshot-by-value capture."""
        planner = self.make_planner()

        async def scenario():
            gate = asyncio.Event()
            client = FakeClient(gate=gate)

            first = asyncio.create_task(planner.generate_analysis(client))
            await asyncio.sleep(0)
            assert planner.is_analyzing

            with pytest.raises(AnalysisInProgress):
                await planner.generate_analysis(client)

            # Edits while pending are not sent
            planner.update_resource("id-1", "leaves", 10)
            planner.add_resource("Late joiner")

            gate.set()
            await first
            return client

        client = asyncio.run(scenario())

        assert len(client.requests) == 1
        sent = client.requests[0]
        assert [(r.name, r.leaves) for r in sent.resources] == [
            ("Developer 1", 2), ("Developer 2", 0), ("QA Engineer", 1)
        ]
        assert not planner.is_analyzing
