"""
Customer Details Backend — Distance Service Unit Tests
========================================================

What:  Tests for the haversine calculation and the GetDistance workflow.
How:   Pure-function tests for the math; mock DB sessions for the lookup.

What we test:
    ✅ Known city-pair distances, symmetry, zero distance, antipodes
    ✅ Coordinate range validation
    ✅ Unknown customer → NotFoundError
    ✅ Customer without coordinates → ValidationError with the fixed message
    ✅ Unexpected failures → OperationFailedError ("Error: ...")
"""

import math

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.exc import OperationalError

from app.exceptions import (
    DatabaseError,
    NotFoundError,
    OperationFailedError,
    ValidationError,
)
from app.services.distance_service import (
    EARTH_RADIUS_KM,
    MISSING_COORDINATES,
    DistanceService,
    validate_coordinates,
)


class TestCalculateDistance:
    """Tests for the haversine formula."""

    def setup_method(self):
        self.service = DistanceService()

    def test_same_point_is_zero(self):
        assert self.service.calculate_distance(51.5, -0.12, 51.5, -0.12) == 0.0

    def test_london_to_paris(self):
        """London (51.5074, -0.1278) → Paris (48.8566, 2.3522) ≈ 343.5 km."""
        distance = self.service.calculate_distance(51.5074, -0.1278, 48.8566, 2.3522)
        assert distance == pytest.approx(343.5, abs=1.0)

    def test_new_york_to_los_angeles(self):
        distance = self.service.calculate_distance(40.7128, -74.0060, 34.0522, -118.2437)
        assert distance == pytest.approx(3936, abs=5)

    def test_symmetric(self):
        there = self.service.calculate_distance(10.0, 20.0, -30.0, 40.0)
        back = self.service.calculate_distance(-30.0, 40.0, 10.0, 20.0)
        assert there == pytest.approx(back)

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is R·π/180 ≈ 111.19 km."""
        distance = self.service.calculate_distance(0.0, 0.0, 1.0, 0.0)
        assert distance == pytest.approx(EARTH_RADIUS_KM * math.pi / 180)

    def test_antipodal_points_are_half_circumference(self):
        distance = self.service.calculate_distance(0.0, 0.0, 0.0, 180.0)
        assert distance == pytest.approx(EARTH_RADIUS_KM * math.pi)
        assert not math.isnan(distance)

    def test_crossing_the_antimeridian(self):
        """179°E to 179°W is 2° of longitude apart, not 358°."""
        distance = self.service.calculate_distance(0.0, 179.0, 0.0, -179.0)
        assert distance == pytest.approx(2 * EARTH_RADIUS_KM * math.pi / 180)


class TestValidateCoordinates:

    @pytest.mark.parametrize("latitude,longitude", [(0, 0), (90, 180), (-90, -180)])
    def test_accepts_bounds(self, latitude, longitude):
        validate_coordinates(latitude, longitude)

    @pytest.mark.parametrize(
        "latitude,longitude,field",
        [
            (90.01, 0, "latitude"),
            (-91, 0, "latitude"),
            (0, 180.5, "longitude"),
            (0, -181, "longitude"),
            (float("nan"), 0, "latitude"),
        ],
    )
    def test_rejects_out_of_range(self, latitude, longitude, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_coordinates(latitude, longitude)
        assert exc_info.value.field == field


class TestGetDistance:
    """Tests for the GetDistance workflow against a mocked session."""

    def setup_method(self):
        self.service = DistanceService()

    @pytest.mark.asyncio
    async def test_returns_distance_for_customer(self, mock_db_session, make_result, sample_customers):
        customer = sample_customers[0]
        mock_db_session.execute.return_value = make_result(scalar=customer)

        result = await self.service.get_distance(
            mock_db_session, customer.id, latitude=-33.87, longitude=151.21
        )

        # Bare kilometres, not rounded
        expected = self.service.calculate_distance(-38.41, 151.52, -33.87, 151.21)
        assert isinstance(result, float)
        assert result == expected
        assert result != round(expected, 3)

    @pytest.mark.asyncio
    async def test_unknown_customer_raises_not_found(self, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_distance(mock_db_session, "missing-id", 0.0, 0.0)
        assert "missing-id" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_customer_without_coordinates(self, mock_db_session, make_result, sample_customers):
        mock_db_session.execute.return_value = make_result(scalar=sample_customers[2])

        with pytest.raises(ValidationError) as exc_info:
            await self.service.get_distance(mock_db_session, sample_customers[2].id, 0.0, 0.0)
        assert exc_info.value.message == MISSING_COORDINATES

    @pytest.mark.asyncio
    async def test_invalid_input_never_queries(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.get_distance(mock_db_session, "any", 100.0, 0.0)
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(DatabaseError):
            await self.service.get_distance(mock_db_session, "any", 0.0, 0.0)

    @pytest.mark.asyncio
    async def test_unexpected_failure_becomes_bad_request_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(OperationFailedError) as exc_info:
            await self.service.get_distance(mock_db_session, "any", 0.0, 0.0)
        assert exc_info.value.message == "Error: boom"
