"""
Customer Details Backend — Distance Service
=============================================

What:  Great-circle distance between a customer's stored coordinates and a
       caller-supplied point.
Who:   GET /api/User/GetDistance/{id}

Formula (haversine, spherical Earth):
    a = sin²(Δφ/2) + cos φ1 · cos φ2 · sin²(Δλ/2)
    c = 2 · atan2(√a, √(1−a))
    d = R · c,   R = 6371 km (mean Earth radius)

    φ = latitude, λ = longitude, both in radians. The spherical model
    differs from the ellipsoid by at most ~0.5%, which is fine for
    "how far is this customer" questions.
"""

import logging
import math

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    CustomerApiError,
    DatabaseError,
    NotFoundError,
    OperationFailedError,
    ValidationError,
)
from app.models.customer import UserData

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
MISSING_COORDINATES = "User's Latitude or Longitude is missing."


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Raise ValidationError unless latitude ∈ [-90, 90] and longitude ∈ [-180, 180]."""
    if math.isnan(latitude) or not -90.0 <= latitude <= 90.0:
        raise ValidationError(
            message=f"Latitude must be between -90 and 90, got {latitude}",
            field="latitude",
        )
    if math.isnan(longitude) or not -180.0 <= longitude <= 180.0:
        raise ValidationError(
            message=f"Longitude must be between -180 and 180, got {longitude}",
            field="longitude",
        )


class DistanceService:

    def calculate_distance(
        self,
        latitude1: float,
        longitude1: float,
        latitude2: float,
        longitude2: float,
    ) -> float:
        """
        Haversine distance in kilometres between two points given in degrees.

        Symmetric in its two points and 0.0 for identical points.
        """
        phi1 = math.radians(latitude1)
        phi2 = math.radians(latitude2)
        delta_phi = math.radians(latitude2 - latitude1)
        delta_lambda = math.radians(longitude2 - longitude1)

        a = (
            math.sin(delta_phi / 2) ** 2
            + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
        )
        # Rounding can push a a hair above 1.0 for antipodal points
        a = min(1.0, a)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_KM * c

    async def get_distance(
        self,
        db: AsyncSession,
        user_id: str,
        latitude: float,
        longitude: float,
    ) -> float:
        """
        Distance in kilometres from customer `user_id` to (latitude, longitude),
        unrounded.

        Raises:
            ValidationError: caller coordinates out of range, or the customer
                             has no latitude/longitude stored (→ 400)
            NotFoundError: no customer with this id (→ 404)
            DatabaseError: lookup failed (→ 400)
            OperationFailedError: any other failure (→ 400)
        """
        validate_coordinates(latitude, longitude)

        try:
            result = await db.execute(select(UserData).where(UserData.id == user_id))
            user = result.scalar_one_or_none()

            if user is None:
                raise NotFoundError(resource="user", resource_id=user_id)

            if not user.has_coordinates:
                raise ValidationError(
                    message=MISSING_COORDINATES,
                    context={"user_id": user_id},
                )

            distance = self.calculate_distance(
                user.latitude,
                user.longitude,
                latitude,
                longitude,
            )
            logger.debug("Distance for user %s: %.3f km", user_id, distance)

            return distance

        except CustomerApiError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error computing distance for %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": user_id},
            )
        except Exception as e:
            logger.error("Unexpected error computing distance for %s", user_id, exc_info=True)
            raise OperationFailedError(cause=str(e), context={"user_id": user_id})


distance_service = DistanceService()
