"""
Customer Details Backend — Search User Service
================================================

What:  Case-insensitive free-text search over customers.
Who:   GET /api/User/SearchUser?searchText=...

Matching:
    The trimmed text is matched as a substring (ILIKE '%text%') against
    name, email, company, phone, about, gender, eye colour and the
    address' street, city, state and zip code. A customer matches when
    any column matches. LIKE wildcards typed by the user (%, _) are
    escaped and match literally.

Query plan:
    SELECT user_data.* FROM user_data
    LEFT OUTER JOIN addresses ON addresses.id = user_data.address_id
    WHERE <col> ILIKE :pattern OR ...
    ORDER BY user_data."index", user_data.id
    (+ one selectin query for the matched customers' addresses)
"""

import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import (
    CustomerApiError,
    DatabaseError,
    OperationFailedError,
    ValidationError,
)
from app.models.customer import AddressData, UserData
from app.schemas.customer import CustomerResponse

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"
MAX_SEARCH_LENGTH = 200

SEARCHABLE_COLUMNS = (
    UserData.name,
    UserData.email,
    UserData.company,
    UserData.phone,
    UserData.about,
    UserData.gender,
    UserData.eye_color,
    AddressData.street,
    AddressData.city,
    AddressData.state,
    AddressData.zip_code,
)


def build_like_pattern(search_text: str) -> str:
    """'50%_off' → '%50\\%\\_off%' (escape char first, then wildcards)."""
    escaped = (
        search_text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class SearchUserService:

    async def search_users(self, db: AsyncSession, search_text: Optional[str]) -> List[CustomerResponse]:
        """
        Return customers matching `search_text`, ordered by index.

        Raises:
            ValidationError: text missing, blank, or longer than 200 chars (→ 400)
            DatabaseError: query failed (→ 400)
            OperationFailedError: any other failure (→ 400)
        """
        text = (search_text or "").strip()
        if not text:
            raise ValidationError(message="Search text must not be empty", field="searchText")
        if len(text) > MAX_SEARCH_LENGTH:
            raise ValidationError(
                message=f"Search text must be at most {MAX_SEARCH_LENGTH} characters",
                field="searchText",
            )

        pattern = build_like_pattern(text)

        try:
            query = (
                select(UserData)
                .outerjoin(AddressData, UserData.address_id == AddressData.id)
                .where(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in SEARCHABLE_COLUMNS)))
                .options(selectinload(UserData.address))
                .order_by(UserData.index, UserData.id)
            )
            result = await db.execute(query)
            users = result.scalars().all()

            logger.info("Search %r matched %d users", text, len(users))
            return [CustomerResponse.model_validate(user) for user in users]

        except CustomerApiError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error searching users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search users. Please try again.",
                context={"error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error("Unexpected error searching users", exc_info=True)
            raise OperationFailedError(cause=str(e))


search_user_service = SearchUserService()
