"""
Customer Details Backend — Edit User Service
==============================================

What:  Partial update of a customer record and its address.
Who:   PUT /api/User/EditUser/{id}

Update rules:
    - Only fields present in the request body are written (exclude_unset),
      so `{"age": 31}` leaves every other column untouched.
    - An explicit null clears the column.
    - A nested `address` object updates the customer's address row, or
      creates one when the customer has none yet. A null or empty
      `address` is ignored, so on its own it counts as an empty body.
    - The customer id and index are never editable.

Writes are flushed here and committed by get_db_session after the route
returns, so a failure anywhere rolls the whole update back.
"""

import logging
import uuid
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import (
    CustomerApiError,
    DatabaseError,
    NotFoundError,
    OperationFailedError,
    ValidationError,
)
from app.models.customer import AddressData, UserData
from app.schemas.customer import MessageResponse, UserUpdateRequest

logger = logging.getLogger(__name__)


class EditUserService:

    async def edit_user(
        self,
        db: AsyncSession,
        user_id: str,
        update: UserUpdateRequest,
    ) -> MessageResponse:
        """
        Apply `update` to customer `user_id`.

        Raises:
            ValidationError: the body sets no fields (→ 400)
            NotFoundError: no customer with this id (→ 404)
            DatabaseError: query or flush failed (→ 400)
            OperationFailedError: any other failure (→ 400)
        """
        changes: Dict[str, Any] = update.model_dump(exclude_unset=True)
        address_changes = changes.pop("address", None)
        if not changes and not address_changes:
            raise ValidationError(message="No fields to update were provided")

        try:
            result = await db.execute(
                select(UserData)
                .where(UserData.id == user_id)
                .options(selectinload(UserData.address))
            )
            user = result.scalar_one_or_none()

            if user is None:
                raise NotFoundError(resource="user", resource_id=user_id)

            for field, value in changes.items():
                setattr(user, field, value)

            if address_changes:
                self._apply_address_changes(db, user, address_changes)

            await db.flush()

            updated = sorted(changes) + (["address"] if address_changes else [])
            logger.info("User %s updated: %s", user_id, ", ".join(updated))
            return MessageResponse(message=f"User '{user_id}' updated successfully")

        except CustomerApiError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the user. Please try again.",
                context={"user_id": user_id},
            )
        except Exception as e:
            logger.error("Unexpected error updating user %s", user_id, exc_info=True)
            raise OperationFailedError(cause=str(e), context={"user_id": user_id})

    @staticmethod
    def _apply_address_changes(
        db: AsyncSession,
        user: UserData,
        address_changes: Dict[str, Any],
    ) -> None:
        address = user.address
        if address is None:
            address = AddressData(id=str(uuid.uuid4()))
            db.add(address)
            user.address = address
        for field, value in address_changes.items():
            setattr(address, field, value)


edit_user_service = EditUserService()
