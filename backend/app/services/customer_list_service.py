"""
Customer Details Backend — Customer Listing Service
=====================================================

What:  Full customer listings: everything (admin export) and grouped by zip.
Who:   GET /api/User/GetAllCustomerList        (Admin)
       GET /api/User/GetCustomerListByZipCode  (Admin, Client)

Both listings load every customer with its address in two queries
(customers, then addresses via selectinload) and order by the source
data set's `index`. Grouping happens in Python: the data set is small
and the response needs the full customer objects in each group anyway.
"""

import logging
from itertools import groupby
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import CustomerApiError, DatabaseError, OperationFailedError
from app.models.customer import UserData
from app.schemas.customer import (
    CustomerListResponse,
    CustomerResponse,
    ZipCodeGroup,
    ZipCodeGroupListResponse,
)

logger = logging.getLogger(__name__)


def _zip_code_of(customer: CustomerResponse) -> Optional[str]:
    if customer.address is None or not customer.address.zip_code:
        return None
    return customer.address.zip_code


def group_customers_by_zip_code(customers: Sequence[CustomerResponse]) -> List[ZipCodeGroup]:
    """
    Group customers by their address' zip code.

    Groups are sorted by zip code; customers keep their input order within
    a group. Customers without an address or zip code end up in one last
    group whose zip_code is None.
    """
    # (is-missing, zip) sorts every real zip code before the None group
    ordered = sorted(customers, key=lambda c: (_zip_code_of(c) is None, _zip_code_of(c) or ""))

    groups = []
    for zip_code, members in groupby(ordered, key=_zip_code_of):
        members = list(members)
        groups.append(
            ZipCodeGroup(zip_code=zip_code, customer_count=len(members), customers=members)
        )
    return groups


class CustomerListService:

    async def _load_customers(self, db: AsyncSession) -> List[CustomerResponse]:
        result = await db.execute(
            select(UserData)
            .options(selectinload(UserData.address))
            .order_by(UserData.index, UserData.id)
        )
        return [CustomerResponse.model_validate(user) for user in result.scalars().all()]

    async def get_customers_by_zip_code(self, db: AsyncSession) -> ZipCodeGroupListResponse:
        """
        Raises:
            DatabaseError: query failed (→ 400)
            OperationFailedError: any other failure (→ 400)
        """
        try:
            customers = await self._load_customers(db)
            groups = group_customers_by_zip_code(customers)
            logger.info("Grouped %d customers into %d zip codes", len(customers), len(groups))
            return ZipCodeGroupListResponse(groups=groups, total_count=len(customers))

        except CustomerApiError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error listing customers by zip code: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve customers. Please try again.",
                context={"error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error("Unexpected error grouping customers", exc_info=True)
            raise OperationFailedError(cause=str(e))

    async def get_all_customers_and_addresses(self, db: AsyncSession) -> CustomerListResponse:
        """
        Raises:
            DatabaseError: query failed (→ 400)
            OperationFailedError: any other failure (→ 400)
        """
        try:
            customers = await self._load_customers(db)
            return CustomerListResponse(customers=customers, total_count=len(customers))

        except CustomerApiError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error listing customers: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve customers. Please try again.",
                context={"error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error("Unexpected error listing customers", exc_info=True)
            raise OperationFailedError(cause=str(e))


customer_list_service = CustomerListService()
