"""
Customer Details Backend — Customer Listing Service Unit Tests
================================================================

What we test:
    ✅ Zip code groups are sorted, keep input order, null group last
    ✅ Group counts add up to the total
    ✅ Full listing returns every customer with its address
"""

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.exc import OperationalError

from app.exceptions import DatabaseError
from app.schemas.customer import AddressResponse, CustomerResponse
from app.services.customer_list_service import (
    CustomerListService,
    group_customers_by_zip_code,
)


def customer(customer_id: str, zip_code=None, with_address=True) -> CustomerResponse:
    address = None
    if with_address:
        address = AddressResponse(id=f"addr-{customer_id}", zip_code=zip_code)
    return CustomerResponse(id=customer_id, address=address)


class TestGroupCustomersByZipCode:

    def test_groups_sorted_by_zip_code(self):
        groups = group_customers_by_zip_code(
            [customer("a", "9000"), customer("b", "1000"), customer("c", "9000")]
        )

        assert [g.zip_code for g in groups] == ["1000", "9000"]
        assert [c.id for c in groups[1].customers] == ["a", "c"]
        assert [g.customer_count for g in groups] == [1, 2]

    def test_customers_without_zip_are_last(self):
        groups = group_customers_by_zip_code(
            [
                customer("a", None),
                customer("b", "5000"),
                customer("c", with_address=False),
                customer("d", ""),
            ]
        )

        assert [g.zip_code for g in groups] == ["5000", None]
        assert [c.id for c in groups[-1].customers] == ["a", "c", "d"]

    def test_counts_add_up(self):
        customers = [customer(str(i), str(i % 3)) for i in range(10)]
        groups = group_customers_by_zip_code(customers)
        assert sum(g.customer_count for g in groups) == 10

    def test_empty(self):
        assert group_customers_by_zip_code([]) == []


class TestCustomerListService:

    def setup_method(self):
        self.service = CustomerListService()

    @pytest.mark.asyncio
    async def test_grouped_listing(self, mock_db_session, make_result, sample_customers):
        mock_db_session.execute.return_value = make_result(scalars=sample_customers)

        result = await self.service.get_customers_by_zip_code(mock_db_session)

        assert result.total_count == 3
        assert [g.zip_code for g in result.groups] == ["2583", None]
        assert result.groups[0].customer_count == 2

    @pytest.mark.asyncio
    async def test_full_listing(self, mock_db_session, make_result, sample_customers):
        mock_db_session.execute.return_value = make_result(scalars=sample_customers)

        result = await self.service.get_all_customers_and_addresses(mock_db_session)

        assert result.total_count == 3
        assert [c.id for c in result.customers] == [c.id for c in sample_customers]
        assert result.customers[0].address.city == "Glenshaw"
        assert result.customers[2].address is None

    @pytest.mark.asyncio
    async def test_wire_format_is_camel_case(self, mock_db_session, make_result, sample_customers):
        mock_db_session.execute.return_value = make_result(scalars=sample_customers[:1])

        result = await self.service.get_all_customers_and_addresses(mock_db_session)
        payload = result.model_dump(by_alias=True)

        assert payload["totalCount"] == 1
        assert payload["customers"][0]["eyeColor"] == "brown"
        assert payload["customers"][0]["address"]["zipCode"] == "2583"

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("down"))
        )
        with pytest.raises(DatabaseError):
            await self.service.get_all_customers_and_addresses(mock_db_session)
