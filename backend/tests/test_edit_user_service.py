"""
Customer Details Backend — Edit User Service Unit Tests
=========================================================

What we test:
    ✅ Only fields present in the body are written
    ✅ Explicit null clears a field
    ✅ Nested address updates the existing row or creates one
    ✅ Empty body and unknown id are rejected
"""

import pytest
from pydantic import ValidationError as SchemaValidationError
from unittest.mock import AsyncMock

from app.exceptions import NotFoundError, OperationFailedError, ValidationError
from app.models.customer import AddressData
from app.schemas.customer import UserUpdateRequest
from app.services.edit_user_service import EditUserService


class TestEditUser:

    def setup_method(self):
        self.service = EditUserService()

    @pytest.mark.asyncio
    async def test_updates_only_given_fields(self, mock_db_session, make_result, sample_customers):
        customer = sample_customers[0]
        mock_db_session.execute.return_value = make_result(scalar=customer)

        update = UserUpdateRequest.model_validate({"age": 32, "eyeColor": "blue"})
        result = await self.service.edit_user(mock_db_session, customer.id, update)

        assert result.message == f"User '{customer.id}' updated successfully"
        assert customer.age == 32
        assert customer.eye_color == "blue"
        assert customer.name == "Ayala Blake"
        assert customer.email == "ayalablake@zillan.com"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_explicit_null_clears_field(self, mock_db_session, make_result, sample_customers):
        customer = sample_customers[0]
        mock_db_session.execute.return_value = make_result(scalar=customer)

        update = UserUpdateRequest.model_validate({"company": None})
        await self.service.edit_user(mock_db_session, customer.id, update)

        assert customer.company is None
        assert customer.age == 31

    @pytest.mark.asyncio
    async def test_updates_existing_address(self, mock_db_session, make_result, sample_customers):
        customer = sample_customers[0]
        mock_db_session.execute.return_value = make_result(scalar=customer)

        update = UserUpdateRequest.model_validate({"address": {"zipCode": "9999"}})
        await self.service.edit_user(mock_db_session, customer.id, update)

        assert customer.address.id == "addr-1"
        assert customer.address.zip_code == "9999"
        assert customer.address.street == "Bath Avenue"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_missing_address(self, mock_db_session, make_result, sample_customers):
        customer = sample_customers[2]
        mock_db_session.execute.return_value = make_result(scalar=customer)

        update = UserUpdateRequest.model_validate(
            {"address": {"street": "Main Street", "city": "Springfield", "zipCode": "1234"}}
        )
        await self.service.edit_user(mock_db_session, customer.id, update)

        assert isinstance(customer.address, AddressData)
        assert customer.address.id
        assert customer.address.city == "Springfield"
        assert customer.address.zip_code == "1234"
        mock_db_session.add.assert_called_once_with(customer.address)

    @pytest.mark.asyncio
    async def test_empty_body_is_rejected(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.edit_user(mock_db_session, "any", UserUpdateRequest())
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"address": None}, {"address": {}}])
    async def test_empty_address_alone_is_rejected(self, mock_db_session, body):
        with pytest.raises(ValidationError):
            await self.service.edit_user(
                mock_db_session, "any", UserUpdateRequest.model_validate(body)
            )
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_db_session, make_result):
        mock_db_session.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError):
            await self.service.edit_user(
                mock_db_session, "missing", UserUpdateRequest(name="Somebody")
            )
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flush_failure_becomes_bad_request_error(self, mock_db_session, make_result, sample_customers):
        mock_db_session.execute.return_value = make_result(scalar=sample_customers[0])
        mock_db_session.flush = AsyncMock(side_effect=RuntimeError("constraint trouble"))

        with pytest.raises(OperationFailedError) as exc_info:
            await self.service.edit_user(
                mock_db_session, sample_customers[0].id, UserUpdateRequest(age=40)
            )
        assert exc_info.value.message == "Error: constraint trouble"


class TestUserUpdateRequest:

    def test_accepts_camel_and_snake_case(self):
        camel = UserUpdateRequest.model_validate({"eyeColor": "blue"})
        snake = UserUpdateRequest.model_validate({"eye_color": "blue"})
        assert camel.eye_color == snake.eye_color == "blue"

    def test_unset_fields_are_not_dumped(self):
        update = UserUpdateRequest.model_validate({"age": 20})
        assert update.model_dump(exclude_unset=True) == {"age": 20}

    @pytest.mark.parametrize("body", [{"latitude": 91}, {"longitude": -181}, {"age": -1}])
    def test_rejects_out_of_range_values(self, body):
        with pytest.raises(SchemaValidationError):
            UserUpdateRequest.model_validate(body)
