"""
Customer Details Backend — User Route Handlers
================================================

What:  The /api/User surface: Login, EditUser, GetDistance, SearchUser,
       GetCustomerListByZipCode, GetAllCustomerList.
How:   Thin handlers: authenticate/authorize via dependencies, delegate to
       the service singletons, return their response models. Failures are
       raised as application exceptions and formatted by main.py's handlers.

Mounting:
    main.py includes this router twice, under /api/User and under
    /api/User/v{version}; see app.versioning.

Authorization:
    Login                     anonymous
    EditUser, GetDistance,
    SearchUser,
    GetCustomerListByZipCode  Admin or Client
    GetAllCustomerList        Admin
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import CurrentUser, require_roles
from app.database import get_db_session
from app.models.identity import ADMIN_ROLE, CLIENT_ROLE
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.common import ErrorResponse
from app.schemas.customer import (
    CustomerListResponse,
    CustomerResponse,
    MessageResponse,
    UserUpdateRequest,
    ZipCodeGroupListResponse,
)
from app.services.customer_list_service import customer_list_service
from app.services.distance_service import distance_service
from app.services.edit_user_service import edit_user_service
from app.services.login_service import login_service
from app.services.search_service import search_user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["User"])

admin_or_client = require_roles(ADMIN_ROLE, CLIENT_ROLE)
admin_only = require_roles(ADMIN_ROLE)

AUTH_ERRORS = {
    401: {"description": "Missing, invalid or expired bearer token", "model": ErrorResponse},
    403: {"description": "Role not allowed", "model": ErrorResponse},
}


@router.post(
    "/Login",
    response_model=TokenResponse,
    responses={
        401: {"description": "Invalid username or password", "model": ErrorResponse},
        429: {"description": "Too many login attempts", "model": ErrorResponse},
    },
    summary="Exchange username and password for an access token",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await login_service.login(db, credentials.username, credentials.password)


@router.put(
    "/EditUser/{user_id}",
    response_model=MessageResponse,
    responses={
        **AUTH_ERRORS,
        400: {"description": "Empty update or failed operation", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Update fields of a customer record",
    description=(
        "Partial update: only fields present in the body are changed; null clears a field. "
        "A nested address object updates (or creates) the customer's address."
    ),
)
async def edit_user(
    user_id: str = Path(..., min_length=1, max_length=64),
    update: UserUpdateRequest = Body(...),
    current_user: CurrentUser = Depends(admin_or_client),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    logger.info("%s editing user %s", current_user.username, user_id)
    return await edit_user_service.edit_user(db, user_id, update)


@router.get(
    "/GetDistance/{user_id}",
    response_model=float,
    responses={
        **AUTH_ERRORS,
        400: {"description": "Coordinates out of range or missing on the user", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Distance in kilometres from a customer to a point",
)
async def get_distance(
    user_id: str = Path(..., min_length=1, max_length=64),
    latitude: float = Query(..., description="Latitude of the point, -90 to 90"),
    longitude: float = Query(..., description="Longitude of the point, -180 to 180"),
    current_user: CurrentUser = Depends(admin_or_client),
    db: AsyncSession = Depends(get_db_session),
) -> float:
    return await distance_service.get_distance(db, user_id, latitude, longitude)


@router.get(
    "/SearchUser",
    response_model=List[CustomerResponse],
    responses={
        **AUTH_ERRORS,
        400: {"description": "Blank or too long search text", "model": ErrorResponse},
    },
    summary="Case-insensitive text search over customers",
)
async def search_user(
    search_text: Optional[str] = Query(
        default=None,
        alias="searchText",
        description="Text matched against name, email, company, phone, about and address",
    ),
    current_user: CurrentUser = Depends(admin_or_client),
    db: AsyncSession = Depends(get_db_session),
) -> List[CustomerResponse]:
    return await search_user_service.search_users(db, search_text)


@router.get(
    "/GetCustomerListByZipCode",
    response_model=ZipCodeGroupListResponse,
    responses=AUTH_ERRORS,
    summary="Customers grouped by address zip code",
)
async def get_customer_list_by_zip_code(
    current_user: CurrentUser = Depends(admin_or_client),
    db: AsyncSession = Depends(get_db_session),
) -> ZipCodeGroupListResponse:
    return await customer_list_service.get_customers_by_zip_code(db)


@router.get(
    "/GetAllCustomerList",
    response_model=CustomerListResponse,
    responses=AUTH_ERRORS,
    summary="Every customer with their address (Admin only)",
)
async def get_all_customer_list(
    response: Response,
    current_user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db_session),
) -> CustomerListResponse:
    result = await customer_list_service.get_all_customers_and_addresses(db)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result
