"""
Customer Details Backend — Customer Request/Response Schemas
==============================================================

What:  Pydantic models defining the customer API contract.
Why:   Input validation, serialization and OpenAPI generation, kept separate
       from the SQLAlchemy models so the wire format can evolve on its own.

Wire format:
    Fields are declared in snake_case and exposed in camelCase
    (`eyeColor`, `zipCode`, `totalCount`), the casing existing
    API clients of this service already consume. Request bodies accept
    either spelling.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AddressResponse(CamelModel):
    id: str
    house_number: Optional[int] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class CustomerResponse(CamelModel):
    """
    What:  Full customer record with its address.
    Who:   Items of SearchUser, GetCustomerListByZipCode and GetAllCustomerList.
    """
    id: str
    index: Optional[int] = None
    age: Optional[int] = None
    eye_color: Optional[str] = None
    name: Optional[str] = None
    gender: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    about: Optional[str] = None
    registered: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    tags: Optional[List[str]] = None
    address: Optional[AddressResponse] = None


class CustomerListResponse(CamelModel):
    """Returned by GetAllCustomerList; total_count mirrors X-Total-Count."""
    customers: List[CustomerResponse]
    total_count: int


class ZipCodeGroup(CamelModel):
    """
    What:  Customers sharing one zip code.
    Why:   zip_code is null for the group of customers with no address
           or no zip code on their address; that group is always last.
    """
    zip_code: Optional[str] = None
    customer_count: int
    customers: List[CustomerResponse]


class ZipCodeGroupListResponse(CamelModel):
    groups: List[ZipCodeGroup]
    total_count: int = Field(description="Number of customers across all groups")


class MessageResponse(CamelModel):
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AddressUpdateRequest(CamelModel):
    house_number: Optional[int] = Field(default=None, ge=0)
    street: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=255)
    state: Optional[str] = Field(default=None, max_length=100)
    zip_code: Optional[str] = Field(default=None, max_length=20)


class UserUpdateRequest(CamelModel):
    """
    What:  Body of PUT EditUser/{id}.
    How:   Partial update: only the fields present in the JSON body are
           written (the service uses exclude_unset). Sending a field as
           null clears it.
    """
    age: Optional[int] = Field(default=None, ge=0, le=150)
    eye_color: Optional[str] = Field(default=None, max_length=50)
    name: Optional[str] = Field(default=None, max_length=255)
    gender: Optional[str] = Field(default=None, max_length=50)
    company: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    about: Optional[str] = None
    registered: Optional[str] = Field(default=None, max_length=64)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    tags: Optional[List[str]] = None
    address: Optional[AddressUpdateRequest] = None
