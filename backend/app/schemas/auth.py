"""
Customer Details Backend — Authentication Schemas
===================================================

What:  Login request/response contract.
Why:   `access_token` is the field name existing clients read, so it is
       kept verbatim; token_type and expires_in follow the OAuth2 bearer
       response shape.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str = Field(description="Signed JWT to send as 'Authorization: Bearer <token>'")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(description="Token lifetime in seconds")
