"""
Customer Details Backend — API Versioning
===========================================

What:  Resolves and validates the API version of a request.
How:   The same router is mounted twice in main.py:
           /api/User/<Action>             query_api_version: ?api-version=, default 1.0
           /api/User/v{version}/<Action>  path_api_version: version from the path

Accepted spellings: "1" and "1.0", optionally prefixed with "v". Every
successful response advertises the served versions in the
`api-supported-versions` header.
"""

from typing import Optional

from fastapi import Path, Query, Response

from app.exceptions import UnsupportedApiVersionError

DEFAULT_API_VERSION = "1.0"
SUPPORTED_API_VERSIONS = ("1.0",)
SUPPORTED_VERSIONS_HEADER = "api-supported-versions"


def normalize_api_version(raw: str) -> Optional[str]:
    """'v1' → '1.0', '1.0' → '1.0', 'abc' → None."""
    value = raw.strip().lower()
    if value.startswith("v"):
        value = value[1:]
    parts = value.split(".")
    if not 1 <= len(parts) <= 2 or not all(part.isdigit() for part in parts):
        return None
    major = int(parts[0])
    minor = int(parts[1]) if len(parts) == 2 else 0
    return f"{major}.{minor}"


def resolve_api_version(requested: Optional[str], response: Response) -> str:
    response.headers[SUPPORTED_VERSIONS_HEADER] = ", ".join(SUPPORTED_API_VERSIONS)
    if requested is None:
        return DEFAULT_API_VERSION

    version = normalize_api_version(requested)
    if version not in SUPPORTED_API_VERSIONS:
        raise UnsupportedApiVersionError(requested=requested, supported=SUPPORTED_API_VERSIONS)
    return version


async def query_api_version(
    response: Response,
    requested: Optional[str] = Query(default=None, alias="api-version", include_in_schema=False),
) -> str:
    return resolve_api_version(requested, response)


async def path_api_version(
    response: Response,
    version: str = Path(..., description="API version, e.g. 1.0"),
) -> str:
    return resolve_api_version(version, response)
