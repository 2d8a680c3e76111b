"""
Customer Details Backend — Seed Service
=========================================

What:  Provisions roles, the bootstrap admin account and customer data.
Why:   A fresh database has no accounts to log in with and no customers.
How:   Idempotent inserts: roles and accounts are created only when absent,
       customers only when their id is not stored yet, so running the seed
       on every startup is safe.
Who:   The application lifespan (main.py) and the `python -m app.seed` command.

Customer document format (JSON array, camelCase keys):
    {
        "_id": "5f1d7f3e9c1b2a0017a1b2c3",
        "index": 0,
        "age": 31,
        "eyeColor": "brown",
        "name": "Ayala Blake",
        "gender": "female",
        "company": "ZILLAN",
        "email": "ayalablake@zillan.com",
        "phone": "+1 (845) 512-3921",
        "about": "...",
        "registered": "2016-02-12T05:13:51 -01:00",
        "latitude": -38.41,
        "longitude": 151.52,
        "tags": ["irure", "ad"],
        "address": {"houseNumber": 914, "street": "Bath Avenue",
                    "city": "Glenshaw", "state": "Ohio", "zipCode": "2583"}
    }
"""

import json
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

import aiofiles
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ValidationError
from app.models.customer import AddressData, UserData
from app.models.identity import (
    DEFAULT_ROLES,
    IdentityRole,
    IdentityUser,
    normalize_name,
)
from app.services.password_service import PasswordService, password_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Document mapping
# ══════════════════════════════════════════════════════════════════════════

def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def address_from_document(document: Any) -> Optional[AddressData]:
    """Build an AddressData from an address object; a bare string becomes the street."""
    if document is None:
        return None
    if isinstance(document, str):
        return AddressData(id=str(uuid.uuid4()), street=document)
    if not isinstance(document, dict):
        raise ValueError("address must be an object or a string")

    return AddressData(
        id=str(document.get("id") or document.get("_id") or uuid.uuid4()),
        house_number=_optional_int(document.get("houseNumber")),
        street=_optional_str(document.get("street")),
        city=_optional_str(document.get("city")),
        state=_optional_str(document.get("state")),
        zip_code=_optional_str(document.get("zipCode")),
    )


def customer_from_document(document: Dict[str, Any]) -> Tuple[UserData, Optional[AddressData]]:
    """
    Map one customer document to a UserData and its AddressData.

    The customer's address_id already points at the returned address;
    the caller decides whether the address row itself is new.

    Raises:
        ValueError: no id, or a field with an unusable type
    """
    customer_id = document.get("_id") or document.get("id")
    if not customer_id:
        raise ValueError("customer document has no '_id' or 'id'")

    tags = document.get("tags")
    if tags is not None and not isinstance(tags, list):
        raise ValueError("tags must be a list")

    customer = UserData(
        id=str(customer_id),
        index=_optional_int(document.get("index")),
        age=_optional_int(document.get("age")),
        eye_color=_optional_str(document.get("eyeColor")),
        name=_optional_str(document.get("name")),
        gender=_optional_str(document.get("gender")),
        company=_optional_str(document.get("company")),
        email=_optional_str(document.get("email")),
        phone=_optional_str(document.get("phone")),
        about=_optional_str(document.get("about")),
        registered=_optional_str(document.get("registered")),
        latitude=_optional_float(document.get("latitude")),
        longitude=_optional_float(document.get("longitude")),
        tags=[str(tag) for tag in tags] if tags is not None else None,
    )
    address = address_from_document(document.get("address"))
    if address is not None:
        customer.address_id = address.id
    return customer, address


# ══════════════════════════════════════════════════════════════════════════
# Seed Service
# ══════════════════════════════════════════════════════════════════════════

class SeedService:

    def __init__(self, passwords: PasswordService):
        self.passwords = passwords

    async def ensure_roles(self, db: AsyncSession) -> List[IdentityRole]:
        """Create the Admin and Client roles if missing; return all default roles."""
        result = await db.execute(select(IdentityRole))
        existing = {role.normalized_name: role for role in result.scalars().all()}

        roles = []
        for name in DEFAULT_ROLES:
            role = existing.get(normalize_name(name))
            if role is None:
                role = IdentityRole(name=name, normalized_name=normalize_name(name))
                db.add(role)
                logger.info("Created role %s", name)
            roles.append(role)
        await db.flush()
        return roles

    async def ensure_account(
        self,
        db: AsyncSession,
        username: str,
        password: str,
        role: str,
        email: Optional[str] = None,
    ) -> Tuple[IdentityUser, bool]:
        """
        Create an account with one role unless the username is taken.

        Returns:
            (account, created): the existing account is returned untouched
            (password and roles are not reset) with created=False.

        Raises:
            ValidationError: blank username/password, or unknown role
        """
        if not username.strip() or not password:
            raise ValidationError(message="Username and password are required")

        result = await db.execute(
            select(IdentityUser).where(IdentityUser.normalized_username == normalize_name(username))
        )
        account = result.scalar_one_or_none()
        if account is not None:
            return account, False

        result = await db.execute(
            select(IdentityRole).where(IdentityRole.normalized_name == normalize_name(role))
        )
        identity_role = result.scalar_one_or_none()
        if identity_role is None:
            raise ValidationError(message=f"Role '{role}' does not exist", field="role")

        account = IdentityUser(
            username=username.strip(),
            normalized_username=normalize_name(username),
            email=email,
            password_hash=self.passwords.hash_password(password),
            roles=[identity_role],
        )
        db.add(account)
        await db.flush()
        logger.info("Created account %s with role %s", account.username, identity_role.name)
        return account, True

    async def read_customer_documents(self, path: str) -> List[Dict[str, Any]]:
        """
        Read a JSON array of customer documents without blocking the event loop.

        Raises:
            ValidationError: unreadable file, invalid JSON, or not an array of objects
        """
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            raise ValidationError(
                message=f"Could not read seed file '{path}'",
                context={"os_error": str(e)},
            )

        try:
            documents = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(
                message=f"Seed file '{path}' is not valid JSON: {e.msg} (line {e.lineno})",
            )

        if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
            raise ValidationError(message=f"Seed file '{path}' must contain a JSON array of objects")
        return documents

    async def load_customers(self, db: AsyncSession, documents: List[Dict[str, Any]]) -> int:
        """
        Insert customers whose id is not stored yet.

        Returns:
            Number of customers inserted.

        Raises:
            ValidationError: a document cannot be mapped (its position is reported)
        """
        customers = []
        for position, document in enumerate(documents):
            try:
                customers.append(customer_from_document(document))
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    message=f"Customer document #{position} is invalid: {e}",
                    context={"position": position},
                )

        if not customers:
            return 0

        result = await db.execute(
            select(UserData.id).where(UserData.id.in_([c.id for c, _ in customers]))
        )
        existing_ids = set(result.scalars().all())

        result = await db.execute(select(AddressData.id))
        known_address_ids = set(result.scalars().all())

        inserted = 0
        seen_ids = set(existing_ids)
        for customer, address in customers:
            if customer.id in seen_ids:
                continue
            seen_ids.add(customer.id)
            # A shared address already stored is linked through address_id only
            if address is not None and address.id not in known_address_ids:
                known_address_ids.add(address.id)
                customer.address = address
            db.add(customer)
            inserted += 1

        await db.flush()
        logger.info(
            "Imported %d customers (%d already present)",
            inserted,
            len(customers) - inserted,
        )
        return inserted

    async def load_customers_from_file(self, db: AsyncSession, path: str) -> int:
        documents = await self.read_customer_documents(path)
        return await self.load_customers(db, documents)

    async def seed_database(self, db: AsyncSession, seed_path: Optional[str] = None) -> None:
        """
        Full bootstrap: roles, admin account (when a password is configured),
        then customers from `seed_path`, or from SEED_DATA_PATH when
        `seed_path` is None. An empty string skips the customer import.
        """
        await self.ensure_roles(db)

        if settings.bootstrap_admin_username and settings.bootstrap_admin_password:
            _, created = await self.ensure_account(
                db,
                username=settings.bootstrap_admin_username,
                password=settings.bootstrap_admin_password,
                role="Admin",
            )
            if not created:
                logger.debug("Bootstrap admin %s already exists", settings.bootstrap_admin_username)

        path = settings.seed_data_path if seed_path is None else seed_path
        if path:
            await self.load_customers_from_file(db, path)


seed_service = SeedService(passwords=password_service)
