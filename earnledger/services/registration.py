"""Registration — creates accounts, referral codes and pending referrals.

Invariants:
    - username and email unique -> ConflictError before any insert
    - Every user gets an 8-char uppercase hex referral_code, never changed afterwards
    - A valid referral code creates exactly one pending Referral, in the same
      transaction as the user, with the new user's country
    - An unknown referral code is ignored: the user is created unreferred
    - Passwords stored only as passlib hashes

Design Decisions:
    - pbkdf2_sha256 scheme: pure-python passlib backend, no native bcrypt build
    - Races on unique columns surface as IntegrityError at insert and map to Conflict
"""

import logging
import secrets

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError

from earnledger.core.domain_types import Role, ZERO
from earnledger.core.errors import ConflictError
from earnledger.core.repository_protocols import LedgerStore, UserRecord
from earnledger.infrastructure.database import is_unique_violation

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

REFERRAL_CODE_BYTES = 4
MAX_CODE_ATTEMPTS = 5


def generate_referral_code() -> str:
    return secrets.token_hex(REFERRAL_CODE_BYTES).upper()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


class RegistrationService:
    """Account creation with optional referral attribution."""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def register_user(
        self,
        username: str,
        email: str,
        password: str,
        country: str,
        phone: str,
        referral_code: str | None = None,
        role: Role = Role.USER,
    ) -> UserRecord:
        if await self.store.get_user_by_username(username):
            raise ConflictError("Username already taken", "username")
        if await self.store.get_user_by_email(email):
            raise ConflictError("Email already registered", "email")

        referrer = None
        if referral_code and referral_code.strip():
            referrer = await self.store.get_user_by_referral_code(
                referral_code.strip().upper(),
            )
            if referrer is None:
                logger.info("Unknown referral code ignored at registration")

        code = await self._allocate_referral_code()
        try:
            async with self.store.transaction():
                user = await self.store.add_user(
                    username=username,
                    email=email,
                    password_hash=hash_password(password),
                    country=country,
                    phone=phone,
                    referral_code=code,
                    referred_by=referrer.id if referrer else None,
                    balance_task=ZERO,
                    balance_referral=ZERO,
                    role=role.value,
                    is_active=True,
                )
                if referrer is not None:
                    await self.store.add_referral(referrer.id, user.id, user.country)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise ConflictError(
                    "Username, email or referral code already taken",
                ) from e
            raise

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "referrer_id": referrer.id if referrer else None,
            },
        )
        return user

    async def ensure_admin(
        self, username: str, email: str, password: str, country: str,
    ) -> UserRecord:
        """Create the bootstrap admin once; existing accounts are left untouched."""
        existing = await self.store.get_user_by_username(username)
        if existing is not None:
            return existing
        return await self.register_user(
            username=username, email=email, password=password,
            country=country, phone="", role=Role.ADMIN,
        )

    async def _allocate_referral_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_referral_code()
            if await self.store.get_user_by_referral_code(code) is None:
                return code
        raise ConflictError("Could not allocate a referral code", "referral_code")
