"""API-key authentication: every key acts for exactly one user."""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.db.models import ApiKey
from speechpro.db.session import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def generate_api_key() -> tuple[str, str]:
    """Return a fresh `ask_` key and the 12-character prefix it is indexed by."""
    full_key = f"ask_{secrets.token_hex(16)}"
    return full_key, full_key[:12]


def hash_api_key(api_key: str) -> str:
    """bcrypt hash stored in place of the key."""
    return pwd_context.hash(api_key)


def verify_api_key(plain_key: str, hashed_key: str) -> bool:
    return pwd_context.verify(plain_key, hashed_key)


def is_expired(api_key: ApiKey) -> bool:
    """Check expiry; naive timestamps (SQLite) are read as UTC."""
    if api_key.expires_at is None:
        return False
    expires_at = api_key.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)


async def get_api_key_from_db(
    db: AsyncSession, key_prefix: str, full_key: str
) -> Optional[ApiKey]:
    """
    Find the active, unexpired key row matching a presented key.

    Prefixes are not unique, so every candidate sharing one is checked
    against its hash.
    """
    result = await db.execute(
        select(ApiKey).where(
            ApiKey.key_prefix == key_prefix,
            ApiKey.is_active == True,  # noqa: E712
        )
    )
    for api_key in result.scalars().all():
        if is_expired(api_key):
            continue
        if verify_api_key(full_key, api_key.key_hash):
            return api_key

    return None


def presented_key(authorization: Optional[str], x_api_key: Optional[str]) -> str:
    """Pull a well-formed key from the Bearer or X-API-Key header, else 401."""
    if authorization:
        scheme, _, key = authorization.partition(" ")
        if scheme != "Bearer" or not key:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authorization scheme. Use 'Bearer <api_key>'",
            )
    elif x_api_key:
        key = x_api_key
    else:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Send 'Authorization: Bearer <key>' or 'X-API-Key'",
        )

    if not key.startswith("ask_") or len(key) != 36:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key format",
        )
    return key


class AuthenticatedApiKey:
    """
    Resolves the caller's key and, through it, the user whose records the
    request reads or writes. Every listed scope must be granted.
    """

    def __init__(self, required_scopes: Optional[list[str]] = None):
        self.required_scopes = set(required_scopes or [])

    async def __call__(
        self,
        request: Request,
        authorization: Optional[str] = Header(None),
        x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
        db: AsyncSession = Depends(get_db),
    ) -> ApiKey:
        presented = presented_key(authorization, x_api_key)
        api_key = await get_api_key_from_db(db, presented[:12], presented)

        if api_key is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid or expired API key",
            )

        missing = self.required_scopes - set(api_key.scopes or [])
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"API key for {api_key.user_id} lacks scope(s): {sorted(missing)}",
            )

        # Read by the rate limiter key function
        request.state.api_key = api_key
        return api_key


require_read_scope = AuthenticatedApiKey(required_scopes=["read"])
require_write_scope = AuthenticatedApiKey(required_scopes=["write"])


async def create_api_key(
    db: AsyncSession,
    name: str,
    user_id: str,
    scopes: list[str],
    rate_limit_per_minute: int = 60,
    expires_in_days: Optional[int] = None,
) -> tuple[ApiKey, str]:
    """
    Issue a key for `user_id`.

    Only the hash is stored; the returned plaintext key cannot be recovered
    later. The row is flushed, not committed.
    """
    full_key, prefix = generate_api_key()
    hashed = hash_api_key(full_key)

    expires_at = None
    if expires_in_days:
        expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)

    api_key = ApiKey(
        key_hash=hashed,
        key_prefix=prefix,
        name=name,
        user_id=user_id,
        scopes=scopes,
        rate_limit_per_minute=rate_limit_per_minute,
        expires_at=expires_at,
    )

    db.add(api_key)
    await db.flush()
    await db.refresh(api_key)

    return api_key, full_key
