"""Authentication routes, token handling and the request auth gate."""

import logging
import secrets
import time
from datetime import timedelta

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import APIKeyHeader
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from passlib.context import CryptContext
from redis.exceptions import NoScriptError, RedisError
from sqlalchemy.orm import Session

from . import schemas, crud
from .core import get_settings
from .database import get_db
from .errors import Unauthorized
from .models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
token_header = APIKeyHeader(name=get_settings().TOKEN_HEADER, auto_error=False)
router = APIRouter(prefix="/api/auth", tags=["auth"])

#: Lifetime of an issued token. Fixed, not a setting.
TOKEN_TTL = timedelta(days=30)

LOGIN_FAILED = "Username or Password wrong"


class PathRateLimiter(RateLimiter):
    """
    RateLimiter keyed by request method and path.

    The stock limiter locates its route by scanning ``app.routes`` for a
    ``path`` attribute, which included routers do not have.
    """

    async def __call__(self, request: Request, response: Response):
        identifier = self.identifier or FastAPILimiter.identifier
        callback = self.callback or FastAPILimiter.http_callback
        rate_key = await identifier(request)
        key = (
            f"{FastAPILimiter.prefix}:{rate_key}:"
            f"{request.method}:{request.scope['path']}"
        )
        try:
            pexpire = await self._check(key)
        except NoScriptError:
            FastAPILimiter.lua_sha = await FastAPILimiter.redis.script_load(
                FastAPILimiter.lua_script
            )
            pexpire = await self._check(key)
        if pexpire != 0:
            return await callback(request, response, pexpire)

    async def _check(self, key: str) -> int:
        return await FastAPILimiter.redis.evalsha(
            FastAPILimiter.lua_sha, 1, key, str(self.times), str(self.milliseconds)
        )


_limiter = PathRateLimiter(
    times=get_settings().RATE_LIMIT_TIMES,
    seconds=get_settings().RATE_LIMIT_SECONDS,
)


async def start_rate_limiter(redis_client) -> bool:
    """
    Initialise the shared limiter on ``redis_client``.

    Returns:
        bool: ``False`` when Redis is unreachable; the limiter is then
        left uninitialised and ``rate_limit`` lets every request through.
    """
    try:
        await FastAPILimiter.init(redis_client)
    except RedisError as exc:
        logger.warning("Rate limiting disabled, Redis unavailable: %s", exc)
        FastAPILimiter.redis = None
        return False
    return True


def stop_rate_limiter() -> None:
    FastAPILimiter.redis = None


async def rate_limit(request: Request, response: Response):
    """
    Apply the shared rate limiter when it has been initialised.

    The limiter is only initialised at startup when rate limiting is
    enabled and Redis is reachable; otherwise this dependency is a no-op.
    Redis failures after startup let the request through as well.
    """
    if getattr(FastAPILimiter, "redis", None) is None:
        return
    try:
        await _limiter(request, response)
    except RedisError as exc:
        logger.warning("Rate limit check skipped: %s", exc)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a password hash using the configured context."""
    return pwd_context.hash(password)


def now_millis() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_token() -> str:
    """Return a fresh opaque token with 256 bits of entropy."""
    return secrets.token_urlsafe(32)


def token_expiry(now: int | None = None) -> int:
    """Expiry, in epoch milliseconds, of a token issued at ``now``."""
    issued_at = now_millis() if now is None else now
    return issued_at + int(TOKEN_TTL.total_seconds() * 1000)


def login(db: Session, username: str, password: str) -> schemas.TokenResponse:
    """
    Check credentials and issue a new token, replacing any previous one.

    Args:
        db (Session): Database session.
        username (str): Username.
        password (str): Plain password.

    Raises:
        Unauthorized: With the same message whether the username is
            unknown or the password is wrong.

    Returns:
        TokenResponse: The new token and its expiry.
    """
    user = crud.get_user_by_username(db, username)
    if user is None:
        pwd_context.dummy_verify()
    if user is None or not verify_password(password, user.password):
        logger.warning("Failed login attempt")
        raise Unauthorized(LOGIN_FAILED)

    user = crud.set_user_token(db, user, generate_token(), token_expiry())
    logger.info("User %s logged in", user.username)
    return schemas.TokenResponse(token=user.token, expired_at=user.token_expired_at)


def logout(db: Session, user: User) -> None:
    """Clear the user's token. Safe to call when already logged out."""
    crud.set_user_token(db, user, None, None)
    logger.info("User %s logged out", user.username)


def verify_token(db: Session, token: str, now: int | None = None) -> User:
    """
    Resolve the user holding ``token``.

    Expired tokens are rejected exactly like unknown ones and are left in
    place; only logout or a new login replaces them.

    Args:
        db (Session): Database session.
        token (str): Token presented by the caller.
        now (int | None): Current epoch millis, for tests.

    Raises:
        Unauthorized: If no user holds the token or it has expired.

    Returns:
        User: The authenticated user.
    """
    user = crud.get_user_by_token(db, token)
    if user is None or user.token_expired_at is None:
        raise Unauthorized()
    current = now_millis() if now is None else now
    if user.token_expired_at <= current:
        raise Unauthorized()
    return user


def get_current_user(
    token: str | None = Depends(token_header), db: Session = Depends(get_db)
) -> User:
    """
    Dependency resolving the caller from the token header.

    Every protected route takes its user from here. A missing header and
    an invalid or expired token fail the same way.
    """
    if not token:
        raise Unauthorized()
    return verify_token(db, token)


@router.post(
    "/login",
    response_model=schemas.WebResponse[schemas.TokenResponse],
    dependencies=[Depends(rate_limit)],
)
def login_user(payload: schemas.LoginUserRequest, db: Session = Depends(get_db)):
    """Authenticate user and return a new API token."""

    return {"data": login(db, payload.username, payload.password)}


@router.delete("/logout", response_model=schemas.WebResponse[str])
def logout_user(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Invalidate the caller's token."""

    logout(db, current_user)
    return {"data": "OK"}
