"""JWT helpers shared with the account service."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from digest_api.config import get_settings

settings = get_settings()


def create_access_token(username: str, expires_delta: timedelta | None = None) -> str:
    """Sign a token for ``username``; used by tooling and tests."""

    expire = datetime.now(tz=timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode(
        {"sub": username, "exp": expire},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
