from jose import JWTError, jwt
import logging
import secrets
import time

from resonance.core import config

logger = logging.getLogger("resonance.auth")

IDENTITY_TOKEN_ALGORITHM = "HS256"
_IDENTITY_PREFIX = "user_"

_process_secret = ""


def _signing_secret() -> str:
    global _process_secret
    if config.IDENTITY_TOKEN_SECRET:
        return config.IDENTITY_TOKEN_SECRET
    if not _process_secret:
        _process_secret = secrets.token_urlsafe(32)
        logger.warning("IDENTITY_TOKEN_SECRET is not configured; identity tokens will not survive a restart")
    return _process_secret


def new_identity() -> str:
    return _IDENTITY_PREFIX + secrets.token_hex(6)


def issue_identity_token(identity: str) -> str:
    claims = {
        "sub": str(identity),
        "iat": int(time.time()),
    }
    return jwt.encode(claims, _signing_secret(), algorithm=IDENTITY_TOKEN_ALGORITHM)


def resolve_identity_from_token(token: str) -> str | None:
    """Return the identity a previously issued token names, or None if it is not ours."""
    if not str(token or "").strip():
        return None
    try:
        payload = jwt.decode(token, _signing_secret(), algorithms=[IDENTITY_TOKEN_ALGORITHM])
    except JWTError as exc:
        logger.warning("Identity token rejected | err=%s", exc)
        return None

    identity = str((payload or {}).get("sub") or "").strip()
    return identity or None


def resolve_identity(token: str | None) -> tuple[str, bool]:
    """(identity, reused). Falls back to a fresh identity when the token is missing or invalid."""
    identity = resolve_identity_from_token(token or "")
    if identity:
        return identity, True
    return new_identity(), False
