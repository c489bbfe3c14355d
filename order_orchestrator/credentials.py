"""Short-lived service credential for calls to the order service."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from order_orchestrator.exceptions import ConfigurationError

ALGORITHM = "HS256"
SUBJECT = "lambda-orchestrator"
ROLE = "service"
AUDIENCE = "orders-api"
EXPIRES_MINUTES = 5


def issue_service_token(secret: str, now: Optional[datetime] = None) -> str:
    """Mint a signed token scoped to the order service, valid for five minutes.

    Stateless: the same secret and `now` always produce the same token. The
    token is a bearer credential and must not be logged.
    """
    if not isinstance(secret, str) or not secret.strip():
        raise ConfigurationError("JWT_SECRET is missing or malformed", missing=["JWT_SECRET"])

    now = now or datetime.now(timezone.utc)
    exp = now + timedelta(minutes=EXPIRES_MINUTES)
    payload = {
        "sub": SUBJECT,
        "role": ROLE,
        "aud": AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    try:
        return jwt.encode(payload, secret, algorithm=ALGORITHM)
    except JWTError as e:
        raise ConfigurationError("JWT_SECRET is missing or malformed", missing=["JWT_SECRET"]) from e

