"""Identity-provider token decoding."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from stackit_api.core.errors import Unauthenticated
from stackit_api.core.settings import settings


@dataclass(frozen=True)
class Principal:
    """Identity asserted by the external identity provider for one request."""

    subject: str
    email: str = ""
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None


def _claim(claims: dict[str, Any], *names: str) -> str | None:
    for name in names:
        value = claims.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def decode_identity_token(token: str) -> Principal:
    """Validate a bearer token and return the principal it carries.

    Args:
        token: Encoded JWT issued by the identity provider.

    Returns:
        The decoded principal.

    Raises:
        Unauthenticated: If the token is malformed, expired, has the wrong
            audience/issuer, or carries no subject.
    """
    options = {"verify_aud": settings.identity_audience is not None}
    try:
        claims = jwt.decode(
            token,
            settings.identity_secret_key,
            algorithms=[settings.identity_algorithm],
            audience=settings.identity_audience,
            issuer=settings.identity_issuer,
            options=options,
        )
    except JWTError as err:
        raise Unauthenticated("Could not validate credentials") from err

    subject = _claim(claims, "sub")
    if subject is None:
        raise Unauthenticated("Could not validate credentials")

    return Principal(
        subject=subject,
        email=(_claim(claims, "email") or "").lower(),
        first_name=_claim(claims, "given_name", "first_name"),
        last_name=_claim(claims, "family_name", "last_name"),
        username=_claim(claims, "username", "preferred_username"),
    )
