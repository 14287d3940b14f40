"""Caller identity from optional bearer tokens.

Anonymous callers are allowed everywhere. A bearer token, when sent, must
verify; the caller's id only ever narrows or widens visibility filters and
selects the credentials used for store lookups.
"""

from dataclasses import dataclass

from jose import JWTError, jwt

ANON_ROLE = "anon"
SERVICE_ROLE = "service_role"


class AuthenticationError(Exception):
    """Raised when a supplied bearer token cannot be verified."""

    pass


@dataclass(frozen=True)
class Actor:
    """Verified caller.

    Attributes:
        id: Subject claim, None for role-only tokens (e.g. service_role)
        role: Role claim
        token: Raw bearer token, forwarded to the store
    """

    id: str | None
    role: str = "authenticated"
    token: str | None = None


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthenticationError: If the header is present but malformed
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header must use the Bearer scheme")
    return token.strip()


def decode_actor(
    token: str | None,
    secret: str | None,
    algorithm: str = "HS256",
    audience: str | None = None,
) -> Actor | None:
    """Verify a bearer token and build the caller.

    Args:
        token: Raw bearer token, None for anonymous callers
        secret: Verification secret
        algorithm: Signing algorithm
        audience: Expected audience, empty or None to skip the check

    Returns:
        Actor, or None for anonymous callers and anon-role tokens

    Raises:
        AuthenticationError: If the token does not verify
    """
    if token is None:
        return None
    if not secret:
        raise AuthenticationError("Token verification is not configured")

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience or None,
            options={"verify_aud": bool(audience)},
        )
    except JWTError as e:
        raise AuthenticationError(f"Authorization token is invalid: {e}") from e

    role = claims.get("role") or "authenticated"
    if role == ANON_ROLE:
        return None
    subject = claims.get("sub")
    return Actor(id=str(subject) if subject else None, role=role, token=token)


def store_headers(
    actor: Actor | None,
    service_key: str | None = None,
    language: str | None = None,
) -> dict[str, str]:
    """Per-request store headers.

    Service callers use the service key, other authenticated callers
    forward their own token so the store's row-level security applies, and
    anonymous callers keep the store client's default (anon) credentials.
    """
    headers: dict[str, str] = {}
    if actor is not None:
        if actor.role == SERVICE_ROLE and service_key:
            headers["apikey"] = service_key
            headers["Authorization"] = f"Bearer {service_key}"
        elif actor.token:
            headers["Authorization"] = f"Bearer {actor.token}"
    if language:
        headers["language"] = language
    return headers
