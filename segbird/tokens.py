"""segbird/tokens.py
Signed, short-lived bearer tokens carrying an event payload.

The payload travels as the JWT claims themselves, next to the registered
`iat` / `exp` claims added on signing. Verification strips those two again so
the subscriber receives exactly what the publisher sent.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt import api_jws

from segbird.errors import TokenVerificationError

ALGORITHM = "HS256"
RESERVED_CLAIMS = ("iat", "exp")

# Only the signature and expiry are checked; any other registered claim name
# (aud, iss, sub, jti, nbf) is ordinary payload data here, and iat is not
# compared with the local clock.
DECODE_OPTIONS = {
    "require": list(RESERVED_CLAIMS),
    "verify_signature": True,
    "verify_exp": True,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def sign_token(
    data: Mapping[str, Any],
    secret: str,
    ttl_seconds: int,
    *,
    now: datetime | None = None,
) -> str:
    """Return an HS256 JWT over *data* that expires *ttl_seconds* after *now*."""
    if not isinstance(data, Mapping):
        raise TypeError(f"Event payload must be a mapping, not {type(data).__name__}.")
    clashing = [claim for claim in RESERVED_CLAIMS if claim in data]
    if clashing:
        raise ValueError(f"Event payload must not set the reserved claims {clashing}.")

    issued_at = now or datetime.now(tz=timezone.utc)
    claims = {
        **data,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(seconds=ttl_seconds)).timestamp()),
    }
    # signed as raw JWS so registered claim names in *data* are not type-checked
    payload = json.dumps(claims, separators=(",", ":")).encode("utf-8")
    return api_jws.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str | None, secret: str) -> dict[str, Any]:
    """Verify *token* and return the payload it was signed over."""
    if not token:
        raise TokenVerificationError("jwt must be provided")
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options=DECODE_OPTIONS,
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenVerificationError("jwt expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenVerificationError(str(exc) or "invalid token") from exc

    for claim in RESERVED_CLAIMS:
        claims.pop(claim, None)
    return claims


def bearer_token(header_value: str | None) -> str | None:
    """Accept both `Authorization: <token>` and `Authorization: Bearer <token>`."""
    if not header_value:
        return None
    value = header_value.strip()
    scheme, _, token = value.partition(" ")
    if scheme.lower() == "bearer":
        value = token.strip()
    return value or None
