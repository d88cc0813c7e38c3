"""
Validate access tokens issued by the hosted auth provider and extract the
caller's user id.

The provider signs session tokens with a shared HS256 secret. Before trusting
any claim we check:

1. the signature (shared secret),
2. the audience (`aud`, "authenticated" by default),
3. expiry / not-before, with a small leeway for clock skew.

Only then is `sub` read as the user id. Roles are *not* taken from the
token: the profile table is the source of truth for who is an admin.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import jwt

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Raised when token validation fails. Do not log the token."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str | None = None


def _extract_claims(payload: dict[str, Any]) -> TokenClaims:
    raw_sub = payload.get("sub")
    if raw_sub is None or raw_sub == "":
        raise TokenError("Invalid token: missing subject")
    try:
        user_id = int(raw_sub)
    except (TypeError, ValueError) as exc:
        raise TokenError("Invalid token: subject is not a user id") from exc

    email = payload.get("email")
    return TokenClaims(user_id=user_id, email=str(email) if email is not None else None)


class SessionTokenValidator:
    def __init__(self, secret: str, audience: str = "authenticated", leeway_seconds: int = 30) -> None:
        if not secret:
            raise ValueError("A JWT secret is required for the 'jwt' auth provider")
        self._secret = secret
        self._audience = audience
        self._leeway = leeway_seconds

    def validate(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                audience=self._audience,
                leeway=self._leeway,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise TokenError("Token expired") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise TokenError("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise TokenError("Invalid token") from e

        return _extract_claims(payload)
