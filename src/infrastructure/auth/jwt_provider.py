"""JWT authentication provider.

Accepts Supabase session tokens (ES256, verified against the project's JWKS)
and locally issued HS256 tokens used by tests and scripts. The claims read are
``sub``, ``email``, ``role`` and ``user_metadata`` (display name and
preferred language).
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()

# kid -> JWK, fetched lazily and refreshed when an unknown kid shows up
_jwks_cache: dict[str, Any] | None = None


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch and cache the Supabase JWKS as a kid -> key mapping."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            keys = response.json().get("keys", [])
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("jwks_fetch_failed", url=jwks_url, error=str(exc))
        return {}

    _jwks_cache = {key["kid"]: key for key in keys if key.get("kid")}
    logger.info("jwks_fetched", key_count=len(_jwks_cache))
    return _jwks_cache


def _user_from_claims(payload: dict[str, Any]) -> Optional[TokenUser]:
    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        return None

    metadata = payload.get("user_metadata") or {}
    display_name = (
        metadata.get("display_name")
        or metadata.get("name")
        or metadata.get("full_name")
        or payload.get("name")
    )
    return TokenUser(
        id=UUID(user_id),
        email=email,
        display_name=display_name,
        role=payload.get("role"),
        preferred_language=metadata.get("preferred_language") or "en",
    )


class JWTAuthProvider:
    """JWT-based implementation of IAuthProvider."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Validate a bearer token.

        The signing algorithm is taken from the token header: ES256 goes
        through JWKS, anything else is checked against the shared secret.

        Returns:
            The token's user, or None if the token is invalid, expired or
            lacks the ``sub``/``email`` claims.
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg", self._algorithm) == "ES256":
                payload = await self._decode_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except (JWTError, ValueError):
            return None

        if payload is None:
            return None
        try:
            return _user_from_claims(payload)
        except ValueError:
            return None

    async def _decode_es256(self, token: str, header: dict[str, Any]) -> Optional[dict[str, Any]]:
        global _jwks_cache
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            # Unknown kid: the project may have rotated its signing key
            _jwks_cache = None
            key_data = (await _get_jwks_keys()).get(kid)
        if not key_data:
            logger.warning("jwks_key_not_found", kid=kid)
            return None

        return jwt.decode(  # type: ignore[no-any-return]
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """Issue an HS256 token for ``user`` (tests and local tooling)."""
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {
                "display_name": user.display_name,
                "preferred_language": user.preferred_language,
            },
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)  # type: ignore[no-any-return]
