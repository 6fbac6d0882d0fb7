"""JWT authentication provider.

Accepts Supabase-issued access tokens (ES256, verified against the project's
JWKS) and locally signed HS256 tokens used by tests and local tooling.
The user id, email and display name come from these claims::

    {"sub": "<uuid>", "email": "...", "user_metadata": {"display_name": "..."}}
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


class JWKSCache:
    """Supabase signing keys indexed by ``kid``, fetched lazily.

    An unknown ``kid`` forces one refetch so rotated keys are picked up.
    """

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = timeout
        self._keys: dict[str, dict[str, Any]] | None = None

    async def get(self, kid: str) -> dict[str, Any] | None:
        if self._keys is None:
            self._keys = await self._fetch()
        key = self._keys.get(kid)
        if key is None:
            self._keys = await self._fetch()
            key = self._keys.get(kid)
        return key

    def clear(self) -> None:
        self._keys = None

    async def _fetch(self) -> dict[str, dict[str, Any]]:
        if not self._url:
            return {}
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self._url, timeout=self._timeout)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("jwks_fetch_failed", url=self._url, error=str(exc))
            return {}

        keys = {k["kid"]: k for k in response.json().get("keys", []) if k.get("kid")}
        logger.info("jwks_fetched", url=self._url, keys=len(keys))
        return keys


_jwks = JWKSCache(settings.supabase_jwks_url)


def _display_name(payload: dict[str, Any]) -> Optional[str]:
    metadata = payload.get("user_metadata") or {}
    return (
        metadata.get("display_name")
        or metadata.get("name")
        or metadata.get("full_name")
        or payload.get("name")
    )


class JWTAuthProvider:
    """JWT-based authentication provider."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        jwks: JWKSCache | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks = jwks or _jwks

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Validate a JWT and extract the user.

        The signing algorithm is read from the token header: ES256 tokens are
        checked against JWKS, anything else against the shared secret with
        the configured algorithm.

        Returns:
            TokenUser if valid, None if invalid, expired or missing claims
        """
        try:
            header = jwt.get_unverified_header(token)
            if header.get("alg") == "ES256":
                payload = await self._decode_es256(token, header.get("kid"))
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError as exc:
            logger.debug("token_rejected", reason=str(exc))
            return None

        if payload is None:
            return None

        subject = payload.get("sub")
        email = payload.get("email")
        if not subject or not email:
            return None

        try:
            user_id = UUID(subject)
        except ValueError:
            return None

        return TokenUser(
            id=user_id,
            email=email,
            display_name=_display_name(payload),
            role=payload.get("role"),
        )

    async def _decode_es256(self, token: str, kid: str | None) -> Optional[dict[str, Any]]:
        if not kid:
            return None
        key_data = await self._jwks.get(kid)
        if key_data is None:
            logger.warning("jwks_key_not_found", kid=kid)
            return None
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            ECKey(key_data, algorithm="ES256"),
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """Create an HS256 token shaped like a Supabase access token."""
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": user.role or "authenticated",
            "exp": datetime.utcnow() + timedelta(minutes=self._expire_minutes),
            "user_metadata": {"display_name": user.display_name},
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
