"""Caller identity resolution against the external identity provider.

Session mechanics (sign-in, refresh, sign-out) belong to the identity
provider. This module only turns the access token carried by a request into
the caller's user identifier:

- Token source: ``Authorization: Bearer <token>`` header, else the session
  cookie named by SESSION_COOKIE_NAME
- Validation: ``GET {IDENTITY_PROVIDER_URL}/auth/v1/user`` with the token
- Result: the ``id`` field of the returned user object

Usage:
    @router.get("/notes")
    async def list_notes(user_id: str = Depends(get_current_user_id)):
        ...
"""

import httpx
import structlog
from fastapi import Request

from planner.config import get_session_cookie_name
from planner.exceptions import ConfigurationError, Unauthorized, UpstreamError

log = structlog.get_logger(__name__)


class IdentityProviderClient:
    """Validates access tokens with the identity provider.

    Args:
        base_url: Provider base URL, without trailing slash.
        api_key: Public key sent in the ``apikey`` header.
        http_client: Optional pre-built httpx client.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = http_client or httpx.AsyncClient(timeout=10.0)

    def _get_headers(self, access_token: str) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {access_token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    async def get_user_id(self, access_token: str) -> str | None:
        """Resolve the user owning ``access_token``.

        Returns:
            User identifier, or None when the provider rejects the token.

        Raises:
            UpstreamError: Provider unreachable or answering with a server error.
        """
        try:
            response = await self.client.get(
                f"{self.base_url}/auth/v1/user",
                headers=self._get_headers(access_token),
            )
        except httpx.HTTPError as e:
            log.error("identity_provider_unreachable", error_type=type(e).__name__)
            raise UpstreamError("Identity provider unavailable") from e

        if response.status_code in (400, 401, 403, 404):
            return None
        if response.status_code >= 400:
            log.error("identity_provider_error", status_code=response.status_code)
            raise UpstreamError("Identity provider unavailable")

        user_id = response.json().get("id")
        return str(user_id) if user_id else None

    async def close(self) -> None:
        """Close the underlying HTTP connections."""
        await self.client.aclose()


def extract_access_token(request: Request) -> str | None:
    """Read the access token from the Authorization header or session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    cookie_token = request.cookies.get(get_session_cookie_name())
    return cookie_token or None


async def get_current_user_id(request: Request) -> str:
    """FastAPI dependency returning the authenticated caller's identifier.

    Raises:
        Unauthorized: No token, or the provider rejected it. No datastore
            access happens before this check.
        ConfigurationError: Identity provider not configured.
    """
    token = extract_access_token(request)
    if not token:
        raise Unauthorized()

    identity_client: IdentityProviderClient | None = getattr(
        request.app.state, "identity_client", None
    )
    if identity_client is None:
        raise ConfigurationError("Identity provider not configured")

    user_id = await identity_client.get_user_id(token)
    if not user_id:
        log.info("session_rejected", path=request.url.path)
        raise Unauthorized()
    return user_id
