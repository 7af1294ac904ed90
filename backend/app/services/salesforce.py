"""Salesforce OAuth token provider and the shared HTTP base for vendor clients.

Both the speech API and the agent API authenticate with the same
client-credentials token, so one provider is shared across clients.
"""

import logging
import time
from typing import Optional

import httpx

from app.config import settings
from app.services.errors import UpstreamError

logger = logging.getLogger(__name__)

# Salesforce does not return expires_in for client credentials tokens
DEFAULT_TOKEN_LIFETIME = 30 * 60
TOKEN_REFRESH_MARGIN = 60


class SalesforceTokenProvider:
    def __init__(self, http: Optional[httpx.AsyncClient] = None):
        self._http = http or httpx.AsyncClient(timeout=settings.VENDOR_TIMEOUT_SECONDS)
        self._token: Optional[str] = None
        self._expires_at = 0.0

    def is_configured(self) -> bool:
        return bool(settings.SF_MY_DOMAIN_URL and settings.SF_CLIENT_ID and settings.SF_CLIENT_SECRET)

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def get_token(self) -> str:
        """Return a cached bearer token, fetching a new one when close to expiry."""
        if self._token and time.monotonic() < self._expires_at - TOKEN_REFRESH_MARGIN:
            return self._token

        if not self.is_configured():
            raise UpstreamError(
                "Salesforce authentication not configured: set SF_MY_DOMAIN_URL, "
                "SF_CLIENT_ID and SF_CLIENT_SECRET."
            )

        url = f"{settings.SF_MY_DOMAIN_URL.rstrip('/')}/services/oauth2/token"
        try:
            response = await self._http.post(
                url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": settings.SF_CLIENT_ID,
                    "client_secret": settings.SF_CLIENT_SECRET,
                },
            )
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Salesforce token request timeout: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Salesforce token request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(
                f"Salesforce authentication failed ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )

        data = response.json()
        token = data.get("access_token")
        if not token:
            raise UpstreamError("Salesforce authentication failed: no access_token in response")

        lifetime = float(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        self._token = token
        self._expires_at = time.monotonic() + lifetime
        logger.info("Obtained Salesforce access token (valid %ds)", int(lifetime))
        return token

    async def aclose(self) -> None:
        await self._http.aclose()


token_provider = SalesforceTokenProvider()


class VendorClient:
    """Authenticated JSON/multipart calls against the Salesforce API host.

    Non-2xx answers become UpstreamError with the status code in the message,
    which is what classify_upstream_error keys on.
    """

    service_label = "Vendor API"

    def __init__(
        self,
        auth: Optional[SalesforceTokenProvider] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self._auth = auth or token_provider
        self._http = http or httpx.AsyncClient(
            base_url=settings.SF_API_BASE_URL,
            timeout=settings.VENDOR_TIMEOUT_SECONDS,
        )

    async def _headers(self) -> dict:
        token = await self._auth.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "x-sfdc-app-context": "EinsteinGPT",
            "x-client-feature-id": "ai-platform-models-connected-app",
        }

    async def _post(self, path: str, **kwargs) -> httpx.Response:
        headers = await self._headers()
        try:
            response = await self._http.post(path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise UpstreamError(f"{self.service_label} request timeout: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamError(f"{self.service_label} request failed: {e}") from e

        logger.debug("%s POST %s -> %d", self.service_label, path, response.status_code)

        if response.status_code == 401:
            self._auth.invalidate()
            raise UpstreamError(
                f"{self.service_label} authentication error 401: {response.text[:200]}",
                status_code=401,
            )
        if response.status_code >= 400:
            raise UpstreamError(
                f"{self.service_label} error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    async def aclose(self) -> None:
        await self._http.aclose()
