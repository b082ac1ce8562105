"""Sabre Bargain Finder Max client over the Sabre REST APIs."""

import asyncio
import base64
import logging
import time
from typing import Optional

import httpx

from .base import BaseGDSClient
from ..config import HTTP_TIMEOUT, SabreCredentials, load_sabre_credentials
from ..errors import GDSAuthError, GDSError
from ..models import FlightQuery, Travellers

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v2/auth/token"
SHOP_PATH = "/v1/shop/flights"

CABIN_CODES = {
    "economy": "Y",
    "premiumeconomy": "S",
    "premium": "S",
    "business": "C",
    "first": "F",
}

# Refresh the token this many seconds before Sabre says it expires.
TOKEN_EXPIRY_MARGIN = 60


def encode_credentials(creds: SabreCredentials) -> str:
    """Base64(Base64("V1:user:group:domain") + ":" + Base64(secret))."""
    client_id = f"V1:{creds.user_id}:{creds.group}:{creds.domain}"
    encoded_id = base64.b64encode(client_id.encode()).decode()
    encoded_secret = base64.b64encode(creds.client_secret.encode()).decode()
    return base64.b64encode(f"{encoded_id}:{encoded_secret}".encode()).decode()


def cabin_code(cabin: Optional[str]) -> Optional[str]:
    if not cabin:
        return None
    key = cabin.replace(" ", "").replace("_", "").lower()
    if key in CABIN_CODES:
        return CABIN_CODES[key]
    # Already a one-letter booking cabin code
    if len(cabin) == 1:
        return cabin.upper()
    return None


def passenger_quantities(travellers: Travellers) -> list[dict]:
    counts = [
        ("ADT", max(travellers.adults, 1)),
        ("CNN", travellers.children),
        ("INF", travellers.infants),
    ]
    return [{"Code": code, "Quantity": qty} for code, qty in counts if qty > 0]


def build_search_payload(query: FlightQuery, pseudo_city: str) -> dict:
    """Build the OTA_AirLowFareSearchRQ body for *query*."""
    od_info = [
        {
            "RPH": str(i),
            "DepartureDateTime": f"{leg.date}T00:00:00",
            "OriginLocation": {"LocationCode": leg.origin.upper()},
            "DestinationLocation": {"LocationCode": leg.destination.upper()},
            "TPA_Extensions": {"SegmentType": {"Code": "O"}},
        }
        for i, leg in enumerate(query.legs(), start=1)
    ]

    request = {
        "Version": "1",
        "POS": {
            "Source": [
                {
                    "PseudoCityCode": pseudo_city,
                    "RequestorID": {
                        "Type": "1",
                        "ID": "1",
                        "CompanyName": {"Code": "TN"},
                    },
                }
            ]
        },
        "OriginDestinationInformation": od_info,
        "TravelerInfoSummary": {
            "AirTravelerAvail": [
                {"PassengerTypeQuantity": passenger_quantities(query.travellers)}
            ]
        },
        "TPA_Extensions": {
            "IntelliSellTransaction": {"RequestType": {"Name": "50ITINS"}}
        },
    }

    cabin = cabin_code(query.travellers.cabin)
    if cabin:
        request["TravelPreferences"] = {
            "CabinPref": [{"Cabin": cabin, "PreferLevel": "Preferred"}]
        }

    return {"OTA_AirLowFareSearchRQ": request}


class SabreClient(BaseGDSClient):
    """Priced itinerary search against Sabre BFM.

    The OAuth token is fetched lazily and reused until shortly before it
    expires. Pass *http_client* to share a connection pool (or to inject a
    mock transport in tests).
    """

    def __init__(
        self,
        credentials: Optional[SabreCredentials] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.credentials = credentials or load_sabre_credentials()
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock: Optional[asyncio.Lock] = None

    @property
    def name(self) -> str:
        return "sabre"

    @property
    def base_url(self) -> str:
        return self.credentials.base_url

    def _token_valid(self) -> bool:
        return bool(self._token) and time.monotonic() < self._token_expires_at

    async def get_token(self) -> str:
        """Cached OAuth token; concurrent callers share a single refresh."""
        if self._token_valid():
            return self._token

        if self._token_lock is None:
            self._token_lock = asyncio.Lock()
        async with self._token_lock:
            if self._token_valid():
                return self._token
            token, expires_in = await self._fetch_token()
            self._token = token
            self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
            return token

    async def _fetch_token(self) -> tuple[str, float]:
        try:
            response = await self._client.post(
                f"{self.base_url}{TOKEN_PATH}",
                content="grant_type=client_credentials",
                headers={
                    "Authorization": f"Basic {encode_credentials(self.credentials)}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
            response.raise_for_status()
            data = response.json()
            token = data.get("access_token")
            expires_in = float(data.get("expires_in") or 0)
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Sabre auth error: {e}")
            raise GDSAuthError("Failed to authenticate with Sabre") from e

        if not token:
            raise GDSAuthError("Sabre token response had no access_token")
        return token, expires_in

    async def search(self, query: FlightQuery) -> dict:
        """Run a BFM search and return the raw JSON response."""
        token = await self.get_token()
        payload = build_search_payload(query, self.credentials.group)
        route = " / ".join(f"{leg.origin}->{leg.destination} {leg.date}" for leg in query.legs())
        logger.info(f"Sabre: searching {route}")

        try:
            response = await self._client.post(
                f"{self.base_url}{SHOP_PATH}",
                params={"mode": "live"},
                json=payload,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.warning(f"Sabre search transport error for {route}: {e}")
            raise GDSError(f"Flight search failed: {e}") from e

        if response.status_code == 401:
            # Token revoked early; next call fetches a fresh one.
            self._token = None
        if response.is_error:
            logger.warning(f"Sabre search returned status {response.status_code} for {route}")
            raise GDSError(f"Flight search failed with status {response.status_code}: {_error_message(response)}")

        try:
            return response.json()
        except ValueError as e:
            raise GDSError("Sabre returned a non-JSON search response") from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SabreClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("errorCode") or body)[:200]
    return str(body)[:200]
