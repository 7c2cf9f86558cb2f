"""
Amadeus API Client - Handles authentication and flight offer searches
Wraps the Amadeus Flight Offers Search API with a clean interface
"""

import requests
import threading
from typing import Optional, Dict, Any, List
from datetime import date, datetime, timedelta
import logging

from itinerary_planner.core.exceptions import ProviderFailure
from itinerary_planner.models.flight import FlightOffer, parse_flight_offers

logger = logging.getLogger(__name__)


class AmadeusAPIError(ProviderFailure):
    """Custom exception for Amadeus API errors"""
    pass


class AmadeusClient:
    """
    Client for the Amadeus Self-Service Flight Offers Search API

    Features:
    - OAuth 2.0 client-credentials authentication
    - Token cached with automatic refresh, shared safely across worker threads
    - Bounded per-request timeout
    - Response parsing with Pydantic models
    """

    TOKEN_EXPIRY_BUFFER = 60  # Request new token 1 min before expiry

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = "https://test.api.amadeus.com",
        currency: str = "USD",
        max_offers: int = 100,
        timeout: int = 30
    ):
        """
        Initialize Amadeus API client

        Args:
            client_id: Amadeus OAuth client ID
            client_secret: Amadeus OAuth client secret
            base_url: API host (test or production)
            currency: Currency code requested for prices
            max_offers: Maximum offers returned per search
            timeout: Per-request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.max_offers = max_offers
        self.timeout = timeout
        self._access_token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._token_lock = threading.Lock()

    def _get_access_token(self) -> str:
        """
        Get OAuth access token (cached with auto-refresh)

        Returns:
            Access token string

        Raises:
            AmadeusAPIError: If authentication fails
        """
        with self._token_lock:
            if (self._access_token and
                    self._token_expires_at and
                    datetime.now() < self._token_expires_at):
                return self._access_token

            url = f"{self.base_url}/v1/security/oauth2/token"
            data = {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials"
            }

            try:
                response = requests.post(url, data=data, timeout=self.timeout)
                response.raise_for_status()

                token_data = response.json()
                access_token = token_data.get("access_token")
                if not access_token:
                    raise AmadeusAPIError("Authentication failed: no access_token in response")

                # Typically 1799 seconds
                expires_in = int(token_data.get("expires_in", 1799))
                self._access_token = access_token
                self._token_expires_at = datetime.now() + timedelta(
                    seconds=expires_in - self.TOKEN_EXPIRY_BUFFER
                )

                logger.info(f"Obtained new Amadeus access token, expires in {expires_in}s")
                return self._access_token

            except (requests.exceptions.RequestException, ValueError) as e:
                logger.error(f"Failed to obtain Amadeus access token: {str(e)}")
                raise AmadeusAPIError(f"Authentication failed: {str(e)}") from e

    def _make_request(self, endpoint: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """
        Make authenticated request to Amadeus API

        Args:
            endpoint: API endpoint path (without base URL)
            params: Optional query parameters

        Returns:
            JSON response as dictionary

        Raises:
            AmadeusAPIError: If request fails
        """
        token = self._get_access_token()
        url = f"{self.base_url}/{endpoint}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        }

        try:
            response = requests.get(url, headers=headers, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        except requests.exceptions.HTTPError as e:
            logger.error(f"Amadeus API HTTP error: {e.response.status_code} - {e.response.text}")
            raise AmadeusAPIError(f"API request failed: {e.response.status_code} - {e.response.text}") from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Amadeus API request error: {str(e)}")
            raise AmadeusAPIError(f"Request failed: {str(e)}") from e

        except ValueError as e:
            logger.error(f"Amadeus API returned invalid JSON: {str(e)}")
            raise AmadeusAPIError(f"Invalid JSON response: {str(e)}") from e

    def search_flight_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date
    ) -> List[FlightOffer]:
        """
        Search one-way offers for a single passenger on a date

        Args:
            origin: 3-letter IATA origin airport code
            destination: 3-letter IATA destination airport code
            departure_date: Calendar date of departure

        Returns:
            FlightOffer list in provider order

        Raises:
            ProviderFailure: If the request fails or the payload is malformed

        Example:
            offers = client.search_flight_offers('PUQ', 'SCL', date(2025, 3, 15))
        """
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date.isoformat(),
            "adults": 1,
            "currencyCode": self.currency,
            "max": self.max_offers
        }

        logger.info(f"Querying offers: {origin} -> {destination} on {departure_date.isoformat()}")
        raw_data = self._make_request("v2/shopping/flight-offers", params=params)

        return parse_flight_offers(raw_data)


# Singleton pattern for easy reuse
_client_instance: Optional[AmadeusClient] = None


def get_amadeus_client(
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None
) -> AmadeusClient:
    """
    Get singleton Amadeus client instance

    Args:
        client_id: Optional client ID (uses Settings if not provided)
        client_secret: Optional client secret (uses Settings if not provided)

    Returns:
        AmadeusClient instance
    """
    global _client_instance

    if _client_instance is None or (client_id and client_secret):
        from itinerary_planner.core.config import get_settings
        settings = get_settings()

        client_id = client_id or settings.amadeus_client_id
        client_secret = client_secret or settings.amadeus_client_secret

        if not client_id or not client_secret:
            raise ValueError("Amadeus credentials not provided")

        _client_instance = AmadeusClient(
            client_id,
            client_secret,
            base_url=settings.amadeus_base_url,
            currency=settings.amadeus_currency,
            max_offers=settings.amadeus_max_offers,
            timeout=settings.api_timeout
        )

    return _client_instance
