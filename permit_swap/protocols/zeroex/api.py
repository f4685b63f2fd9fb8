"""
0x Swap API Client

REST client for the 0x swap aggregator (v2, Permit2 flow).
"""

import logging
from typing import Optional, Dict, Any

import httpx

from ...types import SwapRequest, PriceQuote, ExecutableQuote
from ...errors import ConfigurationError, QuoteError
from ...config import config as global_config

logger = logging.getLogger(__name__)


class ZeroExAPI:
    """
    0x Swap API client (v2, Permit2 endpoints)

    Provides:
    - Indicative prices (allowance / balance issues)
    - Executable quotes (transaction + Permit2 typed data)

    Price and quote are requested with the same parameters; only the
    endpoint differs. Requests are not retried.

    Usage:
        with ZeroExAPI(api_key="...") as api:
            price = api.get_price(request)
            quote = api.get_quote(request)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize 0x API client

        Args:
            api_key: 0x API key (or set ZEROX_API_KEY env var)
            base_url: API base URL
            api_version: Value of the 0x-version header
            timeout: Request timeout in seconds
            client: Pre-built httpx client; not closed by this object
        """
        self._api_key = api_key or global_config.zeroex.api_key
        self._base_url = (base_url or global_config.zeroex.base_url).rstrip("/")
        self._api_version = api_version or global_config.zeroex.api_version
        self._timeout = timeout or global_config.zeroex.timeout
        self._price_path = global_config.zeroex.price_path
        self._quote_path = global_config.zeroex.quote_path
        self._client = client
        self._owns_client = client is None

        if not self._api_key:
            raise ConfigurationError.missing("ZEROX_API_KEY")

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "0x-api-key": self._api_key,
            "0x-version": self._api_version,
        }

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def _build_url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _make_request(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        """
        GET an endpoint and decode the JSON body

        Raises:
            QuoteError: Transport failure, non-2xx status or non-JSON body
        """
        client = self._get_client()
        url = self._build_url(path)

        try:
            response = client.get(url, params=params, headers=self.headers)
        except httpx.TimeoutException as e:
            logger.warning(f"0x API timeout on {path}")
            raise QuoteError.timeout(path, self._timeout) from e
        except httpx.RequestError as e:
            logger.warning(f"0x API request error on {path}: {e}")
            raise QuoteError.request_failed(path, e) from e

        if not response.is_success:
            reason = response.text[:500] if response.text else response.reason_phrase
            try:
                error_data = response.json()
                if isinstance(error_data, dict):
                    reason = error_data.get("message") or error_data.get("name") or str(error_data)
            except ValueError:
                pass
            logger.warning(f"0x API error on {path}: HTTP {response.status_code} {reason}")
            raise QuoteError.http_status(path, response.status_code, reason)

        try:
            data = response.json()
        except ValueError as e:
            raise QuoteError.malformed(path, "body is not JSON", e) from e

        if not isinstance(data, dict):
            raise QuoteError.malformed(path, f"expected a JSON object, got {type(data).__name__}")
        return data

    def get_price(self, request: SwapRequest) -> PriceQuote:
        """
        Get an indicative price

        Args:
            request: Swap parameters

        Returns:
            PriceQuote with liquidity and allowance information
        """
        data = self._make_request(self._price_path, request.to_params())
        try:
            return PriceQuote.from_response(data)
        except ValueError as e:
            raise QuoteError.malformed(self._price_path, str(e), e) from e

    def get_quote(self, request: SwapRequest) -> ExecutableQuote:
        """
        Get an executable quote

        Args:
            request: Swap parameters, identical to the ones used for the price

        Returns:
            ExecutableQuote with transaction and optional Permit2 payload
        """
        data = self._make_request(self._quote_path, request.to_params())
        if data.get("liquidityAvailable") is False:
            raise QuoteError.no_liquidity(request.sell_token, request.buy_token)
        try:
            return ExecutableQuote.from_response(data)
        except ValueError as e:
            raise QuoteError.malformed(self._quote_path, str(e), e) from e

    def close(self):
        """Close HTTP client if this object created it"""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ZeroExAPI":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"ZeroExAPI(base_url={self._base_url}, version={self._api_version})"
