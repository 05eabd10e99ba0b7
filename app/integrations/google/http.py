import httpx

from app.config import get_settings
from app.core.circuit_breaker import CircuitBreakerOpen, google_breaker
from app.integrations.google.errors import GoogleAPIError


async def google_request(method: str, url: str, **kwargs) -> httpx.Response:
    """Send one request to Google through the circuit breaker.

    Network errors and 5xx responses count as breaker failures and surface as
    GoogleAPIError. 4xx responses are returned for the caller to interpret.
    """
    timeout = get_settings().google_timeout_seconds

    async def send() -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.request(method, url, **kwargs)
        if response.status_code >= 500:
            raise GoogleAPIError(f"Google returned {response.status_code}")
        return response

    try:
        return await google_breaker.call(send)
    except CircuitBreakerOpen:
        raise GoogleAPIError("Google is temporarily unavailable. Please try again shortly.")
    except httpx.HTTPError as e:
        raise GoogleAPIError(f"Google request failed: {e}") from e
