"""
Shared HTTP transport for upstream providers.
"""
import threading
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from config.settings import settings

logger = logging.getLogger("providers.http")


class UpstreamError(Exception):
    """An upstream provider call failed (non-2xx status, transport error or timeout)."""

    def __init__(self, message: str, status: Optional[int] = None, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.provider = provider

    def __str__(self) -> str:
        prefix = f"{self.provider} " if self.provider else ""
        if self.status is not None:
            return f"{prefix}API error: {self.status} {self.message}"
        return f"{prefix}API error: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "status": self.status, "message": self.message}


# Module-level HTTP sessions for connection pooling, one per provider
_sessions: Dict[str, requests.Session] = {}
_sessions_lock = threading.Lock()


def get_session(provider: str) -> requests.Session:
    """Get or create the shared HTTP session for a provider."""
    with _sessions_lock:
        session = _sessions.get(provider)
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=10,
                pool_maxsize=50,
                max_retries=0,  # no retries below the caller
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            session.headers["User-Agent"] = settings.user_agent
            _sessions[provider] = session
            logger.debug(f"HTTP session created for {provider}")
        return session


def fetch_json(
    provider: str,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    GET ``url`` and decode the JSON body.

    Args:
        provider: Provider name for the shared session and error reporting
        url: Full request URL
        params: Query parameters (None values dropped)
        headers: Extra request headers
        timeout: Seconds before giving up (defaults to settings.request_timeout_seconds)

    Returns:
        Decoded JSON payload

    Raises:
        UpstreamError: On non-2xx status, transport failure, timeout or invalid JSON
    """
    if params:
        params = {k: v for k, v in params.items() if v is not None}
    timeout = timeout if timeout is not None else settings.request_timeout_seconds

    logger.info(f"Fetching from {provider}: {url} {params or ''}")
    try:
        response = get_session(provider).get(url, params=params, headers=headers, timeout=timeout)
    except requests.Timeout as e:
        raise UpstreamError(f"timed out after {timeout}s", provider=provider) from e
    except requests.RequestException as e:
        raise UpstreamError(str(e), provider=provider) from e

    if not response.ok:
        raise UpstreamError(response.reason or "request failed", status=response.status_code, provider=provider)

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError("invalid JSON in response", status=response.status_code, provider=provider) from e
