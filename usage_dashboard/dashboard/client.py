"""
Metrics payload fetching.

Loads the published document for the dashboard, over HTTP or from disk.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import httpx

from usage_dashboard.config.loader import DEFAULT_REQUEST_TIMEOUT
from usage_dashboard.storage.payload import MetricsPayload, PayloadError, load_payload, parse_payload


class DashboardFetchError(Exception):
    """Raised when the metrics document cannot be fetched."""


class ViewStatus(Enum):
    """States of the dashboard view."""
    LOADING = "loading"
    ERROR = "error"
    LOADED = "loaded"


@dataclass(frozen=True)
class DashboardState:
    """What the dashboard currently shows."""
    status: ViewStatus
    payload: Optional[MetricsPayload] = None
    error: Optional[str] = None

    @classmethod
    def loading(cls) -> "DashboardState":
        return cls(status=ViewStatus.LOADING)


def is_remote(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def cache_busting_url(url: str, now: Optional[datetime] = None) -> str:
    """Append a unique ``t`` query parameter so caches are bypassed."""
    if now is None:
        now = datetime.now(timezone.utc)
    stamp = int(now.timestamp() * 1000)
    parts = urlsplit(url)
    query = f"{parts.query}&t={stamp}" if parts.query else f"t={stamp}"
    return urlunsplit(parts._replace(query=query))


def fetch_payload(
    source: str,
    client: Optional[httpx.Client] = None,
    now: Optional[datetime] = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> MetricsPayload:
    """Fetch and parse the metrics document.

    Args:
        source: http(s) URL of the published document, or a local path
        client: httpx client to use; a short-lived one is created if None
        now: Time used for the cache-busting parameter
        timeout: Request timeout in seconds

    Returns:
        The parsed MetricsPayload

    Raises:
        DashboardFetchError: On a transport failure, a non-success status
            or a missing local file
        PayloadError: If the body is not a metrics document
    """
    if not is_remote(source):
        try:
            return load_payload(source)
        except FileNotFoundError:
            raise DashboardFetchError(f"Metrics document not found: {source}")
        except (OSError, UnicodeDecodeError) as e:
            raise DashboardFetchError(f"Could not read {source}: {e}")

    try:
        url = cache_busting_url(source, now)
    except ValueError as e:
        raise DashboardFetchError(f"Invalid URL {source}: {e}")
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout)
    try:
        response = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise DashboardFetchError(f"Request failed: {e}")
    finally:
        if owns_client:
            client.close()

    if not response.is_success:
        raise DashboardFetchError(f"HTTP {response.status_code}")
    return parse_payload(response.text)


def load_state(
    source: str,
    client: Optional[httpx.Client] = None,
    now: Optional[datetime] = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> DashboardState:
    """Fetch the payload and turn the outcome into a view state.

    Never raises for fetch or parse failures; they become the ERROR state
    carrying the underlying message.
    """
    try:
        payload = fetch_payload(source, client=client, now=now, timeout=timeout)
    except (DashboardFetchError, PayloadError) as e:
        return DashboardState(status=ViewStatus.ERROR, error=str(e))
    return DashboardState(status=ViewStatus.LOADED, payload=payload)
