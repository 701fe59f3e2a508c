import http.client
import importlib.metadata
import json
import logging
import typing as t
import urllib.parse

import urllib3
from urllib3.exceptions import HTTPError

from ghref.errors import RemoteQueryError


logger = logging.getLogger(__name__)


_version = importlib.metadata.version("ghref")

_accepted_encodings = ["gzip", "deflate"]
_global_headers = {
    "User-Agent": f"ghref/{_version}",
    "Accept-Encoding": ", ".join(_accepted_encodings),
}


class URLResponse(t.Protocol):
    url: str
    status: int
    headers: t.MutableMapping[str, str]

    def read(self, length=...) -> bytes:
        ...


def open_url(
    url: str,
    *,
    method="GET",
    headers: t.Optional[t.MutableMapping[str, str]] = None,
    fields: t.Optional[t.MutableMapping[str, str]] = None,
    pool_manager: t.Optional[urllib3.PoolManager] = None,
    timeout: float = 10,
) -> URLResponse:
    """Send a request to a URL and return a generic response.

    The body is decompressed according to `Content-Encoding` when read."""
    full_url = url
    if fields:
        full_url += "?" + urllib.parse.urlencode(fields)

    http = pool_manager or urllib3.PoolManager()
    response = t.cast(
        URLResponse,
        http.request(
            method,
            url,
            headers={**_global_headers, **(headers or {})},
            fields=fields,
            preload_content=False,
            timeout=urllib3.Timeout(connect=3, read=timeout),
        ),
    )
    response.url = full_url
    return response


def auth_headers(auth_token: t.Optional[str]) -> t.Dict[str, str]:
    if not auth_token:
        return {}
    return {"Authorization": f"token {auth_token}"}


def fetch_json(
    url: str,
    *,
    fields: t.Optional[t.MutableMapping[str, str]] = None,
    auth_token: t.Optional[str] = None,
    pool_manager: t.Optional[urllib3.PoolManager] = None,
    timeout: float = 10,
) -> t.Any:
    """Request `url` and decode the body as JSON.

    :raises RemoteQueryError: if the request fails, the server responds with an error
    status, or the body is not valid JSON.
    """
    headers = {"Accept": "application/vnd.github+json", **auth_headers(auth_token)}
    try:
        response = open_url(
            url,
            headers=headers,
            fields=fields,
            pool_manager=pool_manager,
            timeout=timeout,
        )
        body = response.read()
    # urllib3 raises ValueError for invalid urls and timeouts
    except (HTTPError, http.client.HTTPException, OSError, ValueError) as e:
        raise RemoteQueryError(f"Request to {url} failed: {e}") from e

    status = getattr(response, "status", 200)
    try:
        data = json.loads(body.decode() if isinstance(body, bytes) else body)
    except ValueError as e:
        raise RemoteQueryError(
            f"Invalid response from {url} ({status}): {e}", status
        ) from e

    if status >= 400:
        message = data.get("message", "") if isinstance(data, dict) else ""
        raise RemoteQueryError(f"{url} returned {status} {message}".strip(), status)
    return data
