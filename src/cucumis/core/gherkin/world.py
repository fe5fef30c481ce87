"""Execution context shared by the steps of a run."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL_VARS = ("API_URL", "BASE_URL")


@dataclass
class Response:
    """Last HTTP response seen by the World."""
    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    body: bytes = b""
    url: str = ""
    elapsed_ms: int = 0

    def json(self) -> Any:
        """Decode the body as JSON regardless of content type."""
        return json.loads(self.text)


def _decode_body(text: str) -> Any:
    if not text:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


class World:
    """Mutable state for one run: environment, outgoing headers, last response.

    A World is owned by a single run and must not be shared between
    concurrent runs. It is also the HTTP handle step implementations use.

    Args:
        environment: Flat string-to-string environment variables
        base_url: Explicit base URL; otherwise taken from ``base_url_vars``
        default_headers: Headers restored on every ``reset()``
        timeout: Total request timeout in seconds, None for no timeout
        base_url_vars: Environment keys holding the base URL
    """

    def __init__(
        self,
        environment: Optional[Mapping[str, str]] = None,
        base_url: Optional[str] = None,
        default_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        base_url_vars: Sequence[str] = DEFAULT_BASE_URL_VARS,
    ):
        self.env: dict[str, str] = dict(environment or {})
        self.default_headers: dict[str, str] = dict(default_headers or {})
        self.timeout = timeout

        if base_url is None:
            base_url = ""
            for key, value in self.env.items():
                if key in base_url_vars:
                    base_url = value
        self.base_url = base_url

        self.headers: dict[str, str] = dict(self.default_headers)
        self.response: Optional[Response] = None
        # free-form scratch space for step implementations
        self.data: dict[str, Any] = {}

        self._session: Optional[aiohttp.ClientSession] = None

    def build_url(self, path: str) -> str:
        """Resolve a request path against the base URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def reset(self) -> None:
        """Drop the last response, custom headers and scratch data."""
        self.headers = dict(self.default_headers)
        self.response = None
        self.data = {}

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def send_request(self, method: str, path: str, body: Any = None) -> Response:
        """Send a request and store the response as ``self.response``.

        HTTP error statuses are stored like any other response so later
        steps can assert on them. Connection failures propagate.
        """
        url = self.build_url(path)
        kwargs: dict[str, Any] = {"headers": dict(self.headers)}
        if isinstance(body, (str, bytes)):
            kwargs["data"] = body
        elif body is not None:
            kwargs["json"] = body

        logger.debug(f"{method.upper()} {url}")
        session = await self._get_session()

        start = time.monotonic()
        async with session.request(method.upper(), url, **kwargs) as resp:
            body = await resp.read()
            # undecodable bytes are replaced, binary bodies stay in `body`
            text = await resp.text(errors="replace")
            self.response = Response(
                status=resp.status,
                data=_decode_body(text),
                headers=dict(resp.headers),
                text=text,
                body=body,
                url=str(resp.url),
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )

        logger.debug(f"Response: {self.response.status} in {self.response.elapsed_ms}ms")
        return self.response

    async def get(self, path: str) -> Response:
        return await self.send_request("GET", path)

    async def post(self, path: str, body: Any = None) -> Response:
        return await self.send_request("POST", path, body)

    async def put(self, path: str, body: Any = None) -> Response:
        return await self.send_request("PUT", path, body)

    async def patch(self, path: str, body: Any = None) -> Response:
        return await self.send_request("PATCH", path, body)

    async def delete(self, path: str) -> Response:
        return await self.send_request("DELETE", path)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "World":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
