"""HTTP transport for the platform API.

Builds authenticated requests (JSON or multipart), executes them and maps
responses onto three outcomes:

- decoded JSON (or ``None`` when no body is expected or returned)
- the ``NOT_FOUND`` sentinel for HTTP 404, when the caller asks for it
- an exception from :mod:`elevenlabs_iac.exceptions` for everything else

There are no retries. Every request uses the same fixed timeout.
"""

from __future__ import annotations

import concurrent.futures
import enum
import json
import logging
import threading
from contextlib import ExitStack
from pathlib import Path
from typing import Any

import httpx

from elevenlabs_iac.config import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from elevenlabs_iac.exceptions import (
    APIError,
    ConfigurationError,
    LocalIOError,
    RequestCancelledError,
    TransportError,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "xi-api-key"

# How often a waiting call checks its cancel event
CANCEL_POLL_INTERVAL = 0.05


class _Sentinel(enum.Enum):
    NOT_FOUND = "not_found"

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _Sentinel.NOT_FOUND


def _close_abandoned(future: concurrent.futures.Future) -> None:
    if not future.cancelled() and future.exception() is None:
        future.result().close()


class Transport:
    """Thin authenticated wrapper around an ``httpx.Client``.

    A client may be injected (tests pass ``httpx.MockTransport`` clients or a
    FastAPI ``TestClient``); otherwise one is created against ``base_url``
    and owned (closed) by this transport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: httpx.Client | None = None,
    ):
        if not api_key:
            raise ConfigurationError("API key for ElevenLabs is required")
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout)
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=self._timeout)
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="elevenlabs-transport"
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _headers(self, json_body: bool) -> dict[str, str]:
        headers = {API_KEY_HEADER: self._api_key}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def send(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        expect_body: bool = True,
        not_found_ok: bool = False,
        cancel: threading.Event | None = None,
    ) -> Any:
        """Send a JSON request and return the decoded body or ``None``.

        With ``not_found_ok`` a 404 returns ``NOT_FOUND``; otherwise it is an
        ``APIError`` like any other error status.
        """
        request = self._client.build_request(
            method,
            path,
            json=body,
            params=params,
            headers=self._headers(json_body=True),
            timeout=self._timeout,
        )
        return self._dispatch(request, expect_body, not_found_ok, cancel)

    def send_multipart(
        self,
        method: str,
        path: str,
        *,
        fields: dict[str, str],
        files: list[tuple[str, str | Path]],
        cancel: threading.Event | None = None,
    ) -> Any:
        """Send a multipart/form-data request streaming each file from disk.

        Every file is opened before the request is built, so an unreadable
        file aborts the call without anything reaching the network.
        """
        with ExitStack() as stack:
            parts = []
            for form_field, file_path in files:
                file_path = Path(file_path)
                try:
                    handle = stack.enter_context(open(file_path, "rb"))
                except OSError as exc:
                    raise LocalIOError(
                        file_path, f"error opening file {file_path}: {exc}"
                    ) from exc
                parts.append((form_field, (file_path.name, handle)))

            request = self._client.build_request(
                method,
                path,
                data=fields,
                files=parts,
                headers=self._headers(json_body=False),
                timeout=self._timeout,
            )
            return self._dispatch(request, True, False, cancel)

    def _dispatch(
        self,
        request: httpx.Request,
        expect_body: bool,
        not_found_ok: bool,
        cancel: threading.Event | None,
    ) -> Any:
        label = f"{request.method} {request.url.path}"
        if cancel is not None and cancel.is_set():
            raise RequestCancelledError(f"{label} cancelled before sending")

        logger.debug("Sending %s", label)
        try:
            response = self._send(request, label, cancel)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{label} timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{label} failed: {exc}") from exc

        try:
            if not_found_ok and response.status_code == httpx.codes.NOT_FOUND:
                logger.debug("%s returned 404", label)
                return NOT_FOUND
            raw = self._read_body(response, label, cancel)
        finally:
            response.close()

        if response.status_code >= 400:
            text = raw.decode("utf-8", errors="replace")
            logger.error("API error on %s: status %d", label, response.status_code)
            raise APIError(response.status_code, text)

        if not expect_body or not raw.strip():
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise TransportError(f"{label} returned invalid JSON: {exc}") from exc

    def _send(
        self, request: httpx.Request, label: str, cancel: threading.Event | None
    ) -> httpx.Response:
        """Send ``request`` and wait for the response headers.

        Without a cancel event the call blocks in this thread. With one, the
        request runs on the worker pool while this thread watches the event;
        a cancelled call returns at once and the late response, if any, is
        closed when it arrives.
        """
        if cancel is None:
            return self._client.send(request, stream=True)

        future = self._executor.submit(self._client.send, request, stream=True)
        while True:
            try:
                return future.result(timeout=CANCEL_POLL_INTERVAL)
            except concurrent.futures.TimeoutError:
                if cancel.is_set():
                    future.add_done_callback(_close_abandoned)
                    raise RequestCancelledError(
                        f"{label} cancelled while waiting for the response"
                    ) from None

    @staticmethod
    def _read_body(
        response: httpx.Response, label: str, cancel: threading.Event | None
    ) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                if cancel is not None and cancel.is_set():
                    raise RequestCancelledError(f"{label} cancelled while reading response")
                chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise TransportError(f"{label} failed while reading response: {exc}") from exc
        return b"".join(chunks)
