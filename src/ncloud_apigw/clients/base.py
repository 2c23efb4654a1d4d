from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Callable, Mapping, Protocol

from ..errors import TransportError

logger = logging.getLogger(__name__)

Signer = Callable[[str, str], Mapping[str, str]]


class Transport(Protocol):
    def call(
        self,
        method: str,
        url: str,
        body: str | None,
        query: Mapping[str, str],
        *,
        timeout: float | None = None,
    ) -> Any:
        ...  # pragma: nocover


def _looks_like_json(content_type: str) -> bool:
    if not content_type:
        return False
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime == "application/json" or mime.endswith("+json") or mime == "text/json"


def _error_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("responseError") or payload.get("error")
    if isinstance(error, dict):
        code = error.get("returnCode") or error.get("errorCode") or error.get("code")
        message = error.get("returnMessage") or error.get("message")
        if code and message:
            return f"{code}: {message}"
        return message or code
    return None


class HttpTransport:
    """JSON-over-HTTP transport. Authentication headers come from the optional `signer`."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        default_headers: dict[str, str] | None = None,
        signer: Signer | None = None,
    ) -> None:
        self._timeout = timeout
        self._default_headers = dict(default_headers or {})
        self._signer = signer

    def call(
        self,
        method: str,
        url: str,
        body: str | None,
        query: Mapping[str, str],
        *,
        timeout: float | None = None,
    ) -> Any:
        if query:
            url = f"{url}?{urllib.parse.urlencode(dict(query))}"

        req_headers = {"Accept": "application/json", **self._default_headers}
        data: bytes | None = None
        if body is not None:
            data = body.encode("utf-8")
            req_headers.setdefault("Content-Type", "application/json")
        if self._signer is not None:
            req_headers.update(self._signer(method.upper(), url))

        request = urllib.request.Request(url=url, data=data, method=method.upper())
        for key, value in req_headers.items():
            request.add_header(key, value)

        logger.debug("%s %s", method.upper(), url)
        try:
            with urllib.request.urlopen(request, timeout=timeout or self._timeout) as response:
                status = response.getcode()
                resp_headers = {k.lower(): v for k, v in response.headers.items()}
                raw = response.read()
        except urllib.error.HTTPError as exc:
            status = exc.code
            resp_headers = {k.lower(): v for k, v in (exc.headers or {}).items()}
            raw = exc.read()
        except urllib.error.URLError as exc:
            raise TransportError(str(exc.reason)) from exc
        except TimeoutError as exc:
            raise TransportError(f"request timed out: {exc}") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise TransportError(f"connection failed: {exc}") from exc

        if status == 204:
            return {}

        content_type = resp_headers.get("content-type", "")
        if not _looks_like_json(content_type):
            text = raw.decode("utf-8", errors="replace")
            if status >= 400:
                raise TransportError(text or "request failed", status_code=status, response_body=text)
            if not text.strip():
                return None
            raise TransportError(f"unexpected content type: {content_type or '<none>'}", status_code=status, response_body=text)

        try:
            payload = json.loads(raw.decode("utf-8")) if raw else None
        except json.JSONDecodeError as exc:
            if status >= 400:
                raise TransportError(f"invalid JSON error response: {exc}", status_code=status) from exc
            raise TransportError(f"invalid JSON response: {exc}", status_code=status) from exc

        if status >= 400:
            message = _error_message(payload) or "request failed"
            raise TransportError(message, status_code=status, response_body=payload)

        if payload is not None and not isinstance(payload, dict):
            raise TransportError(
                f"expected JSON object response, got {type(payload).__name__}",
                status_code=status,
                response_body=payload,
            )
        return payload
