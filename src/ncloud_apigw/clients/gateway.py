from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Mapping

from ..config import ClientConfig
from ..errors import ApigwError, NilResponseError, TransportError
from ..materialize import materialize, normalize_keys
from ..models.attributes import Value
from ..models.descriptors import Endpoint
from ..models.responses import TypedResponse
from ..registry import EndpointRegistry, default_registry
from ..request import PreparedRequest, build_request
from .base import HttpTransport, Signer, Transport

logger = logging.getLogger(__name__)


class ApigwClient:
    """
    Executes API Gateway operations described by an endpoint table.

    Each call builds the path, query and body from the request, hands them to
    the transport, normalizes the response keys to snake_case and
    materializes the result against the endpoint's response shape. The client
    holds no per-call state and can be shared between threads.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: Transport | None = None,
        registry: EndpointRegistry | None = None,
        signer: Signer | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._registry = registry or default_registry()
        self._transport = transport or HttpTransport(
            timeout=self._config.timeout,
            default_headers=self._config.default_headers,
            signer=signer,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def registry(self) -> EndpointRegistry:
        return self._registry

    def endpoint(self, name: str) -> Endpoint:
        return self._registry.get(name)

    def url_for(self, prepared: PreparedRequest) -> str:
        return urllib.parse.urljoin(self._config.base_url, prepared.path.lstrip("/"))

    def _call(self, endpoint: Endpoint, request: Any, timeout: float | None) -> dict[str, Any]:
        prepared = build_request(endpoint, request)
        url = self.url_for(prepared)
        try:
            response = self._transport.call(prepared.method, url, prepared.body, prepared.query, timeout=timeout)
        except ApigwError as exc:
            raise exc.with_endpoint(endpoint.name)

        if response is None:
            raise NilResponseError("transport returned no response body", endpoint=endpoint.name)
        if not isinstance(response, Mapping):
            raise TransportError(
                f"transport returned {type(response).__name__}, expected a JSON object",
                response_body=response,
                endpoint=endpoint.name,
            )
        return normalize_keys(response)

    def call_raw(self, name: str, request: Any = None, *, timeout: float | None = None) -> dict[str, Any]:
        """Issue the call and return the response map with snake_case keys, without materializing it."""
        return self._call(self.endpoint(name), request, timeout)

    def execute(self, name: str, request: Any = None, *, timeout: float | None = None) -> TypedResponse:
        endpoint = self.endpoint(name)
        raw = self._call(endpoint, request, timeout)
        return materialize(endpoint, raw)

    def execute_native(self, name: str, request: Any = None, *, timeout: float | None = None) -> Value:
        return self.execute(name, request, timeout=timeout).to_native()
