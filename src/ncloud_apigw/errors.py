from __future__ import annotations

from typing import Any


class ApigwError(Exception):
    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        field: str | None = None,
    ) -> None:
        self.message = message
        self.endpoint = endpoint
        self.field = field

        super().__init__(str(self))

    def __str__(self) -> str:
        text = self.message
        if self.field:
            text = f"{self.field}: {text}"
        if self.endpoint:
            text = f"[{self.endpoint}] {text}"
        return text

    def with_endpoint(self, endpoint: str) -> "ApigwError":
        if self.endpoint is None:
            self.endpoint = endpoint
            self.args = (str(self),)
        return self


class ValidationError(ApigwError):
    """A required path, query or body field is absent, or the request has unknown fields."""


class SerializationError(ApigwError):
    """The request body could not be encoded as JSON."""


class TransportError(ApigwError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = 0,
        response_body: Any | None = None,
        endpoint: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, endpoint=endpoint)

    def __str__(self) -> str:
        text = super().__str__()
        if self.status_code:
            return f"{text} (status {self.status_code})"
        return text


class NilResponseError(TransportError):
    """The transport reported success but returned no body."""


class TypeMismatchError(ApigwError):
    """A declared response field holds a value of the wrong kind."""


class UnsupportedTypeError(ApigwError):
    def __init__(self, type_name: str, *, endpoint: str | None = None, field: str | None = None) -> None:
        self.type_name = type_name
        super().__init__(f"unsupported type: {type_name}", endpoint=endpoint, field=field)


class DescriptorError(ApigwError):
    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)

    def __str__(self) -> str:
        text = super().__str__()
        if self.errors:
            return text + "\n" + "\n".join(f"- {e}" for e in self.errors)
        return text


class UnknownEndpointError(DescriptorError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown endpoint: {name}")
