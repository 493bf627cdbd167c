"""Errors raised while compiling an OpenAPI document into descriptors.

Every error aborts the whole run. The builder attaches the operation being
processed before re-raising, so the message names the offending
path/operation/schema.
"""

from __future__ import annotations


class ApiStubError(Exception):
    """Base class for all generator errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        self.http_method: str | None = None
        self.path: str | None = None
        self.operation_id: str | None = None
        super().__init__(message)

    def locate(self, http_method: str, path: str, operation_id: str | None = None) -> None:
        """Record which operation was being processed, unless already known."""
        if self.path is None:
            self.http_method = http_method
            self.path = path
            self.operation_id = operation_id or None

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        where = f"{(self.http_method or '').upper()} {self.path}"
        if self.operation_id:
            where += f" ({self.operation_id})"
        return f"{where}: {self.message}"


class MissingOperationIdentifier(ApiStubError):
    """Raised when an operation has no operationId to derive a method name from."""

    def __init__(self, http_method: str, path: str) -> None:
        super().__init__("operation has no operationId; cannot derive a method name")
        self.locate(http_method, path)


class UnresolvableSchemaReference(ApiStubError):
    """Raised when a $ref points at nothing in the document."""

    def __init__(self, ref: str, reason: str | None = None) -> None:
        self.ref = ref
        message = f"cannot resolve reference {ref!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class UnsupportedSchemaShape(ApiStubError):
    """Raised when a schema uses a construct the type resolver has no rule for."""

    def __init__(self, schema_name: str, reason: str) -> None:
        self.schema_name = schema_name
        self.reason = reason
        super().__init__(f"unsupported schema {schema_name!r}: {reason}")
