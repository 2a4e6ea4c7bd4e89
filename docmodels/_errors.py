# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import builtins
from typing import Any, ClassVar

import orjson

__all__ = (
    "ConfigurationError",
    "CustomValidationError",
    "DocModelError",
    "DocumentNotFoundError",
    "FieldError",
    "MultipleDocumentsError",
    "NotImplementedError",
    "PreconditionError",
    "RequiredError",
    "ValidationError",
    "WriteDatabaseError",
)


def _repr_value(value: Any) -> str:
    try:
        return orjson.dumps(value, default=str).decode()
    except TypeError:
        return repr(value)


class DocModelError(Exception):
    default_message: ClassVar[str] = "docmodels error"
    status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}
        self.status_code = status_code or self.status_code

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class ConfigurationError(DocModelError):
    """A model, schema, field or driver was declared incorrectly."""

    default_message = "Invalid configuration"


class NotImplementedError(DocModelError, builtins.NotImplementedError):
    """An operation needs a capability the model was not wired with."""

    default_message = "Operation is not implemented"
    status_code = 501

    def __init__(self, operation: str, **kw: Any):
        super().__init__(
            f"'{operation}' is not implemented.",
            details={"operation": operation},
            **kw,
        )

    @property
    def operation(self) -> str:
        return self.details["operation"]


class PreconditionError(DocModelError):
    """The instance is not in a state that allows the operation."""

    default_message = "Operation precondition failed"
    status_code = 412


# --------------------------------------------------------------------------- #
# field validation                                                            #
# --------------------------------------------------------------------------- #
class FieldError(DocModelError):
    """Base class for the errors raised while validating a field."""

    default_message = "Field validation failed"
    status_code = 422  # Unprocessable Entity


class RequiredError(FieldError):
    """A required, non primary key field is absent."""

    def __init__(self, key: str, **kw: Any):
        super().__init__(
            f"'{key}' is required and cannot be None or missing.",
            details={"key": key},
            **kw,
        )

    @property
    def key(self) -> str:
        return self.details["key"]


class ValidationError(FieldError):
    """A value failed the structural check of its field type."""

    def __init__(
        self, value: Any, type: Any, message: str | None = None, **kw: Any
    ):
        super().__init__(
            message
            or f"Value '{_repr_value(value)}' is not a valid '{type}'.",
            details={"value": value, "type": str(type)},
            **kw,
        )

    @property
    def value(self) -> Any:
        return self.details["value"]

    @property
    def type(self) -> str:
        return self.details["type"]


class CustomValidationError(FieldError):
    """A value failed a user supplied ``validate`` function."""

    def __init__(self, value: Any, **kw: Any):
        super().__init__(
            f"Value '{_repr_value(value)}' failed custom validation.",
            details={"value": value},
            **kw,
        )

    @property
    def value(self) -> Any:
        return self.details["value"]


# --------------------------------------------------------------------------- #
# lookup / storage                                                            #
# --------------------------------------------------------------------------- #
class DocumentNotFoundError(DocModelError):
    status_code = 404

    def __init__(self, pk: Any, model: str | None, **kw: Any):
        super().__init__(
            f"Document with id '{pk}' not found in model '{model}'.",
            details={"pk": pk, "model": model},
            **kw,
        )

    @property
    def pk(self) -> Any:
        return self.details["pk"]

    @property
    def model(self) -> str | None:
        return self.details["model"]


class MultipleDocumentsError(DocModelError):
    status_code = 409

    def __init__(self, pk: Any, model: str | None, **kw: Any):
        super().__init__(
            f"Multiple documents returned with id '{pk}' in model '{model}'.",
            details={"pk": pk, "model": model},
            **kw,
        )

    @property
    def pk(self) -> Any:
        return self.details["pk"]

    @property
    def model(self) -> str | None:
        return self.details["model"]


class WriteDatabaseError(DocModelError):
    """A driver failed to persist its data."""

    def __init__(self, error: Exception, path: Any, **kw: Any):
        kw.setdefault("cause", error)
        super().__init__(
            f"Error writing database ('{path}'): {error}",
            details={"path": str(path)},
            **kw,
        )

    @property
    def path(self) -> str:
        return self.details["path"]

    @property
    def inner_error(self) -> Exception | None:
        return self.get_cause()
