"""Exception taxonomy for midnight-did.

All errors raised by the library derive from :class:`MidnightDIDError`.

SchemaValidationError
    Input failed a document, operation, or identifier schema.
EncodingConstraintError
    A valid domain value cannot be represented in the fixed-width ledger
    operation record.
StructuralValidationError
    An encoded batch failed the pre-submission structural guard.
CollaboratorRejection
    The ledger state machine rejected a batch at execution time. Raised by
    :class:`~midnight_did.registry.client.LedgerClient` implementations and
    passed through to callers untouched.
"""
from __future__ import annotations

from pydantic import ValidationError


class MidnightDIDError(Exception):
    """Base class for midnight-did errors."""

    def __init__(self, message: str, error_code: str = "MidnightDIDError") -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class SchemaValidationError(MidnightDIDError, ValueError):
    """Raised when input does not satisfy a schema.

    Parameters
    ----------
    path:
        Dotted path of the failing field. Empty for the value itself.
    message:
        Human-readable reason.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.reason = message
        location = path or "<root>"
        super().__init__(f"{location}: {message}", error_code="SchemaValidation")

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "SchemaValidationError":
        """Build from the first error of a pydantic :class:`ValidationError`."""
        first = exc.errors()[0]
        path = ".".join(str(part) for part in first.get("loc", ()))
        message = str(first.get("msg", "invalid value"))
        # pydantic prefixes messages raised from custom validators
        message = message.removeprefix("Value error, ")
        return cls(path, message)


class EncodingConstraintError(MidnightDIDError, ValueError):
    """Raised when a domain value does not fit the ledger's fixed-width shape."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="EncodingConstraint")


class StructuralValidationError(MidnightDIDError):
    """Raised when an encoded batch fails pre-submission validation.

    Parameters
    ----------
    index:
        Position of the offending operation within the batch, or ``None``
        when the batch as a whole is malformed.
    path:
        Field path inside the operation record.
    message:
        Human-readable reason.
    """

    def __init__(self, index: int | None, path: str, message: str) -> None:
        self.index = index
        self.path = path
        self.reason = message
        location = f"ops[{index}]{path}" if index is not None else path or "ops"
        super().__init__(
            f"Contract operation validation failed at {location}: {message}",
            error_code="StructuralValidation",
        )


class CollaboratorRejection(MidnightDIDError):
    """Raised by a ledger client when the state machine rejects a batch."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="CollaboratorRejection")
