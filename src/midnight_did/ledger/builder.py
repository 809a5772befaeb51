"""Helpers that build individual fixed-shape ledger operations.

Each helper starts from a fresh :class:`LedgerUpdateOperation` template and
overrides the discriminant plus the one option record it concerns. Use
:func:`midnight_did.ledger.encoder.encode_operation` to go from domain
operations instead; the builder is for callers that already hold ledger
records.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar, Union

from midnight_did.errors import StructuralValidationError
from midnight_did.ledger.encoder import pad
from midnight_did.ledger.types import (
    MAX_OPERATIONS,
    SERVICE_ENDPOINT_SLOTS,
    AddServiceOptions,
    AddVerificationMethodOptions,
    AddVerificationMethodRelationOptions,
    LedgerUpdateOperation,
    OperationType,
    RemoveServiceOptions,
    RemoveVerificationMethodOptions,
    RemoveVerificationMethodRelationOptions,
    UpdateServiceOptions,
    UpdateVerificationMethodOptions,
)

RawOperation = Union[LedgerUpdateOperation, Mapping[str, Any]]
_Batch = TypeVar("_Batch", bound=Sequence[Any])


def _in_range(value: object, low: int, high: int) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return low <= value <= high


def _member(data: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = data.get(key)
    return value if isinstance(value, Mapping) else None


class OperationBuilder:
    """Factory for single :class:`LedgerUpdateOperation` records."""

    @staticmethod
    def undefined() -> LedgerUpdateOperation:
        return LedgerUpdateOperation()

    @staticmethod
    def add_verification_method(
        options: AddVerificationMethodOptions,
    ) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.ADD_VERIFICATION_METHOD,
            add_verification_method_options=options,
        )

    @staticmethod
    def update_verification_method(
        options: UpdateVerificationMethodOptions,
    ) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.UPDATE_VERIFICATION_METHOD,
            update_verification_method_options=options,
        )

    @staticmethod
    def remove_verification_method(
        options: RemoveVerificationMethodOptions,
    ) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.REMOVE_VERIFICATION_METHOD,
            remove_verification_method_options=options,
        )

    @staticmethod
    def add_verification_method_relation(
        options: AddVerificationMethodRelationOptions,
    ) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.ADD_VERIFICATION_METHOD_RELATION,
            add_verification_method_relation_options=options,
        )

    @staticmethod
    def remove_verification_method_relation(
        options: RemoveVerificationMethodRelationOptions,
    ) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.REMOVE_VERIFICATION_METHOD_RELATION,
            remove_verification_method_relation_options=options,
        )

    @staticmethod
    def add_service(options: AddServiceOptions) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.ADD_SERVICE,
            add_service_options=options,
        )

    @staticmethod
    def update_service(options: UpdateServiceOptions) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.UPDATE_SERVICE,
            update_service_options=options,
        )

    @staticmethod
    def remove_service(options: RemoveServiceOptions) -> LedgerUpdateOperation:
        return LedgerUpdateOperation(
            operation_type=OperationType.REMOVE_SERVICE,
            remove_service_options=options,
        )

    @staticmethod
    def deactivate() -> LedgerUpdateOperation:
        return LedgerUpdateOperation(operation_type=OperationType.DEACTIVATE)

    @staticmethod
    def padding(operations: Sequence[LedgerUpdateOperation]) -> list[LedgerUpdateOperation]:
        """Pad ``operations`` with undefined records up to the batch size.

        Raises
        ------
        EncodingConstraintError
            If more than :data:`MAX_OPERATIONS` operations are given.
        """
        return pad(operations, MAX_OPERATIONS)

    @staticmethod
    def verify_operations(operations: _Batch) -> _Batch:
        """Check the raw shape of a complete batch and return it unchanged.

        Unlike :func:`~midnight_did.ledger.encoder.assert_structurally_valid`
        this works on the wire shape alone: every option record must be
        present whatever the discriminant, and every enum member must lie in
        its numeric range. Typed records are checked through their
        ``to_dict()`` form.

        Raises
        ------
        StructuralValidationError
            If the batch does not hold exactly four operations, or an entry is
            malformed.
        """
        if isinstance(operations, (str, bytes)) or not isinstance(operations, Sequence):
            raise StructuralValidationError(
                None, "", f"must be a list of exactly {MAX_OPERATIONS} items"
            )
        if len(operations) != MAX_OPERATIONS:
            raise StructuralValidationError(
                None,
                "",
                f"must be a list of exactly {MAX_OPERATIONS} items, got {len(operations)}",
            )

        for index, op in enumerate(operations):
            data = op.to_dict() if isinstance(op, LedgerUpdateOperation) else op
            if not isinstance(data, Mapping):
                raise StructuralValidationError(index, "", "not an object")

            if not _in_range(data.get("operationType"), 0, 9):
                raise StructuralValidationError(index, ".operationType", "expected 0..9")

            for key in ("addVerificationMethodOptions", "updateVerificationMethodOptions"):
                options = _member(data, key)
                method = _member(options, "verificationMethod") if options else None
                if method is None:
                    raise StructuralValidationError(
                        index, f".{key}.verificationMethod", "expected an object"
                    )
                if not _in_range(method.get("type"), 0, 2):
                    raise StructuralValidationError(
                        index, f".{key}.verificationMethod.type", "expected 0..2"
                    )

            for key in (
                "addVerificationMethodRelationOptions",
                "removeVerificationMethodRelationOptions",
            ):
                options = _member(data, key)
                if options is None or not _in_range(options.get("relation"), 0, 5):
                    raise StructuralValidationError(index, f".{key}.relation", "expected 0..5")

            for key in ("addServiceOptions", "updateServiceOptions"):
                options = _member(data, key)
                service = _member(options, "service") if options else None
                endpoints = service.get("serviceEndpoint") if service else None
                if (
                    not isinstance(endpoints, (list, tuple))
                    or len(endpoints) != SERVICE_ENDPOINT_SLOTS
                ):
                    raise StructuralValidationError(
                        index,
                        f".{key}.service.serviceEndpoint",
                        f"expected array length {SERVICE_ENDPOINT_SLOTS}",
                    )

            for key in ("removeVerificationMethodOptions", "removeServiceOptions"):
                if _member(data, key) is None:
                    raise StructuralValidationError(index, f".{key}", "expected an object")

        return operations
