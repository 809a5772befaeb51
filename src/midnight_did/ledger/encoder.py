"""Domain -> ledger encoding.

Turns :mod:`midnight_did.did.operations` values into the contract's
fixed-shape :class:`~midnight_did.ledger.types.LedgerUpdateOperation`
records, pads batches to :data:`~midnight_did.ledger.types.MAX_OPERATIONS`
and checks them structurally before they are handed to a ledger client.

Typical use::

    batch = prepare_batch([
        AddVerificationMethod(verification_method=vm),
        AddVerificationMethodRelation(relation="Authentication", method_id=vm.id),
    ])
    client.apply_operations(address, batch)
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from enum import IntEnum
from types import MappingProxyType
from typing import Any

from midnight_did.did import document as domain
from midnight_did.did.operations import DIDOperation, DIDOperationType, parse_did_operation
from midnight_did.errors import EncodingConstraintError, StructuralValidationError
from midnight_did.ledger import types as ledger
from midnight_did.ledger.types import (
    MAX_OPERATIONS,
    SERVICE_ENDPOINT_SLOTS,
    LedgerService,
    LedgerUpdateOperation,
    LedgerVerificationMethod,
)

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Enum tables
# ------------------------------------------------------------------

KEY_TYPE_MAP: Mapping[domain.KeyType, ledger.KeyType] = MappingProxyType(
    {
        domain.KeyType.EC: ledger.KeyType.EC,
        domain.KeyType.RSA: ledger.KeyType.RSA,
        domain.KeyType.OCT: ledger.KeyType.OCT,
        domain.KeyType.OKP: ledger.KeyType.OKP,
    }
)

CURVE_TYPE_MAP: Mapping[domain.CurveType, ledger.CurveType] = MappingProxyType(
    {
        domain.CurveType.ED25519: ledger.CurveType.ED25519,
        domain.CurveType.JUBJUB: ledger.CurveType.JUBJUB,
    }
)

VERIFICATION_METHOD_TYPE_MAP: Mapping[
    domain.VerificationMethodType, ledger.VerificationMethodType
] = MappingProxyType(
    {
        domain.VerificationMethodType.UNDEFINED: ledger.VerificationMethodType.UNDEFINED,
        domain.VerificationMethodType.JSON_WEB_KEY: ledger.VerificationMethodType.JSON_WEB_KEY,
    }
)

VERIFICATION_METHOD_RELATION_MAP: Mapping[
    domain.VerificationMethodRelationType, ledger.VerificationMethodRelation
] = MappingProxyType(
    {
        domain.VerificationMethodRelationType.UNDEFINED: (
            ledger.VerificationMethodRelation.UNDEFINED
        ),
        domain.VerificationMethodRelationType.AUTHENTICATION: (
            ledger.VerificationMethodRelation.AUTHENTICATION
        ),
        domain.VerificationMethodRelationType.ASSERTION_METHOD: (
            ledger.VerificationMethodRelation.ASSERTION_METHOD
        ),
        domain.VerificationMethodRelationType.KEY_AGREEMENT: (
            ledger.VerificationMethodRelation.KEY_AGREEMENT
        ),
        domain.VerificationMethodRelationType.CAPABILITY_INVOCATION: (
            ledger.VerificationMethodRelation.CAPABILITY_INVOCATION
        ),
        domain.VerificationMethodRelationType.CAPABILITY_DELEGATION: (
            ledger.VerificationMethodRelation.CAPABILITY_DELEGATION
        ),
    }
)

OPERATION_TYPE_MAP: Mapping[DIDOperationType, ledger.OperationType] = MappingProxyType(
    {
        DIDOperationType.ADD_VERIFICATION_METHOD: ledger.OperationType.ADD_VERIFICATION_METHOD,
        DIDOperationType.UPDATE_VERIFICATION_METHOD: (
            ledger.OperationType.UPDATE_VERIFICATION_METHOD
        ),
        DIDOperationType.REMOVE_VERIFICATION_METHOD: (
            ledger.OperationType.REMOVE_VERIFICATION_METHOD
        ),
        DIDOperationType.ADD_VERIFICATION_METHOD_RELATION: (
            ledger.OperationType.ADD_VERIFICATION_METHOD_RELATION
        ),
        DIDOperationType.REMOVE_VERIFICATION_METHOD_RELATION: (
            ledger.OperationType.REMOVE_VERIFICATION_METHOD_RELATION
        ),
        DIDOperationType.ADD_SERVICE: ledger.OperationType.ADD_SERVICE,
        DIDOperationType.UPDATE_SERVICE: ledger.OperationType.UPDATE_SERVICE,
        DIDOperationType.REMOVE_SERVICE: ledger.OperationType.REMOVE_SERVICE,
        DIDOperationType.DEACTIVATE: ledger.OperationType.DEACTIVATE,
    }
)


# ------------------------------------------------------------------
# Value encoders
# ------------------------------------------------------------------


def encode_public_key_jwk(jwk: domain.PublicKeyJwk) -> ledger.LedgerPublicKeyJwk:
    return ledger.LedgerPublicKeyJwk(
        kty=KEY_TYPE_MAP[jwk.kty],
        crv=CURVE_TYPE_MAP[jwk.crv],
        x=jwk.x,
        y=jwk.y,
    )


def encode_verification_method(method: domain.VerificationMethod) -> LedgerVerificationMethod:
    """Encode a verification method. The controller is implied by the contract."""
    return LedgerVerificationMethod(
        id=method.id,
        type=VERIFICATION_METHOD_TYPE_MAP[method.type],
        public_key_jwk=encode_public_key_jwk(method.public_key_jwk),
    )


def encode_service_type(service_type: str | Sequence[str]) -> str:
    """Collapse a service type to the single string the ledger stores.

    Raises
    ------
    EncodingConstraintError
        If ``service_type`` is a list with other than exactly one element.
    """
    if isinstance(service_type, str):
        return service_type
    if isinstance(service_type, (list, tuple)) and len(service_type) == 1:
        return service_type[0]
    raise EncodingConstraintError(
        "service type must be a string or single-element array"
    )


def encode_service_endpoint(service_endpoint: str | Sequence[str]) -> tuple[str, ...]:
    """Right-pad a service endpoint to the ledger's four slots.

    ``"https://x"`` becomes ``("https://x", "", "", "")``.

    Raises
    ------
    EncodingConstraintError
        If more than four endpoints are given.
    """
    if isinstance(service_endpoint, str):
        endpoints = [service_endpoint]
    elif isinstance(service_endpoint, (list, tuple)):
        if len(service_endpoint) > SERVICE_ENDPOINT_SLOTS:
            raise EncodingConstraintError(
                "serviceEndpoint must contain at most four elements"
            )
        endpoints = list(service_endpoint)
    else:
        raise EncodingConstraintError(
            f"Invalid type for serviceEndpoint: {type(service_endpoint).__name__}"
        )
    endpoints.extend([""] * (SERVICE_ENDPOINT_SLOTS - len(endpoints)))
    return tuple(endpoints)


def encode_service(service: domain.Service) -> LedgerService:
    return LedgerService(
        id=service.id,
        type=encode_service_type(service.type),
        service_endpoint=encode_service_endpoint(service.service_endpoint),
    )


# ------------------------------------------------------------------
# Operation encoders
# ------------------------------------------------------------------


def encode_operation(operation: DIDOperation | Mapping[str, Any]) -> LedgerUpdateOperation:
    """Encode one domain operation into a fixed-shape ledger record.

    Starts from the inert :class:`LedgerUpdateOperation` template, sets the
    discriminant and fills in only the option record for that discriminant.

    Parameters
    ----------
    operation:
        A parsed operation, or its JSON form.

    Raises
    ------
    SchemaValidationError
        If a mapping is given that does not parse as an operation.
    EncodingConstraintError
        If the operation type is unsupported or a service does not fit.
    """
    if isinstance(operation, Mapping):
        operation = parse_did_operation(operation)

    tag = getattr(operation, "type", None)
    try:
        op_type = DIDOperationType(tag)
    except ValueError:
        raise EncodingConstraintError(f"Unsupported operation type: {tag}") from None

    template = LedgerUpdateOperation(operation_type=OPERATION_TYPE_MAP[op_type])

    if op_type is DIDOperationType.ADD_VERIFICATION_METHOD:
        encoded = replace(
            template,
            add_verification_method_options=ledger.AddVerificationMethodOptions(
                encode_verification_method(operation.verification_method)
            ),
        )
    elif op_type is DIDOperationType.UPDATE_VERIFICATION_METHOD:
        encoded = replace(
            template,
            update_verification_method_options=ledger.UpdateVerificationMethodOptions(
                encode_verification_method(operation.verification_method)
            ),
        )
    elif op_type is DIDOperationType.REMOVE_VERIFICATION_METHOD:
        encoded = replace(
            template,
            remove_verification_method_options=ledger.RemoveVerificationMethodOptions(
                operation.id
            ),
        )
    elif op_type is DIDOperationType.ADD_VERIFICATION_METHOD_RELATION:
        encoded = replace(
            template,
            add_verification_method_relation_options=ledger.AddVerificationMethodRelationOptions(
                relation=VERIFICATION_METHOD_RELATION_MAP[operation.relation],
                method_id=operation.method_id,
            ),
        )
    elif op_type is DIDOperationType.REMOVE_VERIFICATION_METHOD_RELATION:
        encoded = replace(
            template,
            remove_verification_method_relation_options=(
                ledger.RemoveVerificationMethodRelationOptions(
                    relation=VERIFICATION_METHOD_RELATION_MAP[operation.relation],
                    method_id=operation.method_id,
                )
            ),
        )
    elif op_type is DIDOperationType.ADD_SERVICE:
        encoded = replace(
            template,
            add_service_options=ledger.AddServiceOptions(encode_service(operation.service)),
        )
    elif op_type is DIDOperationType.UPDATE_SERVICE:
        encoded = replace(
            template,
            update_service_options=ledger.UpdateServiceOptions(
                encode_service(operation.service)
            ),
        )
    elif op_type is DIDOperationType.REMOVE_SERVICE:
        encoded = replace(
            template,
            remove_service_options=ledger.RemoveServiceOptions(operation.service_id),
        )
    else:
        encoded = template

    logger.debug("Encoded %s as operationType=%d", op_type.value, encoded.operation_type)
    return encoded


def encode_batch(
    operations: Iterable[DIDOperation | Mapping[str, Any]],
) -> list[LedgerUpdateOperation]:
    """Encode each operation independently, preserving order."""
    return [encode_operation(operation) for operation in operations]


def pad(
    operations: Sequence[LedgerUpdateOperation],
    max_operations: int = MAX_OPERATIONS,
) -> list[LedgerUpdateOperation]:
    """Append inert ``UNDEFINED`` records until the batch holds ``max_operations``.

    Raises
    ------
    EncodingConstraintError
        If the batch already holds more than ``max_operations`` records.
    """
    if len(operations) > max_operations:
        raise EncodingConstraintError(
            f"Cannot pad: input exceeds {max_operations} operations"
        )
    padded = list(operations)
    padded.extend(
        LedgerUpdateOperation() for _ in range(max_operations - len(padded))
    )
    return padded


# ------------------------------------------------------------------
# Pre-submission validation
# ------------------------------------------------------------------


def _is_enum_value(enum_cls: type[IntEnum], value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value in enum_cls._value2member_map_


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_non_empty_str(value: object) -> bool:
    return isinstance(value, str) and value != ""


def _check_verification_method(
    index: int, method: LedgerVerificationMethod, path: str
) -> None:
    if not _is_non_empty_str(method.id):
        raise StructuralValidationError(index, f"{path}.id", "expected non-empty string")
    if not _is_enum_value(ledger.VerificationMethodType, method.type):
        raise StructuralValidationError(
            index, f"{path}.type", f"invalid VerificationMethodType: {method.type!r}"
        )
    jwk = method.public_key_jwk
    if not _is_enum_value(ledger.KeyType, jwk.kty):
        raise StructuralValidationError(
            index, f"{path}.publicKeyJwk.kty", f"invalid KeyType: {jwk.kty!r}"
        )
    if not _is_enum_value(ledger.CurveType, jwk.crv):
        raise StructuralValidationError(
            index, f"{path}.publicKeyJwk.crv", f"invalid CurveType: {jwk.crv!r}"
        )
    if not (_is_int(jwk.x) and _is_int(jwk.y)):
        raise StructuralValidationError(
            index,
            f"{path}.publicKeyJwk.(x,y)",
            f"expected integers for x and y, got x={jwk.x!r} y={jwk.y!r}",
        )


def _check_relation(index: int, relation: object, method_id: object, path: str) -> None:
    if not _is_enum_value(ledger.VerificationMethodRelation, relation):
        raise StructuralValidationError(
            index, f"{path}.relation", f"invalid VerificationMethodRelation: {relation!r}"
        )
    if not _is_non_empty_str(method_id):
        raise StructuralValidationError(
            index, f"{path}.methodId", "expected non-empty string"
        )


def _check_service(index: int, service: LedgerService, path: str) -> None:
    if not isinstance(service.id, str):
        raise StructuralValidationError(index, f"{path}.id", "expected string")
    if not isinstance(service.type, str):
        raise StructuralValidationError(index, f"{path}.type", "expected string")
    endpoints = service.service_endpoint
    if not isinstance(endpoints, (list, tuple)) or len(endpoints) != SERVICE_ENDPOINT_SLOTS:
        raise StructuralValidationError(
            index, f"{path}.serviceEndpoint", f"expected string[{SERVICE_ENDPOINT_SLOTS}]"
        )
    for slot, endpoint in enumerate(endpoints):
        if not isinstance(endpoint, str):
            raise StructuralValidationError(
                index, f"{path}.serviceEndpoint[{slot}]", "expected string"
            )


def assert_structurally_valid(operations: Sequence[LedgerUpdateOperation]) -> None:
    """Check an encoded batch before it is submitted.

    For every record the discriminant decides which option record is
    meaningful; only that record is checked.

    Raises
    ------
    StructuralValidationError
        On the first malformed field, naming the batch index and field path.
    """
    for index, op in enumerate(operations):
        op_type = op.operation_type
        if not _is_enum_value(ledger.OperationType, op_type):
            raise StructuralValidationError(
                index, ".operationType", f"invalid OperationType: {op_type!r}"
            )

        if op_type == ledger.OperationType.ADD_VERIFICATION_METHOD:
            _check_verification_method(
                index,
                op.add_verification_method_options.verification_method,
                ".addVerificationMethodOptions.verificationMethod",
            )
        elif op_type == ledger.OperationType.UPDATE_VERIFICATION_METHOD:
            _check_verification_method(
                index,
                op.update_verification_method_options.verification_method,
                ".updateVerificationMethodOptions.verificationMethod",
            )
        elif op_type == ledger.OperationType.REMOVE_VERIFICATION_METHOD:
            if not isinstance(op.remove_verification_method_options.id, str):
                raise StructuralValidationError(
                    index, ".removeVerificationMethodOptions.id", "expected string"
                )
        elif op_type == ledger.OperationType.ADD_VERIFICATION_METHOD_RELATION:
            options = op.add_verification_method_relation_options
            _check_relation(
                index,
                options.relation,
                options.method_id,
                ".addVerificationMethodRelationOptions",
            )
        elif op_type == ledger.OperationType.REMOVE_VERIFICATION_METHOD_RELATION:
            options = op.remove_verification_method_relation_options
            _check_relation(
                index,
                options.relation,
                options.method_id,
                ".removeVerificationMethodRelationOptions",
            )
        elif op_type == ledger.OperationType.ADD_SERVICE:
            _check_service(index, op.add_service_options.service, ".addServiceOptions.service")
        elif op_type == ledger.OperationType.UPDATE_SERVICE:
            _check_service(
                index, op.update_service_options.service, ".updateServiceOptions.service"
            )
        elif op_type == ledger.OperationType.REMOVE_SERVICE:
            if not isinstance(op.remove_service_options.id, str):
                raise StructuralValidationError(
                    index, ".removeServiceOptions.id", "expected string"
                )


def prepare_batch(
    operations: Iterable[DIDOperation | Mapping[str, Any]],
) -> list[LedgerUpdateOperation]:
    """Encode, pad and validate a batch ready for submission."""
    batch = pad(encode_batch(operations))
    assert_structurally_valid(batch)
    return batch
