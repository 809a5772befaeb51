"""DID update operations for the ``did:midnight`` method.

A :data:`DIDOperation` is one of nine variants, discriminated by its
``type`` member::

    {"type": "AddVerificationMethod", "verificationMethod": {...}}
    {"type": "RemoveVerificationMethod", "id": "did:...#key-1"}
    {"type": "AddVerificationMethodRelation", "relation": "Authentication",
     "methodId": "did:...#key-1"}
    {"type": "Deactivate"}

The model does not check that a relation references an existing method;
the ledger enforces that when the batch executes.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from midnight_did.did.document import (
    Service,
    VerificationMethod,
    VerificationMethodRelationType,
    _validate,
)


class DIDOperationType(str, Enum):
    """Every operation kind the ledger can apply."""

    ADD_VERIFICATION_METHOD = "AddVerificationMethod"
    UPDATE_VERIFICATION_METHOD = "UpdateVerificationMethod"
    REMOVE_VERIFICATION_METHOD = "RemoveVerificationMethod"
    ADD_VERIFICATION_METHOD_RELATION = "AddVerificationMethodRelation"
    REMOVE_VERIFICATION_METHOD_RELATION = "RemoveVerificationMethodRelation"
    ADD_SERVICE = "AddService"
    UPDATE_SERVICE = "UpdateService"
    REMOVE_SERVICE = "RemoveService"
    DEACTIVATE = "Deactivate"


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def operation_type(self) -> DIDOperationType:
        return DIDOperationType(self.type)  # type: ignore[attr-defined]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON form accepted by :func:`parse_did_operation`."""
        return self.model_dump(by_alias=True, mode="json")


class AddVerificationMethod(_Operation):
    type: Literal["AddVerificationMethod"] = "AddVerificationMethod"
    verification_method: VerificationMethod = Field(alias="verificationMethod")


class UpdateVerificationMethod(_Operation):
    type: Literal["UpdateVerificationMethod"] = "UpdateVerificationMethod"
    verification_method: VerificationMethod = Field(alias="verificationMethod")


class RemoveVerificationMethod(_Operation):
    type: Literal["RemoveVerificationMethod"] = "RemoveVerificationMethod"
    id: str


class AddVerificationMethodRelation(_Operation):
    type: Literal["AddVerificationMethodRelation"] = "AddVerificationMethodRelation"
    relation: VerificationMethodRelationType
    method_id: str = Field(alias="methodId")


class RemoveVerificationMethodRelation(_Operation):
    type: Literal["RemoveVerificationMethodRelation"] = "RemoveVerificationMethodRelation"
    relation: VerificationMethodRelationType
    method_id: str = Field(alias="methodId")


class AddService(_Operation):
    type: Literal["AddService"] = "AddService"
    service: Service


class UpdateService(_Operation):
    type: Literal["UpdateService"] = "UpdateService"
    service: Service


class RemoveService(_Operation):
    type: Literal["RemoveService"] = "RemoveService"
    service_id: str = Field(alias="serviceId")


class Deactivate(_Operation):
    type: Literal["Deactivate"] = "Deactivate"


DIDOperation = Annotated[
    Union[
        AddVerificationMethod,
        UpdateVerificationMethod,
        RemoveVerificationMethod,
        AddVerificationMethodRelation,
        RemoveVerificationMethodRelation,
        AddService,
        UpdateService,
        RemoveService,
        Deactivate,
    ],
    Field(discriminator="type"),
]

_OPERATION_ADAPTER: TypeAdapter[Any] = TypeAdapter(DIDOperation)
_OPERATIONS_ADAPTER: TypeAdapter[list[Any]] = TypeAdapter(list[DIDOperation])


def parse_did_operation(value: object) -> DIDOperation:
    """Validate a single operation.

    Raises
    ------
    SchemaValidationError
        If ``type`` is missing or unknown, or the payload for that type is
        incomplete.
    """
    return _validate(_OPERATION_ADAPTER, value)


def parse_did_operations(values: object) -> list[DIDOperation]:
    """Validate a list of operations, keeping their order."""
    return _validate(_OPERATIONS_ADAPTER, values)
