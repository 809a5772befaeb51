"""Record types of the on-chain DID state machine.

The contract accepts a statically shaped :class:`LedgerUpdateOperation`: one
``operation_type`` discriminant plus *every* per-operation option record.
Only the option record matching the discriminant is meaningful; the others
hold the inert defaults produced by their ``default_factory``. Each record is
built fresh, so no two operations ever share a nested default.

Wire shape
----------
``to_dict()`` emits the camelCase form the contract runtime consumes, with
enum members as plain integers::

    {
        "operationType": 1,
        "addVerificationMethodOptions": {"verificationMethod": {...}},
        ...
        "removeServiceOptions": {"id": ""}
    }
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import AbstractSet, Any

from midnight_did.errors import SchemaValidationError

MAX_OPERATIONS: int = 4
SERVICE_ENDPOINT_SLOTS: int = 4


# ------------------------------------------------------------------
# Enumerations (numeric values are fixed by the contract)
# ------------------------------------------------------------------


class OperationType(IntEnum):
    UNDEFINED = 0
    ADD_VERIFICATION_METHOD = 1
    UPDATE_VERIFICATION_METHOD = 2
    REMOVE_VERIFICATION_METHOD = 3
    ADD_VERIFICATION_METHOD_RELATION = 4
    REMOVE_VERIFICATION_METHOD_RELATION = 5
    ADD_SERVICE = 6
    UPDATE_SERVICE = 7
    REMOVE_SERVICE = 8
    DEACTIVATE = 9


class VerificationMethodType(IntEnum):
    UNDEFINED = 0
    JSON_WEB_KEY = 1


class VerificationMethodRelation(IntEnum):
    UNDEFINED = 0
    AUTHENTICATION = 1
    ASSERTION_METHOD = 2
    KEY_AGREEMENT = 3
    CAPABILITY_INVOCATION = 4
    CAPABILITY_DELEGATION = 5


class KeyType(IntEnum):
    EC = 0
    RSA = 1
    OCT = 2
    OKP = 3


class CurveType(IntEnum):
    ED25519 = 0
    JUBJUB = 1


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if not isinstance(data, Mapping):
        raise SchemaValidationError(path, "expected an object")
    if key not in data:
        raise SchemaValidationError(f"{path}.{key}".lstrip("."), "field required")
    return data[key]


def _require_mapping(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _require(data, key, "")
    if not isinstance(value, Mapping):
        raise SchemaValidationError(key, "expected an object keyed by id")
    return value


def _to_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise SchemaValidationError(path, "expected an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SchemaValidationError(path, f"expected an integer: {exc}") from exc


def _id_set(value: Any, path: str) -> frozenset[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise SchemaValidationError(path, "expected an array of method ids")
    return frozenset(value)


def _empty_endpoints() -> tuple[str, ...]:
    return ("",) * SERVICE_ENDPOINT_SLOTS


# ------------------------------------------------------------------
# Key material, methods, services
# ------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerPublicKeyJwk:
    kty: KeyType = KeyType.EC
    crv: CurveType = CurveType.ED25519
    x: int = 0
    y: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"kty": self.kty, "crv": self.crv, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str = "") -> "LedgerPublicKeyJwk":
        return cls(
            kty=_require(data, "kty", path),
            crv=_require(data, "crv", path),
            x=_require(data, "x", path),
            y=_require(data, "y", path),
        )


@dataclass(frozen=True)
class LedgerVerificationMethod:
    """A verification method as stored by the contract (no controller)."""

    id: str = ""
    type: VerificationMethodType = VerificationMethodType.UNDEFINED
    public_key_jwk: LedgerPublicKeyJwk = field(default_factory=LedgerPublicKeyJwk)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "publicKeyJwk": self.public_key_jwk.to_dict(),
        }

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], path: str = ""
    ) -> "LedgerVerificationMethod":
        return cls(
            id=_require(data, "id", path),
            type=_require(data, "type", path),
            public_key_jwk=LedgerPublicKeyJwk.from_dict(
                _require(data, "publicKeyJwk", path), f"{path}.publicKeyJwk"
            ),
        )


@dataclass(frozen=True)
class LedgerService:
    """A service with a fixed-width endpoint array.

    Unused ``service_endpoint`` slots hold empty strings.
    """

    id: str = ""
    type: str = ""
    service_endpoint: tuple[str, ...] = field(default_factory=_empty_endpoints)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "serviceEndpoint": list(self.service_endpoint),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str = "") -> "LedgerService":
        endpoints = _require(data, "serviceEndpoint", path)
        if not isinstance(endpoints, (list, tuple)):
            raise SchemaValidationError(f"{path}.serviceEndpoint", "expected an array")
        for index, endpoint in enumerate(endpoints):
            if not isinstance(endpoint, str):
                raise SchemaValidationError(
                    f"{path}.serviceEndpoint.{index}", "expected a string"
                )
        return cls(
            id=_require(data, "id", path),
            type=_require(data, "type", path),
            service_endpoint=tuple(endpoints),
        )


# ------------------------------------------------------------------
# Option records
# ------------------------------------------------------------------


@dataclass(frozen=True)
class AddVerificationMethodOptions:
    verification_method: LedgerVerificationMethod = field(
        default_factory=LedgerVerificationMethod
    )

    def to_dict(self) -> dict[str, Any]:
        return {"verificationMethod": self.verification_method.to_dict()}


@dataclass(frozen=True)
class UpdateVerificationMethodOptions:
    verification_method: LedgerVerificationMethod = field(
        default_factory=LedgerVerificationMethod
    )

    def to_dict(self) -> dict[str, Any]:
        return {"verificationMethod": self.verification_method.to_dict()}


@dataclass(frozen=True)
class RemoveVerificationMethodOptions:
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}


@dataclass(frozen=True)
class AddVerificationMethodRelationOptions:
    relation: VerificationMethodRelation = VerificationMethodRelation.UNDEFINED
    method_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"relation": self.relation, "methodId": self.method_id}


@dataclass(frozen=True)
class RemoveVerificationMethodRelationOptions:
    relation: VerificationMethodRelation = VerificationMethodRelation.UNDEFINED
    method_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"relation": self.relation, "methodId": self.method_id}


@dataclass(frozen=True)
class AddServiceOptions:
    service: LedgerService = field(default_factory=LedgerService)

    def to_dict(self) -> dict[str, Any]:
        return {"service": self.service.to_dict()}


@dataclass(frozen=True)
class UpdateServiceOptions:
    service: LedgerService = field(default_factory=LedgerService)

    def to_dict(self) -> dict[str, Any]:
        return {"service": self.service.to_dict()}


@dataclass(frozen=True)
class RemoveServiceOptions:
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}


# ------------------------------------------------------------------
# Update operation
# ------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerUpdateOperation:
    """The fixed-shape record submitted to the contract.

    ``LedgerUpdateOperation()`` is the inert template: discriminant
    ``UNDEFINED`` and every option record at its defaults. It is also the
    padding entry used to fill a batch up to :data:`MAX_OPERATIONS`.
    """

    operation_type: OperationType = OperationType.UNDEFINED
    add_verification_method_options: AddVerificationMethodOptions = field(
        default_factory=AddVerificationMethodOptions
    )
    update_verification_method_options: UpdateVerificationMethodOptions = field(
        default_factory=UpdateVerificationMethodOptions
    )
    remove_verification_method_options: RemoveVerificationMethodOptions = field(
        default_factory=RemoveVerificationMethodOptions
    )
    add_verification_method_relation_options: AddVerificationMethodRelationOptions = field(
        default_factory=AddVerificationMethodRelationOptions
    )
    remove_verification_method_relation_options: RemoveVerificationMethodRelationOptions = field(
        default_factory=RemoveVerificationMethodRelationOptions
    )
    add_service_options: AddServiceOptions = field(default_factory=AddServiceOptions)
    update_service_options: UpdateServiceOptions = field(
        default_factory=UpdateServiceOptions
    )
    remove_service_options: RemoveServiceOptions = field(
        default_factory=RemoveServiceOptions
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "operationType": self.operation_type,
            "addVerificationMethodOptions": self.add_verification_method_options.to_dict(),
            "updateVerificationMethodOptions": self.update_verification_method_options.to_dict(),
            "removeVerificationMethodOptions": self.remove_verification_method_options.to_dict(),
            "addVerificationMethodRelationOptions": (
                self.add_verification_method_relation_options.to_dict()
            ),
            "removeVerificationMethodRelationOptions": (
                self.remove_verification_method_relation_options.to_dict()
            ),
            "addServiceOptions": self.add_service_options.to_dict(),
            "updateServiceOptions": self.update_service_options.to_dict(),
            "removeServiceOptions": self.remove_service_options.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LedgerUpdateOperation":
        """Rebuild a record from its wire form.

        Enum members are kept as given so that out-of-range values survive
        until the structural validators report them.

        Raises
        ------
        SchemaValidationError
            If a member of the wire shape is missing.
        """
        avm = _require(data, "addVerificationMethodOptions", "")
        uvm = _require(data, "updateVerificationMethodOptions", "")
        rvm = _require(data, "removeVerificationMethodOptions", "")
        avmr = _require(data, "addVerificationMethodRelationOptions", "")
        rvmr = _require(data, "removeVerificationMethodRelationOptions", "")
        aso = _require(data, "addServiceOptions", "")
        uso = _require(data, "updateServiceOptions", "")
        rso = _require(data, "removeServiceOptions", "")
        return cls(
            operation_type=_require(data, "operationType", ""),
            add_verification_method_options=AddVerificationMethodOptions(
                LedgerVerificationMethod.from_dict(
                    _require(avm, "verificationMethod", "addVerificationMethodOptions"),
                    "addVerificationMethodOptions.verificationMethod",
                )
            ),
            update_verification_method_options=UpdateVerificationMethodOptions(
                LedgerVerificationMethod.from_dict(
                    _require(uvm, "verificationMethod", "updateVerificationMethodOptions"),
                    "updateVerificationMethodOptions.verificationMethod",
                )
            ),
            remove_verification_method_options=RemoveVerificationMethodOptions(
                _require(rvm, "id", "removeVerificationMethodOptions")
            ),
            add_verification_method_relation_options=AddVerificationMethodRelationOptions(
                relation=_require(avmr, "relation", "addVerificationMethodRelationOptions"),
                method_id=_require(avmr, "methodId", "addVerificationMethodRelationOptions"),
            ),
            remove_verification_method_relation_options=RemoveVerificationMethodRelationOptions(
                relation=_require(rvmr, "relation", "removeVerificationMethodRelationOptions"),
                method_id=_require(rvmr, "methodId", "removeVerificationMethodRelationOptions"),
            ),
            add_service_options=AddServiceOptions(
                LedgerService.from_dict(
                    _require(aso, "service", "addServiceOptions"),
                    "addServiceOptions.service",
                )
            ),
            update_service_options=UpdateServiceOptions(
                LedgerService.from_dict(
                    _require(uso, "service", "updateServiceOptions"),
                    "updateServiceOptions.service",
                )
            ),
            remove_service_options=RemoveServiceOptions(
                _require(rso, "id", "removeServiceOptions")
            ),
        )


# ------------------------------------------------------------------
# Ledger state
# ------------------------------------------------------------------

_RELATION_FIELDS: dict[VerificationMethodRelation, str] = {
    VerificationMethodRelation.AUTHENTICATION: "authentication_relation",
    VerificationMethodRelation.ASSERTION_METHOD: "assertion_method_relation",
    VerificationMethodRelation.KEY_AGREEMENT: "key_agreement_relation",
    VerificationMethodRelation.CAPABILITY_INVOCATION: "capability_invocation_relation",
    VerificationMethodRelation.CAPABILITY_DELEGATION: "capability_delegation_relation",
}

_RELATION_KEYS: dict[str, str] = {
    "authentication_relation": "authenticationRelation",
    "assertion_method_relation": "assertionMethodRelation",
    "key_agreement_relation": "keyAgreementRelation",
    "capability_invocation_relation": "capabilityInvocationRelation",
    "capability_delegation_relation": "capabilityDelegationRelation",
}


@dataclass(frozen=True)
class LedgerState:
    """Read-only snapshot of a DID contract's public state.

    Parameters
    ----------
    id:
        32-byte contract-internal identifier.
    version:
        Monotonic counter bumped by every applied batch.
    active:
        ``False`` once the DID has been deactivated.
    operation_count:
        Number of non-padding operations applied so far.
    verification_methods:
        Method id -> method.
    authentication_relation, assertion_method_relation, key_agreement_relation,
    capability_invocation_relation, capability_delegation_relation:
        Method ids bound to each relation.
    services:
        Service id -> service.
    """

    id: bytes = bytes(32)
    version: int = 0
    active: bool = True
    operation_count: int = 0
    verification_methods: Mapping[str, LedgerVerificationMethod] = field(
        default_factory=dict
    )
    authentication_relation: AbstractSet[str] = frozenset()
    assertion_method_relation: AbstractSet[str] = frozenset()
    key_agreement_relation: AbstractSet[str] = frozenset()
    capability_invocation_relation: AbstractSet[str] = frozenset()
    capability_delegation_relation: AbstractSet[str] = frozenset()
    services: Mapping[str, LedgerService] = field(default_factory=dict)

    def relation_set(self, relation: VerificationMethodRelation) -> AbstractSet[str]:
        """Return the method ids bound to ``relation``.

        Raises
        ------
        KeyError
            For :attr:`VerificationMethodRelation.UNDEFINED`, which has no set.
        """
        return getattr(self, _RELATION_FIELDS[relation])

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id.hex(),
            "version": self.version,
            "active": self.active,
            "operationCount": self.operation_count,
            "verificationMethods": {
                method_id: method.to_dict()
                for method_id, method in self.verification_methods.items()
            },
        }
        for attr, key in _RELATION_KEYS.items():
            data[key] = sorted(getattr(self, attr))
        data["services"] = {
            service_id: service.to_dict() for service_id, service in self.services.items()
        }
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LedgerState":
        """Load a state snapshot from its JSON form.

        Raises
        ------
        SchemaValidationError
            If a member is missing or has the wrong shape, or the id is not hex.
        """
        raw_id = _require(data, "id", "")
        try:
            state_id = bytes.fromhex(raw_id)
        except (TypeError, ValueError) as exc:
            raise SchemaValidationError("id", f"expected a hex string: {exc}") from exc
        methods = _require_mapping(data, "verificationMethods")
        services = _require_mapping(data, "services")
        relations = {
            attr: _id_set(data.get(key, ()), key) for attr, key in _RELATION_KEYS.items()
        }
        return cls(
            id=state_id,
            version=_to_int(_require(data, "version", ""), "version"),
            active=bool(_require(data, "active", "")),
            operation_count=_to_int(data.get("operationCount", 0), "operationCount"),
            verification_methods={
                method_id: LedgerVerificationMethod.from_dict(
                    method, f"verificationMethods.{method_id}"
                )
                for method_id, method in methods.items()
            },
            services={
                service_id: LedgerService.from_dict(service, f"services.{service_id}")
                for service_id, service in services.items()
            },
            **relations,
        )
