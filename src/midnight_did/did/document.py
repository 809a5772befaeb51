"""DIDDocument: W3C DID Core document model used by the ``did:midnight`` method.

String types
------------
::

    DIDString   did:<method>:<method-specific-id>        (no path/query/fragment)
    DIDURL      did:<method>:<id>[/path][?query][#frag]
    DIDKeyID    a DIDURL whose fragment is a valid KeyID, e.g. did:ex:123#key-1

Every ``parse_*`` helper accepts an arbitrary value and returns the validated
value, or raises :class:`~midnight_did.errors.SchemaValidationError` naming
the failing field. The ``create_*`` helpers run exactly the same validation
from keyword arguments.

Reference
---------
https://www.w3.org/TR/did-core/#data-model
"""
from __future__ import annotations

import json
import re
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    TypeAdapter,
    ValidationError,
)

from midnight_did.errors import SchemaValidationError

DID_CORE_CONTEXT: str = "https://www.w3.org/ns/did/v1"

# ------------------------------------------------------------------
# String types
# ------------------------------------------------------------------

_KEY_ID_PATTERN = re.compile(r"^[a-zA-Z0-9.\-_:%]+$")
_DID_FORBIDDEN_CHARS = re.compile(r"[/?#]")


def _check_did_url(value: str) -> str:
    if not value.startswith("did:") or len(value) < 5:
        raise ValueError("Invalid DID URL format: must start with 'did:'")
    if len(value.split(":")) < 3:
        raise ValueError("Invalid DID URL format")
    return value


def _check_did(value: str) -> str:
    if not value.startswith("did:") or len(value) < 5:
        raise ValueError("Invalid DID format: must start with 'did:'")
    if len(value.split(":")) < 3 or _DID_FORBIDDEN_CHARS.search(value):
        raise ValueError("Invalid DID format")
    return value


def _check_key_id(value: str) -> str:
    if not _KEY_ID_PATTERN.match(value):
        raise ValueError(
            "Invalid key id: expected a non-empty fragment of [a-zA-Z0-9.-_:%]"
        )
    return value


def _check_did_key_id(value: str) -> str:
    _check_did_url(value)
    _, _, fragment = value.partition("#")
    try:
        _check_key_id(fragment)
    except ValueError:
        raise ValueError("Invalid DID Key ID format: invalid or missing fragment") from None
    return value


DIDString = Annotated[str, AfterValidator(_check_did)]
DIDURL = Annotated[str, AfterValidator(_check_did_url)]
KeyID = Annotated[str, AfterValidator(_check_key_id)]
DIDKeyID = Annotated[str, AfterValidator(_check_did_key_id)]


# ------------------------------------------------------------------
# Enumerations
# ------------------------------------------------------------------


class VerificationMethodType(str, Enum):
    """Verification method types understood by the ledger."""

    UNDEFINED = "Undefined"
    JSON_WEB_KEY = "JsonWebKey"


class KeyType(str, Enum):
    """JWK ``kty`` values."""

    EC = "EC"
    RSA = "RSA"
    OCT = "oct"
    OKP = "OKP"


class CurveType(str, Enum):
    """JWK ``crv`` values."""

    ED25519 = "ed25519"
    JUBJUB = "Jubjub"


class VerificationMethodRelationType(str, Enum):
    """Verification relationships a method can be bound to.

    ``UNDEFINED`` exists only because the ledger reserves a zero value; it
    never names a document property.
    """

    UNDEFINED = "Undefined"
    AUTHENTICATION = "Authentication"
    ASSERTION_METHOD = "AssertionMethod"
    KEY_AGREEMENT = "KeyAgreement"
    CAPABILITY_INVOCATION = "CapabilityInvocation"
    CAPABILITY_DELEGATION = "CapabilityDelegation"

    @property
    def document_property(self) -> str | None:
        """Return the DID document property name for this relation."""
        return _RELATION_PROPERTIES.get(self)


_RELATION_PROPERTIES: dict[VerificationMethodRelationType, str] = {
    VerificationMethodRelationType.AUTHENTICATION: "authentication",
    VerificationMethodRelationType.ASSERTION_METHOD: "assertionMethod",
    VerificationMethodRelationType.KEY_AGREEMENT: "keyAgreement",
    VerificationMethodRelationType.CAPABILITY_INVOCATION: "capabilityInvocation",
    VerificationMethodRelationType.CAPABILITY_DELEGATION: "capabilityDelegation",
}


class KnownDIDMediaType(str, Enum):
    """Media types a DID resolution result may be served as."""

    DID_LD_JSON = "application/did+ld+json"
    DID_JSON = "application/did+json"
    LD_JSON = "application/ld+json"
    JSON = "application/json"


# ------------------------------------------------------------------
# Verification method and service
# ------------------------------------------------------------------


class PublicKeyJwk(BaseModel):
    """Public key in JWK form with integer coordinates.

    ``x`` and ``y`` are arbitrary-precision integers because the ledger
    stores curve points as field elements, not base64url strings.
    """

    model_config = ConfigDict(frozen=True)

    kty: KeyType
    crv: CurveType
    x: StrictInt
    y: StrictInt


class VerificationMethod(BaseModel):
    """A verification method entry of a DID document.

    Parameters
    ----------
    id:
        The key id, a DID URL with a fragment (``did:...#key-1``).
    type:
        :class:`VerificationMethodType`.
    controller:
        The DID controlling the key.
    public_key_jwk:
        The public key (serialised as ``publicKeyJwk``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: DIDKeyID
    type: VerificationMethodType
    controller: DIDString
    public_key_jwk: PublicKeyJwk = Field(alias="publicKeyJwk")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a W3C-compatible plain dictionary."""
        return self.model_dump(by_alias=True, mode="json")


class Service(BaseModel):
    """A service entry of a DID document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: Union[str, list[str]]
    service_endpoint: Union[str, list[str]] = Field(alias="serviceEndpoint")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a W3C-compatible plain dictionary."""
        return self.model_dump(by_alias=True, mode="json")


# ------------------------------------------------------------------
# DID Document
# ------------------------------------------------------------------


class DIDDocument(BaseModel):
    """A W3C DID Core document.

    Optional collections that are absent are stored as ``None`` and left out
    of :meth:`to_dict` output, so consumers see a single falsy representation
    for "not present". Unknown top-level members are kept as extras.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    context: Union[str, list[str]] = Field(alias="@context")
    id: DIDString
    also_known_as: list[DIDString] | None = Field(default=None, alias="alsoKnownAs")
    controller: Union[DIDString, list[DIDString], None] = None
    verification_method: list[VerificationMethod] | None = Field(
        default=None, alias="verificationMethod"
    )
    authentication: list[str] | None = None
    assertion_method: list[str] | None = Field(default=None, alias="assertionMethod")
    key_agreement: list[str] | None = Field(default=None, alias="keyAgreement")
    capability_invocation: list[str] | None = Field(
        default=None, alias="capabilityInvocation"
    )
    capability_delegation: list[str] | None = Field(
        default=None, alias="capabilityDelegation"
    )
    service: list[Service] | None = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def relation(self, relation: VerificationMethodRelationType) -> list[str] | None:
        """Return the method ids bound to ``relation``, or ``None`` if absent."""
        if relation is VerificationMethodRelationType.AUTHENTICATION:
            return self.authentication
        if relation is VerificationMethodRelationType.ASSERTION_METHOD:
            return self.assertion_method
        if relation is VerificationMethodRelationType.KEY_AGREEMENT:
            return self.key_agreement
        if relation is VerificationMethodRelationType.CAPABILITY_INVOCATION:
            return self.capability_invocation
        if relation is VerificationMethodRelationType.CAPABILITY_DELEGATION:
            return self.capability_delegation
        return None

    def resolve_verification_method(self, method_id: str) -> VerificationMethod | None:
        """Return the VerificationMethod with the given id, or None."""
        for method in self.verification_method or []:
            if method.id == method_id:
                return method
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary using DID Core member names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize this document to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "DIDDocument":
        """Deserialize a DIDDocument from a JSON string.

        Raises
        ------
        SchemaValidationError
            If the JSON is malformed or the document fails validation.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise SchemaValidationError("", f"Invalid JSON: {exc}") from exc
        return parse_did_document(data)


# ------------------------------------------------------------------
# Resolution result
# ------------------------------------------------------------------


class DIDDocumentMetadata(BaseModel):
    """Metadata about the resolved document (DID Core §7.1.3)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    created: str | None = None
    updated: str | None = None
    deactivated: bool | None = None
    version_id: str | None = Field(default=None, alias="versionId")
    next_update: str | None = Field(default=None, alias="nextUpdate")
    next_version_id: str | None = Field(default=None, alias="nextVersionId")
    equivalent_id: list[str] | None = Field(default=None, alias="equivalentId")
    canonical_id: str | None = Field(default=None, alias="canonicalId")


class DIDResolutionMetadata(BaseModel):
    """Metadata about the resolution process itself."""

    model_config = ConfigDict(populate_by_name=True)

    content_type: KnownDIDMediaType | None = Field(default=None, alias="contentType")
    error: str | None = None


class DIDResolutionResult(BaseModel):
    """The full output of a DID resolution."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Union[str, list[str], None] = Field(default=None, alias="@context")
    did_document: DIDDocument | None = Field(default=None, alias="didDocument")
    did_document_metadata: DIDDocumentMetadata = Field(alias="didDocumentMetadata")
    did_resolution_metadata: DIDResolutionMetadata = Field(
        alias="didResolutionMetadata"
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------

_DID_ADAPTER: TypeAdapter[str] = TypeAdapter(DIDString)
_DID_URL_ADAPTER: TypeAdapter[str] = TypeAdapter(DIDURL)
_KEY_ID_ADAPTER: TypeAdapter[str] = TypeAdapter(KeyID)
_DID_KEY_ID_ADAPTER: TypeAdapter[str] = TypeAdapter(DIDKeyID)
_VERIFICATION_METHOD_TYPE_ADAPTER: TypeAdapter[VerificationMethodType] = TypeAdapter(
    VerificationMethodType
)
_RELATION_ADAPTER: TypeAdapter[VerificationMethodRelationType] = TypeAdapter(
    VerificationMethodRelationType
)


def _validate(adapter: TypeAdapter[Any], value: object) -> Any:
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise SchemaValidationError.from_pydantic(exc) from exc


def _validate_model(model: type[BaseModel], value: object) -> Any:
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise SchemaValidationError.from_pydantic(exc) from exc


def parse_did(value: object) -> str:
    """Validate a DID without path, query, or fragment."""
    return _validate(_DID_ADAPTER, value)


def parse_did_url(value: object) -> str:
    """Validate a DID URL."""
    return _validate(_DID_URL_ADAPTER, value)


def parse_key_id(value: object) -> str:
    """Validate a bare key-id fragment such as ``key-1``."""
    return _validate(_KEY_ID_ADAPTER, value)


def parse_did_key_id(value: object) -> str:
    """Validate a DID URL carrying a key-id fragment."""
    return _validate(_DID_KEY_ID_ADAPTER, value)


def parse_verification_method_type(value: object) -> VerificationMethodType:
    return _validate(_VERIFICATION_METHOD_TYPE_ADAPTER, value)


def parse_verification_method_relation(value: object) -> VerificationMethodRelationType:
    return _validate(_RELATION_ADAPTER, value)


def parse_verification_method(value: object) -> VerificationMethod:
    return _validate_model(VerificationMethod, value)


def parse_service(value: object) -> Service:
    return _validate_model(Service, value)


def parse_did_document(value: object) -> DIDDocument:
    return _validate_model(DIDDocument, value)


def parse_did_resolution_result(value: object) -> DIDResolutionResult:
    return _validate_model(DIDResolutionResult, value)


# ------------------------------------------------------------------
# Creation helpers
# ------------------------------------------------------------------


def create_verification_method(
    *,
    id: str,
    type: VerificationMethodType | str,
    controller: str,
    public_key_jwk: PublicKeyJwk | dict[str, Any],
) -> VerificationMethod:
    """Build a validated :class:`VerificationMethod`.

    Raises
    ------
    SchemaValidationError
        If any field is invalid.
    """
    return parse_verification_method(
        {
            "id": id,
            "type": type,
            "controller": controller,
            "publicKeyJwk": public_key_jwk,
        }
    )


def create_service(
    *,
    id: str,
    type: str | list[str],
    service_endpoint: str | list[str],
) -> Service:
    """Build a validated :class:`Service`."""
    return parse_service({"id": id, "type": type, "serviceEndpoint": service_endpoint})


def create_did_document(
    id: str,
    *,
    context: str | list[str] | None = None,
    also_known_as: list[str] | None = None,
    controller: str | list[str] | None = None,
    verification_method: list[VerificationMethod] | None = None,
    authentication: list[str] | None = None,
    assertion_method: list[str] | None = None,
    key_agreement: list[str] | None = None,
    capability_invocation: list[str] | None = None,
    capability_delegation: list[str] | None = None,
    service: list[Service] | None = None,
) -> DIDDocument:
    """Build a validated :class:`DIDDocument`.

    ``context`` defaults to the DID Core v1 context. Every omitted optional
    collection is stored as ``None``.

    Raises
    ------
    SchemaValidationError
        If the id or any member fails validation.
    """
    return parse_did_document(
        {
            "@context": context if context is not None else DID_CORE_CONTEXT,
            "id": id,
            "alsoKnownAs": also_known_as,
            "controller": controller,
            "verificationMethod": verification_method,
            "authentication": authentication,
            "assertionMethod": assertion_method,
            "keyAgreement": key_agreement,
            "capabilityInvocation": capability_invocation,
            "capabilityDelegation": capability_delegation,
            "service": service,
        }
    )
