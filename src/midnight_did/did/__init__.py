"""midnight_did.did: domain model of the ``did:midnight`` method.

Submodules
----------
document
    W3C DID Core document, verification method, and service models.
operations
    The tagged union of DID update operations.
method
    ``did:midnight:<network>:<address>`` identifiers.

Quick start
-----------
::

    from midnight_did.did import create_method_identifier_string, parse_method_identifier

    did = create_method_identifier_string("02" + "ab" * 33, "testnet")
    parse_method_identifier(did).network  # MidnightNetwork.TESTNET
"""
from __future__ import annotations

from midnight_did.did.document import (
    DID_CORE_CONTEXT,
    CurveType,
    DIDDocument,
    DIDDocumentMetadata,
    DIDResolutionMetadata,
    DIDResolutionResult,
    KeyType,
    KnownDIDMediaType,
    PublicKeyJwk,
    Service,
    VerificationMethod,
    VerificationMethodRelationType,
    VerificationMethodType,
    create_did_document,
    create_service,
    create_verification_method,
    parse_did,
    parse_did_document,
    parse_did_key_id,
    parse_key_id,
    parse_did_resolution_result,
    parse_did_url,
    parse_service,
    parse_verification_method,
    parse_verification_method_relation,
    parse_verification_method_type,
)
from midnight_did.did.method import (
    DID_METHOD,
    MidnightDID,
    MidnightNetwork,
    create_method_identifier_string,
    parse_contract_address,
    parse_method_identifier,
    parse_method_identifier_string,
    parse_network,
)
from midnight_did.did.operations import (
    AddService,
    AddVerificationMethod,
    AddVerificationMethodRelation,
    Deactivate,
    DIDOperation,
    DIDOperationType,
    RemoveService,
    RemoveVerificationMethod,
    RemoveVerificationMethodRelation,
    UpdateService,
    UpdateVerificationMethod,
    parse_did_operation,
    parse_did_operations,
)

__all__ = [
    "DID_CORE_CONTEXT",
    "DID_METHOD",
    "AddService",
    "AddVerificationMethod",
    "AddVerificationMethodRelation",
    "CurveType",
    "Deactivate",
    "DIDDocument",
    "DIDDocumentMetadata",
    "DIDOperation",
    "DIDOperationType",
    "DIDResolutionMetadata",
    "DIDResolutionResult",
    "KeyType",
    "KnownDIDMediaType",
    "MidnightDID",
    "MidnightNetwork",
    "PublicKeyJwk",
    "RemoveService",
    "RemoveVerificationMethod",
    "RemoveVerificationMethodRelation",
    "Service",
    "UpdateService",
    "UpdateVerificationMethod",
    "VerificationMethod",
    "VerificationMethodRelationType",
    "VerificationMethodType",
    "create_did_document",
    "create_method_identifier_string",
    "create_service",
    "create_verification_method",
    "parse_contract_address",
    "parse_did",
    "parse_did_document",
    "parse_did_key_id",
    "parse_key_id",
    "parse_did_operation",
    "parse_did_operations",
    "parse_did_resolution_result",
    "parse_did_url",
    "parse_method_identifier",
    "parse_method_identifier_string",
    "parse_network",
    "parse_service",
    "parse_verification_method",
    "parse_verification_method_relation",
    "parse_verification_method_type",
]
