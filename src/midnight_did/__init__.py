"""midnight-did: the ``did:midnight`` DID method.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import midnight_did
>>> midnight_did.__version__
'0.1.0'

Quick start
-----------
::

    from midnight_did import (
        # Domain model
        DIDDocument, VerificationMethod, Service, parse_did_operations,
        # Identifiers
        create_method_identifier_string, parse_method_identifier,
        # Ledger encoding
        prepare_batch, assemble_document, OperationBuilder,
        # Registry
        MidnightDIDRegistrar, MidnightDIDResolver,
    )
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from midnight_did.errors import (
    CollaboratorRejection,
    EncodingConstraintError,
    MidnightDIDError,
    SchemaValidationError,
    StructuralValidationError,
)

# ------------------------------------------------------------------
# Domain model
# ------------------------------------------------------------------
from midnight_did.did.document import (
    DID_CORE_CONTEXT,
    DIDDocument,
    DIDResolutionResult,
    PublicKeyJwk,
    Service,
    VerificationMethod,
    VerificationMethodRelationType,
    VerificationMethodType,
    create_did_document,
    create_service,
    create_verification_method,
    parse_did_document,
)
from midnight_did.did.method import (
    MidnightDID,
    MidnightNetwork,
    create_method_identifier_string,
    parse_contract_address,
    parse_method_identifier,
)
from midnight_did.did.operations import (
    DIDOperation,
    DIDOperationType,
    parse_did_operation,
    parse_did_operations,
)

# ------------------------------------------------------------------
# Ledger encoding
# ------------------------------------------------------------------
from midnight_did.ledger.builder import OperationBuilder
from midnight_did.ledger.decoder import assemble_document, ledger_state_to_json
from midnight_did.ledger.encoder import encode_batch, encode_operation, pad, prepare_batch
from midnight_did.ledger.types import MAX_OPERATIONS, LedgerState, LedgerUpdateOperation

# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------
from midnight_did.registry import (
    DIDRegistration,
    LedgerClient,
    MidnightDIDRegistrar,
    MidnightDIDResolver,
)

__all__ = [
    # version
    "__version__",
    # errors
    "CollaboratorRejection",
    "EncodingConstraintError",
    "MidnightDIDError",
    "SchemaValidationError",
    "StructuralValidationError",
    # domain model
    "DID_CORE_CONTEXT",
    "DIDDocument",
    "DIDOperation",
    "DIDOperationType",
    "DIDResolutionResult",
    "PublicKeyJwk",
    "Service",
    "VerificationMethod",
    "VerificationMethodRelationType",
    "VerificationMethodType",
    "create_did_document",
    "create_service",
    "create_verification_method",
    "parse_did_document",
    "parse_did_operation",
    "parse_did_operations",
    # identifiers
    "MidnightDID",
    "MidnightNetwork",
    "create_method_identifier_string",
    "parse_contract_address",
    "parse_method_identifier",
    # ledger encoding
    "MAX_OPERATIONS",
    "LedgerState",
    "LedgerUpdateOperation",
    "OperationBuilder",
    "assemble_document",
    "encode_batch",
    "encode_operation",
    "ledger_state_to_json",
    "pad",
    "prepare_batch",
    # registry
    "DIDRegistration",
    "LedgerClient",
    "MidnightDIDRegistrar",
    "MidnightDIDResolver",
]
