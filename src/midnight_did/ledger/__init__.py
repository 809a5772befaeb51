"""midnight_did.ledger: the contract-facing representation.

Submodules
----------
types
    Integer enums and fixed-shape records consumed by the contract.
encoder
    Domain operations to padded, validated ledger batches.
decoder
    Ledger state back to DID documents.
builder
    Per-kind constructors for ledger records and a raw batch guard.
"""
from __future__ import annotations

from midnight_did.ledger.builder import OperationBuilder
from midnight_did.ledger.decoder import (
    assemble_document,
    decode_public_key_jwk,
    decode_service,
    decode_verification_method,
    ledger_state_to_json,
)
from midnight_did.ledger.encoder import (
    assert_structurally_valid,
    encode_batch,
    encode_operation,
    encode_public_key_jwk,
    encode_service,
    encode_service_endpoint,
    encode_service_type,
    encode_verification_method,
    pad,
    prepare_batch,
)
from midnight_did.ledger.types import (
    MAX_OPERATIONS,
    SERVICE_ENDPOINT_SLOTS,
    LedgerPublicKeyJwk,
    LedgerService,
    LedgerState,
    LedgerUpdateOperation,
    LedgerVerificationMethod,
    OperationType,
)

__all__ = [
    "MAX_OPERATIONS",
    "SERVICE_ENDPOINT_SLOTS",
    "LedgerPublicKeyJwk",
    "LedgerService",
    "LedgerState",
    "LedgerUpdateOperation",
    "LedgerVerificationMethod",
    "OperationBuilder",
    "OperationType",
    "assemble_document",
    "assert_structurally_valid",
    "decode_public_key_jwk",
    "decode_service",
    "decode_verification_method",
    "encode_batch",
    "encode_operation",
    "encode_public_key_jwk",
    "encode_service",
    "encode_service_endpoint",
    "encode_service_type",
    "encode_verification_method",
    "ledger_state_to_json",
    "pad",
    "prepare_batch",
]
