"""Ledger -> domain decoding, used when resolving a DID.

:func:`assemble_document` rebuilds a W3C DID document from a contract's
public state; :func:`ledger_state_to_json` gives a plain diagnostic view of
the same state without assembling a document.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from midnight_did.did import document as domain
from midnight_did.did.method import MidnightNetwork, create_method_identifier_string
from midnight_did.errors import SchemaValidationError
from midnight_did.ledger import types as ledger
from midnight_did.ledger.encoder import (
    CURVE_TYPE_MAP,
    KEY_TYPE_MAP,
    VERIFICATION_METHOD_RELATION_MAP,
    VERIFICATION_METHOD_TYPE_MAP,
)

logger = logging.getLogger(__name__)

_K = TypeVar("_K")
_V = TypeVar("_V")


def _invert(table: Mapping[_K, _V]) -> Mapping[_V, _K]:
    return MappingProxyType({value: key for key, value in table.items()})


KEY_TYPE_REVERSE_MAP: Mapping[ledger.KeyType, domain.KeyType] = _invert(KEY_TYPE_MAP)
CURVE_TYPE_REVERSE_MAP: Mapping[ledger.CurveType, domain.CurveType] = _invert(CURVE_TYPE_MAP)
VERIFICATION_METHOD_TYPE_REVERSE_MAP: Mapping[
    ledger.VerificationMethodType, domain.VerificationMethodType
] = _invert(VERIFICATION_METHOD_TYPE_MAP)
VERIFICATION_METHOD_RELATION_REVERSE_MAP: Mapping[
    ledger.VerificationMethodRelation, domain.VerificationMethodRelationType
] = _invert(VERIFICATION_METHOD_RELATION_MAP)


def _lookup(table: Mapping[Any, _V], value: object, path: str, kind: str) -> _V:
    try:
        return table[value]
    except (KeyError, TypeError):
        raise SchemaValidationError(path, f"unknown {kind}: {value!r}") from None


def decode_public_key_jwk(jwk: ledger.LedgerPublicKeyJwk) -> domain.PublicKeyJwk:
    return domain._validate_model(
        domain.PublicKeyJwk,
        {
            "kty": _lookup(KEY_TYPE_REVERSE_MAP, jwk.kty, "publicKeyJwk.kty", "KeyType"),
            "crv": _lookup(CURVE_TYPE_REVERSE_MAP, jwk.crv, "publicKeyJwk.crv", "CurveType"),
            "x": jwk.x,
            "y": jwk.y,
        },
    )


def decode_verification_method(
    method: ledger.LedgerVerificationMethod, controller: str
) -> domain.VerificationMethod:
    """Decode a stored method, attaching ``controller`` which the ledger omits."""
    return domain.create_verification_method(
        id=method.id,
        type=_lookup(
            VERIFICATION_METHOD_TYPE_REVERSE_MAP,
            method.type,
            "type",
            "VerificationMethodType",
        ),
        controller=controller,
        public_key_jwk=decode_public_key_jwk(method.public_key_jwk),
    )


def decode_service(service: ledger.LedgerService) -> domain.Service:
    """Decode a stored service, dropping the blank endpoint slots.

    ``("https://x", "", "", "")`` decodes back to ``["https://x"]``.
    """
    endpoints = [endpoint for endpoint in service.service_endpoint if endpoint.strip() != ""]
    return domain.create_service(
        id=service.id,
        type=service.type,
        service_endpoint=endpoints,
    )


def assemble_document(
    state: ledger.LedgerState,
    network: MidnightNetwork | str,
    address: str,
) -> domain.DIDDocument:
    """Build the DID document for the contract at ``address`` on ``network``.

    Relation lists and ``service`` are left out of the document when the
    ledger holds nothing for them. Relation ids are sorted so that the
    output does not depend on set iteration order.

    Raises
    ------
    SchemaValidationError
        If ``address`` or ``network`` is invalid or a stored value cannot be
        decoded.
    """
    did = create_method_identifier_string(address, network)

    methods = [
        decode_verification_method(method, did)
        for method in state.verification_methods.values()
    ]

    relations: dict[str, list[str]] = {}
    for ledger_relation, relation in VERIFICATION_METHOD_RELATION_REVERSE_MAP.items():
        if ledger_relation == ledger.VerificationMethodRelation.UNDEFINED:
            continue
        ids = sorted(state.relation_set(ledger_relation))
        if ids:
            relations[relation.document_property] = ids

    services = [decode_service(service) for service in state.services.values()]

    document = domain.parse_did_document(
        {
            "@context": domain.DID_CORE_CONTEXT,
            "id": did,
            "controller": did,
            "verificationMethod": methods or None,
            **relations,
            "service": services or None,
        }
    )
    logger.debug(
        "Assembled document for %s (version=%d, methods=%d, services=%d)",
        did,
        state.version,
        len(methods),
        len(services),
    )
    return document


def ledger_state_to_json(state: ledger.LedgerState) -> dict[str, Any]:
    """Return a JSON-compatible view of raw ledger state.

    Verification methods keep their numeric ledger ``type`` while key
    material and services are shown in their domain form.
    """
    return {
        "id": state.id.hex(),
        "version": state.version,
        "active": state.active,
        "operationCount": state.operation_count,
        "verificationMethods": [
            {
                "id": method_id,
                "type": int(method.type),
                "publicKeyJwk": decode_public_key_jwk(method.public_key_jwk).model_dump(
                    mode="json"
                ),
            }
            for method_id, method in state.verification_methods.items()
        ],
        "authenticationRelation": sorted(state.authentication_relation),
        "assertionMethodRelation": sorted(state.assertion_method_relation),
        "keyAgreementRelation": sorted(state.key_agreement_relation),
        "capabilityInvocationRelation": sorted(state.capability_invocation_relation),
        "capabilityDelegationRelation": sorted(state.capability_delegation_relation),
        "services": [decode_service(service).to_dict() for service in state.services.values()],
    }
