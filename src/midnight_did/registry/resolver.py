"""MidnightDIDResolver: resolves ``did:midnight`` DIDs to DID documents."""
from __future__ import annotations

import logging

from midnight_did.did.document import (
    DIDDocument,
    DIDDocumentMetadata,
    DIDResolutionMetadata,
    DIDResolutionResult,
    KnownDIDMediaType,
)
from midnight_did.did.method import parse_method_identifier
from midnight_did.errors import SchemaValidationError
from midnight_did.ledger.decoder import assemble_document
from midnight_did.registry.client import LedgerClient

logger = logging.getLogger(__name__)

_RESOLUTION_CONTEXT = "https://w3id.org/did-resolution/v1"


class MidnightDIDResolver:
    """Reads contract state through a :class:`LedgerClient` and assembles documents.

    Parameters
    ----------
    client:
        The ledger to read from.
    """

    def __init__(self, client: LedgerClient) -> None:
        self._client = client

    def resolve(self, did: str) -> DIDDocument:
        """Resolve ``did`` to its current DID document.

        Raises
        ------
        SchemaValidationError
            If ``did`` is not a valid ``did:midnight`` identifier.
        CollaboratorRejection
            If the ledger cannot serve the contract state.
        """
        parsed = parse_method_identifier(did)
        state = self._client.fetch_state(parsed.id)
        logger.info("Resolved %s at version %d", parsed.raw, state.version)
        return assemble_document(state, parsed.network, parsed.id)

    def resolve_with_metadata(self, did: str) -> DIDResolutionResult:
        """Resolve ``did`` into a full DID resolution result.

        An invalid identifier is reported as ``invalidDid`` in the resolution
        metadata instead of being raised. ``deactivated`` mirrors the
        contract's active flag.
        """
        try:
            parsed = parse_method_identifier(did)
        except SchemaValidationError as exc:
            logger.info("Rejected invalid DID %r: %s", did, exc)
            return DIDResolutionResult(
                context=_RESOLUTION_CONTEXT,
                did_document=None,
                did_document_metadata=DIDDocumentMetadata(),
                did_resolution_metadata=DIDResolutionMetadata(error="invalidDid"),
            )

        state = self._client.fetch_state(parsed.id)
        document = assemble_document(state, parsed.network, parsed.id)
        logger.info(
            "Resolved %s at version %d (active=%s)", parsed.raw, state.version, state.active
        )
        return DIDResolutionResult(
            context=_RESOLUTION_CONTEXT,
            did_document=document,
            did_document_metadata=DIDDocumentMetadata(
                deactivated=not state.active,
                version_id=str(state.version),
            ),
            did_resolution_metadata=DIDResolutionMetadata(
                content_type=KnownDIDMediaType.DID_LD_JSON
            ),
        )


