"""MidnightDIDRegistrar: creates, updates and deactivates ``did:midnight`` DIDs.

Every change is encoded with :func:`~midnight_did.ledger.encoder.prepare_batch`
and submitted as one padded batch. A batch holds at most
:data:`~midnight_did.ledger.types.MAX_OPERATIONS` operations; larger inputs
are rejected rather than split across several submissions.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from midnight_did.did.document import DIDDocument
from midnight_did.did.method import (
    MidnightDID,
    MidnightNetwork,
    create_method_identifier_string,
    parse_method_identifier,
    parse_network,
)
from midnight_did.did.operations import Deactivate, DIDOperation
from midnight_did.ledger.decoder import assemble_document
from midnight_did.ledger.encoder import prepare_batch
from midnight_did.registry.client import LedgerClient

logger = logging.getLogger(__name__)

OperationInput = Union[DIDOperation, Mapping[str, Any]]


@dataclass(frozen=True)
class DIDRegistration:
    """The outcome of :meth:`MidnightDIDRegistrar.create`.

    Parameters
    ----------
    did:
        The identifier of the new contract.
    document:
        The document as assembled right after creation.
    """

    did: MidnightDID
    document: DIDDocument


class MidnightDIDRegistrar:
    """Writes DID changes through a :class:`LedgerClient`.

    Parameters
    ----------
    client:
        The ledger to deploy to and update.
    network:
        Network the created DIDs are bound to.
    """

    def __init__(
        self,
        client: LedgerClient,
        network: MidnightNetwork | str = MidnightNetwork.UNDEPLOYED,
    ) -> None:
        self._client = client
        self._network = parse_network(network)

    @property
    def network(self) -> MidnightNetwork:
        return self._network

    def create(self, operations: Sequence[OperationInput] | None = None) -> DIDRegistration:
        """Deploy a new DID contract, optionally applying an initial batch.

        Raises
        ------
        SchemaValidationError
            If an operation is malformed.
        EncodingConstraintError
            If an operation does not fit the ledger shape or more than four
            are given.
        CollaboratorRejection
            If the ledger refuses the deployment or the batch.
        """
        # validated before deploy so a rejected batch leaves no contract behind
        batch = prepare_batch(operations) if operations else None

        address = self._client.deploy()
        did = parse_method_identifier(create_method_identifier_string(address, self._network))
        logger.info("Deployed DID contract %s", did)

        if batch is not None:
            state = self._client.apply_operations(address, batch)
            logger.info("Applied initial batch of %d operations to %s", len(operations), did)
        else:
            state = self._client.fetch_state(address)
        return DIDRegistration(did=did, document=assemble_document(state, did.network, did.id))

    def update(self, did: str, operations: Sequence[OperationInput]) -> DIDDocument:
        """Apply ``operations`` to ``did`` and return the updated document.

        Raises
        ------
        SchemaValidationError
            If ``did`` or an operation is malformed.
        EncodingConstraintError
            If the operations do not fit a single batch.
        CollaboratorRejection
            If the ledger refuses the batch.
        """
        parsed = parse_method_identifier(did)
        batch = prepare_batch(operations)
        logger.info("Submitting %d operations to %s", len(operations), parsed)
        state = self._client.apply_operations(parsed.id, batch)
        return assemble_document(state, parsed.network, parsed.id)

    def deactivate(self, did: str) -> DIDDocument:
        """Deactivate ``did``. The ledger refuses every later update."""
        logger.info("Deactivating %s", did)
        return self.update(did, [Deactivate()])
