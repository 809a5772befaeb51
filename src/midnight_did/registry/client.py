"""The ledger a DID contract lives on, as seen by the registry layer."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from midnight_did.ledger.types import LedgerState, LedgerUpdateOperation


class LedgerClient(Protocol):
    """Deploys DID contracts and runs operation batches against them.

    Implementations raise :class:`~midnight_did.errors.CollaboratorRejection`
    when the contract refuses a batch, for example a duplicate method id or
    an update to a deactivated DID.
    """

    def deploy(self) -> str:
        """Deploy a fresh DID contract and return its address."""
        ...

    def fetch_state(self, address: str) -> LedgerState:
        """Return the current public state of the contract at ``address``."""
        ...

    def apply_operations(
        self, address: str, operations: Sequence[LedgerUpdateOperation]
    ) -> LedgerState:
        """Apply a full batch in order and return the resulting state."""
        ...
