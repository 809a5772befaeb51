"""Method-specific identifiers for the ``did:midnight`` method.

DID format
----------
::

    did:midnight:<network>:<contract-address>

``<network>`` is one of ``undeployed``, ``devnet``, ``testnet`` or
``mainnet``; ``<contract-address>`` is the 68-character lowercase hex
address of the contract holding the DID state.

Examples::

    did:midnight:testnet:0200c14874a279e61d4bf4eebff76f46fada3afbb0183dff21e741975143dcbdabab
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from midnight_did.did.document import parse_did
from midnight_did.errors import SchemaValidationError

DID_METHOD: str = "midnight"
DID_METHOD_PREFIX: str = f"did:{DID_METHOD}:"

CONTRACT_ADDRESS_LENGTH: int = 68
_CONTRACT_ADDRESS_PATTERN = re.compile(r"^[0-9a-f]{68}$")


class MidnightNetwork(str, Enum):
    """Networks a DID contract can be deployed to."""

    UNDEPLOYED = "undeployed"
    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET = "mainnet"


_NETWORKS = frozenset(network.value for network in MidnightNetwork)


@dataclass(frozen=True)
class MidnightDID:
    """A parsed ``did:midnight`` identifier.

    Parameters
    ----------
    raw:
        The full DID string.
    network:
        The network segment.
    id:
        The contract address segment.
    """

    raw: str
    network: MidnightNetwork
    id: str

    def __str__(self) -> str:
        return self.raw


def parse_contract_address(value: object) -> str:
    """Validate a contract address.

    Raises
    ------
    SchemaValidationError
        Unless ``value`` is exactly 68 lowercase hex characters.
    """
    if not isinstance(value, str) or not _CONTRACT_ADDRESS_PATTERN.match(value):
        raise SchemaValidationError(
            "",
            "Invalid contract address: must be "
            f"{CONTRACT_ADDRESS_LENGTH} lowercase hex characters [0-9a-f]",
        )
    return value


def parse_network(value: object) -> MidnightNetwork:
    """Return the :class:`MidnightNetwork` named by ``value``."""
    if isinstance(value, MidnightNetwork):
        return value
    if not isinstance(value, str) or value not in _NETWORKS:
        raise SchemaValidationError(
            "network",
            f"Invalid MidnightDID network {value!r}. Expected one of: "
            f"{', '.join(sorted(_NETWORKS))}",
        )
    return MidnightNetwork(value)


def parse_method_identifier_string(value: object) -> str:
    """Validate a ``did:midnight:<network>:<address>`` string.

    Raises
    ------
    SchemaValidationError
        If the value is not a DID, has other than four segments, uses another
        method, names an unknown network, or carries an invalid address.
    """
    did = parse_did(value)
    parts = did.split(":")
    if not did.startswith(DID_METHOD_PREFIX) or len(parts) != 4:
        raise SchemaValidationError(
            "",
            "Invalid MidnightDID string, expected format "
            "'did:midnight:<network>:<id>'",
        )
    _, _, network, address = parts
    parse_contract_address(address)
    if network not in _NETWORKS:
        raise SchemaValidationError(
            "",
            f"Invalid MidnightDID string: unknown network {network!r}",
        )
    return did


def parse_method_identifier(value: object) -> MidnightDID:
    """Parse a ``did:midnight`` string into its components."""
    raw = parse_method_identifier_string(value)
    _, _, network, address = raw.split(":")
    return MidnightDID(raw=raw, network=MidnightNetwork(network), id=address)


def create_method_identifier_string(address: str, network: MidnightNetwork | str) -> str:
    """Build the DID string for a contract address on a network.

    The result always parses back to the same ``address`` and ``network``.
    """
    network = parse_network(network)
    return parse_method_identifier_string(
        f"{DID_METHOD_PREFIX}{network.value}:{parse_contract_address(address)}"
    )
