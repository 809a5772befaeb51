"""midnight_did.registry: resolving and writing DIDs through a ledger client.

Quick start
-----------
::

    from midnight_did.registry import MidnightDIDRegistrar, MidnightDIDResolver

    registrar = MidnightDIDRegistrar(client, network="testnet")
    registration = registrar.create()
    document = MidnightDIDResolver(client).resolve(str(registration.did))
"""
from __future__ import annotations

from midnight_did.registry.client import LedgerClient
from midnight_did.registry.registrar import DIDRegistration, MidnightDIDRegistrar
from midnight_did.registry.resolver import MidnightDIDResolver

__all__ = [
    "DIDRegistration",
    "LedgerClient",
    "MidnightDIDRegistrar",
    "MidnightDIDResolver",
]
