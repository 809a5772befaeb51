"""Shared fixtures, including an in-memory stand-in for the DID contract."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

import pytest

from midnight_did.did.document import (
    PublicKeyJwk,
    Service,
    VerificationMethod,
    create_service,
    create_verification_method,
)
from midnight_did.errors import CollaboratorRejection
from midnight_did.ledger.encoder import pad
from midnight_did.ledger.types import (
    LedgerState,
    LedgerUpdateOperation,
    OperationType,
    VerificationMethodRelation,
)

ADDRESS = "02" + "ab" * 33
OTHER_ADDRESS = "0" * 68


def _relation_members(
    relations: dict[VerificationMethodRelation, set[str]], relation: int
) -> set[str]:
    try:
        return relations[VerificationMethodRelation(relation)]
    except (KeyError, ValueError):
        raise CollaboratorRejection(f"relation {relation} cannot hold methods") from None


class InMemoryLedger:
    """Executes batches with the same business rules as the DID contract.

    A batch is applied atomically: if any operation is refused, the stored
    state is left untouched.
    """

    def __init__(self) -> None:
        self._states: dict[str, LedgerState] = {}
        self.submitted: list[list[LedgerUpdateOperation]] = []

    def deploy(self) -> str:
        address = "02" + f"{len(self._states) + 1:066x}"
        self._states[address] = LedgerState(id=bytes.fromhex(address[-64:]))
        return address

    def fetch_state(self, address: str) -> LedgerState:
        try:
            return self._states[address]
        except KeyError:
            raise CollaboratorRejection(f"no contract deployed at {address}") from None

    def apply_operations(
        self, address: str, operations: Sequence[LedgerUpdateOperation]
    ) -> LedgerState:
        batch = pad(operations)
        state = self.fetch_state(address)
        self.submitted.append(list(batch))

        methods = dict(state.verification_methods)
        services = dict(state.services)
        relations = {
            relation: set(state.relation_set(relation))
            for relation in VerificationMethodRelation
            if relation is not VerificationMethodRelation.UNDEFINED
        }
        active = state.active
        applied = 0

        for op in batch:
            if op.operation_type == OperationType.UNDEFINED:
                continue
            if not active:
                raise CollaboratorRejection("DID is deactivated")
            applied += 1

            if op.operation_type == OperationType.ADD_VERIFICATION_METHOD:
                method = op.add_verification_method_options.verification_method
                if method.id in methods:
                    raise CollaboratorRejection(f"verification method {method.id} exists")
                methods[method.id] = method
            elif op.operation_type == OperationType.UPDATE_VERIFICATION_METHOD:
                method = op.update_verification_method_options.verification_method
                if method.id not in methods:
                    raise CollaboratorRejection(f"unknown verification method {method.id}")
                methods[method.id] = method
            elif op.operation_type == OperationType.REMOVE_VERIFICATION_METHOD:
                method_id = op.remove_verification_method_options.id
                if methods.pop(method_id, None) is None:
                    raise CollaboratorRejection(f"unknown verification method {method_id}")
                for members in relations.values():
                    members.discard(method_id)
            elif op.operation_type == OperationType.ADD_VERIFICATION_METHOD_RELATION:
                options = op.add_verification_method_relation_options
                if options.method_id not in methods:
                    raise CollaboratorRejection(f"unknown verification method {options.method_id}")
                _relation_members(relations, options.relation).add(options.method_id)
            elif op.operation_type == OperationType.REMOVE_VERIFICATION_METHOD_RELATION:
                options = op.remove_verification_method_relation_options
                members = _relation_members(relations, options.relation)
                if options.method_id not in members:
                    raise CollaboratorRejection(f"{options.method_id} is not bound")
                members.remove(options.method_id)
            elif op.operation_type == OperationType.ADD_SERVICE:
                service = op.add_service_options.service
                if service.id in services:
                    raise CollaboratorRejection(f"service {service.id} exists")
                services[service.id] = service
            elif op.operation_type == OperationType.UPDATE_SERVICE:
                service = op.update_service_options.service
                if service.id not in services:
                    raise CollaboratorRejection(f"unknown service {service.id}")
                services[service.id] = service
            elif op.operation_type == OperationType.REMOVE_SERVICE:
                service_id = op.remove_service_options.id
                if services.pop(service_id, None) is None:
                    raise CollaboratorRejection(f"unknown service {service_id}")
            elif op.operation_type == OperationType.DEACTIVATE:
                active = False

        new_state = replace(
            state,
            version=state.version + 1,
            active=active,
            operation_count=state.operation_count + applied,
            verification_methods=methods,
            services=services,
            authentication_relation=frozenset(
                relations[VerificationMethodRelation.AUTHENTICATION]
            ),
            assertion_method_relation=frozenset(
                relations[VerificationMethodRelation.ASSERTION_METHOD]
            ),
            key_agreement_relation=frozenset(relations[VerificationMethodRelation.KEY_AGREEMENT]),
            capability_invocation_relation=frozenset(
                relations[VerificationMethodRelation.CAPABILITY_INVOCATION]
            ),
            capability_delegation_relation=frozenset(
                relations[VerificationMethodRelation.CAPABILITY_DELEGATION]
            ),
        )
        self._states[address] = new_state
        return new_state


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def setup_logging() -> logging.Logger:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(levelname)s - %(name)s - %(message)s",
    )
    return logging.getLogger()


@pytest.fixture()
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture()
def controller() -> str:
    return f"did:midnight:undeployed:{ADDRESS}"


@pytest.fixture()
def verification_method(controller: str) -> VerificationMethod:
    return create_verification_method(
        id=f"{controller}#key-1",
        type="JsonWebKey",
        controller=controller,
        public_key_jwk=PublicKeyJwk(kty="EC", crv="ed25519", x=1, y=2),
    )


@pytest.fixture()
def service() -> Service:
    return create_service(id="svc-1", type="SVC", service_endpoint=["https://x"])


@pytest.fixture()
def address() -> str:
    return ADDRESS


@pytest.fixture()
def other_address() -> str:
    return OTHER_ADDRESS
