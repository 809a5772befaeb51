"""Tests for midnight_did.registry: registrar and resolver over a ledger client."""
from __future__ import annotations

import pytest

from midnight_did.did.document import (
    KnownDIDMediaType,
    PublicKeyJwk,
    Service,
    VerificationMethod,
    create_verification_method,
)
from midnight_did.did.method import MidnightNetwork
from midnight_did.did.operations import (
    AddService,
    AddVerificationMethod,
    AddVerificationMethodRelation,
    RemoveVerificationMethod,
    UpdateService,
)
from midnight_did.errors import (
    CollaboratorRejection,
    EncodingConstraintError,
    SchemaValidationError,
)
from midnight_did.ledger.decoder import assemble_document
from midnight_did.ledger.encoder import prepare_batch
from midnight_did.ledger.types import OperationType
from midnight_did.registry import (
    DIDRegistration,
    MidnightDIDRegistrar,
    MidnightDIDResolver,
)


@pytest.fixture()
def registrar(ledger) -> MidnightDIDRegistrar:  # type: ignore[no-untyped-def]
    return MidnightDIDRegistrar(ledger)


@pytest.fixture()
def resolver(ledger) -> MidnightDIDResolver:  # type: ignore[no-untyped-def]
    return MidnightDIDResolver(ledger)


@pytest.fixture()
def registration(registrar: MidnightDIDRegistrar) -> DIDRegistration:
    return registrar.create()


def _key(did: str, fragment: str = "key-1") -> VerificationMethod:
    return create_verification_method(
        id=f"{did}#{fragment}",
        type="JsonWebKey",
        controller=did,
        public_key_jwk=PublicKeyJwk(kty="EC", crv="ed25519", x=1, y=2),
    )


# ===========================================================================
# Registrar
# ===========================================================================


class TestCreate:
    def test_create_empty(self, registration: DIDRegistration) -> None:
        assert registration.did.network is MidnightNetwork.UNDEPLOYED
        assert registration.document.id == registration.did.raw
        assert registration.document.verification_method is None

    def test_network_is_applied(self, ledger) -> None:  # type: ignore[no-untyped-def]
        registration = MidnightDIDRegistrar(ledger, network="testnet").create()
        assert registration.did.raw.startswith("did:midnight:testnet:")

    def test_unknown_network_rejected(self, ledger) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(SchemaValidationError):
            MidnightDIDRegistrar(ledger, network="moon")

    def test_create_with_initial_operations(
        self, registrar: MidnightDIDRegistrar, ledger, service: Service  # type: ignore[no-untyped-def]
    ) -> None:
        registration = registrar.create([AddService(service=service)])
        assert registration.document.service == [service]
        assert len(ledger.submitted) == 1
        assert len(ledger.submitted[0]) == 4

    def test_oversized_initial_batch_deploys_nothing(
        self, registrar: MidnightDIDRegistrar, ledger, service: Service  # type: ignore[no-untyped-def]
    ) -> None:
        ops = [AddService(service=service.model_copy(update={"id": f"svc-{i}"})) for i in range(5)]
        with pytest.raises(EncodingConstraintError):
            registrar.create(ops)
        assert ledger.submitted == []
        assert ledger._states == {}

    def test_invalid_initial_operation_deploys_nothing(
        self, registrar: MidnightDIDRegistrar, ledger  # type: ignore[no-untyped-def]
    ) -> None:
        with pytest.raises(SchemaValidationError):
            registrar.create([{"type": "AddService"}])
        assert ledger._states == {}


class TestUpdate:
    def test_add_key_and_relation(
        self, registrar: MidnightDIDRegistrar, registration: DIDRegistration
    ) -> None:
        did = registration.did.raw
        key = _key(did)
        document = registrar.update(
            did,
            [
                AddVerificationMethod(verification_method=key),
                AddVerificationMethodRelation(relation="AssertionMethod", method_id=key.id),
            ],
        )
        assert document.verification_method == [key]
        assert document.assertion_method == [key.id]
        assert document.authentication is None

    def test_accepts_json_operations(
        self, registrar: MidnightDIDRegistrar, registration: DIDRegistration
    ) -> None:
        document = registrar.update(
            registration.did.raw,
            [
                {
                    "type": "AddService",
                    "service": {"id": "svc", "type": ["Hub"], "serviceEndpoint": "https://hub"},
                }
            ],
        )
        assert document.to_dict()["service"] == [
            {"id": "svc", "type": "Hub", "serviceEndpoint": ["https://hub"]}
        ]

    def test_service_update(
        self,
        registrar: MidnightDIDRegistrar,
        registration: DIDRegistration,
        service: Service,
    ) -> None:
        did = registration.did.raw
        registrar.update(did, [AddService(service=service)])
        changed = service.model_copy(update={"service_endpoint": ["https://a", "https://b"]})
        document = registrar.update(did, [UpdateService(service=changed)])
        assert document.service is not None
        assert document.service[0].service_endpoint == ["https://a", "https://b"]

    def test_rejection_propagates_and_state_is_kept(
        self,
        registrar: MidnightDIDRegistrar,
        resolver: MidnightDIDResolver,
        registration: DIDRegistration,
        ledger,  # type: ignore[no-untyped-def]
    ) -> None:
        did = registration.did.raw
        key = _key(did)
        registrar.update(did, [AddVerificationMethod(verification_method=key)])
        version = ledger.fetch_state(registration.did.id).version

        with pytest.raises(CollaboratorRejection, match="exists"):
            registrar.update(did, [AddVerificationMethod(verification_method=key)])
        assert ledger.fetch_state(registration.did.id).version == version

    def test_relation_for_unknown_method_rejected(
        self, registrar: MidnightDIDRegistrar, registration: DIDRegistration
    ) -> None:
        did = registration.did.raw
        with pytest.raises(CollaboratorRejection):
            registrar.update(
                did,
                [AddVerificationMethodRelation(relation="Authentication", method_id=f"{did}#nope")],
            )

    def test_removing_method_clears_relations(
        self, registrar: MidnightDIDRegistrar, registration: DIDRegistration
    ) -> None:
        did = registration.did.raw
        key = _key(did)
        registrar.update(
            did,
            [
                AddVerificationMethod(verification_method=key),
                AddVerificationMethodRelation(relation="Authentication", method_id=key.id),
            ],
        )
        document = registrar.update(did, [RemoveVerificationMethod(id=key.id)])
        assert document.verification_method is None
        assert document.authentication is None

    def test_invalid_did_rejected(self, registrar: MidnightDIDRegistrar) -> None:
        with pytest.raises(SchemaValidationError):
            registrar.update("did:ex:123", [])

    def test_empty_update_submits_padding(
        self, registrar: MidnightDIDRegistrar, registration: DIDRegistration, ledger  # type: ignore[no-untyped-def]
    ) -> None:
        registrar.update(registration.did.raw, [])
        assert [op.operation_type for op in ledger.submitted[-1]] == [OperationType.UNDEFINED] * 4


class TestDeactivate:
    def test_deactivate(
        self,
        registrar: MidnightDIDRegistrar,
        resolver: MidnightDIDResolver,
        registration: DIDRegistration,
    ) -> None:
        did = registration.did.raw
        registrar.deactivate(did)
        result = resolver.resolve_with_metadata(did)
        assert result.did_document_metadata.deactivated is True

    def test_updates_after_deactivation_rejected(
        self,
        registrar: MidnightDIDRegistrar,
        registration: DIDRegistration,
    ) -> None:
        did = registration.did.raw
        registrar.deactivate(did)
        with pytest.raises(CollaboratorRejection, match="deactivated"):
            registrar.update(did, [AddVerificationMethod(verification_method=_key(did))])


# ===========================================================================
# Resolver
# ===========================================================================


class TestResolver:
    def test_resolve(
        self, resolver: MidnightDIDResolver, registration: DIDRegistration
    ) -> None:
        assert resolver.resolve(registration.did.raw) == registration.document

    def test_resolve_invalid_did(self, resolver: MidnightDIDResolver) -> None:
        with pytest.raises(SchemaValidationError):
            resolver.resolve("did:midnight:testnet:abc")

    def test_resolve_unknown_contract(self, resolver: MidnightDIDResolver, address: str) -> None:
        with pytest.raises(CollaboratorRejection):
            resolver.resolve(f"did:midnight:testnet:{address}")

    def test_metadata(
        self, resolver: MidnightDIDResolver, registration: DIDRegistration
    ) -> None:
        result = resolver.resolve_with_metadata(registration.did.raw)
        assert result.did_document == registration.document
        assert result.did_document_metadata.deactivated is False
        assert result.did_resolution_metadata.content_type is KnownDIDMediaType.DID_LD_JSON
        data = result.to_dict()
        assert data["didDocumentMetadata"]["versionId"] == "0"
        assert data["didResolutionMetadata"] == {"contentType": "application/did+ld+json"}

    def test_metadata_for_invalid_did(self, resolver: MidnightDIDResolver) -> None:
        result = resolver.resolve_with_metadata("not-a-did")
        assert result.did_document is None
        assert result.to_dict()["didResolutionMetadata"] == {"error": "invalidDid"}


# ===========================================================================
# End-to-end
# ===========================================================================


class TestEndToEnd:
    def test_key_relation_and_service(self, ledger, other_address: str) -> None:  # type: ignore[no-untyped-def]
        key_id = f"did:ex:devnet:{other_address}#key-1"
        key = create_verification_method(
            id=key_id,
            type="JsonWebKey",
            controller=f"did:ex:devnet:{other_address}",
            public_key_jwk={"kty": "EC", "crv": "ed25519", "x": 1, "y": 2},
        )
        address = ledger.deploy()
        state = ledger.apply_operations(
            address,
            prepare_batch(
                [
                    AddVerificationMethod(verification_method=key),
                    AddVerificationMethodRelation(relation="Authentication", method_id=key_id),
                    {
                        "type": "AddService",
                        "service": {"id": "svc-1", "type": "SVC", "serviceEndpoint": ["https://x"]},
                    },
                ]
            ),
        )

        document = assemble_document(state, "devnet", address)
        assert document.verification_method is not None
        assert len(document.verification_method) == 1
        assert document.verification_method[0].id == key_id
        assert document.verification_method[0].type.value == "JsonWebKey"
        assert document.authentication == [key_id]
        assert document.service is not None
        assert len(document.service) == 1
        assert document.service[0].service_endpoint == ["https://x"]

    def test_registrar_and_resolver_agree(
        self,
        registrar: MidnightDIDRegistrar,
        resolver: MidnightDIDResolver,
        service: Service,
    ) -> None:
        registration = registrar.create()
        did = registration.did.raw
        key = _key(did)
        updated = registrar.update(
            did,
            [
                AddVerificationMethod(verification_method=key),
                AddVerificationMethodRelation(relation="Authentication", method_id=key.id),
                AddService(service=service),
            ],
        )
        assert resolver.resolve(did) == updated
        assert resolver.resolve_with_metadata(did).to_dict()["didDocumentMetadata"] == {
            "deactivated": False,
            "versionId": "1",
        }
