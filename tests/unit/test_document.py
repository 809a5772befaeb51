"""Tests for midnight_did.did.document: the W3C DID Core document model."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from midnight_did.did.document import (
    DID_CORE_CONTEXT,
    DIDDocument,
    PublicKeyJwk,
    Service,
    VerificationMethod,
    VerificationMethodRelationType,
    VerificationMethodType,
    create_did_document,
    create_service,
    create_verification_method,
    parse_did,
    parse_did_document,
    parse_did_key_id,
    parse_did_resolution_result,
    parse_did_url,
    parse_key_id,
    parse_service,
    parse_verification_method,
    parse_verification_method_relation,
    parse_verification_method_type,
)
from midnight_did.errors import MidnightDIDError, SchemaValidationError


# ===========================================================================
# String types
# ===========================================================================


class TestParseDID:
    def test_accepts_plain_did(self) -> None:
        assert parse_did("did:ex:123") == "did:ex:123"

    def test_rejects_missing_prefix(self) -> None:
        with pytest.raises(SchemaValidationError, match="must start with 'did:'"):
            parse_did("not-a-did")

    def test_rejects_fragment(self) -> None:
        with pytest.raises(SchemaValidationError, match="Invalid DID format"):
            parse_did("did:ex:123#key-1")

    def test_rejects_two_segments(self) -> None:
        with pytest.raises(SchemaValidationError):
            parse_did("did:ex")

    def test_rejects_non_string(self) -> None:
        with pytest.raises(SchemaValidationError):
            parse_did(42)

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_did("")

    def test_error_is_library_error(self) -> None:
        with pytest.raises(MidnightDIDError) as exc_info:
            parse_did("")
        assert exc_info.value.error_code == "SchemaValidation"


class TestParseDIDURL:
    def test_accepts_path_query_fragment(self) -> None:
        url = "did:ex:123/path?x=1#frag"
        assert parse_did_url(url) == url

    def test_rejects_non_did(self) -> None:
        with pytest.raises(SchemaValidationError, match="Invalid DID URL"):
            parse_did_url("https://example.com")


class TestParseDIDKeyID:
    def test_accepts_fragment(self) -> None:
        assert parse_did_key_id("did:ex:123#key-1") == "did:ex:123#key-1"

    def test_accepts_percent_and_colon(self) -> None:
        assert parse_did_key_id("did:ex:123#a:b%20c") == "did:ex:123#a:b%20c"

    def test_rejects_missing_fragment(self) -> None:
        with pytest.raises(SchemaValidationError, match="fragment"):
            parse_did_key_id("did:ex:123")

    def test_rejects_invalid_fragment_characters(self) -> None:
        with pytest.raises(SchemaValidationError):
            parse_did_key_id("did:ex:123#key 1")


class TestParseKeyID:
    def test_accepts_fragment_charset(self) -> None:
        assert parse_key_id("key-1.a_b:c%20") == "key-1.a_b:c%20"

    @pytest.mark.parametrize("bad", ["", "key 1", "key#1", "did:ex:1#key-1"])
    def test_rejects_invalid_key_id(self, bad: str) -> None:
        with pytest.raises(SchemaValidationError, match="Invalid key id"):
            parse_key_id(bad)


# ===========================================================================
# Enumerations
# ===========================================================================


class TestEnumerations:
    def test_parse_verification_method_type(self) -> None:
        assert parse_verification_method_type("JsonWebKey") is VerificationMethodType.JSON_WEB_KEY

    def test_parse_unknown_verification_method_type(self) -> None:
        with pytest.raises(SchemaValidationError):
            parse_verification_method_type("Ed25519VerificationKey2020")

    def test_parse_relation(self) -> None:
        relation = parse_verification_method_relation("KeyAgreement")
        assert relation is VerificationMethodRelationType.KEY_AGREEMENT

    @pytest.mark.parametrize(
        ("relation", "prop"),
        [
            (VerificationMethodRelationType.AUTHENTICATION, "authentication"),
            (VerificationMethodRelationType.ASSERTION_METHOD, "assertionMethod"),
            (VerificationMethodRelationType.KEY_AGREEMENT, "keyAgreement"),
            (VerificationMethodRelationType.CAPABILITY_INVOCATION, "capabilityInvocation"),
            (VerificationMethodRelationType.CAPABILITY_DELEGATION, "capabilityDelegation"),
        ],
    )
    def test_document_property(
        self, relation: VerificationMethodRelationType, prop: str
    ) -> None:
        assert relation.document_property == prop

    def test_undefined_has_no_document_property(self) -> None:
        assert VerificationMethodRelationType.UNDEFINED.document_property is None


# ===========================================================================
# VerificationMethod
# ===========================================================================


class TestVerificationMethod:
    def test_create(self, verification_method: VerificationMethod, controller: str) -> None:
        assert verification_method.id == f"{controller}#key-1"
        assert verification_method.type is VerificationMethodType.JSON_WEB_KEY
        assert verification_method.public_key_jwk.x == 1

    def test_to_dict_uses_camel_case(self, verification_method: VerificationMethod) -> None:
        data = verification_method.to_dict()
        assert data["publicKeyJwk"] == {"kty": "EC", "crv": "ed25519", "x": 1, "y": 2}
        assert data["type"] == "JsonWebKey"

    def test_parse_from_dict(self, verification_method: VerificationMethod) -> None:
        assert parse_verification_method(verification_method.to_dict()) == verification_method

    def test_large_coordinates_survive(self, controller: str) -> None:
        big = 2**255 - 19
        method = create_verification_method(
            id=f"{controller}#key-2",
            type="JsonWebKey",
            controller=controller,
            public_key_jwk={"kty": "OKP", "crv": "Jubjub", "x": big, "y": big - 1},
        )
        assert method.public_key_jwk.x == big

    def test_string_coordinates_rejected(self, controller: str) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            create_verification_method(
                id=f"{controller}#key-1",
                type="JsonWebKey",
                controller=controller,
                public_key_jwk={"kty": "EC", "crv": "ed25519", "x": "1", "y": 2},
            )
        assert exc_info.value.path == "publicKeyJwk.x"

    def test_invalid_id_reports_path(self, controller: str) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            create_verification_method(
                id="key-1",
                type="JsonWebKey",
                controller=controller,
                public_key_jwk=PublicKeyJwk(kty="EC", crv="ed25519", x=1, y=2),
            )
        assert exc_info.value.path == "id"
        assert "did:" in exc_info.value.reason

    def test_unknown_curve_rejected(self, controller: str) -> None:
        with pytest.raises(SchemaValidationError):
            create_verification_method(
                id=f"{controller}#key-1",
                type="JsonWebKey",
                controller=controller,
                public_key_jwk={"kty": "EC", "crv": "P-256", "x": 1, "y": 2},
            )

    def test_is_frozen(self, verification_method: VerificationMethod) -> None:
        with pytest.raises(ValidationError):
            verification_method.id = "did:ex:1#other"  # type: ignore[misc]


# ===========================================================================
# Service
# ===========================================================================


class TestService:
    def test_create_with_list_endpoint(self, service: Service) -> None:
        assert service.service_endpoint == ["https://x"]
        assert service.to_dict() == {
            "id": "svc-1",
            "type": "SVC",
            "serviceEndpoint": ["https://x"],
        }

    def test_string_endpoint_kept(self) -> None:
        svc = create_service(id="svc", type=["Messaging"], service_endpoint="https://y")
        assert svc.service_endpoint == "https://y"
        assert svc.type == ["Messaging"]

    def test_missing_endpoint_rejected(self) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            parse_service({"id": "svc", "type": "T"})
        assert exc_info.value.path == "serviceEndpoint"


# ===========================================================================
# DIDDocument
# ===========================================================================


class TestDIDDocument:
    def test_context_defaults_to_did_core(self) -> None:
        doc = create_did_document("did:ex:123")
        assert doc.context == DID_CORE_CONTEXT

    def test_absent_collections_are_none(self) -> None:
        doc = create_did_document("did:ex:123")
        assert doc.verification_method is None
        assert doc.authentication is None
        assert doc.service is None

    def test_to_dict_omits_absent_members(self) -> None:
        doc = create_did_document("did:ex:123")
        assert doc.to_dict() == {"@context": DID_CORE_CONTEXT, "id": "did:ex:123"}

    def test_to_dict_full(
        self, verification_method: VerificationMethod, service: Service, controller: str
    ) -> None:
        doc = create_did_document(
            controller,
            controller=controller,
            verification_method=[verification_method],
            authentication=[verification_method.id],
            key_agreement=[verification_method.id],
            service=[service],
        )
        data = doc.to_dict()
        assert data["verificationMethod"][0]["id"] == verification_method.id
        assert data["authentication"] == [verification_method.id]
        assert data["keyAgreement"] == [verification_method.id]
        assert "assertionMethod" not in data
        assert data["service"][0]["serviceEndpoint"] == ["https://x"]

    def test_relation_lookup(self, verification_method: VerificationMethod, controller: str) -> None:
        doc = create_did_document(controller, assertion_method=[verification_method.id])
        assert doc.relation(VerificationMethodRelationType.ASSERTION_METHOD) == [
            verification_method.id
        ]
        assert doc.relation(VerificationMethodRelationType.AUTHENTICATION) is None
        assert doc.relation(VerificationMethodRelationType.UNDEFINED) is None

    def test_resolve_verification_method(
        self, verification_method: VerificationMethod, controller: str
    ) -> None:
        doc = create_did_document(controller, verification_method=[verification_method])
        assert doc.resolve_verification_method(verification_method.id) == verification_method
        assert doc.resolve_verification_method(f"{controller}#missing") is None

    def test_json_round_trip(self, verification_method: VerificationMethod, controller: str) -> None:
        doc = create_did_document(controller, verification_method=[verification_method])
        restored = DIDDocument.from_json(doc.to_json())
        assert restored == doc

    def test_from_json_malformed(self) -> None:
        with pytest.raises(SchemaValidationError, match="Invalid JSON"):
            DIDDocument.from_json("{not json")

    def test_unknown_members_kept(self) -> None:
        doc = parse_did_document(
            {"@context": DID_CORE_CONTEXT, "id": "did:ex:123", "custom": {"a": 1}}
        )
        assert doc.to_dict()["custom"] == {"a": 1}

    def test_missing_context_rejected(self) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            parse_did_document({"id": "did:ex:123"})
        assert exc_info.value.path == "@context"

    def test_nested_error_path(self, controller: str) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            parse_did_document(
                {
                    "@context": DID_CORE_CONTEXT,
                    "id": controller,
                    "verificationMethod": [{"id": "bad"}],
                }
            )
        assert exc_info.value.path.startswith("verificationMethod.0")

    def test_to_json_is_valid_json(self) -> None:
        doc = create_did_document("did:ex:123")
        assert json.loads(doc.to_json())["id"] == "did:ex:123"


class TestDIDResolutionResult:
    def test_parse(self) -> None:
        result = parse_did_resolution_result(
            {
                "didDocument": {"@context": DID_CORE_CONTEXT, "id": "did:ex:1"},
                "didDocumentMetadata": {"deactivated": True, "versionId": "3"},
                "didResolutionMetadata": {"contentType": "application/did+ld+json"},
            }
        )
        assert result.did_document is not None
        assert result.did_document_metadata.deactivated is True
        assert result.did_document_metadata.version_id == "3"

    def test_unknown_content_type_rejected(self) -> None:
        with pytest.raises(SchemaValidationError):
            parse_did_resolution_result(
                {
                    "didDocumentMetadata": {},
                    "didResolutionMetadata": {"contentType": "text/plain"},
                }
            )
