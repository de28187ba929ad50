"""Unit tests – signature verification with the key-bound algorithm."""
from __future__ import annotations

import pytest
from jwt.algorithms import get_default_algorithms
from jwt.utils import base64url_encode

from cognito_jwt_verifier.jwks.resolver import resolve_key
from cognito_jwt_verifier.kernel.errors import SignatureInvalidError
from cognito_jwt_verifier.kernel.result import Err, Ok
from cognito_jwt_verifier.token.parser import parse_token
from cognito_jwt_verifier.token.signature import verify_signature

CLAIMS = {"sub": "alice", "token_use": "access", "exp": 1, "nested": {"groups": ["a", "b"]}}


def _check(token: str, jwk: dict):
    key = resolve_key({"keys": [jwk]}, jwk["kid"]).unwrap()
    return verify_signature(parse_token(token).unwrap(), key)


def _assert_invalid(result) -> None:
    assert isinstance(result, Err)
    assert isinstance(result.error, SignatureInvalidError)


class TestValidSignatures:
    def test_rsa_round_trip(self, rsa_key, public_jwk, sign) -> None:
        token = sign(CLAIMS, rsa_key, kid="k1", alg="RS256")
        assert _check(token, public_jwk(rsa_key, "k1", "RS256")) == Ok(CLAIMS)

    def test_rsa_pss(self, rsa_key, public_jwk, sign) -> None:
        token = sign(CLAIMS, rsa_key, kid="k1", alg="PS256")
        assert _check(token, public_jwk(rsa_key, "k1", "PS256")) == Ok(CLAIMS)

    def test_ec_round_trip(self, ec_key, public_jwk, sign) -> None:
        token = sign(CLAIMS, ec_key, kid="e1", alg="ES256")
        assert _check(token, public_jwk(ec_key, "e1", "ES256")) == Ok(CLAIMS)

    def test_expired_claims_are_not_checked(self, rsa_key, public_jwk, sign) -> None:
        claims = {"sub": "alice", "exp": 0, "nbf": 4102444800, "aud": "someone-else"}
        token = sign(claims, rsa_key)
        assert _check(token, public_jwk(rsa_key, "k1", "RS256")).unwrap() == claims


class TestInvalidSignatures:
    def test_signed_by_other_key(self, rsa_key, other_rsa_key, public_jwk, sign) -> None:
        token = sign(CLAIMS, other_rsa_key, kid="k1")
        _assert_invalid(_check(token, public_jwk(rsa_key, "k1", "RS256")))

    def test_tampered_payload(self, rsa_key, public_jwk, sign) -> None:
        header, _, signature = sign(CLAIMS, rsa_key).split(".")
        forged = base64url_encode(b'{"sub":"mallory"}').decode()
        _assert_invalid(_check(f"{header}.{forged}.{signature}", public_jwk(rsa_key, "k1", "RS256")))

    def test_header_algorithm_is_not_used_to_verify(self, rsa_key, public_jwk, sign) -> None:
        # Header and key agree on RS512 but the token is signed RS256.
        token = sign(CLAIMS, rsa_key, alg="RS256", header={"alg": "RS512", "kid": "k1"})
        _assert_invalid(_check(token, public_jwk(rsa_key, "k1", "RS512")))

    @pytest.mark.parametrize(
        "header",
        [
            {"alg": "HS256", "kid": "k1"},
            {"alg": "none", "kid": "k1"},
            {"alg": "RS384", "kid": "k1"},
            {"alg": None, "kid": "k1"},
            {"kid": "k1"},
        ],
    )
    def test_header_alg_must_match_key_alg(self, rsa_key, public_jwk, sign, header: dict) -> None:
        # Signature is valid RS256 and the key is RS256; only the header disagrees.
        token = sign(CLAIMS, rsa_key, alg="RS256", header=header)
        result = _check(token, public_jwk(rsa_key, "k1", "RS256"))
        _assert_invalid(result)
        assert result.error.message == "Token 'alg' does not match the key's algorithm"

    def test_hmac_with_public_key_as_secret(self, rsa_key, public_jwk) -> None:
        # Classic confusion: HS256 keyed with the RSA public key bytes.
        jwk = public_jwk(rsa_key, "k1", "RS256")
        secret = jwk["n"].encode()
        header = base64url_encode(b'{"alg":"HS256","kid":"k1"}')
        payload = base64url_encode(b'{"sub":"mallory"}')
        hs256 = get_default_algorithms()["HS256"]
        sig = hs256.sign(header + b"." + payload, hs256.prepare_key(secret))
        token = (header + b"." + payload + b"." + base64url_encode(sig)).decode()
        _assert_invalid(_check(token, jwk))

    def test_alg_none_header(self, rsa_key, public_jwk) -> None:
        header = base64url_encode(b'{"alg":"none","kid":"k1"}').decode()
        payload = base64url_encode(b'{"sub":"mallory"}').decode()
        _assert_invalid(_check(f"{header}.{payload}.AAAA", public_jwk(rsa_key, "k1", "RS256")))

    def test_ec_signature_of_wrong_length(self, ec_key, public_jwk, sign) -> None:
        header, payload, _ = sign(CLAIMS, ec_key, kid="e1", alg="ES256").split(".")
        _assert_invalid(_check(f"{header}.{payload}.AAAA", public_jwk(ec_key, "e1", "ES256")))


class TestPayloadDecoding:
    def test_signed_non_object_payload(self, rsa_key, public_jwk, sign) -> None:
        _assert_invalid(_check(sign(["not", "an", "object"], rsa_key), public_jwk(rsa_key, "k1", "RS256")))

    def test_signed_undecodable_payload(self, rsa_key, public_jwk) -> None:
        header = base64url_encode(b'{"alg":"RS256","kid":"k1"}')
        payload = b"bm90IGpzb24"  # "not json"
        sig = get_default_algorithms()["RS256"].sign(header + b"." + payload, rsa_key)
        token = (header + b"." + payload + b"." + base64url_encode(sig)).decode()
        result = _check(token, public_jwk(rsa_key, "k1", "RS256"))
        _assert_invalid(result)
        assert result.error.message == "Payload is not base64url-encoded JSON"


class TestSegmentDecoding:
    def test_undecodable_signature_segment(self, rsa_key, public_jwk, sign) -> None:
        header, payload, _ = sign(CLAIMS, rsa_key).split(".")
        result = _check(f"{header}.{payload}.A", public_jwk(rsa_key, "k1", "RS256"))
        _assert_invalid(result)
        assert result.error.code == "signature_invalid"

    def test_non_ascii_payload_segment(self, rsa_key, public_jwk, sign) -> None:
        header, _, signature = sign(CLAIMS, rsa_key).split(".")
        _assert_invalid(_check(f"{header}.pä.{signature}", public_jwk(rsa_key, "k1", "RS256")))
