"""Unit tests for JWTAuthProvider.

Covers claim mapping, the shared-secret path and the JWKS (ES256) path with
the key fetch mocked out.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from jose import jwt as jose_jwt

from infrastructure.auth import jwt_provider as jwt_provider_module
from infrastructure.auth.jwt_provider import JWTAuthProvider, _get_jwks_keys
from infrastructure.auth.provider import TokenUser

JWKS_URL = "https://example.supabase.co/auth/v1/.well-known/jwks.json"


def _hs256(payload: dict, secret: str = "test-secret") -> str:
    return jose_jwt.encode(payload, secret, algorithm="HS256")


def _jwks_client(response_json: dict | None = None, error: Exception | None = None) -> AsyncMock:
    client = AsyncMock()
    if error is not None:
        client.get.side_effect = error
    else:
        response = MagicMock()
        response.json.return_value = response_json
        client.get.return_value = response
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.fixture(autouse=True)
def _clear_jwks_cache():
    jwt_provider_module._jwks_cache = None
    yield
    jwt_provider_module._jwks_cache = None


@pytest.fixture
def provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


class TestClaimMapping:
    async def test_round_trip_keeps_language(self, provider: JWTAuthProvider):
        user = TokenUser(
            id=uuid4(), email="alto@example.com", display_name="Alto", preferred_language="ko"
        )

        result = await provider.validate_token(provider.create_token(user))

        assert result is not None
        assert result.id == user.id
        assert result.preferred_language == "ko"
        assert result.role == "authenticated"

    async def test_display_name_falls_back_to_full_name(self, provider: JWTAuthProvider):
        token = _hs256(
            {
                "sub": str(uuid4()),
                "email": "tenor@example.com",
                "exp": 9999999999,
                "user_metadata": {"full_name": "Tenor Kim"},
            }
        )

        result = await provider.validate_token(token)

        assert result is not None
        assert result.display_name == "Tenor Kim"
        assert result.preferred_language == "en"

    @pytest.mark.parametrize(
        "claims",
        [
            {"email": "user@example.com"},
            {"sub": str(uuid4())},
            {"sub": "", "email": "user@example.com"},
            {"sub": "not-a-uuid", "email": "user@example.com"},
        ],
    )
    async def test_missing_or_bad_identity_claims(self, provider: JWTAuthProvider, claims: dict):
        token = _hs256({**claims, "exp": 9999999999})

        assert await provider.validate_token(token) is None

    async def test_wrong_secret(self, provider: JWTAuthProvider):
        token = _hs256({"sub": str(uuid4()), "email": "a@example.com"}, secret="other")

        assert await provider.validate_token(token) is None


class TestGetJwksKeys:
    async def test_no_url_configured(self):
        with patch.object(jwt_provider_module, "settings") as mock_settings:
            mock_settings.supabase_jwks_url = ""

            assert await _get_jwks_keys() == {}

    async def test_fetches_and_caches_by_kid(self):
        client = _jwks_client(
            {
                "keys": [
                    {"kid": "key-1", "kty": "EC"},
                    {"kty": "EC"},
                    {"kid": "key-2", "kty": "EC"},
                ]
            }
        )
        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            keys = await _get_jwks_keys()
            client.get.reset_mock()
            cached = await _get_jwks_keys()

        assert set(keys) == {"key-1", "key-2"}
        assert cached == keys
        client.get.assert_not_called()

    async def test_http_error_yields_empty(self):
        client = _jwks_client(error=httpx.ConnectError("connection refused"))
        with (
            patch.object(jwt_provider_module, "settings") as mock_settings,
            patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client),
        ):
            mock_settings.supabase_jwks_url = JWKS_URL

            assert await _get_jwks_keys() == {}

        assert jwt_provider_module._jwks_cache is None


class TestDecodeEs256:
    async def test_header_without_kid(self, provider: JWTAuthProvider):
        assert await provider._decode_es256("dummy.token.value", {"alg": "ES256"}) is None

    async def test_unknown_kid_refetches_once(self, provider: JWTAuthProvider):
        with patch.object(
            jwt_provider_module, "_get_jwks_keys", new_callable=AsyncMock
        ) as get_keys:
            get_keys.return_value = {"other-kid": {"kty": "EC"}}

            result = await provider._decode_es256(
                "dummy.token.value", {"alg": "ES256", "kid": "missing"}
            )

        assert result is None
        assert get_keys.await_count == 2

    async def test_rotated_key_is_found_on_refetch(self, provider: JWTAuthProvider):
        key_data = {"kid": "rotated", "kty": "EC", "crv": "P-256"}
        claims = {"sub": str(uuid4()), "email": "rotated@example.com"}

        with (
            patch.object(
                jwt_provider_module,
                "_get_jwks_keys",
                new_callable=AsyncMock,
                side_effect=[{}, {"rotated": key_data}],
            ),
            patch.object(jwt_provider_module, "ECKey") as eckey_cls,
            patch.object(jwt_provider_module.jwt, "decode", return_value=claims) as decode,
        ):
            result = await provider._decode_es256(
                "rotated.token.value", {"alg": "ES256", "kid": "rotated"}
            )

        assert result == claims
        eckey_cls.assert_called_once_with(key_data, algorithm="ES256")
        assert decode.call_args.kwargs["algorithms"] == ["ES256"]


class TestValidateTokenEs256Path:
    async def test_es256_header_uses_jwks(self, provider: JWTAuthProvider):
        user_id = str(uuid4())
        claims = {
            "sub": user_id,
            "email": "keys@example.com",
            "role": "authenticated",
            "user_metadata": {"display_name": "Keys", "preferred_language": "ko"},
        }

        with (
            patch.object(
                jwt_provider_module.jwt,
                "get_unverified_header",
                return_value={"alg": "ES256", "kid": "k1"},
            ),
            patch.object(provider, "_decode_es256", new_callable=AsyncMock) as decode_es256,
        ):
            decode_es256.return_value = claims
            result = await provider.validate_token("es256.token.here")

        decode_es256.assert_awaited_once_with("es256.token.here", {"alg": "ES256", "kid": "k1"})
        assert result is not None
        assert str(result.id) == user_id
        assert result.display_name == "Keys"
        assert result.preferred_language == "ko"

    async def test_es256_without_key(self, provider: JWTAuthProvider):
        with (
            patch.object(
                jwt_provider_module.jwt,
                "get_unverified_header",
                return_value={"alg": "ES256", "kid": "k1"},
            ),
            patch.object(provider, "_decode_es256", new_callable=AsyncMock, return_value=None),
        ):
            assert await provider.validate_token("es256.token.here") is None
