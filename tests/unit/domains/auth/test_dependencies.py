"""
Tests for authentication dependencies in sharing_api/domains/auth/dependencies.py

Tests the core JWT validation and principal resolution functionality.
"""

from unittest.mock import Mock, patch

import jwt
import pytest
from fastapi import HTTPException

from sharing_api.domains.auth.dependencies import (
    decode_jwt,
    get_auth_id,
    get_current_principal,
)
from sharing_api.domains.auth.types import JwtPayload
from sharing_api.shared.exceptions import NotAuthorizedError, UnlinkedPrincipalError


class TestDecodeJWT:
    """Test JWT token validation with both development and production modes."""

    def test_valid_development_jwt_token(
        self, test_jwt_secret: str, valid_jwt_payload: dict
    ):
        """Test successful JWT validation in development mode (JWT_SECRET)."""
        token = jwt.encode(valid_jwt_payload, test_jwt_secret, algorithm="HS256")

        with patch(
            "sharing_api.domains.auth.dependencies.settings.JWT_SECRET",
            test_jwt_secret,
        ):
            result = decode_jwt(token)

        assert result.sub == "manager"
        assert result.email == "manager@example.com"
        assert result.aud == "authenticated"
        assert result.iss == "sharing-api"

    def test_invalid_token_signature_raises_401(self, test_jwt_secret: str):
        """Test that invalid token signature raises 401."""
        invalid_token = jwt.encode({"sub": "test"}, "wrong-secret", algorithm="HS256")

        with patch(
            "sharing_api.domains.auth.dependencies.settings.JWT_SECRET",
            test_jwt_secret,
        ):
            with pytest.raises(HTTPException) as exc_info:
                decode_jwt(invalid_token)

        assert exc_info.value.status_code == 401
        assert "Invalid or expired token" in exc_info.value.detail

    def test_malformed_jwt_raises_401(self, test_jwt_secret: str):
        """Test that malformed JWT raises 401."""
        with patch(
            "sharing_api.domains.auth.dependencies.settings.JWT_SECRET",
            test_jwt_secret,
        ):
            with pytest.raises(HTTPException) as exc_info:
                decode_jwt("not.a.valid.jwt.token")

        assert exc_info.value.status_code == 401

    def test_expired_token_raises_401(self, test_jwt_secret: str):
        token = jwt.encode(
            {"sub": "manager", "exp": 1_000_000_000}, test_jwt_secret, algorithm="HS256"
        )

        with patch(
            "sharing_api.domains.auth.dependencies.settings.JWT_SECRET",
            test_jwt_secret,
        ):
            with pytest.raises(HTTPException) as exc_info:
                decode_jwt(token)

        assert exc_info.value.status_code == 401

    def test_missing_verification_config_raises_500(self):
        """Test fallback to JWKS mode when JWT_SECRET not available."""
        with (
            patch("sharing_api.domains.auth.dependencies.settings.JWT_SECRET", None),
            patch("sharing_api.domains.auth.dependencies._jwks_client", None),
        ):
            with pytest.raises(HTTPException) as exc_info:
                decode_jwt("test.jwt.token")

        assert exc_info.value.status_code == 500
        assert "not configured" in exc_info.value.detail

    def test_jwks_verification(self):
        """Test production mode resolves the signing key from the JWKS client."""
        mock_client = Mock()
        mock_client.get_signing_key_from_jwt.return_value = Mock(key="public-key")

        with (
            patch("sharing_api.domains.auth.dependencies.settings.JWT_SECRET", None),
            patch("sharing_api.domains.auth.dependencies._jwks_client", mock_client),
            patch(
                "sharing_api.domains.auth.dependencies.jwt.decode",
                return_value={"sub": "manager"},
            ) as mock_decode,
        ):
            result = decode_jwt("header.payload.signature")

        assert result.sub == "manager"
        mock_client.get_signing_key_from_jwt.assert_called_once_with(
            "header.payload.signature"
        )
        assert mock_decode.call_args.kwargs["algorithms"] == ["RS256"]


class TestGetAuthId:
    """Test auth ID extraction from Authorization header."""

    def test_extract_auth_id_from_valid_bearer_token(self, valid_jwt_token: str):
        """Test successful auth ID extraction from valid Bearer token."""
        with patch("sharing_api.domains.auth.dependencies.decode_jwt") as mock_decode:
            mock_decode.return_value = JwtPayload(
                sub="manager", email="manager@example.com"
            )

            result = get_auth_id(f"Bearer {valid_jwt_token}")

        assert result == "manager"
        mock_decode.assert_called_once_with(valid_jwt_token)

    def test_missing_authorization_header_raises_401(self):
        """Test that missing Authorization header raises 401."""
        with pytest.raises(HTTPException) as exc_info:
            get_auth_id(None)

        assert exc_info.value.status_code == 401
        assert "Missing token" in exc_info.value.detail

    @pytest.mark.parametrize(
        "authorization", ["InvalidFormat token", "Basic dGVzdA==", ""]
    )
    def test_invalid_bearer_format_raises_401(self, authorization: str):
        with pytest.raises(HTTPException) as exc_info:
            get_auth_id(authorization)

        assert exc_info.value.status_code == 401

    def test_token_without_subject_returns_empty_id(self):
        with patch("sharing_api.domains.auth.dependencies.decode_jwt") as mock_decode:
            mock_decode.return_value = JwtPayload()

            assert get_auth_id("Bearer token") == ""


class TestGetCurrentPrincipal:
    """Test resolving the token subject to a principal."""

    @pytest.mark.asyncio
    async def test_active_principal_returned(self, repository):
        principal = await get_current_principal("manager", repository)

        assert principal.id == "manager"

    @pytest.mark.asyncio
    async def test_unknown_principal_raises_unlinked(self, repository):
        with pytest.raises(UnlinkedPrincipalError) as exc_info:
            await get_current_principal("ghost", repository)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_subject_raises_unlinked(self, repository):
        with pytest.raises(UnlinkedPrincipalError):
            await get_current_principal("", repository)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("principal_id", ["locked", "invited"])
    async def test_unactivated_principal_cannot_act(self, repository, principal_id):
        with pytest.raises(NotAuthorizedError) as exc_info:
            await get_current_principal(principal_id, repository)

        assert exc_info.value.status_code == 403
