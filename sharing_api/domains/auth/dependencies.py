# sharing_api/domains/auth/dependencies.py
import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt import PyJWKClient

from sharing_api.core.settings import settings
from sharing_api.domains.sharing.models import Principal
from sharing_api.domains.sharing.repository import SharingRepository, get_repository
from sharing_api.shared.exceptions import NotAuthorizedError, UnlinkedPrincipalError

from .types import JwtPayload

_jwks_client = PyJWKClient(settings.JWKS_URL) if settings.JWKS_URL else None


def decode_jwt(token: str) -> JwtPayload:
    """
    Verifies JWT token. Uses JWT_SECRET for development mode if available,
    otherwise falls back to the configured JWKS endpoint for production.
    """
    # Development mode: prefer JWT_SECRET if available
    if settings.JWT_SECRET:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=["HS256"],
                options={"verify_aud": False},
            )
            return JwtPayload(**dict(payload))
        except jwt.PyJWTError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
            )

    # Production mode: use JWKS
    if not _jwks_client:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token verification not configured",
        )
    try:
        signing_key = _jwks_client.get_signing_key_from_jwt(token).key
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            options={"verify_aud": False},
        )
        return JwtPayload(**dict(payload))
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_auth_id(authorization: str = Header(None)) -> str:
    """
    Extracts and validates the JWT from the Authorization header.
    Returns the principal id (from the `sub` claim).
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token"
        )

    token = authorization.split(" ")[1]
    payload = decode_jwt(token)
    return payload.sub or ""


async def get_current_principal(
    auth_id: str = Depends(get_auth_id),
    repository: SharingRepository = Depends(get_repository),
) -> Principal:
    """
    Finds the principal the token was issued to.

    Locked or not yet activated principals may hold shares but cannot act.
    """
    principal = await repository.get_principal(auth_id) if auth_id else None
    if not principal:
        raise UnlinkedPrincipalError()
    if not principal.is_active:
        raise NotAuthorizedError()
    return principal
