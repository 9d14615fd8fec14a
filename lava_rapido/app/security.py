"""Bearer token verification and member resolution for the API."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import models
from .database import get_db

AUTH_JWT_SECRET_ENV = "AUTH_JWT_SECRET"
AUTH_JWT_AUDIENCE_ENV = "AUTH_JWT_AUDIENCE"
ACCESS_TOKEN_EXPIRE_MINUTES_ENV = "ACCESS_TOKEN_EXPIRE_MINUTES"

bearer_scheme = HTTPBearer(auto_error=False)


class SecurityConfigurationError(RuntimeError):
    """Raised when mandatory security settings are missing or invalid."""


def _read_env_var(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise SecurityConfigurationError(f"Environment variable '{name}' is required")
    return value


@lru_cache(maxsize=1)
def _load_jwt_key() -> bytes:
    raw_secret = _read_env_var(AUTH_JWT_SECRET_ENV)
    try:
        return base64.urlsafe_b64decode(raw_secret)
    except (ValueError, binascii.Error):
        return raw_secret.encode("utf-8")


def _expected_audience() -> Optional[str]:
    return os.getenv(AUTH_JWT_AUDIENCE_ENV) or None


def _unauthorized(detail: str = "Token inválido") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _encode_jwt(payload: dict[str, Any], key: bytes) -> str:
    header = {"typ": "JWT", "alg": "HS256"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    signature = hmac.new(key, signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(signature)}"


def _decode_jwt(token: str, key: bytes) -> dict[str, Any]:
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
        header = json.loads(_b64url_decode(header_b64).decode("utf-8"))
        signature = _b64url_decode(signature_b64)
    except (ValueError, binascii.Error) as exc:
        raise _unauthorized() from exc

    if header.get("alg") != "HS256":
        raise _unauthorized()

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_signature = hmac.new(key, signing_input, hashlib.sha256).digest()
    if not hmac.compare_digest(signature, expected_signature):
        raise _unauthorized()

    try:
        payload_data = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    except (ValueError, binascii.Error) as exc:
        raise _unauthorized() from exc

    if payload_data.get("exp") is None:
        raise _unauthorized()
    exp = int(payload_data["exp"])
    if datetime.now(timezone.utc) >= datetime.fromtimestamp(exp, tz=timezone.utc):
        raise _unauthorized("Token expirado")

    audience = _expected_audience()
    if audience is not None:
        claimed = payload_data.get("aud")
        claimed_values = claimed if isinstance(claimed, list) else [claimed]
        if audience not in claimed_values:
            raise _unauthorized()
    return payload_data


def _resolve_access_token_expiry() -> timedelta:
    raw = os.getenv(ACCESS_TOKEN_EXPIRE_MINUTES_ENV)
    if not raw:
        return timedelta(minutes=60)
    try:
        minutes = int(raw)
    except ValueError as exc:
        raise SecurityConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be an integer") from exc
    if minutes <= 0:
        raise SecurityConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
    return timedelta(minutes=minutes)


def create_access_token(user_id: str, *, expires_in: Optional[timedelta] = None) -> str:
    """Issue a token the way the identity provider does, for local tooling and tests."""

    expiry = datetime.now(timezone.utc) + (expires_in or _resolve_access_token_expiry())
    payload: dict[str, Any] = {"sub": user_id, "exp": int(expiry.timestamp())}
    audience = _expected_audience()
    if audience is not None:
        payload["aud"] = audience
    return _encode_jwt(payload, _load_jwt_key())


@dataclass
class AuthenticatedUser:
    """Subject of a verified bearer token."""

    user_id: str


@dataclass
class MemberIdentity:
    """Authenticated user resolved to its business membership."""

    member_id: str
    business_id: str
    user_id: str
    display_name: str
    role: models.MemberRole

    @property
    def is_owner(self) -> bool:
        return self.role == models.MemberRole.OWNER


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Não autenticado")
    payload = _decode_jwt(credentials.credentials, _load_jwt_key())
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id.strip():
        raise _unauthorized()
    return AuthenticatedUser(user_id=user_id.strip())


def get_current_member(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MemberIdentity:
    """FastAPI dependency scoping the request to the caller's business."""

    member = (
        db.query(models.BusinessMember)
        .filter(models.BusinessMember.user_id == user.user_id)
        .order_by(models.BusinessMember.created_at.asc())
        .first()
    )
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuário não está vinculado a nenhum lava rápido",
        )
    return MemberIdentity(
        member_id=member.id,
        business_id=member.business_id,
        user_id=member.user_id,
        display_name=member.display_name,
        role=member.role,
    )


def require_owner(member: MemberIdentity = Depends(get_current_member)) -> MemberIdentity:
    """FastAPI dependency that only lets the business owner through."""

    if not member.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Apenas o proprietário pode alterar esta configuração",
        )
    return member
