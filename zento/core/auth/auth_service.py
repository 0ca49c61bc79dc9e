"""Authentication service layer."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from sqlalchemy import func

from zento.core.auth.models import RefreshToken
from zento.core.auth.password import hash_password, verify_password
from zento.core.auth.schemas import RegisterRequest
from zento.core.users.models import User
from zento.extensions import db

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def find_account_by_email(email: str) -> Optional[User]:
    return User.query.filter(
        func.lower(User.email) == email.strip().lower(), User.is_guest.is_(False)
    ).first()


def authenticate_user(email: str, password: str) -> Optional[User]:
    """Return the account if credentials are valid. Guests can never log in."""
    user = find_account_by_email(email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def access_claims(user: User) -> dict:
    return {"email": user.email}


def issue_tokens(user: User) -> dict[str, str]:
    """Create access and refresh tokens for an account."""
    identity = str(user.id)
    claims = access_claims(user)
    access_token = create_access_token(identity=identity, additional_claims=claims)
    refresh_token = create_refresh_token(identity=identity, additional_claims=claims)

    # Persist refresh jti for revocation checks
    decoded_refresh = decode_token(refresh_token)
    expires = decoded_refresh.get("exp")
    db.session.add(
        RefreshToken(
            user_id=user.id,
            jti=decoded_refresh.get("jti"),
            expires_at=datetime.utcfromtimestamp(expires) if expires else None,
        )
    )
    db.session.commit()

    return {"access_token": access_token, "refresh_token": refresh_token}


def refresh_access_token(identity: str, claims: dict) -> str:
    return create_access_token(identity=identity, additional_claims={"email": claims.get("email")})


def is_token_revoked(jti: Optional[str]) -> bool:
    """True only for refresh tokens revoked at logout; access tokens expire on their own."""
    if not jti:
        return False
    token = RefreshToken.query.filter_by(jti=jti).first()
    return token is not None and token.revoked


def revoke_refresh_token(jti: str) -> None:
    token = RefreshToken.query.filter_by(jti=jti).first()
    if token is None:
        logger.warning("logout with unknown refresh jti %s", jti)
        return
    if token.revoked_at is None:
        token.revoked_at = datetime.utcnow()
        db.session.commit()


def register_user(payload: RegisterRequest) -> User:
    """Create a permanent account. Guest identities are never converted in place."""
    if find_account_by_email(payload.email) is not None:
        raise ValueError("email_already_exists")

    user = User(
        email=payload.email,
        full_name=payload.full_name,
        timezone=payload.timezone or DEFAULT_TIMEZONE,
        password_hash=hash_password(payload.password),
        is_guest=False,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("registered account %s", user.id)
    return user
