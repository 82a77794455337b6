# circularbuild/infrastructure/security.py
import datetime
import secrets
from typing import Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from circularbuild.domain.entities import AuthUser


class SecurityService:
    """Issues and verifies the bearer tokens handed out by the auth provider.

    Only the identity claims are read: ``sub`` carries the user id, ``email``
    and ``name`` come along for profile bootstrap.
    """

    def __init__(self, config):
        self.config = config

    def create_access_token(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        expires_delta: Optional[datetime.timedelta] = None,
    ):
        to_encode = {"sub": user_id, "email": email, "nonce": secrets.token_hex(8)}
        if name:
            to_encode["name"] = name
        if expires_delta is None:
            expires_delta = datetime.timedelta(
                minutes=self.config.ACCESS_TOKEN_EXPIRE_MINUTES
            )
        expire = datetime.datetime.now(datetime.timezone.utc) + expires_delta
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(
            to_encode, self.config.SECRET_KEY, algorithm=self.config.ALGORITHM
        )
        return encoded_jwt, expire

    def decode_access_token(self, token: str) -> Optional[AuthUser]:
        try:
            payload = jwt.decode(
                token, self.config.SECRET_KEY, algorithms=[self.config.ALGORITHM]
            )
        except (ExpiredSignatureError, InvalidTokenError):
            return None
        user_id = payload.get("sub")
        if not user_id:
            return None
        return AuthUser(
            id=str(user_id),
            email=payload.get("email") or "",
            name=payload.get("name"),
        )
