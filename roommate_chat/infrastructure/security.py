# roommate_chat/infrastructure/security.py
import datetime
import secrets
from typing import Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError


class SecurityService:
    def __init__(self, config):
        self.config = config

    def create_access_token(
        self, data: dict, expires_delta: Optional[datetime.timedelta] = None
    ):
        to_encode = data.copy()
        to_encode.update({"nonce": secrets.token_hex(8)})
        if expires_delta:
            expire = datetime.datetime.now(datetime.timezone.utc) + expires_delta
        else:
            expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(
                minutes=self.config.ACCESS_TOKEN_EXPIRE_MINUTES
            )
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(
            to_encode, self.config.SECRET_KEY, algorithm=self.config.ALGORITHM
        )
        return encoded_jwt, expire

    def create_user_token(self, user_id: int) -> str:
        token, _ = self.create_access_token({"sub": str(user_id)})
        return token

    def decode_access_token(self, token: str | None) -> Optional[int]:
        """User id carried in ``sub``, or None when the token is unusable."""
        if not token:
            return None
        try:
            payload = jwt.decode(
                token, self.config.SECRET_KEY, algorithms=[self.config.ALGORITHM]
            )
        except (ExpiredSignatureError, InvalidTokenError):
            return None
        subject = payload.get("sub")
        if subject is None:
            return None
        try:
            return int(subject)
        except (TypeError, ValueError):
            return None
