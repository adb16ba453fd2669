# jobboard/core/security.py
"""
Credential primitives: password hashing, session tokens and reset tokens.

Nothing in here reads global settings at call time. The identity service builds
a ``SecurityConfig`` once and hands it to ``PasswordHasher`` / ``TokenSigner``.
"""
import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict

from jobboard.core.config import Settings
from jobboard.core.errors import AuthError

RESET_TOKEN_BYTES = 20


class SecurityConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 30
    password_hash_rounds: int = 10
    reset_token_expire_minutes: int = 10

    @classmethod
    def from_settings(cls, s: Settings) -> "SecurityConfig":
        return cls(
            secret_key=s.SECRET_KEY,
            algorithm=s.JWT_ALGORITHM,
            access_token_expire_minutes=s.ACCESS_TOKEN_EXPIRE_MINUTES,
            password_hash_rounds=s.PASSWORD_HASH_ROUNDS,
            reset_token_expire_minutes=s.RESET_TOKEN_EXPIRE_MINUTES,
        )


class PasswordHasher:
    def __init__(self, rounds: int = 10):
        self._ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._ctx.hash(password)

    def verify(self, password: str, hashed: Optional[str]) -> bool:
        if not password or not hashed:
            return False
        try:
            return self._ctx.verify(password, hashed)
        except ValueError:
            # unknown / corrupted hash format
            return False


class TokenSigner:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self._secret = secret_key
        self._algorithm = algorithm
        self._expire = timedelta(minutes=expire_minutes)

    def sign(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.utcnow()
        exp = now + (expires_delta if expires_delta is not None else self._expire)
        payload = {"sub": str(user_id), "iat": now, "exp": exp}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the user id bound to ``token`` or raise AuthError."""
        if not token:
            raise AuthError()
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise AuthError("Invalid or expired token") from None
        sub = payload.get("sub")
        if not sub:
            raise AuthError("Invalid or expired token")
        return sub


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """Return ``(raw, hashed)``; only the hash is ever persisted."""
    raw = secrets.token_hex(RESET_TOKEN_BYTES)
    return raw, hash_reset_token(raw)
