"""
JWT identity tokens and password hashing (bcrypt).

``TokenService`` holds the signing key it was constructed with; it never
reads global settings, so tests and the app can build independent instances.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.enums import UserRole
from app.core.exceptions import InvalidToken, TokenExpired

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_TOKEN_TYPE = "access"


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Unrecognised or corrupted hash in storage
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── Identity ────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CallerIdentity:
    """Who is invoking an operation, as resolved from a verified token."""

    subject_id: str
    email: str
    role: UserRole


class TokenService:
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ) -> None:
        self._secret = secret_key
        self._algorithm = algorithm
        self._expires = timedelta(minutes=expire_minutes)

    def issue(
        self,
        subject_id: str,
        email: str,
        role: UserRole | str,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(subject_id),
            "email": email,
            "role": UserRole(role).value,
            "type": _TOKEN_TYPE,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self._expires),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> CallerIdentity:
        """Decode *token* into a caller identity.

        Raises ``TokenExpired`` once the validity window has elapsed and
        ``InvalidToken`` for anything else that fails verification.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTError as exc:
            raise InvalidToken() from exc

        if payload.get("type") != _TOKEN_TYPE:
            raise InvalidToken("Unexpected token type")

        subject_id = payload.get("sub")
        email = payload.get("email")
        if not subject_id or not email:
            raise InvalidToken("Token is missing identity claims")
        try:
            role = UserRole(payload.get("role"))
        except ValueError as exc:
            raise InvalidToken("Token carries an unknown role") from exc

        return CallerIdentity(subject_id=subject_id, email=email, role=role)
