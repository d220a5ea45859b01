"""
Session Manager

Issues, verifies and revokes the session token kept in the
``phoenix_session`` cookie. The token is self-contained (no server-side
session table) and carries the user identity plus its issue time.

The wire representation is a pluggable ``SessionCodec``:
- ``Base64JsonCodec``: unsigned base64url JSON (default)
- ``JwtCodec``: HS256-signed JWT (python-jose)

Callers only use ``SessionManager``; switching codecs does not change them.
"""

import base64
import json
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from fastapi import Request, Response
from jose import JWTError, jwt

from app.core.config import SessionConfig
from app.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SessionData:
    user_id: int
    github_id: int
    username: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: int = 0  # epoch milliseconds

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionData":
        return cls(
            user_id=int(payload["user_id"]),
            github_id=int(payload["github_id"]),
            username=str(payload["username"]),
            email=payload.get("email"),
            avatar_url=payload.get("avatar_url"),
            created_at=int(payload["created_at"]),
        )


class InvalidSessionToken(Exception):
    """Raised by codecs when a token cannot be decoded"""


def _reject_constant(name: str) -> None:
    raise InvalidSessionToken(f"non-finite number {name}")


class SessionCodec:
    """Strategy interface turning session payloads into opaque strings."""

    def encode(self, payload: Dict[str, Any]) -> str:
        raise NotImplementedError

    def decode(self, token: str) -> Dict[str, Any]:
        raise NotImplementedError


class Base64JsonCodec(SessionCodec):
    """Unsigned base64url(JSON). Readable by anyone holding the cookie."""

    def encode(self, payload: Dict[str, Any]) -> str:
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            padded = token + "=" * (-len(token) % 4)
            data = json.loads(
                base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"),
                parse_constant=_reject_constant,
            )
        except (ValueError, UnicodeError) as e:
            raise InvalidSessionToken(str(e)) from e
        if not isinstance(data, dict):
            raise InvalidSessionToken("payload is not an object")
        return data


class JwtCodec(SessionCodec):
    """HS256-signed JWT; tampered tokens fail to decode."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("JwtCodec requires a secret")
        self.secret = secret
        self.algorithm = algorithm

    def encode(self, payload: Dict[str, Any]) -> str:
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidSessionToken(str(e)) from e


def build_codec(config: SessionConfig) -> SessionCodec:
    if config.token_format == "jwt":
        return JwtCodec(config.secret)
    if config.token_format == "base64":
        return Base64JsonCodec()
    raise ValueError(f"Unknown session token format: {config.token_format}")


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionManager:
    """
    Produces and validates the proof-of-identity token.

    Usage:
        manager = SessionManager(settings.session_config())
        token = manager.issue({"user_id": 1, "github_id": 42, "username": "octocat"})
        manager.set_cookie(response, token)
        session = manager.read(request)  # SessionData or None
    """

    def __init__(self, config: SessionConfig, codec: Optional[SessionCodec] = None):
        self.config = config
        self.codec = codec or build_codec(config)

    @property
    def cookie_name(self) -> str:
        return self.config.cookie_name

    @property
    def max_age_ms(self) -> int:
        return self.config.max_age_seconds * 1000

    def issue(self, identity: Dict[str, Any], now: Optional[int] = None) -> str:
        """
        Encode an identity into a session token.

        Args:
            identity: user_id, github_id, username and optional email/avatar_url
            now: Issue time in epoch milliseconds (defaults to current time)
        """
        data = SessionData(
            user_id=identity["user_id"],
            github_id=identity["github_id"],
            username=identity["username"],
            email=identity.get("email"),
            avatar_url=identity.get("avatar_url"),
            created_at=now if now is not None else _now_ms(),
        )
        return self.codec.encode(asdict(data))

    def verify(self, token: Optional[str], now: Optional[int] = None) -> Optional[SessionData]:
        """
        Decode a token. Any failure is reported as ``None``, never raised.
        """
        if not token:
            return None
        try:
            data = SessionData.from_payload(self.codec.decode(token))
        except (InvalidSessionToken, KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.warning("Invalid session token", reason=str(e))
            return None

        current = now if now is not None else _now_ms()
        if current - data.created_at > self.max_age_ms:
            return None
        return data

    def read(self, request: Request) -> Optional[SessionData]:
        return self.verify(request.cookies.get(self.cookie_name))

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            self.cookie_name,
            token,
            max_age=self.config.max_age_seconds,
            path="/",
            httponly=True,
            secure=self.config.secure,
            samesite="lax",
        )

    def revoke(self, response: Response) -> None:
        response.delete_cookie(
            self.cookie_name,
            path="/",
            httponly=True,
            secure=self.config.secure,
            samesite="lax",
        )
