# octa_api/auth.py
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import bcrypt
import jwt
from fastapi import Header, Request

from .config import Settings
from .errors import Unauthorized

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenInvalid(Exception):
    pass


# ---------------------------
# Passwords
# ---------------------------
def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        return False


# ---------------------------
# Session tokens
# ---------------------------
class TokenService:
    """
    Issues and verifies signed session tokens carrying {"userId": ...}.

    keys maps a key id to its secret. New tokens are signed with active_kid and carry it
    in the "kid" header; any configured key is accepted on verify, so an old key can stay
    listed while its tokens run out.
    """

    def __init__(
        self,
        keys: Dict[str, str],
        active_kid: Optional[str] = None,
        ttl: timedelta = timedelta(hours=1),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not keys:
            raise ValueError("TokenService needs at least one signing key")
        self._keys = dict(keys)
        self.active_kid = active_kid or next(iter(self._keys))
        if self.active_kid not in self._keys:
            raise ValueError(f"unknown active key id {self.active_kid!r}")
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        keys = settings.jwt_keys
        if not keys:
            logger.warning("No JWT_KEYS/JWT_SECRET configured; generated a process-local "
                           "signing key, tokens will not survive a restart")
            keys = {"ephemeral": secrets.token_urlsafe(48)}
        return cls(keys, ttl=timedelta(seconds=settings.token_ttl_seconds))

    def issue(self, user_id: str) -> str:
        now = self._clock()
        payload = {"userId": str(user_id), "iat": now, "exp": now + self.ttl}
        return jwt.encode(
            payload,
            self._keys[self.active_kid],
            algorithm=ALGORITHM,
            headers={"kid": self.active_kid},
        )

    def verify(self, token: str) -> Dict[str, str]:
        try:
            kid = jwt.get_unverified_header(token).get("kid")
            if kid not in self._keys:
                raise TokenInvalid(f"unknown key id {kid!r}")
            claims = jwt.decode(
                token,
                self._keys[kid],
                algorithms=[ALGORITHM],
                options={"require": ["exp", "userId"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.PyJWTError as e:
            raise TokenInvalid(str(e)) from e
        # expiry is judged by this service's clock; a token is dead at exactly exp
        exp = claims["exp"]
        if not isinstance(exp, (int, float)) or exp <= self._clock().timestamp():
            raise TokenInvalid("Signature has expired")
        return {"userId": claims["userId"]}


# ---------------------------
# FastAPI dependencies
# ---------------------------
def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate(tokens: TokenService, authorization: Optional[str]) -> Dict[str, str]:
    token = bearer_token(authorization)
    if token is None:
        raise Unauthorized("Unauthorized")
    try:
        return tokens.verify(token)
    except TokenInvalid as e:
        logger.info("Rejected session token: %s", e)
        raise Unauthorized("Token expired or invalid")


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


async def require_token(request: Request, authorization: Optional[str] = Header(None)):
    if not request.app.state.settings.require_auth:
        return None
    return authenticate(request.app.state.tokens, authorization)
