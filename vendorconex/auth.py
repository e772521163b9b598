import time
from typing import Optional

import jwt
from passlib.context import CryptContext

from . import config
from .errors import UnauthorizedError
from .logger import get_logger
from .store import USERS, DocumentStore

logger = get_logger("auth")

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def create_access_token(user_id: str, role: str, expires_delta: Optional[int] = None) -> str:
    now = int(time.time())
    exp = now + (expires_delta or config.get_settings().token_ttl_seconds)
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": exp}
    return jwt.encode(payload, config.get_settings().jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.get_settings().jwt_secret, algorithms=[ALGORITHM])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    # Burn the same time as a real verify when the email is unknown
    pwd_context.dummy_verify()


def public_user(user: dict) -> dict:
    return {key: value for key, value in user.items() if key != "password_hash"}


def resolve_bearer(store: DocumentStore, authorization: Optional[str]) -> dict:
    """Resolve an ``Authorization: Bearer <token>`` header to the caller's user record."""
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer "):].strip()
    if not token:
        raise UnauthorizedError("Not authorized, no token.")
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.warning("token rejected: %s", e)
        raise UnauthorizedError("Not authorized, token failed.") from e
    user = store.find_by_id(USERS, str(payload.get("sub")))
    if user is None:
        logger.warning("token subject %s does not exist", payload.get("sub"))
        raise UnauthorizedError("Not authorized, token failed.")
    return public_user(user)
