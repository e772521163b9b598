"""Runtime configuration for the app (swappable during tests/runtime)."""
import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

load_dotenv()

# Used by checkout when the client does not send an address.
DEFAULT_SHIPPING_ADDRESS = {
    "street": "123 Main St",
    "city": "Anytown",
    "state": "CA",
    "zip": "90210",
    "country": "USA",
}


class Settings(NamedTuple):
    database_url: str
    jwt_secret: str
    token_ttl_seconds: int
    gemini_api_key: Optional[str]
    gemini_model: str
    chat_timeout_seconds: float
    log_level: str


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./vendorconex.db"),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret"),
        token_ttl_seconds=int(os.getenv("TOKEN_TTL_SECONDS", 60 * 60)),  # 1 hour
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        chat_timeout_seconds=float(os.getenv("CHAT_TIMEOUT_SECONDS", 30)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


state = load_settings()


def set_settings(**changes) -> Settings:
    global state
    state = state._replace(**changes)
    return state


def get_settings() -> Settings:
    return state
