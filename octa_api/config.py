# octa_api/config.py
import logging
import os
from typing import Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from rich.logging import RichHandler


def _parse_keys(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse "kid:secret,kid2:secret2" into an ordered dict. The first entry signs new tokens.
    """
    keys: Dict[str, str] = {}
    if not raw:
        return keys
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        kid, sep, secret = item.partition(":")
        if not sep or not kid or not secret:
            raise ValueError(f"JWT_KEYS entry must look like kid:secret, got {item!r}")
        keys[kid.strip()] = secret.strip()
    return keys


def _as_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    store_backend: str = "memory"
    mongo_url: str = "mongodb://127.0.0.1:27017"
    mongo_db: str = "octa"
    # kid -> secret; empty means a random key is generated at startup
    jwt_keys: Dict[str, str] = Field(default_factory=dict)
    token_ttl_seconds: int = 3600
    bcrypt_rounds: int = 12
    require_auth: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_path: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path=env_path)
        keys = _parse_keys(os.getenv("JWT_KEYS"))
        if not keys and os.getenv("JWT_SECRET"):
            keys = {"default": os.getenv("JWT_SECRET")}
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            store_backend=os.getenv("STORE_BACKEND", "memory").lower(),
            mongo_url=os.getenv("MONGO_URL", "mongodb://127.0.0.1:27017"),
            mongo_db=os.getenv("MONGO_DB", "octa"),
            jwt_keys=keys,
            token_ttl_seconds=int(os.getenv("TOKEN_TTL_SECONDS", "3600")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            require_auth=_as_bool(os.getenv("REQUIRE_AUTH"), True),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    # no-op when the root logger already has handlers (uvicorn, pytest)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
