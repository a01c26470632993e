"""
frameattest.config - Process settings read from the environment.

Required:
    HUB_URL            Farcaster hub HTTP API endpoint (host:port or URL,
                       port 2281; the gRPC port 2283 is refused)
    NEYNAR_API_KEY     identity index credential
    ALCHEMY_KEY        Base RPC credential
    PRIVATE_KEY        attester signing key (hex)
    SYNDICATE_API_KEY  transaction-relay credential

Everything else has a default, see ``Settings``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlsplit

from frameattest.errors import ConfigurationError

REQUIRED_ENV_VARS = (
    "HUB_URL",
    "NEYNAR_API_KEY",
    "ALCHEMY_KEY",
    "PRIVATE_KEY",
    "SYNDICATE_API_KEY",
)

ACTIONS = ("attest", "mint")

DEFAULT_NEYNAR_API_URL = "https://api.neynar.com"
DEFAULT_SYNDICATE_API_URL = "https://api.syndicate.io"
ALCHEMY_BASE_URL = "https://base-mainnet.g.alchemy.com/v2/{key}"
HUB_GRPC_PORT = 2283


def normalize_hub_url(value: str) -> str:
    """Turn ``host:port`` into an https URL; leave full URLs alone.

    The hub is reached over its HTTP API (port 2281 by default). Port 2283
    is the hub's gRPC listener and cannot answer these calls.
    """
    value = value.strip().rstrip("/")
    if "://" not in value:
        value = f"https://{value}"
    try:
        port = urlsplit(value).port
    except ValueError as e:
        raise ConfigurationError(f"HUB_URL is not a valid URL: {e}") from None
    if port == HUB_GRPC_PORT:
        raise ConfigurationError(
            f"HUB_URL points at the gRPC port {HUB_GRPC_PORT}; use the hub HTTP API port (2281)"
        )
    return value


@dataclass
class Settings:
    hub_url: str
    neynar_api_key: str
    alchemy_key: str
    private_key: str = field(repr=False)
    syndicate_api_key: str = field(repr=False)

    public_url: str = ""
    rpc_url: str = ""
    neynar_api_url: str = DEFAULT_NEYNAR_API_URL
    syndicate_api_url: str = DEFAULT_SYNDICATE_API_URL
    database_url: str = ""
    confirmation_timeout: float = 120.0
    http_timeout: float = 10.0
    action: str = "attest"
    syndicate_project_id: str = ""
    mint_contract_address: str = ""
    log_level: str = "INFO"

    @property
    def chain_rpc_url(self) -> str:
        return self.rpc_url or ALCHEMY_BASE_URL.format(key=self.alchemy_key)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings, failing fast on anything missing or malformed."""
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigurationError.for_missing(missing)

        action = env.get("FRAME_ACTION", "attest").strip().lower()
        if action not in ACTIONS:
            raise ConfigurationError(
                f"FRAME_ACTION must be one of {', '.join(ACTIONS)}, got {action!r}"
            )
        if action == "mint":
            mint_missing = [
                name for name in ("SYNDICATE_PROJECT_ID", "MINT_CONTRACT_ADDRESS")
                if not env.get(name)
            ]
            if mint_missing:
                raise ConfigurationError.for_missing(mint_missing)

        return cls(
            hub_url=normalize_hub_url(env["HUB_URL"]),
            neynar_api_key=env["NEYNAR_API_KEY"],
            alchemy_key=env["ALCHEMY_KEY"],
            private_key=env["PRIVATE_KEY"],
            syndicate_api_key=env["SYNDICATE_API_KEY"],
            public_url=env.get("URL", "").rstrip("/"),
            rpc_url=env.get("RPC_URL", ""),
            neynar_api_url=env.get("NEYNAR_API_URL", DEFAULT_NEYNAR_API_URL).rstrip("/"),
            syndicate_api_url=env.get("SYNDICATE_API_URL", DEFAULT_SYNDICATE_API_URL).rstrip("/"),
            database_url=env.get("DATABASE_URL", ""),
            confirmation_timeout=_positive_float(env, "CONFIRMATION_TIMEOUT", 120.0),
            http_timeout=_positive_float(env, "HTTP_TIMEOUT", 10.0),
            action=action,
            syndicate_project_id=env.get("SYNDICATE_PROJECT_ID", ""),
            mint_contract_address=env.get("MINT_CONTRACT_ADDRESS", ""),
            log_level=env.get("LOG_LEVEL", "INFO"),
        )


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value
