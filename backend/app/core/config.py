"""Environment-driven configuration.

Values are read at call time so that a reloaded ``.env`` or a test's
``monkeypatch.setenv`` takes effect without re-importing modules.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

NETWORKS = ("preprod", "mainnet")

BLOCKFROST_URLS = {
    "preprod": "https://cardano-preprod.blockfrost.io/api/v0",
    "mainnet": "https://cardano-mainnet.blockfrost.io/api/v0",
}

BLOCKFROST_KEY_ENV = {
    "preprod": "BLOCKFROST_API_KEY",
    "mainnet": "BLOCKFROST_MAINNET_API_KEY",
}

PLACEHOLDER_KEYS = {
    "preprod": "preprod_mock",
    "mainnet": "mainnet_mock",
}

ADDRESS_PREFIXES = {
    "preprod": "addr_test1",
    "mainnet": "addr1",
}


@dataclass(frozen=True)
class BlockfrostConfig:
    network: str
    url: str
    api_key: str
    timeout: int = 30


def get_blockfrost_config(network: str = "preprod") -> BlockfrostConfig:
    if network not in NETWORKS:
        raise ValueError(f"Unsupported network: {network}")
    api_key = os.getenv(BLOCKFROST_KEY_ENV[network]) or PLACEHOLDER_KEYS[network]
    timeout = int(os.getenv("BLOCKFROST_TIMEOUT", "30"))
    return BlockfrostConfig(network=network, url=BLOCKFROST_URLS[network], api_key=api_key, timeout=timeout)


def is_blockfrost_available() -> bool:
    """True when a real preprod project key is configured."""
    key = os.getenv("BLOCKFROST_API_KEY")
    return bool(key and key != PLACEHOLDER_KEYS["preprod"] and key.startswith("preprod"))


def available_network() -> str | None:
    preprod_key = os.getenv("BLOCKFROST_API_KEY")
    mainnet_key = os.getenv("BLOCKFROST_MAINNET_API_KEY")
    if preprod_key and preprod_key.startswith("preprod"):
        return "preprod"
    if mainnet_key and mainnet_key.startswith("mainnet"):
        return "mainnet"
    return None


def default_ai_provider() -> str:
    return os.getenv("DEFAULT_AI_PROVIDER", "gemini").lower()


def history_path() -> Path:
    configured = os.getenv("HISTORY_PATH")
    if configured:
        return Path(configured)
    # backend/app/core/config.py -> backend
    return Path(__file__).resolve().parents[2] / "data" / "history.json"
