"""
Runtime settings for a deployment run.

Values come from the process environment (optionally seeded from a .env file)
and can be overridden from the command line.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from brodeploy.exceptions import ConfigError


# =============================================================================
# DEFAULTS
# =============================================================================

# Mnemonic of the funded LocalTerra test account, used when MNEMONIC is unset.
LOCALTERRA_MNEMONIC: str = (
    "satisfy adjust timber high purchase tuition stool faith fine install that "
    "you unaware feed domain license impose boss human eager hat rent enjoy dawn"
)

DEFAULT_CONFIG_DIR = Path("config")
DEFAULT_ARTIFACTS_DIR = Path("artifacts")
DEFAULT_WASM_DIR = Path("../../artifacts")
DEFAULT_SETTLE_DELAY: float = 3.0  # seconds to wait after each broadcast


@dataclass(frozen=True)
class Settings:
    """Everything a run needs besides the config and artifact files."""

    network_id: str
    admin_address: str
    mnemonic: str | None = None
    lcd_url: str | None = None
    gas_prices: str | None = None
    gas_adjustment: str | None = None
    settle_delay: float = DEFAULT_SETTLE_DELAY
    config_dir: Path = DEFAULT_CONFIG_DIR
    artifacts_dir: Path = DEFAULT_ARTIFACTS_DIR
    wasm_dir: Path = DEFAULT_WASM_DIR

    @property
    def uses_local_terra(self) -> bool:
        return not self.mnemonic

    @classmethod
    def from_env(cls, **overrides) -> Settings:
        """Build settings from CHAINID, ADMIN_ADDRESS, MNEMONIC, LCD and friends.

        Keyword overrides that are not None win over the environment.

        Raises:
            ConfigError: If CHAINID or ADMIN_ADDRESS is missing.
        """
        values = {
            "network_id": os.getenv("CHAINID"),
            "admin_address": os.getenv("ADMIN_ADDRESS"),
            "mnemonic": os.getenv("MNEMONIC") or None,
            "lcd_url": os.getenv("LCD") or None,
            "gas_prices": os.getenv("GAS_PRICES") or None,
            "gas_adjustment": os.getenv("GAS_ADJUSTMENT") or None,
            "settle_delay": _float_env("SETTLE_DELAY", DEFAULT_SETTLE_DELAY),
            "wasm_dir": Path(os.getenv("WASM_DIR") or DEFAULT_WASM_DIR),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        missing = [env for env, key in (("CHAINID", "network_id"), ("ADMIN_ADDRESS", "admin_address")) if not values.get(key)]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")
        if values.get("mnemonic") and not values.get("lcd_url"):
            raise ConfigError("LCD must be set when MNEMONIC is provided")

        for key in ("config_dir", "artifacts_dir", "wasm_dir"):
            if key in values:
                values[key] = Path(values[key])
        return cls(**values)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def load_env(path: str | None = None) -> None:
    """Load a .env file into the environment without overriding set variables."""
    if path:
        load_dotenv(path)
    else:
        load_dotenv()
