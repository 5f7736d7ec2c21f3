"""Run configuration for the order load test."""

import os
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

from errors import ConfigurationError

DEFAULT_API_VERSION = "2024-10"
DEFAULT_SPECIAL_ITEM_RATE = 0.01
USER_AGENT = "OrderLoadTest/1.0"


@dataclass(frozen=True)
class LoadTestConfig:
    """Everything a run needs, resolved once at start-up."""

    store_url: str
    access_token: str
    scenario: str = "normal"
    special_item_rate: float = DEFAULT_SPECIAL_ITEM_RATE
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 60.0
    verify_ssl: bool = True
    pools_file: Optional[str] = None
    seed: Optional[int] = None

    def __post_init__(self):
        if not self.store_url:
            raise ConfigurationError("Store URL is required (SHOPIFY_URL or --store-url)")
        if not self.access_token:
            raise ConfigurationError("Access token is required (SHOPIFY_TOKEN or --token)")
        if not 0.0 <= self.special_item_rate <= 1.0:
            raise ConfigurationError(
                f"Special item rate must be within [0, 1], got {self.special_item_rate}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "LoadTestConfig":
        """Create a LoadTestConfig from environment variables, then apply overrides."""
        env = os.environ if environ is None else environ
        values = {
            "store_url": env.get("SHOPIFY_URL", ""),
            "access_token": env.get("SHOPIFY_TOKEN", ""),
            "scenario": env.get("SCENARIO", "normal"),
            "special_item_rate": _parse_float("SPECIAL_SKUS_RATE", env.get("SPECIAL_SKUS_RATE"), DEFAULT_SPECIAL_ITEM_RATE),
            "api_version": env.get("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
            "timeout": _parse_float("REQUEST_TIMEOUT", env.get("REQUEST_TIMEOUT"), 60.0),
            "pools_file": env.get("POOLS_FILE") or None,
            "seed": _parse_int("LOADTEST_SEED", env.get("LOADTEST_SEED")),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides) -> "LoadTestConfig":
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def graphql_url(self) -> str:
        store = self.store_url.rstrip("/")
        if not store.startswith(("http://", "https://")):
            store = f"https://{store}"
        return f"{store}/admin/api/{self.api_version}/graphql.json"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            "X-Shopify-Access-Token": self.access_token,
        }


def _parse_float(name: str, raw: Optional[str], default: float) -> float:
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _parse_int(name: str, raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
