# PATH: config/__init__.py
"""
Configuration loading utilities for the Odos connector.

Files:
- odos.yaml: aggregator settings (slippage, gas limit, ttl, router addresses)
- chains.yaml: per chain/network chain id, RPC endpoints and token list
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.constants import (
    AmountScaling,
    DEFAULT_ALLOWED_SLIPPAGE,
    DEFAULT_GAS_LIMIT_ESTIMATE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_TTL_SECONDS,
    ODOS_API_URL,
)
from core.exceptions import ConfigError


CONFIG_DIR = Path(__file__).parent

# "1/100" style fraction strings
PERCENT_FRACTION = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)\s*$")


def load_yaml(filename: str, config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory
        config_dir: Directory to read from (default: this package)

    Returns:
        Parsed YAML as dict
    """
    filepath = (config_dir or CONFIG_DIR) / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_chains(config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load chains configuration."""
    return load_yaml("chains.yaml", config_dir)


def get_chain_config(chain: str, network: str, config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Get configuration for a chain/network pair.

    Raises:
        KeyError: If the pair is not configured
    """
    chains = load_chains(config_dir)
    if chain not in chains:
        raise KeyError(f"Unknown chain: {chain}")
    if network not in chains[chain]:
        raise KeyError(f"Unknown network {network} on chain {chain}")
    return chains[chain][network]


def parse_percent(value: str) -> Decimal:
    """
    Parse a fraction string into a percent.

    "1/100" -> Decimal("1"), "1/200" -> Decimal("0.5")

    Raises:
        ConfigError: If the string is not a fraction with a non-zero denominator
    """
    match = PERCENT_FRACTION.match(str(value))
    if not match or Decimal(match.group(2)) == 0:
        raise ConfigError(
            f"Encountered a malformed percent string in the config for ALLOWED_SLIPPAGE: {value!r}",
            details={"value": str(value)},
        )
    return Decimal(match.group(1)) / Decimal(match.group(2)) * Decimal(100)


@dataclass
class OdosConfig:
    """Odos aggregator settings."""
    api_url: str = ODOS_API_URL
    allowed_slippage: str = DEFAULT_ALLOWED_SLIPPAGE
    gas_limit_estimate: int = DEFAULT_GAS_LIMIT_ESTIMATE
    ttl: int = DEFAULT_TTL_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    buy_amount_scaling: AmountScaling = AmountScaling.QUOTE
    # chain -> network -> {"router_address": ...}
    contract_addresses: Dict[str, Dict[str, Dict[str, str]]] = field(default_factory=dict)
    # chain -> aggregator name, or chain -> network -> aggregator name
    chain_names: Dict[str, Any] = field(default_factory=dict)

    @property
    def slippage_percent(self) -> Decimal:
        return parse_percent(self.allowed_slippage)

    def router_address(self, chain: str, network: str) -> str:
        """
        Router contract for a chain/network pair.

        Raises:
            ConfigError: If no router is configured for the pair
        """
        address = self.contract_addresses.get(chain, {}).get(network, {}).get("router_address")
        if not address:
            raise ConfigError(
                f"No Odos router configured for {chain}/{network}",
                details={"chain": chain, "network": network},
            )
        return address

    def chain_name(self, chain: str, network: str) -> str:
        """Aggregator chain name; falls back to the gateway chain name."""
        entry = self.chain_names.get(chain)
        if isinstance(entry, dict):
            return entry.get(network, chain)
        if isinstance(entry, str):
            return entry
        return chain


def load_odos_config(config_path: Optional[Path] = None) -> OdosConfig:
    """
    Load Odos configuration from YAML file.

    Args:
        config_path: Path to odos.yaml (default: config/odos.yaml)

    Returns:
        OdosConfig with defaults for any missing keys
    """
    if config_path is None:
        config_path = CONFIG_DIR / "odos.yaml"

    if not config_path.exists():
        return OdosConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    scaling = data.get("buy_amount_scaling", AmountScaling.QUOTE.value)
    try:
        buy_amount_scaling = AmountScaling(scaling)
    except ValueError:
        raise ConfigError(
            f"buy_amount_scaling must be one of {[s.value for s in AmountScaling]}, got {scaling!r}",
            details={"value": scaling},
        )

    config = OdosConfig(
        api_url=str(data.get("api_url", ODOS_API_URL)).rstrip("/"),
        allowed_slippage=str(data.get("allowed_slippage", DEFAULT_ALLOWED_SLIPPAGE)),
        gas_limit_estimate=int(data.get("gas_limit_estimate", DEFAULT_GAS_LIMIT_ESTIMATE)),
        ttl=int(data.get("ttl", DEFAULT_TTL_SECONDS)),
        request_timeout_seconds=float(data.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)),
        buy_amount_scaling=buy_amount_scaling,
        contract_addresses=data.get("contract_addresses", {}) or {},
        chain_names=data.get("chain_names", {}) or {},
    )

    # Fail at load time rather than on the first quote
    parse_percent(config.allowed_slippage)
    return config
