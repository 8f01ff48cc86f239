"""
Configuration for the Soroban Domains client.

This module defines the immutable configuration threaded through every client
operation (RPC endpoint, contract ids, simulation account, network, fee and
timeout), the published contract ids of the protocol, and helpers that load
the configuration from the environment (.env files) or a JSON file.
"""

import json
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from stellar_sdk import Network

from .enums import ErrorCode, LogLevel
from .exceptions import ConfigurationError


# Funded account used as transaction source for read-only simulations.
# Nobody needs its secret key.
SIMULATION_ACCOUNT = "GALAXYVOIDAOPZTDLHILAJQKCVVFMD4IKLXLSZV5YHO7VY74IWZILUTO"

DEFAULT_FEE = 100  # stroops
DEFAULT_TIMEOUT = 0  # seconds, 0 means no upper time bound

ENV_PREFIX = "SOROBAN_DOMAINS_"


class RegistryContract(Enum):
    """Published registry contract ids."""

    V0 = "CATRNPHYKNXAPNLHEYH55REB6YSAJLGCPA4YM6L3WUKSZOPI77M2UMKI"


class KeyValueDbContract(Enum):
    """Published key-value database contract ids."""

    V0 = "CDH2T2CBGFPFNVRWFK4XJIRP6VOWSVTSDCRBCJ2TEIO22GADQP6RG3Y6"


class ReverseRegistrarContract(Enum):
    """Published reverse registrar contract ids."""

    V0 = "CCAU556HKCUXF4LBPUV2KROU5FYGC6227G2LD3SVQ6GR6654IVTO2GBO"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class SDKConfig:
    """
    Settings shared by every client operation.

    Contract ids are optional; an operation that needs a missing one fails
    with ConfigurationMissingError before doing any work.
    """

    rpc_url: Optional[str] = None
    registry_contract_id: Optional[str] = None
    key_value_contract_id: Optional[str] = None
    reverse_registrar_contract_id: Optional[str] = None
    simulation_account: str = SIMULATION_ACCOUNT
    network_passphrase: str = Network.PUBLIC_NETWORK_PASSPHRASE
    default_fee: int = DEFAULT_FEE
    default_timeout: int = DEFAULT_TIMEOUT
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def with_published_contracts(cls, **overrides) -> "SDKConfig":
        """Create a config pointing at the published v0 contracts."""
        values = {
            "registry_contract_id": RegistryContract.V0.value,
            "key_value_contract_id": KeyValueDbContract.V0.value,
            "reverse_registrar_contract_id": ReverseRegistrarContract.V0.value,
        }
        values.update(overrides)
        return cls(**values)

    def evolve(self, **changes) -> "SDKConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _str_env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def load_config_from_env(env_file: Optional[Path] = None) -> SDKConfig:
    """
    Build a configuration from SOROBAN_DOMAINS_* environment variables.

    A .env file is loaded first (without overriding variables that are
    already set).

    Args:
        env_file: Optional explicit .env path; searched for when omitted

    Returns:
        SDKConfig built from the environment
    """
    if env_file is not None:
        load_dotenv(dotenv_path=env_file)
    else:
        load_dotenv()

    logging_config = LoggingConfig(
        level=(_str_env(f"{ENV_PREFIX}LOG_LEVEL") or "info").lower(),
        output_format=(_str_env(f"{ENV_PREFIX}LOG_FORMAT") or "text").lower(),
    )
    _check_logging(logging_config)

    return SDKConfig(
        rpc_url=_str_env(f"{ENV_PREFIX}RPC_URL"),
        registry_contract_id=_str_env(f"{ENV_PREFIX}REGISTRY_CONTRACT_ID"),
        key_value_contract_id=_str_env(f"{ENV_PREFIX}KEY_VALUE_CONTRACT_ID"),
        reverse_registrar_contract_id=_str_env(f"{ENV_PREFIX}REVERSE_REGISTRAR_CONTRACT_ID"),
        simulation_account=_str_env(f"{ENV_PREFIX}SIMULATION_ACCOUNT") or SIMULATION_ACCOUNT,
        network_passphrase=(
            _str_env(f"{ENV_PREFIX}NETWORK_PASSPHRASE") or Network.PUBLIC_NETWORK_PASSPHRASE
        ),
        default_fee=_int_env(f"{ENV_PREFIX}DEFAULT_FEE", DEFAULT_FEE),
        default_timeout=_int_env(f"{ENV_PREFIX}DEFAULT_TIMEOUT", DEFAULT_TIMEOUT),
        logging=logging_config,
    )


def _check_logging(logging_config: LoggingConfig) -> None:
    if logging_config.level not in {level.value for level in LogLevel}:
        raise ConfigurationError(
            code=ErrorCode.INVALID_CONFIGURATION.value,
            message=f"Unknown log level: {logging_config.level}",
            details={"level": logging_config.level},
        )
    if logging_config.output_format not in ("json", "text", "both"):
        raise ConfigurationError(
            code=ErrorCode.INVALID_CONFIGURATION.value,
            message=f"Unknown log output format: {logging_config.output_format}",
            details={"output_format": logging_config.output_format},
        )


def config_to_dict(config: SDKConfig) -> dict:
    """Serialize a configuration to plain JSON types."""
    return {
        "rpc_url": config.rpc_url,
        "registry_contract_id": config.registry_contract_id,
        "key_value_contract_id": config.key_value_contract_id,
        "reverse_registrar_contract_id": config.reverse_registrar_contract_id,
        "simulation_account": config.simulation_account,
        "network_passphrase": config.network_passphrase,
        "default_fee": config.default_fee,
        "default_timeout": config.default_timeout,
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
    }


def load_config_from_file(config_path: Path) -> Optional[SDKConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SDKConfig if the file exists, None otherwise

    Raises:
        ConfigurationError: If the file is not valid configuration JSON
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            code=ErrorCode.INVALID_CONFIGURATION.value,
            message=f"Error loading config: {e}",
            details={"path": str(config_path)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            code=ErrorCode.INVALID_CONFIGURATION.value,
            message="Configuration file must contain a JSON object",
            details={"path": str(config_path)},
        )

    try:
        logging_data = data.get("logging") or {}
        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )
        _check_logging(logging_config)

        return SDKConfig(
            rpc_url=data.get("rpc_url"),
            registry_contract_id=data.get("registry_contract_id"),
            key_value_contract_id=data.get("key_value_contract_id"),
            reverse_registrar_contract_id=data.get("reverse_registrar_contract_id"),
            simulation_account=data.get("simulation_account") or SIMULATION_ACCOUNT,
            network_passphrase=(
                data.get("network_passphrase") or Network.PUBLIC_NETWORK_PASSPHRASE
            ),
            default_fee=int(data.get("default_fee", DEFAULT_FEE)),
            default_timeout=int(data.get("default_timeout", DEFAULT_TIMEOUT)),
            logging=logging_config,
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code=ErrorCode.INVALID_CONFIGURATION.value,
            message=f"Error loading config: {e}",
            details={"path": str(config_path)},
        ) from e


def save_config_to_file(config: SDKConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file, creating parent directories.

    Args:
        config: SDKConfig to save
        config_path: Path to save the configuration
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
