"""
Configuration management for the swap settlement pipeline

Loads settings from environment variables and .env file.
Includes logging configuration with file output support.
"""

import os
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv

from .errors import ConfigurationError


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # permit_swap package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class ApprovalPolicy(Enum):
    """
    How much allowance to grant when the aggregator reports a missing one.

    UNLIMITED approves the maximum uint256 once, so later runs never pay for
    another approval; the spender can then move any amount of the token.
    EXACT approves only the sell amount of the current trade, which costs an
    approval transaction on every run.
    """
    UNLIMITED = "unlimited"
    EXACT = "exact"

    @classmethod
    def from_string(cls, value: str) -> "ApprovalPolicy":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ConfigurationError.invalid(
                "APPROVAL_POLICY", f"expected 'unlimited' or 'exact', got {value!r}"
            )


@dataclass
class ZeroExConfig:
    """0x Swap API configuration (Permit2 endpoints)"""
    api_key: str = field(default_factory=lambda: _get_env("ZEROX_API_KEY", ""))
    base_url: str = field(default_factory=lambda: _get_env("ZEROX_BASE_URL", "https://api.0x.org"))
    price_path: str = field(default_factory=lambda: _get_env("ZEROX_PRICE_PATH", "/swap/permit2/price"))
    quote_path: str = field(default_factory=lambda: _get_env("ZEROX_QUOTE_PATH", "/swap/permit2/quote"))
    api_version: str = field(default_factory=lambda: _get_env("ZEROX_API_VERSION", "v2"))
    timeout: float = field(default_factory=lambda: _get_env_float("ZEROX_TIMEOUT", 30.0))


@dataclass
class ChainConfig:
    """EVM chain connection settings (defaults target Base mainnet)"""
    rpc_url: str = field(default_factory=lambda: _get_env("EVM_RPC_URL", ""))
    chain_id: int = field(default_factory=lambda: _get_env_int("EVM_CHAIN_ID", 8453))
    rpc_timeout: int = field(default_factory=lambda: _get_env_int("EVM_RPC_TIMEOUT", 30))
    explorer_tx_url: str = field(default_factory=lambda: _get_env("EXPLORER_TX_URL", "https://basescan.org/tx/"))
    # Multiplier applied to node gas estimates when the quote carries no gas limit
    gas_limit_multiplier: float = field(default_factory=lambda: _get_env_float("GAS_LIMIT_MULTIPLIER", 1.2))


@dataclass
class SignerConfig:
    """Signer configuration for local private key signing"""
    private_key: str = field(default_factory=lambda: _get_env("EVM_PRIVATE_KEY", ""))


@dataclass
class SwapConfig:
    """Default swap and monetization parameters"""
    affiliate_fee_bps: int = field(default_factory=lambda: _get_env_int("AFFILIATE_FEE_BPS", 100))
    surplus_collection: bool = field(default_factory=lambda: _get_env_bool("SURPLUS_COLLECTION", True))
    approval_policy: str = field(default_factory=lambda: _get_env("APPROVAL_POLICY", "unlimited"))
    approval_receipt_timeout: int = field(default_factory=lambda: _get_env_int("APPROVAL_RECEIPT_TIMEOUT", 120))

    @property
    def policy(self) -> ApprovalPolicy:
        return ApprovalPolicy.from_string(self.approval_policy)


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Environment variables:
        LOG_FILE: Path to log file (file logging disabled when empty)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", ""))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Loads all settings from environment variables and .env file.

    Usage:
        from permit_swap.config import config

        config.validate()
        print(config.chain.rpc_url)
    """
    zeroex: ZeroExConfig = field(default_factory=ZeroExConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """
        Check the three required secrets before any network call.

        Raises:
            ConfigurationError: If the private key, API key or RPC URL is absent
        """
        required = [
            ("EVM_PRIVATE_KEY", self.signer.private_key),
            ("ZEROX_API_KEY", self.zeroex.api_key),
            ("EVM_RPC_URL", self.chain.rpc_url),
        ]
        for name, value in required:
            if not value:
                raise ConfigurationError.missing(name)

        if not 0 <= self.swap.affiliate_fee_bps <= 10_000:
            raise ConfigurationError.invalid(
                "AFFILIATE_FEE_BPS", f"must be within 0..10000, got {self.swap.affiliate_fee_bps}"
            )
        # Raises on unknown policy names
        self.swap.policy

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "permit_swap",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close handlers before removing to release file handles on reload
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger
