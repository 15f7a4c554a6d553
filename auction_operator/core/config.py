"""
Operator configuration parameters.

Defines connection settings, default auction parameters and polling cadence.
Values come from the process environment, optionally seeded from a .env file.
"""

import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from auction_operator.core.errors import ConfigError
from auction_operator.utils.validation import (
    MAX_TOKEN_DECIMALS,
    parse_hex_bytes,
    validate_address,
    validate_hex,
    validate_positive_number,
    validate_price,
    validate_private_key,
    validate_uint,
    HASH_SIZE,
)


@dataclass
class OperatorConfig:
    """Operator-wide configuration parameters"""

    # Ledger connection
    provider_url: str = ""
    private_key: str = ""
    contract_address: str = ""

    # Parameters for every new auction, in token units
    start_price: Decimal = Decimal("100")
    end_price: Decimal = Decimal("10")
    token_decimals: int = 18

    # Cadence (seconds)
    poll_interval: float = 15.0
    event_poll_interval: float = 5.0
    receipt_timeout: float = 600.0  # Transport-level wait for a receipt

    # Fixed proof to submit; None means the zero placeholder
    proof_hash: Optional[bytes] = None

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_to_file: bool = False

    def validate(self, require_connection: bool = True) -> None:
        """
        Check every field, raising ConfigError on the first problem.

        Args:
            require_connection: Also require endpoint, key and contract
        """
        checks = [
            validate_price(self.start_price, "start_price"),
            validate_price(self.end_price, "end_price"),
            validate_uint(self.token_decimals, "token_decimals", max_val=MAX_TOKEN_DECIMALS),
            validate_positive_number(self.poll_interval, "poll_interval"),
            validate_positive_number(self.event_poll_interval, "event_poll_interval"),
            validate_positive_number(self.receipt_timeout, "receipt_timeout"),
        ]
        if require_connection:
            if not self.provider_url:
                raise ConfigError("PROVIDER_URL is required", step="config")
            checks.append(validate_private_key(self.private_key))
            checks.append(validate_address(self.contract_address, "contract_address"))

        if self.proof_hash is not None and len(self.proof_hash) != HASH_SIZE:
            checks.append((False, f"proof_hash must be {HASH_SIZE} bytes"))

        if logging.getLevelName(self.log_level.upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
        ):
            checks.append((False, f"unknown log level {self.log_level!r}"))

        for ok, error in checks:
            if not ok:
                raise ConfigError(error, step="config")

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def _get(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value not in (None, ""):
            return value.strip()
    return None


def _number(raw: Optional[str], name: str, default, cast):
    if raw is None:
        return default
    try:
        return cast(raw)
    except (ValueError, ArithmeticError):
        raise ConfigError(f"{name} must be a number, got {raw!r}", step="config")


def load_config(
    env_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    require_connection: bool = True,
) -> OperatorConfig:
    """
    Load configuration from the environment.

    Args:
        env_file: Optional .env file to load first (existing variables win)
        environ: Mapping to read instead of os.environ (tests)
        require_connection: Require endpoint, key and contract address

    Returns:
        Validated OperatorConfig

    Raises:
        ConfigError: on missing or malformed values
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file, override=False)
        environ = os.environ

    proof_raw = _get(environ, "PROOF_HASH")
    proof_hash = None
    if proof_raw is not None:
        ok, error = validate_hex(proof_raw, "PROOF_HASH", expected_bytes=HASH_SIZE)
        if not ok:
            raise ConfigError(error, step="config")
        proof_hash = parse_hex_bytes(proof_raw)

    defaults = OperatorConfig()
    config = OperatorConfig(
        provider_url=_get(environ, "PROVIDER_URL", "PROVIDER_WS") or "",
        private_key=_get(environ, "PRIVATE_KEY") or "",
        contract_address=_get(environ, "CONTRACT_ADDRESS") or "",
        start_price=_number(_get(environ, "AUCTION_START_PRICE"), "AUCTION_START_PRICE", defaults.start_price, Decimal),
        end_price=_number(_get(environ, "AUCTION_END_PRICE"), "AUCTION_END_PRICE", defaults.end_price, Decimal),
        token_decimals=_number(_get(environ, "TOKEN_DECIMALS"), "TOKEN_DECIMALS", defaults.token_decimals, int),
        poll_interval=_number(_get(environ, "POLL_INTERVAL"), "POLL_INTERVAL", defaults.poll_interval, float),
        event_poll_interval=_number(
            _get(environ, "EVENT_POLL_INTERVAL"), "EVENT_POLL_INTERVAL", defaults.event_poll_interval, float
        ),
        receipt_timeout=_number(_get(environ, "RECEIPT_TIMEOUT"), "RECEIPT_TIMEOUT", defaults.receipt_timeout, float),
        proof_hash=proof_hash,
        log_level=_get(environ, "LOG_LEVEL") or defaults.log_level,
        log_dir=Path(_get(environ, "LOG_DIR") or defaults.log_dir),
        log_to_file=(_get(environ, "LOG_TO_FILE") or "").lower() in ("1", "true", "yes"),
    )
    config.validate(require_connection=require_connection)
    return config
