import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from .errors import ConfigurationError
from .wallet import COMMITMENTS

REQUIRED_VARS = (
    "SOLANA_RPC_URL",
    "PRIVATE_KEY_BASE58",
    "BUY_AMOUNT",
    "TOKEN_TO_BUY",
)


@dataclass
class BuyerSettings:
    # Wallet & RPC
    rpc_url: str
    private_key: str
    commitment: str

    # What to buy
    token: str
    buy_amount: str

    # Endpoints
    antibot_api_url: str
    explorer_host: str

    # Transport
    skip_preflight: bool
    http_timeout_seconds: Optional[float]

    # Ops
    metrics_port: Optional[int]
    log_level: str

    def __repr__(self) -> str:
        # keep the private key out of logs and tracebacks
        return (
            f"BuyerSettings(rpc_url={self.rpc_url!r}, token={self.token!r}, "
            f"buy_amount={self.buy_amount!r}, commitment={self.commitment!r}, "
            f"antibot_api_url={self.antibot_api_url!r})"
        )


def missing_variables(environ: Optional[Mapping[str, str]] = None) -> list:
    env = os.environ if environ is None else environ
    return [var for var in REQUIRED_VARS if not (env.get(var) or "").strip()]


def _parse_buy_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ConfigurationError(f"BUY_AMOUNT must be a decimal number, got {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise ConfigurationError(f"BUY_AMOUNT must be positive, got {value!r}")
    # passed to the endpoint verbatim
    return value


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_optional_number(name: str, value: Optional[str], kind=float):
    if value is None or not value.strip():
        return None
    try:
        return kind(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    timeout = _parse_optional_number("HTTP_TIMEOUT_SECONDS", value)
    if timeout is not None and not 0 < timeout < float("inf"):
        raise ConfigurationError(f"HTTP_TIMEOUT_SECONDS must be positive, got {value!r}")
    return timeout


def load_buyer_settings(environ: Optional[Mapping[str, str]] = None) -> BuyerSettings:
    env = os.environ if environ is None else environ

    missing = missing_variables(env)
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    commitment = env.get("RPC_COMMITMENT", "confirmed").strip().lower()
    if commitment not in COMMITMENTS:
        raise ConfigurationError(
            f"RPC_COMMITMENT must be one of {', '.join(COMMITMENTS)}, got {commitment!r}"
        )

    return BuyerSettings(
        # Wallet & RPC
        rpc_url=env["SOLANA_RPC_URL"].strip(),
        private_key=env["PRIVATE_KEY_BASE58"].strip(),
        commitment=commitment,

        # What to buy
        token=env["TOKEN_TO_BUY"].strip(),
        buy_amount=_parse_buy_amount(env["BUY_AMOUNT"].strip()),

        # Endpoints
        antibot_api_url=env.get("ANTIBOT_API_URL", "https://www.degen.fund").strip(),
        explorer_host=env.get("EXPLORER_HOST", "solscan.io").strip(),

        # Transport
        skip_preflight=_parse_bool("SKIP_PREFLIGHT", env.get("SKIP_PREFLIGHT", "false")),
        http_timeout_seconds=_parse_timeout(env.get("HTTP_TIMEOUT_SECONDS")),

        # Ops
        metrics_port=_parse_optional_number("METRICS_PORT", env.get("METRICS_PORT"), int),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
