import json
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

# HyperSwap V3 deployment on the HyperEVM testnet
HYPERSWAP_TESTNET_FACTORY = "0x03A918028f22D9E1473B7959C927AD7425A45C7C"
HYPERSWAP_TESTNET_QUOTER_V2 = "0x7FEd8993828A61A5985F384Cee8bDD42177Aa263"
HYPERSWAP_TESTNET_SWAP_ROUTER = "0xD81F56576B1FF2f3Ef18e9Cc71Adaa42516fD990"

DEFAULT_FEE_TIERS: Tuple[int, ...] = (100, 500, 3000, 10000)


@dataclass(frozen=True)
class DeploymentConfig:
    """Contract addresses, fee tiers and safety thresholds for one deployment.

    Passed explicitly to every pipeline component so the same code can target
    any chain or a mocked endpoint.
    """
    router_address: str
    factory_address: str
    quoter_address: str
    fee_tiers: Tuple[int, ...] = DEFAULT_FEE_TIERS

    # Parameter validation
    max_slippage_bps: int = 5000                 # 50%
    default_slippage_bps: int = 50               # 0.5%
    default_deadline_minutes: int = 30
    min_plausible_deadline: int = 1704067200     # 2024-01-01 UTC
    amount_decimals: int = 18
    require_slippage_protection: bool = False

    # Gas policy
    gas_limit_multiplier_pct: int = 120
    gas_price_premium_pct: int = 110
    high_gas_price_gwei: float = 10.0
    high_utilization_pct: int = 90

    # Confirmation
    confirmation_timeout_seconds: float = 300.0
    receipt_poll_interval_seconds: float = 2.0

    def __post_init__(self):
        if not self.fee_tiers:
            raise ValueError("fee_tiers must not be empty")
        object.__setattr__(self, "fee_tiers", tuple(sorted(int(f) for f in self.fee_tiers)))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Chain connection
    rpc_url: str = Field(
        default="https://rpc.hyperliquid-testnet.xyz/evm",
        description="JSON-RPC endpoint of the target chain",
    )
    chain_id: int = Field(default=998, description="EIP-155 chain id")
    request_timeout_seconds: float = Field(default=30.0, description="RPC request timeout")

    # Contracts
    router_address: str = Field(default=HYPERSWAP_TESTNET_SWAP_ROUTER, description="SwapRouter address")
    factory_address: str = Field(default=HYPERSWAP_TESTNET_FACTORY, description="V3 factory address")
    quoter_address: str = Field(default=HYPERSWAP_TESTNET_QUOTER_V2, description="QuoterV2 address")
    fee_tiers: str = Field(
        default=",".join(str(fee) for fee in DEFAULT_FEE_TIERS),
        description="Supported pool fee tiers, comma-separated or a JSON list",
    )

    # Validation
    max_slippage_bps: int = Field(default=5000, ge=0, le=10000)
    default_slippage_bps: int = Field(default=50, ge=0, le=10000)
    default_deadline_minutes: int = Field(default=30, ge=1)
    min_plausible_deadline: int = Field(default=1704067200)
    amount_decimals: int = Field(default=18, ge=0, le=77)
    require_slippage_protection: bool = Field(
        default=False,
        description="Refuse swaps whose amountOutMinimum is zero instead of warning",
    )

    # Gas policy
    gas_limit_multiplier_pct: int = Field(default=120, ge=100)
    gas_price_premium_pct: int = Field(default=110, ge=100)
    high_gas_price_gwei: float = Field(default=10.0, gt=0)
    high_utilization_pct: int = Field(default=90, ge=0, le=100)

    # Confirmation
    confirmation_timeout_seconds: float = Field(default=300.0, gt=0)
    receipt_poll_interval_seconds: float = Field(default=2.0, gt=0)

    @field_validator("fee_tiers")
    @classmethod
    def _check_fee_tiers(cls, value: str) -> str:
        value = value.strip()
        if value.startswith("["):
            try:
                items = json.loads(value)
            except ValueError as e:
                raise ValueError(f"fee_tiers is not a valid JSON list: {e}") from e
            if not isinstance(items, list) or not all(isinstance(item, int) for item in items):
                raise ValueError("fee_tiers JSON list must contain integers only")
            value = ",".join(str(item) for item in items)
        parts = [part.strip() for part in value.split(",") if part.strip()]
        if not parts or not all(part.isdigit() for part in parts):
            raise ValueError("fee_tiers must be a comma-separated list of integers")
        return ",".join(parts)

    @property
    def fee_tier_set(self) -> Tuple[int, ...]:
        return tuple(int(part) for part in self.fee_tiers.split(","))

    def deployment_config(self) -> DeploymentConfig:
        return DeploymentConfig(
            router_address=self.router_address,
            factory_address=self.factory_address,
            quoter_address=self.quoter_address,
            fee_tiers=self.fee_tier_set,
            max_slippage_bps=self.max_slippage_bps,
            default_slippage_bps=self.default_slippage_bps,
            default_deadline_minutes=self.default_deadline_minutes,
            min_plausible_deadline=self.min_plausible_deadline,
            amount_decimals=self.amount_decimals,
            require_slippage_protection=self.require_slippage_protection,
            gas_limit_multiplier_pct=self.gas_limit_multiplier_pct,
            gas_price_premium_pct=self.gas_price_premium_pct,
            high_gas_price_gwei=self.high_gas_price_gwei,
            high_utilization_pct=self.high_utilization_pct,
            confirmation_timeout_seconds=self.confirmation_timeout_seconds,
            receipt_poll_interval_seconds=self.receipt_poll_interval_seconds,
        )


# Global settings instance
settings = Settings()
