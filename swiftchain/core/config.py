from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    PRICE_PROVIDER, PLATFORM_FEE_RATE, CHAIN_RPC_URL). Dict fields such as
    NETWORK_FEES are read as JSON.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "SwiftChain API"
    debug: bool = True
    version: str = "0.1.0"

    # Local persistence (client-side transaction history)
    data_dir: Path = Path("data")
    db_filename: str = "history.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Price feed
    # Allowed: 'static' (fixed demo prices), 'coingecko' (live simple/price API)
    price_provider: str = "static"
    price_api_base_url: AnyHttpUrl = "https://api.coingecko.com/api/v3"
    http_timeout_seconds: float = 5.0
    http_retries: int = 2

    # Fee model
    platform_fee_rate: Decimal = Decimal("0.01")
    network_fees: Dict[str, Decimal] = {
        "USDT": Decimal("0.50"),
        "ETH": Decimal("0.0005"),
    }
    currency_decimals: Dict[str, int] = {"USDT": 2, "ETH": 6}
    bank_flat_fee: Decimal = Decimal("500")
    bank_percentage_fee: Decimal = Decimal("0.03")
    bank_estimated_delay: str = "3-5 business days"
    swiftchain_estimated_delay: str = "2-5 minutes"

    # Chain status lookups
    # Allowed: 'simulated' (no node required), 'rpc' (Ethereum JSON-RPC)
    chain_status_provider: str = "simulated"
    chain_rpc_url: Optional[AnyHttpUrl] = None
    chain_id: int = 11155111  # Sepolia
    usdt_contract_address: Optional[str] = None
    usdt_decimals: int = 6
    confirmation_threshold: int = 12

    # Status polling (client side)
    poll_interval_seconds: float = 3.0
    poll_budget_seconds: float = 120.0

    # Client -> backend
    api_base_url: AnyHttpUrl = "http://localhost:5000"

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
        "https://swiftchain.vercel.app",
        "https://swiftchain-client.vercel.app",
        "https://swiftchain.netlify.app",
    ]
    frontend_url: Optional[str] = None

    def init_post_load(self) -> None:
        """Finalize derived fields and validate provider selections."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        allowed_prices = {"static", "coingecko"}
        if self.price_provider not in allowed_prices:
            raise ValueError(
                f"Unsupported price_provider '{self.price_provider}'. Allowed: {allowed_prices}"
            )
        allowed_chain = {"simulated", "rpc"}
        if self.chain_status_provider not in allowed_chain:
            raise ValueError(
                f"Unsupported chain_status_provider '{self.chain_status_provider}'. Allowed: {allowed_chain}"
            )
        if self.chain_status_provider == "rpc" and self.chain_rpc_url is None:
            raise ValueError("chain_rpc_url is required when chain_status_provider='rpc'")
        missing = set(self.network_fees) ^ set(self.currency_decimals)
        if missing:
            raise ValueError(
                f"network_fees and currency_decimals must cover the same currencies: {sorted(missing)}"
            )

    @property
    def cors_origins(self) -> List[str]:
        origins = list(self.allowed_origins)
        if self.frontend_url:
            origins.append(self.frontend_url)
        return origins


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
