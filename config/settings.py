from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_debug: bool = False  # exposes /docs + openapi.json
    cors_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # honeypot.is simulation API (free, no key)
    honeypot_api_url: str = "https://api.honeypot.is"
    honeypot_api_key: str = ""
    honeypot_max_rps: float = 2.0
    honeypot_timeout_sec: float = 10.0

    # On-chain inspection (JSON-RPC per chain)
    onchain_max_rps: float = 10.0
    onchain_timeout_sec: float = 10.0

    ethereum_rpc_url: str = "https://eth.llamarpc.com"
    bsc_rpc_url: str = "https://bsc-dataseed1.binance.org"
    polygon_rpc_url: str = "https://polygon-rpc.com"
    arbitrum_rpc_url: str = "https://arb1.arbitrum.io/rpc"
    optimism_rpc_url: str = "https://mainnet.optimism.io"
    base_rpc_url: str = "https://mainnet.base.org"
    avalanche_rpc_url: str = "https://api.avax.network/ext/bc/C/rpc"


settings = Settings()
