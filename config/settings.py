from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # JWT - no default, MUST be set in .env
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 30

    # Collaborator identities (JWT subjects)
    TELLER_ID: str = "teller"
    ADMIN_IDS: list[str] = ["admin"]

    # Auction defaults (seconds / 1e5 percentages)
    DEFAULT_TUNE_INTERVAL: int = 24 * 3600
    DEFAULT_TUNE_ADJUSTMENT: int = 3600
    MIN_DEBT_DECAY_INTERVAL: int = 3 * 24 * 3600
    MIN_DEPOSIT_INTERVAL: int = 3600
    MIN_MARKET_DURATION: int = 24 * 3600
    MAX_DEBT_BUFFER: int = 100_000
    ALLOW_NEW_MARKETS: bool = True

    # Teller fee schedule (1e5 = 100%)
    PROTOCOL_FEE: int = 0

    # Oracle: prices older than this are rejected
    ORACLE_MAX_AGE: int = 24 * 3600

    # App
    APP_NAME: str = "Bond Market Auctioneer"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev


settings = Settings()
