from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # JWT — no default, MUST be set in .env
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 24 * 60

    # App
    APP_NAME: str = "Service Market"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev

    # Payments: "deferred" (simulated mobile money) or "verification" (manual confirmation)
    PAYMENT_POLICY: str = "deferred"
    COMMISSION_RATE_BPS: int = 1000  # 10%
    PAYMENT_SETTLE_DELAY_SECONDS: float = 2.0
    WITHDRAWAL_SETTLE_DELAY_SECONDS: float = 3.0
    PAYMENT_CONFIRM_CODES: list[str] = ["1234", "5678"]
    MOBILE_MONEY_ACCOUNTS: dict[str, str] = {
        "MTN": "0166344282",
        "Celtis": "0144110208",
    }

    # Password hashing cost (bcrypt log rounds)
    BCRYPT_ROUNDS: int = 12

    # Reputation
    INITIAL_RATING: float = 5.0
    MAX_RATING: float = 5.0
    RATING_INCREMENT: float = 0.1

    # Realtime
    SESSION_QUEUE_SIZE: int = 256


settings = Settings()
