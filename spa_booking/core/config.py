from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_NAME: str = "Your Spa"
    BUSINESS_TIMEZONE: str = "Asia/Bangkok"
    CURRENCY_SYMBOL: str = "THB"

    DATA_DIR: str = "./data/bookings"
    PERSIST_BOOKINGS: bool = False
    CATALOG_FILE: str | None = None
    SETTINGS_FILE: str | None = None
    CATALOG_CACHE_TTL_SECONDS: float = 60.0
    SETTINGS_CACHE_TTL_SECONDS: float = 60.0

    ADMIN_API_TOKENS: str = ""
    ALLOW_DEV_AUTH_BYPASS: bool = False
    # Local runs without LINE: "token:userId,token:userId"
    DEV_USER_TOKENS: str = ""

    LINE_CHANNEL_ACCESS_TOKEN: str | None = None
    LINE_API_BASE_URL: str = "https://api.line.me"
    LINE_ADMIN_USER_IDS: str = ""

    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_ADMIN_CHAT_ID: str | None = None

    SIDE_EFFECT_WORKERS: int = 0
    CRON_SECRET: str | None = None

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def admin_tokens(self) -> set[str]:
        return {t.strip() for t in self.ADMIN_API_TOKENS.split(",") if t.strip()}

    @property
    def dev_user_tokens(self) -> dict[str, str]:
        pairs = (p.split(":", 1) for p in self.DEV_USER_TOKENS.split(",") if ":" in p)
        return {t.strip(): u.strip() for t, u in pairs if t.strip() and u.strip()}

    @property
    def admin_line_ids(self) -> list[str]:
        return [u.strip() for u in self.LINE_ADMIN_USER_IDS.split(",") if u.strip()]


settings = Settings()
