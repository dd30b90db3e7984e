from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_NAME: str = "Trip Board API"
    APP_VERSION: str = "0.1.0"
    DEV: bool = False
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = "change_me_in_env"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24h

    DATABASE_URL: str = "sqlite:///./app.db"
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    INVITE_TTL_DAYS: int = 7
    SHARE_SLUG_BYTES: int = 16
    PUBLIC_SHARE_CACHE_TTL_SECONDS: int = 30

    # rate limits: peticiones por ventana
    RATE_WINDOW_SECONDS: int = 60
    REGISTER_RATE_LIMIT: int = 10
    LOGIN_RATE_LIMIT: int = 20
    WRITE_RATE_LIMIT: int = 60
    PUBLIC_SHARE_RATE_LIMIT: int = 30
    PUBLIC_SHARE_RATE_WINDOW_SECONDS: int = 60
    # tope de claves por limiter (ip, ip|slug, user)
    RATE_LIMIT_MAX_KEYS: int = 10_000

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
