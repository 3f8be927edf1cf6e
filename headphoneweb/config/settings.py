from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "dev"                # "dev" / "staging" / "prod"
    SERVICE_NAME: str = "headphoneweb"

    # either a single url or the discrete parts below
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "myuser"
    DB_PASSWORD: str = "mypassword"
    DB_NAME: str = "headphoneweb"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    SITE_PASSWORD: str = "mypassword"
    SESSION_SECRET: str = "dev-session-secret-change-me"
    SESSION_ALGO: str = "HS256"
    SESSION_TTL_HOURS: int = 24
    PASS_HASH_SCHEME: str = "bcrypt"

    STRIPE_SECRET_KEY: str = ""
    STRIPE_PUBLISHABLE_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_CURRENCY: str = "usd"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_dev(self) -> bool:
        return self.ENV.lower() == "dev"

    @property
    def secure_cookies(self) -> bool:
        return not self.is_dev


config_settings = Settings()
