from pydantic_settings import BaseSettings
from typing import List

DEFAULT_SECRET_KEY = "your-secret-key-change-in-production"

class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""

    # API
    API_PORT: int = 8080

    # Environment
    NODE_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS / hosts, comma separated
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"
    ALLOWED_HOSTS: str = "*"

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUBSCRIBERS_TABLE: str = "newsletter_subscribers"

    # Admin session
    ADMIN_PASSWORD: str = ""
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ADMIN_SESSION_MAX_AGE: int = 24 * 60 * 60  # 24 hours
    ADMIN_SESSION_VERIFY: bool = True

    # Brevo email transport
    BREVO_API_KEY: str = ""
    BREVO_BASE_URL: str = "https://api.brevo.com/v3"
    SENDER_EMAIL: str = ""
    SENDER_NAME: str = "DedCore"
    EMAIL_TIMEOUT: float = 30.0

    # Analytics
    ANALYTICS_TIMEZONE: str = "UTC"
    ANALYTICS_REFRESH_SECONDS: int = 30

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

    @property
    def uses_default_secret_key(self) -> bool:
        return self.SECRET_KEY == DEFAULT_SECRET_KEY

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def allowed_hosts(self) -> List[str]:
        return [h.strip() for h in self.ALLOWED_HOSTS.split(",") if h.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

# Global settings instance
settings = Settings()
