import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # API Config
    API_TITLE: str = "Pekařství Bánov API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "API pro e-shop Pekařství Bánov"
    ENV: str = os.getenv("ENV", "production")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://user:pass@db:5432/pekarstvi")

    # Redis
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Security & JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    PASSWORD_RESET_EXPIRE_HOURS: int = int(os.getenv("PASSWORD_RESET_EXPIRE_HOURS", "2"))
    COOKIE_DOMAIN: str = os.getenv("COOKIE_DOMAIN", "")
    CSRF_PROTECTION_ENABLED: bool = os.getenv("CSRF_PROTECTION_ENABLED", "false").lower() == "true"

    # Email / SMTP (bez SMTP_HOST se emaily jen zalogují)
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "objednavky@pekarstvibanov.cz")
    FROM_NAME: str = os.getenv("FROM_NAME", "Pekařství Bánov")
    CONTACT_EMAIL: str = os.getenv("CONTACT_EMAIL", "info@pekarstvibanov.cz")

    # Frontend URL (odkazy v emailech)
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Objednávky
    BUSINESS_TIMEZONE: str = os.getenv("BUSINESS_TIMEZONE", "Europe/Prague")
    ORDER_CUTOFF_HOUR: int = int(os.getenv("ORDER_CUTOFF_HOUR", "15"))
    CURRENCY: str = "CZK"

    # Stripe
    STRIPE_API_KEY: str = os.getenv("STRIPE_SECRET_KEY", os.getenv("STRIPE_API_KEY", ""))
    STRIPE_WEBHOOK_SECRET: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")

    # Upload
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "/app/uploads")
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB
    WEBP_QUALITY: int = 85

    class Config:
        env_file = ".env"

settings = Settings()
