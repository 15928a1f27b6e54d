"""Configuration management for the application."""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = "sqlite:///./stylist.db"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3565

    # Rate Limiting
    rate_limit_per_minute: int = 120

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/app.log"

    # Environment Configuration
    environment: str = "development"  # development, staging, production

    # Production Settings
    production_mode: bool = False  # Auto-detected from environment

    # CORS Configuration (for production)
    cors_origins: str = "*"  # Comma-separated list of allowed origins

    # Simulated typing / processing delays (in seconds)
    reply_delay_seconds: float = 1.0
    typing_delay_seconds: float = 1.5
    confirmation_delay_seconds: float = 1.0
    offer_followup_delay_seconds: float = 2.0
    second_offer_delay_seconds: float = 3.0
    payment_delay_seconds: float = 2.0

    # Catalog loading retry
    catalog_retry_attempts: int = 10  # Retries after the initial attempt
    catalog_retry_wait_seconds: float = 1.0

    # Live conversations
    conversation_idle_seconds: float = 14400  # Evict after 4 hours without a turn
    max_conversations: int = 1000

    # Offers
    default_offer_minutes: int = 120
    offer_timers_autorun: bool = True

    # Payment (simulated)
    payment_methods: str = "UPI,Card,Wallet"  # Comma-separated list
    default_payment_method: str = "UPI"

    # Copy
    brand_name: str = "ABFRL"
    delivery_eta: str = "Tomorrow by 6 PM"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Auto-detect production mode
        self.production_mode = (
            self.environment.lower() == "production" or
            self.environment.lower() == "prod"
        )

        # More restrictive logging in production
        if self.production_mode and self.log_level == "INFO":
            self.log_level = "WARNING"

    def payment_method_list(self) -> List[str]:
        """Configured payment methods, in display order."""
        return [m.strip() for m in self.payment_methods.split(",") if m.strip()]


settings = Settings()
