"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.

Channel credentials are optional: a missing value disables that outbound
path at call time instead of failing startup.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_WEBHOOK_SECRET: str = ""

    # Public site
    SITE_URL: str = "https://jobs.lisboaux.com"
    ATTRIBUTION_SOURCE: str = "LisboaUX"

    # Slack
    SLACK_WEBHOOK_URL: str = ""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHANNEL_ID: str = ""
    TELEGRAM_API_BASE: str = "https://api.telegram.org"

    # Outbound notification calls
    NOTIFY_TIMEOUT_SECONDS: float = 10.0

    # PostHog
    POSTHOG_API_KEY: str = ""
    POSTHOG_HOST: str = "https://eu.i.posthog.com"

    # Page revalidation hook
    REVALIDATE_URL: str = ""
    REVALIDATE_TOKEN: str = ""

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()  # type: ignore[call-arg]
