"""
Suite configuration using Pydantic settings.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION = "PRODUCTION"
TEST = "TEST"
DEFAULT_SITE_URL = "https://the-internet.herokuapp.com"


class Settings(BaseSettings):
    """Suite settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Target site
    ENVIRONMENT: str = PRODUCTION  # Options: PRODUCTION, TEST
    URL: str = ""  # Only honoured when ENVIRONMENT=TEST

    # Test data
    TEST_DATA_ROOT: Path = Path("test-data")
    TEST_DATA_ISOLATE_RUNS: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path("logs")
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Browser
    SCREENSHOT_DIR: Path = Path("screenshots")
    DEFAULT_TIMEOUT_MS: int = 30000
    RETRY_ATTEMPTS: int = 3
    RUN_BROWSER_TESTS: bool = False

    @property
    def base_url(self) -> str:
        """Site under test for the configured environment."""
        if self.ENVIRONMENT.upper() == TEST:
            return (self.URL or DEFAULT_SITE_URL).rstrip("/")
        return DEFAULT_SITE_URL


settings = Settings()
