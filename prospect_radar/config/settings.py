"""Configuration settings for the prospecting dashboard core."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")

    # Oracle (LiteLLM) Configuration
    oracle_model: str = "claude-sonnet-4-20250514"
    oracle_enabled: bool = True
    oracle_timeout_seconds: float = 30.0
    oracle_max_tokens: int = 4000
    oracle_temperature: float = 0.3

    # Rate limiting against the oracle
    batch_size: int = 3
    batch_delay_seconds: float = 2.0
    contact_call_delay_seconds: float = 1.0
    max_articles_to_analyze: int = 10

    # News Fetching
    news_days_back: Optional[int] = None

    # Paths
    package_dir: Path = Path(__file__).parent.parent
    config_dir: Path = package_dir / "config"
    output_dir: Path = Path.cwd() / "output"

    # Config files
    taxonomy_file: Path = config_dir / "offerings.yaml"
    company_file: Path = config_dir / "target_company.yaml"
    feeds_file: Path = config_dir / "feeds.json"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def oracle_available(self) -> bool:
        """True when LLM-backed analysis can run."""
        return self.oracle_enabled and bool(self.anthropic_api_key)


# Global settings instance
settings = Settings()
