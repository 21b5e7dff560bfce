"""
Configuration for the bill image quality engine.
"""

# Load environment variables FIRST
from dotenv import load_dotenv
load_dotenv()

import os
from typing import Optional


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Config:
    """Base configuration."""

    # Analysis
    MAX_ANALYSIS_DIMENSION: int = int(os.getenv("MAX_ANALYSIS_DIMENSION", "512"))  # 0 disables downsampling
    THRESHOLDS_FILE: Optional[str] = os.getenv("QUALITY_THRESHOLDS_FILE") or None
    MAX_CONCURRENT_ASSESSMENTS: int = int(os.getenv("MAX_CONCURRENT_ASSESSMENTS", "4"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: str = os.getenv("LOG_FILE", "bill_quality.log")

    # API Configuration (if using FastAPI)
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"

    # Workflow Configuration
    GRAPH_RECURSION_LIMIT: int = 25

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.LOG_LEVEL.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL: {cls.LOG_LEVEL}")

        if cls.MAX_ANALYSIS_DIMENSION < 0:
            raise ValueError(f"MAX_ANALYSIS_DIMENSION must be >= 0, got {cls.MAX_ANALYSIS_DIMENSION}")

        if cls.MAX_CONCURRENT_ASSESSMENTS < 1:
            raise ValueError(f"MAX_CONCURRENT_ASSESSMENTS must be >= 1, got {cls.MAX_CONCURRENT_ASSESSMENTS}")


class DevelopmentConfig(Config):
    """Development configuration."""
    LOG_LEVEL = "DEBUG"
    API_DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    LOG_LEVEL = "INFO"
    API_DEBUG = False


class TestConfig(Config):
    """Test configuration."""
    LOG_LEVEL = "DEBUG"
    MAX_CONCURRENT_ASSESSMENTS = 2


def get_config(env: str = None) -> Config:
    """Get configuration based on environment."""
    if env is None:
        env = os.getenv("ENV", "development").lower()

    if env == "production":
        config = ProductionConfig()
    elif env == "test":
        config = TestConfig()
    else:
        config = DevelopmentConfig()

    # Validate configuration on creation
    config.validate()
    return config
