"""
Assessment Lifecycle Engine
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])

The decision engine never reads these values itself: the blueprints pass
them down as plain arguments (gate threshold, risk bands).
"""

import os
import secrets

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


def _float_env(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Logging: "json" / "readable"; empty picks by environment
    LOG_LEVEL = os.getenv("LOG_LEVEL", "")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "")

    # Request body cap (snapshots can be large)
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024

    # Transition gates
    PROFILE_COMPLETENESS_GATE = _float_env("PROFILE_COMPLETENESS_GATE", 60)

    # Impact risk bands: a level applies when either ratio or count is exceeded
    RISK_CRITICAL_RATIO = _float_env("RISK_CRITICAL_RATIO", 0.30)
    RISK_CRITICAL_COUNT = _int_env("RISK_CRITICAL_COUNT", 50)
    RISK_HIGH_RATIO = _float_env("RISK_HIGH_RATIO", 0.15)
    RISK_HIGH_COUNT = _int_env("RISK_HIGH_COUNT", 20)
    RISK_MEDIUM_RATIO = _float_env("RISK_MEDIUM_RATIO", 0.05)
    RISK_MEDIUM_COUNT = _int_env("RISK_MEDIUM_COUNT", 5)


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    # Fixed values so tests do not depend on the host environment
    PROFILE_COMPLETENESS_GATE = 60
    RISK_CRITICAL_RATIO = 0.30
    RISK_CRITICAL_COUNT = 50
    RISK_HIGH_RATIO = 0.15
    RISK_HIGH_COUNT = 20
    RISK_MEDIUM_RATIO = 0.05
    RISK_MEDIUM_COUNT = 5


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
