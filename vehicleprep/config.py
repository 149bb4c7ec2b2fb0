import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default="false"):
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration class with common settings."""
    ENV = "base"
    DEBUG = False

    # Back-office API
    API_BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:4000/api")
    API_TIMEOUT_SECONDS = float(os.environ.get("API_TIMEOUT_SECONDS", "10"))
    API_DEBUG = _env_flag("API_DEBUG")

    # Credential persistence
    TOKEN_FILE = os.environ.get("TOKEN_FILE", os.path.expanduser("~/.vehicleprep/storage.json"))
    TOKEN_DATABASE_URL = os.environ.get("TOKEN_DATABASE_URL")
    # Keep writing the old key names so older dashboards keep reading the session
    LEGACY_TOKEN_KEYS = _env_flag("LEGACY_TOKEN_KEYS", "true")

    # Where the user is sent when the session cannot be recovered
    LOGIN_PATH = os.environ.get("LOGIN_PATH", "/login")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE")


class LocalConfig(Config):
    """Configuration for local development."""
    ENV = "local"
    DEBUG = True


class SandboxConfig(Config):
    """Configuration for sandbox/staging environment."""
    ENV = "sandbox"
    DEBUG = False


class ProductionConfig(Config):
    """Configuration for production environment."""
    ENV = "production"
    DEBUG = False


def get_config():
    """Get the appropriate configuration class based on environment variable.

    Environment is determined by the ENVIRONMENT variable:
    - 'local' or 'development' -> LocalConfig
    - 'sandbox' or 'staging' -> SandboxConfig
    - 'production' or 'prod' -> ProductionConfig

    Defaults to LocalConfig if not set.
    """
    env = os.environ.get("ENVIRONMENT", "local").lower()

    if env in ["local", "development", "dev"]:
        return LocalConfig
    elif env in ["sandbox", "staging", "stage"]:
        return SandboxConfig
    elif env in ["production", "prod"]:
        return ProductionConfig
    else:
        # Default to local for safety
        return LocalConfig
