from vehicleprep.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def create_client(config_class=None, **overrides):
    """
    Build an ApiClient from the environment's configuration.

    Logging is configured first so the client's own startup lines are captured.
    Keyword overrides are passed straight to ApiClient (token_store, navigator, ...).
    """
    # Import config after dotenv is loaded
    from vehicleprep.config import get_config
    from vehicleprep.api.client import ApiClient, token_store_from_config

    config_class = config_class or get_config()
    configure_logging(log_level=config_class.LOG_LEVEL, log_file=config_class.LOG_FILE)

    if "token_store" not in overrides:
        overrides["token_store"] = token_store_from_config(config_class)

    client = ApiClient(config_class=config_class, **overrides)
    logger.info("API client created", env=config_class.ENV, base_url=client.base_url)
    return client
