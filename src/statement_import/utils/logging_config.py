"""
Logging setup shared by handlers and scripts.
"""
import logging
import logging.config
import os

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_configured = False


def configure_logging() -> None:
    """
    Configure the root logger once per process.

    LOGGING_CONFIG points to a logging.config file; otherwise basicConfig is
    used with the level taken from LOG_LEVEL (default INFO).
    """
    global _configured
    if _configured:
        return

    log_conf = os.environ.get('LOGGING_CONFIG')
    if log_conf:
        logging.config.fileConfig(log_conf, disable_existing_loggers=False)
    else:
        logging.basicConfig(
            level=os.environ.get('LOG_LEVEL', 'INFO'),
            format=DEFAULT_LOG_FORMAT
        )
    _configured = True
