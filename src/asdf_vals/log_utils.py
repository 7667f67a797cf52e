import logging

from rich.console import Console
from rich.logging import RichHandler

from asdf_vals.constants import LOG_DATE_FORMAT, LOG_MESSAGE_FORMAT, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# Diagnostics must never reach stdout, the host parses it.
console = Console(stderr=True)


def set_log_level(level_name: str) -> None:
    """
    Set the log level for the asdf-vals logger and all attached handlers.

    If `level_name` is not a valid logging level name (e.g., "DEBUG", "INFO"),
    a warning is logged and the current configuration is left unchanged.

    Parameters:
        level_name (str): Case-insensitive name of the desired logging level.
    """
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        logger.warning(f"Invalid log level name: {level_name}. Using current level.")
        return

    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)

    logger.debug(f"Log level set to {logging.getLevelName(level)}")


def configure_logging(debug: bool) -> None:
    """
    Apply the verbosity requested by the plugin configuration.

    Debug mode lowers the level to DEBUG so per-attempt network logs and
    platform details are shown; otherwise INFO is used.
    """
    set_log_level("DEBUG" if debug else "INFO")


def _initialize_logger() -> None:
    """
    Initialize the asdf-vals logger with a single stderr RichHandler at INFO.

    Removes any existing handlers and disables propagation to the root logger.
    The handler renders the severity; the message itself carries the plugin
    name prefix.
    """
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_level=True,
        show_path=False,
        markup=False,
        log_time_format=LOG_DATE_FORMAT,
    )
    console_handler.setFormatter(logging.Formatter(LOG_MESSAGE_FORMAT))
    logger.addHandler(console_handler)

    logger.setLevel(logging.INFO)
    console_handler.setLevel(logging.INFO)


# Initialize the logger when the module is imported
_initialize_logger()
