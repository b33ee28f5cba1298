import logging


def setup_logging(log_level: str = "INFO") -> None:
    """Configure the root logger for the service (console only)."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-15s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # One line per outbound request is too chatty with the weather fan-out
    logging.getLogger("httpx").setLevel(logging.WARNING)
