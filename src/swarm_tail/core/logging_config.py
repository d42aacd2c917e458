import logging
import os
import sys

DEFAULT_LOG_LEVEL = os.getenv("SWARM_TAIL_LOG_LEVEL", "WARNING")

# Loggers of the Docker SDK's HTTP stack
NOISY_LOGGERS = ("docker", "urllib3")


class DockerNoiseFilter(logging.Filter):
    """Drop chatty Docker SDK records so they don't drown the tailing diagnostics."""

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True

        return not any(
            record.name == name or record.name.startswith(name + ".")
            for name in NOISY_LOGGERS
        )


def setup_logging(level=None):
    """Configure logging to stderr; stdout carries the multiplexed log lines."""
    level_name = (level or DEFAULT_LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.WARNING)

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Create console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)
    console_handler.addFilter(DockerNoiseFilter())

    # Clear existing handlers and add our configured handler
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    return root_logger
