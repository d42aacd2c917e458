import logging
from swarm_tail.core.logging_config import setup_logging

# Use centralized logging configuration
setup_logging()

# Create logger for this package
logger = logging.getLogger("swarm_tail")
