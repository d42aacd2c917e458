"""swarm-tail - follow the logs of many containers in one colored stream"""

__version__ = "0.1.0"
