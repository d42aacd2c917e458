"""
Log source providers.
"""

from .docker_logs import DockerSourceProvider, create_client

__all__ = ['DockerSourceProvider', 'create_client']
