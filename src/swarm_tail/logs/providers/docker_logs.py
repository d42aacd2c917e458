"""
Docker log source provider.

This module implements the SourceProvider interface for Docker containers:
every running container is a source and its stdout/stderr are its streams.
"""

from typing import Dict, Iterable, List, Optional, Sequence

import docker
from docker.client import DockerClient
from docker.errors import APIError, DockerException, NotFound

from swarm_tail.config import ContextConfig
from swarm_tail.core.exceptions import DiscoveryError, StreamOpenError
from swarm_tail.core.logging import logger
from ..base import SourceEntry, SourceProvider, SourceSet


STACK_NAMESPACE_LABEL = "com.docker.stack.namespace"
DEFAULT_STREAMS = ("stdout", "stderr")


def create_client(context: Optional[ContextConfig] = None) -> DockerClient:
    """Build a Docker client for ``context``, or from the environment."""
    try:
        if context and context.docker_host:
            kwargs = {
                "base_url": context.docker_host
            }

            if context.tls_verify and context.cert_path:
                tls_config = docker.tls.TLSConfig(
                    client_cert=(
                        f"{context.cert_path}/cert.pem",
                        f"{context.cert_path}/key.pem"
                    ),
                    ca_cert=f"{context.cert_path}/ca.pem",
                    verify=True
                )
                kwargs["tls"] = tls_config

            return docker.DockerClient(**kwargs)

        return docker.from_env()
    except DockerException as e:
        raise DiscoveryError(f"Failed to connect to Docker daemon: {e}") from e


class DockerSourceProvider(SourceProvider):
    """
    Discovers running containers and opens their log streams.

    Containers can be narrowed down with label selectors and a stack
    namespace, the Docker equivalent of tailing one deployment.
    """

    def __init__(
        self,
        client: Optional[DockerClient] = None,
        context: Optional[ContextConfig] = None,
        labels: Optional[Sequence[str]] = None,
        streams: Sequence[str] = DEFAULT_STREAMS,
        tail: int = 0,
        timestamps: bool = False
    ):
        """
        Initialize the Docker provider.

        Args:
            client: Optional Docker client, created lazily from ``context`` if omitted
            context: Connection settings and default namespace
            labels: Label selectors, ``key`` or ``key=value``
            streams: Stream names offered by every container
            tail: Lines of history to replay when a stream opens
            timestamps: Whether Docker should prefix lines with timestamps
        """
        self._client = client
        self.context = context
        self.labels = list(labels or [])
        self.streams = list(streams)
        self.tail = tail
        self.timestamps = timestamps

        unknown = [name for name in self.streams if name not in DEFAULT_STREAMS]
        if unknown:
            raise ValueError(f"Unsupported streams: {', '.join(unknown)}")

    @property
    def client(self) -> DockerClient:
        if self._client is None:
            self._client = create_client(self.context)
        return self._client

    def _filters(self) -> Dict[str, List[str]]:
        labels = list(self.labels)
        if self.context and self.context.namespace:
            labels.append(f"{STACK_NAMESPACE_LABEL}={self.context.namespace}")

        filters = {"status": ["running"]}
        if labels:
            filters["label"] = labels
        return filters

    def list_sources(self) -> SourceSet:
        """List running containers, each with the configured streams."""
        filters = self._filters()
        try:
            containers = self.client.containers.list(filters=filters)
        except (APIError, DockerException) as e:
            raise DiscoveryError(f"Failed to list containers: {e}") from e

        logger.debug(f"Discovered {len(containers)} container(s) with filters {filters}")
        return SourceSet([
            SourceEntry(container.name, list(self.streams))
            for container in containers
        ])

    def open_stream(self, source: str, sub_source: str, follow: bool = True) -> Iterable[bytes]:
        """Open the log stream of one container output."""
        if sub_source not in self.streams:
            raise StreamOpenError(source, sub_source, "unknown stream")

        try:
            container = self.client.containers.get(source)
        except NotFound:
            raise StreamOpenError(source, sub_source, "container not found")
        except (APIError, DockerException) as e:
            raise StreamOpenError(source, sub_source, str(e)) from e

        log_kwargs = {
            'stream': True,
            'follow': follow,
            'stdout': sub_source == 'stdout',
            'stderr': sub_source == 'stderr',
            'timestamps': self.timestamps,
            'tail': self.tail
        }

        try:
            return container.logs(**log_kwargs)
        except (APIError, DockerException) as e:
            raise StreamOpenError(source, sub_source, str(e)) from e
