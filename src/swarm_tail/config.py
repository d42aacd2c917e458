"""Configuration management for the CLI"""

import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

from .core.exceptions import ConfigurationError
from .core.logging import logger


DEFAULT_CONFIG_PATH = Path.home() / '.swarm-tail' / 'config.yaml'
DEFAULT_STREAMS = ['stdout', 'stderr']
DEFAULT_PALETTE = ['yellow', 'red', 'cyan', 'green', 'magenta']
DEFAULT_QUEUE_SIZE = 1000


@dataclass
class ContextConfig:
    """Connection settings for one Docker endpoint"""
    docker_host: Optional[str] = None
    tls_verify: bool = False
    cert_path: Optional[str] = None
    namespace: Optional[str] = None


@dataclass
class Config:
    """Main configuration structure"""
    contexts: Dict[str, ContextConfig] = field(default_factory=dict)
    current_context: Optional[str] = None
    streams: List[str] = field(default_factory=lambda: list(DEFAULT_STREAMS))
    palette: List[str] = field(default_factory=lambda: list(DEFAULT_PALETTE))
    queue_size: int = DEFAULT_QUEUE_SIZE

    @property
    def context(self) -> Optional[ContextConfig]:
        """The active context, if any"""
        if self.current_context:
            return self.contexts.get(self.current_context)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for YAML serialization"""
        return {
            'contexts': {
                name: {
                    'docker_host': ctx.docker_host,
                    'tls_verify': ctx.tls_verify,
                    'cert_path': ctx.cert_path,
                    'namespace': ctx.namespace
                }
                for name, ctx in self.contexts.items()
            },
            'current_context': self.current_context,
            'streams': list(self.streams),
            'palette': list(self.palette),
            'queue_size': self.queue_size
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary"""
        contexts = {}
        for name, ctx_data in (data.get('contexts') or {}).items():
            ctx_data = ctx_data or {}
            contexts[name] = ContextConfig(
                docker_host=ctx_data.get('docker_host'),
                tls_verify=bool(ctx_data.get('tls_verify', False)),
                cert_path=ctx_data.get('cert_path'),
                namespace=ctx_data.get('namespace')
            )

        try:
            queue_size = int(data.get('queue_size', DEFAULT_QUEUE_SIZE))
        except (TypeError, ValueError):
            raise ConfigurationError(f"queue_size must be an integer, got {data.get('queue_size')!r}")
        if queue_size < 0:
            raise ConfigurationError(f"queue_size must not be negative, got {queue_size}")

        return cls(
            contexts=contexts,
            current_context=data.get('current_context'),
            streams=list(data.get('streams') or DEFAULT_STREAMS),
            palette=list(data.get('palette') or DEFAULT_PALETTE),
            queue_size=queue_size
        )


class ConfigManager:
    """Manages configuration file operations"""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        self.config_dir = self.config_path.parent

    def ensure_config_dir(self):
        """Ensure configuration directory exists"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> Config:
        """Load configuration from file"""
        if not self.config_path.exists():
            # Return default config
            return Config()

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config {self.config_path}: {e}")
            return Config()

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")

        return Config.from_dict(data)

    def save(self, config: Config):
        """Save configuration to file"""
        self.ensure_config_dir()

        with open(self.config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

    def add_context(self, name: str, docker_host: Optional[str] = None,
                    tls_verify: bool = False, cert_path: Optional[str] = None,
                    namespace: Optional[str] = None):
        """Add or update a context"""
        config = self.load()
        config.contexts[name] = ContextConfig(
            docker_host=docker_host,
            tls_verify=tls_verify,
            cert_path=cert_path,
            namespace=namespace
        )

        # Set as current if it's the first context
        if not config.current_context:
            config.current_context = name

        self.save(config)

    def remove_context(self, name: str):
        """Remove a context"""
        config = self.load()
        if name in config.contexts:
            del config.contexts[name]

            # Update current context if needed
            if config.current_context == name:
                config.current_context = next(iter(config.contexts), None)

            self.save(config)

    def use_context(self, name: str):
        """Switch to a different context"""
        config = self.load()
        if name in config.contexts:
            config.current_context = name
            self.save(config)
            return True
        return False
