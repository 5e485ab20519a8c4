"""
Configuration Management for Jassbot

Loads configuration from ~/.jassbot/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("jassbot.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".jassbot"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_HOMESERVER = "https://matrix.org"
DEFAULT_USER_ID = "@jassbot:matrix.org"
DEFAULT_API_BASE = "https://lep.duckdns.org/app/jassbot"
DEFAULT_DOC_BASE = "https://lep.duckdns.org/jassbot"


@dataclass
class MatrixConfig:
    """Matrix account and sync configuration"""
    homeserver: str = DEFAULT_HOMESERVER
    user_id: str = DEFAULT_USER_ID
    password: str = ""
    device_name: str = "jassbot"
    sync_timeout_ms: int = 30000
    retry_delay: float = 5.0


@dataclass
class DocServiceConfig:
    """jassbot documentation service endpoints"""
    api_base: str = DEFAULT_API_BASE  # JSON API: <api_base>/search/api, <api_base>/doc/api
    doc_base: str = DEFAULT_DOC_BASE  # human-facing pages: <doc_base>/doc/<query>
    timeout: float = 10.0


@dataclass
class ServerConfig:
    """Operator HTTP surface (health/stats)"""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class JassbotConfig:
    """Main Jassbot configuration"""
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    doc_service: DocServiceConfig = field(default_factory=DocServiceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"


def _parse_matrix_config(data: dict) -> MatrixConfig:
    """Parse matrix section from config dict"""
    matrix_data = data.get("matrix", {})
    return MatrixConfig(
        homeserver=matrix_data.get("homeserver", DEFAULT_HOMESERVER),
        user_id=matrix_data.get("user_id", DEFAULT_USER_ID),
        password=matrix_data.get("password", ""),
        device_name=matrix_data.get("device_name", "jassbot"),
        sync_timeout_ms=matrix_data.get("sync_timeout_ms", 30000),
        retry_delay=matrix_data.get("retry_delay", 5.0),
    )


def _parse_doc_service_config(data: dict) -> DocServiceConfig:
    """Parse doc_service section from config dict"""
    doc_data = data.get("doc_service", {})
    return DocServiceConfig(
        api_base=doc_data.get("api_base", DEFAULT_API_BASE),
        doc_base=doc_data.get("doc_base", DEFAULT_DOC_BASE),
        timeout=doc_data.get("timeout", 10.0),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=server_data.get("port", 8080),
    )


def load_config() -> JassbotConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.jassbot/config.json)
    3. Default values
    """
    config = JassbotConfig()

    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.matrix = _parse_matrix_config(data)
            config.doc_service = _parse_doc_service_config(data)
            config.server = _parse_server_config(data)
            config.log_level = data.get("log_level", "INFO")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    password = os.getenv("MATRIX_PASSWORD") or os.getenv("PASSWORD")
    if password:
        config.matrix.password = password
    if os.getenv("MATRIX_HOMESERVER"):
        config.matrix.homeserver = os.getenv("MATRIX_HOMESERVER")
    if os.getenv("MATRIX_USER_ID"):
        config.matrix.user_id = os.getenv("MATRIX_USER_ID")
    if os.getenv("MATRIX_SYNC_TIMEOUT_MS"):
        config.matrix.sync_timeout_ms = int(os.getenv("MATRIX_SYNC_TIMEOUT_MS"))

    if os.getenv("JASSBOT_API_BASE"):
        config.doc_service.api_base = os.getenv("JASSBOT_API_BASE")
    if os.getenv("JASSBOT_DOC_BASE"):
        config.doc_service.doc_base = os.getenv("JASSBOT_DOC_BASE")
    if os.getenv("JASSBOT_TIMEOUT"):
        config.doc_service.timeout = float(os.getenv("JASSBOT_TIMEOUT"))

    if os.getenv("JASSBOT_PORT"):
        config.server.port = int(os.getenv("JASSBOT_PORT"))
    if os.getenv("JASSBOT_LOG_LEVEL"):
        config.log_level = os.getenv("JASSBOT_LOG_LEVEL")

    return config


def save_config(config: JassbotConfig) -> None:
    """Save configuration to file.

    The Matrix password is never written; it is read from the environment
    at startup.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    data = {
        "matrix": {
            "homeserver": config.matrix.homeserver,
            "user_id": config.matrix.user_id,
            "device_name": config.matrix.device_name,
            "sync_timeout_ms": config.matrix.sync_timeout_ms,
            "retry_delay": config.matrix.retry_delay,
        },
        "doc_service": {
            "api_base": config.doc_service.api_base,
            "doc_base": config.doc_service.doc_base,
            "timeout": config.doc_service.timeout,
        },
        "server": {
            "host": config.server.host,
            "port": config.server.port,
        },
        "log_level": config.log_level,
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the jassbot logger tree"""
    root = logging.getLogger("jassbot")
    root.setLevel(level.upper())

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        root.addHandler(handler)
