"""uvicorn server wiring for the development TLS service."""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import uvicorn
from pydantic import BaseModel, Field

from selfsigned import (
    TLSConfig,
    build_tls_config,
    common_name,
    not_after,
    organization,
)

from .app import create_app

logger = logging.getLogger(__name__)


class ServerSettings(BaseModel):
    """Settings for the development HTTPS server."""

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(default=8443, ge=0, le=65535, description="TCP port (0 picks a free port)")
    common_name: str = Field(default="localhost", description="Certificate common name")
    organization: Optional[str] = Field(default="self-signed", description="Certificate organization")
    validity_days: Optional[int] = Field(
        default=None,
        description="Certificate validity in days (default: ten years)",
    )
    log_level: str = Field(default="info", description="uvicorn log level")


def build_config_for(settings: ServerSettings) -> TLSConfig:
    """Build a credential from server settings."""
    opts = [common_name(settings.common_name), organization(settings.organization)]
    if settings.validity_days is not None:
        opts.append(not_after(datetime.now(timezone.utc) + timedelta(days=settings.validity_days)))
    return build_tls_config(*opts)


def create_server(tls_config: TLSConfig, settings: ServerSettings) -> uvicorn.Server:
    """
    Create a uvicorn server that terminates TLS with the given configuration.

    uvicorn only builds SSL contexts from key files, so the config is loaded
    first and its ``ssl`` slot is replaced with the in-memory context.

    Args:
        tls_config: Credential to present
        settings: Bind address and logging settings

    Returns:
        Configured, not yet running, uvicorn server
    """
    config = uvicorn.Config(
        create_app(tls_config),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
    config.load()
    config.ssl = tls_config.server_context()

    return uvicorn.Server(config)


def serve(settings: ServerSettings) -> None:
    """Build a fresh credential and serve HTTPS until interrupted."""
    tls_config = build_config_for(settings)
    leaf = tls_config.certificate.leaf

    logger.info(
        f"Serving https://{settings.host}:{settings.port} as {settings.common_name} "
        f"(serial: {leaf.serial_number})"
    )
    create_server(tls_config, settings).run()
