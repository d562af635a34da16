"""Development HTTPS service backed by an in-memory self-signed credential."""

from .app import create_app
from .server import ServerSettings, create_server, serve

__all__ = ['create_app', 'ServerSettings', 'create_server', 'serve']
