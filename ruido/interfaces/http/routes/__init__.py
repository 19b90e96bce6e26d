"""Route blueprints exposed via Flask."""

from .tracks import track_bp
from .uploads import upload_bp
from .catalog import catalog_bp
from .health import health_bp

__all__ = [
    "track_bp",
    "upload_bp",
    "catalog_bp",
    "health_bp",
]
