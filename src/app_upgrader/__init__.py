"""app-upgrader: ordered, one-time upgrade steps for persisted app versions."""

from app_upgrader.__version__ import __version__

__all__ = ["__version__"]
