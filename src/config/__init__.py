"""
hikidown configuration

The appsettings singleton reads HIKIDOWN_* environment variables (and an
optional .env file) once at import.
"""

from .settings import appsettings, AppSettings

__all__ = ["appsettings", "AppSettings"]
