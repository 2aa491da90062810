"""
Panelsmith API Module

FastAPI application exposing job creation, job polling and identity synthesis.
"""

from .main import create_app, run
from .settings import Settings, get_settings

__all__ = ['create_app', 'run', 'Settings', 'get_settings']
