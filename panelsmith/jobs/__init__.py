"""
Panelsmith Jobs Module

Pollable, TTL-bounded job records for background generation runs.
"""

from .models import Job, JobProgress
from .progress import compute_percent
from .store import JobStore, JobBackend, InMemoryBackend
from .handle import JobHandle

__all__ = [
    'Job',
    'JobProgress',
    'compute_percent',
    'JobStore',
    'JobBackend',
    'InMemoryBackend',
    'JobHandle',
]
