"""Editing Port Interfaces"""

from .editing_repository_port import EditingRepositoryPort

__all__ = [
    "EditingRepositoryPort",
]
