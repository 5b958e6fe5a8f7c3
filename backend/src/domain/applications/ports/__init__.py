"""Application Port Interfaces"""

from .application_repository_port import ApplicationRepositoryPort

__all__ = [
    "ApplicationRepositoryPort",
]
