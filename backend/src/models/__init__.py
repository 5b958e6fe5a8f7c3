"""SQLAlchemy Models for the applicant portal"""

from .base import Base, PortableJSONB
from .application import Application
from .editing_request import EditingRequest

__all__ = [
    "Base",
    "PortableJSONB",
    "Application",
    "EditingRequest",
]
