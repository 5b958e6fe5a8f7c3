"""Application SQLAlchemy model

One row per applicant email. The full ApplicationRecord is kept in
``payload``; status and upload_count are mirrored for queries.
"""

from sqlalchemy import Column, Integer

from .base import Base, RecordRowMixin


class Application(RecordRowMixin, Base):
    __tablename__ = "application"

    upload_count = Column(Integer, nullable=False, default=1)

    def __repr__(self):
        return f"<Application(email={self.email!r}, status={self.status!r})>"
