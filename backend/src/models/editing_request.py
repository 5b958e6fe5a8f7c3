"""EditingRequest SQLAlchemy model - one paid editing request per email"""

from sqlalchemy import Column, Text

from .base import Base, RecordRowMixin


class EditingRequest(RecordRowMixin, Base):
    __tablename__ = "editing_request"

    payment_status = Column(Text, nullable=False, default="pending")

    def __repr__(self):
        return f"<EditingRequest(email={self.email!r}, status={self.status!r})>"
