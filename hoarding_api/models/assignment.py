from sqlalchemy import Column, String

from hoarding_api.database import Base, TimestampMixin


class Assignment(TimestampMixin, Base):
    __tablename__ = "assignments"

    id = Column(String, primary_key=True)
    hoarding_id = Column(String, nullable=False, index=True)
    photographer_id = Column(String, nullable=False, index=True)
    assigned_by_id = Column(String, nullable=False, index=True)
    due_date = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    status = Column(String, nullable=False, default="assigned")
