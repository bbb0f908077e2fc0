from sqlalchemy import Column, Integer, String

from hoarding_api.database import Base, TimestampMixin
from hoarding_api.utils.dates import utcnow_iso


class Photo(TimestampMixin, Base):
    __tablename__ = "photos"

    id = Column(String, primary_key=True)
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    hoarding_id = Column(String, nullable=False, index=True)
    uploaded_by_id = Column(String, nullable=False, index=True)
    assignment_id = Column(String, nullable=True, index=True)
    taken_at = Column(String, nullable=False, default=utcnow_iso)
    size = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    format = Column(String, nullable=True)
    caption = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
