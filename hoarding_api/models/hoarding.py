from sqlalchemy import Column, Float, JSON, String

from hoarding_api.database import Base, TimestampMixin


class Hoarding(TimestampMixin, Base):
    __tablename__ = "hoardings"

    id = Column(String, primary_key=True)
    hoarding_number = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    city = Column(String, nullable=False, index=True)
    state = Column(String, nullable=False)
    country = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    unit = Column(String, nullable=False, default="feet")
    daily_rate = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="active")
    images = Column(JSON, nullable=False, default=list)
    owner_id = Column(String, nullable=False, index=True)
