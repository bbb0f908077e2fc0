from sqlalchemy import Column, Integer, String

from hoarding_api.database import Base, TimestampMixin


class PhotographerProfile(TimestampMixin, Base):
    __tablename__ = "photographer_profiles"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, unique=True)
    status = Column(String, nullable=False, default="active")
    assigned_hoardings = Column(Integer, nullable=False, default=0)
    photos_uploaded = Column(Integer, nullable=False, default=0)
    bio = Column(String, nullable=False, default="")


class ClientProfile(TimestampMixin, Base):
    __tablename__ = "client_profiles"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, unique=True)
    contact_person = Column(String, nullable=False)
    status = Column(String, nullable=False, default="active")
    hoardings_count = Column(Integer, nullable=False, default=0)
    contracts_count = Column(Integer, nullable=False, default=0)
