from sqlalchemy import Column, Integer, String

from hoarding_api.database import Base


class Counter(Base):
    __tablename__ = "counters"

    key = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
