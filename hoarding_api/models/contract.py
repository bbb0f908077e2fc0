from sqlalchemy import Column, Float, String

from hoarding_api.database import Base, TimestampMixin


class Contract(TimestampMixin, Base):
    __tablename__ = "contracts"

    id = Column(String, primary_key=True)
    contract_number = Column(String, nullable=False, unique=True)
    hoarding_id = Column(String, nullable=False, index=True)
    client_id = Column(String, nullable=False, index=True)
    owner_id = Column(String, nullable=False, index=True)
    start_date = Column(String, nullable=False)
    end_date = Column(String, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="pending")
    terms_and_conditions = Column(String, nullable=True)
