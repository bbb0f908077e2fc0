from sqlalchemy import Column, Float, String

from hoarding_api.database import Base, TimestampMixin


class Billing(TimestampMixin, Base):
    __tablename__ = "billings"

    id = Column(String, primary_key=True)
    invoice_number = Column(String, nullable=False, unique=True)
    contract_id = Column(String, nullable=False, index=True)
    client_id = Column(String, nullable=False, index=True)
    owner_id = Column(String, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_status = Column(String, nullable=False, default="pending")
    due_date = Column(String, nullable=False)
    payment_date = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    transaction_id = Column(String, nullable=True)
    notes = Column(String, nullable=True)
