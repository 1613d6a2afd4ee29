from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text, func
from .base import Base


class Customer(Base):
    """Trade account managed by back-office staff."""
    __tablename__ = "customers"

    customer_id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(64), nullable=True)
    address = Column(Text, nullable=True)
    tax_number = Column(String(64), nullable=True)
    payment_terms = Column(String(64), nullable=False, default="Net 30")
    credit_limit = Column(Numeric(15, 2), nullable=False, default=0)
    created_date = Column(DateTime, nullable=False, server_default=func.now())

    def to_dict(self):
        return {
            "customer_id": self.customer_id,
            "company_name": self.company_name,
            "contact_person": self.contact_person,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "address": self.address,
            "tax_number": self.tax_number,
            "payment_terms": self.payment_terms,
            "credit_limit": float(self.credit_limit or 0),
        }
