from sqlalchemy import Column, DateTime, Integer, String, func
from .base import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    user_firstname = Column(String(128), nullable=False)
    user_lastname = Column(String(128), nullable=False)
    user_email = Column(String(255), nullable=False, unique=True)
    user_password = Column(String(255), nullable=False)
    user_role = Column(String(16), nullable=False, default="Client")
    created_date = Column(DateTime, nullable=False, server_default=func.now())

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "user_firstname": self.user_firstname,
            "user_lastname": self.user_lastname,
            "user_email": self.user_email,
            "user_role": self.user_role,
        }
