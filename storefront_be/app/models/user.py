from sqlalchemy import Column, String

from app.database import Base
from app.utils.ids import new_object_id


class User(Base):
    __tablename__ = "users"
    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
