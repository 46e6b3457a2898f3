from datetime import datetime

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.ids import new_object_id


class Feedback(Base):
    __tablename__ = "feedbacks"

    id = Column(String(24), primary_key=True, default=new_object_id)
    # Plain column, not a foreign key: submissions never check that the product exists
    product_id = Column(String(24), nullable=False, index=True)
    user_id = Column(String(24), ForeignKey("users.id"), nullable=False, index=True)
    feedback = Column(String(2000), nullable=False)
    rate = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = relationship("User", lazy="joined")
