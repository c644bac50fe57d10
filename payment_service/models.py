import enum
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, String

from payment_service.database import Base

# Largest order id the signed BIGINT column can hold
ORDER_ID_MAX = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "Approved"
    DECLINED = "Declined"


class Payment(Base):
    __tablename__ = "payment"

    # SQLite only autoincrements an INTEGER primary key
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    order_id = Column(BigInteger, index=True, nullable=False)  # not unique: lookups take the first row
    total = Column(Float, nullable=False)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False)  # open string, see PaymentStatus for the known values
