from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payment_service.models import ORDER_ID_MAX


class PaymentCreate(BaseModel):
    order_id: int = Field(..., ge=0, le=ORDER_ID_MAX, examples=[1])
    total: float = Field(..., examples=[100.50])
    type: str = Field(..., examples=["QRCode"])


class PaymentRead(BaseModel):
    id: int
    created_at: datetime
    order_id: int
    total: float
    type: str
    status: str

    @field_validator("created_at")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        # SQLite hands timestamps back without their zone; they are stored as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    model_config = ConfigDict(from_attributes=True)


class WebhookNotification(BaseModel):
    id: str = Field(..., examples=["1"])
    topic: str = Field(..., examples=["payment.created"])


# --- Order service ---

class OrderProduct(BaseModel):
    product_id: int
    price: float
    quantity: int = Field(..., ge=0)
    name: str = ""
    image_link: str = ""
    description: str = ""
    category: int = 0


class OrderResponse(BaseModel):
    id: int
    total_amount: float
    products: List[OrderProduct] = Field(default_factory=list)


class OrderStatusUpdate(BaseModel):
    status: int


# --- Mercado Pago ---

class QRCodeItem(BaseModel):
    sku_number: str
    category: str
    title: str
    description: str
    unit_price: float
    quantity: int
    unit_measure: str = ""
    total_amount: float


class QRCodeRequest(BaseModel):
    external_reference: str
    title: str
    description: str
    notification_url: str
    total_amount: float
    items: List[QRCodeItem]


class QRCodeResponse(BaseModel):
    qr_data: str
