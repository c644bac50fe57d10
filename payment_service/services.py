"""
Payment and webhook workflows.

Both workflows are plain sequences of awaited calls against the store and
the two remote clients. Nothing is compensated on failure: a create that
fails after the insert leaves a "pending" row behind, and a webhook whose
order-status push fails keeps the payment status it already wrote. Status
corrections arrive later through the webhook or by hand.
"""

import logging

from payment_service.clients import MercadoPagoGateway, OrderClient
from payment_service.errors import RemoteError, ValidationError
from payment_service.models import ORDER_ID_MAX, Payment, PaymentStatus
from payment_service.repository import PaymentRepository
from payment_service.schemas import QRCodeItem, QRCodeRequest, WebhookNotification

logger = logging.getLogger(__name__)

QR_ORDER_TITLE = "Fiap"
ORDER_STATUS_PREPARING = 2
APPROVED_TOPICS = frozenset({"payment.created", "payment.updated"})

UINT32_MAX = 2**32 - 1


def parse_order_id(value: str, max_value: int = ORDER_ID_MAX) -> int:
    """Parse an unsigned decimal order id; only ASCII digits are accepted."""
    if not value or not value.isascii() or not value.isdigit():
        raise ValidationError(f"invalid order id: {value!r}")
    order_id = int(value)
    if order_id > max_value:
        raise ValidationError(f"order id out of range: {value!r}")
    return order_id


def status_from_topic(topic: str) -> PaymentStatus:
    if topic in APPROVED_TOPICS:
        return PaymentStatus.APPROVED
    return PaymentStatus.DECLINED


class PaymentService:
    def __init__(
        self,
        repository: PaymentRepository,
        order_client: OrderClient,
        gateway: MercadoPagoGateway,
        notification_url: str,
    ):
        self.repository = repository
        self.order_client = order_client
        self.gateway = gateway
        self.notification_url = notification_url

    async def create_payment(self, order_id: int, total: float, payment_type: str) -> str:
        """Store a pending payment and ask Mercado Pago for its QR code.

        The gateway is charged the order service's total, not ``total``;
        the declared total is only recorded on the payment row.
        """
        payment = await self.repository.add_payment(
            Payment(order_id=order_id, total=total, type=payment_type, status=PaymentStatus.PENDING.value)
        )
        logger.info("Pending payment %s created for order %s", payment.id, order_id)

        order = await self.order_client.get_order(payment.order_id)

        items = [
            QRCodeItem(
                sku_number=str(product.product_id),
                category=str(product.category),
                title=product.name,
                description=product.description,
                unit_price=product.price,
                quantity=product.quantity,
                total_amount=product.quantity * product.price,
            )
            for product in order.products
        ]

        qr_data = await self.gateway.generate_qr_code(
            QRCodeRequest(
                external_reference=f"order-{order.id}",
                title=QR_ORDER_TITLE,
                description=QR_ORDER_TITLE,
                notification_url=self.notification_url,
                total_amount=order.total_amount,
                items=items,
            )
        )
        logger.info("QR code issued for order %s", order_id)
        return qr_data

    async def get_payment(self, order_id: int) -> Payment:
        return await self.repository.get_payment_by_order_id(order_id)

    async def get_payment_status(self, order_id: int) -> str:
        payment = await self.repository.get_payment_by_order_id(order_id)
        return payment.status

    async def update_payment_status(self, order_id: int, status: PaymentStatus) -> None:
        payment = await self.repository.get_payment_by_order_id(order_id)
        payment.status = status.value
        await self.repository.update_payment(payment)
        logger.info("Payment for order %s set to %s", order_id, status.value)


class WebhookService:
    def __init__(self, payment_service: PaymentService, order_client: OrderClient):
        self.payment_service = payment_service
        self.order_client = order_client

    async def handle_notification(self, notification: WebhookNotification) -> None:
        status = status_from_topic(notification.topic)
        order_id = parse_order_id(notification.id, max_value=UINT32_MAX)
        logger.info("Webhook %r for order %s mapped to %s", notification.topic, order_id, status.value)

        await self.payment_service.update_payment_status(order_id, status)

        if status is not PaymentStatus.APPROVED:
            return

        try:
            await self.order_client.update_order_status(order_id, ORDER_STATUS_PREPARING)
        except RemoteError as e:
            # The payment row keeps its new status; the order is left behind.
            logger.error("Failed to move order %s to preparing: %s", order_id, e)
            raise RemoteError(
                f"failed to update order status in order service: {e.message}",
                status_code=e.status_code,
                body=e.body,
            ) from e
        logger.info("Order %s moved to preparing", order_id)
