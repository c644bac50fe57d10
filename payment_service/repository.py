import abc
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payment_service.errors import NotFoundError, StorageError
from payment_service.models import ORDER_ID_MAX, Payment

logger = logging.getLogger(__name__)


class PaymentRepository(abc.ABC):
    """Persistence contract for payment rows, always looked up by order id."""

    @abc.abstractmethod
    async def add_payment(self, payment: Payment) -> Payment:
        ...

    @abc.abstractmethod
    async def get_payment_by_order_id(self, order_id: int) -> Payment:
        ...

    @abc.abstractmethod
    async def update_payment(self, payment: Payment) -> None:
        ...


class SqlAlchemyPaymentRepository(PaymentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_payment(self, payment: Payment) -> Payment:
        try:
            self.session.add(payment)
            await self.session.commit()
            await self.session.refresh(payment)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"failed to add payment for order {payment.order_id}: {e}") from e
        logger.info("Payment %s stored for order %s", payment.id, payment.order_id)
        return payment

    async def get_payment_by_order_id(self, order_id: int) -> Payment:
        if not 0 <= order_id <= ORDER_ID_MAX:
            raise NotFoundError(f"payment for order {order_id} not found")
        try:
            result = await self.session.execute(
                select(Payment).where(Payment.order_id == order_id).order_by(Payment.id).limit(1)
            )
            payment = result.scalars().first()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to get payment for order {order_id}: {e}") from e
        if payment is None:
            raise NotFoundError(f"payment for order {order_id} not found")
        return payment

    async def update_payment(self, payment: Payment) -> None:
        """Write every mutable column of the row with ``payment.id``.

        Raises NotFoundError when no row has that id; nothing is inserted.
        """
        try:
            result = await self.session.execute(
                update(Payment)
                .where(Payment.id == payment.id)
                .values(
                    order_id=payment.order_id,
                    total=payment.total,
                    type=payment.type,
                    status=payment.status,
                )
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(f"payment {payment.id} not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"failed to update payment {payment.id}: {e}") from e
