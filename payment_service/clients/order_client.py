import abc
import logging

import httpx
import pydantic

from payment_service.errors import DecodeError, RemoteError
from payment_service.schemas import OrderResponse, OrderStatusUpdate

logger = logging.getLogger(__name__)


class OrderClient(abc.ABC):
    @abc.abstractmethod
    async def get_order(self, order_id: int) -> OrderResponse:
        ...

    @abc.abstractmethod
    async def update_order_status(self, order_id: int, status: int) -> None:
        ...


class HttpOrderClient(OrderClient):
    """Talks to the order service. One attempt per call, no retries."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    async def get_order(self, order_id: int) -> OrderResponse:
        url = f"{self.base_url}/v1/order/{order_id}"
        try:
            response = await self.http_client.get(url)
        except httpx.HTTPError as e:
            raise RemoteError(f"failed to get order {order_id}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise RemoteError("failed to get order", status_code=response.status_code, body=response.text)

        try:
            return OrderResponse.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise DecodeError(f"failed to decode order {order_id}: {e}") from e

    async def update_order_status(self, order_id: int, status: int) -> None:
        url = f"{self.base_url}/v1/order/{order_id}/status"
        try:
            response = await self.http_client.put(url, json=OrderStatusUpdate(status=status).model_dump())
        except httpx.HTTPError as e:
            raise RemoteError(f"failed to update order {order_id} status: {e}") from e

        if response.status_code not in (httpx.codes.OK, httpx.codes.NO_CONTENT):
            raise RemoteError("failed to update order status", status_code=response.status_code, body=response.text)
        logger.info("Order %s status set to %s", order_id, status)
