import abc
import logging

import httpx
import pydantic

from payment_service.config import MercadoPagoConfig
from payment_service.errors import DecodeError, RemoteError
from payment_service.schemas import QRCodeRequest, QRCodeResponse

logger = logging.getLogger(__name__)


class MercadoPagoGateway(abc.ABC):
    @abc.abstractmethod
    async def generate_qr_code(self, request: QRCodeRequest) -> str:
        """Return the QR data the customer scans to pay."""


class HttpMercadoPagoGateway(MercadoPagoGateway):
    def __init__(self, config: MercadoPagoConfig, http_client: httpx.AsyncClient):
        config.validate()
        self.config = config
        self.http_client = http_client

    @property
    def qr_url(self) -> str:
        return (
            f"{self.config.base_url}/instore/orders/qr/seller/collectors/"
            f"{self.config.client_id}/pos/{self.config.pos_id}/qrs"
        )

    async def generate_qr_code(self, request: QRCodeRequest) -> str:
        headers = {"Authorization": f"Bearer {self.config.token}"}
        try:
            response = await self.http_client.post(self.qr_url, json=request.model_dump(), headers=headers)
        except httpx.HTTPError as e:
            raise RemoteError(f"QR code request failed: {e}") from e

        if response.status_code != httpx.codes.CREATED:
            raise RemoteError("failed to generate QR code", status_code=response.status_code, body=response.text)

        try:
            qr_code = QRCodeResponse.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise DecodeError(f"failed to decode QR code response: {e}") from e

        logger.info("QR code generated for %s", request.external_reference)
        return qr_code.qr_data
