import json

import httpx
import pytest

from payment_service.clients import HttpMercadoPagoGateway
from payment_service.config import MercadoPagoConfig
from payment_service.errors import ConfigError, DecodeError, RemoteError
from payment_service.schemas import QRCodeItem, QRCodeRequest

CONFIG = MercadoPagoConfig(
    base_url="https://api.mercadopago.test",
    token="APP_USR-token",
    client_id="123456",
    pos_id="POS001",
)


def qr_request():
    return QRCodeRequest(
        external_reference="order-7",
        title="Fiap",
        description="Fiap",
        notification_url="https://payments.test/payment/webhooks/notify",
        total_amount=20.0,
        items=[
            QRCodeItem(
                sku_number="3",
                category="1",
                title="X-Burger",
                description="Burger with cheese",
                unit_price=10.0,
                quantity=2,
                total_amount=20.0,
            )
        ],
    )


def mock_http_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("field", ["base_url", "token", "client_id", "pos_id"])
def test_blank_credential_raises_config_error(field):
    values = {"base_url": CONFIG.base_url, "token": CONFIG.token, "client_id": CONFIG.client_id, "pos_id": CONFIG.pos_id}
    values[field] = "  "

    with pytest.raises(ConfigError):
        HttpMercadoPagoGateway(MercadoPagoConfig(**values), http_client=None)


@pytest.mark.asyncio
async def test_generate_qr_code_success():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(201, json={"qr_data": "00020101021243650016COM.MERCADOLIBRE"})

    async with mock_http_client(handler) as http_client:
        qr_data = await HttpMercadoPagoGateway(CONFIG, http_client).generate_qr_code(qr_request())

    assert qr_data == "00020101021243650016COM.MERCADOLIBRE"

    sent = requests[0]
    assert sent.method == "POST"
    assert str(sent.url) == "https://api.mercadopago.test/instore/orders/qr/seller/collectors/123456/pos/POS001/qrs"
    assert sent.headers["Authorization"] == "Bearer APP_USR-token"

    body = json.loads(sent.content)
    assert body["external_reference"] == "order-7"
    assert body["notification_url"] == "https://payments.test/payment/webhooks/notify"
    assert body["total_amount"] == 20.0
    assert body["items"][0]["sku_number"] == "3"
    assert body["items"][0]["total_amount"] == 20.0


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [200, 400, 401, 500])
async def test_generate_qr_code_requires_201(status_code):
    def handler(request):
        return httpx.Response(status_code, json={"message": "invalid"})

    async with mock_http_client(handler) as http_client:
        with pytest.raises(RemoteError) as exc_info:
            await HttpMercadoPagoGateway(CONFIG, http_client).generate_qr_code(qr_request())

    assert exc_info.value.status_code == status_code
    assert "invalid" in exc_info.value.body


@pytest.mark.asyncio
async def test_generate_qr_code_malformed_body_raises_decode_error():
    def handler(request):
        return httpx.Response(201, json={"unexpected": True})

    async with mock_http_client(handler) as http_client:
        with pytest.raises(DecodeError):
            await HttpMercadoPagoGateway(CONFIG, http_client).generate_qr_code(qr_request())


@pytest.mark.asyncio
async def test_generate_qr_code_transport_failure_raises_remote_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_http_client(handler) as http_client:
        with pytest.raises(RemoteError):
            await HttpMercadoPagoGateway(CONFIG, http_client).generate_qr_code(qr_request())
