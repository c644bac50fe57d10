import logging

import httpx
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from payment_service.clients import HttpMercadoPagoGateway, HttpOrderClient, MercadoPagoGateway, OrderClient
from payment_service.config import configure_logging, get_settings
from payment_service.database import get_session, init_db
from payment_service.errors import PaymentServiceError, ValidationError
from payment_service.repository import SqlAlchemyPaymentRepository
from payment_service.schemas import PaymentCreate, PaymentRead, WebhookNotification
from payment_service.services import PaymentService, WebhookService, parse_order_id

logger = logging.getLogger(__name__)

app = FastAPI(title="Payment Service")


@app.on_event("startup")
async def startup_event():
    settings = get_settings()
    configure_logging(settings.log_level)
    gateway_config = settings.mercado_pago_config()
    # Raises ConfigError on a blank credential, which aborts startup before anything is opened
    gateway_config.validate()
    app.state.http_client = httpx.AsyncClient()
    app.state.order_client = HttpOrderClient(app.state.http_client, settings.order_service_url)
    app.state.gateway = HttpMercadoPagoGateway(gateway_config, app.state.http_client)
    await init_db()
    logger.info("Payment service started")


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.http_client.aclose()


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return PlainTextResponse("Invalid request payload", status_code=400)


# --- Dependencies ---

def get_order_client(request: Request) -> OrderClient:
    return request.app.state.order_client


def get_gateway(request: Request) -> MercadoPagoGateway:
    return request.app.state.gateway


def get_payment_service(
    db: AsyncSession = Depends(get_session),
    order_client: OrderClient = Depends(get_order_client),
    gateway: MercadoPagoGateway = Depends(get_gateway),
) -> PaymentService:
    return PaymentService(
        repository=SqlAlchemyPaymentRepository(db),
        order_client=order_client,
        gateway=gateway,
        notification_url=get_settings().mercado_pago_webhook_callback_url,
    )


def get_webhook_service(
    payment_service: PaymentService = Depends(get_payment_service),
    order_client: OrderClient = Depends(get_order_client),
) -> WebhookService:
    return WebhookService(payment_service, order_client)


def path_order_id(order_id: str) -> int:
    try:
        return parse_order_id(order_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


# --- Routes ---

@app.post("/v1/payment", status_code=201)
async def create_payment(payload: PaymentCreate, service: PaymentService = Depends(get_payment_service)) -> str:
    try:
        return await service.create_payment(payload.order_id, payload.total, payload.type)
    except PaymentServiceError as e:
        logger.error("Error creating payment for order %s: %s", payload.order_id, e)
        raise HTTPException(status_code=500, detail=f"Error processing request: {e}")


@app.get("/v1/payment/{order_id}/status")
async def get_payment_status(
    order_id: int = Depends(path_order_id),
    service: PaymentService = Depends(get_payment_service),
) -> str:
    try:
        return await service.get_payment_status(order_id)
    except PaymentServiceError as e:
        logger.error("Error getting payment status for order %s: %s", order_id, e)
        raise HTTPException(status_code=500, detail="Error processing request")


@app.get("/v1/payment/{order_id}", response_model=PaymentRead)
async def get_payment(
    order_id: int = Depends(path_order_id),
    service: PaymentService = Depends(get_payment_service),
):
    try:
        payment = await service.get_payment(order_id)
    except PaymentServiceError as e:
        logger.error("Error getting payment for order %s: %s", order_id, e)
        raise HTTPException(status_code=500, detail="Error processing request")
    return PaymentRead.model_validate(payment)


@app.post("/payment/webhooks/notify")
async def handle_payment_notification(
    notification: WebhookNotification,
    service: WebhookService = Depends(get_webhook_service),
):
    try:
        await service.handle_notification(notification)
    except PaymentServiceError as e:
        logger.error("Error processing webhook %r: %s", notification.id, e)
        raise HTTPException(status_code=500, detail=f"Error processing webhook: {e}")
    return Response(status_code=200)


def main():
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    main()
