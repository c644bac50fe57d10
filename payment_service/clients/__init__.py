from payment_service.clients.mercado_pago import HttpMercadoPagoGateway, MercadoPagoGateway
from payment_service.clients.order_client import HttpOrderClient, OrderClient

__all__ = ["HttpMercadoPagoGateway", "HttpOrderClient", "MercadoPagoGateway", "OrderClient"]
