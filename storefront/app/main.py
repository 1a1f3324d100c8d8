#!/usr/bin/env python3
"""
Main FastAPI application for the storefront backend.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..data.database import create_tables
from ..data.product_store import ProductStore
from ..schemas.catalog_models import ProductCreate, ProductOut, ProductPage, ProductUpdate
from ..schemas.io_models import ChatHealth, ChatRequest, ChatResponse
from ..schemas.order_models import (
    CancelledOrderOut,
    CancelRequest,
    CancelResponse,
    DashboardStats,
    MessageResponse,
    OrderCreate,
    OrderOut,
    ShippedOrderOut,
    StatusUpdate,
)
from ..schemas.settings_models import SiteSettingsAdminOut, SiteSettingsOut, SiteSettingsUpdate
from ..services.auth import AuthService
from ..services.notifications import NotificationGateway
from ..services.orders import OrderService
from ..services.site_settings import SettingsProvider
from ..utils.errors import StorefrontError
from ..utils.logger import get_logger
from .composer import EMPTY_MESSAGE_REPLY, canned_error_reply
from .config import Config
from .controller import Controller

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    Config.debug_print()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Storefront API",
    description="Order lifecycle and shop assistant backend for the clothing store",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize components
settings_provider = SettingsProvider()
product_store = ProductStore()
auth_service = AuthService()
order_service = OrderService(notifier=NotificationGateway(settings_provider))
controller = Controller()

bearer = HTTPBearer(auto_error=False)


# -- dependencies (overridden in tests) ------------------------------------------

def get_settings_provider() -> SettingsProvider:
    return settings_provider


def get_product_store() -> ProductStore:
    return product_store


def get_auth_service() -> AuthService:
    return auth_service


def get_order_service() -> OrderService:
    return order_service


def get_controller() -> Controller:
    return controller


def _token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    return credentials.credentials if credentials else None


def current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                 auth: AuthService = Depends(get_auth_service)) -> int:
    return auth.verify_user_token(_token(credentials))


def current_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                  auth: AuthService = Depends(get_auth_service)) -> int:
    return auth.verify_admin_token(_token(credentials))


# -- error mapping ---------------------------------------------------------------

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {details}"})


# -- orders ----------------------------------------------------------------------

@app.post("/api/orders", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, background_tasks: BackgroundTasks,
                 user_id: int = Depends(current_user), orders: OrderService = Depends(get_order_service)):
    """Place an order; the admin e-mail goes out after the response."""
    return orders.create_order(
        user_id,
        payload.line_items,
        payload.total_amount,
        payload.shipping_address,
        dispatch=background_tasks.add_task,
    )


@app.get("/api/orders/all", response_model=List[OrderOut])
def list_all_orders(_: int = Depends(current_admin), orders: OrderService = Depends(get_order_service)):
    return orders.list_all_orders()


@app.get("/api/orders/get/cancelled", response_model=List[CancelledOrderOut])
def list_cancelled_orders(_: int = Depends(current_admin), orders: OrderService = Depends(get_order_service)):
    return orders.list_cancelled_orders()


@app.get("/api/orders/get/shipped", response_model=List[ShippedOrderOut])
def list_shipped_orders(_: int = Depends(current_admin), orders: OrderService = Depends(get_order_service)):
    return orders.list_shipped_orders()


@app.get("/api/orders", response_model=List[OrderOut])
def list_my_orders(user_id: int = Depends(current_user), orders: OrderService = Depends(get_order_service)):
    return orders.list_user_orders(user_id)


@app.get("/api/orders/{order_id}", response_model=OrderOut)
def get_my_order(order_id: int, user_id: int = Depends(current_user),
                 orders: OrderService = Depends(get_order_service)):
    return orders.get_order(order_id, user_id=user_id)


@app.patch("/api/orders/{order_id}", response_model=OrderOut)
def update_order_status(order_id: int, payload: StatusUpdate, _: int = Depends(current_admin),
                        orders: OrderService = Depends(get_order_service)):
    return orders.update_status(order_id, payload.status, payload.tracking_number, payload.estimated_delivery)


@app.post("/api/orders/{order_id}/cancel", response_model=CancelResponse)
def cancel_order(order_id: int, payload: Optional[CancelRequest] = None, _: int = Depends(current_admin),
                 orders: OrderService = Depends(get_order_service)):
    record = orders.cancel_order(order_id, payload.reason if payload else None)
    return CancelResponse(message="Order cancelled successfully", cancelled_order=record)


@app.delete("/api/orders/delete-order/{order_id}", response_model=MessageResponse)
def delete_order(order_id: int, _: int = Depends(current_admin), orders: OrderService = Depends(get_order_service)):
    orders.delete_order(order_id)
    return MessageResponse(message="Order deleted successfully")


# -- admin -----------------------------------------------------------------------

@app.get("/api/admin/dashboard-stats", response_model=DashboardStats)
def dashboard_stats(range_: str = Query("30d", alias="range"), _: int = Depends(current_admin),
                    orders: OrderService = Depends(get_order_service)):
    return orders.dashboard_stats(range_)


@app.get("/api/admin/orders/{order_id}", response_model=OrderOut)
def admin_order_details(order_id: int, _: int = Depends(current_admin),
                        orders: OrderService = Depends(get_order_service)):
    return orders.get_order(order_id)


# -- products --------------------------------------------------------------------

@app.get("/api/products", response_model=ProductPage)
def list_products(category: Optional[str] = None, search: Optional[str] = None, sort: Optional[str] = None,
                  limit: int = 20, page: int = 1, store: ProductStore = Depends(get_product_store)):
    return store.list_products(category=category, search=search, sort=sort, limit=limit, page=page)


@app.get("/api/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, store: ProductStore = Depends(get_product_store)):
    return store.get_product(product_id)


@app.post("/api/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, _: int = Depends(current_admin),
                   store: ProductStore = Depends(get_product_store)):
    return store.create_product(payload)


@app.patch("/api/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, _: int = Depends(current_admin),
                   store: ProductStore = Depends(get_product_store)):
    return store.update_product(product_id, payload)


@app.delete("/api/products/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, _: int = Depends(current_admin), store: ProductStore = Depends(get_product_store)):
    store.delete_product(product_id)
    return MessageResponse(message="Product deleted successfully")


# -- site settings ---------------------------------------------------------------

def _admin_view(settings: SiteSettingsAdminOut) -> SiteSettingsAdminOut:
    email = settings.email_notifications.model_copy(update={"smtp_password": None})
    return settings.model_copy(update={"email_notifications": email})


@app.get("/api/settings", response_model=SiteSettingsOut)
def get_site_settings(provider: SettingsProvider = Depends(get_settings_provider)):
    return SiteSettingsOut.model_validate(provider.get().model_dump())


@app.get("/api/settings/admin", response_model=SiteSettingsAdminOut)
def get_admin_site_settings(_: int = Depends(current_admin), provider: SettingsProvider = Depends(get_settings_provider)):
    return _admin_view(provider.get())


@app.put("/api/settings", response_model=SiteSettingsAdminOut)
def update_site_settings(payload: SiteSettingsUpdate, _: int = Depends(current_admin),
                         provider: SettingsProvider = Depends(get_settings_provider)):
    return _admin_view(provider.update(payload))


# -- chat ------------------------------------------------------------------------

@app.post("/api/chat", response_model=ChatResponse)
def chat(request: ChatRequest, chat_controller: Controller = Depends(get_controller)):
    """
    Answer one shop-assistant message.

    A blank message is rejected; anything else always gets a reply.
    """
    if not request.message:
        return JSONResponse(status_code=400, content={"reply": EMPTY_MESSAGE_REPLY})
    if not isinstance(request.message, str):
        logger.warning("Chat message is not text (%s)", type(request.message).__name__)
        return ChatResponse(reply=canned_error_reply(None))
    if not request.message.strip():
        return JSONResponse(status_code=400, content={"reply": EMPTY_MESSAGE_REPLY})
    return ChatResponse(reply=chat_controller.handle_message(request.message))


@app.get("/api/chat/health", response_model=ChatHealth)
def chat_health(chat_controller: Controller = Depends(get_controller)):
    settings = chat_controller.gateway.settings
    return ChatHealth(
        status="OK",
        ai_provider=settings.provider.value,
        available_providers=settings.available_providers(),
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
