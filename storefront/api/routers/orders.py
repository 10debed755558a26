# storefront/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, require_roles
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.schemas import (
    ApiResponse,
    OrderCreate,
    OrderOut,
    OrderStats,
    OrderStatusUpdate,
    PaginatedOrders,
)
from storefront.services.order_service import OrderService
from storefront.utils.settings import ORDERS_PAGE_LIMIT_MAX

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=ApiResponse[OrderOut], status_code=201)
def create_order(
    payload: OrderCreate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Places an order from the given items, or checks out the active cart
    when no items are sent.
    """
    order = get_service(db).create_order(user.id, payload)
    return ApiResponse(message="Order created successfully", data=OrderOut.model_validate(order))


@router.get("/", response_model=ApiResponse[PaginatedOrders])
def get_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=ORDERS_PAGE_LIMIT_MAX),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = get_service(db).list_orders(user.id, page, limit)
    return ApiResponse(message="Orders fetched successfully", data=PaginatedOrders.model_validate(result))


@router.get("/history", response_model=ApiResponse[PaginatedOrders])
def get_order_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=ORDERS_PAGE_LIMIT_MAX),
    status: Optional[str] = Query(None),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = get_service(db).get_order_history(user.id, page, limit, status)
    return ApiResponse(message="Order history fetched successfully", data=PaginatedOrders.model_validate(result))


@router.get("/stats", response_model=ApiResponse[OrderStats])
def get_order_stats(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    stats = get_service(db).get_order_stats(user.id)
    return ApiResponse(message="Order stats fetched successfully", data=OrderStats(**stats))


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    order = get_service(db).get_order(order_id, user.id)
    return ApiResponse(message="Order fetched successfully", data=OrderOut.model_validate(order))


@router.put("/{order_id}/status", response_model=ApiResponse[OrderOut])
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    admin: UserModel = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    order = get_service(db).update_status(order_id, payload.status, admin.id)
    return ApiResponse(message="Order status updated successfully", data=OrderOut.model_validate(order))


@router.put("/{order_id}/cancel", response_model=ApiResponse[OrderOut])
def cancel_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    order = get_service(db).cancel_order(order_id, user.id)
    return ApiResponse(message="Order cancelled successfully", data=OrderOut.model_validate(order))
