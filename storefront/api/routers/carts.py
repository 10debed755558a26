# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.schemas import (
    ApiResponse,
    CartItemIn,
    CartItemUpdate,
    CartOut,
    CartValidation,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db=db)


@router.get("/", response_model=ApiResponse[CartOut])
def get_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    cart = get_service(db).get_cart(user.id)
    return ApiResponse(message="Cart fetched successfully", data=CartOut.model_validate(cart))


@router.post("/", response_model=ApiResponse[CartOut])
def add_item(
    payload: CartItemIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cart = get_service(db).add_item(user.id, payload.product_id, payload.quantity)
    return ApiResponse(message="Product added to cart successfully", data=CartOut.model_validate(cart))


@router.get("/validate", response_model=ApiResponse[CartValidation])
def validate_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    result = get_service(db).validate_cart(user.id)
    return ApiResponse(message="Cart validated successfully", data=CartValidation(**result))


@router.put("/{product_id}", response_model=ApiResponse[CartOut])
def update_item(
    product_id: int,
    payload: CartItemUpdate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cart = get_service(db).update_item(user.id, product_id, payload.quantity)
    return ApiResponse(message="Cart item updated successfully", data=CartOut.model_validate(cart))


@router.delete("/{product_id}", response_model=ApiResponse[CartOut])
def remove_item(
    product_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cart = get_service(db).remove_item(user.id, product_id)
    return ApiResponse(message="Cart item removed successfully", data=CartOut.model_validate(cart))


@router.delete("/", response_model=ApiResponse[None])
def clear_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    get_service(db).clear_cart(user.id)
    return ApiResponse(message="Cart cleared successfully")
