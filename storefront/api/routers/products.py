# storefront/api/routers/products.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import require_roles
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.schemas import (
    ApiResponse,
    ProductCreate,
    ProductList,
    ProductQuery,
    ProductRead,
    ProductUpdate,
)
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])

seller_or_admin = require_roles("seller", "admin")


def get_service(db: Session):
    return ProductService(db)


@router.get("/", response_model=ApiResponse[ProductList])
def list_products(query: Annotated[ProductQuery, Query()], db: Session = Depends(get_db)):
    result = get_service(db).list_products(query)
    return ApiResponse(message="Products fetched successfully", data=ProductList.model_validate(result))


@router.get("/{product_id}", response_model=ApiResponse[ProductRead])
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = get_service(db).get_product(product_id)
    return ApiResponse(message="Product fetched successfully", data=ProductRead.model_validate(product))


@router.post("/", response_model=ApiResponse[ProductRead], status_code=201)
def create_product(
    payload: ProductCreate,
    seller: UserModel = Depends(seller_or_admin),
    db: Session = Depends(get_db),
):
    product = get_service(db).create_product(seller, payload)
    return ApiResponse(message="Product created successfully", data=ProductRead.model_validate(product))


@router.put("/{product_id}", response_model=ApiResponse[ProductRead])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: UserModel = Depends(seller_or_admin),
    db: Session = Depends(get_db),
):
    product = get_service(db).update_product(product_id, payload, user)
    return ApiResponse(message="Product updated successfully", data=ProductRead.model_validate(product))


@router.delete("/{product_id}", response_model=ApiResponse[ProductRead])
def delete_product(
    product_id: int,
    user: UserModel = Depends(seller_or_admin),
    db: Session = Depends(get_db),
):
    product = get_service(db).delete_product(product_id, user)
    return ApiResponse(message="Product deleted successfully", data=ProductRead.model_validate(product))
