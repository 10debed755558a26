from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user, rate_limit, require_roles
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.schemas import ApiResponse, UserCreate, UserList, UserQuery, UserRead, UserUpdate
from storefront.services.user_service import UserService
from storefront.utils.settings import RATE_LIMIT_REGISTER_MAX_REQUESTS

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/",
    response_model=ApiResponse[UserRead],
    status_code=201,
    dependencies=[Depends(rate_limit("register", RATE_LIMIT_REGISTER_MAX_REQUESTS))],
)
def register_user(payload: UserCreate, db: Session = Depends(get_db)):
    user = UserService(db).register_user(payload)
    return ApiResponse(message="User registered successfully", data=UserRead.model_validate(user))


@router.get("/", response_model=ApiResponse[UserList])
def list_users(
    query: Annotated[UserQuery, Query()],
    admin: UserModel = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    result = UserService(db).list_users(query)
    return ApiResponse(message="Users fetched successfully", data=UserList.model_validate(result))


@router.put("/me", response_model=ApiResponse[UserRead])
def update_profile(
    payload: UserUpdate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = UserService(db).update_profile(user.id, payload)
    return ApiResponse(message="Profile updated successfully", data=UserRead.model_validate(updated))


@router.get("/{target_id}", response_model=ApiResponse[UserRead])
def get_user(
    target_id: int,
    admin: UserModel = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    user = UserService(db).get_user(target_id)
    return ApiResponse(message="User fetched successfully", data=UserRead.model_validate(user))


@router.delete("/{target_id}", response_model=ApiResponse[UserRead])
def delete_user(
    target_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deleted = UserService(db).delete_user(target_id, user)
    return ApiResponse(message="User deleted successfully", data=UserRead.model_validate(deleted))
