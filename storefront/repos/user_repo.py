from sqlalchemy import exists, func, or_, select
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.order import OrderModel
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.schemas import UserQuery


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_user(self, user: UserModel, changes: dict) -> UserModel:
        for field, value in changes.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def list_users(self, query: UserQuery) -> tuple[list[UserModel], int]:
        conditions = []
        if query.search:
            pattern = f"%{query.search}%"
            conditions.append(
                or_(
                    UserModel.first_name.ilike(pattern),
                    UserModel.last_name.ilike(pattern),
                    UserModel.email.ilike(pattern),
                )
            )
        if query.role:
            conditions.append(UserModel.role == query.role)

        total = self.db.execute(
            select(func.count()).select_from(UserModel).where(*conditions)
        ).scalar_one()

        users = self.db.execute(
            select(UserModel)
            .where(*conditions)
            .order_by(UserModel.created_at.desc(), UserModel.id.desc())
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        ).scalars().all()

        return list(users), total

    def has_history(self, user_id: int) -> bool:
        #orders and listings point at the user, they must outlive it
        found = self.db.execute(
            select(
                or_(
                    exists().where(OrderModel.user_id == user_id),
                    exists().where(ProductModel.seller_id == user_id),
                )
            )
        ).scalar()
        return bool(found)

    def delete_user(self, user: UserModel) -> None:
        #carts go with the user, items cascade through the relationship
        carts = self.db.execute(select(CartModel).where(CartModel.user_id == user.id)).scalars().all()
        for cart in carts:
            self.db.delete(cart)
        self.db.flush()
        self.db.delete(user)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
