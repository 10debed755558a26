# storefront/repos/order_repo.py
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, order: OrderModel) -> OrderModel:
        #flush only: the order id is needed before stock is reserved in the same transaction
        self.db.add(order)
        self.db.flush()
        return order

    def find_by_id(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id, OrderModel.user_id == user_id)
        ).scalar_one_or_none()

    def find_by_user_paginated(
        self,
        user_id: int,
        page: int,
        limit: int,
        status: str | None = None,
    ) -> tuple[list[OrderModel], int]:
        conditions = [OrderModel.user_id == user_id]
        if status:
            conditions.append(OrderModel.status == status)

        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()

        orders = self.db.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()

        return list(orders), total

    def find_all_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(select(OrderModel).where(OrderModel.user_id == user_id)).scalars().all()
        )

    def update_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return order

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
