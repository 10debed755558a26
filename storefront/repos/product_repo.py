# storefront/repos/product_repo.py
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.schemas import ProductQuery


class ProductRepo:
    """
    Catalog store.
    Stock changes are single UPDATE statements so concurrent buyers never
    read-modify-write the same row; they do not commit, the caller owns the
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def find_many(self, query: ProductQuery) -> tuple[list[ProductModel], int]:
        conditions = [ProductModel.is_active.is_(True)]

        if query.search:
            pattern = f"%{query.search}%"
            conditions.append(
                or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern))
            )
        if query.category:
            conditions.append(ProductModel.category == query.category)
        if query.min_price is not None:
            conditions.append(ProductModel.price >= query.min_price)
        if query.max_price is not None:
            conditions.append(ProductModel.price <= query.max_price)

        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(*conditions)
        ).scalar_one()

        products = self.db.execute(
            select(ProductModel)
            .where(*conditions)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        ).scalars().all()

        return list(products), total

    def create(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update(self, product: ProductModel, changes: dict) -> ProductModel:
        for field, value in changes.items():
            setattr(product, field, value)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        #UPDATE products SET stock = stock - q WHERE id = :id AND stock >= q
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def increment_stock(self, product_id: int, quantity: int) -> bool:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=ProductModel.stock + quantity)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
