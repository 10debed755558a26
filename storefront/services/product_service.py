# storefront/services/product_service.py
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import ForbiddenError, NotFoundError
from storefront.domain.schemas import ProductCreate, ProductQuery, ProductUpdate
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(self, query: ProductQuery) -> dict:
        products, total = self.repo.find_many(query)
        return {"products": products, "total": total}

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.find_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, seller: UserModel, payload: ProductCreate) -> ProductModel:
        product = self.repo.create(ProductModel(seller_id=seller.id, **payload.model_dump()))
        logger.info(f"Product {product.id} created by seller {seller.id}")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate, user: UserModel) -> ProductModel:
        product = self.get_product(product_id)
        self._check_owner(product, user)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        updated = self.repo.update(product, changes)
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return updated

    def delete_product(self, product_id: int, user: UserModel) -> ProductModel:
        product = self.get_product(product_id)
        self._check_owner(product, user)

        self.repo.delete(product)
        logger.info(f"Product {product_id} deleted by user {user.id}")
        return product

    @staticmethod
    def _check_owner(product: ProductModel, user: UserModel) -> None:
        # sellers manage their own listings, admins manage everything
        if user.role != "admin" and product.seller_id != user.id:
            raise ForbiddenError("Not allowed to modify this product")
