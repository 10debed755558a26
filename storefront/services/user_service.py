from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.repos.user_repo import UserRepo
from storefront.domain.errors import ForbiddenError, InvalidInputError, NotFoundError
from storefront.domain.schemas import UserCreate, UserQuery, UserUpdate
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register_user(self, payload: UserCreate) -> UserModel:
        if self.repo.get_by_email(payload.email):
            raise InvalidInputError("Email already registered")

        try:
            user = self.repo.create_user(UserModel(**payload.model_dump()))
        except IntegrityError:
            #lost a race with a concurrent registration of the same email
            self.repo.rollback()
            raise InvalidInputError("Email already registered")

        logger.info(f"User {user.id} registered with role {user.role}")
        return user

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: int, payload: UserUpdate) -> UserModel:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise InvalidInputError("No fields to update")

        user = self.get_user(user_id)

        email = changes.get("email")
        if email and email.lower() != user.email.lower():
            taken = self.repo.get_by_email(email)
            if taken and taken.id != user.id:
                raise InvalidInputError("Email already registered")

        try:
            return self.repo.update_user(user, changes)
        except IntegrityError:
            self.repo.rollback()
            raise InvalidInputError("Email already registered")

    def delete_user(self, user_id: int, actor: UserModel) -> UserModel:
        """Users delete their own account, admins delete any account.

        Accounts with orders or product listings are kept.
        """
        if actor.role != "admin" and actor.id != user_id:
            raise ForbiddenError("You can only delete your own account")

        user = self.get_user(user_id)
        if self.repo.has_history(user_id):
            raise InvalidInputError("User with orders or products cannot be deleted")

        self.repo.delete_user(user)
        logger.info(f"User {user_id} deleted by user {actor.id}")
        return user

    def list_users(self, query: UserQuery) -> dict:
        users, total = self.repo.list_users(query)
        return {"users": users, "total": total}
