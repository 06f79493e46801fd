from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel, BuyerModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_buyer(self, user_id: int) -> BuyerModel | None:
        return self.db.get(BuyerModel, user_id)
