from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_many(self, user_ids: Sequence[int]) -> dict[int, UserModel]:
        if not user_ids:
            return {}
        rows = self.db.execute(
            select(UserModel).where(UserModel.id.in_(list(set(user_ids))))
        ).scalars().all()
        return {u.id: u for u in rows}

    def create_user(self, email: str, name: str, user_id: int | None = None) -> UserModel:
        user = UserModel(id=user_id, email=email, name=name)
        self.db.add(user)
        self.db.flush()
        return user
