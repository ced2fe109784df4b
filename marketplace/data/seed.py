# marketplace/data/seed.py
from decimal import Decimal

from marketplace.data.database import SessionLocal, init_db
from marketplace.data.models.user import UserModel
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.security import create_access_token
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    ("Mechanical keyboard", "Tenkeyless, brown switches", Decimal("199.99"), 5),
    ("Wireless mouse", "Ergonomic, 2.4 GHz dongle", Decimal("49.50"), 12),
    ("27 inch monitor", "1440p IPS panel", Decimal("899.00"), 1),
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            logger.info("Database already seeded")
            return

        users = UserRepo(db)
        seller = users.create_user(email="seller@example.com", name="Demo Seller")
        buyer = users.create_user(email="buyer@example.com", name="Demo Buyer")

        products = ProductRepo(db)
        for title, description, price, quantity in PRODUCTS:
            products.create(
                seller_id=seller.id,
                title=title,
                description=description,
                price=price,
                quantity=quantity,
            )

        db.commit()

        for user in (seller, buyer):
            token = create_access_token(user.id, user.email, user.name)
            logger.info(f"Token for {user.email}: {token}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
