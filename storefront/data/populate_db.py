import csv
import os

from .database import SessionLocal, create_tables, session_scope
from .models import Product, User
from .product_store import normalize_sale_price
from ..utils.logger import get_logger

logger = get_logger("seed")

PRODUCTS_CSV_PATH = os.path.join(os.path.dirname(__file__), "raw", "products.csv")


def _split(value: str):
    return [part.strip() for part in (value or "").split("|") if part.strip()]


def _flag(value: str) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def read_products(csv_path: str = PRODUCTS_CSV_PATH):
    """Parse the seed CSV into Product rows (list fields are pipe separated)."""
    products = []
    with open(csv_path, mode="r", encoding="utf-8") as csvfile:
        for row in csv.DictReader(csvfile):
            price = float(row["price"])
            products.append(Product(
                name=row["name"],
                description=row["description"],
                price=price,
                sale_price=normalize_sale_price(float(row["sale_price"]) if row["sale_price"] else None, price),
                categories=_split(row["categories"]),
                sizes=_split(row["sizes"]),
                colors=_split(row["colors"]),
                images=[],
                in_stock=_flag(row["in_stock"]),
                featured=_flag(row["featured"]),
            ))
    return products


def populate_products(session_factory=None, csv_path: str = PRODUCTS_CSV_PATH) -> int:
    """Seed the products table unless it already has rows; returns rows added."""
    with session_scope(session_factory or SessionLocal) as db:
        if db.query(Product).count() > 0:
            logger.info("Products table is not empty. Skipping population.")
            return 0
        products = read_products(csv_path)
        db.add_all(products)
    logger.info("Successfully populated the products table with %d products.", len(products))
    return len(products)


def ensure_admin(email: str, session_factory=None) -> int:
    """Create (or promote) the admin account and return its id."""
    with session_scope(session_factory or SessionLocal) as db:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(email=email, first_name="Admin", is_admin=True)
            db.add(user)
        user.is_admin = True
        db.flush()
        return user.id


if __name__ == "__main__":
    from ..services.auth import create_access_token

    create_tables()
    populate_products()
    admin_id = ensure_admin(os.getenv("ADMIN_EMAIL", "admin@vintageshop.com"))
    print(f"Admin token: {create_access_token(admin_id)}")
