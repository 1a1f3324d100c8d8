"""Shared fixtures for the storefront tests: a fresh in-memory database per test."""
from storefront.data.database import create_tables, make_engine, make_session_factory, session_scope
from storefront.data.models import Product, User

SAMPLE_PRODUCTS = [
    dict(name="Carhartt Baggy Pants", description="Vintage double knee work pants", price=4500.0,
         sale_price=3800.0, categories=["Pants"], sizes=["30", "32"], colors=["Brown", "Black"],
         in_stock=True, featured=True),
    dict(name="Nike Windbreaker", description="Retro 90s jacket with full zip", price=5200.0,
         sale_price=None, categories=["Jackets"], sizes=["M", "L"], colors=["Red"],
         in_stock=True, featured=True),
    dict(name="Oxford Shirt", description="Button down shirt in soft cotton", price=2800.0,
         sale_price=None, categories=["Shirts"], sizes=["S", "M"], colors=["White"],
         in_stock=True, featured=False),
    dict(name="Flannel Overshirt", description="Thick checked flannel", price=2200.0,
         sale_price=1500.0, categories=["Shirts", "قمصان"], sizes=["L"], colors=["Green"],
         in_stock=False, featured=False),
]


def make_test_db():
    """Return a session factory bound to a new in-memory SQLite database."""
    engine = make_engine("sqlite://")
    create_tables(bind=engine)
    return make_session_factory(engine)


def add_products(session_factory, products=SAMPLE_PRODUCTS):
    """Insert products and return {name: id}."""
    with session_scope(session_factory) as db:
        rows = [Product(images=[], **values) for values in products]
        db.add_all(rows)
        db.flush()
        return {row.name: row.id for row in rows}


def add_user(session_factory, email="customer@example.com", is_admin=False) -> int:
    with session_scope(session_factory) as db:
        user = User(email=email, first_name="Test", is_admin=is_admin)
        db.add(user)
        db.flush()
        return user.id


def shipping(**overrides):
    address = {
        "deliveryType": "office",
        "wilaya": "Alger",
        "daira": "Bab Ezzouar",
        "phoneNumber": "0555123456",
    }
    address.update(overrides)
    return address
