"""Product store: catalog lookups for the chat pipeline and the product routes.

The chat helpers (search, featured, on-sale, categories) fail soft: a store
error is logged and an empty list comes back, the chat widget must always be
able to answer. The catalog CRUD helpers raise.

Full-text search ranks with BM25 over name + description using an in-memory
Whoosh index built from the current rows.
"""
import math
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import String, and_, cast, or_, select
from sqlalchemy.exc import SQLAlchemyError
from whoosh.analysis import StemmingAnalyzer
from whoosh.fields import Schema, TEXT, ID
from whoosh.filedb.filestore import RamStorage
from whoosh.qparser import MultifieldParser, OrGroup

from .database import SessionLocal, session_scope
from .models import Product
from ..app.config import Config
from ..schemas.catalog_models import ProductCreate, ProductOut, ProductPage, ProductUpdate
from ..utils.errors import NotFoundError, StoreError, ValidationError
from ..utils.logger import get_logger

logger = get_logger("products")

SORT_OPTIONS = ("price_asc", "price_desc", "newest", "sale")
_LIKE_ESCAPE = "\\"


def normalize_sale_price(sale_price, price) -> Optional[float]:
    """Return `sale_price` only when it is a real discount, else None."""
    if sale_price is None or price is None:
        return None
    try:
        sale = float(sale_price)
    except (TypeError, ValueError):
        return None
    if math.isnan(sale) or sale <= 0 or sale >= float(price):
        return None
    return sale


def like_pattern(term: str) -> str:
    """Escape LIKE wildcards so `term` matches literally as a substring."""
    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _build_text_index(rows: Iterable[Tuple[int, str, str]]):
    analyzer = StemmingAnalyzer()
    schema = Schema(
        id=ID(stored=True, unique=True),
        name=TEXT(analyzer=analyzer),
        description=TEXT(analyzer=analyzer),
    )
    index = RamStorage().create_index(schema)
    writer = index.writer()
    for product_id, name, description in rows:
        writer.add_document(id=str(product_id), name=name or "", description=description or "")
    writer.commit()
    return index


class ProductStore:
    def __init__(self, session_factory: Callable = None):
        self.session_factory = session_factory or SessionLocal

    # -- chat helpers (fail soft) -------------------------------------------

    def search_products(self, text: str, limit: int = Config.SEARCH_LIMIT) -> List[ProductOut]:
        """Relevance-ranked text search, falling back to substring matching."""
        query = (text or "").strip()
        if not query:
            return []
        try:
            with session_scope(self.session_factory) as db:
                products = self._text_search(db, query, limit)
                if not products:
                    products = self._substring_search(db, query, limit)
                return [ProductOut.model_validate(p) for p in products]
        except Exception:
            logger.exception("Error searching products for %r", query)
            return []

    def get_featured(self, limit: int = Config.HIGHLIGHT_LIMIT) -> List[ProductOut]:
        try:
            with session_scope(self.session_factory) as db:
                rows = db.scalars(
                    select(Product).where(Product.featured.is_(True)).order_by(Product.id).limit(limit)
                ).all()
                return [ProductOut.model_validate(p) for p in rows]
        except Exception:
            logger.exception("Error getting featured products")
            return []

    def get_on_sale(self, limit: int = Config.HIGHLIGHT_LIMIT) -> List[ProductOut]:
        try:
            with session_scope(self.session_factory) as db:
                rows = db.scalars(
                    select(Product)
                    .where(self._on_sale_clause(), Product.in_stock.is_(True))
                    .order_by(Product.id)
                    .limit(limit)
                ).all()
                return [ProductOut.model_validate(p) for p in rows]
        except Exception:
            logger.exception("Error getting sale products")
            return []

    def get_categories(self) -> List[str]:
        try:
            with session_scope(self.session_factory) as db:
                seen: Dict[str, None] = {}
                for labels in db.scalars(select(Product.categories).order_by(Product.id)):
                    for label in labels or []:
                        if isinstance(label, str) and label.strip():
                            seen.setdefault(label, None)
                return list(seen)
        except Exception:
            logger.exception("Error getting categories")
            return []

    # -- catalog (raises) -----------------------------------------------------

    def list_products(self, category: str = None, search: str = None, sort: str = None,
                      limit: int = 20, page: int = 1) -> ProductPage:
        if limit < 1 or page < 1:
            raise ValidationError("limit and page must be positive")
        if sort and sort not in SORT_OPTIONS:
            raise ValidationError(f"Unknown sort '{sort}', expected one of: {', '.join(SORT_OPTIONS)}")
        try:
            with session_scope(self.session_factory) as db:
                filters = []
                if category:
                    filters.append(cast(Product.categories, String).like(like_pattern(category), escape=_LIKE_ESCAPE))
                if sort == "sale":
                    filters.append(self._on_sale_clause())
                candidates = db.scalars(select(Product).where(*filters).order_by(Product.id)).all()
                if category:
                    # JSON text containment is only a prefilter
                    candidates = [p for p in candidates if category in (p.categories or [])]
                if search:
                    ranked = self._rank(candidates, search, limit=None)
                    candidates = [p for p, _ in ranked]

                if sort == "price_asc":
                    candidates.sort(key=lambda p: p.price)
                elif sort == "price_desc":
                    candidates.sort(key=lambda p: p.price, reverse=True)
                elif sort == "newest":
                    candidates.sort(key=lambda p: (p.created_at is not None, p.created_at, p.id), reverse=True)

                total = len(candidates)
                start = (page - 1) * limit
                window = candidates[start:start + limit]
                return ProductPage(
                    products=[ProductOut.model_validate(p) for p in window],
                    current_page=page,
                    total_pages=math.ceil(total / limit),
                    total=total,
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Error listing products: {e}") from e

    def get_product(self, product_id: int) -> ProductOut:
        with session_scope(self.session_factory) as db:
            product = db.get(Product, product_id)
            if product is None:
                raise NotFoundError("Product not found")
            return ProductOut.model_validate(product)

    def create_product(self, data: ProductCreate) -> ProductOut:
        values = data.model_dump()
        values["sale_price"] = normalize_sale_price(values.get("sale_price"), values["price"])
        try:
            with session_scope(self.session_factory) as db:
                product = Product(**values)
                db.add(product)
                db.flush()
                db.refresh(product)
                logger.info("Created product %s (%s)", product.id, product.name)
                return ProductOut.model_validate(product)
        except SQLAlchemyError as e:
            raise StoreError(f"Error creating product: {e}") from e

    def update_product(self, product_id: int, data: ProductUpdate) -> ProductOut:
        changes = data.model_dump(exclude_unset=True)
        try:
            with session_scope(self.session_factory) as db:
                product = db.get(Product, product_id)
                if product is None:
                    raise NotFoundError("Product not found")
                for field, value in changes.items():
                    if field == "sale_price":
                        continue
                    if value is not None:
                        setattr(product, field, value)
                sale = changes["sale_price"] if "sale_price" in changes else product.sale_price
                product.sale_price = normalize_sale_price(sale, product.price)
                db.flush()
                db.refresh(product)
                return ProductOut.model_validate(product)
        except SQLAlchemyError as e:
            raise StoreError(f"Error updating product: {e}") from e

    def delete_product(self, product_id: int) -> None:
        try:
            with session_scope(self.session_factory) as db:
                product = db.get(Product, product_id)
                if product is None:
                    raise NotFoundError("Product not found")
                db.delete(product)
        except SQLAlchemyError as e:
            raise StoreError(f"Error deleting product: {e}") from e

    # -- internals --------------------------------------------------------------

    @staticmethod
    def _on_sale_clause():
        return and_(
            Product.sale_price.is_not(None),
            Product.sale_price > 0,
            Product.sale_price < Product.price,
        )

    def _text_search(self, db, query: str, limit: int) -> List[Product]:
        rows = db.scalars(select(Product).order_by(Product.id)).all()
        return [p for p, _ in self._rank(rows, query, limit)]

    @staticmethod
    def _rank(rows: List[Product], query: str, limit: Optional[int]) -> List[Tuple[Product, float]]:
        if not rows:
            return []
        by_id = {p.id: p for p in rows}
        index = _build_text_index((p.id, p.name, p.description) for p in rows)
        parser = MultifieldParser(["name", "description"], schema=index.schema, group=OrGroup)
        parsed = parser.parse(query)
        with index.searcher() as searcher:
            hits = searcher.search(parsed, limit=limit)
            return [(by_id[int(hit["id"])], hit.score) for hit in hits]

    @staticmethod
    def _substring_search(db, query: str, limit: int) -> List[Product]:
        pattern = like_pattern(query)
        needle = query.casefold()
        # JSON list columns are prefiltered on their serialised text, then confirmed per label
        rows = db.scalars(
            select(Product)
            .where(or_(
                Product.name.ilike(pattern, escape=_LIKE_ESCAPE),
                Product.description.ilike(pattern, escape=_LIKE_ESCAPE),
                *(cast(column, String).ilike(pattern, escape=_LIKE_ESCAPE)
                  for column in (Product.categories, Product.colors, Product.sizes)),
            ))
            .order_by(Product.id)
        ).all()
        return [p for p in rows if _contains(p, needle)][:limit]


def _contains(product: Product, needle: str) -> bool:
    fields = [product.name or "", product.description or ""]
    for labels in (product.categories, product.colors, product.sizes):
        fields.extend(label for label in labels or [] if isinstance(label, str))
    return any(needle in value.casefold() for value in fields)
