#!/usr/bin/env python3
"""
Product store tests against an in-memory database.

TEST COVERAGE:
    - Text search ranking and substring fallback
    - Literal matching of LIKE wildcards
    - Featured / on-sale / category helpers and their fail-soft behaviour
    - Catalog listing, pagination and CRUD
    - Deleting a product that existing orders reference
    - Seeding from the bundled CSV
"""

import unittest
from unittest import mock

from sqlalchemy.exc import OperationalError

from storefront.data.populate_db import ensure_admin, populate_products, read_products
from storefront.data.product_store import ProductStore, like_pattern, normalize_sale_price
from storefront.schemas.catalog_models import ProductCreate, ProductUpdate
from storefront.services.orders import OrderService
from storefront.utils.errors import NotFoundError, ValidationError

from helpers import add_products, add_user, make_test_db, shipping


class TestHelpers(unittest.TestCase):

    def test_normalize_sale_price(self):
        self.assertEqual(normalize_sale_price(3800, 4500), 3800.0)
        self.assertIsNone(normalize_sale_price(0, 4500))
        self.assertIsNone(normalize_sale_price(4500, 4500))
        self.assertIsNone(normalize_sale_price(5000, 4500))
        self.assertIsNone(normalize_sale_price(None, 4500))
        self.assertIsNone(normalize_sale_price("abc", 4500))

    def test_like_pattern_escapes_wildcards(self):
        self.assertEqual(like_pattern("50%_off"), "%50\\%\\_off%")


class TestChatHelpers(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_test_db()
        self.ids = add_products(self.session_factory)
        self.store = ProductStore(self.session_factory)

    def test_search_by_name(self):
        names = [p.name for p in self.store.search_products("Carhartt")]
        self.assertEqual(names, ["Carhartt Baggy Pants"])

    def test_search_ranks_and_limits(self):
        results = self.store.search_products("shirt", limit=1)
        self.assertEqual(len(results), 1)
        self.assertIn(results[0].name, ("Oxford Shirt", "Flannel Overshirt"))

    def test_search_falls_back_to_categories_and_colors(self):
        self.assertEqual([p.name for p in self.store.search_products("قمصان")], ["Flannel Overshirt"])
        self.assertEqual([p.name for p in self.store.search_products("brown")], ["Carhartt Baggy Pants"])

    def test_wildcards_match_literally(self):
        self.assertEqual(self.store.search_products("%"), [])
        self.assertEqual(self.store.search_products("_"), [])

    def test_blank_query(self):
        self.assertEqual(self.store.search_products("   "), [])

    def test_featured(self):
        self.assertEqual([p.name for p in self.store.get_featured()], ["Carhartt Baggy Pants", "Nike Windbreaker"])

    def test_on_sale_requires_stock_and_discount(self):
        self.assertEqual([p.name for p in self.store.get_on_sale()], ["Carhartt Baggy Pants"])

    def test_categories_distinct_in_order(self):
        self.assertEqual(self.store.get_categories(), ["Pants", "Jackets", "Shirts", "قمصان"])

    def test_store_failure_is_soft(self):
        with mock.patch("storefront.data.product_store.session_scope",
                        side_effect=OperationalError("select", {}, Exception("down"))):
            self.assertEqual(self.store.search_products("pants"), [])
            self.assertEqual(self.store.get_featured(), [])
            self.assertEqual(self.store.get_on_sale(), [])
            self.assertEqual(self.store.get_categories(), [])


class TestCatalog(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_test_db()
        self.ids = add_products(self.session_factory)
        self.store = ProductStore(self.session_factory)

    def test_list_by_category(self):
        page = self.store.list_products(category="Shirts")
        self.assertEqual([p.name for p in page.products], ["Oxford Shirt", "Flannel Overshirt"])
        self.assertEqual(page.total, 2)

    def test_list_sorted_by_price(self):
        page = self.store.list_products(sort="price_asc")
        prices = [p.price for p in page.products]
        self.assertEqual(prices, sorted(prices))

    def test_list_sale_sort_filters(self):
        page = self.store.list_products(sort="sale")
        self.assertEqual({p.name for p in page.products}, {"Carhartt Baggy Pants", "Flannel Overshirt"})

    def test_pagination(self):
        page = self.store.list_products(limit=3, page=2)
        self.assertEqual(page.current_page, 2)
        self.assertEqual(page.total_pages, 2)
        self.assertEqual(len(page.products), 1)

    def test_bad_sort(self):
        with self.assertRaises(ValidationError):
            self.store.list_products(sort="cheapest")

    def test_crud(self):
        created = self.store.create_product(ProductCreate(name="Bucket Hat", price=900, sale_price=950))
        self.assertIsNone(created.sale_price)

        updated = self.store.update_product(created.id, ProductUpdate(sale_price=700))
        self.assertEqual(updated.sale_price, 700.0)
        self.assertTrue(updated.on_sale)

        updated = self.store.update_product(created.id, ProductUpdate(price=600))
        self.assertIsNone(updated.sale_price)

        self.store.delete_product(created.id)
        with self.assertRaises(NotFoundError):
            self.store.get_product(created.id)

    def test_delete_product_keeps_orders(self):
        user_id = add_user(self.session_factory)
        orders = OrderService(self.session_factory, notifier=mock.Mock())
        order = orders.create_order(
            user_id, [{"product": self.ids["Oxford Shirt"], "size": "M"}], 2800, shipping())

        self.store.delete_product(self.ids["Oxford Shirt"])

        with self.assertRaises(NotFoundError):
            self.store.get_product(self.ids["Oxford Shirt"])
        line = orders.get_order(order.id).line_items[0]
        self.assertIsNone(line.product_id)
        self.assertEqual((line.name, line.unit_price, line.size), ("Oxford Shirt", 2800.0, "M"))

    def test_update_missing(self):
        with self.assertRaises(NotFoundError):
            self.store.update_product(999, ProductUpdate(name="x"))


class TestSeeding(unittest.TestCase):

    def test_csv_rows_are_valid(self):
        products = read_products()
        self.assertGreater(len(products), 0)
        for p in products:
            self.assertTrue(p.sale_price is None or 0 < p.sale_price < p.price)

    def test_populate_once(self):
        session_factory = make_test_db()
        added = populate_products(session_factory)
        self.assertGreater(added, 0)
        self.assertEqual(populate_products(session_factory), 0)

    def test_ensure_admin_is_idempotent(self):
        session_factory = make_test_db()
        first = ensure_admin("admin@example.com", session_factory)
        self.assertEqual(ensure_admin("admin@example.com", session_factory), first)


if __name__ == "__main__":
    unittest.main()
