#!/usr/bin/env python3
"""
Chat pipeline tests: catalog agent routing and the controller.

TEST COVERAGE:
    - Agent retrieval per intent and context labels
    - Controller end to end over an in-memory catalogue
    - Canned replies when a dependency blows up
"""

import unittest
from unittest import mock

from storefront.agents.catalog_agent import (
    CONTEXT_GENERAL,
    CONTEXT_GREETING,
    CONTEXT_RELATED,
    CONTEXT_SALE,
    CatalogAgent,
)
from storefront.app.composer import ERROR_GREETING_REPLY, ERROR_REPLY, ERROR_SEARCH_REPLY, GREETING_REPLY
from storefront.app.controller import Controller
from storefront.app.generate import AIGateway, ProviderSettings
from storefront.data.product_store import ProductStore

from helpers import add_products, make_test_db


class TestCatalogAgent(unittest.TestCase):

    def setUp(self):
        self.agent = CatalogAgent(ProductStore(make_test_db()))
        add_products(self.agent.store.session_factory)

    def test_search_strips_verbs(self):
        result = self.agent.handle("search", "show me Carhartt")
        self.assertEqual(result.search_terms, "Carhartt")
        self.assertEqual(result.context, "البحث عن: Carhartt")
        self.assertEqual([p.name for p in result.items], ["Carhartt Baggy Pants"])

    def test_sale(self):
        result = self.agent.handle("sale", "sale")
        self.assertEqual(result.context, CONTEXT_SALE)
        self.assertEqual(len(result.items), 1)

    def test_categories_are_labels(self):
        result = self.agent.handle("categories", "categories")
        self.assertIn("Pants", result.items)

    def test_greeting_has_no_items(self):
        result = self.agent.handle("greeting", "hello")
        self.assertEqual((result.context, result.items), (CONTEXT_GREETING, []))

    def test_general_context_depends_on_hits(self):
        self.assertEqual(self.agent.handle("general", "Windbreaker").context, CONTEXT_RELATED)
        self.assertEqual(self.agent.handle("general", "zzz").context, CONTEXT_GENERAL)


class TestController(unittest.TestCase):

    def setUp(self):
        session_factory = make_test_db()
        add_products(session_factory)
        self.controller = Controller(
            agent=CatalogAgent(ProductStore(session_factory)),
            gateway=AIGateway(settings=ProviderSettings()),
        )

    def test_greeting(self):
        self.assertEqual(self.controller.handle_message("hello"), GREETING_REPLY)

    def test_search_reply_lists_product(self):
        reply = self.controller.handle_message("show me Carhartt")
        self.assertIn("Carhartt Baggy Pants", reply)
        self.assertIn("3800 دينار", reply)

    def test_agent_failure_gives_canned_reply(self):
        self.controller.agent = mock.Mock()
        self.controller.agent.handle.side_effect = RuntimeError("boom")
        self.assertEqual(self.controller.handle_message("hello"), ERROR_GREETING_REPLY)
        self.assertEqual(self.controller.handle_message("find pants"), ERROR_SEARCH_REPLY)
        self.assertEqual(self.controller.handle_message("zzz"), ERROR_REPLY)


if __name__ == "__main__":
    unittest.main()
