#!/usr/bin/env python3
"""
Token verification tests.
"""

import unittest

from jose import jwt

from storefront.app.config import Config
from storefront.services.auth import AuthService, create_access_token
from storefront.utils.errors import Unauthorized

from helpers import add_user, make_test_db


class TestAuthService(unittest.TestCase):

    def setUp(self):
        self.session_factory = make_test_db()
        self.customer = add_user(self.session_factory, "customer@example.com")
        self.admin = add_user(self.session_factory, "admin@example.com", is_admin=True)
        self.auth = AuthService(self.session_factory)

    def test_user_token(self):
        self.assertEqual(self.auth.verify_user_token(create_access_token(self.customer)), self.customer)

    def test_admin_token(self):
        self.assertEqual(self.auth.verify_admin_token(create_access_token(self.admin)), self.admin)

    def test_customer_is_not_admin(self):
        with self.assertRaises(Unauthorized) as ctx:
            self.auth.verify_admin_token(create_access_token(self.customer))
        self.assertEqual(ctx.exception.message, "Not authorized as admin")

    def test_missing_and_garbage_tokens(self):
        for token in (None, "", "not-a-jwt"):
            with self.subTest(token=token):
                with self.assertRaises(Unauthorized):
                    self.auth.verify_user_token(token)

    def test_expired_token(self):
        with self.assertRaises(Unauthorized):
            self.auth.verify_user_token(create_access_token(self.customer, expires_minutes=-1))

    def test_wrong_secret(self):
        forged = jwt.encode({"userId": self.admin}, "not-the-secret", algorithm=Config.JWT_ALGORITHM)
        with self.assertRaises(Unauthorized):
            self.auth.verify_admin_token(forged)

    def test_token_without_user_id(self):
        token = jwt.encode({"sub": "x"}, Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM)
        with self.assertRaises(Unauthorized):
            self.auth.verify_user_token(token)


if __name__ == "__main__":
    unittest.main()
