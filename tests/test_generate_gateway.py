#!/usr/bin/env python3
"""
AI provider gateway tests.

PURPOSE:
    Provider HTTP is mocked at the requests session level; no network.

TEST COVERAGE:
    - Request shape per provider and response parsing
    - Every failure mode maps to UpstreamProviderError
    - Gateway outcome and exact rule-based fallback
    - Prompt construction
"""

import unittest
from unittest import mock

import requests

from storefront.app.composer import compose_reply
from storefront.app.generate import (
    AIGateway,
    CohereClient,
    GroqClient,
    Outcome,
    Provider,
    ProviderSettings,
    TogetherClient,
    make_client,
)
from storefront.app.prompt_builder import PromptBuilder
from storefront.schemas.catalog_models import ProductOut
from storefront.utils.errors import UpstreamProviderError

PANTS = ProductOut(id=1, name="Carhartt Baggy Pants", price=4500.0, sale_price=3800.0,
                   colors=["Brown"], sizes=["32"])


def http_returning(payload=None, status=200, exc=None):
    session = mock.Mock()
    if exc is not None:
        session.post.side_effect = exc
        return session
    response = mock.Mock()
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error")
    session.post.return_value = response
    return session


class TestClients(unittest.TestCase):

    def test_cohere(self):
        http = http_returning({"generations": [{"text": "  مرحبا  "}]})
        client = CohereClient(api_key="key", session=http)
        self.assertEqual(client.generate("prompt"), "مرحبا")
        _, kwargs = http.post.call_args
        self.assertEqual(kwargs["json"]["prompt"], "prompt")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer key")
        self.assertEqual(kwargs["timeout"], client.timeout)

    def test_together(self):
        http = http_returning({"output": {"choices": [{"text": "reply"}]}})
        self.assertEqual(TogetherClient(api_key="key", session=http).generate("p"), "reply")

    def test_groq_sends_system_prompt(self):
        http = http_returning({"choices": [{"message": {"content": "reply"}}]})
        self.assertEqual(GroqClient(api_key="key", session=http).generate("p"), "reply")
        messages = http.post.call_args[1]["json"]["messages"]
        self.assertEqual([m["role"] for m in messages], ["system", "user"])

    def test_failures(self):
        cases = {
            "missing key": (None, http_returning({"generations": [{"text": "x"}]})),
            "timeout": ("key", http_returning(exc=requests.exceptions.Timeout("slow"))),
            "http error": ("key", http_returning({}, status=500)),
            "malformed": ("key", http_returning({"unexpected": True})),
            "blank": ("key", http_returning({"generations": [{"text": "   "}]})),
        }
        for label, (key, http) in cases.items():
            with self.subTest(label):
                with self.assertRaises(UpstreamProviderError) as ctx:
                    CohereClient(api_key=key, session=http).generate("p")
                self.assertEqual(ctx.exception.provider, "cohere")

    def test_make_client(self):
        self.assertIsNone(make_client(ProviderSettings()))
        client = make_client(ProviderSettings(Provider.groq, {"groq": "k"}, {"groq": 3.0}))
        self.assertIsInstance(client, GroqClient)
        self.assertEqual(client.timeout, 3.0)

    def test_available_providers(self):
        settings = ProviderSettings(Provider.cohere, {"cohere": "k", "groq": None})
        self.assertEqual(settings.available_providers(), ["cohere", "rule_based"])


class TestGateway(unittest.TestCase):

    def test_rule_based_not_attempted(self):
        reply = AIGateway(settings=ProviderSettings()).generate_reply("search", [PANTS], "show pants")
        self.assertEqual(reply.outcome, Outcome.not_attempted)
        self.assertEqual(reply.text, compose_reply("search", [PANTS], "show pants"))

    def test_success(self):
        client = mock.Mock()
        client.name = "groq"
        client.generate.return_value = "AI reply"
        reply = AIGateway(settings=ProviderSettings(Provider.groq), client=client).generate_reply(
            "search", [PANTS], "show pants", "البحث عن: pants")
        self.assertEqual((reply.text, reply.outcome, reply.provider), ("AI reply", Outcome.succeeded, "groq"))
        client.generate.assert_called_once()

    def test_failure_falls_back_exactly_once(self):
        client = mock.Mock()
        client.name = "cohere"
        client.generate.side_effect = UpstreamProviderError("down", provider="cohere")
        reply = AIGateway(settings=ProviderSettings(Provider.cohere), client=client).generate_reply(
            "sale", [PANTS], "sale?")
        self.assertEqual(reply.outcome, Outcome.failed_fallback)
        self.assertEqual(reply.text, compose_reply("sale", [PANTS], "sale?"))
        self.assertEqual(client.generate.call_count, 1)

    def test_unexpected_error_falls_back(self):
        client = mock.Mock()
        client.name = "together"
        client.generate.side_effect = RuntimeError("bug")
        reply = AIGateway(settings=ProviderSettings(Provider.together), client=client).generate_reply(
            "greeting", [], "hello")
        self.assertEqual(reply.text, compose_reply("greeting", [], "hello"))

    def test_prompt_failure_falls_back(self):
        client = mock.Mock()
        client.name = "groq"
        prompt_builder = mock.Mock()
        prompt_builder.build_prompt.side_effect = RuntimeError("bad template")
        gateway = AIGateway(settings=ProviderSettings(Provider.groq), client=client, prompt_builder=prompt_builder)
        reply = gateway.generate_reply("featured", [PANTS], "featured?")
        self.assertEqual(reply.outcome, Outcome.failed_fallback)
        self.assertEqual(reply.text, compose_reply("featured", [PANTS], "featured?"))
        client.generate.assert_not_called()

    def test_missing_key_falls_back(self):
        settings = ProviderSettings(Provider.cohere, {"cohere": None})
        reply = AIGateway(settings=settings).generate_reply("help", [], "help")
        self.assertEqual(reply.outcome, Outcome.failed_fallback)


class TestPromptBuilder(unittest.TestCase):

    def test_prompt_contains_context_products_and_message(self):
        prompt = PromptBuilder().build_prompt("show pants", [PANTS], "البحث عن: pants")
        self.assertIn("السياق: البحث عن: pants", prompt)
        self.assertIn("- Carhartt Baggy Pants: 4500 دينار، الألوان: Brown، المقاسات: 32", prompt)
        self.assertTrue(prompt.endswith("سؤال العميل: show pants"))

    def test_missing_options_and_labels(self):
        builder = PromptBuilder()
        bare = ProductOut(id=2, name="Hat", price=900.0)
        self.assertIn("الألوان: غير محدد", builder.summarize_item(bare))
        self.assertEqual(builder.summarize_item("Shirts"), "- Shirts")


if __name__ == "__main__":
    unittest.main()
