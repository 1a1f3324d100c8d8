#!/usr/bin/env python3
"""
Prompt builder module for the shop assistant.

This module constructs the single prompt sent to the configured AI provider
from the intent context, the retrieved products and the customer message.
"""

from typing import Any, List

from .composer import CURRENCY, format_amount

UNSPECIFIED = "غير محدد"


class PromptBuilder:
    """Builds prompts for the LLM with store context."""

    def __init__(self):
        """Initialize the prompt builder."""
        self.system_prompt = """أنت مساعد ذكي لمتجر ملابس. السياق: {context}

المنتجات المتاحة:
{products}

تعليمات:
- استخدم اللغة العربية
- نظم الرد بشكل جميل مع الرموز التعبيرية
- اجعل الرد مفيداً وجذاباً
- لا تتجاوز 200 كلمة

سؤال العميل: {message}"""

    def summarize_item(self, item: Any) -> str:
        if isinstance(item, str):
            return f"- {item}"
        colors = ", ".join(item.colors) if item.colors else UNSPECIFIED
        sizes = ", ".join(item.sizes) if item.sizes else UNSPECIFIED
        return f"- {item.name}: {format_amount(item.price)} {CURRENCY}، الألوان: {colors}، المقاسات: {sizes}"

    def build_prompt(self, message: str, items: List[Any], context: str = "") -> str:
        """
        Build a prompt for the LLM.

        Args:
            message: Raw customer message
            items: Retrieved products, or category labels
            context: Intent context label

        Returns:
            Formatted prompt string
        """
        products_text = "\n".join(self.summarize_item(item) for item in items or [])
        return self.system_prompt.format(
            context=context,
            products=products_text,
            message=message,
        )
