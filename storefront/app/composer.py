#!/usr/bin/env python3
"""
Rule-based response composer for the shop assistant.

compose_reply() is a pure function of (intent, items, message). It is the
reply whenever no AI provider is configured or the provider call fails, so it
always returns a non-empty text for every intent.
"""

from typing import Any, List, Sequence

from ..nlu.intents import Intent

CURRENCY = "دينار"
MAX_SHOWN = 3
MAX_SHOWN_GENERAL = 2

GREETING_REPLY = """🌟 **مرحباً بك في متجرنا!** 🌟

أهلاً وسهلاً! أنا مساعدك الذكي هنا لمساعدتك في العثور على أفضل المنتجات.

**يمكنني مساعدتك في:**
🔍 البحث عن المنتجات
🏷️ عرض العروض والخصومات
⭐ المنتجات المميزة
📂 استعراض الفئات

**كيف يمكنني مساعدتك اليوم؟**"""

HELP_REPLY = """🤖 **كيف يمكنني مساعدتك؟**

**الخدمات المتاحة:**

🔍 **البحث عن المنتجات**
• اكتب اسم المنتج (مثل: "Carhartt pants")
• ابحث بالفئة (مثل: "قمصان")

🏷️ **العروض والخصومات**
• اكتب "عروض" أو "خصومات"

⭐ **المنتجات المميزة**
• اكتب "مميز" أو "اقتراح"

📂 **الفئات**
• اكتب "فئات" أو "أقسام"

**فقط اكتب ما تريد البحث عنه!**"""

SEARCH_EMPTY_REPLY = """🔍 **نتائج البحث**

عذراً، لم أجد منتجات مطابقة لبحثك.

**جرب البحث عن:**
• Carhartt Baggy Pants
• قمصان
• أحذية رياضية
• إكسسوارات

أو اكتب اسم المنتج مباشرة!"""

SALE_EMPTY_REPLY = """🔥 **العروض والخصومات**

لا توجد عروض متاحة حالياً 😔

**لكن لا تقلق!**
• تابعنا للحصول على أحدث العروض
• اشترك في النشرة الإخبارية
• تحقق من المنتجات المميزة

**هل تريد رؤية المنتجات المميزة؟**"""

FEATURED_EMPTY_REPLY = """⭐ **المنتجات المميزة**

لا توجد منتجات مميزة حالياً 🌟

**لكن لدينا منتجات رائعة أخرى!**
• منتجات جديدة
• عروض خاصة
• أكثر المنتجات مبيعاً

**هل تريد البحث عن شيء محدد؟**"""

CATEGORIES_EMPTY_REPLY = """📂 **فئات المنتجات**

عذراً، لا توجد فئات متاحة حالياً 📂

**تحقق لاحقاً للحصول على:**
• فئات جديدة
• منتجات محدثة
• تصنيفات أفضل"""

GENERAL_REPLY = """👋 **أهلاً بك!**

أنا مساعدك الذكي في متجر الملابس 🛍️

**يمكنك سؤالي عن:**
• المنتجات المتاحة
• العروض والخصومات
• المنتجات المميزة
• أي شيء تريد معرفته

**كيف يمكنني مساعدتك؟**"""

# Canned replies when the chat pipeline itself fails
ERROR_REPLY = "🤖 عذراً، حدث خطأ في النظام. يمكنك تجربة السؤال مرة أخرى."
ERROR_GREETING_REPLY = "👋 مرحباً بك في متجرنا! كيف يمكنني مساعدتك اليوم؟"
ERROR_SEARCH_REPLY = '🔍 يمكنك البحث عن المنتجات باستخدام الكلمات المفتاحية مثل "pants" أو "Carhartt".'
EMPTY_MESSAGE_REPLY = "الرجاء إدخال رسالة صحيحة."


def format_amount(value: float) -> str:
    """4500.0 -> '4500', 19.9 -> '19.9'."""
    text = f"{float(value):.2f}"
    return text.rstrip("0").rstrip(".")


def format_price(product) -> str:
    if product.sale_price is not None:
        return f"💰 **{format_amount(product.sale_price)} {CURRENCY}** ~~{format_amount(product.price)} {CURRENCY}~~"
    return f"💰 **{format_amount(product.price)} {CURRENCY}**"


def discount_percent(product) -> int:
    ratio = (product.price - product.sale_price) / product.price * 100
    return int(ratio + 0.5)


def format_product(product) -> str:
    lines = [f"**{product.name}**", format_price(product)]
    if product.colors:
        lines.append(f"🎨 الألوان: {', '.join(product.colors)}")
    if product.sizes:
        lines.append(f"📏 المقاسات: {', '.join(product.sizes)}")
    lines.append("✅ متوفر" if product.in_stock else "❌ غير متوفر")
    return "\n".join(lines)


def _more_footer(total: int, shown: int) -> str:
    return f"📋 **وهناك {total - shown} منتج آخر متاح!**\n\nهل تريد رؤية المزيد؟"


def _product_list(header: str, products: Sequence[Any], limit: int, extra=None) -> str:
    reply = f"{header} ({len(products)} منتج)\n\n"
    for index, product in enumerate(products[:limit], 1):
        reply += f"**{index}.** {format_product(product)}\n"
        if extra:
            reply += f"{extra(product)}\n"
        reply += "\n"
    if len(products) > limit:
        reply += _more_footer(len(products), limit) + "\n\n"
    return reply


def compose_reply(intent: str, items: List[Any], message: str = "") -> str:
    intent = Intent(intent)
    items = list(items or [])

    if intent == Intent.greeting:
        return GREETING_REPLY

    if intent == Intent.help:
        return HELP_REPLY

    if intent == Intent.search:
        if not items:
            return SEARCH_EMPTY_REPLY
        return _product_list("🔍 **نتائج البحث**", items, MAX_SHOWN).rstrip()

    if intent == Intent.sale:
        if not items:
            return SALE_EMPTY_REPLY
        reply = _product_list(
            "🔥 **العروض الحالية**",
            items,
            MAX_SHOWN,
            extra=lambda p: f"💸 **خصم {discount_percent(p)}%**" if p.sale_price is not None else "",
        )
        return reply + "⏰ **أسرع! العروض محدودة**"

    if intent == Intent.featured:
        if not items:
            return FEATURED_EMPTY_REPLY
        reply = _product_list(
            "⭐ **منتجاتنا المميزة**",
            items,
            MAX_SHOWN,
            extra=lambda p: f"📝 {p.description}",
        )
        return reply + "🌟 **هذه أفضل اختياراتنا لك!**"

    if intent == Intent.categories:
        if not items:
            return CATEGORIES_EMPTY_REPLY
        reply = "📚 **الفئات المتاحة في متجرنا**\n\n"
        for index, label in enumerate(items, 1):
            reply += f"**{index}.** {label}\n"
        return reply + "\n🔍 **يمكنك البحث في أي فئة تهمك!**"

    if items:
        reply = "🛍️ **وجدت بعض المنتجات التي قد تهمك!**\n\n"
        for index, product in enumerate(items[:MAX_SHOWN_GENERAL], 1):
            reply += f"**{index}.** {format_product(product)}\n\n"
        if len(items) > MAX_SHOWN_GENERAL:
            reply += _more_footer(len(items), MAX_SHOWN_GENERAL) + "\n\n"
        return reply + "**هل تريد المزيد من التفاصيل؟**"

    return GENERAL_REPLY


def canned_error_reply(intent: str) -> str:
    """Best-effort reply when the chat pipeline itself failed."""
    if intent == Intent.greeting.value:
        return ERROR_GREETING_REPLY
    if intent == Intent.search.value:
        return ERROR_SEARCH_REPLY
    return ERROR_REPLY
