"""Rule-based intent classifier for the shop assistant.

Keyword sets are bilingual (Arabic/English) and matched by plain substring
containment on the lower-cased message. Sets overlap, so the first intent in
`PRIORITY` that matches wins.
"""
import enum
import re
from typing import Dict, List, Tuple


class Intent(str, enum.Enum):
    search = "search"
    sale = "sale"
    featured = "featured"
    categories = "categories"
    greeting = "greeting"
    help = "help"
    general = "general"


KEYWORDS: Dict[Intent, Tuple[str, ...]] = {
    Intent.search: ("اعرض", "أرني", "ابحث", "show", "search", "find",
                    "قمصان", "بنطلون", "فستان", "pants", "shirt", "dress", "baggy", "carhartt"),
    Intent.sale: ("عرض", "تخفيض", "خصم", "sale", "discount", "offer", "عروض"),
    Intent.featured: ("مميز", "أفضل", "مقترح", "featured", "best", "recommend", "اقتراح"),
    Intent.categories: ("فئة", "نوع", "أقسام", "category", "categories", "type"),
    Intent.greeting: ("مرحبا", "السلام", "أهلا", "hello", "hi", "مساء", "صباح", "الجديد", "جديد"),
    Intent.help: ("مساعدة", "help", "ماذا", "كيف", "what", "how"),
}

PRIORITY: List[Intent] = [
    Intent.search,
    Intent.sale,
    Intent.featured,
    Intent.categories,
    Intent.greeting,
    Intent.help,
]

# Verbs stripped from a search message before it is used as a product query
SEARCH_VERBS = ("اعرض", "أرني", "ابحث", "show", "search", "find", "لي", "me")
_SEARCH_VERBS_RE = re.compile(r"\b(?:%s)\b" % "|".join(map(re.escape, SEARCH_VERBS)), re.IGNORECASE)


def classify(message: str) -> Intent:
    text = (message or "").lower()
    if not text:
        return Intent.general
    for intent in PRIORITY:
        if any(keyword in text for keyword in KEYWORDS[intent]):
            return intent
    return Intent.general


def extract_search_terms(message: str) -> str:
    stripped = _SEARCH_VERBS_RE.sub(" ", message or "")
    return " ".join(stripped.split())
