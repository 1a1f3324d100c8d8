"""Catalog Agent: retrieves the products (or category labels) a chat intent needs."""
from .base_agent import BaseAgent
from ..data.product_store import ProductStore
from ..nlu.intents import Intent, extract_search_terms
from ..schemas.io_models import AgentResult
from ..utils.logger import get_logger

logger = get_logger("chat")

# Context labels embedded in the provider prompt
CONTEXT_SEARCH = "البحث عن: {terms}"
CONTEXT_SALE = "المنتجات المخفضة"
CONTEXT_FEATURED = "المنتجات المميزة"
CONTEXT_CATEGORIES = "فئات المنتجات"
CONTEXT_GREETING = "ترحيب بالعميل"
CONTEXT_RELATED = "منتجات ذات صلة"
CONTEXT_GENERAL = "استفسار عام"


class CatalogAgent(BaseAgent):
    name = "catalog"

    def __init__(self, store: ProductStore = None):
        self.store = store or ProductStore()

    def handle(self, intent: str, message: str) -> AgentResult:
        intent = Intent(intent)
        logger.debug("CatalogAgent handling intent=%s", intent.value)

        if intent == Intent.search:
            terms = extract_search_terms(message)
            return self._ok(
                intent.value,
                CONTEXT_SEARCH.format(terms=terms),
                self.store.search_products(terms),
                search_terms=terms,
            )
        if intent == Intent.sale:
            return self._ok(intent.value, CONTEXT_SALE, self.store.get_on_sale())
        if intent == Intent.featured:
            return self._ok(intent.value, CONTEXT_FEATURED, self.store.get_featured())
        if intent == Intent.categories:
            return self._ok(intent.value, CONTEXT_CATEGORIES, self.store.get_categories())
        if intent == Intent.greeting:
            return self._ok(intent.value, CONTEXT_GREETING)
        # help and general: look for products named in the raw message
        products = self.store.search_products(message)
        return self._ok(intent.value, CONTEXT_RELATED if products else CONTEXT_GENERAL, products)
