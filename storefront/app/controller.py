"""Controller / Orchestrator for the chat widget.

classify -> catalog agent -> AI gateway. handle_message() never raises: the
widget always gets some reply, even when every dependency is down.
"""
from ..agents.catalog_agent import CatalogAgent
from ..nlu.intents import classify
from ..utils.logger import get_logger
from ..utils.security import mask_pii
from .composer import canned_error_reply
from .generate import AIGateway

logger = get_logger("chat")


class Controller:
    def __init__(self, agent: CatalogAgent = None, gateway: AIGateway = None):
        self.agent = agent or CatalogAgent()
        self.gateway = gateway or AIGateway()

    def handle_message(self, message: str) -> str:
        try:
            intent = classify(message)
            logger.info("Chat message intent=%s: %s", intent.value, mask_pii(message))

            result = self.agent.handle(intent, message)
            logger.debug("Agent '%s' retrieved %d item(s)", result.agent, len(result.items))

            reply = self.gateway.generate_reply(intent, result.items, message, result.context)
            logger.info("Reply via %s (%s)", reply.provider, reply.outcome.value)
            return reply.text.strip()
        except Exception:
            logger.exception("Error in chat pipeline")
            try:
                fallback_intent = classify(message or "")
            except Exception:
                fallback_intent = None
            return canned_error_reply(fallback_intent)
