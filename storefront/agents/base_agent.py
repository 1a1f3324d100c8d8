"""BaseAgent interface for chat agents."""
from abc import ABC, abstractmethod
from typing import Any, List
from ..schemas.io_models import AgentResult


class BaseAgent(ABC):
    name: str = "base"

    @abstractmethod
    def handle(self, intent: str, message: str) -> AgentResult:
        """Return retrieved items and context; no prose here."""
        ...

    def _ok(self, intent: str, context: str, items: List[Any] = None, **extras) -> AgentResult:
        return AgentResult(agent=self.name, intent=intent, context=context, items=items or [], **extras)
