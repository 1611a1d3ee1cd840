"""AI enrichment for notion-page-db."""

from .registry import PromptConfig, PromptRegistry, prompt_registry
from .service import AIService

__all__ = ["PromptConfig", "PromptRegistry", "prompt_registry", "AIService"]
