"""
Prompt registry for notion-page-db.

Each enrichment task (summary, title, keywords, validation) has a system
prompt, a user prompt template and generation parameters. Keeping them in one
registry makes it easy to tune a task without touching the service code.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass


@dataclass
class PromptConfig:
    """
    Configuration for one enrichment task.
    """
    name: str
    description: str
    system_prompt: str
    user_prompt_template: str
    max_tokens: Optional[int] = None
    temperature: float = 0.7

    def render(self, **kwargs) -> str:
        """
        Fill in the user prompt template.

        Raises:
            ValueError: If a template variable is missing
        """
        try:
            return self.user_prompt_template.format(**kwargs)
        except KeyError as e:
            raise ValueError(f"Missing template variable {e} for prompt '{self.name}'")


SUMMARY_STYLES = {
    "concise": "Summarize the following content concisely in {max_length} characters or less:\n\n{content}",
    "detailed": (
        "Create a detailed summary of the following content, highlighting key points, "
        "in {max_length} characters or less:\n\n{content}"
    ),
    "technical": (
        "Create a technical summary of the following content, focusing on technical aspects "
        "and using appropriate terminology, in {max_length} characters or less:\n\n{content}"
    ),
    "casual": (
        "Summarize the following content in a casual, conversational style "
        "in {max_length} characters or less:\n\n{content}"
    ),
}


class PromptRegistry:
    """
    Registry of the prompts used by the AI service.
    """

    def __init__(self):
        """Initialize the registry with the default prompts."""
        self._prompts: Dict[str, PromptConfig] = {}
        self._register_default_prompts()

    def _register_default_prompts(self):
        """Register the default enrichment prompts."""

        for style, template in SUMMARY_STYLES.items():
            self.register_prompt(PromptConfig(
                name=f"summary_{style}",
                description=f"Summarizes page content ({style} style)",
                system_prompt="You are a professional content summarizer.",
                user_prompt_template=template,
                temperature=0.7
            ))

        self.register_prompt(PromptConfig(
            name="title",
            description="Writes a title for content that has none",
            system_prompt="You are a professional headline writer and SEO expert.",
            user_prompt_template=(
                "Create an engaging, SEO-friendly title for the following content, "
                "no longer than {max_length} characters:\n\n{content}"
            ),
            max_tokens=50,
            temperature=0.8
        ))

        self.register_prompt(PromptConfig(
            name="title_improve",
            description="Improves an existing title",
            system_prompt="You are a professional headline writer and SEO expert.",
            user_prompt_template=(
                "Based on the following content, suggest an improved, engaging title that is "
                "SEO-friendly. The current title is \"{current_title}\", but feel free to suggest "
                "a completely different title if appropriate. Title should be no longer than "
                "{max_length} characters:\n\n{content}"
            ),
            max_tokens=50,
            temperature=0.8
        ))

        self.register_prompt(PromptConfig(
            name="keywords",
            description="Extracts tag-worthy keywords",
            system_prompt="You are an SEO expert and keyword analyst.",
            user_prompt_template=(
                "Extract {max_keywords} relevant keywords or keyphrases from the following content. "
                "Provide them as a comma-separated list. Focus on terms that would work well as "
                "tags or for SEO:\n\n{content}"
            ),
            max_tokens=150,
            temperature=0.5
        ))

        self.register_prompt(PromptConfig(
            name="validate",
            description="Checks content against a list of rules",
            system_prompt=(
                "You are a content validator checking if text complies with specified rules. "
                "You respond with ONLY \"true\" or \"false\"."
            ),
            user_prompt_template=(
                "Validate if the following content complies with all the rules specified. "
                "Respond with ONLY \"true\" if all rules are satisfied, or \"false\" if any rule "
                "is violated.\n\nRULES:\n{rules}\n\nCONTENT:\n{content}"
            ),
            max_tokens=10,
            temperature=0.1
        ))

        self.register_prompt(PromptConfig(
            name="article_image",
            description="Image prompt for an article cover",
            system_prompt="",
            user_prompt_template=(
                "Create a professional, striking image for an article titled \"{title}\" "
                "about {category}. The article discusses: {summary}"
            )
        ))

    def register_prompt(self, config: PromptConfig) -> None:
        """
        Register a prompt configuration, replacing any with the same name.

        Args:
            config: The prompt configuration to register
        """
        self._prompts[config.name] = config

    def get_prompt(self, name: str) -> PromptConfig:
        """
        Get a prompt configuration by name.

        Args:
            name: The name of the prompt

        Returns:
            The prompt configuration

        Raises:
            ValueError: If no prompt with that name is registered
        """
        if name not in self._prompts:
            raise ValueError(f"Prompt '{name}' not found")
        return self._prompts[name]

    def list_prompts(self) -> List[str]:
        """
        Get a list of all registered prompt names.

        Returns:
            List of prompt names
        """
        return list(self._prompts.keys())


# Global prompt registry instance
prompt_registry = PromptRegistry()
