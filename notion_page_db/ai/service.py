"""
AI enrichment service for notion-page-db.

Wraps the OpenAI chat and image APIs. Every public method has a defined
fallback, so a failing or unconfigured AI backend degrades the enrichment
instead of stopping a sync run.
"""

import logging
import math
import time
from typing import List, Optional

from openai import OpenAI

from ..config import AIConfig
from ..models import ImageResult
from ..storage.download import download_file
from .registry import PromptConfig, PromptRegistry, SUMMARY_STYLES, prompt_registry


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def _clip_input(content: str, limit: int) -> str:
    return content[:limit] + "..." if len(content) > limit else content


class AIService:
    """
    Generates summaries, titles, keywords and images for content pages.
    """

    def __init__(self, ai_config: Optional[AIConfig] = None, client: Optional[OpenAI] = None,
                 state_manager=None, registry: Optional[PromptRegistry] = None):
        """
        Initialize the service.

        Args:
            ai_config: AI settings (model names, API key, provider)
            client: Pre-built OpenAI client; created from the config when omitted
            state_manager: Optional StateManager used to log every AI call
            registry: Prompt registry (defaults to the global one)
        """
        self.config = ai_config or AIConfig()
        self.model = self.config.model
        self.image_model = self.config.image_model
        self.state_manager = state_manager
        self.registry = registry or prompt_registry

        if client is not None:
            self.client = client
        elif self.config.provider == "openai" and self.config.api_key:
            self.client = OpenAI(api_key=self.config.api_key)
        else:
            self.client = None
            logging.warning("AI service is not configured; enrichment will use fallbacks")

    def _chat(self, prompt_config: PromptConfig, user_prompt: str,
              max_tokens: Optional[int] = None, page_id: Optional[str] = None) -> str:
        """
        Run one chat completion and log it.

        Args:
            prompt_config: Prompt settings for the task
            user_prompt: Rendered user prompt
            max_tokens: Overrides the prompt's token limit
            page_id: Related content page, for the call log

        Returns:
            The stripped response text

        Raises:
            RuntimeError: If the service is not configured or the response is empty
        """
        start_time = time.time()
        success = False
        error_message = None
        response_text = ""

        try:
            if self.client is None:
                raise RuntimeError("AI client is not configured")

            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt_config.system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens or prompt_config.max_tokens or self.config.max_tokens,
                temperature=prompt_config.temperature,
            )
            response_text = (response.choices[0].message.content or "").strip()
            if not response_text:
                raise RuntimeError("Empty response from AI service")

            success = True
            return response_text

        except Exception as e:
            error_message = str(e)
            raise
        finally:
            self._log_call(
                task_name=prompt_config.name,
                model_name=self.model,
                prompt=user_prompt,
                response=response_text,
                success=success,
                error_message=error_message,
                execution_time_ms=int((time.time() - start_time) * 1000),
                page_id=page_id
            )

    def _log_call(self, **kwargs) -> None:
        if not self.state_manager:
            return
        try:
            self.state_manager.log_ai_call(**kwargs)
        except Exception as log_error:
            logging.warning(f"Failed to log AI call: {log_error}")

    def generate_summary(self, content: str, max_length: int = 250, style: str = "concise",
                         page_id: Optional[str] = None) -> str:
        """
        Summarize content.

        Args:
            content: Text to summarize
            max_length: Maximum summary length in characters
            style: One of concise, detailed, technical, casual
            page_id: Related content page, for the call log

        Returns:
            The summary, or the truncated content if generation fails
        """
        if not content:
            return ""

        if style not in SUMMARY_STYLES:
            style = "casual"
        prompt_config = self.registry.get_prompt(f"summary_{style}")

        try:
            summary = self._chat(
                prompt_config,
                prompt_config.render(max_length=max_length, content=content),
                max_tokens=math.ceil(max_length / 4),
                page_id=page_id
            )
            return _truncate(summary, max_length)
        except Exception as e:
            logging.warning(f"Summary generation failed, using truncated content: {e}")
            return _truncate(content, max_length)

    def generate_title(self, content: str, current_title: Optional[str] = None, max_length: int = 70,
                       page_id: Optional[str] = None) -> str:
        """
        Suggest a title for content.

        Args:
            content: Page text
            current_title: Existing title to improve on, if any
            max_length: Maximum title length
            page_id: Related content page, for the call log

        Returns:
            The generated title, or the current title (or "Untitled") on failure
        """
        fallback = current_title or "Untitled"
        if not content:
            return fallback

        truncated = _clip_input(content, 2000)
        if current_title:
            prompt_config = self.registry.get_prompt("title_improve")
            user_prompt = prompt_config.render(
                current_title=current_title, max_length=max_length, content=truncated
            )
        else:
            prompt_config = self.registry.get_prompt("title")
            user_prompt = prompt_config.render(max_length=max_length, content=truncated)

        try:
            title = self._chat(prompt_config, user_prompt, page_id=page_id)
            title = title.strip().strip("\"'").strip()
            if not title:
                return fallback
            return _truncate(title, max_length)
        except Exception as e:
            logging.warning(f"Title generation failed, keeping '{fallback}': {e}")
            return fallback

    def generate_keywords(self, content: str, max_keywords: int = 10,
                          page_id: Optional[str] = None) -> List[str]:
        """
        Extract keywords from content.

        Args:
            content: Page text
            max_keywords: Maximum number of keywords
            page_id: Related content page, for the call log

        Returns:
            Keywords; on failure, long words taken from the content
        """
        if not content:
            return []

        prompt_config = self.registry.get_prompt("keywords")
        try:
            answer = self._chat(
                prompt_config,
                prompt_config.render(max_keywords=max_keywords, content=_clip_input(content, 3000)),
                page_id=page_id
            )
            keywords = [keyword.strip() for keyword in answer.split(",")]
            return [keyword for keyword in keywords if keyword][:max_keywords]
        except Exception as e:
            logging.warning(f"Keyword generation failed, using simple word extraction: {e}")
            words = [word.lower() for word in content.split() if len(word) > 5]
            return list(dict.fromkeys(words))[:max_keywords]

    def generate_image(self, prompt: str, size: str = "1024x1024", style: str = "vivid",
                       quality: str = "standard", local_path: Optional[str] = None) -> ImageResult:
        """
        Generate an image from a prompt.

        Args:
            prompt: Image description
            size: Image size accepted by the image model
            style: "vivid" or "natural"
            quality: "standard" or "hd"
            local_path: If given, the image is also downloaded to this path

        Returns:
            ImageResult with the image URL, or success=False and an error
        """
        start_time = time.time()
        result = ImageResult(success=False, prompt=prompt)

        try:
            if self.client is None:
                raise RuntimeError("AI client is not configured")

            response = self.client.images.generate(
                model=self.image_model,
                prompt=prompt,
                n=1,
                size=size,
                style=style,
                quality=quality,
                response_format="url",
            )
            image_url = response.data[0].url if response.data else None
            if not image_url:
                raise RuntimeError("No image URL returned from API")

            result = ImageResult(success=True, url=image_url, prompt=prompt)
            if local_path:
                result.local_path = str(download_file(image_url, local_path))

            logging.info(f"Generated image for prompt: {prompt[:60]}")

        except Exception as e:
            logging.error(f"Error generating image: {e}")
            result = ImageResult(success=False, url=result.url, prompt=prompt, error=str(e))

        self._log_call(
            task_name="image",
            model_name=self.image_model,
            prompt=prompt,
            response=result.url or "",
            success=result.success,
            error_message=result.error,
            execution_time_ms=int((time.time() - start_time) * 1000),
            page_id=None
        )
        return result

    def validate_content(self, content: str, rules: List[str]) -> bool:
        """
        Ask the model whether content satisfies every rule.

        Args:
            content: Text to check
            rules: Plain-language rules

        Returns:
            True only if the model answers "true"; False on any failure
        """
        prompt_config = self.registry.get_prompt("validate")
        rules_text = "\n".join(f"Rule {index}: {rule}" for index, rule in enumerate(rules, start=1))

        try:
            answer = self._chat(
                prompt_config,
                prompt_config.render(rules=rules_text, content=_clip_input(content, 3000))
            )
            return answer.strip().lower() == "true"
        except Exception as e:
            logging.error(f"Error validating content: {e}")
            return False
