"""
Unit tests for the AI enrichment service.

The OpenAI client is replaced with a MagicMock; no network access.
"""

import unittest
from unittest.mock import MagicMock, patch

from notion_page_db.ai import AIService
from notion_page_db.config import AIConfig


def chat_response(text):
    return MagicMock(choices=[MagicMock(message=MagicMock(content=text))])


class TestAIServiceSetup(unittest.TestCase):
    """Test client construction."""

    @patch('notion_page_db.ai.service.OpenAI')
    def test_client_created_from_config(self, mock_openai):
        """Test an OpenAI client is built when a key is configured."""
        service = AIService(AIConfig(api_key="sk-test"))

        mock_openai.assert_called_once_with(api_key="sk-test")
        self.assertIs(service.client, mock_openai.return_value)

    @patch('notion_page_db.ai.service.OpenAI')
    def test_no_client_without_key(self, mock_openai):
        """Test the service runs unconfigured without a key."""
        service = AIService(AIConfig(api_key=""))

        mock_openai.assert_not_called()
        self.assertIsNone(service.client)


class TestAIServiceFallbacks(unittest.TestCase):
    """Test behaviour without a working AI backend."""

    def setUp(self):
        """Set up an unconfigured service."""
        self.service = AIService(AIConfig(provider="none"))

    def test_summary_falls_back_to_truncated_content(self):
        """Test the summary is the truncated content."""
        content = "x" * 300
        self.assertEqual(self.service.generate_summary(content, max_length=250), "x" * 247 + "...")
        self.assertEqual(self.service.generate_summary("short text"), "short text")

    def test_summary_of_empty_content(self):
        """Test empty content has an empty summary."""
        self.assertEqual(self.service.generate_summary(""), "")

    def test_title_falls_back(self):
        """Test the current title, or Untitled, is kept."""
        self.assertEqual(self.service.generate_title("Some content", "Closures"), "Closures")
        self.assertEqual(self.service.generate_title("Some content"), "Untitled")
        self.assertEqual(self.service.generate_title("", "Closures"), "Closures")

    def test_keywords_fall_back_to_long_words(self):
        """Test distinct long words are used as keywords."""
        keywords = self.service.generate_keywords("Closures capture variables. Closures are useful", max_keywords=2)
        self.assertEqual(keywords, ["closures", "capture"])

    def test_image_generation_fails_cleanly(self):
        """Test image generation reports an error."""
        result = self.service.generate_image("A cover image")

        self.assertFalse(result.success)
        self.assertIn("not configured", result.error)

    def test_validate_content_is_false(self):
        """Test validation fails closed."""
        self.assertFalse(self.service.validate_content("text", ["Must be English"]))


class TestAIServiceWithClient(unittest.TestCase):
    """Test calls against a mocked OpenAI client."""

    def setUp(self):
        """Set up a service with a mocked client and call log."""
        self.client = MagicMock()
        self.state_manager = MagicMock()
        self.service = AIService(AIConfig(api_key="sk-test"), client=self.client, state_manager=self.state_manager)

    def test_generate_summary(self):
        """Test the summary request and its call log entry."""
        self.client.chat.completions.create.return_value = chat_response("  A short summary.  ")

        summary = self.service.generate_summary("Long content", max_length=250, style="detailed", page_id="p1")

        self.assertEqual(summary, "A short summary.")
        kwargs = self.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-3.5-turbo")
        self.assertEqual(kwargs["max_tokens"], 63)
        self.assertIn("detailed summary", kwargs["messages"][1]["content"])

        log_kwargs = self.state_manager.log_ai_call.call_args.kwargs
        self.assertEqual(log_kwargs["task_name"], "summary_detailed")
        self.assertTrue(log_kwargs["success"])
        self.assertEqual(log_kwargs["page_id"], "p1")

    def test_summary_is_truncated(self):
        """Test an over-long answer is cut to the limit."""
        self.client.chat.completions.create.return_value = chat_response("y" * 100)

        self.assertEqual(self.service.generate_summary("content", max_length=20), "y" * 17 + "...")

    def test_unknown_style_uses_casual(self):
        """Test unknown summary styles fall back to casual."""
        self.client.chat.completions.create.return_value = chat_response("Summary")

        self.service.generate_summary("content", style="poetic")

        prompt = self.client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        self.assertIn("casual", prompt)

    def test_failed_call_is_logged(self):
        """Test API errors fall back and are recorded as failed calls."""
        self.client.chat.completions.create.side_effect = Exception("rate limited")

        self.assertEqual(self.service.generate_summary("content"), "content")

        log_kwargs = self.state_manager.log_ai_call.call_args.kwargs
        self.assertFalse(log_kwargs["success"])
        self.assertEqual(log_kwargs["error_message"], "rate limited")

    def test_empty_answer_falls_back(self):
        """Test an empty answer counts as a failure."""
        self.client.chat.completions.create.return_value = chat_response("")

        self.assertEqual(self.service.generate_title("content", "Closures"), "Closures")

    def test_generate_title_strips_quotes(self):
        """Test quotes around the generated title are removed."""
        self.client.chat.completions.create.return_value = chat_response('"Mastering Closures"')

        title = self.service.generate_title("content", "Closures")

        self.assertEqual(title, "Mastering Closures")
        prompt = self.client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        self.assertIn('"Closures"', prompt)

    def test_generate_title_clips_input(self):
        """Test long content is clipped before it is sent."""
        self.client.chat.completions.create.return_value = chat_response("Title")

        self.service.generate_title("z" * 5000)

        prompt = self.client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        self.assertIn("z" * 2000 + "...", prompt)
        self.assertNotIn("z" * 2001, prompt)

    def test_generate_keywords(self):
        """Test comma-separated keywords are split and trimmed."""
        self.client.chat.completions.create.return_value = chat_response("closures, scope , , callbacks")

        self.assertEqual(self.service.generate_keywords("content"), ["closures", "scope", "callbacks"])

    def test_validate_content(self):
        """Test only an explicit true passes."""
        self.client.chat.completions.create.return_value = chat_response("True")
        self.assertTrue(self.service.validate_content("text", ["Rule one", "Rule two"]))

        prompt = self.client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        self.assertIn("Rule 1: Rule one\nRule 2: Rule two", prompt)

        self.client.chat.completions.create.return_value = chat_response("false")
        self.assertFalse(self.service.validate_content("text", ["Rule one"]))

    @patch('notion_page_db.ai.service.download_file')
    def test_generate_image(self, mock_download):
        """Test a generated image is downloaded when a path is given."""
        self.client.images.generate.return_value = MagicMock(data=[MagicMock(url="https://img.example.com/1.png")])
        mock_download.return_value = "/tmp/1.png"

        result = self.service.generate_image("A cover", local_path="/tmp/1.png")

        self.assertTrue(result.success)
        self.assertEqual(result.url, "https://img.example.com/1.png")
        self.assertEqual(result.local_path, "/tmp/1.png")
        mock_download.assert_called_once_with("https://img.example.com/1.png", "/tmp/1.png")
        kwargs = self.client.images.generate.call_args.kwargs
        self.assertEqual(kwargs["model"], "dall-e-3")
        self.assertEqual(kwargs["size"], "1024x1024")

    def test_generate_image_without_url(self):
        """Test an empty image response is a failure."""
        self.client.images.generate.return_value = MagicMock(data=[])

        result = self.service.generate_image("A cover")

        self.assertFalse(result.success)
        self.assertEqual(result.error, "No image URL returned from API")


if __name__ == '__main__':
    unittest.main()
