"""Tests for character line generation."""

import os
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import openai

from text_generator import DEFAULT_MODEL, TextGenerator


def completion(content):
    response = MagicMock()
    response.choices[0].message.content = content
    return response


class TextGeneratorTests(unittest.IsolatedAsyncioTestCase):
    async def test_disabled_without_api_key(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            generator = TextGenerator()
        self.assertFalse(generator.enabled)
        self.assertEqual(generator.model, DEFAULT_MODEL)
        self.assertEqual(await generator.generate_character_line("hello"), "")

    async def test_model_from_environment(self) -> None:
        with patch.dict(os.environ, {"OPENAI_MODEL": "gpt-4.1-mini"}, clear=True):
            generator = TextGenerator(api_key="sk-test")
        self.assertEqual(generator.model, "gpt-4.1-mini")

    async def test_returns_stripped_line(self) -> None:
        generator = TextGenerator(api_key="sk-test", model="test-model")
        generator.client = MagicMock()
        generator.client.chat.completions.create = AsyncMock(return_value=completion("  Onward!  \n"))

        self.assertEqual(await generator.generate_character_line("Cheer me on"), "Onward!")

        kwargs = generator.client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertEqual(kwargs["messages"][-1], {"role": "user", "content": "Cheer me on"})

    async def test_empty_content(self) -> None:
        generator = TextGenerator(api_key="sk-test")
        generator.client = MagicMock()
        generator.client.chat.completions.create = AsyncMock(return_value=completion(None))
        self.assertEqual(await generator.generate_character_line("x"), "")

    async def test_api_error_returns_empty_string(self) -> None:
        generator = TextGenerator(api_key="sk-test")
        generator.client = MagicMock()
        generator.client.chat.completions.create = AsyncMock(side_effect=openai.OpenAIError("rate limited"))

        with self.assertLogs("text_generator", level="ERROR"):
            self.assertEqual(await generator.generate_character_line("x"), "")


if __name__ == "__main__":
    unittest.main()
