"""
Character line generation using the OpenAI API.

Lines are decoration only: any failure is logged and an empty string is
returned so the caller can send its embed without a description.
"""

import logging
import os
from typing import Optional

import openai

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class TextGenerator:
    """Generates short in-character lines for bot messages."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """
        Initialize the text generator.

        Args:
            api_key: OpenAI API key (falls back to OPENAI_API_KEY)
            model: Chat model name (falls back to OPENAI_MODEL, then DEFAULT_MODEL)
        """
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL
        self.client: Optional[openai.AsyncOpenAI] = None

        if api_key:
            self.client = openai.AsyncOpenAI(api_key=api_key)
            logger.info(f"OpenAI API initialized for character lines (model: {self.model})")
        else:
            logger.warning("No OpenAI API key provided. Character lines are disabled.")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def generate_character_line(self, prompt: str) -> str:
        """
        Generate a line of dialogue for the given prompt.

        Returns:
            The generated text, stripped, or "" on error or when disabled
        """
        if not self.enabled:
            return ""

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You write short lines of character dialogue for a Discord task bot."},
                    {"role": "user", "content": prompt}
                ],
                temperature=0.9,
                max_tokens=150
            )
            content = response.choices[0].message.content or ""
            return content.strip()

        except openai.OpenAIError as e:
            logger.error(f"Error generating character line: {e}")
            return ""
