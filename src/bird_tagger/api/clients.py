"""
Vision client implementations for the supported AI services.

Every client takes the model identifier per call so the routing policy can run
the same image against a cheap first-pass model and a stronger fallback.
"""

import os
import base64
from typing import Optional, Union

import anthropic
from openai import OpenAI
import google.generativeai as genai

from ..utils.log_utils import get_logger
from .base import ClassificationServiceError, VisionClient
from .prompt import PROMPT_TEMPLATE, BirdsResponse

logger = get_logger(__name__)


class OpenAIClient(VisionClient):
    """Client for OpenAI's GPT vision models."""

    default_models = ("gpt-4o-mini", "gpt-4o")

    def _validate_api_key(self) -> None:
        """Validate OpenAI API key."""
        key = self.api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise ValueError("OPENAI_API_KEY environment variable not set")
        self.api_key = key
        self.client = OpenAI(api_key=key)

    def _call_api(self, image_b64: str, model: str) -> Optional[str]:
        """Make API call to OpenAI in JSON mode."""
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": PROMPT_TEMPLATE},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"}
                            }
                        ]
                    }
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
            )
        except Exception as err:
            logger.error("OpenAI API request failed: %s", err)
            raise ClassificationServiceError(f"OpenAI API error: {err}") from err

        return response.choices[0].message.content


class ClaudeClient(VisionClient):
    """Client for Anthropic's Claude API."""

    default_models = ("claude-3-haiku-20240307", "claude-3-5-sonnet-20241022")

    def _validate_api_key(self) -> None:
        """Validate Anthropic API key."""
        key = self.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")
        self.api_key = key
        self.client = anthropic.Anthropic(api_key=key)

    def _call_api(self, image_b64: str, model: str) -> Union[str, dict]:
        """Make API call to Claude, forcing the answer through a tool schema."""
        try:
            response = self.client.messages.create(
                model=model,
                max_tokens=1024,
                temperature=0.2,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "text",
                                "text": PROMPT_TEMPLATE
                            },
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": "image/jpeg",
                                    "data": image_b64
                                }
                            }
                        ]
                    }
                ],
                tools=[
                    {
                        "name": "report_birds",
                        "description": "Report the birds identified in the image.",
                        "input_schema": BirdsResponse.model_json_schema()
                    }
                ],
                tool_choice={"type": "tool", "name": "report_birds"}
            )
        except Exception as err:
            logger.error("Claude API request failed: %s", err)
            raise ClassificationServiceError(f"Claude API error: {err}") from err

        block = response.content[0] if response.content else None
        if block is None:
            return None
        if block.type == "tool_use":
            return block.input
        # Fallback to text response if the tool call was skipped
        return getattr(block, "text", None)


class GeminiClient(VisionClient):
    """Client for Google's Gemini API."""

    default_models = ("gemini-1.5-flash", "gemini-1.5-pro")

    def _validate_api_key(self) -> None:
        """Validate Google API key."""
        key = self.api_key or os.getenv("GOOGLE_API_KEY")
        if not key:
            raise ValueError("GOOGLE_API_KEY environment variable not set")
        self.api_key = key
        genai.configure(api_key=key)

    def _call_api(self, image_b64: str, model: str) -> Optional[str]:
        """Make API call to Gemini in JSON response mode."""
        try:
            generative_model = genai.GenerativeModel(
                model,
                generation_config={
                    "temperature": 0.2,
                    "candidate_count": 1,
                    "response_mime_type": "application/json",
                }
            )
            response = generative_model.generate_content([
                PROMPT_TEMPLATE,
                {
                    "mime_type": "image/jpeg",
                    "data": base64.b64decode(image_b64)
                }
            ])
        except Exception as err:
            logger.error("Gemini API request failed: %s", err)
            raise ClassificationServiceError(f"Gemini API error: {err}") from err

        try:
            return response.text.strip()
        except ValueError:
            # Blocked or empty candidates have no text part
            logger.warning("Gemini returned no text for model %s", model)
            return None


CLIENTS = {
    "openai": OpenAIClient,
    "claude": ClaudeClient,
    "gemini": GeminiClient,
}


def get_client(api_name: str, **kwargs) -> VisionClient:
    """Factory function to create vision client instances.

    Args:
        api_name: Name of the API ('openai', 'claude', 'gemini')
        **kwargs: Additional arguments passed to the client constructor

    Returns:
        Configured client instance
    """
    client_cls = CLIENTS.get(api_name.lower())
    if client_cls is None:
        raise ValueError(f"Unsupported API: {api_name}")
    return client_cls(**kwargs)
