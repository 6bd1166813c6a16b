"""
AI text generation service.
Produces encouragement, nudge, alert and quote messages through a provider.
Any provider failure is replaced by canned text so callers always get a string.
"""
import os
import random
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from questify.constants import (
    MESSAGE_COMPLETION,
    MESSAGE_NUDGE,
    MESSAGE_FAILURE_ALERT,
    MESSAGE_DASHBOARD_QUOTE,
    MESSAGE_BADGE_UNLOCK,
    TEXT_PROVIDER_GEMINI,
    TEXT_PROVIDER_STATIC,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GEMINI_API_URL,
    TEXT_GENERATION_TIMEOUT_SECONDS,
)
from questify.exceptions import DependencyUnavailableException

logger = logging.getLogger("questify.text_generation")

PROMPTS = {
    MESSAGE_COMPLETION: (
        "Generate a short, enthusiastic 1-sentence congratulations for completing "
        "a {goal_type} goal. Make it fun and encouraging!"
    ),
    MESSAGE_NUDGE: (
        'Generate a friendly, encouraging 1-sentence nudge to motivate someone to work '
        'on their "{goal_title}" goal in the "{goal_type}" category. Be supportive but '
        'motivating. Only respond with the nudge message, nothing else.'
    ),
    MESSAGE_FAILURE_ALERT: (
        "Generate a constructive, motivating 1-sentence message for someone who is "
        "behind on their {goal_type} goal. Be empathetic but encouraging."
    ),
    MESSAGE_DASHBOARD_QUOTE: (
        "Generate an inspiring 1-sentence motivational quote about achieving goals and "
        "self-improvement. Make it powerful and memorable. Only respond with the quote, "
        "nothing else."
    ),
    MESSAGE_BADGE_UNLOCK: (
        'Generate a celebratory 1-sentence message for unlocking the "{badge_name}" '
        'achievement. Make it exciting!'
    ),
}

FALLBACK_MESSAGES = {
    MESSAGE_COMPLETION: [
        "That's the spirit! You're crushing it!",
        "Absolutely amazing work! Keep this momentum going!",
        "You did it! That's what I'm talking about!",
        "Fantastic job! You're unstoppable!",
        "You nailed it! Keep up the incredible work!",
    ],
    MESSAGE_NUDGE: [
        "{goal_type_title} is calling! Get after it today!",
        "Don't let today slip by - crush your {goal_type} goal!",
        "You've got the power to make progress today. Let's go!",
        "Every step counts. Make your {goal_type} goal happen!",
        "Keep the momentum going - your future self will thank you!",
        "Make today count. Your {goal_type} goal is waiting for you!",
    ],
    MESSAGE_FAILURE_ALERT: [
        "You're a bit behind, but it's never too late to catch up. Let's do this!",
        "Every day is a fresh start. One task today gets you back on track!",
        "Falling behind happens to everyone. What matters is the next step!",
    ],
    MESSAGE_DASHBOARD_QUOTE: [
        "Success is the sum of small efforts repeated day in and day out.",
        "The only way to do great work is to love what you do.",
        "Believe you can and you're halfway there.",
        "It always seems impossible until it's done.",
        "Don't watch the clock; do what it does. Keep going.",
        "Strive for progress, not perfection.",
        "Great things never came from comfort zones.",
    ],
    MESSAGE_BADGE_UNLOCK: [
        "Congratulations on unlocking {badge_name}!",
        "{badge_name} unlocked! Your hard work is paying off!",
    ],
}


def _with_defaults(context: Optional[dict]) -> dict:
    values = {"goal_type": "personal", "goal_title": "goal", "badge_name": "a new achievement"}
    values.update({key: value for key, value in (context or {}).items() if value})
    values["goal_type_title"] = str(values["goal_type"]).capitalize()
    return values


def _clean(text: str) -> str:
    """Strip surrounding quotes, asterisks and whitespace"""
    return text.strip().strip("*\"' \n\t").strip()


class TextProvider(ABC):
    """Turns a prompt into raw text, raising DependencyUnavailableException on failure"""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        pass


class StaticTextProvider(TextProvider):
    """Provider used when no AI backend is configured; always defers to fallbacks"""

    def generate(self, prompt: str) -> str:
        raise DependencyUnavailableException("text generation", "no provider configured")


class GeminiTextProvider(TextProvider):
    """Google Gemini generateContent endpoint over HTTP"""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        api_url: str = DEFAULT_GEMINI_API_URL,
        timeout: float = TEXT_GENERATION_TIMEOUT_SECONDS
    ):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        url = f"{self.api_url}/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as exc:
            raise DependencyUnavailableException("Gemini", str(exc) or type(exc).__name__)

        if response.status_code >= 400:
            raise DependencyUnavailableException("Gemini", f"HTTP {response.status_code}")

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise DependencyUnavailableException("Gemini", "malformed response")

        if not text or not text.strip():
            raise DependencyUnavailableException("Gemini", "empty response")
        return text


def _get_provider() -> TextProvider:
    api_key = os.getenv("GEMINI_API_KEY")
    default_provider = TEXT_PROVIDER_GEMINI if api_key else TEXT_PROVIDER_STATIC
    provider_name = os.getenv("QUESTIFY_TEXT_PROVIDER", default_provider).lower()

    if provider_name == TEXT_PROVIDER_GEMINI and api_key:
        return GeminiTextProvider(
            api_key=api_key,
            model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            api_url=os.getenv("GEMINI_API_URL", DEFAULT_GEMINI_API_URL),
        )
    return StaticTextProvider()


class TextGenerator:
    """Generates user-facing messages with a canned fallback per kind"""

    def __init__(self, provider: Optional[TextProvider] = None):
        self.provider = provider or _get_provider()

    def generate(self, kind: str, context: Optional[dict] = None) -> str:
        """
        Generate a message of the given kind.

        Args:
            kind: completion, nudge, failure_alert, dashboard_quote or badge_unlock
            context: Template values (goal_type, goal_title, badge_name)

        Returns:
            Generated text, or a canned message if generation failed
        """
        values = _with_defaults(context)
        prompt = PROMPTS.get(kind, PROMPTS[MESSAGE_DASHBOARD_QUOTE]).format(**values)

        try:
            text = _clean(self.provider.generate(prompt))
            if text:
                return text
            logger.warning(f"Empty {kind} message from provider, using fallback")
        except DependencyUnavailableException as e:
            logger.warning(f"Text generation for {kind} failed: {e}")
        except Exception as e:
            logger.warning(f"Unexpected text generation error for {kind}: {e}")

        return self.fallback(kind, values)

    @staticmethod
    def fallback(kind: str, context: Optional[dict] = None) -> str:
        """Pick a canned message for the kind"""
        values = _with_defaults(context)
        options = FALLBACK_MESSAGES.get(kind, FALLBACK_MESSAGES[MESSAGE_DASHBOARD_QUOTE])
        return random.choice(options).format(**values)
