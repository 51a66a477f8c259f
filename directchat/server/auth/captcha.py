"""
Captcha providers gating relay authentication.

A provider hands out a per-player challenge and later checks the answer.
Challenges are single use: any answer attempt consumes the stored challenge,
so a wrong answer always leads to a fresh one.

New providers are added with ``register_captcha_provider`` and selected by
name from configuration; the request handler only sees the
``CaptchaProvider`` interface.
"""

import random
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

from ...exceptions import ConfigurationError
from ...structured_logging.enhanced_logging_config import get_logger

logger = get_logger("auth.captcha")


class CaptchaProvider(ABC):
    """Per-player challenge/answer capability."""

    name: str = "abstract"

    @property
    def required(self) -> bool:
        """Whether authentication must pass a challenge."""
        return True

    @abstractmethod
    def challenge(self, player_id: str) -> str | None:
        """Create a new challenge for the player and return its display payload."""

    @abstractmethod
    def validate(self, player_id: str, answer: str) -> bool:
        """Check and consume the player's pending challenge."""


class NoCaptcha(CaptchaProvider):
    """Provider used when no bot mitigation is configured."""

    name = "none"

    @property
    def required(self) -> bool:
        return False

    def challenge(self, player_id: str) -> str | None:
        return None

    def validate(self, player_id: str, answer: str) -> bool:
        return True


class SimpleMathCaptcha(CaptchaProvider):
    """Asks for the sum of two numbers between 1 and 10."""

    name = "simple"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.SystemRandom()
        self._pending: dict[str, str] = {}
        self._last_prompt: dict[str, str] = {}
        self._lock = threading.Lock()

    def challenge(self, player_id: str) -> str:
        with self._lock:
            # A re-issued challenge never repeats the one the player just saw
            while True:
                a = self._rng.randint(1, 10)
                b = self._rng.randint(1, 10)
                prompt = f"What is {a} + {b}?"
                if prompt != self._last_prompt.get(player_id):
                    break
            self._pending[player_id] = str(a + b)
            self._last_prompt[player_id] = prompt
        return prompt

    def validate(self, player_id: str, answer: str) -> bool:
        with self._lock:
            expected = self._pending.pop(player_id, None)
            solved = expected is not None and answer is not None and expected == answer.strip()
            if solved:
                self._last_prompt.pop(player_id, None)
        return solved

    def has_pending(self, player_id: str) -> bool:
        with self._lock:
            return player_id in self._pending


ChallengeHook = Callable[[str], str | None]
ValidateHook = Callable[[str, str], bool]


class ExternalCaptcha(CaptchaProvider):
    """
    Captcha served by a third-party anti-bot service.

    The service is attached with ``attach``; until then challenges come from
    ``SimpleMathCaptcha`` so authentication keeps working.
    """

    def __init__(self, name: str, fallback: CaptchaProvider | None = None) -> None:
        self.name = name
        self._fallback = fallback or SimpleMathCaptcha()
        self._challenge_hook: ChallengeHook | None = None
        self._validate_hook: ValidateHook | None = None

    def attach(self, challenge_hook: ChallengeHook, validate_hook: ValidateHook) -> None:
        self._challenge_hook = challenge_hook
        self._validate_hook = validate_hook
        logger.info("External captcha backend attached", provider=self.name)

    @property
    def attached(self) -> bool:
        return self._challenge_hook is not None and self._validate_hook is not None

    def challenge(self, player_id: str) -> str | None:
        if self._challenge_hook is None:
            logger.debug("External captcha backend not attached, using simple captcha", provider=self.name)
            return self._fallback.challenge(player_id)
        return self._challenge_hook(player_id)

    def validate(self, player_id: str, answer: str) -> bool:
        if self._validate_hook is None:
            return self._fallback.validate(player_id, answer)
        return self._validate_hook(player_id, answer)


_PROVIDERS: dict[str, Callable[[], CaptchaProvider]] = {
    "none": NoCaptcha,
    "simple": SimpleMathCaptcha,
    "nantibot": lambda: ExternalCaptcha("nantibot"),
    "captcha-api": lambda: ExternalCaptcha("captcha-api"),
}


def register_captcha_provider(name: str, factory: Callable[[], CaptchaProvider]) -> None:
    """Make a provider selectable by name."""
    _PROVIDERS[name.lower()] = factory


def registered_captcha_providers() -> tuple[str, ...]:
    return tuple(_PROVIDERS)


def create_captcha_provider(name: str) -> CaptchaProvider:
    """
    Build the provider configured under ``name``.

    Raises:
        ConfigurationError: If no provider is registered under that name
    """
    factory = _PROVIDERS.get(name.lower())
    if factory is None:
        raise ConfigurationError(f"Unknown captcha provider '{name}'", config_key="captcha_provider")
    provider = factory()
    logger.info("Captcha provider selected", provider=provider.name, required=provider.required)
    return provider
