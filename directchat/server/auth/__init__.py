"""Token and captcha handling for the relay server."""

from .captcha import (
    CaptchaProvider,
    ExternalCaptcha,
    NoCaptcha,
    SimpleMathCaptcha,
    create_captcha_provider,
    register_captcha_provider,
    registered_captcha_providers,
)
from .token_manager import SessionToken, TokenManager

__all__ = [
    "CaptchaProvider",
    "ExternalCaptcha",
    "NoCaptcha",
    "SessionToken",
    "SimpleMathCaptcha",
    "TokenManager",
    "create_captcha_provider",
    "register_captcha_provider",
    "registered_captcha_providers",
]
