"""Map provider names to driver classes and build the configured set."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Type

from ..config import Config
from .base import BaseDriver
from .gemini_driver import GeminiDriver
from .huggingface_driver import HuggingFaceDriver
from .openai_driver import AIMLDriver, OpenAIDriver

DRIVERS: Dict[str, Type[BaseDriver]] = {
    "aiml": AIMLDriver,
    "gemini": GeminiDriver,
    "huggingface": HuggingFaceDriver,
    "freehf": HuggingFaceDriver,
    "openai": OpenAIDriver,
}


def build_drivers(
    config: Config, env: Optional[Mapping[str, str]] = None
) -> List[BaseDriver]:
    """Instantiate drivers for every enabled provider with credentials."""
    drivers: List[BaseDriver] = []
    for settings in config.configured_providers(env):
        driver_cls = DRIVERS.get(settings.name)
        if driver_cls is None:
            continue
        drivers.append(driver_cls(settings, env))
    return drivers
