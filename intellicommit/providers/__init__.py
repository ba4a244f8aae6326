"""Thin adapters around external text-generation providers."""

from .base import BaseDriver
from .gemini_driver import GeminiDriver
from .huggingface_driver import HuggingFaceDriver
from .openai_driver import AIMLDriver, OpenAIDriver
from .registry import DRIVERS, build_drivers

__all__ = [
    "AIMLDriver",
    "BaseDriver",
    "DRIVERS",
    "GeminiDriver",
    "HuggingFaceDriver",
    "OpenAIDriver",
    "build_drivers",
]
