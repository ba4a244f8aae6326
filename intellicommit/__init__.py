"""intellicommit - fault-tolerant AI commit message generation."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "load_config",
    # Engine
    "CommitEngine", "GenerationResult",
    # Building blocks
    "analyze_diff", "DiffAnalysis", "ChangeType", "Complexity",
    "ResponseCache", "HealthTracker", "RetryExecutor", "RaceCoordinator",
    "LocalGenerator", "sanitize",
    # Exceptions
    "IntelliCommitError", "ValidationError", "InvalidInput", "InternalFault",
    "LLMError", "ProviderError", "AllProvidersExhausted",
]


def __getattr__(name: str):
    """Lazy attribute loader so importing the package stays cheap.

    Provider drivers pull in httpx and the OpenAI SDK; they are only
    imported once something that needs them is accessed.
    """
    mapping = {
        "Config": ("intellicommit.config", "Config"),
        "load_config": ("intellicommit.config", "load_config"),
        "CommitEngine": ("intellicommit.engine", "CommitEngine"),
        "GenerationResult": ("intellicommit.engine", "GenerationResult"),
        "analyze_diff": ("intellicommit.analysis", "analyze_diff"),
        "DiffAnalysis": ("intellicommit.analysis", "DiffAnalysis"),
        "ChangeType": ("intellicommit.analysis", "ChangeType"),
        "Complexity": ("intellicommit.analysis", "Complexity"),
        "ResponseCache": ("intellicommit.cache", "ResponseCache"),
        "HealthTracker": ("intellicommit.health", "HealthTracker"),
        "RetryExecutor": ("intellicommit.retry", "RetryExecutor"),
        "RaceCoordinator": ("intellicommit.race", "RaceCoordinator"),
        "LocalGenerator": ("intellicommit.local", "LocalGenerator"),
        "sanitize": ("intellicommit.sanitize", "sanitize"),
        "IntelliCommitError": ("intellicommit.exceptions", "IntelliCommitError"),
        "ValidationError": ("intellicommit.exceptions", "ValidationError"),
        "InvalidInput": ("intellicommit.exceptions", "InvalidInput"),
        "InternalFault": ("intellicommit.exceptions", "InternalFault"),
        "LLMError": ("intellicommit.exceptions", "LLMError"),
        "ProviderError": ("intellicommit.exceptions", "ProviderError"),
        "AllProvidersExhausted": ("intellicommit.exceptions", "AllProvidersExhausted"),
    }
    if name in mapping:
        mod_name, attr = mapping[name]
        mod = import_module(mod_name)
        value = getattr(mod, attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'intellicommit' has no attribute {name!r}")


if TYPE_CHECKING:
    from .analysis import ChangeType, Complexity, DiffAnalysis, analyze_diff
    from .cache import ResponseCache
    from .config import Config, load_config
    from .engine import CommitEngine, GenerationResult
    from .exceptions import (
        AllProvidersExhausted,
        IntelliCommitError,
        InternalFault,
        InvalidInput,
        LLMError,
        ProviderError,
        ValidationError,
    )
    from .health import HealthTracker
    from .local import LocalGenerator
    from .race import RaceCoordinator
    from .retry import RetryExecutor
    from .sanitize import sanitize
