"""Configuration management for intellicommit."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

CONFIG_DIR_NAME = ".intellicommit"
CONFIG_FILE_NAME = "config.json"
ENV_PREFIX = "INTELLICOMMIT_"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ProviderSettings:
    """Static description of one external text-generation provider."""

    name: str
    display_name: str
    priority: int
    endpoint: str
    model: str
    timeout: float
    api_key_env: Optional[str] = None
    requires_key: bool = True
    models: tuple[str, ...] = ()
    # Seed values for the health tracker
    seed_success_rate: float = 0.9
    seed_response_time_ms: float = 3000.0

    def resolve_api_key(self, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Return the credential from the configured environment variable."""
        if not self.api_key_env:
            return None
        value = (env if env is not None else os.environ).get(self.api_key_env)
        return value or None

    def is_configured(self, env: Optional[Mapping[str, str]] = None) -> bool:
        if not self.requires_key:
            return True
        return bool(self.resolve_api_key(env))


DEFAULT_PROVIDERS: Dict[str, ProviderSettings] = {
    "aiml": ProviderSettings(
        name="aiml",
        display_name="AIML",
        priority=1,
        endpoint="https://api.aimlapi.com/v1",
        model="google/gemma-2-2b-it",
        timeout=8.0,
        api_key_env="AIML_API_KEY",
        seed_success_rate=0.95,
        seed_response_time_ms=2500.0,
    ),
    "gemini": ProviderSettings(
        name="gemini",
        display_name="Gemini",
        priority=2,
        endpoint="https://generativelanguage.googleapis.com/v1beta/models",
        model="gemini-2.0-flash",
        timeout=8.0,
        api_key_env="GEMINI_API_KEY",
        seed_success_rate=0.90,
        seed_response_time_ms=3000.0,
    ),
    "huggingface": ProviderSettings(
        name="huggingface",
        display_name="HuggingFace",
        priority=3,
        endpoint="https://api-inference.huggingface.co/models",
        model="Qwen/Qwen2.5-7B-Instruct",
        # HF inference endpoints can cold-start
        timeout=20.0,
        api_key_env="HUGGING_FACE_TOKEN",
        models=("Qwen/Qwen2.5-7B-Instruct", "microsoft/DialoGPT-medium", "gpt2"),
        seed_success_rate=0.85,
        seed_response_time_ms=5000.0,
    ),
    "freehf": ProviderSettings(
        name="freehf",
        display_name="FreeHF",
        priority=4,
        endpoint="https://api-inference.huggingface.co/models",
        model="microsoft/DialoGPT-medium",
        timeout=20.0,
        requires_key=False,
        models=("microsoft/DialoGPT-medium", "gpt2", "distilgpt2"),
        seed_success_rate=0.70,
        seed_response_time_ms=4000.0,
    ),
    "openai": ProviderSettings(
        name="openai",
        display_name="OpenAI",
        priority=5,
        endpoint="https://api.openai.com/v1",
        model="gpt-3.5-turbo",
        timeout=8.0,
        api_key_env="OPENAI_API_KEY",
        seed_success_rate=0.95,
        seed_response_time_ms=2000.0,
    ),
}


@dataclass
class Config:
    """Runtime configuration for intellicommit."""

    providers: Dict[str, ProviderSettings] = field(
        default_factory=lambda: dict(DEFAULT_PROVIDERS)
    )
    # Restrict the race to these provider names; None means all known.
    enabled_providers: Optional[List[str]] = None
    cache_ttl: float = 300.0
    max_retries: int = 2
    circuit_breaker_threshold: int = 3
    # Seconds a tripped circuit stays open before a half-open probe; 0 = never.
    circuit_reset_timeout: float = 60.0
    backoff_base: float = 1.0
    rate_limit_cooldown: float = 60.0
    max_diff_chars: int = 12000
    teardown_timeout: float = 1.0
    disable_free_models: bool = False
    git_repo_path: str = "."

    def provider_names(self) -> List[str]:
        """Known provider names ordered by priority."""
        ordered = sorted(self.providers.values(), key=lambda p: p.priority)
        names = [p.name for p in ordered]
        if self.enabled_providers is not None:
            allowed = set(self.enabled_providers)
            names = [n for n in names if n in allowed]
        if self.disable_free_models:
            names = [n for n in names if self.providers[n].requires_key]
        return names

    def configured_providers(
        self, env: Optional[Mapping[str, str]] = None
    ) -> List[ProviderSettings]:
        """Providers whose credentials are present (ordered by priority)."""
        return [
            self.providers[name]
            for name in self.provider_names()
            if self.providers[name].is_configured(env)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Serialise knobs for persistence (provider table is not persisted)."""
        data = asdict(self)
        data.pop("providers", None)
        return data


_CONFIG_STATE: Dict[str, Optional[Config]] = {"active": None}

_NUMERIC_KNOBS: Dict[str, type] = {
    "cache_ttl": float,
    "max_retries": int,
    "circuit_breaker_threshold": int,
    "circuit_reset_timeout": float,
    "backoff_base": float,
    "rate_limit_cooldown": float,
    "max_diff_chars": int,
    "teardown_timeout": float,
}

_ENV_NAMES = {
    "cache_ttl": "CACHE_TTL",
    "max_retries": "MAX_RETRIES",
    "circuit_breaker_threshold": "CIRCUIT_THRESHOLD",
    "circuit_reset_timeout": "CIRCUIT_RESET",
    "backoff_base": "BACKOFF_BASE",
    "rate_limit_cooldown": "RATE_LIMIT_COOLDOWN",
    "max_diff_chars": "MAX_DIFF_CHARS",
    "teardown_timeout": "TEARDOWN_TIMEOUT",
}


def _ensure_path(path_like: Optional[Path]) -> Path:
    if path_like is None:
        return Path.cwd().resolve(strict=False)
    return Path(path_like).expanduser().resolve(strict=False)


def _config_file(repo_root: Optional[Path] = None) -> Path:
    return _ensure_path(repo_root) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def save_config(config: Config, repo_root: Optional[Path] = None) -> Path:
    """Persist configuration knobs as JSON within the repository."""
    cfg_path = _config_file(repo_root)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(json.dumps(config.to_dict(), indent=2))
    return cfg_path


def load_persisted_config(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Return the persisted knob mapping, or an empty dict."""
    cfg_path = _config_file(repo_root)
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text())
    except ValueError:
        return {}
    if not isinstance(data, dict):
        return {}
    known = {f for f in Config.__dataclass_fields__ if f != "providers"}
    return {k: v for k, v in data.items() if k in known}


def _coerce(name: str, raw: Any, default: Any) -> Any:
    caster = _NUMERIC_KNOBS[name]
    try:
        value = caster(raw)
    except (TypeError, ValueError):
        return default
    if value < 0:
        return default
    return value


def _parse_bool(raw: Any) -> bool:
    return str(raw).strip().lower() in _TRUTHY


def _parse_list(raw: Any) -> Optional[List[str]]:
    if raw is None:
        return None
    if isinstance(raw, (list, tuple)):
        items = [str(x).strip().lower() for x in raw]
    else:
        items = [x.strip().lower() for x in str(raw).split(",")]
    items = [x for x in items if x]
    return items or None


def _provider_table(env: Mapping[str, str]) -> Dict[str, ProviderSettings]:
    table: Dict[str, ProviderSettings] = {}
    for name, settings in DEFAULT_PROVIDERS.items():
        raw_timeout = env.get(f"{ENV_PREFIX}{name.upper()}_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                timeout = settings.timeout
            if timeout > 0:
                settings = replace(settings, timeout=timeout)
        table[name] = settings
    return table


def detect_available_providers(
    env: Optional[Mapping[str, str]] = None,
) -> Dict[str, bool]:
    """Return mapping of provider -> whether its credential is present."""
    env_dict: Mapping[str, str] = env if env is not None else os.environ
    return {
        name: settings.is_configured(env_dict)
        for name, settings in DEFAULT_PROVIDERS.items()
    }


def load_config(
    *,
    repo_root: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """Build configuration from config file, environment and overrides."""

    overrides = dict(overrides or {})
    env_dict: Mapping[str, str] = env if env is not None else os.environ
    root = _ensure_path(repo_root)
    persisted = load_persisted_config(root)
    defaults = Config()

    values: Dict[str, Any] = {}
    for knob, env_name in _ENV_NAMES.items():
        raw = (
            overrides.get(knob)
            if overrides.get(knob) is not None
            else env_dict.get(ENV_PREFIX + env_name) or persisted.get(knob)
        )
        default = getattr(defaults, knob)
        values[knob] = default if raw is None else _coerce(knob, raw, default)

    enabled_raw = overrides.get("enabled_providers")
    if enabled_raw is None:
        enabled_raw = env_dict.get(ENV_PREFIX + "PROVIDERS") or persisted.get(
            "enabled_providers"
        )
    enabled = _parse_list(enabled_raw)
    if enabled is not None:
        enabled = [name for name in enabled if name in DEFAULT_PROVIDERS]

    free_raw = overrides.get("disable_free_models")
    if free_raw is None:
        free_raw = env_dict.get(ENV_PREFIX + "DISABLE_FREE_HF")
    if free_raw is None:
        free_raw = persisted.get("disable_free_models", False)

    config = Config(
        providers=_provider_table(env_dict),
        enabled_providers=enabled,
        disable_free_models=_parse_bool(free_raw),
        git_repo_path=str(
            overrides.get("repo_path")
            or persisted.get("git_repo_path")
            or root
        ),
        **values,
    )

    set_active_config(config)
    return config


def set_active_config(config: Config) -> None:
    _CONFIG_STATE["active"] = config


def get_active_config() -> Config:
    active = _CONFIG_STATE.get("active")
    if active is None:
        return load_config()
    return active


def clear_active_config() -> None:
    _CONFIG_STATE["active"] = None


def describe_provider(name: str) -> str:
    meta = DEFAULT_PROVIDERS.get(name)
    if not meta:
        return name
    return f"{meta.display_name} (model: {meta.model}, timeout: {meta.timeout:g}s)"
