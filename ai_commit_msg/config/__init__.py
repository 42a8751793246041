"""Configuration Management Package"""

import copy
import json
import logging
import os
from dataclasses import dataclass, asdict, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# Valid configuration values
VALID_PROVIDERS = {"openai", "anthropic", "gemini", "copilot"}
VALID_COST_MODES = {"off", "compact", "verbose"}
VALID_REASONING_EFFORTS = {"minimal", "low", "medium", "high"}

DEFAULT_SPINNER = ('⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏')

SYSTEM_PROMPT = """You are a senior software engineer specialized in writing precise, informative git commit messages.

Your expertise:
- Deep understanding of conventional commit format (type, scope, subject, body)
- Ability to identify the PRIMARY purpose of a change from a diff
- Writing for future developers who will read git log while debugging production

Your standards:
- Every word earns its place, no filler
- The diff shows WHAT; you explain WHY
- Specific verbs over vague ones (never "update", "change", "modify")
- Reply with the commit message only, no code fences and no commentary"""

DEFAULT_PROMPT = """Generate a conventional commit message for the staged changes below.

Rules:
- First line: type(scope): subject, imperative mood, at most 72 characters
- Types: feat, fix, refactor, chore, docs, test, style, perf, ci, build
- Add a blank line and 1-3 short bullet points only when the change needs context

Git diff:
{diff}"""

# USD per million tokens
DEFAULT_PRICING: dict[str, dict[str, float]] = {
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-4.1-nano": {"input": 0.10, "output": 0.40},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-5": {"input": 1.25, "output": 10.00},
    "gpt-5-mini": {"input": 0.25, "output": 2.00},
    "gpt-5-nano": {"input": 0.05, "output": 0.40},
    "claude-3-5-haiku-20241022": {"input": 0.80, "output": 4.00},
    "claude-3-5-sonnet-20241022": {"input": 3.00, "output": 15.00},
    "claude-sonnet-4-20250514": {"input": 3.00, "output": 15.00},
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-flash-lite": {"input": 0.10, "output": 0.40},
}


@dataclass(frozen=True)
class Config:
    """Generation settings. Built once per run by `setup()`, never mutated."""
    provider: str = "openai"
    model: str = "gpt-4.1-nano"
    temperature: float = 0.3
    prompt: str = DEFAULT_PROMPT
    system_prompt: str = SYSTEM_PROMPT
    max_tokens: Optional[int] = None
    reasoning_effort: Optional[str] = None
    notifications: bool = True
    spinner: tuple[str, ...] | bool = DEFAULT_SPINNER
    cost_display: str = "compact"
    context_lines: Optional[int] = None
    pricing: dict[str, dict[str, float]] = field(default_factory=lambda: copy.deepcopy(DEFAULT_PRICING))

    @property
    def spinner_frames(self) -> tuple[str, ...]:
        """Frames to animate, empty when the spinner is disabled."""
        if isinstance(self.spinner, tuple):
            return self.spinner
        return DEFAULT_SPINNER if self.spinner is True else ()

    def to_dict(self) -> dict:
        return asdict(self)

    def validate(self) -> tuple['Config', list[str]]:
        """Return a corrected copy of this config and the warnings raised.

        Invalid values are replaced with their defaults.
        """
        warnings = []
        defaults = Config()
        fixes: dict[str, Any] = {}

        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            fixes['provider'] = defaults.provider

        if not isinstance(self.model, str) or not self.model:
            warnings.append(f"Invalid model '{self.model}', using '{defaults.model}'")
            fixes['model'] = defaults.model

        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)):
            warnings.append(f"Invalid temperature '{self.temperature}', using {defaults.temperature}")
            fixes['temperature'] = defaults.temperature

        if not isinstance(self.prompt, str) or not self.prompt:
            warnings.append("Invalid prompt, using the default prompt")
            fixes['prompt'] = defaults.prompt

        if self.max_tokens is not None and (not isinstance(self.max_tokens, int) or self.max_tokens <= 0):
            warnings.append(f"Invalid max_tokens '{self.max_tokens}', ignoring it")
            fixes['max_tokens'] = None

        if self.reasoning_effort is not None and self.reasoning_effort not in VALID_REASONING_EFFORTS:
            warnings.append(f"Invalid reasoning_effort '{self.reasoning_effort}', ignoring it")
            fixes['reasoning_effort'] = None

        spinner = _normalize_spinner(self.spinner)
        if spinner is None:
            warnings.append("Invalid spinner, using the default frames")
            fixes['spinner'] = defaults.spinner
        elif spinner != self.spinner:
            fixes['spinner'] = spinner

        cost_display = "off" if self.cost_display in (False, None) else self.cost_display
        if cost_display not in VALID_COST_MODES:
            warnings.append(f"Invalid cost_display '{self.cost_display}', using '{defaults.cost_display}'")
            cost_display = defaults.cost_display
        if cost_display != self.cost_display:
            fixes['cost_display'] = cost_display

        if self.context_lines is not None and (
            isinstance(self.context_lines, bool)
            or not isinstance(self.context_lines, int)
            or self.context_lines < 0
        ):
            warnings.append(f"Invalid context_lines '{self.context_lines}', using git's default")
            fixes['context_lines'] = None

        if not isinstance(self.pricing, dict):
            warnings.append("Invalid pricing table, using the default prices")
            fixes['pricing'] = defaults.pricing

        return (replace(self, **fixes) if fixes else self), warnings

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Config':
        valid_keys = {f.name for f in fields(cls)}
        for key in data:
            if key not in valid_keys:
                logger.warning("Config warning: unknown option '%s' ignored", key)
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config, warnings = cls(**filtered).validate()
        for warning in warnings:
            logger.warning("Config warning: %s", warning)
        return config


def _normalize_spinner(value: Any) -> tuple[str, ...] | bool | None:
    """Spinner as a tuple of frames or a bool; None when unusable."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (list, tuple)):
        if not value:
            return False
        if all(isinstance(frame, str) and frame for frame in value):
            return tuple(value)
    return None


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge `overrides` onto `base` without mutating either.

    Nested mappings merge key by key; any other value replaces the base value.
    """
    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = deep_merge(value, {}) if isinstance(value, Mapping) else value
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge(value, {})
        else:
            merged[key] = value
    return merged


def setup(overrides: Mapping[str, Any] | None = None) -> Config:
    """Build a config from the defaults with `overrides` merged over them."""
    return Config.from_dict(deep_merge(Config().to_dict(), overrides or {}))


class ConfigManager:
    """Loads user overrides from file and environment."""

    CONFIG_FILENAME = ".aicommitrc"
    ENV_OVERRIDES = {
        "AI_COMMIT_PROVIDER": "provider",
        "AI_COMMIT_MODEL": "model",
    }

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self, overrides: Mapping[str, Any] | None = None) -> Config:
        """Merge file, environment and explicit overrides, in that order, over the defaults."""
        data = deep_merge(self._load_user_file(), self.env_overrides())
        self._config = setup(deep_merge(data, overrides or {}))
        return self._config

    def env_overrides(self) -> dict[str, str]:
        return {key: os.environ[var] for var, key in self.ENV_OVERRIDES.items() if os.environ.get(var)}

    def _load_user_file(self) -> dict[str, Any]:
        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config_path = path
                return self._load_from_file(path)
        return {}

    def _load_from_file(self, path: Path) -> dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Could not load %s: expected a JSON object", path)
            return {}
        return data

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config(overrides: Mapping[str, Any] | None = None) -> Config:
    return _manager.load(overrides)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "setup",
    "deep_merge",
    "load_config",
    "get_config_path",
    "DEFAULT_PROMPT",
    "DEFAULT_PRICING",
    "DEFAULT_SPINNER",
    "SYSTEM_PROMPT",
    "VALID_PROVIDERS",
    "VALID_COST_MODES",
    "VALID_REASONING_EFFORTS",
]
