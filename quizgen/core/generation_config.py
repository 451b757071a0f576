"""Configuration loader for the question generation service."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from ..adapters.gemini_adapter import GEMINI_BASE_URL, GeminiAdapter
from ..adapters.mock_adapter import MockAdapter

DEFAULT_SETTINGS: dict[str, Any] = {
    "model": "gemini-2.5-flash",
    "api_key_env": "GEMINI_API_KEY",
    "base_url": GEMINI_BASE_URL,
    "timeout": 30.0,
}


def use_mocks() -> bool:
    return os.environ.get("QUIZGEN_ENV", "real").lower() == "mock"


class GenerationConfigLoader:
    """Loads generation settings from config/generation.yaml."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if config_path is None:
            env_path = os.environ.get("QUIZGEN_CONFIG", "").strip()
            if env_path:
                config_path = Path(env_path)
            else:
                project_root = Path(__file__).parent.parent.parent
                config_path = project_root / "config" / "generation.yaml"
        self.config_path = config_path
        self._config: dict[str, Any] | None = None

    def _load_config(self) -> None:
        if self._config is not None:
            return
        if not self.config_path.exists():
            self._config = {}
            return
        with self.config_path.open("r", encoding="utf-8") as handle:
            self._config = yaml.safe_load(handle) or {}

    def get_settings(self) -> dict[str, Any]:
        """Return generation settings with defaults applied."""
        self._load_config()
        user_settings = (self._config or {}).get("generation", {})
        merged = dict(DEFAULT_SETTINGS)
        if isinstance(user_settings, dict):
            merged.update({k: v for k, v in user_settings.items() if v})
        merged["timeout"] = float(merged["timeout"])
        return merged

    def is_available(self) -> bool:
        """Check if the generation service can be used (API key present or mock mode)."""
        if use_mocks():
            return True
        return bool(os.environ.get(self.get_settings()["api_key_env"]))

    def create_adapter(self):
        """Create the adapter selected by configuration and QUIZGEN_ENV."""
        settings = self.get_settings()
        if use_mocks():
            return MockAdapter(model=settings["model"])
        return GeminiAdapter(
            model=settings["model"],
            api_key_env=settings["api_key_env"],
            base_url=settings["base_url"],
            timeout=settings["timeout"],
        )
