import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))
import yaml

from quizgen.adapters.gemini_adapter import GeminiAdapter
from quizgen.adapters.mock_adapter import MockAdapter
from quizgen.core.generation_config import DEFAULT_SETTINGS, GenerationConfigLoader


def test_defaults_when_file_missing(tmp_path):
    loader = GenerationConfigLoader(tmp_path / "missing.yaml")
    assert loader.get_settings() == DEFAULT_SETTINGS


def test_file_overrides_defaults(tmp_path):
    path = tmp_path / "generation.yaml"
    path.write_text(yaml.safe_dump({"generation": {"model": "gemini-2.0-pro", "timeout": 5, "api_key_env": ""}}))
    settings = GenerationConfigLoader(path).get_settings()
    assert settings["model"] == "gemini-2.0-pro"
    assert settings["timeout"] == 5.0
    assert settings["api_key_env"] == "GEMINI_API_KEY"


def test_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump({"generation": {"model": "custom-model"}}))
    monkeypatch.setenv("QUIZGEN_CONFIG", str(path))
    assert GenerationConfigLoader().get_settings()["model"] == "custom-model"


def test_adapter_selection(tmp_path, monkeypatch):
    loader = GenerationConfigLoader(tmp_path / "missing.yaml")
    monkeypatch.setenv("QUIZGEN_ENV", "mock")
    assert loader.is_available()
    assert isinstance(loader.create_adapter(), MockAdapter)

    monkeypatch.setenv("QUIZGEN_ENV", "real")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    assert not loader.is_available()
    monkeypatch.setenv("GEMINI_API_KEY", "k")
    assert loader.is_available()
    adapter = loader.create_adapter()
    assert isinstance(adapter, GeminiAdapter)
    assert adapter.api_key == "k"
