from __future__ import annotations

from pathlib import Path

import pytest

from routerchat.core import catalog as catalog_mod
from routerchat.core.catalog import (
    DEFAULT_MODELS,
    CatalogConfigError,
    default_model,
    find_model,
    load_catalog,
    parse_model_table,
)
from routerchat.core.config import (
    ConfigFileEmptyError,
    ConfigFileNotFoundError,
    first_env_value,
    get_config,
    get_config_or_default,
    get_float_setting,
    normalize_api_key,
)
from routerchat.core.config import manager as manager_mod


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(manager_mod, "_config_dirs", lambda: [tmp_path])
    return tmp_path


def test_get_config_reads_yaml(config_dir: Path) -> None:
    (config_dir / "config.yaml").write_text(
        "default_model: openai/gpt-5.2-chat\nrequest_timeout_seconds: 30\n",
        encoding="utf-8",
    )

    config = get_config()

    assert config["default_model"] == "openai/gpt-5.2-chat"
    assert get_float_setting(config, "request_timeout_seconds", 120.0) == 30.0


def test_missing_config_raises_and_default_is_empty(config_dir: Path) -> None:
    with pytest.raises(ConfigFileNotFoundError):
        get_config()
    assert get_config_or_default() == {}


def test_empty_config_is_rejected(config_dir: Path) -> None:
    (config_dir / "config.yaml").write_text("", encoding="utf-8")

    with pytest.raises(ConfigFileEmptyError):
        get_config()


@pytest.mark.parametrize("raw", [True, "abc", -1, 0, None])
def test_float_setting_falls_back_on_bad_values(raw: object) -> None:
    assert get_float_setting({"timeout": raw}, "timeout", 12.5) == 12.5


def test_first_env_value_skips_blank_entries() -> None:
    environ = {"OPENROUTER_API_KEY": "  ", "OPENROUTER_KEY": " sk-2 "}

    assert first_env_value(("OPENROUTER_API_KEY", "OPENROUTER_KEY"), environ) == "sk-2"
    assert first_env_value(("MISSING",), environ) is None


def test_normalize_api_key() -> None:
    assert normalize_api_key(None) == ""
    assert normalize_api_key("  sk  ") == "sk"


def test_catalog_defaults_without_models_table() -> None:
    assert load_catalog({}) == DEFAULT_MODELS
    assert any(model.kind == "image" for model in DEFAULT_MODELS)


def test_catalog_from_config_table() -> None:
    catalog = load_catalog(
        {
            "models": [
                {"id": "x-ai/grok-4", "label": "Grok 4"},
                {"id": "black-forest-labs/flux", "kind": "image"},
                {"id": "x-ai/grok-4", "label": "Duplicate"},
            ],
        },
    )

    assert [(m.id, m.label, m.kind) for m in catalog] == [
        ("x-ai/grok-4", "Grok 4", "text"),
        ("black-forest-labs/flux", "black-forest-labs/flux", "image"),
    ]


def test_catalog_reads_config_file_when_not_given(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(
        catalog_mod,
        "get_config_or_default",
        lambda: {"models": [{"id": "a/b", "label": "AB"}]},
    )

    assert [m.id for m in load_catalog()] == ["a/b"]


@pytest.mark.parametrize(
    "models",
    [
        [],
        "openai/gpt",
        [{"label": "no id"}],
        [{"id": "a/b", "kind": "audio"}],
        ["a/b"],
    ],
)
def test_invalid_model_tables_are_rejected(models: object) -> None:
    with pytest.raises(CatalogConfigError):
        load_catalog({"models": models})


def test_default_model_selection() -> None:
    catalog = parse_model_table([{"id": "a/one"}, {"id": "b/two"}])

    assert default_model(catalog, {"default_model": "b/two"}) == catalog[1]
    assert default_model(catalog, {"default_model": "missing"}) == catalog[0]
    assert default_model(catalog) == catalog[0]
    assert default_model(()) is None
    assert find_model(catalog, None) is None
