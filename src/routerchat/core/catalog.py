"""Model catalog loaded from defaults or the YAML config."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, cast

from routerchat.core.config import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEXT_MODEL,
    get_config_or_default,
)
from routerchat.core.models import ModelDescriptor

logger = logging.getLogger(__name__)

MODEL_KINDS = ("text", "image")

DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(id=DEFAULT_TEXT_MODEL, label="GPT-5.2 Chat", kind="text"),
    ModelDescriptor(
        id="anthropic/claude-sonnet-4.5",
        label="Claude Sonnet 4.5",
        kind="text",
    ),
    ModelDescriptor(
        id="google/gemini-2.5-flash",
        label="Gemini 2.5 Flash",
        kind="text",
    ),
    ModelDescriptor(id=DEFAULT_IMAGE_MODEL, label="Gemini 3 Pro Image", kind="image"),
    ModelDescriptor(
        id="google/gemini-2.5-flash-image",
        label="Gemini 2.5 Flash Image",
        kind="image",
    ),
)


class CatalogConfigError(ValueError):
    """Raised when the configured model table is invalid."""


def _parse_model_entry(index: int, entry: object) -> ModelDescriptor:
    if not isinstance(entry, Mapping):
        message = f"Model entry {index} must be a mapping with 'id' and 'label'."
        raise CatalogConfigError(message)

    mapping = cast("Mapping[str, Any]", entry)
    model_id = mapping.get("id")
    if not isinstance(model_id, str) or not model_id.strip():
        message = f"Model entry {index} is missing a non-empty 'id'."
        raise CatalogConfigError(message)

    label = mapping.get("label")
    if not isinstance(label, str) or not label.strip():
        label = model_id

    kind = mapping.get("kind", "text")
    if kind not in MODEL_KINDS:
        message = f"Model '{model_id}' has kind {kind!r}; expected 'text' or 'image'."
        raise CatalogConfigError(message)

    return ModelDescriptor(id=model_id.strip(), label=label.strip(), kind=kind)


def parse_model_table(entries: Iterable[object]) -> tuple[ModelDescriptor, ...]:
    """Build catalog entries from a config table.

    Later duplicates of an id are dropped so the first definition wins.
    """
    models: list[ModelDescriptor] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(entries):
        model = _parse_model_entry(index, entry)
        if model.id in seen_ids:
            logger.warning("Ignoring duplicate model id in config: %s", model.id)
            continue
        seen_ids.add(model.id)
        models.append(model)
    return tuple(models)


def load_catalog(config: Mapping[str, Any] | None = None) -> tuple[ModelDescriptor, ...]:
    """Return the model catalog, preferring the ``models`` table from config."""
    effective_config = get_config_or_default() if config is None else config
    raw_models = effective_config.get("models")
    if raw_models is None:
        return DEFAULT_MODELS
    if not isinstance(raw_models, list) or not raw_models:
        message = "Config 'models' must be a non-empty list of model entries."
        raise CatalogConfigError(message)
    return parse_model_table(raw_models)


def find_model(
    catalog: Iterable[ModelDescriptor],
    model_id: str | None,
) -> ModelDescriptor | None:
    """Look up a catalog entry by id."""
    if not model_id:
        return None
    for model in catalog:
        if model.id == model_id:
            return model
    return None


def default_model(
    catalog: tuple[ModelDescriptor, ...],
    config: Mapping[str, Any] | None = None,
) -> ModelDescriptor | None:
    """Pick the configured default model, else the first catalog entry."""
    configured = (config or {}).get("default_model")
    if isinstance(configured, str) and (model := find_model(catalog, configured)):
        return model
    if configured:
        logger.warning("Configured default_model %r is not in the catalog", configured)
    return catalog[0] if catalog else None
