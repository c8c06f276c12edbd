"""Generator configuration: defaults, presets, merging and validation.

Overrides may be given with either the camelCase keys used by the browser
front end (``boardId``, ``coverLetter``) or the snake_case field names.
Nested ``logo`` / ``cover_letter`` options are merged key by key so a partial
override keeps the remaining defaults.
"""

from __future__ import annotations

from typing import Any

from boarddoc.common.exceptions import ConfigurationError
from boarddoc.core.documents.schemas import GeneratorConfig

_NESTED_FIELDS = ("logo", "cover_letter")

DEFAULT_CONFIG: dict[str, Any] = GeneratorConfig().model_dump()

PRESETS: dict[str, dict[str, Any]] = {
    "simple": {
        "include_comments": False,
        "show_attachments": False,
        "enable_print_pagination": False,
        "one_card_per_print_page": False,
        "title": "Simple Documentation",
    },
    "detailed": {
        "include_comments": True,
        "show_attachments": True,
        "enable_print_pagination": True,
        "cards_per_print_page": 2,
        "one_card_per_print_page": False,
        "title": "Detailed Documentation",
    },
    "printReady": {
        "include_comments": True,
        "show_attachments": True,
        "enable_print_pagination": True,
        "cards_per_print_page": 3,
        "show_card_numbers": True,
        "title": "Print-Ready Documentation",
    },
    "onePerPage": {
        "include_comments": True,
        "show_attachments": True,
        "one_card_per_print_page": True,
        "show_card_numbers": True,
        "title": "One Card Per Page",
    },
}


def _normalize(values: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase keys onto field names so dicts can be merged."""
    aliases = {
        field.alias: name
        for name, field in GeneratorConfig.model_fields.items()
        if field.alias
    }
    normalized = {}
    for key, value in values.items():
        name = aliases.get(key, key)
        if name in _NESTED_FIELDS and isinstance(value, dict):
            model = GeneratorConfig.model_fields[name].annotation
            value = model.model_validate(value).model_dump(exclude_unset=True)
        normalized[name] = value
    return normalized


def _merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = {**base}
    for key, value in _normalize(updates).items():
        if key in _NESTED_FIELDS and isinstance(value, dict):
            current = merged.get(key)
            if not isinstance(current, dict):
                current = current.model_dump() if current is not None else {}
            value = {**current, **value}
        merged[key] = value
    return merged


def create_config(overrides: dict[str, Any] | None = None, **kwargs: Any) -> GeneratorConfig:
    values = _merge(DEFAULT_CONFIG, {**(overrides or {}), **kwargs})
    return GeneratorConfig.model_validate(values)


def merge_config(config: GeneratorConfig, updates: dict[str, Any]) -> GeneratorConfig:
    return GeneratorConfig.model_validate(_merge(config.model_dump(), updates))


def validate_config(config: GeneratorConfig) -> list[str]:
    """Return human-readable problems with *config*; empty means valid."""
    errors: list[str] = []

    if not config.board_id:
        errors.append("Board ID is required")

    if not config.selected_lists:
        errors.append("At least one list must be selected")

    if config.enable_print_pagination and config.cards_per_print_page < 1:
        errors.append("Cards per print page must be greater than 0")

    if not config.title or not config.title.strip():
        errors.append("Title is required")

    return errors


def apply_preset(config: GeneratorConfig, preset_name: str) -> GeneratorConfig:
    preset = PRESETS.get(preset_name)
    if preset is None:
        raise ConfigurationError(f"Unknown preset: {preset_name}")
    return merge_config(config, preset)
