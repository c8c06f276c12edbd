import pytest
from pydantic import ValidationError

from boarddoc.common.enums import LogoPosition
from boarddoc.common.exceptions import ConfigurationError
from boarddoc.core.documents.config import (
    DEFAULT_CONFIG,
    PRESETS,
    apply_preset,
    create_config,
    merge_config,
    validate_config,
)


def _valid(**overrides):
    return create_config({"boardId": "b1", "selectedLists": [{"id": "l1", "name": "Rules"}], **overrides})


def test_defaults():
    config = create_config()

    assert config.board_id is None
    assert config.selected_lists == []
    assert config.include_comments is True
    assert config.show_attachments is True
    assert config.cards_per_print_page == 3
    assert config.title == "Documentation"
    assert config.output_file_name == "documentation.html"
    assert config.logo.position == LogoPosition.HEADER
    assert config.cover_letter.show_on_separate_page is True
    assert DEFAULT_CONFIG["title"] == "Documentation"


def test_camel_case_and_snake_case_overrides():
    camel = create_config({"boardId": "b1", "includeComments": False, "cardsPerPrintPage": 5})
    snake = create_config(board_id="b1", include_comments=False, cards_per_print_page=5)

    assert camel == snake
    assert camel.include_comments is False


def test_nested_options_merge_key_by_key():
    config = create_config({"logo": {"enabled": True, "url": "logo.png"}, "coverLetter": {"showOnSeparatePage": False}})

    assert config.logo.enabled is True
    assert config.logo.url == "logo.png"
    assert config.logo.width == 200
    assert config.cover_letter.show_on_separate_page is False
    assert config.cover_letter.enabled is False


def test_unknown_keys_are_ignored():
    config = create_config({"boardId": "b1", "separatePages": True})
    assert config.board_id == "b1"


def test_config_is_immutable():
    config = _valid()
    with pytest.raises(ValidationError):
        config.title = "changed"


def test_minimal_config_is_valid():
    assert validate_config(_valid()) == []


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"boardId": None}, "Board ID is required"),
        ({"selectedLists": []}, "At least one list must be selected"),
        ({"enablePrintPagination": True, "cardsPerPrintPage": 0}, "Cards per print page must be greater than 0"),
        ({"title": ""}, "Title is required"),
        ({"title": "   "}, "Title is required"),
    ],
)
def test_validation_errors(overrides, message):
    errors = validate_config(_valid(**overrides))
    assert errors == [message]


def test_zero_cards_per_page_is_fine_without_pagination():
    assert validate_config(_valid(cardsPerPrintPage=0)) == []


def test_all_errors_are_reported():
    errors = validate_config(create_config(title=""))
    assert len(errors) == 3


def test_merge_config_returns_new_object():
    config = _valid()
    merged = merge_config(config, {"logo": {"position": "footer"}})

    assert merged.logo.position == LogoPosition.FOOTER
    assert config.logo.position == LogoPosition.HEADER
    assert merged.board_id == "b1"


def test_apply_preset():
    config = apply_preset(_valid(), "detailed")

    assert config.enable_print_pagination is True
    assert config.cards_per_print_page == 2
    assert config.title == "Detailed Documentation"
    assert config.selected_lists[0].id == "l1"


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_every_preset_produces_valid_config(name):
    assert validate_config(apply_preset(_valid(), name)) == []


def test_unknown_preset_raises():
    with pytest.raises(ConfigurationError) as exc_info:
        apply_preset(_valid(), "fancy")

    assert exc_info.value.status_code == 400
    assert "Unknown preset: fancy" in exc_info.value.detail
