"""Turns fetched cards plus a generator configuration into one HTML document.

Cards are grouped into one section per selected list (in selection order),
numbered ``<section>.<card>`` and flagged with print page breaks.  The page
itself is a Jinja2 template with inline CSS and script, so the result is a
single self-contained file.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from boarddoc.common.enums import LogoPosition
from boarddoc.common.logging import get_logger
from boarddoc.core.documents.formatter import format_description
from boarddoc.core.documents.schemas import (
    Attachment,
    Card,
    Comment,
    GeneratorConfig,
    RenderedCard,
    RenderedComment,
    RenderedLabel,
    Section,
)

logger = get_logger("documents.assembler")

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"
DOCUMENT_TEMPLATE = "document.html"

# Trello's label palette
LABEL_COLORS: dict[str, str] = {
    "green": "#61bd4f",
    "yellow": "#f2d600",
    "orange": "#ff9f1a",
    "red": "#eb5a46",
    "purple": "#c377e0",
    "blue": "#0079bf",
    "sky": "#00c2e0",
    "lime": "#51e898",
    "pink": "#ff78cb",
    "black": "#344563",
}
DEFAULT_LABEL_COLOR = "#999"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def label_color(color: str | None) -> str:
    return LABEL_COLORS.get(color or "", DEFAULT_LABEL_COLOR)


def is_empty_card(card: Card) -> bool:
    """A card is empty when it has no description, attachments, comments or labels."""
    return not (card.desc.strip() or card.attachments or card.comments or card.labels)


def page_break_flags(count: int, config: GeneratorConfig) -> list[bool]:
    """Page-break-after flags for the cards of one section.

    The last card of a section never breaks.  ``one_card_per_print_page``
    wins over the every-N-cards pagination rule.
    """
    flags = []
    per_page = config.cards_per_print_page
    for index in range(count):
        is_last = index == count - 1
        if config.one_card_per_print_page:
            flags.append(not is_last)
        elif config.enable_print_pagination and per_page > 0:
            flags.append((index + 1) % per_page == 0 and not is_last)
        else:
            flags.append(False)
    return flags


def _render_comment(comment: Comment) -> RenderedComment:
    date_text = comment.date.astimezone().strftime("%Y-%m-%d at %H:%M") if comment.date else ""
    return RenderedComment(author=comment.author, date_text=date_text, text=comment.text)


def _render_card(card: Card, number: str, page_break: bool, config: GeneratorConfig) -> RenderedCard:
    comments = []
    if config.include_comments and card.comments:
        comments = [_render_comment(c) for c in card.comments]

    attachments = []
    if config.show_attachments:
        attachments = [att for att in card.attachments if isinstance(att, Attachment)]

    return RenderedCard(
        number=number,
        name=card.name,
        url=card.url,
        id_short=card.id_short,
        labels=[RenderedLabel(name=lbl.name, color=label_color(lbl.color)) for lbl in card.labels],
        description_html=format_description(card.desc),
        comments=comments,
        attachments=attachments,
        search_text=f"{card.name} {card.desc}".lower(),
        page_break_after=page_break,
    )


def build_sections(cards: Sequence[Card], config: GeneratorConfig) -> list[Section]:
    """Group *cards* into numbered sections following the selected list order."""
    if config.exclude_empty_cards:
        kept = [card for card in cards if not is_empty_card(card)]
        if len(kept) != len(cards):
            logger.info("Excluded %d empty card(s)", len(cards) - len(kept))
    else:
        kept = list(cards)

    by_list: dict[str | None, list[Card]] = {}
    for card in kept:
        by_list.setdefault(card.list_id, []).append(card)

    sections: list[Section] = []
    for list_ref in config.selected_lists:
        list_cards = by_list.get(list_ref.id)
        if not list_cards:
            continue

        section_number = len(sections) + 1
        flags = page_break_flags(len(list_cards), config)
        rendered = [
            _render_card(card, f"{section_number}.{idx}", flag, config)
            for idx, (card, flag) in enumerate(zip(list_cards, flags), start=1)
        ]
        sections.append(
            Section(
                number=section_number,
                list_id=list_ref.id,
                name=list_ref.name or list_ref.id,
                cards=rendered,
            )
        )
    return sections


def render_document(
    sections: Sequence[Section],
    config: GeneratorConfig,
    generated_at: datetime | None = None,
) -> str:
    generated_at = generated_at or datetime.now()
    show_cover = config.cover_letter.enabled and config.cover_letter.show_on_separate_page
    template = _env.get_template(DOCUMENT_TEMPLATE)
    return template.render(
        config=config,
        sections=sections,
        card_count=sum(len(section.cards) for section in sections),
        list_names=", ".join(config.list_names),
        show_cover=show_cover,
        logo_position=config.logo.position if config.logo.enabled else None,
        positions=LogoPosition,
        generated_date=generated_at.strftime("%Y-%m-%d"),
        generated_at=generated_at.strftime("%Y-%m-%d %H:%M"),
    )


def assemble_document(
    cards: Sequence[Card],
    config: GeneratorConfig,
    generated_at: datetime | None = None,
) -> str:
    """Render *cards* into a complete HTML document for *config*."""
    return render_document(build_sections(cards, config), config, generated_at)
