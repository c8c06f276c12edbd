"""Document generation pipeline.

``DocumentService`` runs one generation request end to end:

1. Validate the configuration.
2. Fetch the cards of every selected list (one list at a time).
3. Per card, in order: build attachment display records and, when the card
   has comments and the configuration asks for them, fetch its comments.
4. Assemble the HTML document.

Everything is re-fetched on every run.  Only comment fetches are allowed to
fail without aborting the run.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from boarddoc.common.exceptions import ConfigurationError, TransientFetchError
from boarddoc.common.logging import get_logger
from boarddoc.core.documents.assembler import build_sections, render_document
from boarddoc.core.documents.attachments import process_attachments
from boarddoc.core.documents.config import validate_config
from boarddoc.core.documents.schemas import Card, GeneratedDocument, GeneratorConfig
from boarddoc.integrations.trello import TrelloClient

logger = get_logger("documents.service")


class DocumentService:
    """Facade over the fetch -> enrich -> assemble pipeline.

    Usage::

        service = DocumentService(TrelloClient.from_settings())
        document = await service.generate(config)
    """

    def __init__(self, client: TrelloClient):
        self.client = client

    async def generate(
        self, config: GeneratorConfig, generated_at: datetime | None = None
    ) -> GeneratedDocument:
        errors = validate_config(config)
        if errors:
            raise ConfigurationError("; ".join(errors))

        logger.info(
            "Generating '%s' from %d list(s) of board %s",
            config.title, len(config.selected_lists), config.board_id,
        )
        cards = await self.client.fetch_cards_from_lists(config.list_ids, config.show_attachments)
        logger.info("Processing %d card(s)", len(cards))

        for idx, card in enumerate(cards, start=1):
            logger.debug("Processing (%d/%d): %s", idx, len(cards), card.name)
            await self.enrich_card(card, config)

        sections = build_sections(cards, config)
        html = render_document(sections, config, generated_at)
        card_count = sum(len(section.cards) for section in sections)

        logger.info("Generated document with %d card(s)", card_count)
        if config.include_comments:
            total_comments = sum(len(card.comments) for card in cards)
            logger.info("Included %d comment(s)", total_comments)
        return GeneratedDocument(html=html, card_count=card_count)

    async def enrich_card(self, card: Card, config: GeneratorConfig) -> None:
        """Replace raw attachments with display records and attach comments."""
        if card.attachments:
            card.attachments = process_attachments(card.attachments)

        if not (config.include_comments and card.comment_count > 0):
            card.comments = []
            return

        try:
            card.comments = await self.client.fetch_card_comments(card.id)
            logger.debug("Found %d comment(s) on %s", len(card.comments), card.name)
        except TransientFetchError as e:
            logger.warning("Could not fetch comments for card '%s': %s", card.name, e.detail)
            card.comments = []


async def generate_document(
    config: GeneratorConfig, client: TrelloClient | None = None
) -> GeneratedDocument:
    """Convenience wrapper building a settings-backed client when none is given."""
    service = DocumentService(client or TrelloClient.from_settings())
    return await service.generate(config)


def write_document(html: str, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(html, encoding="utf-8")
    logger.info("Document saved to %s", target)
    return target
