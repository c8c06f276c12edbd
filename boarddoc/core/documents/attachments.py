from collections.abc import Iterable

from boarddoc.common.logging import get_logger
from boarddoc.core.documents.schemas import Attachment, RawAttachment

logger = get_logger("documents.attachments")


def size_text(num_bytes: int | None) -> str:
    if not num_bytes:
        return "Unknown size"
    # round half up
    return f"{int(num_bytes / 1024 + 0.5)}KB"


def is_image_upload(attachment: RawAttachment) -> bool:
    return bool(
        attachment.is_upload
        and attachment.mime_type
        and attachment.mime_type.startswith("image/")
    )


def process_attachments(attachments: Iterable[RawAttachment] | None) -> list[Attachment]:
    """Keep uploaded images and build link-only display records.

    Image bytes are never downloaded, so every record has ``embedded=False``.
    """
    if not attachments:
        return []

    processed = []
    skipped = 0
    for att in attachments:
        if not is_image_upload(att):
            skipped += 1
            continue
        processed.append(
            Attachment(
                id=att.id,
                name=att.name,
                url=att.url,
                mime_type=att.mime_type,
                bytes=att.bytes,
                date=att.date,
                size_text=size_text(att.bytes),
                is_upload=True,
                embedded=False,
            )
        )

    if skipped:
        logger.debug("Skipped %d non-image attachment(s)", skipped)
    return processed
