from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from boarddoc.common.enums import LogoPosition

# ---------- Trello records ----------


class Board(BaseModel):
    id: str
    name: str
    url: str | None = None
    closed: bool = False

    model_config = {"extra": "ignore"}


class TrelloList(BaseModel):
    id: str
    name: str
    closed: bool = False
    pos: float | None = None

    model_config = {"extra": "ignore"}


class Label(BaseModel):
    name: str = ""
    color: str | None = None

    model_config = {"extra": "ignore"}


class Badges(BaseModel):
    comments: int = 0

    model_config = {"extra": "ignore"}


class RawAttachment(BaseModel):
    id: str
    name: str = ""
    url: str = ""
    mime_type: str | None = Field(default=None, alias="mimeType")
    bytes: int | None = None
    date: str | None = None
    is_upload: bool = Field(default=False, alias="isUpload")

    model_config = {"extra": "ignore", "populate_by_name": True}


class Attachment(BaseModel):
    """Display record for an image attachment. Bytes are never fetched."""

    id: str
    name: str
    url: str
    mime_type: str
    bytes: int | None = None
    date: str | None = None
    size_text: str
    is_upload: bool = True
    embedded: bool = False


class Comment(BaseModel):
    author: str = "Unknown"
    date: datetime | None = None
    text: str = ""

    @classmethod
    def from_action(cls, action: dict) -> "Comment":
        member = action.get("memberCreator") or {}
        data = action.get("data") or {}
        return cls(
            author=member.get("fullName") or "Unknown",
            date=action.get("date"),
            text=data.get("text") or "",
        )


class Card(BaseModel):
    id: str
    id_short: int | None = Field(default=None, alias="idShort")
    name: str = ""
    desc: str = ""
    url: str = ""
    labels: list[Label] = []
    list_id: str | None = Field(default=None, alias="idList")
    badges: Badges = Badges()
    attachments: list[RawAttachment | Attachment] = []
    comments: list[Comment] = []

    model_config = {"extra": "ignore", "populate_by_name": True}

    @property
    def comment_count(self) -> int:
        return self.badges.comments


# ---------- Generator configuration ----------


class _ConfigModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


class ListRef(_ConfigModel):
    id: str
    name: str = ""


class LogoOptions(_ConfigModel):
    enabled: bool = False
    url: str = ""
    width: int = 200
    position: LogoPosition = LogoPosition.HEADER


class CoverLetterOptions(_ConfigModel):
    enabled: bool = False
    title: str = ""
    content: str = ""
    show_on_separate_page: bool = True


class GeneratorConfig(_ConfigModel):
    # Board / list selection
    board_id: str | None = None
    board_name: str = ""
    selected_lists: list[ListRef] = []

    # Display options
    include_comments: bool = True
    show_attachments: bool = True
    exclude_empty_cards: bool = False

    # Print layout
    enable_print_pagination: bool = False
    cards_per_print_page: int = 3
    one_card_per_print_page: bool = False
    show_card_numbers: bool = True

    logo: LogoOptions = LogoOptions()
    cover_letter: CoverLetterOptions = CoverLetterOptions()

    # Output
    output_file_name: str = "documentation.html"
    title: str = "Documentation"
    subtitle: str = ""
    custom_css: str = ""

    @property
    def list_ids(self) -> list[str]:
        return [lst.id for lst in self.selected_lists]

    @property
    def list_names(self) -> list[str]:
        return [lst.name for lst in self.selected_lists]


class TrelloCredentials(BaseModel):
    api_key: str = ""
    token: str = ""

    model_config = {"frozen": True}

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key.strip() and self.token.strip())


class GeneratedDocument(BaseModel):
    html: str
    card_count: int


# ---------- Rendered document ----------


class RenderedLabel(BaseModel):
    name: str
    color: str


class RenderedComment(BaseModel):
    author: str
    date_text: str
    text: str


class RenderedCard(BaseModel):
    number: str
    name: str
    url: str
    id_short: int | None = None
    labels: list[RenderedLabel] = []
    description_html: str = ""
    comments: list[RenderedComment] = []
    attachments: list[Attachment] = []
    search_text: str = ""
    page_break_after: bool = False


class Section(BaseModel):
    number: int
    list_id: str
    name: str
    cards: list[RenderedCard] = []
