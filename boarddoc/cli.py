"""Command-line front end.

    python -m boarddoc wizard                 # interactive, step by step
    python -m boarddoc generate --board-id B --list L1:Rules --list L2 --preset detailed
    python -m boarddoc serve --port 3001      # HTTP API

The wizard and ``generate`` both end in ``DocumentService.generate`` and save
the document under ``OUTPUT_DIR``.  Errors are reported on the console and
turned into a non-zero exit code.
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from boarddoc.common.enums import LogoPosition
from boarddoc.common.exceptions import BoardDocException
from boarddoc.common.logging import setup_logging
from boarddoc.config import settings
from boarddoc.core.documents.config import PRESETS, apply_preset, create_config, merge_config, validate_config
from boarddoc.core.documents.schemas import GeneratorConfig, ListRef, TrelloCredentials
from boarddoc.core.documents.service import DocumentService, write_document
from boarddoc.integrations.trello import TrelloClient

Ask = Callable[[str], str]
Say = Callable[[str], None]

MAX_CREDENTIAL_ATTEMPTS = 3


# ------------------------------ Helpers -------------------------------------


def parse_selection(text: str, max_length: int) -> list[int]:
    """Parse ``"1,3-5"`` into 0-based indices; out-of-range parts are ignored."""
    selections: list[int] = []
    for part in (p.strip() for p in text.split(",")):
        if not part:
            continue
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            try:
                start, end = int(start_text), int(end_text)
            except ValueError:
                continue
            if 1 <= start <= end <= max_length:
                selections.extend(range(start - 1, end))
        else:
            try:
                num = int(part)
            except ValueError:
                continue
            if 1 <= num <= max_length:
                selections.append(num - 1)
    return list(dict.fromkeys(selections))


def parse_list_arg(value: str) -> ListRef:
    """``ID`` or ``ID:Display name``."""
    list_id, _, name = value.partition(":")
    if not list_id.strip():
        raise argparse.ArgumentTypeError(f"invalid list reference: {value!r}")
    return ListRef(id=list_id.strip(), name=name.strip())


def _yes(answer: str, default: bool = True) -> bool:
    answer = answer.strip().lower()
    if not answer:
        return default
    return not answer.startswith("n") if default else answer.startswith("y")


def _output_path(config: GeneratorConfig) -> Path:
    return Path(settings.OUTPUT_DIR) / config.output_file_name


async def _generate_and_save(client: TrelloClient, config: GeneratorConfig, say: Say) -> int:
    errors = validate_config(config)
    if errors:
        say("Configuration errors:")
        for error in errors:
            say(f"   - {error}")
        return 1

    document = await DocumentService(client).generate(config)
    path = write_document(document.html, _output_path(config))
    say(f"Documentation generated: {path}")
    say(f"Total cards: {document.card_count}")
    return 0


# ------------------------------ Wizard --------------------------------------


async def ensure_credentials(client: TrelloClient, ask: Ask, say: Say) -> TrelloClient:
    """Return a client with working credentials, prompting when needed."""
    if client.has_credentials:
        say("Found existing API credentials, testing...")
        if await client.health_check():
            return client
        say("Existing credentials are invalid.")
    else:
        say("No API credentials found.")

    for attempt in range(1, MAX_CREDENTIAL_ATTEMPTS + 1):
        if attempt > 1:
            say(f"Attempt {attempt} of {MAX_CREDENTIAL_ATTEMPTS}")
        say("Get your API key from: https://trello.com/app-key")
        api_key = ask("Enter your Trello API Key: ").strip()
        token = ask("Enter your Trello Token: ").strip()
        candidate = client.with_credentials(TrelloCredentials(api_key=api_key, token=token))
        if candidate.has_credentials and await candidate.health_check():
            say("Credentials are valid (kept for this session only).")
            return candidate
        say("Invalid credentials. Please check your API key and token.")

    raise BoardDocException("Maximum credential attempts exceeded", status_code=401)


def _choose_one(items: Sequence[Any], label: Callable[[Any], str], ask: Ask, say: Say, prompt: str) -> Any:
    for idx, item in enumerate(items, start=1):
        say(f"{idx}. {label(item)}")
    while True:
        selected = parse_selection(ask(f"{prompt} (1-{len(items)}): "), len(items))
        if len(selected) == 1:
            return items[selected[0]]
        say("Invalid selection. Please try again.")


def _choose_many(items: Sequence[Any], label: Callable[[Any], str], ask: Ask, say: Say, prompt: str) -> list[Any]:
    for idx, item in enumerate(items, start=1):
        say(f"{idx}. {label(item)}")
    while True:
        selected = parse_selection(
            ask(f"{prompt} (1-{len(items)}, comma-separated, ranges like 1-3): "), len(items)
        )
        if selected:
            return [items[i] for i in selected]
        say("Invalid selection. Please select at least one.")


async def run_wizard(client: TrelloClient, ask: Ask = input, say: Say = print) -> int:
    say("Welcome to the interactive documentation generator!")
    client = await ensure_credentials(client, ask, say)

    say("Step 1: Select a board")
    boards = await client.fetch_user_boards()
    if not boards:
        say("No boards found. Please check your API credentials.")
        return 1
    board = _choose_one(boards, lambda b: f"{b.name} ({b.id})", ask, say, "Select a board")
    say(f"Selected: {board.name}")

    say("Step 2: Select lists")
    lists = await client.fetch_lists_by_board_id(board.id)
    if not lists:
        say("No lists found in this board.")
        return 1
    selected_lists = _choose_many(lists, lambda lst: lst.name, ask, say, "Select lists")
    say(f"Selected {len(selected_lists)} list(s): {', '.join(lst.name for lst in selected_lists)}")

    say("Step 3: Display options")
    include_comments = _yes(ask("Include comments? (Y/n): "))
    exclude_empty_cards = _yes(ask("Exclude empty cards? (Y/n): "))

    say("Step 4: Title and output")
    title = ask("Documentation title: ").strip() or f"{board.name} Documentation"
    subtitle = ask("Subtitle (optional): ").strip()
    output_file_name = ask("Output filename (default: documentation.html): ").strip() or "documentation.html"

    config = create_config(
        board_id=board.id,
        board_name=board.name,
        selected_lists=[ListRef(id=lst.id, name=lst.name) for lst in selected_lists],
        include_comments=include_comments,
        exclude_empty_cards=exclude_empty_cards,
        title=title,
        subtitle=subtitle,
        output_file_name=output_file_name,
    )
    return await _generate_and_save(client, config, say)


# ------------------------------ generate ------------------------------------


_FLAG_FIELDS = ("include_comments", "show_attachments", "exclude_empty_cards", "one_card_per_print_page")


def config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    """Preset first, then only the options given on the command line."""
    config = create_config()
    if args.preset:
        config = apply_preset(config, args.preset)

    overrides: dict[str, Any] = {
        "board_id": args.board_id,
        "board_name": args.board_name or "",
        "selected_lists": args.lists,
    }
    overrides.update(
        {name: getattr(args, name) for name in _FLAG_FIELDS if getattr(args, name) is not None}
    )
    if args.cards_per_page is not None:
        overrides["enable_print_pagination"] = True
        overrides["cards_per_print_page"] = args.cards_per_page
    if args.logo_url:
        overrides["logo"] = {"enabled": True, "url": args.logo_url, "position": args.logo_position}
    if args.cover_title or args.cover_content:
        overrides["cover_letter"] = {
            "enabled": True,
            "title": args.cover_title or "",
            "content": args.cover_content or "",
        }
    if args.output:
        overrides["output_file_name"] = args.output
    if args.title is not None:
        overrides["title"] = args.title
    if args.subtitle is not None:
        overrides["subtitle"] = args.subtitle

    return merge_config(config, overrides)


# ------------------------------ Entry point ---------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="boarddoc", description="Generate HTML documentation from Trello boards.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("wizard", help="Interactive, step-by-step generation.")

    gen = sub.add_parser("generate", help="Generate a document non-interactively.")
    gen.add_argument("--board-id", required=True)
    gen.add_argument("--board-name", default="")
    gen.add_argument(
        "--list", dest="lists", action="append", type=parse_list_arg, required=True,
        metavar="ID[:NAME]", help="Selected list, repeat in document order.",
    )
    gen.add_argument("--preset", choices=sorted(PRESETS))
    gen.add_argument("--title")
    gen.add_argument("--subtitle")
    gen.add_argument("--output", help="Output file name (inside OUTPUT_DIR).")
    # unset flags stay None so they never override a preset
    gen.add_argument("--no-comments", dest="include_comments", action="store_false", default=None)
    gen.add_argument("--no-attachments", dest="show_attachments", action="store_false", default=None)
    gen.add_argument("--exclude-empty", dest="exclude_empty_cards", action="store_true", default=None)
    gen.add_argument("--cards-per-page", type=int, help="Enable print pagination with N cards per page.")
    gen.add_argument("--one-per-page", dest="one_card_per_print_page", action="store_true", default=None)
    gen.add_argument("--logo-url")
    gen.add_argument("--logo-position", choices=[p.value for p in LogoPosition], default=LogoPosition.HEADER.value)
    gen.add_argument("--cover-title")
    gen.add_argument("--cover-content")

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3001)
    return parser


def main(argv: Sequence[str] | None = None, client: TrelloClient | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("boarddoc.main:app", host=args.host, port=args.port)
        return 0

    client = client or TrelloClient.from_settings()
    try:
        if args.command == "wizard":
            return asyncio.run(run_wizard(client))
        return asyncio.run(_generate_and_save(client, config_from_args(args), print))
    except BoardDocException as e:
        print(f"Error: {e.detail}")
        return 1
    except OSError as e:
        print(f"Error: could not write document: {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.")
        return 130
