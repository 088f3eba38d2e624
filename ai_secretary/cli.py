"""
CLI entry point: argument parsing and the interactive edit session.
"""

import argparse

from . import cli_display as ui
from .cli_display import StreamPrinter, log, print_document, prompt_text, token_tracker
from .config import Config, ConfigError, PROVIDERS
from .diff_display import show_diff
from .documents import (
    DocumentError, LoadError, SaveError, SaveConflictError, get_document_editor,
)
from .editing.buffer import DocumentBuffer
from .llm import LLMError, create_transport
from .session import EditSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-secretary",
        description="Edit a document with natural-language requests.")
    parser.add_argument("document",
                        help="File path, Creatorsgarten wiki page/URL, "
                             "or GitHub issue URL")
    parser.add_argument("--provider", choices=PROVIDERS, default=None,
                        help="The model provider to use (default: from config)")
    parser.add_argument("--model", default=None,
                        help="The model name to use (default: from config)")
    parser.add_argument("--config", default=None,
                        help="Path to .ai-secretary.yaml config file")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # ── 0. Load config and model ──
    try:
        cfg = Config.load(args.config)
        transport = create_transport(cfg, provider=args.provider, model=args.model)
    except ConfigError as e:
        ui.error(str(e))
        return 2
    ui.info(f"Using model: {transport.model}")

    ui.banner("ai-secretary")

    # ── 1. Load document ──
    try:
        editor = get_document_editor(args.document, cfg)
    except DocumentError as e:
        ui.error(str(e))
        return 2
    try:
        buffer = DocumentBuffer(editor.load())
    except LoadError as e:
        ui.error(str(e))
        return 1

    print_document("Original contents", buffer.contents)
    ui.info("Document loaded successfully.")

    # ── 2. Initial request ──
    request = prompt_text("What do you want to do?")
    if not request:
        ui.error("No request.")
        return 1

    session = EditSession(buffer, request, transport, display=StreamPrinter())
    previous_text = buffer.contents
    try:
        session.run()

        # ── 3. Feedback rounds ──
        while True:
            if buffer.contents != previous_text:
                show_diff(buffer.original_contents, buffer.contents,
                          context=cfg.DIFF_CONTEXT)
                previous_text = buffer.contents
            feedback = prompt_text("Any feedback? (Leave empty to finish)")
            if feedback is None:
                ui.error("Canceled.")
                return 1
            if not feedback:
                break
            session.feedback(feedback)
    except LLMError as e:
        ui.error(f"Model request failed: {e}")
        return 1
    finally:
        log.info(f"Token usage: {token_tracker.summary()}")

    # ── 4. Save ──
    if not buffer.changed:
        ui.warn("No changes made to the page. "
                "Please check your request and try again.")
        return 0

    try:
        editor.save(buffer.contents)
    except SaveError as e:
        # Keep the edited text on screen so it can be recovered by hand
        print_document("Unsaved contents", buffer.contents)
        if isinstance(e, SaveConflictError):
            ui.error(f"Save conflict: {e}")
        else:
            ui.error(f"Save failed: {e}")
        return 1
    ui.success(f"Saved {editor.description}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
