import json
import logging
import os
import sys
from datetime import datetime


class TokenTracker:
    """Global tracker for token usage across all model calls."""

    def __init__(self):
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        self.call_count = 0

    def record(self, prompt_tokens: int, completion_tokens: int):
        self.total_prompt_tokens += prompt_tokens
        self.total_completion_tokens += completion_tokens
        self.call_count += 1

    @property
    def total_tokens(self):
        return self.total_prompt_tokens + self.total_completion_tokens

    def summary(self) -> str:
        return (f"{self.call_count} model call(s), "
                f"{self.total_prompt_tokens} prompt + "
                f"{self.total_completion_tokens} completion tokens")


# Global singleton
token_tracker = TokenTracker()


def setup_logger(log_dir: str | None = None) -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    log_dir = log_dir or os.getenv("AI_SECRETARY_LOG_DIR") or ".ai-secretary/logs"
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"secretary_{timestamp}.log")

    logger = logging.getLogger("ai_secretary")
    logger.setLevel(logging.DEBUG)

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


# Global logger instance
log = setup_logger()


# ── ANSI styles ──

C_RESET = "\033[0m"
C_BOLD = "\033[1m"
C_DIM = "\033[2m"
C_RED = "\033[31m"
C_GREEN = "\033[32m"
C_YELLOW = "\033[33m"
C_MAGENTA = "\033[35m"
C_CYAN = "\033[36m"

_ICONS = {
    "info":    (C_CYAN, "ℹ"),
    "success": (C_GREEN, "✔"),
    "warn":    (C_YELLOW, "⚠"),
    "error":   (C_RED, "✘"),
    "fail":    (C_RED, "✖"),
    "start":   (C_MAGENTA, "◐"),
}


def _status(kind: str, message: str) -> None:
    color, icon = _ICONS[kind]
    print(f"{color}{icon}{C_RESET} {message}")


def info(message: str) -> None:
    log.info(message)
    _status("info", message)


def success(message: str) -> None:
    log.info(message)
    _status("success", message)


def warn(message: str) -> None:
    log.warning(message)
    _status("warn", message)


def error(message: str) -> None:
    log.error(message)
    _status("error", message)


def fail(message: str) -> None:
    log.warning(message)
    _status("fail", message)


def start(message: str) -> None:
    log.info(message)
    _status("start", message)


def banner(title: str) -> None:
    print(f"{C_BOLD}┌  {title}{C_RESET}")


def print_document(title: str, contents: str, width: int = 80) -> None:
    """Print a document between horizontal rules."""
    print("=" * width)
    print(title)
    print("-" * width)
    print(contents)
    print("=" * width)


class StreamPrinter:
    """Renders a streaming model turn on the terminal.

    Model text is printed as it arrives, prefixed with ``>>> ``.  Status lines
    (tool calls, tool results) always start on a fresh line.
    """

    TEXT = "text"
    INFO = "info"

    def __init__(self, out=None):
        self._out = out or sys.stdout
        self._mode = self.INFO

    def _switch(self, mode: str) -> None:
        if self._mode == self.TEXT and mode == self.INFO:
            self._out.write("\n")
        elif self._mode == self.INFO and mode == self.TEXT:
            self._out.write(">>> ")
        self._mode = mode

    def text(self, delta: str) -> None:
        self._switch(self.TEXT)
        self._out.write(delta)
        self._out.flush()

    def tool_call(self, name: str, arguments) -> None:
        self._switch(self.INFO)
        start(f"{name} {_format_args(arguments)}")

    def tool_result(self, name: str, is_error: bool, result: str) -> None:
        self._switch(self.INFO)
        if is_error:
            fail(f"{name}: {result}")
        else:
            success(name)

    def event(self, kind: str) -> None:
        self._switch(self.INFO)
        log.debug(f"[stream] {kind}")

    def end_turn(self) -> None:
        self._switch(self.INFO)


def _format_args(arguments) -> str:
    if isinstance(arguments, str):
        return arguments
    try:
        return json.dumps(arguments, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(arguments)


def prompt_text(message: str) -> str | None:
    """Ask the human for a line of text.

    Returns the stripped answer, or ``None`` when the prompt was cancelled
    (Ctrl-C / Ctrl-D).
    """
    try:
        answer = input(f"{C_CYAN}◆{C_RESET}  {message}\n{C_DIM}│{C_RESET}  ")
    except (EOFError, KeyboardInterrupt):
        print()
        return None
    return answer.strip()
