"""Tiny terminal UI helpers (prompt_toolkit-based).

Stands in for the speech-recognition collaborator at the terminal: each
accepted line is one finalized transcript. Kept separate from the
interpreter so it can be driven with pipe input in tests.
"""

from __future__ import annotations

from collections.abc import Iterable

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style

from .models import TransactionKind

EXIT_WORDS: frozenset[str] = frozenset({"quit", "exit"})


def transcript_completer(categories: Iterable[str] = ()) -> WordCompleter:
    """Complete kind words and categories already present in the store."""

    words = [k.value for k in TransactionKind]
    for cat in categories:
        if cat not in words:
            words.append(cat)
    return WordCompleter(words, ignore_case=True, sentence=False)


def prompt_transcript(
    *,
    message: str = "transcript> ",
    categories: Iterable[str] = (),
    session: PromptSession | None = None,
) -> str | None:
    """Read one transcript line.

    Returns ``None`` when the user ends the session (EOF, Ctrl-C, or one of
    ``quit``/``exit``). Blank lines are returned as ``""`` so the caller can
    decide whether to report them as not understood.
    """

    style = Style.from_dict({"prompt": "fg:#00aa88"})
    if session is None:
        sess: PromptSession = PromptSession()
    else:
        sess = PromptSession(
            input=getattr(session, "input", None),
            output=getattr(session, "output", None),
        )

    try:
        text = sess.prompt(
            [("class:prompt", message)],
            completer=transcript_completer(categories),
            style=style,
        )
    except (EOFError, KeyboardInterrupt):
        return None

    if text.strip().lower() in EXIT_WORDS:
        return None
    return text


__all__ = ["EXIT_WORDS", "prompt_transcript", "transcript_completer"]
