"""Split long text into chunks that fit the platform message limit."""

from __future__ import annotations

import re

DISCORD_MESSAGE_LIMIT = 2000

# Terminator followed by whitespace, or at the very end of the window
_SENTENCE_END = re.compile(r"[.!?](?=\s|$)")


def chunk_message(text: str, max_length: int = DISCORD_MESSAGE_LIMIT) -> list[str]:
    """Split a long message into chunks of at most ``max_length`` characters.

    Each cut prefers, in order, the last sentence end, the last newline and the
    last space inside the window. A boundary is only used when it sits at or past
    the middle of the window, otherwise the text is hard-cut at ``max_length``.

    Args:
        text: The text to split.
        max_length: Maximum length per chunk.

    Returns:
        Ordered list of chunks. Text that already fits is returned unchanged
        as a single chunk, even when empty.

    Raises:
        ValueError: If ``max_length`` is not positive.
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    remaining = text

    while remaining:
        if len(remaining) <= max_length:
            chunk = remaining.strip()
            if chunk:
                chunks.append(chunk)
            break

        cut = _find_cut(remaining[:max_length], max_length)
        chunk = remaining[:cut].strip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[cut:].lstrip()

    return chunks


def _find_cut(window: str, max_length: int) -> int:
    """Return the index at which to cut ``window``."""
    threshold = max_length * 0.5

    # Gated on the terminator's own offset; the cut keeps the terminator
    sentence = _last_sentence_end(window)
    if sentence is not None and sentence.start() >= threshold:
        return sentence.end()

    newline = window.rfind("\n")
    if newline >= threshold:
        return newline

    space = window.rfind(" ")
    if space >= threshold:
        return space

    return max_length


def _last_sentence_end(window: str) -> re.Match[str] | None:
    """Last sentence terminator in ``window``, if any."""
    last = None
    for match in _SENTENCE_END.finditer(window):
        last = match
    return last
