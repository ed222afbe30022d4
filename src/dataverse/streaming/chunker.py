"""Text chunking for progressive reveal.

Hides how a finished piece of text is cut into the fragments that get
appended one tick at a time. Both policies are pure and deterministic:
the same text and size always give the same fragments, and joining the
fragments gives back the original text.
"""

import re

_WHITESPACE_RUN = re.compile(r"(\s+)")
_LINE_END = re.compile(r"(?<=\n)")


def chunk_by_whitespace(text: str, size: int) -> list[str]:
    """Split text into fragments of at most ``size`` characters.

    Fragments break only between whitespace-delimited tokens. A single token
    longer than ``size`` is emitted whole rather than split.

    Args:
        text: Text to split
        size: Target maximum fragment length

    Returns:
        Ordered list of fragments (empty for empty text)
    """
    if not text:
        return []

    if len(text) <= size:
        return [text]

    # Whitespace runs are kept as their own tokens
    tokens = [token for token in _WHITESPACE_RUN.split(text) if token]
    chunks: list[str] = []
    current = ""

    for token in tokens:
        candidate = current + token
        if current and len(candidate) > size:
            chunks.append(current)
            trimmed = token.lstrip()
            current = trimmed if trimmed else token
            continue

        current = candidate

    if current:
        chunks.append(current)

    return chunks


def chunk_preserving_newlines(text: str, size: int) -> list[str]:
    """Split text into fragments made of whole lines.

    A line is the text up to and including its trailing newline. Lines are
    never split across fragments, so an oversized line becomes one
    oversized fragment.

    Args:
        text: Text to split
        size: Target maximum fragment length

    Returns:
        Ordered list of fragments (empty for empty text)
    """
    lines = [line for line in _LINE_END.split(text) if line]
    chunks: list[str] = []
    current = ""

    for line in lines:
        if current and len(current + line) > size:
            chunks.append(current)
            current = line
        else:
            current += line

    if current:
        chunks.append(current)

    return chunks
