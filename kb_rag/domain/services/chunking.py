from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from ..errors import ConfigurationError
from ..models import Chunk

ChunkStrategy = Literal["fixed", "recursive"]

STRATEGIES: tuple[str, ...] = ("fixed", "recursive")


@dataclass(frozen=True)
class ChunkingParams:
    strategy: ChunkStrategy = "recursive"
    size: int = 512
    overlap: int = 50


# ---------- Split boundaries (coarse to fine) ----------

_PARAGRAPH = re.compile(r"\n\s*\n")
_SENT_END = re.compile(r"(?<=[.!?])\s+")  # naive, aber robust genug ohne externe Libs
_WHITESPACE = re.compile(r"\s+")

_SEPARATORS = (_PARAGRAPH, _SENT_END, _WHITESPACE)


def _validate(p: ChunkingParams) -> None:
    if p.strategy not in STRATEGIES:
        raise ConfigurationError(f"unknown chunking strategy '{p.strategy}'")
    if p.size <= 0:
        raise ConfigurationError(f"chunk size must be > 0, got {p.size}")
    if p.overlap < 0:
        raise ConfigurationError(f"chunk overlap must be >= 0, got {p.overlap}")
    if p.overlap >= p.size:
        raise ConfigurationError(
            f"chunk overlap ({p.overlap}) must be smaller than chunk size ({p.size})"
        )


def split_keep_separators(text: str, pattern: re.Pattern[str]) -> list[str]:
    """Split after every match; the separator stays on the left piece.

    The pieces always concatenate back to ``text``.
    """
    pieces: list[str] = []
    start = 0
    for m in pattern.finditer(text):
        if m.end() > start:
            pieces.append(text[start : m.end()])
            start = m.end()
    if start < len(text):
        pieces.append(text[start:])
    return pieces


def atomic_spans(text: str, budget: int, level: int = 0) -> list[str]:
    """Recursively split ``text`` into spans no longer than ``budget``.

    Paragraphs first, then sentences, then words; anything still too long is
    cut at character offsets.
    """
    if len(text) <= budget:
        return [text]
    if level >= len(_SEPARATORS):
        return [text[i : i + budget] for i in range(0, len(text), budget)]
    spans: list[str] = []
    for piece in split_keep_separators(text, _SEPARATORS[level]):
        spans.extend(atomic_spans(piece, budget, level + 1))
    return spans


# ---------- Strategies ----------


def split_fixed(text: str, size: int, overlap: int) -> list[str]:
    """Character windows of ``size``; window k starts at k * (size - overlap)."""
    step = size - overlap
    out: list[str] = []
    start = 0
    while True:
        out.append(text[start : start + size])
        if start + size >= len(text):
            return out
        start += step


def split_recursive(text: str, size: int, overlap: int) -> list[str]:
    """Pack structure-aware spans into chunks of at most ``size`` characters.

    Each chunk after the first starts with the last ``overlap`` characters of
    its predecessor, so only ``size - overlap`` new characters fit per chunk.
    """
    budget = size - overlap
    boundaries: list[int] = []
    window_start = 0
    pos = 0
    limit = size  # first chunk carries no overlap prefix
    for span in atomic_spans(text, budget):
        if pos > window_start and pos + len(span) - window_start > limit:
            boundaries.append(pos)
            window_start = pos
            limit = budget
        pos += len(span)
    boundaries.append(pos)

    out: list[str] = []
    prev_end = 0
    for i, end in enumerate(boundaries):
        start = 0 if i == 0 else prev_end - overlap
        out.append(text[start:end])
        prev_end = end
    return out


def chunk_text(
    text: str,
    params: ChunkingParams | None = None,
    document_id: str = "",
    metadata: Mapping[str, Any] | None = None,
) -> list[Chunk]:
    """Split a document into ordered, overlapping chunks.

    Empty text, or text no longer than ``size``, yields exactly one chunk
    equal to the input.

    Raises:
        ConfigurationError: invalid strategy, size or overlap
    """
    p = params or ChunkingParams()
    _validate(p)

    if len(text) <= p.size:
        pieces = [text]
    elif p.strategy == "fixed":
        pieces = split_fixed(text, p.size, p.overlap)
    else:
        pieces = split_recursive(text, p.size, p.overlap)

    meta = dict(metadata or {})
    return [
        Chunk(text=piece, index=i, document_id=document_id, metadata=dict(meta))
        for i, piece in enumerate(pieces)
    ]


# Eigenschaften:
#
# - Kein I/O, keine Globals, keine externen NLP-Libs.
# - Overlap ist ein Zeichen-Tail: Chunk k+1 beginnt mit den letzten `overlap`
#   Zeichen von Chunk k; Abschneiden dieses Präfixes rekonstruiert den Text.
# - Indizes sind lückenlos 0..n-1.
