"""Pure similarity functions used by the in-process vector index."""

from math import sqrt

from .models import Vector


def cosine(u: Vector, v: Vector) -> float:
    """Compute cosine similarity between two vectors.

    Args:
        u: First vector
        v: Second vector

    Returns:
        Cosine similarity score between -1 and 1
    """
    dot = sum(a * b for a, b in zip(u, v, strict=False))
    nu = sqrt(sum(a * a for a in u)) or 1.0
    nv = sqrt(sum(b * b for b in v)) or 1.0
    return dot / (nu * nv)


def top_k_above(
    scored: list[tuple[float, int]], top_k: int, threshold: float
) -> list[tuple[float, int]]:
    """Keep entries scoring at least ``threshold``, best first, at most ``top_k``.

    Ties keep insertion order so results are deterministic.
    """
    kept = [pair for pair in scored if pair[0] >= threshold]
    kept.sort(key=lambda pair: (-pair[0], pair[1]))
    return kept[:top_k]
