"""Domain tests for similarity functions."""

from kb_rag.domain.similarity import cosine, top_k_above


def test_cosine_similarity():
    """Test basic cosine similarity calculation."""
    u = (1.0, 0.0, 0.0)
    v = (1.0, 0.0, 0.0)
    assert abs(cosine(u, v) - 1.0) < 1e-6

    u = (1.0, 0.0, 0.0)
    v = (0.0, 1.0, 0.0)
    assert abs(cosine(u, v) - 0.0) < 1e-6

    # Skalierung ändert den Winkel nicht
    assert abs(cosine((2.0, 2.0), (1.0, 1.0)) - 1.0) < 1e-6


def test_cosine_zero_vector_does_not_divide_by_zero():
    assert cosine((0.0, 0.0), (1.0, 0.0)) == 0.0


def test_top_k_above_filters_sorts_and_limits():
    scored = [(0.2, 0), (0.9, 1), (0.75, 2), (0.95, 3), (0.7, 4)]
    assert top_k_above(scored, top_k=2, threshold=0.7) == [(0.95, 3), (0.9, 1)]
    assert top_k_above(scored, top_k=10, threshold=0.7) == [
        (0.95, 3),
        (0.9, 1),
        (0.75, 2),
        (0.7, 4),
    ]


def test_top_k_above_never_pads_and_keeps_tie_order():
    assert top_k_above([(0.1, 0)], top_k=5, threshold=0.5) == []
    assert top_k_above([(0.8, 1), (0.8, 0)], top_k=5, threshold=0.0) == [(0.8, 0), (0.8, 1)]
