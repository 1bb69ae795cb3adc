"""Transition policy — similarity score to transition.

Three bands over the SSIM score of a clip boundary:

  score >= high_similarity            -> high_kind,   min_duration
  medium_similarity <= score < high   -> medium_kind, default_duration
  score < medium_similarity           -> low_kind,    max_duration

Near-identical boundaries only need a short blend; dissimilar ones get the
longest blend to mask the cut. All durations stay sub-second.
"""

from .models import TransitionConfig, TransitionKind
from .profile import TransitionTable


def _config(kind: TransitionKind, duration: float) -> TransitionConfig:
    if kind is TransitionKind.NONE:
        return TransitionConfig(kind, 0.0)
    return TransitionConfig(kind, duration)


def select_transition(
    similarity: float,
    table: TransitionTable | None = None,
) -> TransitionConfig:
    """Pick the transition for one clip boundary.

    Args:
        similarity: SSIM score in [0, 1], 1 = identical frames.
        table: Thresholds and durations. Defaults to the standard table.

    Returns:
        TransitionConfig for the boundary.
    """
    table = table or TransitionTable()
    if similarity >= table.high_similarity:
        return _config(table.high_kind, table.min_duration)
    if similarity >= table.medium_similarity:
        return _config(table.medium_kind, table.default_duration)
    return _config(table.low_kind, table.max_duration)
