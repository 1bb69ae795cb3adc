"""Timeline calculation — trim windows for trim + fade + concat stitching.

Adjacent clips do not overlap. Each shared boundary of transition length T
is split in half: the outgoing clip loses T/2 from its tail and the
incoming clip loses T/2 from its head, and each fades over its own half.
Clip i therefore keeps

    [transitions[i-1].duration / 2,  durations[i] - transitions[i].duration / 2]

with the first clip trimming only its tail and the last only its head.
The output runs sum(durations) - sum(transition durations) seconds.
"""

from .errors import TimelineError
from .models import TimelineOffset, TransitionConfig

# Kept windows shorter than this are rejected; one frame at 30fps is ~0.033s.
MIN_WINDOW = 0.04


def _check_lengths(durations, transitions):
    if len(transitions) != max(len(durations) - 1, 0):
        raise ValueError(
            f"Expected {max(len(durations) - 1, 0)} transitions for "
            f"{len(durations)} clips, got {len(transitions)}"
        )


def calculate_offsets(
    durations: list[float],
    transitions: list[TransitionConfig],
) -> list[TimelineOffset]:
    """Compute each clip's kept window and its start in the output.

    Raises:
        ValueError: transitions is not exactly one shorter than durations.
        TimelineError: A clip is too short for the transitions on its edges.
    """
    _check_lengths(durations, transitions)

    offsets = []
    current_t = 0.0
    n = len(durations)
    for i, duration in enumerate(durations):
        head = transitions[i - 1].duration / 2 if i > 0 else 0.0
        tail = transitions[i].duration / 2 if i < n - 1 else 0.0
        trim_start = head
        trim_end = duration - tail

        if not 0 <= trim_start < trim_end <= duration or trim_end - trim_start < MIN_WINDOW:
            raise TimelineError(
                f"Clip {i} ({duration:.3f}s) is too short for its transitions "
                f"(needs {head:.3f}s at the head and {tail:.3f}s at the tail)"
            )

        offsets.append(TimelineOffset(
            clip_index=i,
            trim_start=trim_start,
            trim_end=trim_end,
            transition_start=current_t,
        ))
        current_t += trim_end - trim_start

    return offsets


def total_duration(
    durations: list[float],
    transitions: list[TransitionConfig],
) -> float:
    """Expected output length: sum of clip durations minus transition time."""
    _check_lengths(durations, transitions)
    return sum(durations) - sum(t.duration for t in transitions)
