"""
Internal utility functions for the pavesim package.

These functions are intended for internal use only and are not part of the public API.
"""


def _utilization(elapsed: float, idle: float) -> float:
    """Share of ``elapsed`` that was not idle, clamped at 0.

    Args:
        elapsed (float): Length of the observed window
        idle (float): Idle time booked inside that window

    Returns:
        float: Utilization in ``[0, 1]``; ``0`` for an empty window
    """
    if elapsed <= 0:
        return 0.0
    return max(0.0, (elapsed - idle) / elapsed)
