"""Three-point (modified PERT) duration model.

``expected_duration`` weights the most-likely estimate ``w`` times against the
optimistic and pessimistic bounds; ``derive_bounds`` fills in O/P from a single
estimate and an uncertainty level when the user gave only M.
"""

from dataclasses import dataclass
from typing import Optional

from ..models.task import Task
from ..utils.numeric import clamp, round_half_up, to_minutes, to_optional_float

DEFAULT_WEIGHT = 3

# spread of the O..P range as a share of M, by uncertainty level
SPREAD_BY_WEIGHT = {1: 0.30, 2: 0.50, 3: 0.80, 4: 1.10, 5: 1.50}


@dataclass(frozen=True)
class ThreePointEstimate:
    """Optimistic / most-likely / pessimistic minutes with derived statistics."""

    optimistic: float
    most_likely: float
    pessimistic: float
    weight: float
    sigma: float

    @property
    def expected(self) -> float:
        return expected_duration(self.optimistic, self.most_likely, self.pessimistic, self.weight)


def expected_duration(o: float, m: float, p: float, w: Optional[float] = None) -> float:
    """Weighted expected duration TEw = (O + w*M + P) / (w + 2)."""
    weight = to_optional_float(w)
    if weight is None:
        weight = DEFAULT_WEIGHT
    return (o + weight * m + p) / (weight + 2)


def spread_sigma(o: float, p: float) -> float:
    """Standard deviation of the three-point estimate."""
    return (p - o) / 6.0


def normalize_weight(w: Optional[float], default: int = DEFAULT_WEIGHT) -> int:
    """Clamp an uncertainty level to the integer range 1..5."""
    weight = to_optional_float(w)
    if weight is None:
        weight = default
    return int(clamp(round_half_up(weight), 1, 5))


def derive_bounds(m: float, w: Optional[float] = None) -> ThreePointEstimate:
    """Derive O and P from the most-likely estimate and an uncertainty level.

    The spread is split asymmetrically (40% below M, 60% above) because
    overruns are more common than early finishes.
    """
    weight = normalize_weight(w)
    most_likely = to_minutes(m)
    spread = SPREAD_BY_WEIGHT[weight] * most_likely
    optimistic = max(1, most_likely - round_half_up(spread * 0.4))
    pessimistic = max(optimistic + 1, most_likely + round_half_up(spread * 0.6))
    return ThreePointEstimate(
        optimistic=optimistic,
        most_likely=most_likely,
        pessimistic=pessimistic,
        weight=weight,
        sigma=spread_sigma(optimistic, pessimistic),
    )


def estimate_task(task: Task, default_weight: int = DEFAULT_WEIGHT) -> ThreePointEstimate:
    """Three-point estimate for a task, using its own bounds when they are consistent."""
    weight = normalize_weight(task.uncertainty_weight, default_weight)
    m = to_minutes(task.estimated_minutes)
    o = to_optional_float(task.optimistic_minutes)
    p = to_optional_float(task.pessimistic_minutes)

    if o is not None and p is not None and 0 <= o <= m <= p and o < p:
        return ThreePointEstimate(
            optimistic=o,
            most_likely=m,
            pessimistic=p,
            weight=weight,
            sigma=spread_sigma(o, p),
        )
    return derive_bounds(m, weight)

