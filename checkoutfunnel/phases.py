"""Ramp profiles: how many virtual users should be running, second by second."""

from dataclasses import dataclass
from typing import Literal

import numpy as np


@dataclass
class Phase:
    """A single phase of a ramp profile.

    kind="flat":  hold ``target`` users (plus normal(0, sigma) noise) for duration_s
    kind="ramp":  linspace(start, target, duration_s) plus the same noise;
                  ``start`` defaults to wherever the previous phase ended
    """

    kind: Literal["flat", "ramp"]
    duration_s: int
    target: float
    start: float | None = None  # only used for ramp
    sigma: float = 0.0


def build_profile(
    phases: list[Phase],
    start_users: float = 0,
    min_value: float = 0,
    seed: int | None = None,
) -> np.ndarray:
    """Concatenate phases into a 1-D array of user counts, one per second.

    Parameters
    ----------
    phases : list[Phase]
        Ordered list of phases to concatenate.
    start_users : float
        Users running at t=0; the first ramp starts here unless it sets ``start``.
    min_value : float
        Floor clamp.
    seed : int | None
        RNG seed for reproducible noise.
    """
    if not phases:
        raise ValueError("a ramp profile needs at least one phase")
    if seed is not None:
        np.random.seed(seed)

    segments: list[np.ndarray] = []
    current = float(start_users)

    for phase in phases:
        if phase.duration_s <= 0:
            raise ValueError(f"phase duration must be positive, got {phase.duration_s}")
        noise = np.random.normal(0, phase.sigma, phase.duration_s) if phase.sigma else 0.0
        if phase.kind == "flat":
            vals = np.full(phase.duration_s, float(phase.target)) + noise
        elif phase.kind == "ramp":
            start = phase.start if phase.start is not None else current
            vals = np.linspace(start, phase.target, phase.duration_s) + noise
        else:
            raise ValueError(f"unknown phase kind: {phase.kind}")
        segments.append(vals)
        current = float(phase.target)

    return np.clip(np.concatenate(segments), min_value, None)


@dataclass
class RampSchedule:
    """Answers the scheduler's "how many users now?" question.

    After the profile ends, users are ramped linearly down to zero over
    ``ramp_down_s`` seconds; then ``tick`` returns None and the run stops.
    """

    values: np.ndarray
    spawn_rate: float
    ramp_down_s: float = 0.0

    @property
    def duration(self) -> float:
        return len(self.values) + self.ramp_down_s

    def tick(self, run_time: float) -> tuple[int, float] | None:
        index = int(run_time)
        if index < len(self.values):
            return int(round(self.values[index])), self.spawn_rate

        elapsed = run_time - len(self.values)
        if elapsed < self.ramp_down_s:
            last = float(self.values[-1])
            users = last * (1 - elapsed / self.ramp_down_s)
            return int(round(users)), self.spawn_rate
        return None
