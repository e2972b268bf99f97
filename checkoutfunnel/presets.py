"""Named ramp profiles.

Each preset has:
  "spawn_rate"  : users started (or stopped) per second
  "start_users" : users running when the test starts
  "phases"      : list[Phase] handed to build_profile
"""

from .phases import Phase, RampSchedule, build_profile

PRESETS: dict[str, dict] = {
    # Default: 1 user ramping to 100 over one minute
    "ramping": {
        "spawn_rate": 5,
        "start_users": 1,
        "phases": [Phase("ramp", 60, 100)],
    },
    # 100 users for one minute
    "constant": {
        "spawn_rate": 100,
        "start_users": 100,
        "phases": [Phase("flat", 60, 100)],
    },
    # Short spike over a small steady baseline
    "spike": {
        "spawn_rate": 20,
        "start_users": 5,
        "phases": [
            Phase("flat", 120, 5, sigma=1),
            Phase("ramp", 30, 150, start=5, sigma=5),
            Phase("flat", 120, 150, sigma=10),
            Phase("ramp", 30, 5, start=150, sigma=5),
            Phase("flat", 60, 5, sigma=1),
        ],
    },
}


def generate(preset_name: str, seed: int | None = None):
    """Per-second user counts for a named preset."""
    if preset_name not in PRESETS:
        raise ValueError(f"Unknown ramp preset: {preset_name}")
    preset = PRESETS[preset_name]
    return build_profile(preset["phases"], start_users=preset["start_users"], seed=seed)


def schedule_for(preset_name: str, ramp_down_s: float = 0.0, seed: int | None = None) -> RampSchedule:
    values = generate(preset_name, seed=seed)
    return RampSchedule(values, PRESETS[preset_name]["spawn_rate"], ramp_down_s)
