import json

import numpy as np
import pytest

from checkoutfunnel.output import export_preset, to_stages_json
from checkoutfunnel.phases import Phase, RampSchedule, build_profile
from checkoutfunnel.presets import PRESETS, generate, schedule_for


def test_ramp_starts_from_start_users():
    values = build_profile([Phase("ramp", 60, 100)], start_users=1)
    assert len(values) == 60
    assert values[0] == 1
    assert values[-1] == 100
    assert np.all(np.diff(values) > 0)


def test_ramp_continues_from_previous_phase():
    values = build_profile([Phase("flat", 10, 20), Phase("ramp", 11, 30)])
    assert values[10] == 20
    assert values[-1] == 30


def test_noise_is_reproducible_and_clamped():
    phases = [Phase("flat", 100, 1, sigma=5)]
    first = build_profile(phases, seed=4)
    second = build_profile(phases, seed=4)
    assert np.array_equal(first, second)
    assert first.min() >= 0


@pytest.mark.parametrize("phases", [[], [Phase("flat", 0, 10)], [Phase("wave", 10, 10)]])
def test_invalid_profiles(phases):
    with pytest.raises(ValueError):
        build_profile(phases)


def test_schedule_ticks_then_ramps_down_then_stops():
    schedule = RampSchedule(np.array([10.0, 20.0, 30.0]), spawn_rate=5, ramp_down_s=10)
    assert schedule.tick(0) == (10, 5)
    assert schedule.tick(2.9) == (30, 5)
    assert schedule.tick(8) == (15, 5)
    assert schedule.tick(13) is None
    assert schedule.duration == 13


def test_schedule_without_ramp_down_stops_at_profile_end():
    schedule = RampSchedule(np.array([5.0]), spawn_rate=1)
    assert schedule.tick(0.5) == (5, 1)
    assert schedule.tick(1) is None


def test_default_preset_ramps_one_to_hundred_in_a_minute():
    schedule = schedule_for("ramping")
    assert schedule.tick(0)[0] == 1
    assert schedule.tick(59)[0] == 100
    assert schedule.tick(60) is None


def test_unknown_preset():
    with pytest.raises(ValueError):
        generate("nope")


def test_stages_collapse_equal_seconds():
    stages = to_stages_json(generate("constant"), PRESETS["constant"]["spawn_rate"])
    assert stages == [{"duration": 60, "target": 100, "spawn_rate": 100}]


def test_export_preset_writes_json_and_plot(tmp_path):
    json_path = export_preset("constant", output_dir=str(tmp_path))
    with open(json_path) as f:
        assert json.load(f)[0]["target"] == 100
    assert (tmp_path / "ramp_constant.png").exists()
