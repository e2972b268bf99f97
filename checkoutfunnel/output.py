"""Serialization and plotting of ramp profiles."""

import json
import os

import matplotlib.pyplot as plt
import numpy as np

from .presets import PRESETS, generate


def to_stages_json(values: np.ndarray, spawn_rate: float) -> list[dict]:
    """Collapse per-second values into [{"duration": s, "target": n, "spawn_rate": r}, ...]."""
    stages: list[dict] = []
    for value in np.rint(values).astype(int):
        if stages and stages[-1]["target"] == int(value):
            stages[-1]["duration"] += 1
        else:
            stages.append({"duration": 1, "target": int(value), "spawn_rate": spawn_rate})
    return stages


def save_plots(values: np.ndarray, output_dir: str, name: str) -> None:
    """Save the user-count timeseries plot to output_dir."""
    os.makedirs(output_dir, exist_ok=True)

    plt.figure(figsize=(12, 5))
    plt.plot(values)
    plt.xlabel("Time (seconds)")
    plt.ylabel("Virtual users")
    plt.title(f"Ramp profile ({name})")
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, f"ramp_{name}.png"), dpi=150)
    plt.close()


def export_preset(preset_name: str, output_dir: str = "output", seed: int | None = None) -> str:
    """Write a preset's stages JSON and plot; returns the JSON path."""
    values = generate(preset_name, seed=seed)
    stages = to_stages_json(values, PRESETS[preset_name]["spawn_rate"])

    os.makedirs(output_dir, exist_ok=True)
    json_path = os.path.join(output_dir, f"{preset_name}.json")
    with open(json_path, "w") as f:
        json.dump(stages, f, indent=2)

    save_plots(values, output_dir, preset_name)
    return json_path
