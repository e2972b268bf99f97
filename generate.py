#!/usr/bin/env python3
"""CLI entrypoint for previewing ramp profiles.

Usage:
    python generate.py <preset_name> [--output-dir DIR] [--seed N]
    python generate.py --list
"""

import argparse

from checkoutfunnel.output import export_preset
from checkoutfunnel.presets import PRESETS


def main() -> None:
    parser = argparse.ArgumentParser(description="Preview a load-test ramp profile.")
    parser.add_argument("preset", nargs="?", help="Preset name (see --list)")
    parser.add_argument("--list", action="store_true", help="List available presets")
    parser.add_argument("--output-dir", default="output", help="Output directory (default: output)")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")
    args = parser.parse_args()

    if args.list:
        for name, cfg in PRESETS.items():
            seconds = sum(p.duration_s for p in cfg["phases"])
            print(f"  {name:10s}  {seconds:5d}s  spawn_rate={cfg['spawn_rate']}")
        return

    if not args.preset:
        parser.error("preset name required (use --list to see available presets)")

    if args.preset not in PRESETS:
        parser.error(f"unknown preset '{args.preset}' (use --list to see available presets)")

    json_path = export_preset(args.preset, output_dir=args.output_dir, seed=args.seed)
    print(f"{args.preset}: wrote {json_path} and plot")


if __name__ == "__main__":
    main()
