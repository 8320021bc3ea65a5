#!/usr/bin/python3

import argparse
import dataclasses
import json
import os
import sys
import numpy as np
from setpointopt import comfort
from setpointopt import config as config_mod
from setpointopt import load_csv
from setpointopt import results
from setpointopt import schedule
from setpointopt.objectives import ObjectiveExtractor


def export_debug_output(filename, objectives, extractor, output):
    """Export objectives and the evaluated slices to JSON for automation use."""
    import datetime

    def to_list(arr):
        return [float(x) for x in np.asarray(arr).flatten()]

    debug_data = {
        "generated_at": datetime.datetime.now().isoformat(),
        "num_rows": len(output),
        "columns": output.columns,
        "objectives": objectives.as_dict(),
        "windows": {
            "comfort": dataclasses.asdict(extractor.config.comfort_window),
            "energy": dataclasses.asdict(extractor.config.energy_window),
            "setpoint": dataclasses.asdict(extractor.config.setpoint_window),
        },
        "timeseries": {
            "pmv": to_list(extractor.pmv_data()),
            "electric_energy": to_list(extractor.electric_energy_data()),
            "setpoint": to_list(extractor.setpoint_data()),
        }
    }

    with open(filename, 'w') as f:
        json.dump(debug_data, f, indent=2)
    print(f"Debug output saved to: {filename}")


def run_comfort(values):
    ta, rh, va, tr, clo, met = values
    pmv = comfort.solve_pmv(ta, rh, va, tr, clo, met)
    set_star = comfort.solve_set(ta, rh, va, tr, clo, met)

    print("\n" + "="*40)
    print("COMFORT INDICES")
    print("="*40)
    if pmv.is_valid:
        print(f"PMV:                   {pmv.value:+.3f}")
        print(f"PPD:                   {comfort.compute_ppd(pmv.value):.1f} %")
    else:
        print(f"PMV:                   n/a ({pmv.status.value})")
    if set_star.is_valid:
        print(f"SET*:                  {set_star.value:.2f} C")
    else:
        print(f"SET*:                  n/a ({set_star.status.value})")
    print("="*40)
    return 0 if pmv.is_valid and set_star.is_valid else 1


def run_decode(args, cfg):
    schedule_cfg = cfg.schedule
    if args.direct:
        schedule_cfg = dataclasses.replace(schedule_cfg, encoding=config_mod.ENCODING_DIRECT)

    codec = schedule.ScheduleCodec(schedule_cfg)
    try:
        variable = load_csv.load_variables(args.decode, row=args.row)
        setpoints = codec.decode(variable)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"\n--- DECODED SCHEDULE ({schedule_cfg.encoding}) ---")
    for hour, t in enumerate(setpoints):
        print(f"{hour:02d}:00  {t:.1f} C")

    for problem in schedule.check_schedule(setpoints, schedule_cfg):
        print(f"Warning: {problem}")

    if args.output:
        load_csv.save_schedule(args.output, setpoints)
    return 0


def run_main(args_list=None):
    parser = argparse.ArgumentParser(
        description="HVAC Setpoint Schedule Objective Evaluator",
        formatter_class=argparse.RawTextHelpFormatter
    )

    # Input Data (Made optional here so we can print help if missing)
    parser.add_argument("csv_file", nargs='?', help="Path to simulator output CSV (one row per timestep)")

    parser.add_argument("--config", metavar="JSON_FILE",
                        help="Evaluation config JSON (columns, windows, tariff, schedule layout).\n"
                             "Uses built-in defaults if omitted.")

    # Mode Flags
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-d", "--decode", metavar="VARIABLE_CSV",
                       help="Decode an optimizer variable vector (CSV row) into a setpoint schedule.")
    group.add_argument("--comfort", nargs=6, type=float, metavar=("TA", "RH", "VA", "TR", "CLO", "MET"),
                       help="Compute PMV, PPD and SET* for one set of conditions.")

    parser.add_argument("--direct", action="store_true", help="Use direct (per-slot) encoding when decoding")
    parser.add_argument("--row", type=int, default=0, help="Row of the variable CSV to decode (default: 0)")
    parser.add_argument("-o", "--output", help="Filename to save the decoded schedule CSV")

    # Output Options
    parser.add_argument("--plot", action="store_true", help="Plot setpoint, PMV and power traces")
    parser.add_argument("--debug-output", metavar="JSON_FILE",
                        help="Export objectives and evaluated slices to JSON file (for agent/automation use)")

    # --- CUSTOM HELP DISPLAY ---
    if args_list is None and len(sys.argv) == 1:
        parser.print_help()
        print("\nUsage Examples:")
        print("  1. Evaluate Simulator Output:")
        print("     python main.py eplusout.csv --config building.json")
        print("\n  2. Decode Optimizer Variables:")
        print("     python main.py -d in_var.csv -o schedule.csv")
        print("\n  3. Comfort Indices:")
        print("     python main.py --comfort 26 50 0.1 27 0.5 1.2")
        return 1

    args = parser.parse_args(args_list)

    if args.comfort:
        return run_comfort(args.comfort)

    cfg = config_mod.EvaluationConfig()
    if args.config:
        if not os.path.exists(args.config):
            print(f"Error: Config file '{args.config}' not found.")
            return 1
        try:
            cfg = config_mod.load_config(args.config)
        except ValueError as e:
            print(f"Error loading config: {e}")
            return 1

    if args.decode:
        return run_decode(args, cfg)

    if not args.csv_file:
        print("Error: You must provide a simulator output CSV file.")
        return 1

    try:
        output = load_csv.load_output_csv(args.csv_file, timesteps_per_hour=cfg.extractor.timesteps_per_hour)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading simulator output: {e}")
        return 1

    try:
        extractor = ObjectiveExtractor(output, cfg.extractor)
    except ValueError as e:
        print(f"Error: Malformed simulator output: {e}")
        return 1

    objectives = extractor.extract()
    results.print_report(objectives)

    if args.debug_output:
        export_debug_output(args.debug_output, objectives, extractor, output)
    if args.plot:
        results.plot_results(output, cfg.extractor, title_suffix=os.path.basename(args.csv_file))
    return 0


if __name__ == "__main__":
    sys.exit(run_main())
