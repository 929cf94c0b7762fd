"""CLI for running offline elevator-bank scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from simulation import ConfigurationError, SimulationConfig, SimulationEvent, Simulator

logger = logging.getLogger("run_scenario")


def build_simulator(config: Dict) -> Simulator:
    building_cfg = config.get("building", {})
    options = dict(config.get("options", {}))
    options.setdefault("floors", building_cfg.get("num_floors", 10))
    options.setdefault("elevator_count", building_cfg.get("elevator_count", 3))
    if "random_seed" in config:
        options.setdefault("random_seed", config["random_seed"])
    return Simulator(SimulationConfig.from_dict(options))


def _apply_scheduled_events(simulator: Simulator, events: Iterable[Dict], current_time: int) -> None:
    for event in events:
        if event.get("time") != current_time:
            continue
        if event.get("type") == "request":
            simulator.submit_request(event["origin"], event["destination"])
        elif event.get("type") == "service":
            simulator.service_elevator(event["elevator_id"], event.get("trips"))


def run_simulation(simulator: Simulator, config: Dict) -> List[SimulationEvent]:
    max_steps = config.get("max_steps", 10_000)
    events = config.get("events", [])
    log: List[SimulationEvent] = []
    simulator.on_event("*", log.append)

    for _ in range(max_steps):
        if simulator.is_settled():
            break
        _apply_scheduled_events(simulator, events, simulator.current_time)
        simulator.step()
    else:
        logger.warning("Stopped after %d steps without settling", max_steps)
        simulator.stop()
    return log


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write the event log and metrics as JSON",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--quiet", action="store_true", help="Do not print the event log")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = json.loads(args.config.read_text())
    try:
        simulator = build_simulator(config)
    except ConfigurationError as exc:
        parser.error(str(exc))
    log = run_simulation(simulator, config)

    start = simulator.config.start_minute
    if not args.quiet:
        for event in log:
            print(f"{event.clock(start)} {event.source_id}: {event.message}")

    final_metrics = asdict(simulator.metrics.snapshot(simulator.current_time))
    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "ticks": simulator.current_time,
        "settled": simulator.is_settled(),
        "final_metrics": final_metrics,
        "elevators": [elevator.snapshot() for elevator in simulator.elevators],
        "events": [event.as_dict() for event in log],
    }
    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Ticks: {results['ticks']}")
    print("Final metrics:")
    for key, value in final_metrics.items():
        print(f"  {key}: {value}")
    for elevator in simulator.elevators:
        print(f"  {elevator.label}: {elevator.status}, {elevator.distance_traveled} floors traveled")
    if args.output:
        print(f"Saved results to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
