"""
Radar engine demo runner.

Drives the relative positioning engine from a simulated host loop: the
observer walks an L-shaped path past a set of virtual emitters, the scan,
position and heading sources are synthesized each step, and projected
bearings are printed the way the radar and list views would show them.
"""

import sys
import math
import signal
import logging
import argparse
from typing import Dict, Optional, Tuple

import numpy as np

import config
from radar_core.proto import Medium, ScanReport, LocalPoint
from radar_core.localization import (
    LocalFrame,
    RelativePositioningEngine,
    RelativePositioningConfig,
    SignalNormalizerConfig,
    PathLossConfig,
    ReadingAccumulatorConfig,
    BearingProjectorConfig,
    HeadingSmootherConfig,
)
from radar_core.domain import format_distance, visible_in_overlay
from radar_core.metrics import get_metrics

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


def build_engine(engine_config: Dict) -> RelativePositioningEngine:
    """Create an engine from the dict-style runtime configuration."""
    return RelativePositioningEngine(RelativePositioningConfig(
        normalizer_config=SignalNormalizerConfig(
            ble_alpha=engine_config["ble_alpha"],
            wifi_alpha=engine_config["wifi_alpha"],
        ),
        path_loss_config=PathLossConfig(
            ble_ref_strength_dbm=engine_config["ble_ref_strength_dbm"],
            wifi_5ghz_scale=engine_config["wifi_5ghz_scale"],
            jump_ratio=engine_config["jump_ratio"],
            max_consecutive_jumps=engine_config["max_consecutive_jumps"],
        ),
        accumulator_config=ReadingAccumulatorConfig(
            min_movement_m=engine_config["min_movement_m"],
            max_history=engine_config["max_history"],
        ),
        projector_config=BearingProjectorConfig(
            stale_after_s=engine_config["stale_after_s"],
        ),
        heading_config=HeadingSmootherConfig(beta=engine_config["heading_beta"]),
    ))


def simulated_strength(distance_m: float, medium: Medium, ref_dbm: float) -> float:
    """Signal strength a virtual emitter would report at a distance."""
    distance_m = max(distance_m, 0.1)
    if medium == Medium.WIFI:
        return -40.0 - 25.0 * math.log10(distance_m)

    near = ref_dbm - 20.0 * math.log10(distance_m)
    if near > -70.0:
        return near
    return ref_dbm - 35.0 * math.log10(distance_m)


class RadarSimulation:
    """Simulated scanning session feeding the engine."""

    def __init__(self, sim_config: Dict, engine: RelativePositioningEngine):
        """
        Initialize simulation.

        Args:
            sim_config: SIMULATION_CONFIG-style dictionary
            engine: Engine under test
        """
        self.sim_config = sim_config
        self.engine = engine
        self.running = False
        self.frame = LocalFrame(sim_config["base_lat"], sim_config["base_lon"])
        self.rng = np.random.default_rng(sim_config.get("seed"))

        self.emitters: Dict[str, Dict] = {}
        for emitter_id, spec in sim_config["emitters"].items():
            self.emitters[emitter_id] = {
                "name": spec["name"],
                "medium": Medium(spec["medium"]),
                "position": LocalPoint(spec["e"], spec["n"]),
                "frequency_mhz": spec.get("frequency_mhz"),
            }

        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}, stopping...")
        self.running = False

    def observer_position(self, step: int) -> Tuple[LocalPoint, float]:
        """
        Observer position and travel heading at a step.

        Walks east for the first half of the run, then north.
        """
        step_m = self.sim_config["step_m"]
        half = self.sim_config["num_steps"] // 2
        if step < half:
            return LocalPoint(step * step_m, 0.0), 90.0
        return LocalPoint(half * step_m, (step - half) * step_m), 0.0

    def run(self, num_steps: Optional[int] = None):
        """Run the simulated walk."""
        num_steps = num_steps or self.sim_config["num_steps"]
        print_interval = config.OUTPUT_CONFIG["print_interval"]
        noise_db = self.sim_config["rssi_noise_db"]
        ref_dbm = self.engine.path_loss_config.ble_ref_strength_dbm

        self.running = True
        logger.info(f"Simulating {num_steps} steps past {len(self.emitters)} emitters")

        for step in range(num_steps):
            if not self.running:
                break

            now = step * self.sim_config["step_s"]
            observer, travel_heading = self.observer_position(step)
            lat, lon = self.frame.to_geodetic(observer)

            self.engine.update_heading(travel_heading + self.rng.normal(0.0, 3.0))

            for emitter_id, emitter in self.emitters.items():
                true_distance = observer.distance_to(emitter["position"])
                strength = simulated_strength(true_distance, emitter["medium"], ref_dbm)
                strength += self.rng.normal(0.0, noise_db)

                self.engine.ingest_scan(
                    ScanReport(
                        emitter_id=emitter_id,
                        raw_strength=strength,
                        observed_at=now,
                        medium=emitter["medium"],
                        display_name=emitter["name"],
                        frequency_mhz=emitter["frequency_mhz"],
                    ),
                    observer_lat=lat,
                    observer_lon=lon,
                )

            self.engine.evict_stale(now)

            if config.OUTPUT_CONFIG["enable_console_print"] and step % print_interval == 0:
                self._print_projection(step, lat, lon, now)

        self.running = False

    def _print_projection(self, step: int, lat: float, lon: float, now: float):
        """Print projected bearings for the current step."""
        heading = self.engine.heading_deg
        results = self.engine.project_all(lat, lon, now, heading)

        print(f"\n--- step {step} (heading {heading:.0f} deg) ---")
        for result in results:
            emitter = self.engine.get_emitter(result.emitter_id)
            mode = "fix " if result.is_triangulated else "seed"
            print(f"  {emitter.display_name:10s} {mode} "
                  f"bearing={result.world_angle_deg:6.1f} screen={result.screen_angle_deg:6.1f} "
                  f"dist={format_distance(result.distance_m):>8s} conf={result.confidence:.2f}")

        in_view = visible_in_overlay(results)
        print(f"  {len(in_view)} in camera view")


def main():
    """Entry point."""
    parser = argparse.ArgumentParser(description='Radar engine simulated walk')
    parser.add_argument('--steps', '-n', type=int, default=None,
                        help='number of simulation steps')
    parser.add_argument('--seed', '-s', type=int, default=None,
                        help='random seed for signal noise')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.seed is not None:
        config.SIMULATION_CONFIG["seed"] = args.seed
    if args.steps:
        config.SIMULATION_CONFIG["num_steps"] = args.steps

    engine = build_engine(config.ENGINE_CONFIG)
    simulation = RadarSimulation(config.SIMULATION_CONFIG, engine)
    simulation.run()

    if config.OUTPUT_CONFIG["enable_metrics_summary"]:
        get_metrics().print_summary()

    return 0


if __name__ == "__main__":
    sys.exit(main())
