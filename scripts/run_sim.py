import argparse
import logging
import pathlib
import sys
import time

# Ensure repository root is on PYTHONPATH when running without installation.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from missionswarm.config import load_config
from missionswarm.core.metrics import duplicate_claims
from missionswarm.core.simulator import SwarmSystem
from missionswarm.viz.logger import SwarmLogger
from missionswarm.viz.render_2d import SwarmRenderer2D


def main():
    parser = argparse.ArgumentParser(description="Run the mission-allocation swarm.")
    parser.add_argument("--config", type=pathlib.Path, help="Path to YAML config.")
    parser.add_argument("--no-render", action="store_true", help="Disable live rendering (headless).")
    parser.add_argument("--log", type=pathlib.Path, help="Optional path to write JSON log.")
    parser.add_argument("--duration", type=float, help="Override wall-clock run time in seconds.")
    parser.add_argument("--agents", type=int, help="Override number of agents.")
    parser.add_argument("--seed", type=int, help="Override mission sampling seed.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    cfg = load_config(args.config)
    if args.duration is not None:
        cfg["duration"] = args.duration
    if args.agents is not None:
        cfg["agents"]["count"] = args.agents
    if args.seed is not None:
        cfg["seed"] = args.seed

    system = SwarmSystem(cfg)
    system.spawn_agents()

    renderer = None
    if not args.no_render:
        renderer = SwarmRenderer2D(system.grid)
    swarm_log = SwarmLogger(args.log) if args.log else None

    system.start()
    try:
        while system.elapsed < cfg["duration"]:
            state = system.snapshot()
            completed = system.pool.retired
            if renderer:
                renderer.render(state, completed=completed)
            if swarm_log:
                swarm_log.log_state(state, completed=completed)
            logger.debug(f"t={state.t:.2f} duplicate claims={duplicate_claims(state)}")
            time.sleep(cfg["render_every"])
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        system.stop()

    logger.info(f"Completed {system.pool.retired} missions in {system.elapsed:.1f}s")
    if swarm_log:
        swarm_log.flush()


if __name__ == "__main__":
    main()
