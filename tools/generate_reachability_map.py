#!/usr/bin/env python3
"""CLI tool for generating, growing and inspecting reachability maps."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
_project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_project_root))

from src.config.planner_config import get_planner_config
from src.kinematics import arm_6dof_chain, planar_3r_chain
from src.kinematics.dh_params import (
    ARM_6DOF_LOWER_LIMITS,
    ARM_6DOF_UPPER_LIMITS,
    PLANAR_3R_LOWER_LIMITS,
    PLANAR_3R_UPPER_LIMITS,
)
from src.planning.reachability_map import ReachabilityMap
from src.safety.self_collision import arm_6dof_collision_model, planar_3r_collision_model
from src.utils.logging_config import setup_logging
from src.utils.random_sampling import RandomSampler

logger = logging.getLogger("tools.generate_reachability_map")

_CHAINS = {
    "planar3r": (planar_3r_chain, planar_3r_collision_model, PLANAR_3R_LOWER_LIMITS, PLANAR_3R_UPPER_LIMITS, 2),
    "arm6dof": (arm_6dof_chain, arm_6dof_collision_model, ARM_6DOF_LOWER_LIMITS, ARM_6DOF_UPPER_LIMITS, 3),
}


def cmd_generate(args: argparse.Namespace) -> int:
    cfg = get_planner_config().get("reachability")
    make_chain, make_collision, lower, upper, default_dim = _CHAINS[args.chain]
    chain = make_chain()

    voxel_size = args.voxel_size if args.voxel_size is not None else cfg["voxel_size"]
    samples = args.samples if args.samples is not None else cfg["sample_count"]
    seed = args.seed if args.seed is not None else cfg["seed"]
    dimension = args.dimension if args.dimension is not None else default_dim

    rmap = ReachabilityMap(voxel_size=voxel_size, dimension=dimension)
    accepted = rmap.generate(
        chain,
        make_collision(),
        args.effector or cfg["effector_link"],
        chain.n_joints,
        lower,
        upper,
        sample_count=samples,
        sampler=RandomSampler(seed),
        excluded_links=cfg["excluded_links"],
    )
    for _ in range(args.grow):
        rmap.grow()

    print(f"Accepted samples: {accepted}/{samples}")
    print(f"Grid steps:       {rmap.steps.tolist()}")
    print(f"Max value:        {rmap.get_max_value():.0f}")
    print(f"Active cells:     {len(rmap.active_cell_centers())}/{rmap.reach_count.size}")
    if args.output:
        rmap.save(args.output)
        print(f"Saved to {args.output}")
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    rmap = ReachabilityMap.load(args.map)
    point = [float(v) for v in args.point.split(",")]
    if len(point) != rmap.dimension:
        print(f"Expected {rmap.dimension} coordinates, got {len(point)}", file=sys.stderr)
        return 2
    idx = rmap.get_index(point)
    print(f"Cell:  {'outside' if idx is None else idx}")
    print(f"Score: {rmap.get_value(point):.4f}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    cfg = get_planner_config()
    if args.action == "show":
        print(json.dumps(cfg.get_all(), indent=2))
    elif args.action == "diff":
        print(json.dumps(cfg.diff(), indent=2))
    elif args.action == "reset":
        cfg.reset()
        print("Planner config reset to defaults")
    else:
        if args.setting is None or args.value is None:
            print("config set needs SECTION.KEY and VALUE", file=sys.stderr)
            return 2
        section, _, key = args.setting.partition(".")
        try:
            value = json.loads(args.value)
        except ValueError:
            value = args.value  # bare strings such as link names
        try:
            cfg.set(section, key, value)
        except KeyError as e:
            print(e.args[0], file=sys.stderr)
            return 2
        print(f"{section}.{key} = {json.dumps(value)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate and query reachability maps")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    p = sub.add_parser("generate", help="Sample an example chain into a map")
    p.add_argument("--chain", choices=sorted(_CHAINS), default="planar3r")
    p.add_argument("--effector", default=None, help="Effector link name")
    p.add_argument("--voxel-size", type=float, default=None)
    p.add_argument("--dimension", type=int, choices=[2, 3], default=None)
    p.add_argument("--samples", "-n", type=int, default=None)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--grow", type=int, default=0, help="Dilation passes after sampling")
    p.add_argument("--output", "-o", default=None, help="JSON file to write")

    # query
    p = sub.add_parser("query", help="Score a point against a saved map")
    p.add_argument("map", help="JSON map file")
    p.add_argument("point", help="Comma-separated coordinates, e.g. 0.3,0.1")

    # config
    p = sub.add_parser("config", help="Show or change planner settings")
    p.add_argument("action", choices=["show", "diff", "set", "reset"])
    p.add_argument("setting", nargs="?", help="SECTION.KEY, for set")
    p.add_argument("value", nargs="?", help="JSON value, for set")

    args = parser.parse_args(argv)
    setup_logging(debug=args.debug)

    handlers = {
        "generate": cmd_generate,
        "query": cmd_query,
        "config": cmd_config,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
