"""Command-line interface for the asteroid pose graph."""

import argparse
import dataclasses
import logging
import signal
import sys
import threading
from pathlib import Path

import numpy as np

from asteroidview.config.schema import (
    AsteroidViewError,
    ConfigError,
    FrameTreeError,
    SceneConfig,
)
from asteroidview.core.bus import MessageBus, Subscription
from asteroidview.core.clock import Clock
from asteroidview.core.frames import FrameTree
from asteroidview.io.config import generate_config_yaml, load_config
from asteroidview.nodes.publisher import PosePublisherNode
from asteroidview.nodes.viewer import AsteroidViewerNode
from asteroidview.utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Seconds between frame tree summaries while running
STATUS_INTERVAL = 1.0


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser with subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="asteroidview",
        description="Asteroid and stereo camera pose graph publisher",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
    )

    # run subcommand
    run_parser = subparsers.add_parser(
        "run",
        help="Run the pose publisher and viewer loops",
        description="Run the periodic pose publisher and the reactive viewer over one shared bus.",
    )
    run_parser.add_argument(
        "config_path",
        type=Path,
        help="Path to configuration YAML file",
    )
    run_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable per-tick debug output",
    )
    run_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    run_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also append log output to this file",
    )
    run_parser.set_defaults(func=cmd_run)

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Validate a configuration file",
        description="Load a configuration file and print a summary without starting the loops.",
    )
    check_parser.add_argument(
        "config_path",
        type=Path,
        help="Path to configuration YAML file",
    )
    check_parser.set_defaults(func=cmd_check)

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Generate a configuration file",
        description="Write a configuration template with every option and its default.",
    )
    init_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("config.yaml"),
        help="Output path for generated config file (default: config.yaml)",
    )
    init_parser.add_argument(
        "--mesh",
        type=str,
        default="asteroid.dae",
        help="Mesh file name to reference (default: asteroid.dae)",
    )
    init_parser.add_argument(
        "--baseline",
        type=float,
        default=0.2,
        help="Camera baseline in meters (default: 0.2)",
    )
    init_parser.set_defaults(func=cmd_init)

    return parser


def _load(config_path: Path) -> tuple[SceneConfig | None, int]:
    """Load config, printing errors. Returns (config, exit_code)."""
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return None, 1
    try:
        return load_config(config_path), 0
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None, 1
    except ConfigError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return None, 2


def _log_frames(tree: FrameTree) -> None:
    for frame in tree.frames()[1:]:
        try:
            pose = tree.lookup(frame)
        except FrameTreeError:
            continue
        logger.debug(
            f"{frame}: position={np.round(pose.position, 4)} "
            f"orientation={np.round(pose.orientation, 4)}"
        )


def build_scene(
    config: SceneConfig,
    bus: MessageBus,
    clock: Clock | None = None,
) -> tuple[FrameTree, Subscription, AsteroidViewerNode, PosePublisherNode]:
    """
    Wire the viewer, the publisher and a frame tree onto one bus.

    The viewer owns the world -> asteroid edge here, stamped together with the
    marker, so the publisher's own frame broadcast is switched off.

    Args:
        config: Loaded scene configuration
        bus: Bus shared by both loops
        clock: Time source for both loops (default: wall clock)

    Returns:
        Tuple of (tree, tree_subscription, viewer, publisher)
    """
    tree = FrameTree()
    tree_sub = tree.attach(bus)
    viewer = AsteroidViewerNode(config.viewer, bus, clock)
    publisher_config = config.publisher
    if publisher_config.broadcast_frames:
        logger.debug("Viewer broadcasts world -> asteroid; publisher frame broadcast disabled")
        publisher_config = dataclasses.replace(publisher_config, broadcast_frames=False)
    publisher = PosePublisherNode(publisher_config, bus, clock)
    return tree, tree_sub, viewer, publisher


def cmd_run(args: argparse.Namespace) -> int:
    """
    Execute run command.

    Both loops run in their own thread over one bus. A failure in either loop
    stops both and ends the command with exit code 3.

    Args:
        args: Parsed arguments with config_path, verbose, duration, log_file

    Returns:
        Exit code: 0 for success, non-zero for errors
    """
    config, code = _load(args.config_path)
    if config is None:
        return code

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    bus = MessageBus()
    stop = threading.Event()
    errors: list[BaseException] = []

    tree, tree_sub, viewer, publisher = build_scene(config, bus)

    def _guard(loop):
        def target():
            try:
                loop(stop)
            except Exception as e:
                logger.error(f"{type(e).__name__}: {e}")
                errors.append(e)
                stop.set()
        return target

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        stop.set()

    previous = {
        sig: signal.signal(sig, _signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    threads = [
        threading.Thread(target=_guard(viewer.run), name="viewer", daemon=True),
        threading.Thread(target=_guard(publisher.run), name="publisher", daemon=True),
    ]
    try:
        for thread in threads:
            thread.start()
        remaining = args.duration
        while not stop.is_set():
            wait = STATUS_INTERVAL if remaining is None else min(STATUS_INTERVAL, remaining)
            if stop.wait(wait):
                break
            bus.spin_once([tree_sub])
            _log_frames(tree)
            if remaining is not None:
                remaining -= wait
                if remaining <= 0:
                    stop.set()
    finally:
        stop.set()
        for thread in threads:
            thread.join()
        bus.close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    if errors:
        print(f"Run failed: {errors[0]}", file=sys.stderr)
        return 3
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """
    Execute check command.

    Args:
        args: Parsed arguments with config_path

    Returns:
        Exit code: 0 if the configuration is valid
    """
    config, code = _load(args.config_path)
    if config is None:
        return code

    pub, view = config.publisher, config.viewer
    print(
        f"Configuration valid. Asteroid pose on '{pub.object_pose_topic}', "
        f"camera pose on '{pub.camera_pose_topic}'."
    )
    print(f"  Spin: omega={pub.omega:g} rad/s, publisher at {pub.rate_hz:g} Hz")
    print(f"  Camera baseline: {view.cam_baseline:g} m, viewer at {view.rate_hz:g} Hz")
    print(
        f"  Mesh: {view.mesh_prefix}{view.file_3d} "
        f"(scale {view.scale_object:g}, offset {view.offset_object.tolist()})"
    )
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """
    Execute init command.

    Args:
        args: Parsed arguments with output, mesh, baseline

    Returns:
        Exit code: 0 on success, 1 if the output exists or cannot be written
    """
    output_path = args.output
    if output_path.exists():
        print(f"Error: Output file already exists: {output_path}", file=sys.stderr)
        return 1

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(generate_config_yaml(args.mesh, args.baseline))
    except OSError as e:
        print(f"Error: Failed to write config file: {e}", file=sys.stderr)
        return 1

    print(f"Config file created: {output_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except AsteroidViewError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
