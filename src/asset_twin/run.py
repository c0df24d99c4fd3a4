"""Entry point for the asset twin CLI."""

import argparse
import logging

from asset_twin.cli.serve import serve as serve_func
from asset_twin.cli.simulate import simulate as simulate_func


def _simulate_command(args: argparse.Namespace) -> None:
    """Handle 'simulate' subcommand."""
    simulate_func(
        config_dir=args.config,
        cycles=args.cycles,
        output_dir=args.output,
        export=args.export,
        seed=args.seed,
        notify=args.notify,
    )


def _serve_command(args: argparse.Namespace) -> None:
    """Handle 'serve' subcommand."""
    serve_func(
        config_dir=args.config,
        interval_sec=args.interval,
        max_cycles=args.max_cycles,
    )


def main(argv=None):
    """CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        description="Asset wear twin: degradation simulation and alerting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  simulate    Run N cycles offline and export the resulting fleet state
  serve       Run the real-time scheduler until Ctrl-C

Examples:
  python -m asset_twin simulate --cycles 20 --seed 7
  python -m asset_twin serve --interval 30
        """,
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # === 'simulate' subcommand ===
    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Run cycles offline and export results",
        description="Run engine cycles back to back and export CSV/JSON.",
    )
    simulate_parser.add_argument(
        "--config",
        default="config",
        help="Config directory path (default: config)",
    )
    simulate_parser.add_argument(
        "--cycles",
        type=int,
        default=10,
        help="Number of cycles to run (default: 10)",
    )
    simulate_parser.add_argument(
        "--output",
        default="output",
        help="Output directory for export (default: output)",
    )
    simulate_parser.add_argument(
        "--no-export",
        action="store_false",
        dest="export",
        help="Skip exporting results",
    )
    simulate_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: engine.random_seed from config)",
    )
    simulate_parser.add_argument(
        "--notify",
        action="store_true",
        help="Deliver alerts through the configured WhatsApp channel",
    )
    simulate_parser.set_defaults(func=_simulate_command)

    # === 'serve' subcommand ===
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the real-time scheduler",
        description="Drive simulation and alerting on a fixed interval.",
    )
    serve_parser.add_argument(
        "--config",
        default="config",
        help="Config directory path (default: config)",
    )
    serve_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between cycles (default: engine.interval_sec)",
    )
    serve_parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Stop after this many cycles",
    )
    serve_parser.set_defaults(func=_serve_command)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
