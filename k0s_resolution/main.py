#!/usr/bin/env python3
"""
Main entry point for the K0s resolution pipeline.

Reads the input tables, applies the V0 selection, and writes mass and
daughter momentum resolution histograms for data or MC.
"""

import sys
import os
import logging
import argparse
import yaml

from k0s_resolution.domain.config import ConfigurationError, PipelineConfig
from k0s_resolution.pipeline.executor import PipelineExecutor
from k0s_resolution.utils.paths import create_timestamped_run_dir, update_config_paths_with_run_dir


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="K0s resolution pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with the default config
  k0s-resolution

  # MC file, four threads
  k0s-resolution --config mc.yaml --input k0s_mc.root --threads 4

  # Write into an existing directory
  k0s-resolution --run-dir /data/k0s/run_20261018

  # Dry-run to validate config
  k0s-resolution --dry-run
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate configuration without running pipeline"
    )
    parser.add_argument(
        "--run-dir", type=str, default=None,
        help="Pre-created run directory (skips timestamped dir creation)"
    )

    override_group = parser.add_argument_group("Config Overrides")
    override_group.add_argument(
        "--input", type=str, default=None,
        help="Input ROOT file (overrides input.path)"
    )
    override_group.add_argument(
        "--threads", type=int, default=None,
        help="Number of processing threads (overrides output.threads)"
    )

    return parser.parse_args(argv)


def apply_overrides(config_dict: dict, args) -> dict:
    """Apply command line overrides to the raw configuration."""
    config_dict = dict(config_dict)
    if args.input is not None:
        config_dict["input"] = {**(config_dict.get("input") or {}), "path": args.input}
    if args.threads is not None:
        config_dict["output"] = {**(config_dict.get("output") or {}), "threads": args.threads}
    return config_dict


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("K0s Resolution Pipeline")
    logger.info("=" * 60)

    try:
        logger.info(f"Loading configuration from: {args.config}")
        config_dict = apply_overrides(load_config(args.config), args)

        # Validate before creating any directories
        PipelineConfig.from_dict(config_dict)

        if args.run_dir:
            run_dir = args.run_dir
            os.makedirs(run_dir, exist_ok=True)
            logger.info(f"Using run directory: {run_dir}")
        elif args.dry_run:
            run_dir = None
        else:
            run_metadata = config_dict.get('run_metadata', {})
            run_name = run_metadata.get('run_name', 'k0s_resolution')
            base_output = run_metadata.get('base_output_dir', './output')
            run_dir = create_timestamped_run_dir(base_output, run_name)
            logger.info(f"Created timestamped run directory: {run_dir}")

        if run_dir:
            config_dict = update_config_paths_with_run_dir(config_dict, run_dir)

        config = PipelineConfig.from_dict(config_dict)
        logger.info("Configuration loaded and validated successfully")

        if args.dry_run:
            logger.info("Dry run mode - configuration is valid, exiting")
            logger.info(f"Mode: {'MC' if config.tasks.is_mc else 'data'}")
            logger.info(f"Input: {config.input_config.path}")
            return 0

        executor = PipelineExecutor(config)
        final_context = executor.run()

        if final_context.is_successful:
            logger.info("Pipeline completed successfully")
            return 0
        else:
            logger.error(f"Pipeline failed: {final_context.error_message}")
            return 1

    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
