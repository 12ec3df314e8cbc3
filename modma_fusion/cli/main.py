"""
Main CLI entry point for MODMA Fusion

This module provides the command-line interface for processing a dataset file
with a chosen fusion strategy and for generating synthetic datasets.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys

from ..core.config import PipelineConfig, FS_EXPECTED, AUDIO_FS, NOTCH_HZ, BANDPASS, validate_config
from ..core.data_types import FusionStrategy
from ..acquisition.sources import SyntheticDatasetSource
from ..pipeline import CancellationToken, DatasetPipeline
from ..utils.serialization import save_result


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        description="MODMA Fusion - Multimodal EEG/audio screening pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a dataset with attention fusion
  python -m modma_fusion --run --input data/session.json --fusion Attention

  # Save the result with severity on a 0-10 scale
  python -m modma_fusion --run --input data/session.json --output result.json --severity-scale 10

  # Write a synthetic dataset
  python -m modma_fusion --generate --output data/synthetic.json

  # Test with synthetic data
  python -m modma_fusion --run --fake --fusion Early
        """
    )

    # Mode selection (mutually exclusive)
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument("--run", action="store_true",
                           help="Process a dataset and print the result")
    mode_group.add_argument("--generate", action="store_true",
                           help="Write a synthetic dataset")

    # Data source options
    parser.add_argument("--input",
                       help="Dataset JSON file to process")
    parser.add_argument("--fake", action="store_true",
                       help="Process a synthetic dataset instead of --input")
    parser.add_argument("--output",
                       help="Output JSON file (result for --run, dataset for --generate)")

    # Processing options
    parser.add_argument("--fusion", choices=[s.value for s in FusionStrategy],
                       default=FusionStrategy.ATTENTION.value,
                       help="Fusion strategy (default: Attention)")
    parser.add_argument("--model",
                       help="Trained classifier (joblib) to use instead of the fallback head")
    parser.add_argument("--severity-scale", type=int, choices=[1, 10], default=1,
                       help="Report severity on a 0-1 or 0-10 scale (default: 1)")
    parser.add_argument("--seed", type=int, default=None,
                       help="Seed for synthetic data and reported metrics")

    # Signal parameters
    parser.add_argument("--fs", type=int, default=FS_EXPECTED,
                       help=f"EEG sampling frequency (default: {FS_EXPECTED})")
    parser.add_argument("--notch", type=int, choices=[50, 60], default=NOTCH_HZ,
                       help=f"Notch filter frequency (default: {NOTCH_HZ})")
    parser.add_argument("--no-filter", action="store_true",
                       help="Skip notch/band-pass filtering before feature extraction")

    # Synthetic dataset options
    parser.add_argument("--eeg-samples", type=int, default=1300,
                       help="Synthetic EEG records (default: 1300)")
    parser.add_argument("--audio-samples", type=int, default=50000,
                       help="Synthetic audio samples (default: 50000)")
    parser.add_argument("--with-text", action="store_true",
                       help="Include journal text in synthetic datasets")

    # Logging
    parser.add_argument("--verbose", "-v", action="store_true",
                       help="Enable verbose logging")

    return parser


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Pipeline configuration with CLI overrides applied"""
    config = PipelineConfig(
        fs=args.fs,
        audio_fs=AUDIO_FS,
        notch_hz=args.notch,
        bandpass=BANDPASS,
        apply_filters=not args.no_filter,
        model_path=args.model,
        metrics_seed=args.seed,
    )
    validate_config(config)
    return config


def synthetic_source(args: argparse.Namespace) -> SyntheticDatasetSource:
    seed = args.seed if args.seed is not None else 42
    return SyntheticDatasetSource(fs=args.fs, seed=seed)


def run_generate(args: argparse.Namespace) -> int:
    if not args.output:
        logging.error("--generate requires --output")
        return 1

    dataset = synthetic_source(args).generate(
        eeg_samples=args.eeg_samples,
        audio_samples=args.audio_samples,
        with_text=args.with_text,
    )
    save_result(dataset, args.output)
    print(f"Synthetic dataset written to {args.output}")
    return 0


def interrupt_handler(token: CancellationToken):
    """SIGINT handler that cancels the running pipeline"""
    def handler(signum, frame):
        logging.info("Shutdown signal received")
        token.cancel()
    return handler


def run_pipeline(args: argparse.Namespace) -> int:
    if args.fake:
        logging.info("Using synthetic dataset")
        source = synthetic_source(args).generate_bytes(
            eeg_samples=args.eeg_samples,
            audio_samples=args.audio_samples,
            with_text=args.with_text,
        )
    elif args.input:
        source = args.input
    else:
        logging.error("--run requires --input or --fake")
        return 1

    pipeline = DatasetPipeline(build_config(args))
    token = CancellationToken()

    # Ctrl+C cancels the run at the next stage boundary
    previous_handler = signal.signal(signal.SIGINT, interrupt_handler(token))
    try:
        result = asyncio.run(pipeline.run(source, args.fusion, token))
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    record = result.to_dict(severity_scale=args.severity_scale)
    if args.output:
        save_result(record, args.output)
    else:
        print(json.dumps(record, indent=2))

    if not result.ok:
        logging.error(f"Processing failed: {result.error}")
        return 1

    prediction = result.prediction
    print(f"Prediction: {prediction.label} | p={prediction.probability:.2f} | "
          f"Severity: {prediction.severity_on_scale(args.severity_scale):.2f} | "
          f"Confidence: {prediction.confidence:.2f}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        if args.generate:
            return run_generate(args)
        return run_pipeline(args)
    except ValueError as e:
        logging.error(f"Invalid configuration: {e}")
        return 1
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
