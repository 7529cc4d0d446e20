from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

from loguru import logger

from .config import (
    DEFAULT_MAX_BLUE,
    DEFAULT_MAX_GREEN,
    DEFAULT_PITCH_LENGTH_M,
    DEFAULT_RED_THRESHOLD,
    DEFAULT_SAMPLE_STEP,
    DEFAULT_SMOOTHING_WIDTH,
    CalibrationConfig,
    DetectionSettings,
    SessionConfig,
)
from .exceptions import InvalidInputError
from .metrics import estimate_metrics
from .models import DerivedMetrics
from .reporting import (
    config_to_dict,
    load_raw_points_csv,
    metrics_to_dict,
    session_report,
    write_trajectory_csv,
)
from .scheduler import SequenceScheduler, run_to_completion
from .session import AnalysisSession
from .smoothing import smooth_raw_points
from .synthetic import SyntheticDeliveryConfig, generate_delivery_frames


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _add_detection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--red-threshold", type=int, default=DEFAULT_RED_THRESHOLD)
    parser.add_argument("--max-green", type=int, default=DEFAULT_MAX_GREEN)
    parser.add_argument("--max-blue", type=int, default=DEFAULT_MAX_BLUE)
    parser.add_argument("--sample-step", type=int, default=DEFAULT_SAMPLE_STEP)
    parser.add_argument("--smoothing-width", type=int, default=DEFAULT_SMOOTHING_WIDTH)
    parser.add_argument("--pitch-length-m", type=float, default=DEFAULT_PITCH_LENGTH_M)


def _add_frame_calibration_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--calibrate-to-frame-height",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Map the pitch length onto the frame height (default) or onto the track extent.",
    )


def _session_config_from_args(args: argparse.Namespace) -> SessionConfig:
    return SessionConfig(
        detection=DetectionSettings(
            red_threshold=args.red_threshold,
            max_green=args.max_green,
            max_blue=args.max_blue,
            sample_step=args.sample_step,
        ),
        smoothing_width=args.smoothing_width,
        calibration=CalibrationConfig(
            pitch_length_m=args.pitch_length_m,
            reference_extent_px=getattr(args, "reference_extent_px", None),
        ),
        calibrate_to_frame_height=getattr(args, "calibrate_to_frame_height", False),
    )


def _print_metrics(metrics: DerivedMetrics | None) -> None:
    if metrics is None:
        print("No ball detected; no metrics available")
        return
    print(f"Release velocity: {metrics.release_velocity_kph:.1f} km/h")
    print(f"Length category: {metrics.length_category.value}")
    print(f"Pitch length: {metrics.projected_pitch_meters:.2f} m")
    print(f"Apex height: {metrics.apex_height_meters:.2f} m")
    print(f"Impact prediction: {metrics.predicted_impact}")


def _write_json(path: Path, payload: dict[str, object]) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="delivery-tracker",
        description="Track a cricket ball through a delivery clip and derive delivery metrics.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_video = subparsers.add_parser(
        "analyze-video",
        help="Track the ball through a video file and estimate delivery metrics.",
    )
    analyze_video.add_argument("video_path", help="Path to the delivery clip.")
    analyze_video.add_argument(
        "--output-dir",
        help="Directory for <stem>_trajectory.csv and <stem>_metrics.json. Default: video dir",
    )
    _add_detection_arguments(analyze_video)
    _add_frame_calibration_argument(analyze_video)

    analyze_track = subparsers.add_parser(
        "analyze-trajectory",
        help="Re-smooth a recorded raw track CSV and estimate delivery metrics.",
    )
    analyze_track.add_argument(
        "input_csv", help="CSV with frame,timestamp_ms,x,y,confidence columns."
    )
    analyze_track.add_argument(
        "--output-csv",
        help="Path for the smoothed trajectory CSV. Default: <input_stem>_smoothed.csv",
    )
    analyze_track.add_argument(
        "--output-json",
        help="Path for the metrics JSON. Default: <input_stem>_metrics.json",
    )
    _add_detection_arguments(analyze_track)
    analyze_track.add_argument(
        "--reference-extent-px",
        type=float,
        help="Pixel extent the pitch length maps onto, e.g. the source frame height. "
        "Default: the track's own vertical extent",
    )

    simulate = subparsers.add_parser(
        "simulate-delivery",
        help="Render a synthetic delivery, track it headless and report metrics.",
    )
    simulate.add_argument("--frame-count", type=int, default=24)
    simulate.add_argument("--fps", type=float, default=30.0)
    simulate.add_argument("--dropout-probability", type=float, default=0.0)
    simulate.add_argument("--seed", type=int, default=42)
    simulate.add_argument(
        "--output-csv", help="Path for the trajectory CSV. Default: synthetic_delivery.csv"
    )
    simulate.add_argument(
        "--output-json", help="Path for the metrics JSON. Default: synthetic_delivery.json"
    )
    _add_detection_arguments(simulate)
    _add_frame_calibration_argument(simulate)

    return parser


def _handle_analyze_video(args: argparse.Namespace, config: SessionConfig) -> int:
    from .pipeline import DeliveryVideoPipeline

    artifacts = DeliveryVideoPipeline(config).run(args.video_path, output_dir=args.output_dir)

    print(f"Video analyzed: {artifacts.video_path}")
    print(f"Frames: {artifacts.frames_processed} | Detections: {artifacts.detections}")
    print(f"Processing time: {artifacts.processing_time_s:.2f} s")
    print(f"Trajectory CSV: {artifacts.trajectory_path}")
    print(f"Metrics JSON: {artifacts.report_path}")
    _print_metrics(artifacts.metrics)
    return 0


def _handle_analyze_trajectory(args: argparse.Namespace, config: SessionConfig) -> int:
    input_csv = Path(args.input_csv)
    if not input_csv.exists():
        raise FileNotFoundError(input_csv)

    raw_points = load_raw_points_csv(input_csv)
    trajectory = smooth_raw_points(raw_points, config.smoothing_width)
    metrics = estimate_metrics(trajectory, config.calibration)

    output_csv = Path(args.output_csv) if args.output_csv else input_csv.with_name(
        f"{input_csv.stem}_smoothed.csv"
    )
    output_json = Path(args.output_json) if args.output_json else input_csv.with_name(
        f"{input_csv.stem}_metrics.json"
    )

    write_trajectory_csv(output_csv, trajectory)
    _write_json(
        output_json,
        {
            "source": str(input_csv),
            "config": config_to_dict(config),
            "trajectory_points": len(trajectory),
            "metrics": metrics_to_dict(metrics),
        },
    )

    print(f"Track analyzed: {input_csv} ({len(trajectory)} points)")
    print(f"Smoothed CSV: {output_csv}")
    print(f"Metrics JSON: {output_json}")
    _print_metrics(metrics)
    return 0


def _handle_simulate_delivery(args: argparse.Namespace, config: SessionConfig) -> int:
    synthetic = SyntheticDeliveryConfig(
        frame_count=args.frame_count,
        fps=args.fps,
        dropout_probability=args.dropout_probability,
        seed=args.seed,
    )
    session = AnalysisSession(config)
    frames = generate_delivery_frames(synthetic)
    started = time.perf_counter()
    run_to_completion(SequenceScheduler(session, frames))
    elapsed_s = time.perf_counter() - started
    snapshot = session.snapshot()

    output_csv = Path(args.output_csv) if args.output_csv else Path("synthetic_delivery.csv")
    output_json = Path(args.output_json) if args.output_json else Path("synthetic_delivery.json")

    write_trajectory_csv(output_csv, snapshot.trajectory)
    report = session_report(snapshot, config, source="synthetic", processing_time_s=elapsed_s)
    report["synthetic"] = {
        "frame_count": synthetic.frame_count,
        "fps": synthetic.fps,
        "dropout_probability": synthetic.dropout_probability,
        "seed": synthetic.seed,
    }
    _write_json(output_json, report)

    print(f"Synthetic delivery: {snapshot.frames_processed} frames, seed={synthetic.seed}")
    print(f"Detections: {snapshot.detections}")
    print(f"Processing time: {elapsed_s:.2f} s")
    print(f"Trajectory CSV: {output_csv}")
    print(f"Metrics JSON: {output_json}")
    _print_metrics(snapshot.metrics)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _session_config_from_args(args)
        if args.command == "analyze-video":
            return _handle_analyze_video(args, config)
        if args.command == "analyze-trajectory":
            return _handle_analyze_trajectory(args, config)
        if args.command == "simulate-delivery":
            return _handle_simulate_delivery(args, config)
    except InvalidInputError as error:
        print(f"ERROR: {error}")
        return 2

    parser.error(f"unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
