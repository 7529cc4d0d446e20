from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path

from .config import SessionConfig
from .models import DerivedMetrics
from .reporting import session_report, write_trajectory_csv
from .scheduler import VideoFileScheduler, run_to_completion
from .session import AnalysisSession


@dataclass
class PipelineArtifacts:
    """Artifacts produced by one video analysis run."""

    video_path: Path
    trajectory_path: Path | None = None
    report_path: Path | None = None
    metrics: DerivedMetrics | None = None
    frames_processed: int = 0
    detections: int = 0
    processing_time_s: float = 0.0


class DeliveryVideoPipeline:
    """Delivery clip -> smoothed trajectory -> metrics report."""

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config = config or SessionConfig()

    def run(
        self,
        video_path: str | Path,
        output_dir: str | Path | None = None,
    ) -> PipelineArtifacts:
        path = Path(video_path)
        if not path.exists():
            raise FileNotFoundError(path)

        target_dir = Path(output_dir) if output_dir else path.parent
        target_dir.mkdir(parents=True, exist_ok=True)

        trajectory_path = target_dir / f"{path.stem}_trajectory.csv"
        report_path = target_dir / f"{path.stem}_metrics.json"

        session = AnalysisSession(self.config)
        scheduler = VideoFileScheduler(session, path)
        started = time.perf_counter()
        try:
            run_to_completion(scheduler)
        finally:
            scheduler.stop()
        elapsed_s = time.perf_counter() - started

        snapshot = session.snapshot()
        write_trajectory_csv(trajectory_path, snapshot.trajectory)

        report = session_report(
            snapshot, self.config, source=str(path), processing_time_s=elapsed_s
        )
        report["fps"] = scheduler.fps
        report_path.write_text(
            json.dumps(report, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

        return PipelineArtifacts(
            video_path=path,
            trajectory_path=trajectory_path,
            report_path=report_path,
            metrics=snapshot.metrics,
            frames_processed=snapshot.frames_processed,
            detections=snapshot.detections,
            processing_time_s=elapsed_s,
        )
