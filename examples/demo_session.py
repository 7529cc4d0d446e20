from delivery_tracker.config import SessionConfig
from delivery_tracker.scheduler import SequenceScheduler, run_to_completion
from delivery_tracker.session import AnalysisSession
from delivery_tracker.synthetic import SyntheticDeliveryConfig, generate_delivery_frames


def main() -> None:
    frames = generate_delivery_frames(
        SyntheticDeliveryConfig(frame_count=30, dropout_probability=0.15, seed=11)
    )
    session = AnalysisSession(SessionConfig(smoothing_width=5, calibrate_to_frame_height=True))
    run_to_completion(SequenceScheduler(session, frames))

    snapshot = session.snapshot()
    print("Delivery summary")
    print(f"Frames: {snapshot.frames_processed}")
    print(f"Detections: {snapshot.detections}")

    metrics = snapshot.metrics
    if metrics is None:
        print("No ball detected")
        return
    print(f"Release velocity: {metrics.release_velocity_kph:.1f} km/h")
    print(f"Length: {metrics.length_category.value}")
    print(f"Pitch length: {metrics.projected_pitch_meters:.2f} m")
    print(f"Apex height: {metrics.apex_height_meters:.2f} m")
    print(f"Impact: {metrics.predicted_impact}")


if __name__ == "__main__":
    main()
