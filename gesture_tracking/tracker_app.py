"""
Gesture Tracker

Runs MediaPipe hand and body tracking on a camera feed and logs the
resulting pinch, pose and active-person state every frame.
"""

import argparse
import logging
import time

import cv2

from .hand_gestures.config import load_config
from .hand_tracks.landmark_source import MediaPipeLandmarkSource
from .hand_tracks.pipeline import FrameEvent, GesturePipeline

logger = logging.getLogger(__name__)

CAMERA_WIDTH = 1280
CAMERA_HEIGHT = 720


def describe(event: FrameEvent) -> str:
    """One-line summary of a frame for the log."""
    parts = []
    for person, indicator in zip(event.people, event.indicators):
        body = person.body.body
        hands = " ".join(
            f"{h.chirality.value}={h.state.name}/{h.pinch_id}" for h in person.hands.hands
        )
        parts.append(f"{person.name}[{indicator.value} {body.pose_state.name} {hands}]")
    active = event.active_person.name if event.active_person else "-"
    return f"active={active} " + " ".join(parts)


def run_tracker(camera_index: int = 0, config_path: str | None = None, max_frames: int | None = None) -> None:
    """Run the gesture tracker until the camera stops or `max_frames` is reached."""
    config = load_config(config_path)
    pipeline = GesturePipeline(config)

    cap = cv2.VideoCapture(camera_index)
    if not cap.isOpened():
        logger.error(f"Cannot open camera {camera_index}")
        return

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, CAMERA_WIDTH)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, CAMERA_HEIGHT)

    frames = 0
    last_active = None
    with MediaPipeLandmarkSource(duty_cycle=pipeline.duty_cycle) as source:
        try:
            while max_frames is None or frames < max_frames:
                ok, image = cap.read()
                if not ok:
                    logger.warning("Camera returned no frame, stopping")
                    break
                frames += 1

                now = time.monotonic()
                source.process(image)
                h, w = image.shape[:2]
                event = pipeline.process(source.frame(now), (w, h), now)

                active = event.active_person.name if event.active_person else None
                if active != last_active:
                    logger.info(f"Active person: {active or 'none'}")
                    last_active = active
                if event.no_active_person:
                    logger.info("No active person")
                logger.debug(describe(event))
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            cap.release()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Gesture Tracker")
    parser.add_argument("-c", "--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after this many frames")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every frame")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    run_tracker(camera_index=args.camera, config_path=args.config, max_frames=args.max_frames)


if __name__ == "__main__":
    main()
