"""Run the globe simulation without a browser and log the status readout.

Run:  python headless.py --seconds 10 --time-scale 600 --fps 60
"""

import argparse
import logging
from datetime import datetime, timezone

from config import TIME_SCALES, TIME_SCALE_DEFAULT, TOGGLES
from model.simulation import create_context, set_toggle, tick

LOGGER = logging.getLogger("headless")


def _parse_start(value):
    stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.timestamp() * 1000.0


def build_parser():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seconds", type=float, default=5.0,
                        help="wall-clock seconds to simulate")
    parser.add_argument("--fps", type=float, default=60.0)
    parser.add_argument("--time-scale", type=int, default=TIME_SCALE_DEFAULT,
                        choices=TIME_SCALES)
    parser.add_argument("--start", type=_parse_start, default=None,
                        help="simulated UTC start, ISO 8601 (default: now)")
    parser.add_argument("--off", action="append", default=[], choices=TOGGLES,
                        help="disable a subsystem (repeatable)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    context = create_context(virtual_time_ms=args.start, time_scale=args.time_scale)
    for name in args.off:
        set_toggle(context, name, False)

    n_frames = int(args.seconds * args.fps)
    LOGGER.info("Simulating %d frames at %g fps, %sx", n_frames, args.fps, args.time_scale)

    last_status = None
    for _ in range(n_frames):
        frame = tick(context, 1.0 / args.fps)
        status = (frame.status_time, frame.status_flow)
        if status != last_status:
            LOGGER.info("%s | %s", *status)
            last_status = status

    material = context.frame.material
    LOGGER.info("Cloud drift %.4f rad/s, ocean shininess %.1f",
                material.cloud_speed, material.ocean_shininess)
    return context


if __name__ == "__main__":
    main()
