import argparse
import logging
import random
import signal
import sys
import threading
from typing import List, Optional

from telemetry_pusher.config import load_settings
from telemetry_pusher.controller import SendLoop
from telemetry_pusher.dispatcher import TelemetryDispatcher
from telemetry_pusher.errors import PusherError
from telemetry_pusher.loader import load_data_file

logger = logging.getLogger("telemetry_pusher")


def non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got '{text}'")
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a value >= 0, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="telemetry-pusher",
        description="Send records from a JSON data file to a device telemetry endpoint",
    )
    ap.add_argument("-i", "--interval", type=non_negative_int, default=5, help="seconds between sends")
    ap.add_argument("-c", "--count", type=non_negative_int, default=1, help="rounds to send, 0 = until interrupted")
    ap.add_argument("-f", "--file", dest="data_file", default="data.json", help="data file path")
    ap.add_argument("--timeout", type=float, default=None, help="per-request timeout in seconds (default: none)")
    ap.add_argument("--seed", type=int, default=None, help="seed for randomized values")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def install_stop_handlers(stop: threading.Event) -> None:
    """
    First SIGINT/SIGTERM asks the send loop to stop at its next wait.
    The default handlers are put back at that point, so a second signal
    ends the process even while a request is hung.
    """
    def _handle(signum, frame):
        logger.info("Received signal %s, stopping after the current send (send again to exit now)", signum)
        stop.set()
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        stream=sys.stdout,
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
        logger.info("Config loaded: server=%s device_token=%s", settings.server, settings.masked_token())

        data = load_data_file(args.data_file)
        logger.info("Data file loaded with %d records", len(data.records))
        if data.random_key:
            logger.info("Random field: %s", data.random_key)

        stop = threading.Event()
        if threading.current_thread() is threading.main_thread():
            install_stop_handlers(stop)

        dispatcher = TelemetryDispatcher(settings, timeout=args.timeout)
        try:
            loop = SendLoop(
                data.records,
                dispatcher,
                random_key=data.random_key,
                interval=args.interval,
                count=args.count,
                rng=random.Random(args.seed),
                stop=stop,
            )
            state = loop.run()
        finally:
            dispatcher.close()
    except PusherError as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Summary: sent=%d failed=%d rounds=%d%s",
        state.sent_count,
        state.failures,
        state.rounds,
        " (stopped)" if state.stopped else "",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
