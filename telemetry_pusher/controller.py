from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from telemetry_pusher.dispatcher import TelemetryDispatcher
from telemetry_pusher.errors import RecoverableError
from telemetry_pusher.transform import transform_record

logger = logging.getLogger(__name__)


@dataclass
class SendState:
    sent_count: int = 0
    rounds: int = 0
    attempts: int = 0
    failures: int = 0
    stopped: bool = False


class SendLoop:
    """
    Sends every record once per round, in file order, until the target is met.

    The run ends when `sent_count >= count * len(records)` after a full round.
    Only successful sends count, so with count > 0 a batch whose sends keep
    failing loops until enough of them succeed. count == 0 never ends on its
    own; set `stop` (e.g. from a signal handler) to end the run at the next
    wait or record boundary.
    """

    def __init__(
        self,
        records: Sequence[Any],
        dispatcher: TelemetryDispatcher,
        random_key: Optional[str] = None,
        interval: float = 5,
        count: int = 1,
        rng: Optional[random.Random] = None,
        stop: Optional[threading.Event] = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if count < 0:
            raise ValueError("count must be >= 0")
        self.records = list(records)
        self.dispatcher = dispatcher
        self.random_key = random_key
        self.interval = interval
        self.count = count
        self.rng = rng or random.Random()
        self.stop = stop or threading.Event()
        self.state = SendState()

    @property
    def target(self) -> int:
        return self.count * len(self.records)

    def is_done(self) -> bool:
        return self.count > 0 and self.state.sent_count >= self.target

    def run(self) -> SendState:
        total = len(self.records)
        while True:
            for index, record in enumerate(self.records):
                if self.stop.is_set():
                    return self._stopped()

                self.send_one(index, record)

                if index < total - 1 and not self._wait():
                    return self._stopped()

            self.state.rounds += 1
            if self.is_done():
                break

            logger.info("Waiting %s seconds before the next round...", self.interval)
            if not self._wait():
                return self._stopped()

        logger.info("Done, sent %d records in total", self.state.sent_count)
        return self.state

    def send_one(self, index: int, record: Any) -> bool:
        self.state.attempts += 1
        try:
            values = transform_record(record, self.random_key, self.rng)
            self.dispatcher.send(values)
        except RecoverableError as e:
            self.state.failures += 1
            logger.error("Send failed for record %d/%d: %s", index + 1, len(self.records), e)
            return False

        self.state.sent_count += 1
        logger.info("Send #%d ok - record %d/%d", self.state.sent_count, index + 1, len(self.records))
        return True

    def _wait(self) -> bool:
        """Pause for the interval; False when the stop signal was set."""
        if self.interval > 0:
            return not self.stop.wait(self.interval)
        return not self.stop.is_set()

    def _stopped(self) -> SendState:
        self.state.stopped = True
        logger.info("Stopped, sent %d records in total", self.state.sent_count)
        return self.state
