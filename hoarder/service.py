"""Periodic collection of system measurements delivered to a sink."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from dataclasses import asdict, dataclass, field
from typing import Awaitable, Callable, Optional

from hoarder.fs import MountPoint, non_virtual_mounts

APP_NAME = "hoarder"
DEFAULT_MEASUREMENT_DEPTH = 10000
DEFAULT_LOG_LEVEL = APP_NAME + "=INFO"
DEFAULT_FREQUENCY = 5.0
DEFAULT_SUBSYSTEMS = (
    "/proc/stat",
    "/proc/meminfo",
    "/proc/net/dev",
    "/proc/diskstats",
    "statfs[*]",  # statfs[mount point]; * selects every real filesystem
)

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

log = logging.getLogger(APP_NAME)


class HoarderError(Exception):
    """Raised when collection or delivery of measurements fails."""


@dataclass(frozen=True)
class FSStats:
    """Block usage of one mounted filesystem."""

    mount_point: str
    block_size: int
    blocks_total: int
    blocks_free: int
    blocks_avail: int

    def to_json(self) -> str:
        """Return the statistics as a compact JSON object."""
        return json.dumps(
            {
                "mount_point": self.mount_point,
                "block_size": self.block_size,
                "blocks_total": self.blocks_total,
                "blocks_free": self.blocks_free,
                "blocks_available": self.blocks_avail,
            },
            separators=(",", ":"),
        )


@dataclass(frozen=True)
class Measurement:
    """Raw contents of one subsystem sampled at a point in time."""

    timestamp: int
    subsystem: str
    measurement: str

    def to_dict(self) -> dict:
        return asdict(self)


Sink = Callable[[list[Measurement]], Awaitable[None]]


@dataclass
class Config:
    """Collection settings; frequency is in seconds."""

    frequency: float = DEFAULT_FREQUENCY
    log_level: str = DEFAULT_LOG_LEVEL
    subsystems: list[str] = field(default_factory=lambda: list(DEFAULT_SUBSYSTEMS))


def statfs(path: str) -> FSStats:
    """Return block statistics for the filesystem holding *path*."""
    st = os.statvfs(path)
    return FSStats(
        mount_point=path,
        block_size=st.f_bsize,
        blocks_total=st.f_blocks,
        blocks_free=st.f_bfree,
        blocks_avail=st.f_bavail,
    )


class Server:
    """Samples the configured subsystems on a timer and feeds a sink."""

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config if config is not None else Config()
        if self.config.frequency <= 0:
            raise HoarderError("frequency must be positive")

    def special(self, subsystem: str) -> str:
        """Produce a measurement for a non-file subsystem such as statfs[...]."""
        log.log(TRACE, "special")
        name, sep, rest = subsystem.partition("[")
        if name != "statfs":
            raise HoarderError(f"invalid special: {subsystem}")
        if not sep:
            raise HoarderError("statfs: malformed")

        mount_point = rest.strip("[]")
        if mount_point == "*":
            try:
                mounts = non_virtual_mounts()
            except (OSError, ValueError) as exc:
                raise HoarderError(f"mounts: {exc}") from exc
        else:
            mounts = [MountPoint(path=mount_point)]

        lines = []
        for mount in mounts:
            try:
                stats = statfs(mount.path)
            except OSError as exc:
                raise HoarderError(f"statfs: {exc}") from exc
            lines.append(stats.to_json() + "\n")
        return "".join(lines)

    def collect(self, timestamp: int) -> list[Measurement]:
        """Sample every configured subsystem once."""
        measurements = []
        for subsystem in self.config.subsystems:
            if subsystem.startswith("/"):
                try:
                    with open(subsystem, encoding="utf-8", errors="replace") as f:
                        data = f.read()
                except OSError as exc:
                    raise HoarderError(f"measurement {subsystem}: {exc}") from exc
            else:
                try:
                    data = self.special(subsystem)
                except HoarderError as exc:
                    raise HoarderError(f"special {subsystem}: {exc}") from exc
            measurements.append(Measurement(timestamp, subsystem, data))
        return measurements

    async def _tick(self, queue: asyncio.Queue) -> None:
        log.log(TRACE, "run")
        while True:
            await asyncio.sleep(self.config.frequency)
            ts = int(time.time())
            log.debug("tick %s", ts)
            measurements = await asyncio.to_thread(self.collect, ts)
            if not measurements:
                continue
            try:
                queue.put_nowait(measurements)
            except asyncio.QueueFull:
                log.debug("dropped measurements at %s", ts)

    @staticmethod
    async def _drain(queue: asyncio.Queue, sink: Sink) -> None:
        log.log(TRACE, "sink")
        while True:
            measurements = await queue.get()
            await sink(measurements)

    async def run(self, sink: Optional[Sink]) -> None:
        """Collect and deliver until cancelled or until either side fails."""
        if sink is None:
            raise HoarderError("must provide sink")

        queue: asyncio.Queue = asyncio.Queue(maxsize=DEFAULT_MEASUREMENT_DEPTH)
        tasks = [
            asyncio.create_task(self._tick(queue)),
            asyncio.create_task(self._drain(queue, sink)),
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            log.info("hoarder service shutting down")
            await asyncio.gather(*tasks, return_exceptions=True)
            log.info("hoarder service clean shutdown")

        for task in done:
            task.result()