"""Command-line daemon that runs the collector and logs what it gathers."""

from __future__ import annotations

import asyncio
import logging
import os
import pprint
import re
import signal
import sys
from typing import Mapping, Optional, Sequence

from hoarder.service import TRACE, Config, HoarderError, Measurement, Server
from hoarder.version import VersionInfo

DAEMON_NAME = "hoarderd"
DEFAULT_LOG_LEVEL = DAEMON_NAME + "=INFO;hoarder=INFO"
DEFAULT_FREQUENCY = 5.0

ENV_FREQUENCY = "HOARDER_FREQUENCY"
ENV_LOG_LEVEL = "HOARDER_LOG_LEVEL"

_HELP = {
    ENV_FREQUENCY: "polling frequency",
    ENV_LOG_LEVEL: "loglevel for various packages; INFO, DEBUG and TRACE",
}

WELCOME = "Hoarder daemon " + VersionInfo(component=DAEMON_NAME).build_info()

log = logging.getLogger(DAEMON_NAME)

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ConfigError(Exception):
    """Raised for invalid configuration values."""


def parse_duration(text: str) -> float:
    """Parse a duration such as "5s", "1m30s" or "300ms" into seconds."""
    rest = text
    sign = 1.0
    if rest[:1] in ("+", "-"):
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise ConfigError(f"invalid duration {text!r}")
    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if match is None:
            raise ConfigError(f"invalid duration {text!r}")
        total += float(match[1]) * _UNITS[match[2]]
        pos = match.end()
    return sign * total


def _fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{str(frac).zfill(digits).rstrip('0')}"


def _format_duration(seconds: float) -> str:
    ns = round(seconds * 1_000_000_000)
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_fraction(ns, 1_000)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_fraction(ns, 1_000_000)}ms"
    hours, rem = divmod(ns, 3600 * 1_000_000_000)
    minutes, rem = divmod(rem, 60 * 1_000_000_000)
    secs = _fraction(rem, 1_000_000_000) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}"
    if minutes:
        return f"{sign}{minutes}m{secs}"
    return sign + secs


def parse_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build the collector configuration from environment variables."""
    env = os.environ if environ is None else environ
    frequency = DEFAULT_FREQUENCY
    if ENV_FREQUENCY in env:
        try:
            frequency = parse_duration(env[ENV_FREQUENCY])
        except ConfigError as exc:
            raise ConfigError(f"{ENV_FREQUENCY}: {exc}") from exc
        if frequency <= 0:
            raise ConfigError(f"{ENV_FREQUENCY}: must be positive")
    log_level = env.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)
    return Config(frequency=frequency, log_level=log_level)


def configure_loggers(spec: str) -> dict[str, int]:
    """Apply a "name=LEVEL;name=LEVEL" spec; a bare LEVEL sets the root logger."""
    applied: dict[str, int] = {}
    for entry in spec.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, level_name = entry.partition("=")
        if not sep:
            name, level_name = "<root>", name
        name = name.strip()
        level = _LEVELS.get(level_name.strip().upper())
        if level is None or not name:
            raise ConfigError(f"logger specification {entry!r} is invalid")
        applied[name] = level
    for name, level in applied.items():
        target = logging.getLogger() if name == "<root>" else logging.getLogger(name)
        target.setLevel(level)
    return applied


def help_text() -> str:
    """Describe the environment variables the daemon reads."""
    defaults = {
        ENV_FREQUENCY: _format_duration(DEFAULT_FREQUENCY),
        ENV_LOG_LEVEL: DEFAULT_LOG_LEVEL,
    }
    return "".join(
        f"\t{name}: {_HELP[name]} (default: {defaults[name]})\n" for name in _HELP
    )


def printable_config(config: Config) -> list[str]:
    """Return one "NAME: value" line per setting."""
    return [
        f"{ENV_FREQUENCY}: {_format_duration(config.frequency)}",
        f"{ENV_LOG_LEVEL}: {config.log_level}",
    ]


async def sink(measurements: list[Measurement]) -> None:
    """Log every measurement received."""
    log.info("sink")
    try:
        log.info("%s", pprint.pformat(measurements))
    finally:
        log.info("sink exit")


async def _serve(config: Config) -> None:
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    received: list[signal.Signals] = []

    def on_signal(sig: signal.Signals) -> None:
        if received:
            os._exit(2)
        received.append(sig)
        log.info("hoarder service received signal: %s", sig.name)
        if task is not None:
            task.cancel()

    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal, sig)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            pass

    try:
        server = Server(config)
        await server.run(sink)
    except asyncio.CancelledError:
        return
    except HoarderError as exc:
        raise HoarderError(f"hoarder server terminated: {exc}") from exc
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the daemon; any argument prints usage instead."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        sys.stderr.write(f"{WELCOME}\n")
        sys.stderr.write("Usage:\n")
        sys.stderr.write("\thelp (this help)\n")
        sys.stderr.write("Environment:\n")
        sys.stderr.write(help_text())
        return 1

    try:
        config = parse_config()
        configure_loggers(config.log_level)
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s %(message)s")
        log.info("%s", WELCOME)
        for line in printable_config(config):
            log.info("%s", line)
        asyncio.run(_serve(config))
    except (ConfigError, HoarderError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    except Exception as exc:  # any other failure ends the daemon
        sys.stderr.write(f"hoarder server terminated: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())