# hoarder

hoarder is a small Linux monitoring daemon and library. At a fixed interval it
reads a set of subsystems and passes the collected measurements to a sink.

By default it gathers:

- `/proc/stat`
- `/proc/meminfo`
- `/proc/net/dev`
- `/proc/diskstats`
- `statfs[*]`: filesystem block statistics for every device-backed mount, as
  one JSON object per line

Each measurement (`hoarder.service.Measurement`) carries a Unix timestamp, the
subsystem name and the raw text that was collected. Subsystems starting with
`/` are read as files; anything else must be a special subsystem, of which
only `statfs[<mount point>]` exists (`statfs[*]` meaning all device-backed
mounts).

## Installation

```
pip install .
```

The package has no runtime dependencies beyond the standard library.

## Running the daemon

```
hoarderd
```

The daemon takes no arguments. Given any argument it prints usage and the
supported environment variables to standard error and exits with status 1.
It is configured entirely through the environment:

| Variable            | Default                      | Meaning                                          |
|---------------------|------------------------------|--------------------------------------------------|
| `HOARDER_FREQUENCY` | `5s`                         | polling frequency, e.g. `500ms`, `1m30s`; must be positive |
| `HOARDER_LOG_LEVEL` | `hoarderd=INFO;hoarder=INFO` | `name=LEVEL` pairs separated by `;`              |

Accepted levels are `TRACE`, `DEBUG`, `INFO`, `WARN`/`WARNING`, `ERROR` and
`CRITICAL`; a bare level without a name sets the root logger. Durations use
the units `ns`, `us`/`µs`, `ms`, `s`, `m` and `h`.

For example:

```
HOARDER_FREQUENCY=10s HOARDER_LOG_LEVEL="hoarderd=DEBUG;hoarder=TRACE" hoarderd
```

The daemon logs its settings at start-up and then logs every batch of
measurements it receives. The first SIGINT or SIGTERM starts a clean shutdown;
a second one forces an immediate exit with status 2. Configuration errors and
collection failures are written to standard error with exit status 1.

## Using it as a library

```python
import asyncio

from hoarder.service import Config, Server


async def print_sink(measurements):
    for m in measurements:
        print(m.timestamp, m.subsystem, len(m.measurement))


async def main():
    server = Server(Config(frequency=2.0, subsystems=["/proc/meminfo", "statfs[/]"]))
    await server.run(print_sink)


asyncio.run(main())
```

- `Server.run(sink)` runs until it is cancelled or until collection or the
  sink fails. The sink is an async callable taking a list of measurements.
  Up to 10000 batches are queued; further batches are dropped.
- `Server.collect(timestamp)` gathers one round of measurements without
  running the loop.
- `Server.special(subsystem)` evaluates a single special subsystem such as
  `statfs[/home]`.
- `statfs(path)` returns an `FSStats` for one path; `FSStats.to_json()` gives
  its compact JSON form.

Failures are raised as `HoarderError`; a `Server` with a non-positive
frequency, or `run` without a sink, also raises it.

The helpers in `hoarder.fs` (`parse_filesystems`, `parse_mounts`,
`select_non_virtual`, `non_virtual_mounts`) work out which mounts are backed
by real devices from `/proc/filesystems` and `/proc/mounts`.
`hoarder.version.VersionInfo` formats the semantic version and build
description, and `hoarder.daemon` exposes `parse_config`, `parse_duration`,
`configure_loggers`, `help_text` and `printable_config`.

## What it does not do

hoarder does not store, aggregate or export measurements. The `hoarderd`
command only logs what it collects; keeping the data anywhere is up to a sink
you supply through the library.