"""Discovery of mounted filesystems that are backed by real devices."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

PROC_FILESYSTEMS = "/proc/filesystems"
PROC_MOUNTS = "/proc/mounts"

_MOUNT_FIELDS = 6


@dataclass(frozen=True)
class MountPoint:
    """A single entry of the mount table."""

    device: str = ""
    path: str = ""
    type: str = ""
    opts: tuple[str, ...] = field(default_factory=tuple)
    freq: int = 0
    pass_number: int = 0


def parse_filesystems(text: str) -> set[str]:
    """Return the filesystem types listed in *text* that are not virtual."""
    valid = set()
    for line in text.splitlines():
        if line.startswith("nodev") or "squashfs" in line:
            continue
        name = line.strip()
        if name:
            valid.add(name)
    return valid


def parse_mounts(text: str) -> list[MountPoint]:
    """Parse a mount table in the /proc/mounts format."""
    mounts = []
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != _MOUNT_FIELDS:
            raise ValueError(
                f"wrong number of fields (expected {_MOUNT_FIELDS}, "
                f"got {len(fields)}): {line}"
            )
        device, path, fstype, opts, freq, pass_number = fields
        try:
            mounts.append(
                MountPoint(
                    device=device,
                    path=path,
                    type=fstype,
                    opts=tuple(opts.split(",")),
                    freq=int(freq),
                    pass_number=int(pass_number),
                )
            )
        except ValueError as exc:
            raise ValueError(f"malformed mount line: {line}") from exc
    return mounts


def select_non_virtual(
    filesystems: Iterable[str], mounts: Iterable[MountPoint]
) -> list[MountPoint]:
    """Keep mounts of a valid type, one per device, in table order."""
    valid = set(filesystems)
    seen_devices: set[str] = set()
    selected = []
    for mount in mounts:
        if mount.type not in valid or mount.device in seen_devices:
            continue
        seen_devices.add(mount.device)
        selected.append(mount)
    return selected


def non_virtual_mounts(
    filesystems_path: str | Path = PROC_FILESYSTEMS,
    mounts_path: str | Path = PROC_MOUNTS,
) -> list[MountPoint]:
    """Read the system tables and return the device-backed mounts."""
    filesystems = parse_filesystems(Path(filesystems_path).read_text())
    mounts = parse_mounts(Path(mounts_path).read_text())
    return select_non_virtual(filesystems, mounts)