import pytest

from hoarder.fs import (
    MountPoint,
    non_virtual_mounts,
    parse_filesystems,
    parse_mounts,
    select_non_virtual,
)

FILESYSTEMS = (
    "nodev\tsysfs\n"
    "nodev\tproc\n"
    "\text4\n"
    "\tsquashfs\n"
    "\tvfat\n"
)

MOUNTS = (
    "sysfs /sys sysfs rw,nosuid 0 0\n"
    "/dev/sda1 / ext4 rw,relatime 0 0\n"
    "/dev/sda2 /boot/efi vfat rw 0 0\n"
    "/dev/sda1 /var/lib/docker ext4 rw,relatime 0 0\n"
    "/dev/loop0 /snap/core squashfs ro 0 0\n"
)


def test_parse_filesystems_skips_virtual():
    assert parse_filesystems(FILESYSTEMS) == {"ext4", "vfat"}


def test_parse_mounts_fields():
    mounts = parse_mounts(MOUNTS)
    assert len(mounts) == 5
    root = mounts[1]
    assert root == MountPoint(
        device="/dev/sda1",
        path="/",
        type="ext4",
        opts=("rw", "relatime"),
        freq=0,
        pass_number=0,
    )


def test_parse_mounts_ignores_blank_lines():
    mounts = parse_mounts("\n/dev/sda1 / ext4 rw 0 0\n\n")
    assert [m.path for m in mounts] == ["/"]


def test_parse_mounts_wrong_field_count():
    with pytest.raises(ValueError, match="wrong number of fields"):
        parse_mounts("/dev/sda1 / ext4 rw\n")


def test_parse_mounts_bad_numbers():
    with pytest.raises(ValueError):
        parse_mounts("/dev/sda1 / ext4 rw x y\n")


def test_select_non_virtual_dedupes_devices():
    mounts = parse_mounts(MOUNTS)
    selected = select_non_virtual(parse_filesystems(FILESYSTEMS), mounts)
    assert [m.path for m in selected] == ["/", "/boot/efi"]
    devices = [m.device for m in selected]
    assert len(devices) == len(set(devices))


def test_select_non_virtual_empty_filesystems():
    assert select_non_virtual([], parse_mounts(MOUNTS)) == []


def test_non_virtual_mounts_reads_files(tmp_path):
    fs_file = tmp_path / "filesystems"
    mounts_file = tmp_path / "mounts"
    fs_file.write_text(FILESYSTEMS)
    mounts_file.write_text(MOUNTS)
    selected = non_virtual_mounts(fs_file, mounts_file)
    assert [m.device for m in selected] == ["/dev/sda1", "/dev/sda2"]


def test_non_virtual_mounts_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        non_virtual_mounts(tmp_path / "nope", tmp_path / "nope2")