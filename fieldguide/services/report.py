from __future__ import annotations

from result import Err, Ok

from fieldguide.models.runtime import RuntimeResult
from fieldguide.models.usage import DiskReport, ImageInfo
from fieldguide.runtime import ContainerRuntime
from fieldguide.services.orphans import orphan_volumes


def largest_images(images: list[ImageInfo], n: int) -> list[ImageInfo]:
    """Return the *n* largest images, ties kept in listing order."""
    return sorted(images, key=lambda image: image.size_bytes, reverse=True)[:n]


def _top_images(runtime: ContainerRuntime, n: int) -> list[ImageInfo] | None:
    images = runtime.images()
    if isinstance(images, Err):
        return None
    return largest_images(images.ok_value, n)


def _dangling_images(runtime: ContainerRuntime) -> list[ImageInfo] | None:
    images = runtime.images(dangling=True)
    if isinstance(images, Err):
        return None
    return images.ok_value


def _orphan_volumes(runtime: ContainerRuntime) -> list[str] | None:
    mounted = runtime.running_mounts()
    if isinstance(mounted, Err):
        return None
    volumes = runtime.volumes()
    if isinstance(volumes, Err):
        return None
    return orphan_volumes(volumes.ok_value, mounted.ok_value)


def build_report(runtime: ContainerRuntime, top_n: int) -> RuntimeResult[DiskReport]:
    """Collect a read-only disk usage snapshot.

    Only the aggregate usage query is mandatory; every other section degrades
    to ``None`` when the runtime rejects its query.
    """
    usage = runtime.disk_usage()
    if isinstance(usage, Err):
        return usage

    report = DiskReport(
        usage=usage.ok_value,
        top_images=_top_images(runtime, top_n),
        dangling_images=_dangling_images(runtime),
        orphan_volumes=_orphan_volumes(runtime),
    )
    stacks = runtime.stacks()
    if isinstance(stacks, Ok):
        report.stacks = stacks.ok_value
    return Ok(report)
