from __future__ import annotations

from dataclasses import dataclass

from fieldguide.models.enums import ResourceCategory


@dataclass(slots=True, frozen=True)
class UsageRecord:
    category: ResourceCategory
    total_count: int
    active: int
    size: str
    size_bytes: int
    reclaimable: str
    reclaimable_bytes: int


@dataclass(slots=True, frozen=True)
class ImageInfo:
    repository: str
    tag: str
    image_id: str
    size: str
    size_bytes: int

    @property
    def reference(self) -> str:
        return f"{self.repository}:{self.tag}"

    @property
    def is_dangling(self) -> bool:
        return self.repository == "<none>" and self.tag == "<none>"


@dataclass(slots=True, frozen=True)
class StackInfo:
    name: str
    status: str
    config_files: str


@dataclass(slots=True)
class DiskReport:
    """Snapshot of runtime disk consumption.

    Optional sections are ``None`` when their query failed, so the renderer can
    print a placeholder instead of dropping the whole report.
    """

    usage: list[UsageRecord]
    top_images: list[ImageInfo] | None = None
    dangling_images: list[ImageInfo] | None = None
    orphan_volumes: list[str] | None = None
    stacks: list[StackInfo] | None = None

    @property
    def reclaimable_bytes(self) -> int:
        return sum(record.reclaimable_bytes for record in self.usage)

    @property
    def total_bytes(self) -> int:
        return sum(record.size_bytes for record in self.usage)
