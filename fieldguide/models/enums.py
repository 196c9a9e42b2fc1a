from __future__ import annotations

from enum import Enum


class ResourceCategory(str, Enum):
    IMAGES = "images"
    CONTAINERS = "containers"
    LOCAL_VOLUMES = "local volumes"
    BUILD_CACHE = "build cache"

    @property
    def label(self) -> str:
        return self.value.title()

    @classmethod
    def from_label(cls, label: str) -> ResourceCategory:
        # `docker system df` prints "Images", "Local Volumes", "Build Cache", ...
        return cls(label.strip().lower())


class PruneMode(str, Enum):
    SAFE = "safe"
    AGGRESSIVE = "aggressive"


class PruneTarget(str, Enum):
    CONTAINERS = "containers"
    NETWORKS = "networks"
    DANGLING_IMAGES = "dangling-images"
    BUILD_CACHE = "build-cache"
    UNUSED_IMAGES = "unused-images"
    ALL_BUILD_CACHE = "all-build-cache"
    VOLUMES = "volumes"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").capitalize()


class ResetStage(str, Enum):
    NOT_RUNNING = "not_running"
    VALIDATED = "validated"
    CONFIRMED = "confirmed"
    ABORTED = "aborted"
    TEARING_DOWN = "tearing_down"
    VOLUMES_DELETED = "volumes_deleted"
    IMAGES_DELETED = "images_deleted"
    BUILDING = "building"
    STARTING = "starting"
    RUNNING = "running"
    FAILED = "failed"


class CommandStatus(str, Enum):
    DONE = "done"
    ABORTED = "aborted"
    PRECONDITION_FAILED = "precondition_failed"
    FAILED = "failed"
