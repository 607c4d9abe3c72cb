"""Building pod volume manifests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

__all__ = [
    "BuildError",
    "Volume",
    "Builder",
    "HOST_PATH_DIRECTORY",
    "HOST_PATH_DIRECTORY_OR_CREATE",
]

HOST_PATH_DIRECTORY = "Directory"
HOST_PATH_DIRECTORY_OR_CREATE = "DirectoryOrCreate"


class BuildError(ValueError):
    """Raised by build() when one or more builder steps failed."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


@dataclass
class Volume:
    """A named pod volume, held as its manifest mapping (None when absent)."""

    manifest: dict[str, Any] | None = field(default_factory=dict)

    def is_nil(self) -> bool:
        """True when there is no volume object."""
        return self.manifest is None


Predicate = Callable[[Volume], bool]


class Builder:
    """Builds a volume manifest, collecting errors until build()."""

    def __init__(self, volume: Volume | None = None) -> None:
        self.volume = volume if volume is not None else Volume()
        if self.volume.manifest is None:
            self.volume.manifest = {}
        self.errors: list[str] = []

    @property
    def _manifest(self) -> dict[str, Any]:
        assert self.volume.manifest is not None
        return self.volume.manifest

    def _fail(self, message: str) -> Builder:
        self.errors.append(message)
        return self

    def _set_source(self, key: str, source: dict[str, Any]) -> None:
        """Replace the whole volume source, keeping only the name."""
        manifest = self._manifest
        name = manifest.get("name")
        manifest.clear()
        if name is not None:
            manifest["name"] = name
        manifest[key] = source

    def with_name(self, name: str) -> Builder:
        if not name:
            return self._fail("failed to build Volume object: missing Volume name")
        self._manifest["name"] = name
        return self

    def with_host_directory(self, path: str) -> Builder:
        """Use ``path`` on the host as the volume source."""
        if not path:
            return self._fail("failed to build volume object: missing volume path")
        self._set_source("hostPath", {"path": path})
        return self

    def with_host_path_and_type(self, dir_path: str, dir_type: str | None) -> Builder:
        """Use ``dir_path`` on the host, of host path type ``dir_type``."""
        if dir_type is None:
            return self._fail("failed to build volume object: nil volume type")
        if not dir_path:
            return self._fail("failed to build volume object: missing volume path")
        self._set_source("hostPath", {"path": dir_path, "type": dir_type})
        return self

    def with_pvc_source(self, pvc_name: str) -> Builder:
        """Use the claim ``pvc_name`` as the volume source."""
        if not pvc_name:
            return self._fail("failed to build volume object: missing pvc name")
        self._set_source("persistentVolumeClaim", {"claimName": pvc_name})
        return self

    def with_empty_dir(self, empty_dir: Mapping[str, Any] | None) -> Builder:
        """Set the empty-dir source to a copy of ``empty_dir``."""
        if empty_dir is None:
            return self._fail("failed to build volume object: nil dir")
        self._manifest["emptyDir"] = dict(empty_dir)
        return self

    def build(self) -> dict[str, Any]:
        """Return the manifest, raising BuildError if any step failed."""
        if self.errors:
            raise BuildError(f"[{' '.join(self.errors)}]", self.errors)
        return self._manifest