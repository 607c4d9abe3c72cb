"""Data exchanged with the volume controller: stats and volume listings."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

BYTES_TO_GB = 1073741824
BYTES_TO_MB = 1048567
BYTES_TO_KB = 1024
MIC_SEC = 1000000

_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_MISSING = object()


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Find ``key`` exactly, else case-insensitively; return _MISSING if absent."""
    if key in data:
        return data[key]
    folded = key.casefold()
    for candidate, value in data.items():
        if candidate.casefold() == folded:
            return value
    return _MISSING


def _as_str(value: Any, key: str) -> str:
    if value is _MISSING or value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if value is _MISSING or value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


def _as_int(value: Any, key: str) -> int:
    if value is _MISSING or value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _as_str_map(value: Any, key: str) -> dict[str, str] | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, Mapping):
        raise TypeError(f"field {key!r} must be an object")
    return {k: _as_str(v, key) for k, v in value.items()}


def _as_number_text(value: Any, key: str) -> str:
    """Keep a JSON number as its text, the way the controller reports it."""
    if value is _MISSING or value is None:
        return ""
    if isinstance(value, bool):
        raise TypeError(f"field {key!r} must be a number, got bool")
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        if not _NUMBER_RE.fullmatch(value):
            raise ValueError(f"field {key!r} holds invalid number {value!r}")
        return value
    raise TypeError(f"field {key!r} must be a number, got {type(value).__name__}")


def _number_value(text: str) -> int | float:
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        return float(text)


@dataclass
class Replica:
    """A replica connected to the target."""

    address: str = ""
    mode: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Replica:
        return cls(
            address=_as_str(_lookup(data, "Address"), "Address"),
            mode=_as_str(_lookup(data, "Mode"), "Mode"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"Address": self.address, "Mode": self.mode}


def _num(key: str):
    return field(default="", metadata={"key": key, "number": True})


@dataclass
class Stats:
    """Stats collected from the controller; counters keep their JSON text."""

    got: bool = field(default=False, metadata={"key": "Got"})
    iqn: str = field(default="", metadata={"key": "iqn"})
    reads: str = _num("ReadIOPS")
    total_read_time: str = _num("TotalReadTime")
    total_read_block_count: str = _num("TotalReadBlockCount")
    total_read_bytes: str = _num("TotalReadBytes")
    writes: str = _num("WriteIOPS")
    total_write_time: str = _num("TotalWriteTime")
    total_write_block_count: str = _num("TotalWriteBlockCount")
    total_write_bytes: str = _num("TotalWriteBytes")
    used_logical_blocks: str = _num("UsedLogicalBlocks")
    used_blocks: str = _num("UsedBlocks")
    sector_size: str = _num("SectorSize")
    size: str = _num("Size")
    revision_counter: str = _num("RevisionCounter")
    replica_counter: str = _num("ReplicaCounter")
    up_time: str = _num("UpTime")
    name: str = field(default="", metadata={"key": "Name"})
    replicas: list[Replica] = field(default_factory=list, metadata={"key": "Replicas"})
    target_status: str = field(default="", metadata={"key": "Status"})
    is_client_connected: bool = field(
        default=False, metadata={"key": "IsClientConnected"}
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Stats:
        values: dict[str, Any] = {}
        for f in fields(cls):
            key = f.metadata["key"]
            raw = _lookup(data, key)
            if f.metadata.get("number"):
                values[f.name] = _as_number_text(raw, key)
            elif f.name == "replicas":
                if raw is _MISSING or raw is None:
                    values[f.name] = []
                elif not isinstance(raw, list):
                    raise TypeError(f"field {key!r} must be a list")
                else:
                    values[f.name] = [Replica.from_dict(item) for item in raw]
            elif f.type in ("bool", bool):
                values[f.name] = _as_bool(raw, key)
            else:
                values[f.name] = _as_str(raw, key)
        return cls(**values)

    @classmethod
    def from_json(cls, text: str | bytes) -> Stats:
        """Decode controller JSON, keeping every number's exact text."""
        data = json.loads(text, parse_int=str, parse_float=str)
        if not isinstance(data, Mapping):
            raise TypeError("stats document must be a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.metadata.get("number"):
                out[f.metadata["key"]] = _number_value(value)
            elif f.name == "replicas":
                out[f.metadata["key"]] = [replica.to_dict() for replica in value]
            else:
                out[f.metadata["key"]] = value
        return out


@dataclass
class Resource:
    """Identifier, links and actions attached to a controller object."""

    id: str = ""
    type: str = ""
    links: dict[str, str] | None = None
    actions: dict[str, str] | None = None

    @staticmethod
    def _resource_values(data: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "id": _as_str(_lookup(data, "id"), "id"),
            "type": _as_str(_lookup(data, "type"), "type"),
            "links": _as_str_map(_lookup(data, "links"), "links"),
            "actions": _as_str_map(_lookup(data, "actions"), "actions"),
        }

    def _resource_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.type:
            out["type"] = self.type
        out["links"] = self.links
        out["actions"] = self.actions
        return out


@dataclass
class Volume(Resource):
    """A volume as listed by the controller."""

    name: str = ""
    replica_count: int = 0
    read_only: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Volume:
        return cls(
            **cls._resource_values(data),
            name=_as_str(_lookup(data, "name"), "name"),
            replica_count=_as_int(_lookup(data, "replicaCount"), "replicaCount"),
            read_only=_as_str(_lookup(data, "readOnly"), "readOnly"),
        )

    def to_dict(self) -> dict[str, Any]:
        out = self._resource_dict()
        out["name"] = self.name
        out["replicaCount"] = self.replica_count
        out["readOnly"] = self.read_only
        return out


@dataclass
class ResizeInput(Resource):
    """Request body for resizing a volume."""

    name: str = ""
    size: str = ""

    def to_dict(self) -> dict[str, Any]:
        out = self._resource_dict()
        out["name"] = self.name
        out["size"] = self.size
        return out


@dataclass
class Collection:
    """Type, links and actions of a listing."""

    type: str = ""
    links: dict[str, str] | None = None
    actions: dict[str, str] | None = None

    def _collection_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.type:
            out["type"] = self.type
        if self.links:
            out["links"] = self.links
        if self.actions:
            out["actions"] = self.actions
        return out


@dataclass
class Volumes(Collection):
    """The volumes served by one controller."""

    data: list[Volume] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Volumes:
        raw = _lookup(data, "data")
        if raw is _MISSING or raw is None:
            items: list[Volume] = []
        elif not isinstance(raw, list):
            raise TypeError("field 'data' must be a list")
        else:
            items = [Volume.from_dict(item) for item in raw]
        return cls(
            type=_as_str(_lookup(data, "type"), "type"),
            links=_as_str_map(_lookup(data, "links"), "links"),
            actions=_as_str_map(_lookup(data, "actions"), "actions"),
            data=items,
        )

    def to_dict(self) -> dict[str, Any]:
        out = self._collection_dict()
        out["data"] = [volume.to_dict() for volume in self.data]
        return out