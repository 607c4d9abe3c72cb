"""Building stateful set manifests and reading their rollout state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping


class PredicateName(str, Enum):
    """Names of the rollout checks and of their status messages."""

    PROGRESS_DEADLINE_EXCEEDED = "ProgressDeadlineExceeded"
    NOT_SPEC_SYNCED = "NotSpecSynced"
    OLDER_REPLICA_ACTIVE = "OlderReplicaActive"
    TERMINATION_IN_PROGRESS = "TerminationInProgress"
    UPDATE_IN_PROGRESS = "UpdateInProgress"


class BuildError(Exception):
    """Raised when a manifest cannot be built from the values given."""

    def __init__(self, message: str, errors: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


@dataclass
class RolloutOutput:
    """Whether a rollout finished, and a message describing its state."""

    is_rolledout: bool = False
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"isRolledout": self.is_rolledout, "message": self.message}


def _to_json(output: RolloutOutput) -> bytes:
    return json.dumps(output.to_dict(), separators=(",", ":")).encode()


@dataclass
class Rollout:
    """Renders a rollout output in raw form."""

    output: RolloutOutput | None = None
    serializer: Callable[[RolloutOutput], bytes] = _to_json

    def raw(self) -> bytes:
        """Return the output as compact JSON bytes."""
        if self.output is None:
            raise ValueError("unable to get rollout status output")
        return self.serializer(self.output)


Predicate = Callable[["StatefulSet"], bool]


@dataclass
class StatefulSet:
    """A stateful set API object, held as its manifest mapping."""

    manifest: dict[str, Any] = field(default_factory=dict)

    def _part(self, *keys: str) -> Mapping[str, Any]:
        node: Any = self.manifest
        for key in keys:
            node = node.get(key) if isinstance(node, Mapping) else None
            if node is None:
                return {}
        return node

    @property
    def _spec_replicas(self) -> int | None:
        return self._part("spec").get("replicas")

    def _status(self, key: str) -> int:
        return self._part("status").get(key, 0) or 0

    def is_older_replica_active(self) -> bool:
        """True while fewer replicas are updated than the spec asks for."""
        replicas = self._spec_replicas
        return replicas is not None and self._status("updatedReplicas") < replicas

    def is_termination_in_progress(self) -> bool:
        """True while old replicas wait to be terminated."""
        return self._status("replicas") > self._status("updatedReplicas")

    def is_update_in_progress(self) -> bool:
        """True while fewer replicas are current than updated."""
        return self._status("currentReplicas") < self._status("updatedReplicas")

    def is_not_sync_spec(self) -> bool:
        """True while the latest spec generation has not been observed."""
        generation = self._part("metadata").get("generation", 0) or 0
        return generation > self._status("observedGeneration")

    def is_rollout(self) -> tuple[PredicateName | None, bool]:
        """Return the first failing check, or (None, True) when rolled out."""
        for name, check in _ROLLOUT_CHECKS.items():
            if check(self):
                return name, False
        return None, True

    def failed_rollout(self, name: PredicateName) -> RolloutOutput:
        """Return the rollout output for the failing check ``name``."""
        return RolloutOutput(is_rolledout=False, message=_ROLLOUT_STATUSES[name](self))

    def success_rollout(self) -> RolloutOutput:
        """Return the rollout output for a finished rollout."""
        return RolloutOutput(is_rolledout=True, message="deployment successfully rolled out")

    def rollout_status(self) -> RolloutOutput:
        """Return the rollout output describing the current state."""
        name, done = self.is_rollout()
        if done or name is None:
            return self.success_rollout()
        return self.failed_rollout(name)

    def rollout_status_raw(self) -> bytes:
        """Return the rollout status as JSON bytes."""
        return Rollout(output=self.rollout_status()).raw()


def _older_replica_message(sts: StatefulSet) -> str:
    replicas = sts._spec_replicas
    if replicas is None:
        return "replica update in-progress: some older replicas were updated"
    return (
        f"replica update in-progress: {sts._status('updatedReplicas')} of "
        f"{replicas} new replicas were updated"
    )


_ROLLOUT_STATUSES: dict[PredicateName, Callable[[StatefulSet], str]] = {
    PredicateName.PROGRESS_DEADLINE_EXCEEDED: lambda s: (
        "deployment exceeded its progress deadline"
    ),
    PredicateName.OLDER_REPLICA_ACTIVE: _older_replica_message,
    PredicateName.TERMINATION_IN_PROGRESS: lambda s: (
        "replica termination in-progress: "
        f"{s._status('replicas') - s._status('updatedReplicas')} "
        "old replicas are pending termination"
    ),
    PredicateName.UPDATE_IN_PROGRESS: lambda s: (
        f"replica update in-progress: {s._status('currentReplicas')} of "
        f"{s._status('updatedReplicas')} updated replicas are available"
    ),
    PredicateName.NOT_SPEC_SYNCED: lambda s: (
        "deployment rollout in-progress: waiting for deployment spec update"
    ),
}

_ROLLOUT_CHECKS: dict[PredicateName, Predicate] = {
    PredicateName.OLDER_REPLICA_ACTIVE: StatefulSet.is_older_replica_active,
    PredicateName.TERMINATION_IN_PROGRESS: StatefulSet.is_termination_in_progress,
    PredicateName.UPDATE_IN_PROGRESS: StatefulSet.is_update_in_progress,
    PredicateName.NOT_SPEC_SYNCED: StatefulSet.is_not_sync_spec,
}


class Builder:
    """Builds a stateful set manifest, collecting errors until build()."""

    def __init__(self, sts: StatefulSet | None = None) -> None:
        self.sts = sts if sts is not None else StatefulSet()
        self.checks: list[Predicate] = []
        self.errors: list[str] = []

    def _section(self, *keys: str) -> dict[str, Any]:
        node = self.sts.manifest
        for key in keys:
            node = node.setdefault(key, {})
        return node

    def _fail(self, message: str) -> Builder:
        self.errors.append(message)
        return self

    def with_name(self, name: str) -> Builder:
        if not name:
            return self._fail("failed to build deployment: missing name")
        self._section("metadata")["name"] = name
        return self

    def with_namespace(self, namespace: str) -> Builder:
        if not namespace:
            return self._fail("failed to build deployment: missing namespace")
        self._section("metadata")["namespace"] = namespace
        return self

    def with_service_name(self, name: str) -> Builder:
        if not name:
            return self._fail("failed to build deployment: missing serviceName")
        self._section("spec")["serviceName"] = name
        return self

    def with_pod_management_policy(self, policy: str) -> Builder:
        if not policy:
            return self._fail(
                "failed to build deployment: missing pod management policy"
            )
        self._section("spec")["podManagementPolicy"] = policy
        return self

    def with_annotations(self, annotations: Mapping[str, str]) -> Builder:
        """Merge ``annotations`` into any existing ones."""
        if not annotations:
            return self._fail("failed to build deployment object: missing annotations")
        existing = self._section("metadata").get("annotations")
        if existing is None:
            return self.with_annotations_new(annotations)
        existing.update(annotations)
        return self

    def with_annotations_new(self, annotations: Mapping[str, str]) -> Builder:
        """Replace any existing annotations with ``annotations``."""
        if not annotations:
            return self._fail("failed to build deployment object: no new annotations")
        self._section("metadata")["annotations"] = dict(annotations)
        return self

    def with_node_selector(self, selector: Mapping[str, str]) -> Builder:
        """Merge ``selector`` into the pod template's node selector."""
        if not selector:
            return self._fail("failed to build deployment object: no node selector")
        existing = self._section("spec", "template", "spec").get("nodeSelector")
        if existing is None:
            return self.with_node_selector_new(selector)
        existing.update(selector)
        return self

    def with_node_selector_new(self, selector: Mapping[str, str]) -> Builder:
        """Replace the pod template's node selector with ``selector``."""
        if not selector:
            return self._fail(
                "failed to build deployment object: no new node selector"
            )
        self._section("spec", "template", "spec")["nodeSelector"] = dict(selector)
        return self

    def with_owner_reference_new(self, owner_references: list[Mapping[str, Any]]) -> Builder:
        """Replace the owner references."""
        if not owner_references:
            return self._fail(
                "failed to build deployment object: no new ownerRefernce"
            )
        self._section("metadata")["ownerReferences"] = list(owner_references)
        return self

    def with_labels(self, labels: Mapping[str, str]) -> Builder:
        """Merge ``labels`` into any existing ones."""
        if not labels:
            return self._fail("failed to build deployment object: missing labels")
        existing = self._section("metadata").get("labels")
        if existing is None:
            return self.with_labels_new(labels)
        existing.update(labels)
        return self

    def with_labels_new(self, labels: Mapping[str, str]) -> Builder:
        """Replace any existing labels with ``labels``."""
        if not labels:
            return self._fail("failed to build deployment object: no new labels")
        self._section("metadata")["labels"] = dict(labels)
        return self

    def with_selector_match_labels(self, match_labels: Mapping[str, str]) -> Builder:
        """Merge ``match_labels`` into the selector's match labels."""
        if not match_labels:
            return self._fail("failed to build deployment object: missing matchlabels")
        selector = self._section("spec").get("selector")
        if selector is None:
            return self.with_selector_match_labels_new(match_labels)
        selector.setdefault("matchLabels", {}).update(match_labels)
        return self

    def with_selector_match_labels_new(self, match_labels: Mapping[str, str]) -> Builder:
        """Replace the selector with one matching ``match_labels``."""
        if not match_labels:
            return self._fail("failed to build deployment object: no new matchlabels")
        self._section("spec")["selector"] = {"matchLabels": dict(match_labels)}
        return self

    def with_replicas(self, replicas: int | None) -> Builder:
        if replicas is None:
            return self._fail("failed to build deployment object: nil replicas")
        if replicas < 0:
            return self._fail(
                f"failed to build deployment object: invalid replicas {{{replicas}}}"
            )
        self._section("spec")["replicas"] = int(replicas)
        return self

    def with_strategy_type(self, strategy_type: str) -> Builder:
        if not strategy_type:
            return self._fail(
                "failed to build deployment object: missing strategytype"
            )
        self._section("spec", "updateStrategy")["type"] = strategy_type
        return self

    def add_check(self, predicate: Predicate) -> Builder:
        """Add a condition to validate against the stateful set."""
        self.checks.append(predicate)
        return self

    def add_checks(self, predicates: Iterable[Predicate]) -> Builder:
        """Add several conditions to validate against the stateful set."""
        for predicate in predicates:
            self.add_check(predicate)
        return self

    def build(self) -> dict[str, Any]:
        """Return the manifest, raising BuildError if any step failed."""
        if self.errors:
            name = self.sts.manifest.get("metadata", {}).get("name", "")
            raise BuildError(
                f"failed to build a deployment: {name}: failed to validate: "
                f"build errors were found: [{' '.join(self.errors)}]",
                self.errors,
            )
        return self.sts.manifest