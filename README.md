# jivakit

Building blocks for tooling around Jiva block volumes. The package has no
third-party dependencies.

## Install

```
pip install jivakit
pip install "jivakit[test]"   # with pytest for the test suite
```

## Modules

### `jivakit.version`

- `get()` returns `VERSION`; `get_git_commit()` returns `COMMIT`, or asks
  `git rev-parse --verify HEAD` when it is empty (an empty string if git
  fails).
- `get_version_details()` returns `<version>-<first 7 characters of the
  commit>` and raises `ValueError` when the commit is shorter than that.
- `is_old_less_than_or_equal_new_version(old, new)` compares dotted versions
  component by component, ignoring anything after the first `-`. A `new`
  version of `master` or `develop` always counts as newest.
- `can_current_version_be_upgraded(version)` checks that a version lies
  between `MIN_CURRENT_VERSION` (`2.6.0`) and `valid_desired_version`;
  `is_current_version_valid(v)` and `is_desired_version_valid(v)` apply the
  checks after dropping any `-suffix`.

### `jivakit.request`

A process-wide, thread-safe record of volumes with an operation in progress.
`add_volume_to_transition_list(volume_id, req)` raises `VolumeBusyError`
when the volume is already recorded; `remove_volume_from_transition_list`
releases it.

### `jivakit.utils`

`strip_name(name)` lower-cases a name, cuts it to 43 characters and drops
one trailing `-`. `SYNC_PERIOD` (5 s) and `RETRY_PERIOD` (2 s) hold the
reconcile timings.

### `jivakit.stats`

Dataclasses for what a Jiva controller returns: `Stats`, `Replica`,
`Volume`, `Volumes`, `ResizeInput`, `Resource` and `Collection`.
`Stats.from_json` keeps every counter as its exact JSON text; `to_dict`
turns counters back into numbers. Keys are matched exactly first, then
case-insensitively. The unit constants `BYTES_TO_GB`, `BYTES_TO_MB`,
`BYTES_TO_KB` and `MIC_SEC` are provided too.

### `jivakit.versionset`

`VersionSet` holds cluster facts cached in `OPENEBS_IO_*` environment
variables. `get_version(override, fetcher)` reads them from the
environment, first calling `fetch_and_set_version(fetcher)` when the
version is not cached yet or `override` is true. The fetcher is any
callable returning a `ClusterInfo`. The module also holds the event
category and label constants.

### `jivakit.usage`

- `Usage` is a chainable builder for anonymous usage events: `build()`,
  `application_builder()`, `install_builder(override, cluster_size)`,
  `new_event(...)`, `set_volume_capacity`, `set_volume_type`,
  `set_replica_count`. `to_params()` gives the measurement-protocol fields;
  `send()` posts them from a background thread and returns that thread, or
  returns `None` without sending when the tracking ID is not valid.
- `to_giga_units(size)` turns a size such as `"104.5 GB"` into whole
  gigabytes (10**9 bytes); binary suffixes are read as decimal, so
  `"1 GiB"` gives 1. It raises `ValueError` for sizes it cannot read.
- `get_ping_period()` reads `OPENEBS_IO_ANALYTICS_PING_INTERVAL` as a
  duration such as `2h` or `90m`; missing, unreadable or sub-hour values
  give 24 hours.
- `ping_check(count_nodes)` sends a ping event every ping period, forever.

### `jivakit.statefulset`

`Builder` assembles a StatefulSet manifest as a plain dict
(`with_name`, `with_namespace`, `with_service_name`,
`with_pod_management_policy`, `with_annotations[_new]`,
`with_node_selector[_new]`, `with_owner_reference_new`,
`with_labels[_new]`, `with_selector_match_labels[_new]`, `with_replicas`,
`with_strategy_type`). `StatefulSet` wraps a manifest and reports its
rollout: `is_rollout()`, `rollout_status()` returning a `RolloutOutput`,
and `rollout_status_raw()` returning compact JSON bytes.

### `jivakit.kube_volume`

`Builder` assembles a pod volume manifest: `with_name`,
`with_host_directory`, `with_host_path_and_type` (see
`HOST_PATH_DIRECTORY` and `HOST_PATH_DIRECTORY_OR_CREATE`),
`with_pvc_source` and `with_empty_dir`. `Volume.is_nil()` tells whether a
volume has no manifest.

Both builders collect every problem found along the chain; `build()` then
raises a single `BuildError` whose `errors` attribute lists them.

## Examples

```python
from jivakit.version import is_old_less_than_or_equal_new_version
from jivakit.utils import strip_name
from jivakit.usage import to_giga_units

is_old_less_than_or_equal_new_version("2.6.0", "2.8.0")   # True
strip_name("PVC-" + "A" * 60)                             # lower case, at most 43 chars
to_giga_units("104.5 GB")                                 # 104
```

```python
from jivakit.statefulset import Builder, BuildError

try:
    manifest = (
        Builder()
        .with_name("jiva-rep")
        .with_namespace("openebs")
        .with_replicas(3)
        .with_labels({"app": "jiva"})
        .build()
    )
except BuildError as err:
    print(err.errors)
```

## What it does not do

- It has no command-line program, operator or CSI driver; it is a library.
- It does not talk to the Kubernetes API. Cluster facts come from the
  fetcher you pass to `VersionSet.get_version`, and `ping_check` needs a
  callable that counts nodes. The builders only produce manifests; they do
  not apply them.
- `Usage.send` does not consult `OPENEBS_IO_ENABLE_ANALYTICS`; deciding
  whether to send is left to the caller.

## Tests

```
pytest
```