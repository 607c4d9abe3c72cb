import os

import pytest

from jivakit import version
from jivakit.versionset import (
    CLUSTER_ARCH_ENV,
    CLUSTER_UUID_ENV,
    CLUSTER_VERSION_ENV,
    INSTALLER_TYPE_ENV,
    NODE_TYPE_ENV,
    OPENEBS_VERSION_ENV,
    ClusterInfo,
    VersionSet,
)

_KEYS = (
    CLUSTER_UUID_ENV,
    CLUSTER_VERSION_ENV,
    CLUSTER_ARCH_ENV,
    OPENEBS_VERSION_ENV,
    NODE_TYPE_ENV,
    INSTALLER_TYPE_ENV,
)

INFO = ClusterInfo(
    uid="ns-uid",
    platform="linux/amd64",
    git_version="v1.20.2",
    node_type="Ubuntu 20.04, 5.4.0",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    saved = {key: os.environ.pop(key, None) for key in _KEYS}
    monkeypatch.setattr(version, "COMMIT", "0123456789abcdef")
    yield
    for key, value in saved.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


def _recording_fetcher(calls):
    def fetch():
        calls.append(True)
        return INFO

    return fetch


def test_fetch_sets_fields_and_environment():
    vs = VersionSet()
    vs.fetch_and_set_version(lambda: INFO)
    assert vs.id == "ns-uid"
    assert vs.k8s_arch == "linux/amd64"
    assert vs.k8s_version == "v1.20.2"
    assert vs.node_type == "Ubuntu 20.04, 5.4.0"
    assert vs.openebs_version == version.get_version_details()
    assert os.environ[CLUSTER_UUID_ENV] == "ns-uid"
    assert os.environ[CLUSTER_ARCH_ENV] == "linux/amd64"
    assert os.environ[CLUSTER_VERSION_ENV] == "v1.20.2"
    assert os.environ[NODE_TYPE_ENV] == "Ubuntu 20.04, 5.4.0"
    assert os.environ[OPENEBS_VERSION_ENV] == vs.openebs_version


def test_get_version_uses_cached_environment():
    os.environ[OPENEBS_VERSION_ENV] = "cached-version"
    os.environ[CLUSTER_UUID_ENV] = "cached-uid"
    os.environ[INSTALLER_TYPE_ENV] = "helm"
    calls = []
    vs = VersionSet()
    vs.get_version(False, _recording_fetcher(calls))
    assert calls == []
    assert vs.openebs_version == "cached-version"
    assert vs.id == "cached-uid"
    assert vs.installer_type == "helm"
    assert vs.k8s_arch == ""


def test_get_version_fetches_when_not_cached():
    calls = []
    vs = VersionSet()
    vs.get_version(False, _recording_fetcher(calls))
    assert calls == [True]
    assert vs.id == "ns-uid"
    assert vs.openebs_version == os.environ[OPENEBS_VERSION_ENV]


def test_get_version_override_refetches():
    os.environ[OPENEBS_VERSION_ENV] = "cached-version"
    calls = []
    vs = VersionSet()
    vs.get_version(True, _recording_fetcher(calls))
    assert calls == [True]
    assert vs.openebs_version == version.get_version_details()


def test_get_version_without_fetcher_raises():
    with pytest.raises(LookupError):
        VersionSet().get_version(False)


def test_fetcher_error_propagates_and_leaves_environment():
    def broken():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        VersionSet().get_version(False, broken)
    assert CLUSTER_UUID_ENV not in os.environ