import pytest

from jivakit.kube_volume import (
    HOST_PATH_DIRECTORY_OR_CREATE,
    BuildError,
    Builder,
    Volume,
)


@pytest.mark.parametrize(
    "name, expected_errors",
    [
        ("vol1", []),
        ("", ["failed to build Volume object: missing Volume name"]),
    ],
)
def test_builder_with_name(name, expected_errors):
    b = Builder(Volume()).with_name(name)
    assert b.errors == expected_errors


@pytest.mark.parametrize(
    "path, expected_errors",
    [
        ("/var/openebs/local", []),
        ("", ["failed to build volume object: missing volume path"]),
    ],
)
def test_builder_with_host_directory(path, expected_errors):
    b = Builder(Volume()).with_host_directory(path)
    assert b.errors == expected_errors


def test_build_host_path_volume():
    vol = (
        Builder()
        .with_name("PV1")
        .with_host_directory("/var/openebs/local/PV1")
        .build()
    )
    assert vol == {"name": "PV1", "hostPath": {"path": "/var/openebs/local/PV1"}}


def test_build_host_path_volume_with_error():
    with pytest.raises(BuildError) as info:
        Builder().with_name("").with_host_directory("").build()
    assert info.value.errors == [
        "failed to build Volume object: missing Volume name",
        "failed to build volume object: missing volume path",
    ]


@pytest.mark.parametrize(
    "dir_type, expected_errors",
    [
        (HOST_PATH_DIRECTORY_OR_CREATE, []),
        (None, ["failed to build volume object: nil volume type"]),
    ],
)
def test_builder_with_host_path_and_type(dir_type, expected_errors):
    b = Builder().with_host_path_and_type("/var/openebs/local/PV1", dir_type)
    assert b.errors == expected_errors


def test_host_path_and_type_manifest():
    vol = Builder().with_host_path_and_type("/data", HOST_PATH_DIRECTORY_OR_CREATE).build()
    assert vol == {"hostPath": {"path": "/data", "type": "DirectoryOrCreate"}}


def test_host_path_and_type_missing_path():
    b = Builder().with_host_path_and_type("", HOST_PATH_DIRECTORY_OR_CREATE)
    assert b.errors == ["failed to build volume object: missing volume path"]


@pytest.mark.parametrize(
    "empty_dir, expected_errors",
    [
        ({}, []),
        (None, ["failed to build volume object: nil dir"]),
    ],
)
def test_builder_with_empty_dir(empty_dir, expected_errors):
    b = Builder().with_empty_dir(empty_dir)
    assert b.errors == expected_errors


def test_empty_dir_is_copied():
    source = {"medium": "Memory"}
    vol = Builder().with_name("scratch").with_empty_dir(source).build()
    source["medium"] = "Disk"
    assert vol == {"name": "scratch", "emptyDir": {"medium": "Memory"}}


def test_pvc_source_replaces_host_path():
    vol = (
        Builder()
        .with_name("data")
        .with_host_directory("/tmp")
        .with_pvc_source("claim-1")
        .build()
    )
    assert vol == {"name": "data", "persistentVolumeClaim": {"claimName": "claim-1"}}


def test_pvc_source_missing_name():
    with pytest.raises(BuildError) as info:
        Builder().with_pvc_source("").build()
    assert "missing pvc name" in str(info.value)


def test_volume_is_nil():
    assert Volume(manifest=None).is_nil() is True
    assert Volume().is_nil() is False