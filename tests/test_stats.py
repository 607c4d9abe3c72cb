import json

import pytest

from jivakit.stats import ResizeInput, Replica, Stats, Volume, Volumes

SAMPLE = {
    "iqn": "iqn.2016-09.com.openebs.jiva:pvc-1",
    "ReadIOPS": 12,
    "TotalReadTime": 340,
    "TotalReadBlockCount": 7,
    "TotalReadBytes": 4096,
    "WriteIOPS": 3,
    "TotalWriteTime": 12,
    "TotalWriteBlockCount": 2,
    "TotalWriteBytes": 8192,
    "UsedLogicalBlocks": 10,
    "UsedBlocks": 11,
    "SectorSize": 4096,
    "Size": 5368709120,
    "RevisionCounter": 99,
    "ReplicaCounter": 1,
    "UpTime": 158.25,
    "Name": "pvc-1",
    "Replicas": [{"Address": "tcp://10.0.0.5:9502", "Mode": "RW"}],
    "Status": "RW",
    "IsClientConnected": True,
}


def test_stats_json_round_trip():
    stats = Stats.from_json(json.dumps(SAMPLE))
    out = stats.to_dict()
    assert out.pop("Got") is False
    assert out == SAMPLE


def test_stats_keeps_number_text():
    stats = Stats.from_json(json.dumps(SAMPLE))
    assert stats.size == str(SAMPLE["Size"])
    assert stats.up_time == "158.25"
    assert stats.replicas == [Replica(address="tcp://10.0.0.5:9502", mode="RW")]


def test_stats_keys_case_insensitive():
    stats = Stats.from_dict({"readiops": 5, "name": "vol", "status": "RO"})
    assert stats.reads == "5"
    assert stats.name == "vol"
    assert stats.target_status == "RO"


def test_missing_numbers_encode_as_zero():
    out = Stats().to_dict()
    assert out["ReadIOPS"] == 0
    assert out["Replicas"] == []


def test_invalid_number_string_rejected():
    with pytest.raises(ValueError):
        Stats.from_dict({"Size": "five"})


def test_wrong_type_rejected():
    with pytest.raises(TypeError):
        Stats.from_dict({"IsClientConnected": "yes"})


def test_volume_round_trip():
    raw = {
        "id": "vol-1",
        "type": "volume",
        "links": {"self": "/v1/volumes/vol-1"},
        "actions": {"revert": "/v1/volumes/vol-1?action=revert"},
        "name": "vol-1",
        "replicaCount": 3,
        "readOnly": "false",
    }
    assert Volume.from_dict(raw).to_dict() == raw


def test_volume_omits_empty_id_and_type():
    out = Volume(name="v").to_dict()
    assert "id" not in out and "type" not in out
    assert out["links"] is None


def test_volume_replica_count_must_be_int():
    with pytest.raises(TypeError):
        Volume.from_dict({"replicaCount": "3"})


def test_volumes_round_trip():
    raw = {
        "type": "collection",
        "data": [
            {"links": None, "actions": None, "name": "a", "replicaCount": 1, "readOnly": ""},
            {"links": None, "actions": None, "name": "b", "replicaCount": 2, "readOnly": ""},
        ],
    }
    volumes = Volumes.from_dict(raw)
    assert [v.name for v in volumes.data] == ["a", "b"]
    assert volumes.to_dict() == raw


def test_resize_input_serialises_fields():
    out = ResizeInput(name="vol-1", size="10G").to_dict()
    assert out["name"] == "vol-1"
    assert out["size"] == "10G"
    assert "id" not in out