import threading

import pytest

from tempmon.exceptions import ConfigurationError
from tempmon.sensors.result import ErrorKind
from tempmon.store import MetricsStore, Reading


@pytest.fixture
def store():
    return MetricsStore(sensor_ids=["28-aaa", "28-bbb"], labels={"28-aaa": "tank1"})


def test_new_store_snapshot_is_empty(store):
    snap = store.snapshot()
    assert snap.probes == ("tank1", "28-bbb")
    assert dict(snap.readings) == {}
    assert dict(snap.errors) == {}


def test_label_falls_back_to_sensor_id(store):
    assert store.label_for("28-aaa") == "tank1"
    assert store.label_for("28-bbb") == "28-bbb"


def test_record_reading_replaces_previous(store):
    store.record_reading("28-aaa", 20.0, 100.0)
    store.record_reading("28-aaa", 21.5, 115.0)

    snap = store.snapshot()

    assert snap.readings == {"tank1": Reading("28-aaa", "tank1", 21.5, 115.0)}


def test_failed_read_keeps_last_reading_and_counts_once(store):
    store.record_reading("28-aaa", 21.5, 100.0)
    store.record_error("28-aaa", ErrorKind.IO_FAILURE)

    snap = store.snapshot()

    assert snap.readings["tank1"].value == 21.5
    assert snap.readings["tank1"].timestamp == 100.0
    assert dict(snap.errors) == {("tank1", ErrorKind.IO_FAILURE): 1}


def test_different_error_kinds_have_separate_counters(store):
    store.record_error("28-bbb", ErrorKind.CRC_FAILURE)
    store.record_error("28-bbb", ErrorKind.PARSE_FAILURE)

    assert dict(store.snapshot().errors) == {
        ("28-bbb", ErrorKind.CRC_FAILURE): 1,
        ("28-bbb", ErrorKind.PARSE_FAILURE): 1,
    }


def test_same_error_kind_accumulates(store):
    store.record_error("28-bbb", ErrorKind.OUT_OF_RANGE)
    store.record_error("28-bbb", ErrorKind.OUT_OF_RANGE)

    assert dict(store.snapshot().errors) == {("28-bbb", ErrorKind.OUT_OF_RANGE): 2}


def test_record_error_accepts_kind_value(store):
    store.record_error("28-bbb", "io_failure")
    assert dict(store.snapshot().errors) == {("28-bbb", ErrorKind.IO_FAILURE): 1}


def test_unpolled_sensor_has_no_reading(store):
    store.record_reading("28-aaa", 21.5, 100.0)
    snap = store.snapshot()
    assert "28-bbb" not in snap.readings
    assert "28-ccc" not in snap.readings


def test_snapshot_is_isolated_from_later_writes(store):
    store.record_reading("28-aaa", 21.5, 100.0)
    store.record_error("28-bbb", ErrorKind.IO_FAILURE)
    snap = store.snapshot()

    store.record_reading("28-aaa", 30.0, 200.0)
    store.record_error("28-bbb", ErrorKind.IO_FAILURE)

    assert snap.readings["tank1"].value == 21.5
    assert snap.errors[("28-bbb", ErrorKind.IO_FAILURE)] == 1


def test_snapshot_mappings_are_read_only(store):
    snap = store.snapshot()
    with pytest.raises(TypeError):
        snap.readings["tank1"] = None
    with pytest.raises(TypeError):
        snap.errors[("tank1", ErrorKind.IO_FAILURE)] = 1


def test_concurrent_snapshots_never_see_torn_readings(store):
    # value and timestamp are always written as a matching pair
    stop = threading.Event()
    torn = []

    def reader():
        while not stop.is_set():
            reading = store.snapshot().readings.get("tank1")
            if reading is not None and reading.value != reading.timestamp:
                torn.append(reading)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()

    for i in range(20000):
        store.record_reading("28-aaa", float(i), float(i))
        if i % 7 == 0:
            store.record_error("28-aaa", ErrorKind.CRC_FAILURE)

    stop.set()
    for t in readers:
        t.join()

    assert torn == []
    snap = store.snapshot()
    assert snap.readings["tank1"].value == 19999.0
    assert snap.errors[("tank1", ErrorKind.CRC_FAILURE)] == len(range(0, 20000, 7))


def test_label_naming_another_probe_is_rejected():
    with pytest.raises(ConfigurationError, match="id of another probe"):
        MetricsStore(["28-aaa", "28-bbb"], labels={"28-aaa": "28-bbb"})


def test_label_naming_a_labelled_probe_is_rejected():
    with pytest.raises(ConfigurationError):
        MetricsStore(["28-aaa", "28-bbb"], labels={"28-aaa": "28-bbb", "28-bbb": "tank2"})


def test_shared_label_is_rejected():
    with pytest.raises(ConfigurationError, match="used by both"):
        MetricsStore(["28-aaa", "28-bbb"], labels={"28-aaa": "tank", "28-bbb": "tank"})


def test_label_equal_to_own_id_is_allowed():
    store = MetricsStore(["28-aaa", "28-bbb"], labels={"28-aaa": "28-aaa"})
    assert store.snapshot().probes == ("28-aaa", "28-bbb")


def test_error_counts_never_merge_across_probes(store):
    for _ in range(3):
        store.record_error("28-aaa", ErrorKind.IO_FAILURE)
    store.record_error("28-bbb", ErrorKind.IO_FAILURE)

    errors = store.snapshot().errors

    assert errors[("tank1", ErrorKind.IO_FAILURE)] == 3
    assert errors[("28-bbb", ErrorKind.IO_FAILURE)] == 1
