import pytest

from tempmon.exceptions import ConfigurationError
from tempmon.sensors.ds18b20 import DS18B20Sensor
from tempmon.sensors.factory import ProbeFactory


def test_build_all_keeps_order_and_offsets(devices_dir):
    factory = ProbeFactory(devices_path=str(devices_dir), offsets={"28-bbb": 0.25})

    probes = factory.build_all(["28-bbb", "28-aaa"])

    assert [p.sensor_id for p in probes] == ["28-bbb", "28-aaa"]
    assert all(isinstance(p, DS18B20Sensor) for p in probes)
    assert probes[0].offset == 0.25
    assert probes[1].offset == 0.0
    assert probes[0].device_file == str(devices_dir / "28-bbb" / "w1_slave")


def test_build_rejects_foreign_family():
    with pytest.raises(ConfigurationError):
        ProbeFactory().build("10-000802b4a2c1")


def test_build_all_skips_invalid_ids(caplog):
    with caplog.at_level("WARNING"):
        probes = ProbeFactory().build_all(["28-aaa", "not-a-probe"])

    assert [p.sensor_id for p in probes] == ["28-aaa"]
    assert "Skipping probe not-a-probe" in caplog.text


def test_offset_for_undiscovered_probe_is_reported(caplog):
    with caplog.at_level("WARNING"):
        ProbeFactory(offsets={"28-fff": 1.0}).build_all(["28-aaa"])
    assert "undiscovered probe 28-fff" in caplog.text
