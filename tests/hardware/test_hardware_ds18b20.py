import platform

import pytest

from tempmon.sensors.discovery import discover_sensor_ids
from tempmon.sensors.factory import ProbeFactory

pytestmark = pytest.mark.skipif(
    not any(platform.machine().startswith(arch) for arch in ("arm", "aarch64")),
    reason="Hardware tests only run on Raspberry Pi"
)


@pytest.mark.hardware
def test_reads_real_probes():
    sensor_ids = discover_sensor_ids()
    if not sensor_ids:
        pytest.skip("No DS18B20 probes attached")

    for probe in ProbeFactory().build_all(sensor_ids):
        result = probe.read()
        print(f"{probe.sensor_id}: {result}")
        assert result.ok, result.detail
        assert -10.0 <= result.value <= 50.0
