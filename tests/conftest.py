import pytest
from prometheus_client.parser import text_string_to_metric_families

GOOD_PAYLOAD = (
    "28 01 4b 46 7f ff 0c 10 c6 : crc=c6 YES\n"
    "28 01 4b 46 7f ff 0c 10 c6 t=17875\n"
)


def w1_payload(millidegrees, marker="YES"):
    return (
        f"6d 01 55 05 7f a5 a5 66 3e : crc=3e {marker}\n"
        f"6d 01 55 05 7f a5 a5 66 3e t={millidegrees}\n"
    )


@pytest.fixture
def devices_dir(tmp_path):
    path = tmp_path / "devices"
    path.mkdir()
    return path


@pytest.fixture
def add_probe(devices_dir):
    """
    Create a fake w1_therm device directory. payload=None leaves out the
    w1_slave file, like a probe that dropped off the bus.
    """
    def _add(sensor_id, payload=None, resolution="12"):
        device = devices_dir / sensor_id
        device.mkdir(exist_ok=True)
        if payload is not None:
            (device / "w1_slave").write_text(payload)
        if resolution is not None:
            (device / "resolution").write_text(resolution)
        return device

    return _add


@pytest.fixture
def make_payload():
    return w1_payload


@pytest.fixture
def good_payload():
    return GOOD_PAYLOAD


def exposition_value(text, name, labels):
    """Find one sample in Prometheus text output, ignoring label order."""
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            if sample.name == name and sample.labels == labels:
                return sample.value
    return None


@pytest.fixture
def sample_value():
    return exposition_value
