import pytest
from pulumi import ConfigTypeError

from utils.errors import ConfigMissing, ConfigShape, ReadmeMissing
from utils.utils import load_panos_config, read_readme


class StubConfig:
    """Stands in for `pulumi.Config`, serving already decoded objects."""

    def __init__(self, objects: dict):
        self.objects = objects

    def get_object(self, key):
        value = self.objects.get(key)
        if isinstance(value, Exception):
            raise value
        return value


def test_read_readme(tmp_path):
    path = tmp_path / "README.md"
    path.write_text("# firewall\n", encoding="utf-8")

    assert read_readme(str(path)) == "# firewall\n"


def test_read_readme_missing(tmp_path):
    path = str(tmp_path / "README.md")

    with pytest.raises(ReadmeMissing) as excinfo:
        read_readme(path)

    assert excinfo.value.path == path
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_read_readme_directory(tmp_path):
    with pytest.raises(ReadmeMissing):
        read_readme(str(tmp_path))


def test_load_panos_config(document):
    config = load_panos_config(StubConfig(document))

    assert config.tags.solution == "panos"
    assert len(config.vnet.subnets) == 3


def test_load_panos_config_missing_section(document):
    del document["vm"]

    with pytest.raises(ConfigMissing) as excinfo:
        load_panos_config(StubConfig(document))

    assert excinfo.value.section == "vm"


def test_load_panos_config_undecodable_section(document):
    document["vnet"] = ConfigTypeError("panos-vm:vnet", "{", "JSON object")

    with pytest.raises(ConfigShape) as excinfo:
        load_panos_config(StubConfig(document))

    assert excinfo.value.path == "vnet"
