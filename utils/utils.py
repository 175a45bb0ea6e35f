from pathlib import Path
from typing import Any, Optional

from pulumi import Config, ConfigTypeError

from utils.errors import ConfigShape, ReadmeMissing
from utils.module_dataclasses import PanosVMConfig

CONFIG_SECTIONS = ("tags", "vnet", "vm")


def _get_section(config: Config, section: str) -> Optional[Any]:
    try:
        return config.get_object(section)
    except ConfigTypeError as ex:
        raise ConfigShape(section, str(ex)) from ex


def load_panos_config(config: Config) -> PanosVMConfig:
    """
    Loads and validates the `tags`, `vnet` and `vm` objects of the stack
    configuration.
    """
    return PanosVMConfig.from_sections(
        **{section: _get_section(config, section) for section in CONFIG_SECTIONS}
    )


def read_readme(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as ex:
        raise ReadmeMissing(path, ex) from ex
