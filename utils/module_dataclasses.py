from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from utils.errors import ConfigMissing, ConfigShape


class ConfigModel(BaseModel):
    """
    Base for every configuration value. Keys are the camelCase spellings of
    the stack file and match case-insensitively; unknown keys are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="forbid",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def canonical_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        spellings = {}
        for name, info in cls.model_fields.items():
            alias = info.alias or name
            spellings[name.lower()] = alias
            spellings[alias.lower()] = alias

        canonical = {}
        for key, value in data.items():
            alias = spellings.get(str(key).lower(), key)
            if alias in canonical:
                raise ValueError(f"duplicate key '{key}'")
            canonical[alias] = value
        return canonical


class Tags(ConfigModel):
    """
    Tags attached to every taggable resource of the stack.

    Args:
        automation (str): Tool or pipeline that owns the resources.
        solution (str): Solution name, also used in the VM name.
    """

    automation: StrictStr
    solution: StrictStr

    def as_dict(self) -> dict[str, str]:
        return {"automation": self.automation, "solution": self.solution}


class SecurityRule(ConfigModel):
    access: StrictStr
    destination_address_prefix: StrictStr
    destination_port_range: StrictStr
    direction: StrictStr
    name: StrictStr
    priority: StrictInt
    protocol: StrictStr
    source_address_prefix: StrictStr
    source_port_range: StrictStr


class NetworkSecurityGroupSpec(ConfigModel):
    name: StrictStr
    rules: tuple[SecurityRule, ...] = Field(default=(), alias="Rules")


class Route(ConfigModel):
    name: StrictStr
    address_prefix: StrictStr
    next_hop_type: StrictStr
    # Only meaningful for VirtualAppliance next hops.
    next_hop_ip_address: StrictStr = ""


class RouteTableSpec(ConfigModel):
    name: StrictStr
    disable_bgp_route_propagation: StrictBool = False
    routes: tuple[Route, ...] = Field(default=(), alias="Routes")


class SubnetSpec(ConfigModel):
    name: StrictStr
    address_prefix: StrictStr
    nsg_name: StrictStr = Field(default="", alias="NSGName")
    rt_name: StrictStr = Field(default="", alias="RTName")


class PublicIPSpec(ConfigModel):
    name: StrictStr


class NetworkInterfaceSpec(ConfigModel):
    """
    A NIC bound to one subnet and, when `pip_name` is set, one public IP.
    """

    name: StrictStr
    snet_name: StrictStr
    pip_name: StrictStr = ""
    enable_accelerated_networking: StrictBool = False
    enable_ip_forwarding: StrictBool = Field(
        default=False, alias="enableIPForwarding"
    )


class VNetSpec(ConfigModel):
    """
    The virtual network and everything wired into it.

    Args:
        address_space (str): The single address prefix of the VNet.
        nsgs (tuple[NetworkSecurityGroupSpec, ...]): Security groups.
        route_tables (tuple[RouteTableSpec, ...]): Route tables.
        subnets (tuple[SubnetSpec, ...]): Subnets, each naming one NSG and
            one route table.
        public_ips (tuple[PublicIPSpec, ...]): Static public IPs.
        nics (tuple[NetworkInterfaceSpec, ...]): Network interfaces.
    """

    address_space: StrictStr
    nsgs: tuple[NetworkSecurityGroupSpec, ...] = Field(default=(), alias="NSG")
    route_tables: tuple[RouteTableSpec, ...] = Field(default=(), alias="RT")
    subnets: tuple[SubnetSpec, ...] = Field(default=(), alias="SNET")
    public_ips: tuple[PublicIPSpec, ...] = Field(default=(), alias="PIP")
    nics: tuple[NetworkInterfaceSpec, ...] = Field(default=(), alias="NIC")


class ImageSpec(ConfigModel):
    offer: StrictStr
    publisher: StrictStr
    sku: StrictStr
    version: StrictStr


class NicMap(ConfigModel):
    """
    The three NICs of the VM. `nic0` is the primary interface.
    """

    nic0: StrictStr
    nic1: StrictStr
    nic2: StrictStr

    @model_validator(mode="after")
    def distinct_names(self) -> "NicMap":
        names = [self.nic0, self.nic1, self.nic2]
        if len(set(names)) != len(names):
            raise ValueError(f"NIC names must be distinct, got {names}")
        return self

    def bindings(self) -> list[tuple[str, bool]]:
        return [(self.nic0, True), (self.nic1, False), (self.nic2, False)]


class VMSpec(ConfigModel):
    admin_password: StrictStr = Field(repr=False)
    admin_username: StrictStr
    computer_name: StrictStr
    image: ImageSpec
    nic_map: NicMap
    storage_account_type: StrictStr
    vm_size: StrictStr


def _error_path(section: str, loc: tuple) -> str:
    path = section
    for part in loc:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


def config_shape(section: str, error: ValidationError) -> ConfigShape:
    """
    Turns the first pydantic error of a section into a `ConfigShape`
    pointing at the offending key.
    """
    detail = error.errors()[0]
    loc = tuple(detail["loc"])
    if detail["type"] == "missing":
        return ConfigShape(
            _error_path(section, loc[:-1]), f"missing required key '{loc[-1]}'"
        )
    if detail["type"] == "extra_forbidden":
        return ConfigShape(
            _error_path(section, loc[:-1]), f"unknown key '{loc[-1]}'"
        )
    return ConfigShape(_error_path(section, loc), detail["msg"])


class PanosVMConfig(ConfigModel):
    """
    The validated stack configuration.

    Args:
        tags (Tags): Required tags.
        vnet (VNetSpec): Network topology.
        vm (VMSpec): Firewall VM properties.
    """

    tags: Tags
    vnet: VNetSpec
    vm: VMSpec

    @classmethod
    def from_sections(
        cls,
        tags: Optional[Any],
        vnet: Optional[Any],
        vm: Optional[Any],
    ) -> "PanosVMConfig":
        """
        Builds the configuration from the three raw config sections.

        Raises:
            ConfigMissing: If a section is absent.
            ConfigShape: If a section is malformed.
        """
        sections = {
            "tags": (Tags, tags),
            "vnet": (VNetSpec, vnet),
            "vm": (VMSpec, vm),
        }
        for section, (_, document) in sections.items():
            if document is None:
                raise ConfigMissing(section)

        values = {}
        for section, (model, document) in sections.items():
            try:
                values[section] = model.model_validate(document)
            except ValidationError as ex:
                raise config_shape(section, ex) from ex
        return cls(**values)
