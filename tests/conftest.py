import copy
from typing import Any

import pulumi
import pytest

import modules.outputs
from modules.firewall import PanosDeployment, deploy_panos_vm
from utils.module_dataclasses import PanosVMConfig

STACK = "dev"
RANDOM_OS_DISK_ID = "ab12cd34"


class PanosMocks(pulumi.runtime.Mocks):
    """Records every resource registered with the mocked Pulumi engine."""

    def __init__(self):
        self.resources: list[pulumi.runtime.MockResourceArgs] = []

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.resources.append(args)
        outputs = dict(args.inputs)
        outputs.setdefault("name", args.name)
        if args.typ.endswith(":RandomString"):
            outputs["result"] = RANDOM_OS_DISK_ID
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}

    def declared(self) -> list[pulumi.runtime.MockResourceArgs]:
        return [
            res
            for res in self.resources
            if not res.typ.startswith("pulumi:providers:")
        ]

    def of_type(self, suffix: str) -> list[pulumi.runtime.MockResourceArgs]:
        return [res for res in self.declared() if res.typ.endswith(f":{suffix}")]


def prop(document: dict, name: str) -> Any:
    """
    Looks up a serialized property regardless of its casing, so that
    `public_ip_address` finds `publicIPAddress`. Returns None when absent.
    """
    wanted = name.replace("_", "").lower()
    for key, value in document.items():
        if key.replace("_", "").lower() == wanted:
            return value
    return None


def happy_path_document() -> dict:
    rule = {
        "access": "Allow",
        "destinationAddressPrefix": "*",
        "destinationPortRange": "443",
        "direction": "Inbound",
        "name": "allow-https",
        "priority": 100,
        "protocol": "Tcp",
        "sourceAddressPrefix": "*",
        "sourcePortRange": "*",
    }
    return {
        "tags": {"automation": "pulumi", "solution": "panos"},
        "vnet": {
            "addressSpace": "10.0.0.0/16",
            "NSG": [
                {"name": "nsg-mgmt", "Rules": [rule]},
                {"name": "nsg-data", "Rules": [dict(rule, priority=200)]},
            ],
            "RT": [
                {
                    "name": "rt-mgmt",
                    "disableBgpRoutePropagation": False,
                    "Routes": [
                        {
                            "name": "default",
                            "addressPrefix": "0.0.0.0/0",
                            "nextHopType": "Internet",
                        }
                    ],
                },
                {
                    "name": "rt-data",
                    "disableBgpRoutePropagation": True,
                    "Routes": [
                        {
                            "name": "to-trust",
                            "addressPrefix": "10.0.2.0/24",
                            "nextHopType": "VirtualAppliance",
                            "nextHopIpAddress": "10.0.2.4",
                        }
                    ],
                },
            ],
            "SNET": [
                {
                    "name": "mgmt",
                    "addressPrefix": "10.0.0.0/24",
                    "NSGName": "nsg-mgmt",
                    "RTName": "rt-mgmt",
                },
                {
                    "name": "untrust",
                    "addressPrefix": "10.0.1.0/24",
                    "NSGName": "nsg-data",
                    "RTName": "rt-data",
                },
                {
                    "name": "trust",
                    "addressPrefix": "10.0.2.0/24",
                    "NSGName": "nsg-data",
                    "RTName": "rt-data",
                },
            ],
            "PIP": [{"name": "mgmt"}, {"name": "untrust"}, {"name": "trust"}],
            "NIC": [
                {
                    "name": "nic0",
                    "pipName": "mgmt",
                    "snetName": "mgmt",
                    "enableAcceleratedNetworking": False,
                    "enableIPForwarding": False,
                },
                {
                    "name": "nic1",
                    "pipName": "untrust",
                    "snetName": "untrust",
                    "enableAcceleratedNetworking": True,
                    "enableIPForwarding": True,
                },
                {
                    "name": "nic2",
                    "pipName": "trust",
                    "snetName": "trust",
                    "enableAcceleratedNetworking": True,
                    "enableIPForwarding": True,
                },
            ],
        },
        "vm": {
            "adminPassword": "Sup3r-Secret!",
            "adminUsername": "panadmin",
            "computerName": "panos-fw01",
            "image": {
                "offer": "vmseries-flex",
                "publisher": "paloaltonetworks",
                "sku": "byol",
                "version": "latest",
            },
            "nicMap": {"nic0": "nic0", "nic1": "nic1", "nic2": "nic2"},
            "storageAccountType": "Standard_LRS",
            "vmSize": "Standard_D3_v2",
        },
    }


def to_config(document: dict) -> PanosVMConfig:
    return PanosVMConfig.from_sections(
        document.get("tags"), document.get("vnet"), document.get("vm")
    )


@pytest.fixture
def document() -> dict:
    return copy.deepcopy(happy_path_document())


@pytest.fixture
def mocks() -> PanosMocks:
    panos_mocks = PanosMocks()
    pulumi.runtime.set_mocks(
        panos_mocks, project="panos-vm", stack=STACK, preview=False
    )
    return panos_mocks


@pytest.fixture
def exports(monkeypatch) -> dict:
    exported: dict = {}
    monkeypatch.setattr(
        modules.outputs, "export", lambda name, value: exported.update({name: value})
    )
    return exported


@pytest.fixture
def readme(tmp_path) -> str:
    path = tmp_path / "README.md"
    path.write_text("# PAN-OS VM\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def declare(mocks, exports, readme):
    """
    Runs `deploy_panos_vm` inside the mocked Pulumi runtime and waits for
    every registration to finish before returning.
    """

    def run(document: dict, **kwargs) -> PanosDeployment:
        kwargs.setdefault("readme_path", readme)
        result = {}

        @pulumi.runtime.test
        def program():
            result["deployment"] = deploy_panos_vm(
                to_config(document), stack=STACK, **kwargs
            )

        program()
        return result["deployment"]

    return run
