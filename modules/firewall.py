from typing import Any

from attr import dataclass, field
from pulumi import log
from pulumi_azure_native import compute as az_compute
from pulumi_azure_native import resources as az_resources
from pulumi_random import RandomString

from modules.compute import create_os_disk_id, create_virtual_machine
from modules.network import (
    create_network_interface,
    create_network_security_group,
    create_public_ip,
    create_resource_group,
    create_route_table,
    create_subnet,
    create_virtual_network,
)
from modules.outputs import export_index_maps, export_readme
from modules.sequencer import DeploymentContext, verify
from utils.module_dataclasses import PanosVMConfig
from utils.utils import read_readme


@dataclass
class PanosDeployment:
    context: DeploymentContext
    resource_group: az_resources.ResourceGroup
    os_disk_id: RandomString
    virtual_machine: az_compute.VirtualMachine
    outputs: dict[str, Any] = field(factory=dict)


def deploy_panos_vm(
    config: PanosVMConfig,
    stack: str,
    readme_path: str = "./README.md",
    include_index_maps: bool = False,
) -> PanosDeployment:
    """
    Declares the PAN-OS firewall VM and its network in dependency order:
    resource group, NSGs, route tables, virtual network, subnets, public
    IPs, NICs, the OS disk id and finally the VM.

    Args:
        config (PanosVMConfig): The validated stack configuration.
        stack (str): The Pulumi stack name, used in every resource name.
        readme_path (str): Readme exported as the `readme` stack output.
        include_index_maps (bool): Also export the logical name -> id maps.

    Returns:
        PanosDeployment: The run context and the main resources.

    Raises:
        ReadmeMissing: If the readme cannot be read. Nothing is declared.
        UnresolvedReference: If a resource references an undeclared name.
        HostRuntimeError: If Pulumi refuses a declaration.
    """
    outputs = export_readme(read_readme(readme_path))

    ctx = DeploymentContext(stack=stack, tags=config.tags.as_dict())
    vnet = config.vnet

    resource_group = create_resource_group(ctx)
    for nsg in vnet.nsgs:
        create_network_security_group(ctx, resource_group, nsg)
    for rt in vnet.route_tables:
        create_route_table(ctx, resource_group, rt)
    virtual_network = create_virtual_network(ctx, resource_group, vnet)
    for snet in vnet.subnets:
        create_subnet(ctx, resource_group, virtual_network, snet)
    for pip in vnet.public_ips:
        create_public_ip(ctx, resource_group, pip)
    for nic in vnet.nics:
        create_network_interface(ctx, resource_group, nic)
    os_disk_id = create_os_disk_id(ctx)
    virtual_machine = create_virtual_machine(
        ctx, resource_group, config.vm, os_disk_id
    )

    verify(ctx.graph)
    log.debug(f"Declared {ctx.graph.number_of_nodes()} resources")

    if include_index_maps:
        outputs.update(export_index_maps(ctx.index))

    return PanosDeployment(
        context=ctx,
        resource_group=resource_group,
        os_disk_id=os_disk_id,
        virtual_machine=virtual_machine,
        outputs=outputs,
    )
