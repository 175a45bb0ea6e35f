from pulumi_azure_native import network as az_network
from pulumi_azure_native import resources as az_resources

from modules.sequencer import DeploymentContext, Stage
from utils.module_dataclasses import (
    NetworkInterfaceSpec,
    NetworkSecurityGroupSpec,
    PublicIPSpec,
    RouteTableSpec,
    SubnetSpec,
    VNetSpec,
)
from utils.resource_index import IndexKind


def create_resource_group(ctx: DeploymentContext) -> az_resources.ResourceGroup:
    name = ctx.resource_name("rg")
    return ctx.declare(
        Stage.RESOURCE_GROUP,
        name,
        lambda opts: az_resources.ResourceGroup(
            name,
            tags=ctx.tags,
            opts=opts,
        ),
    )


def create_network_security_group(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    nsg: NetworkSecurityGroupSpec,
) -> az_network.NetworkSecurityGroup:
    """
    Sets up a Network Security Group with one security rule per configured
    rule. Priorities are passed through untouched.
    """
    security_rules = [
        az_network.SecurityRuleArgs(
            access=rule.access,
            destination_address_prefix=rule.destination_address_prefix,
            destination_port_range=rule.destination_port_range,
            direction=rule.direction,
            name=rule.name,
            priority=rule.priority,
            protocol=rule.protocol,
            source_address_prefix=rule.source_address_prefix,
            source_port_range=rule.source_port_range,
        )
        for rule in nsg.rules
    ]

    name = ctx.resource_name("nsg", nsg.name)
    nsg_resource = ctx.declare(
        Stage.NSG,
        name,
        lambda opts: az_network.NetworkSecurityGroup(
            name,
            az_network.NetworkSecurityGroupInitArgs(
                resource_group_name=resource_group.name,
                security_rules=security_rules,
                tags=ctx.tags,
            ),
            opts=opts,
        ),
        depends_on=[resource_group],
        parent=resource_group,
        logical_name=nsg.name,
    )
    ctx.index.register(IndexKind.NSG, nsg.name, nsg_resource)
    return nsg_resource


def create_route_table(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    rt: RouteTableSpec,
) -> az_network.RouteTable:
    routes = [
        az_network.RouteArgs(
            address_prefix=route.address_prefix,
            name=route.name,
            next_hop_type=route.next_hop_type,
            next_hop_ip_address=route.next_hop_ip_address or None,
        )
        for route in rt.routes
    ]

    # Azure does not need it, but NSGs are kept ahead of route tables.
    dependencies = [resource_group, *ctx.index.resources(IndexKind.NSG)]

    name = ctx.resource_name("rt", rt.name)
    rt_resource = ctx.declare(
        Stage.ROUTE_TABLE,
        name,
        lambda opts: az_network.RouteTable(
            name,
            disable_bgp_route_propagation=rt.disable_bgp_route_propagation,
            resource_group_name=resource_group.name,
            routes=routes,
            tags=ctx.tags,
            opts=opts,
        ),
        depends_on=dependencies,
        parent=resource_group,
        logical_name=rt.name,
    )
    ctx.index.register(IndexKind.RT, rt.name, rt_resource)
    return rt_resource


def create_virtual_network(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    vnet: VNetSpec,
) -> az_network.VirtualNetwork:
    dependencies = [
        *ctx.index.resources(IndexKind.NSG),
        *ctx.index.resources(IndexKind.RT),
    ]

    name = ctx.resource_name("vnet")
    return ctx.declare(
        Stage.VIRTUAL_NETWORK,
        name,
        lambda opts: az_network.VirtualNetwork(
            name,
            address_space=az_network.AddressSpaceArgs(
                address_prefixes=[vnet.address_space],
            ),
            resource_group_name=resource_group.name,
            tags=ctx.tags,
            opts=opts,
        ),
        depends_on=dependencies,
        parent=resource_group,
    )


def create_subnet(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    virtual_network: az_network.VirtualNetwork,
    snet: SubnetSpec,
) -> az_network.Subnet:
    """
    Creates a subnet inside the virtual network and associates it with the
    NSG and route table it names.

    Raises:
        UnresolvedReference: If the NSG or route table was never declared.
    """
    # Scoped by the virtual network, so no stack suffix.
    name = f"snet-{snet.name}"
    nsg = ctx.index.resolve(IndexKind.NSG, snet.nsg_name, name)
    rt = ctx.index.resolve(IndexKind.RT, snet.rt_name, name)

    snet_resource = ctx.declare(
        Stage.SUBNET,
        name,
        lambda opts: az_network.Subnet(
            name,
            address_prefix=snet.address_prefix,
            network_security_group=az_network.NetworkSecurityGroupArgs(
                id=nsg.id,
            ),
            resource_group_name=resource_group.name,
            route_table=az_network.RouteTableArgs(
                id=rt.id,
            ),
            virtual_network_name=virtual_network.name,
            opts=opts,
        ),
        depends_on=[virtual_network],
        parent=virtual_network,
        references=[nsg, rt],
        logical_name=snet.name,
    )
    ctx.index.register(IndexKind.SUBNET, snet.name, snet_resource)
    return snet_resource


def create_public_ip(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    pip: PublicIPSpec,
) -> az_network.PublicIPAddress:
    name = ctx.resource_name("pip", pip.name)
    pip_resource = ctx.declare(
        Stage.PUBLIC_IP,
        name,
        lambda opts: az_network.PublicIPAddress(
            name,
            public_ip_allocation_method="Static",
            resource_group_name=resource_group.name,
            sku=az_network.PublicIPAddressSkuArgs(
                name="Standard",
                tier="Regional",
            ),
            tags=ctx.tags,
            opts=opts,
        ),
        depends_on=ctx.index.resources(IndexKind.SUBNET),
        parent=resource_group,
        logical_name=pip.name,
    )
    ctx.index.register(IndexKind.PIP, pip.name, pip_resource)
    return pip_resource


def create_network_interface(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    nic: NetworkInterfaceSpec,
) -> az_network.NetworkInterface:
    """
    Creates a NIC with a single `ipconfig` IP configuration on its subnet.
    The public IP is only attached when `pip_name` is set.

    Raises:
        UnresolvedReference: If the subnet, or a non-empty `pip_name`, was
            never declared.
    """
    name = ctx.resource_name("nic", nic.name)
    subnet = ctx.index.resolve(IndexKind.SUBNET, nic.snet_name, name)
    references = [subnet]

    public_ip_address = None
    if nic.pip_name:
        pip = ctx.index.resolve(IndexKind.PIP, nic.pip_name, name)
        public_ip_address = az_network.PublicIPAddressArgs(id=pip.id)
        references.append(pip)

    ip_config = az_network.NetworkInterfaceIPConfigurationArgs(
        name="ipconfig",
        public_ip_address=public_ip_address,
        subnet=az_network.SubnetArgs(
            id=subnet.id,
        ),
    )

    nic_resource = ctx.declare(
        Stage.NIC,
        name,
        lambda opts: az_network.NetworkInterface(
            name,
            enable_accelerated_networking=nic.enable_accelerated_networking,
            enable_ip_forwarding=nic.enable_ip_forwarding,
            ip_configurations=[ip_config],
            nic_type="Standard",
            resource_group_name=resource_group.name,
            tags=ctx.tags,
            opts=opts,
        ),
        depends_on=ctx.index.resources(IndexKind.PIP),
        parent=resource_group,
        references=references,
        logical_name=nic.name,
    )
    ctx.index.register(IndexKind.NIC, nic.name, nic_resource)
    return nic_resource
