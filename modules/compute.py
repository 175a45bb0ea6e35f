from pulumi import Output
from pulumi_azure_native import compute as az_compute
from pulumi_azure_native import resources as az_resources
from pulumi_random import RandomString

from modules.sequencer import DeploymentContext, Stage
from utils.module_dataclasses import VMSpec
from utils.resource_index import IndexKind

OS_DISK_ID_LENGTH = 8
OS_DISK_SIZE_GB = 127


def create_os_disk_id(ctx: DeploymentContext) -> RandomString:
    """
    Random lowercase alphanumeric id with at least four letters and four
    digits, used to keep the OS disk name unique in the subscription.
    """
    name = "random-os-disk-id"
    return ctx.declare(
        Stage.RANDOM_STRING,
        name,
        lambda opts: RandomString(
            name,
            length=OS_DISK_ID_LENGTH,
            lower=True,
            min_lower=4,
            min_numeric=4,
            numeric=True,
            special=False,
            upper=False,
            opts=opts,
        ),
        depends_on=ctx.index.resources(IndexKind.NIC),
    )


def create_virtual_machine(
    ctx: DeploymentContext,
    resource_group: az_resources.ResourceGroup,
    vm_spec: VMSpec,
    os_disk_id: RandomString,
) -> az_compute.VirtualMachine:
    """
    Create the PAN-OS Virtual Machine from a marketplace image, bound to the
    three NICs of `vm_spec.nic_map` with `nic0` as the primary interface.

    Raises:
        UnresolvedReference: If one of the NICs was never declared.
    """
    name = f"vm-{ctx.tags['solution']}-{ctx.name_suffix}"
    nics = [
        (ctx.index.resolve(IndexKind.NIC, nic_name, name), primary)
        for nic_name, primary in vm_spec.nic_map.bindings()
    ]
    image = vm_spec.image

    return ctx.declare(
        Stage.VIRTUAL_MACHINE,
        name,
        lambda opts: az_compute.VirtualMachine(
            name,
            hardware_profile=az_compute.HardwareProfileArgs(
                vm_size=vm_spec.vm_size,
            ),
            network_profile=az_compute.NetworkProfileArgs(
                network_interfaces=[
                    az_compute.NetworkInterfaceReferenceArgs(
                        id=nic.id,
                        primary=primary,
                    )
                    for nic, primary in nics
                ]
            ),
            os_profile=az_compute.OSProfileArgs(
                admin_password=Output.secret(vm_spec.admin_password),
                admin_username=vm_spec.admin_username,
                allow_extension_operations=True,
                computer_name=vm_spec.computer_name,
                linux_configuration=az_compute.LinuxConfigurationArgs(
                    disable_password_authentication=False,
                    enable_vm_agent_platform_updates=True,
                    provision_vm_agent=True,
                ),
            ),
            # Marketplace images need the matching purchase plan.
            plan=az_compute.PlanArgs(
                name=image.sku,
                product=image.offer,
                publisher=image.publisher,
            ),
            resource_group_name=resource_group.name,
            storage_profile=az_compute.StorageProfileArgs(
                image_reference=az_compute.ImageReferenceArgs(
                    offer=image.offer,
                    publisher=image.publisher,
                    sku=image.sku,
                    version=image.version,
                ),
                os_disk=az_compute.OSDiskArgs(
                    caching=az_compute.CachingTypes.READ_WRITE,
                    create_option=az_compute.DiskCreateOption.FROM_IMAGE,
                    delete_option="Delete",
                    disk_size_gb=OS_DISK_SIZE_GB,
                    managed_disk=az_compute.ManagedDiskParametersArgs(
                        storage_account_type=vm_spec.storage_account_type,
                    ),
                    name=Output.concat("os-", ctx.name_suffix, os_disk_id.result),
                ),
            ),
            tags=ctx.tags,
            opts=opts,
        ),
        depends_on=[*ctx.index.resources(IndexKind.NIC), os_disk_id],
        parent=resource_group,
        references=[nic for nic, _ in nics],
    )
