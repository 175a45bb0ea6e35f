# __main__.py
"""
Pulumi program to create a PAN-OS VM-Series firewall and its network
"""

import modulepath_fixer  # noqa: F401

import os

from pulumi import get_stack, log

from config import export_index_maps, panos_config, readme_path
from modules.firewall import deploy_panos_vm

DEBUG = os.getenv("DEBUG")

deployment = deploy_panos_vm(
    config=panos_config,
    stack=get_stack(),
    readme_path=readme_path,
    include_index_maps=export_index_maps,
)

if DEBUG:
    for name in deployment.context.trace:
        log.info(f"Declared: {name}")
