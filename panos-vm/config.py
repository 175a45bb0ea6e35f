from pulumi import Config

from utils.module_dataclasses import PanosVMConfig
from utils.utils import load_panos_config

panos_vm_configs = Config()

# Topology: required `tags`, `vnet` and `vm` objects
panos_config: PanosVMConfig = load_panos_config(panos_vm_configs)

# Outputs
export_index_maps: bool = panos_vm_configs.get_bool("exportIndexMaps") or False
readme_path: str = panos_vm_configs.get("readmePath") or "./README.md"
