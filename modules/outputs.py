from typing import Any

from pulumi import export

from utils.resource_index import IndexKind, ResourceIndex

# Stack output key per index, for debugging the name -> id wiring.
INDEX_MAP_OUTPUTS = {
    IndexKind.NSG: "nsgMap",
    IndexKind.RT: "rtMap",
    IndexKind.SUBNET: "snetMap",
    IndexKind.PIP: "pipMap",
    IndexKind.NIC: "nicMap",
}


def export_readme(readme: str) -> dict[str, Any]:
    export("readme", readme)
    return {"readme": readme}


def export_index_maps(index: ResourceIndex) -> dict[str, Any]:
    outputs = {
        key: index.ids(kind) for kind, key in INDEX_MAP_OUTPUTS.items()
    }
    for key, value in outputs.items():
        export(key, value)
    return outputs
