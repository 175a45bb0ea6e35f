from enum import Enum
from typing import Optional

from pulumi import CustomResource, Output

from utils.errors import ConfigShape, UnresolvedReference


class IndexKind(str, Enum):
    NSG = "NSG"
    RT = "RT"
    SUBNET = "Subnet"
    PIP = "PIP"
    NIC = "NIC"


class ResourceIndex:
    """
    Run-scoped maps from logical names to declared resources. A kind's map
    is filled by that kind's builder and only read by later builders.
    """

    def __init__(self):
        self._maps: dict[IndexKind, dict[str, CustomResource]] = {
            kind: {} for kind in IndexKind
        }

    def register(
        self, kind: IndexKind, name: str, resource: CustomResource
    ) -> None:
        entries = self._maps[kind]
        if name in entries:
            raise ConfigShape(
                f"vnet.{kind.value}", f"duplicate logical name '{name}'"
            )
        entries[name] = resource

    def resolve(
        self, kind: IndexKind, name: str, referrer: Optional[str] = None
    ) -> CustomResource:
        """
        Returns the resource registered under `name`. `referrer` is the
        declared name of the resource asking, reported when the lookup fails.
        """
        try:
            return self._maps[kind][name]
        except KeyError:
            raise UnresolvedReference(kind.value, name, referrer) from None

    def resources(self, kind: IndexKind) -> list[CustomResource]:
        return list(self._maps[kind].values())

    def ids(self, kind: IndexKind) -> dict[str, Output[str]]:
        return {name: res.id for name, res in self._maps[kind].items()}
