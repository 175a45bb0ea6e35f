from enum import IntEnum
from typing import Callable, Iterable, Optional, TypeVar

import networkx as nx
from attr import dataclass, field
from pulumi import Resource, ResourceOptions, log

from utils.errors import ConfigShape, HostRuntimeError, PanosVMError
from utils.resource_index import ResourceIndex

R = TypeVar("R", bound=Resource)


class Stage(IntEnum):
    """
    Declaration stages. A stage is only entered once every earlier stage
    has been fully declared; peers inside a stage are unordered.
    """

    RESOURCE_GROUP = 1
    NSG = 2
    ROUTE_TABLE = 3
    VIRTUAL_NETWORK = 4
    SUBNET = 5
    PUBLIC_IP = 6
    NIC = 7
    RANDOM_STRING = 8
    VIRTUAL_MACHINE = 9


def name_suffix(stack: str) -> str:
    return f"panos-vm-{stack}-"


class SequenceError(RuntimeError):
    pass


@dataclass
class DeploymentContext:
    """
    Everything a single run shares between builders: naming, tags, the
    name-resolution index and the graph of declared resources.

    Nodes of `graph` are declared names in emission order. Edges point from
    upstream to downstream and carry a `relations` set made of
    `depends_on`, `parent` and `reference`.
    """

    stack: str
    tags: dict[str, str]
    index: ResourceIndex = field(factory=ResourceIndex)
    graph: nx.DiGraph = field(factory=nx.DiGraph)
    stage: Optional[Stage] = field(default=None, init=False)
    _names: dict[int, str] = field(factory=dict, init=False)

    @property
    def name_suffix(self) -> str:
        return name_suffix(self.stack)

    @property
    def trace(self) -> list[str]:
        return list(self.graph.nodes)

    def resource_name(self, prefix: str, logical_name: Optional[str] = None) -> str:
        if logical_name is None:
            return f"{prefix}-{self.name_suffix}"
        return f"{prefix}-{logical_name}-{self.name_suffix}"

    def declare(
        self,
        stage: Stage,
        name: str,
        factory: Callable[[ResourceOptions], R],
        depends_on: Iterable[Resource] = (),
        parent: Optional[Resource] = None,
        references: Iterable[Resource] = (),
        logical_name: Optional[str] = None,
    ) -> R:
        """
        Declares one resource with the Pulumi engine and records it.

        Args:
            stage (Stage): The kind of resource being declared.
            name (str): Declared (Pulumi) resource name.
            factory (Callable[[ResourceOptions], R]): Calls the resource
                constructor with the options built here.
            depends_on (Iterable[Resource]): Explicit dependencies.
            parent (Optional[Resource]): Parent used for grouping.
            references (Iterable[Resource]): Resources whose ids are
                embedded in this resource's properties.
            logical_name (Optional[str]): Name used in the configuration.

        Returns:
            R: The handle returned by the constructor.

        Raises:
            SequenceError: If `stage` comes before an already declared stage.
            ConfigShape: If `name` was already declared in this run.
            HostRuntimeError: If the constructor fails.
        """
        if self.stage is not None and stage < self.stage:
            raise SequenceError(
                f"{stage.name} '{name}' declared after {self.stage.name}"
            )
        if name in self.graph:
            raise ConfigShape("vnet", f"duplicate resource name '{name}'")

        depends_on = list(depends_on)
        references = list(references)
        opts = ResourceOptions(depends_on=depends_on, parent=parent)

        log.debug(f"Declaring {stage.name} '{name}'")
        try:
            resource = factory(opts)
        except PanosVMError:
            raise
        except Exception as ex:
            raise HostRuntimeError(name, ex) from ex

        self.graph.add_node(
            name,
            stage=stage,
            kind=stage.name,
            logical_name=logical_name,
            resource=resource,
        )
        self._names[id(resource)] = name
        for upstream in depends_on:
            self._link(upstream, name, "depends_on")
        if parent is not None:
            self._link(parent, name, "parent")
        for upstream in references:
            self._link(upstream, name, "reference")

        self.stage = stage
        return resource

    def _link(self, upstream: Resource, downstream: str, relation: str) -> None:
        source = self._names[id(upstream)]
        if self.graph.has_edge(source, downstream):
            self.graph.edges[source, downstream]["relations"].add(relation)
        else:
            self.graph.add_edge(source, downstream, relations={relation})


def verify(graph: nx.DiGraph) -> None:
    """
    Checks that the recorded graph is acyclic, that every edge points to a
    node emitted later and that no edge runs from a later stage back to an
    earlier one.
    """
    if not nx.is_directed_acyclic_graph(graph):
        raise SequenceError("resource graph contains a cycle")

    position = {name: pos for pos, name in enumerate(graph.nodes)}
    for upstream, downstream in graph.edges:
        if position[upstream] >= position[downstream]:
            raise SequenceError(
                f"'{downstream}' was declared before its upstream '{upstream}'"
            )
        if graph.nodes[upstream]["stage"] > graph.nodes[downstream]["stage"]:
            raise SequenceError(
                f"'{downstream}' depends on later stage resource '{upstream}'"
            )
