"""
Connected component detection for the transport network
"""
from dataclasses import dataclass
from typing import Dict, Hashable, List, Tuple

from services.graph_model import Graph


@dataclass(frozen=True)
class Partition:
    """Assignment of every city to a connected component.

    Component members are sorted lexically and components are numbered by
    ascending smallest member, so identical input always yields identical
    output.
    """
    component_of: Dict[str, int]
    components: Tuple[Tuple[str, ...], ...]

    @property
    def component_count(self) -> int:
        return len(self.components)

    @property
    def city_count(self) -> int:
        return len(self.component_of)

    def members(self, component: int) -> Tuple[str, ...]:
        return self.components[component]


class DisjointSet:
    """Union-find with path halving and union by size"""

    def __init__(self, items):
        self._parent: Dict[Hashable, Hashable] = {item: item for item in items}
        self._size: Dict[Hashable, int] = {item: 1 for item in self._parent}

    def find(self, item: Hashable) -> Hashable:
        parent = self._parent
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: Hashable, b: Hashable) -> bool:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False
        # Ties keep the smaller root
        if self._size[root_a] < self._size[root_b] or (
            self._size[root_a] == self._size[root_b] and root_b < root_a
        ):
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        self._size[root_a] += self._size[root_b]
        return True


def find_components(graph: Graph) -> Partition:
    """Partition the graph's cities into connected components"""
    city_ids = graph.city_ids()
    disjoint_set = DisjointSet(city_ids)

    for from_id, to_id in sorted(route.endpoints() for route in graph.routes):
        disjoint_set.union(from_id, to_id)

    groups: Dict[str, List[str]] = {}
    for city_id in city_ids:
        # city_ids is sorted, so each group is built in lexical order
        groups.setdefault(disjoint_set.find(city_id), []).append(city_id)

    components = tuple(sorted((tuple(members) for members in groups.values()), key=lambda m: m[0]))
    component_of = {
        city_id: index
        for index, members in enumerate(components)
        for city_id in members
    }
    return Partition(component_of=component_of, components=components)
