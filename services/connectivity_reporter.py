"""
Turns a component partition into the public connectivity report
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from services.component_finder import Partition


@dataclass(frozen=True)
class ConnectivityReport:
    is_connected: bool
    component_count: int
    components: Tuple[Tuple[str, ...], ...]
    isolated_cities: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isConnected": self.is_connected,
            "componentCount": self.component_count,
            "components": [list(members) for members in self.components],
            "isolatedCities": list(self.isolated_cities),
        }


def build_report(partition: Partition, city_count: int) -> ConnectivityReport:
    """
    Summarise a partition.

    A network with zero or one city is trivially connected. Isolated cities
    are the members of singleton components, in lexical order.
    """
    if partition.city_count != city_count:
        raise ValueError(
            f"Partition covers {partition.city_count} cities but the network has {city_count}"
        )

    isolated: List[str] = sorted(
        members[0] for members in partition.components if len(members) == 1
    )
    is_connected = city_count <= 1 or partition.component_count == 1

    return ConnectivityReport(
        is_connected=is_connected,
        component_count=partition.component_count,
        components=partition.components,
        isolated_cities=tuple(isolated),
    )
