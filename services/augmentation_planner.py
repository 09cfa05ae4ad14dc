"""
Augmentation planner: picks the cheapest set of new links that joins every
connected component of the transport network.

Components are treated as super-nodes of a complete graph. The cost of
joining two components is the shortest great-circle distance between any of
their cities (or a constant when coordinates are missing), and Kruskal's
algorithm over that graph selects exactly ``component_count - 1`` links.

Tie-break rules:
    * between city pairs of the same two components, the lexically smallest
      (from, to) pair wins, ``from`` being the city of the lower-numbered
      component
    * between component pairs of equal cost, ascending (a, b) order wins
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from services.component_finder import DisjointSet, Partition
from services.graph_model import SYNTHETIC_TRANSPORT_TYPE, Graph, Route
from services.transport_modes import estimate_duration_minutes, suggest_mode_for_link

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_COST_KM = 1000.0

REASON_CLOSEST_PAIR = "closest_pair"
REASON_FALLBACK_COST = "fallback_cost"


@dataclass(frozen=True)
class PlannedConnection:
    """One synthetic link and why it was chosen"""
    route: Route
    merged_components: Tuple[int, int]
    cost: float
    reason: str


@dataclass(frozen=True)
class AugmentationPlan:
    connections: Tuple[PlannedConnection, ...] = ()

    @property
    def routes(self) -> List[Route]:
        return [connection.route for connection in self.connections]

    @property
    def total_cost(self) -> float:
        return sum(connection.cost for connection in self.connections)

    def is_empty(self) -> bool:
        return not self.connections

    def __len__(self) -> int:
        return len(self.connections)


@dataclass(frozen=True)
class _Candidate:
    cost: float
    component_a: int
    component_b: int
    from_city_id: str
    to_city_id: str
    distance_km: Optional[float]

    def sort_key(self):
        return (self.cost, self.component_a, self.component_b)


class AugmentationPlanner:
    """Builds minimal augmentation plans for disconnected networks"""

    def __init__(self, fallback_cost_km: float = DEFAULT_FALLBACK_COST_KM):
        if fallback_cost_km < 0:
            raise ValueError("fallback_cost_km must be non-negative")
        self.fallback_cost_km = fallback_cost_km

    def plan(self, graph: Graph, partition: Partition) -> AugmentationPlan:
        """Select component_count - 1 links that merge every component"""
        if partition.component_count <= 1:
            return AugmentationPlan()

        candidates = sorted(
            (
                self._closest_pair(graph, partition, a, b)
                for a in range(partition.component_count)
                for b in range(a + 1, partition.component_count)
            ),
            key=_Candidate.sort_key,
        )

        components = DisjointSet(range(partition.component_count))
        selected: List[PlannedConnection] = []
        for candidate in candidates:
            if not components.union(candidate.component_a, candidate.component_b):
                continue
            selected.append(self._to_connection(graph, candidate))
            if len(selected) == partition.component_count - 1:
                break

        logger.debug(
            f"Planned {len(selected)} links over {partition.component_count} components "
            f"from {len(candidates)} candidate pairs"
        )
        return AugmentationPlan(connections=tuple(selected))

    def _pair_cost(self, graph: Graph, from_city_id: str, to_city_id: str) -> Tuple[float, Optional[float]]:
        distance = graph.city(from_city_id).distance_km_to(graph.city(to_city_id))
        if distance is None:
            return self.fallback_cost_km, None
        return distance, distance

    def _closest_pair(self, graph: Graph, partition: Partition, a: int, b: int) -> _Candidate:
        best: Optional[_Candidate] = None
        # Members are sorted, so the first pair reaching the minimum is the lexical winner
        for from_city_id in partition.members(a):
            for to_city_id in partition.members(b):
                cost, distance = self._pair_cost(graph, from_city_id, to_city_id)
                if best is None or cost < best.cost:
                    best = _Candidate(cost, a, b, from_city_id, to_city_id, distance)
        return best

    def _to_connection(self, graph: Graph, candidate: _Candidate) -> PlannedConnection:
        suggested_mode = None
        duration = None
        if candidate.distance_km is not None:
            suggested_mode = suggest_mode_for_link(
                graph.city(candidate.from_city_id),
                graph.city(candidate.to_city_id),
                candidate.distance_km,
            )
            duration = estimate_duration_minutes(candidate.distance_km, suggested_mode)

        route = Route(
            from_city_id=candidate.from_city_id,
            to_city_id=candidate.to_city_id,
            weight=round(candidate.cost, 3),
            transport_type=SYNTHETIC_TRANSPORT_TYPE,
            duration_minutes=duration,
            suggested_mode=suggested_mode,
        )
        reason = REASON_CLOSEST_PAIR if candidate.distance_km is not None else REASON_FALLBACK_COST
        return PlannedConnection(
            route=route,
            merged_components=(candidate.component_a, candidate.component_b),
            cost=candidate.cost,
            reason=reason,
        )
