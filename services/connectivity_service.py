"""
Connectivity service for the smart routes network.

Each call loads a fresh snapshot from the route repository, analyses it and,
for the guarantee operation, writes the augmentation plan back as a single
atomic batch. No graph state is kept between calls.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from services.augmentation_planner import AugmentationPlanner
from services.component_finder import Partition, find_components
from services.connectivity_reporter import ConnectivityReport, build_report
from services.exceptions import ConnectivityInvariantError, RepositoryWriteError, StaleSnapshotError
from services.graph_model import Graph, Route
from services.route_repository import GraphSnapshot, RouteRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_WRITE_ATTEMPTS = 3


@dataclass(frozen=True)
class GuaranteeResult:
    report: ConnectivityReport
    added_connections: Tuple[Route, ...] = ()

    @property
    def is_connected(self) -> bool:
        return self.report.is_connected


class ConnectivityService:
    """Reports and repairs connectivity of the route network"""

    def __init__(
        self,
        repository: RouteRepository,
        planner: Optional[AugmentationPlanner] = None,
        max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
        log_plans: bool = True,
    ):
        if max_write_attempts < 1:
            raise ValueError("max_write_attempts must be at least 1")
        self.repository = repository
        self.planner = planner or AugmentationPlanner()
        self.max_write_attempts = max_write_attempts
        self.log_plans = log_plans

    def _analyse(self) -> Tuple[GraphSnapshot, Graph, Partition, ConnectivityReport]:
        snapshot = self.repository.load_graph()
        graph = Graph(snapshot.cities, snapshot.routes)
        partition = find_components(graph)
        report = build_report(partition, graph.city_count)
        return snapshot, graph, partition, report

    def get_connectivity_status(self) -> ConnectivityReport:
        """Analyse the current network without modifying it"""
        _, graph, _, report = self._analyse()
        logger.info(f"Connectivity status: {graph.city_count} cities, {graph.route_count} routes, "
                    f"{report.component_count} components, connected={report.is_connected}")
        return report

    def guarantee_connectivity(self) -> GuaranteeResult:
        """
        Make every city reachable from every other city.

        Adds exactly component_count - 1 synthetic routes when the network is
        disconnected and nothing when it is already connected. If another
        writer commits between our read and our write, the batch is rejected
        and the network is re-read, which usually turns this call into a no-op.

        Raises:
            DataIntegrityError: the stored network is malformed
            RepositoryReadError / RepositoryWriteError: persistence failed, nothing was added
            ConnectivityInvariantError: the network is still disconnected after the write
        """
        for attempt in range(1, self.max_write_attempts + 1):
            snapshot, graph, partition, report = self._analyse()

            if report.is_connected:
                logger.info(f"Network already connected ({graph.city_count} cities), nothing to add")
                return GuaranteeResult(report=report)

            plan = self.planner.plan(graph, partition)
            if self.log_plans:
                for connection in plan.connections:
                    route = connection.route
                    logger.info(f"Planned link {route.from_city_id} -> {route.to_city_id} "
                                f"merging components {connection.merged_components} "
                                f"(cost {connection.cost:.2f}, {connection.reason})")

            # Pure check before touching the repository
            if not build_report(find_components(graph.with_routes(plan.routes)), graph.city_count).is_connected:
                raise ConnectivityInvariantError(
                    "Augmentation plan does not connect the network",
                    {"component_count": report.component_count, "planned": len(plan)},
                )

            try:
                stored = self.repository.add_routes(plan.routes, expected_revision=snapshot.revision)
            except StaleSnapshotError as e:
                logger.warning(f"Route network changed during guarantee (attempt {attempt}/"
                               f"{self.max_write_attempts}): {e}; re-reading")
                continue

            _, _, _, final_report = self._analyse()
            if not final_report.is_connected:
                logger.critical(f"Network still has {final_report.component_count} components "
                                f"after adding {len(stored)} routes")
                raise ConnectivityInvariantError(
                    "Network is still disconnected after augmentation",
                    {"component_count": final_report.component_count, "added": len(stored)},
                )

            logger.info(f"Connected {report.component_count} components with {len(stored)} new routes "
                        f"(total cost {plan.total_cost:.2f})")
            return GuaranteeResult(report=final_report, added_connections=tuple(stored))

        raise RepositoryWriteError(
            f"Route network kept changing, gave up after {self.max_write_attempts} attempts",
            {"attempts": self.max_write_attempts},
        )
