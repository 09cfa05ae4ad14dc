"""Check route network connectivity"""
import sys
from database.config import get_database_manager
from services.component_finder import find_components
from services.connectivity_reporter import build_report
from services.exceptions import SmartRoutesError
from services.graph_model import Graph
from services.route_repository import SqlAlchemyRouteRepository

repository = SqlAlchemyRouteRepository(get_database_manager().session_factory)

try:
    # counts and report come from the same snapshot
    snapshot = repository.load_graph()
    graph = Graph(snapshot.cities, snapshot.routes)
    report = build_report(find_components(graph), graph.city_count)
except SmartRoutesError as e:
    print(f"Connectivity check failed: {e}")
    sys.exit(1)

print(f"Total cities: {graph.city_count}")
print(f"Total routes: {graph.route_count}")
print(f"Network revision: {snapshot.revision}")

synthetic_count = sum(1 for route in snapshot.routes if route.is_synthetic)
print(f"Synthetic routes: {synthetic_count}")

print(f"\nComponents: {report.component_count}")
for index, members in enumerate(report.components):
    print(f"  #{index}: {', '.join(members)}")

if report.isolated_cities:
    print(f"\nIsolated cities: {', '.join(report.isolated_cities)}")

if report.is_connected:
    print("\n✓ Every city is reachable from every other city")
else:
    print(f"\n✗ Network is disconnected, {report.component_count - 1} links needed "
          f"(POST /smart-routes/connectivity/guarantee)")
