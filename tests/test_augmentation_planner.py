import random

import pytest

from services.augmentation_planner import (
    REASON_CLOSEST_PAIR,
    REASON_FALLBACK_COST,
    AugmentationPlanner,
)
from services.component_finder import find_components
from services.graph_model import SYNTHETIC_TRANSPORT_TYPE, City, Coordinate, Graph

from conftest import cities, located, route


def plan_for(graph, planner=None):
    planner = planner or AugmentationPlanner()
    return planner.plan(graph, find_components(graph))


def pairs(plan):
    return [(r.from_city_id, r.to_city_id) for r in plan.routes]


def test_connected_graph_needs_no_links():
    g = Graph(cities("A", "B"), [route("A", "B")])
    plan = plan_for(g)
    assert plan.is_empty()
    assert plan.total_cost == 0


def test_closest_pairs_form_spanning_tree():
    g = Graph(
        [
            located("A", 0.0, 0.0),
            located("B", 0.0, 1.0),
            located("C", 0.0, 3.0),
            located("D", 0.0, 10.0),
        ],
        [route("A", "B")],
    )
    plan = plan_for(g)

    assert pairs(plan) == [("B", "C"), ("C", "D")]
    assert [c.merged_components for c in plan.connections] == [(0, 1), (1, 2)]
    assert all(c.reason == REASON_CLOSEST_PAIR for c in plan.connections)
    assert plan.connections[0].cost == pytest.approx(222.4, abs=0.5)


def test_synthetic_route_fields():
    g = Graph([located("A", 0.0, 0.0), located("B", 0.0, 1.0)], [])
    (connection,) = plan_for(g).connections

    assert connection.route.transport_type == SYNTHETIC_TRANSPORT_TYPE
    assert connection.route.is_synthetic
    assert connection.route.weight == round(connection.cost, 3)


def test_fallback_cost_without_coordinates():
    g = Graph(cities("A", "B", "C", "D"), [route("A", "B")])
    plan = plan_for(g, AugmentationPlanner(fallback_cost_km=500.0))

    # every component pair ties, so (0, 1) and (0, 2) win over (1, 2)
    assert pairs(plan) == [("A", "C"), ("A", "D")]
    assert [r.weight for r in plan.routes] == [500.0, 500.0]
    assert all(c.reason == REASON_FALLBACK_COST for c in plan.connections)
    assert all(r.suggested_mode is None and r.duration_minutes is None for r in plan.routes)


def test_equal_city_pairs_pick_lexically_smallest():
    g = Graph(
        [located("A", 0.0, 0.0), located("B", 0.0, 2.0), located("C", 0.0, 1.0)],
        [route("A", "B")],
    )
    assert pairs(plan_for(g)) == [("A", "C")]


def test_from_city_belongs_to_lower_component():
    g = Graph([located("a", 0.0, 5.0), located("b", 0.0, 0.0), located("c", 0.0, 1.0)], [route("b", "c")])
    # components: ("a",) then ("b", "c"); closest pair is a - c
    assert pairs(plan_for(g)) == [("a", "c")]


def test_mixed_coordinates_use_fallback_per_pair():
    g = Graph(
        [located("A", 0.0, 0.0), City(id="B"), located("C", 0.0, 20.0)],
        [],
    )
    plan = plan_for(g, AugmentationPlanner(fallback_cost_km=100.0))

    # A-B and B-C cost 100 (no coordinates), A-C is ~2224 km
    assert pairs(plan) == [("A", "B"), ("B", "C")]


def test_suggested_mode_and_duration():
    g = Graph(
        [
            located("yakutsk", 62.0278, 129.7042, "airport", "bus_station"),
            located("mirny", 62.5353, 113.9611, "airport", "bus_station"),
        ],
        [],
    )
    (connection,) = plan_for(g).connections

    assert connection.route.suggested_mode == "airplane"
    assert connection.route.duration_minutes == round(connection.cost / 800 * 60)


def test_negative_fallback_cost_is_rejected():
    with pytest.raises(ValueError):
        AugmentationPlanner(fallback_cost_km=-1)


def random_located_network(rng, n_cities, n_routes):
    network = [
        City(
            id=f"c{i:02d}",
            coordinate=Coordinate(lat=rng.uniform(50, 70), lng=rng.uniform(100, 160)) if rng.random() > 0.2 else None,
        )
        for i in range(n_cities)
    ]
    ids = [c.id for c in network]
    routes = [route(*rng.sample(ids, 2)) for _ in range(n_routes)]
    return network, routes


def test_plan_is_minimal_and_connects_random_networks():
    rng = random.Random(2024)
    for _ in range(30):
        network, routes = random_located_network(rng, rng.randint(2, 30), rng.randint(0, 20))
        g = Graph(network, routes)
        partition = find_components(g)
        plan = AugmentationPlanner().plan(g, partition)

        assert len(plan) == partition.component_count - 1
        assert find_components(g.with_routes(plan.routes)).component_count == 1


def test_plan_is_deterministic():
    rng = random.Random(5)
    network, routes = random_located_network(rng, 25, 8)

    first = plan_for(Graph(network, routes))
    second = plan_for(Graph(list(reversed(network)), list(reversed(routes))))

    assert first == second
