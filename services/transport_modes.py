# Transport mode configurations for smart routes
# Matches the connection types used by the route network data

from typing import Any

TRANSPORT_MODES = {
    'airplane': {
        'name': 'Airplane',
        'speed_kmh': 800,
        'requires': 'airport',
        'aliases': ['airplane', 'plane', 'air', 'flight', 'авиа'],
    },
    'train': {
        'name': 'Train',
        'speed_kmh': 80,
        'requires': 'train_station',
        'aliases': ['train', 'rail', 'railway', 'поезд'],
    },
    'bus': {
        'name': 'Bus',
        'speed_kmh': 60,
        'requires': 'bus_station',
        'aliases': ['bus', 'coach', 'автобус'],
    },
    'ferry': {
        'name': 'Ferry',
        'speed_kmh': 30,
        'requires': 'ferry_pier',
        'aliases': ['ferry', 'water', 'boat', 'паром', 'паромная переправа'],
    },
    'winter_road': {
        'name': 'Winter Road',
        'speed_kmh': 50,
        'requires': None,
        'aliases': ['winter_road', 'winter road', 'зимник'],
    },
    'taxi': {
        'name': 'Taxi',
        'speed_kmh': 40,
        'requires': None,
        'aliases': ['taxi', 'такси'],
    },
}

UNKNOWN_MODE = 'unknown'
DEFAULT_SPEED_KMH = 60

# Distance thresholds (km) used to pick a mode for a new link
AIRPLANE_MIN_DISTANCE_KM = 200
TRAIN_MAX_DISTANCE_KM = 2000
FERRY_MAX_DISTANCE_KM = 500
BUS_MAX_DISTANCE_KM = 1500

_ALIAS_LOOKUP = {
    alias: mode
    for mode, config in TRANSPORT_MODES.items()
    for alias in config['aliases']
}


def normalize_transport_type(value: Any) -> str:
    """
    Map a loosely typed transport tag onto the canonical vocabulary.

    Returns:
        One of the TRANSPORT_MODES keys, 'synthetic' for generated links,
        or 'unknown'
    """
    if not isinstance(value, str):
        return UNKNOWN_MODE

    normalised = value.strip().lower()
    if normalised == 'synthetic':
        return normalised
    return _ALIAS_LOOKUP.get(normalised, UNKNOWN_MODE)


def suggest_mode_for_link(from_city, to_city, distance_km: float) -> str:
    """
    Suggest which real transport mode a new link between two cities would use.

    Airports win for long hops, then rail, then ferry, then road; anything
    farther than a bus can reasonably go falls back to air.
    """
    def both_have(facility: str) -> bool:
        return from_city.has(facility) and to_city.has(facility)

    if both_have('airport') and distance_km > AIRPLANE_MIN_DISTANCE_KM:
        return 'airplane'
    if both_have('train_station') and distance_km < TRAIN_MAX_DISTANCE_KM:
        return 'train'
    if both_have('ferry_pier') and distance_km < FERRY_MAX_DISTANCE_KM:
        return 'ferry'
    if distance_km < BUS_MAX_DISTANCE_KM:
        return 'bus'
    return 'airplane'


def estimate_duration_minutes(distance_km: float, transport_mode: str) -> int:
    """Travel time in whole minutes at the mode's average speed"""
    config = TRANSPORT_MODES.get(transport_mode)
    speed = config['speed_kmh'] if config else DEFAULT_SPEED_KMH
    return round(distance_km / speed * 60)
