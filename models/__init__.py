"""
Módulo de modelos y cálculos
"""
from .geometry import (
    haversine_distance, polygon_centroid, nearest_station
)

__all__ = [
    'haversine_distance', 'polygon_centroid', 'nearest_station'
]
