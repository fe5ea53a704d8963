from .geometry import (
    EPSILON, TAU, AngleUnit, Vec2, Point, ORIGIN,
    distance, angle, midpoint, point_from_distance_angle,
    point_in_polygon, distance_point_to_segment, line_intersection,
    line_circle_intersection, tangent_points_from_external_point,
)
from .entities import (
    EntityKind, Style, Line, Arc, Circle, Polyline, Rectangle,
    DimensionKind, Dimension, Entity,
)
from .numeric import TolerancePolicy, DEFAULT_TOLERANCE, nearly_equal
from .transforms import AffineMatrix, Axis, transform_entity
from .corners import CornerFailure, CornerResult, fillet_lines, chamfer_lines, fillet_polyline, chamfer_polyline
from .offsets import offset_entity, parallel_copies, offset_copies, bidirectional_offset

__all__ = [
    'EPSILON','TAU','AngleUnit','Vec2','Point','ORIGIN',
    'distance','angle','midpoint','point_from_distance_angle',
    'point_in_polygon','distance_point_to_segment','line_intersection',
    'line_circle_intersection','tangent_points_from_external_point',
    'EntityKind','Style','Line','Arc','Circle','Polyline','Rectangle',
    'DimensionKind','Dimension','Entity',
    'TolerancePolicy','DEFAULT_TOLERANCE','nearly_equal',
    'AffineMatrix','Axis','transform_entity',
    'CornerFailure','CornerResult','fillet_lines','chamfer_lines','fillet_polyline','chamfer_polyline',
    'offset_entity','parallel_copies','offset_copies','bidirectional_offset',
]
