"""Coordinate transformation utilities."""
import math


def rotate_point(x: float, y: float, angle_deg: float) -> tuple[float, float]:
    """
    Rotate a point around the origin by the given angle.

    Args:
        x: X coordinate
        y: Y coordinate
        angle_deg: Rotation angle in degrees (counterclockwise positive)

    Returns:
        Tuple of (rotated_x, rotated_y)
    """
    if angle_deg == 0:
        return x, y

    angle_rad = math.radians(angle_deg)
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)

    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


def footprint_to_board(
    local_x: float,
    local_y: float,
    fp_x: float,
    fp_y: float,
    fp_angle: float
) -> tuple[float, float]:
    """
    Map a footprint-relative position to board coordinates.

    KiCad rotates footprints clockwise for positive angles in its Y-down
    coordinate system, hence the negated angle.
    """
    rx, ry = rotate_point(local_x, local_y, -fp_angle)
    return fp_x + rx, fp_y + ry


def rotated_extent(width: float, height: float, angle_deg: float) -> tuple[float, float]:
    """Width and height of the axis-aligned box around a rotated rectangle."""
    if angle_deg % 180 == 0:
        return width, height
    if angle_deg % 90 == 0:
        return height, width

    angle_rad = math.radians(angle_deg)
    cos_a = abs(math.cos(angle_rad))
    sin_a = abs(math.sin(angle_rad))
    return width * cos_a + height * sin_a, width * sin_a + height * cos_a


def arc_points(
    start: tuple[float, float],
    mid: tuple[float, float],
    end: tuple[float, float],
    segments: int = 16
) -> list[tuple[float, float]]:
    """
    Approximate a three-point arc with a polyline.

    Falls back to the three input points when they are collinear.

    Returns:
        Points from start to end (inclusive), passing through mid
    """
    (ax, ay), (bx, by), (cx, cy) = start, mid, end
    d = 2 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < 1e-12:
        return [start, mid, end]

    a_sq = ax * ax + ay * ay
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy
    ux = (a_sq * (by - cy) + b_sq * (cy - ay) + c_sq * (ay - by)) / d
    uy = (a_sq * (cx - bx) + b_sq * (ax - cx) + c_sq * (bx - ax)) / d
    radius = math.hypot(ax - ux, ay - uy)

    t_start = math.atan2(ay - uy, ax - ux)
    t_mid = math.atan2(by - uy, bx - ux)
    t_end = math.atan2(cy - uy, cx - ux)

    # Sweep counterclockwise from start to end; flip if mid is not on that sweep
    sweep = (t_end - t_start) % (2 * math.pi)
    if (t_mid - t_start) % (2 * math.pi) > sweep:
        sweep -= 2 * math.pi

    points = [start]
    for i in range(1, segments):
        t = t_start + sweep * i / segments
        points.append((ux + radius * math.cos(t), uy + radius * math.sin(t)))
    points.append(end)
    return points
