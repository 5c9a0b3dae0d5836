from .los import bresenham_line, has_line_of_sight
from .visibility import VisibilityCalculator

__all__ = ["bresenham_line", "has_line_of_sight", "VisibilityCalculator"]
