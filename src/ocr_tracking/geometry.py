"""Normalized bounding box geometry for OCR detections.

Boxes use normalized coordinates where (0, 0) is the top-left corner of the
frame and (1, 1) the bottom-right. Tracked boxes may drift outside the unit
square while text leaves the field of view, so no clamping happens here.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in normalized [0-1] coordinates.

    Attributes:
        x: Left edge
        y: Top edge
        width: Box width
        height: Box height
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        """Right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> float:
        """Box area (0 for degenerate boxes)."""
        return max(0.0, self.width) * max(0.0, self.height)

    @property
    def aspect_ratio(self) -> float:
        """Height divided by width (0 when width is 0)."""
        if self.width <= 0:
            return 0.0
        return self.height / self.width

    def intersection(self, other: "BoundingBox") -> Optional["BoundingBox"]:
        """Calculate intersection of this box with another.

        Args:
            other: The bounding box to intersect with

        Returns:
            BoundingBox of intersection, or None if the boxes do not overlap
        """
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)

        if right <= left or bottom <= top:
            return None

        return BoundingBox(x=left, y=top, width=right - left, height=bottom - top)

    def iou(self, other: "BoundingBox") -> float:
        """Intersection over Union with another box.

        Args:
            other: The bounding box to compare against

        Returns:
            Overlap ratio in [0, 1]
        """
        intersection = self.intersection(other)
        if intersection is None:
            return 0.0

        union = self.area + other.area - intersection.area
        if union <= 0:
            return 0.0

        return intersection.area / union

    def visible_fraction(self, region: "BoundingBox") -> float:
        """Fraction of this box's area that falls inside a region.

        Args:
            region: Region to test against (e.g. the screen rect)

        Returns:
            Fraction [0-1] of this box inside the region
        """
        if self.area == 0:
            return 0.0

        intersection = self.intersection(region)
        if intersection is None:
            return 0.0

        return intersection.area / self.area

    def origin_distance(self, other: "BoundingBox") -> float:
        """Euclidean distance between the top-left corners of two boxes.

        The tracker measures frame-to-frame movement on the box origin.
        """
        dx = other.x - self.x
        dy = other.y - self.y
        return (dx * dx + dy * dy) ** 0.5

    def expanded(self, amount: float, clamp: bool = True) -> "BoundingBox":
        """Grow the box by `amount` on every side.

        Args:
            amount: Expansion per side in normalized units
            clamp: Keep the result inside the unit square

        Returns:
            Expanded box
        """
        if not clamp:
            return BoundingBox(
                x=self.x - amount,
                y=self.y - amount,
                width=self.width + amount * 2,
                height=self.height + amount * 2,
            )

        x = max(0.0, self.x - amount)
        y = max(0.0, self.y - amount)
        return BoundingBox(
            x=x,
            y=y,
            width=min(1.0 - x, self.width + amount * 2),
            height=min(1.0 - y, self.height + amount * 2),
        )

    def blend(self, target: "BoundingBox", factor: float) -> "BoundingBox":
        """Exponential filter step toward `target`.

        Args:
            target: Newly observed box
            factor: Weight of the target (0 keeps self, 1 jumps to target)

        Returns:
            Blended box
        """
        keep = 1.0 - factor
        return BoundingBox(
            x=self.x * keep + target.x * factor,
            y=self.y * keep + target.y * factor,
            width=self.width * keep + target.width * factor,
            height=self.height * keep + target.height * factor,
        )

    def contains_point(self, px: float, py: float) -> bool:
        """Check if a point lies inside the box (edges inclusive)."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    @classmethod
    def screen(cls, margin: float = 0.0) -> "BoundingBox":
        """Unit screen rect grown by `margin` on each side.

        A negative margin contracts the rect.
        """
        return cls(x=-margin, y=-margin, width=1.0 + margin * 2, height=1.0 + margin * 2)
