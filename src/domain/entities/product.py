"""Product catalog."""

from enum import StrEnum


class ProductId(StrEnum):
    """Products an invitation can grant."""

    WORKFORCE_MANAGEMENT = "workforce-management"
    TIME_TRACKER = "time-tracker"
    GUARD_MANAGEMENT = "guard-management"


PRODUCT_NAMES: dict[str, str] = {
    ProductId.WORKFORCE_MANAGEMENT: "Workforce Management",
    ProductId.TIME_TRACKER: "Time Tracker",
    ProductId.GUARD_MANAGEMENT: "Guard Management",
}
