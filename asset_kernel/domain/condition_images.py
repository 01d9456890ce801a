"""
Quarterly condition images -- which entries need photos, and how many.

Responsibility:
    Pure rules for the quarterly hardware check: every active entry on a
    physical asset is photographed once a quarter, with a small cap on the
    number of images per entry and quarter.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Quarters are calendar quarters of the clock's ``today()``.
    - Only regular assets outside software, license and subscription
      categories take condition images.
    - At most ``MAX_IMAGES_PER_QUARTER`` images per entry and quarter.
"""

from dataclasses import dataclass
from datetime import date

from asset_kernel.domain.lifecycle import CategoryKind

MAX_IMAGES_PER_QUARTER = 5

NON_HARDWARE_MARKERS: tuple[str, ...] = ("software", "license", "subscription")


@dataclass(frozen=True, order=True)
class Quarter:
    year: int
    quarter: int

    @classmethod
    def of(cls, day: date) -> "Quarter":
        return cls(day.year, (day.month - 1) // 3 + 1)

    def __str__(self) -> str:
        return f"{self.year} Q{self.quarter}"


def is_hardware_category(name: str, kind: CategoryKind | str) -> bool:
    """Physical hardware: not a VM and not a software-like category name."""
    if CategoryKind(kind) != CategoryKind.REGULAR:
        return False
    folded = name.casefold()
    return not any(marker in folded for marker in NON_HARDWARE_MARKERS)


def can_upload_more(uploaded: int, limit: int = MAX_IMAGES_PER_QUARTER) -> bool:
    return uploaded < limit
