"""The four tiers of the administrative hierarchy."""

from __future__ import annotations

from enum import Enum


class HierarchyLevel(str, Enum):
    """Ordered hierarchy levels, root first."""

    REGION = "region"
    SUB_REGION = "sub_region"
    DISTRICT = "district"
    SUB_DISTRICT = "sub_district"

    @classmethod
    def ordered(cls) -> list["HierarchyLevel"]:
        return list(cls)

    @property
    def depth(self) -> int:
        return HierarchyLevel.ordered().index(self)

    @property
    def parent(self) -> "HierarchyLevel | None":
        if self.depth == 0:
            return None
        return HierarchyLevel.ordered()[self.depth - 1]

    @property
    def child(self) -> "HierarchyLevel | None":
        levels = HierarchyLevel.ordered()
        if self.depth + 1 >= len(levels):
            return None
        return levels[self.depth + 1]

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    HierarchyLevel.REGION: "Provinsi",
    HierarchyLevel.SUB_REGION: "Kabupaten/Kota",
    HierarchyLevel.DISTRICT: "Kecamatan",
    HierarchyLevel.SUB_DISTRICT: "Kelurahan",
}


__all__ = ["HierarchyLevel"]
