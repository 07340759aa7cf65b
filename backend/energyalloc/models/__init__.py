from energyalloc.models.allocation import AllocationSetting
from energyalloc.models.enums import AllocationType, AutoSplitStrategy, SiteType

__all__ = [
    "AllocationSetting",
    "AllocationType",
    "AutoSplitStrategy",
    "SiteType",
]
