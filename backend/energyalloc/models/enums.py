import enum


class AutoSplitStrategy(str, enum.Enum):
    legacy = "legacy"
    largest_remainder = "largest_remainder"


class SiteType(str, enum.Enum):
    solar = "SOLAR"
    wind = "WIND"


class AllocationType(str, enum.Enum):
    allocation = "Allocation"
    banking = "Banking"
    lapse = "Lapse"
