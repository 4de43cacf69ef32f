"""
Closed vocabularies for inventory records and user roles.

Every categorical field on an inventory item is one of these enums; the
category and its optional material type travel together as a CategorySpec
so a product or asset can never carry a material type.
"""
import enum
from dataclasses import dataclass
from typing import Optional, Union


class Category(str, enum.Enum):
    MATERIAL = "material"
    PRODUCT = "product"
    ASSET = "asset"

    @property
    def id_prefix(self) -> str:
        return self.value[:3].upper()


class MaterialType(str, enum.Enum):
    VIRGIN = "virgin"
    RECYCLED = "recycled"
    MASTER = "master"
    SPECIAL_ADDED = "special added"


class ItemStatus(str, enum.Enum):
    IN_STOCK = "in stock"
    REPURCHASE_NEEDED = "repurchase needed"
    TEMPORARILY_UNAVAILABLE = "temporarily unavailable"


class Location(str, enum.Enum):
    LOCATION_1 = "location-1"
    LOCATION_2 = "location-2"


class UserRole(str, enum.Enum):
    OWNER = "owner"
    WORKER = "worker"


class AdjustOperation(str, enum.Enum):
    ADD = "add"
    REMOVE = "remove"


CATEGORY_FILTER_ALL = "all"

# Column limits: stock is a 32-bit INTEGER, price is NUMERIC(12, 2)
MAX_STOCK = 2_147_483_647
MAX_PRICE = 9_999_999_999.99


@dataclass(frozen=True)
class MaterialSpec:
    type: MaterialType
    category: Category = Category.MATERIAL


@dataclass(frozen=True)
class ProductSpec:
    category: Category = Category.PRODUCT


@dataclass(frozen=True)
class AssetSpec:
    category: Category = Category.ASSET


CategorySpec = Union[MaterialSpec, ProductSpec, AssetSpec]


def material_type_of(spec: CategorySpec) -> Optional[MaterialType]:
    if isinstance(spec, MaterialSpec):
        return spec.type
    return None
