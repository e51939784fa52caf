from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from sqlalchemy import column, table
from sqlalchemy.sql.expression import TableClause


class FacetKind(str, Enum):
    BRAND = "brand"
    SUBCATEGORY = "subcategory"
    GENDER = "gender"
    FRAGRANCE_FAMILY = "fragrance_family"

    @property
    def payload_key(self) -> str:
        return _FACET_PAYLOAD_KEYS[self]


_FACET_PAYLOAD_KEYS = {
    FacetKind.BRAND: "brands",
    FacetKind.SUBCATEGORY: "subcategories",
    FacetKind.GENDER: "genders",
    FacetKind.FRAGRANCE_FAMILY: "fragranceFamilies",
}


@dataclass(frozen=True)
class CatalogTable:
    name: str
    menu_key: str
    name_column: str
    link_column: str
    facets: Tuple[FacetKind, ...]
    sample_positions: Tuple[int, ...]
    menu_extra_columns: Tuple[str, ...] = field(default=())

    @property
    def search_columns(self) -> Tuple[str, ...]:
        return ("id", "brand", self.name_column, "images", self.link_column)

    @property
    def menu_columns(self) -> Tuple[str, ...]:
        return self.search_columns + self.menu_extra_columns

    def clause(self, *columns: str) -> TableClause:
        return table(self.name, *(column(c) for c in columns))


SNEAKERS = CatalogTable(
    name="sneakers",
    menu_key="sneaker",
    name_column="product_name",
    link_column="product_link",
    facets=(FacetKind.BRAND,),
    sample_positions=(2, 4, 6, 8, 10, 13, 15, 16, 20),
)
APPAREL = CatalogTable(
    name="apparel",
    menu_key="apparel",
    name_column="product_name",
    link_column="product_link",
    facets=(FacetKind.BRAND, FacetKind.SUBCATEGORY, FacetKind.GENDER),
    sample_positions=(1, 2, 3, 4, 5, 6),
    menu_extra_columns=("gender", "subcategory"),
)
WATCHES = CatalogTable(
    name="watches",
    menu_key="watch",
    name_column="name",
    link_column="link",
    facets=(FacetKind.BRAND, FacetKind.GENDER),
    sample_positions=(1, 2, 3, 4, 5, 6),
    menu_extra_columns=("gender",),
)
PERFUMES = CatalogTable(
    name="perfumes",
    menu_key="perfume",
    name_column="title",
    link_column="url",
    facets=(FacetKind.BRAND, FacetKind.SUBCATEGORY, FacetKind.FRAGRANCE_FAMILY),
    sample_positions=(1, 2, 3, 4, 5, 6),
    menu_extra_columns=("fragrance_family", "subcategory"),
)
ACCESSORIES = CatalogTable(
    name="accessories",
    menu_key="accessories",
    name_column="product_name",
    link_column="product_link",
    facets=(FacetKind.BRAND, FacetKind.SUBCATEGORY, FacetKind.GENDER),
    sample_positions=(1, 2, 3, 4, 5, 6),
    menu_extra_columns=("gender", "subcategory"),
)

# Order of the menu payload
MENU_ORDER = (SNEAKERS, APPAREL, WATCHES, PERFUMES, ACCESSORIES)

# Order of cross-category search and of the default category counts
SEARCH_ORDER = (SNEAKERS, APPAREL, ACCESSORIES, PERFUMES, WATCHES)

CATALOG_TABLES: Dict[str, CatalogTable] = {t.name: t for t in MENU_ORDER}


def get_catalog_table(name: str) -> Optional[CatalogTable]:
    return CATALOG_TABLES.get(name)
