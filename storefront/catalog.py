import json
import logging
import random
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from .domain import Product
from .errors import MissingProductError
from .ftypes import Maybe

logger = logging.getLogger(__name__)

Taxonomy = Dict[str, Dict[str, Tuple[str, ...]]]

DEFAULT_TAXONOMY: Taxonomy = {
    "Honda": {
        "Civic": ("Engine", "Brakes", "Suspension", "Transmission", "Battery"),
        "Accord": ("Engine", "Brakes", "Transmission"),
    },
    "Toyota": {
        "Corolla": ("Engine", "Brakes", "Suspension"),
        "Camry": ("Engine", "Transmission", "Battery"),
    },
    "Subaru": {
        "Impreza": ("Engine", "Brakes", "Suspension"),
        "Forester": ("Engine", "Transmission", "Battery"),
    },
    "Mazda": {
        "3": ("Engine", "Brakes", "Battery"),
        "6": ("Engine", "Suspension", "Transmission"),
    },
    "Mitsubishi": {
        "Lancer": ("Engine", "Brakes"),
        "Outlander": ("Engine", "Transmission"),
    },
    "Suzuki": {
        "Swift": ("Engine", "Brakes"),
        "Vitara": ("Engine", "Suspension"),
    },
    "BMW": {
        "3 Series": ("Engine", "Brakes", "Suspension"),
        "X5": ("Engine", "Transmission"),
    },
}

FIRST_YEAR = 2012
LAST_YEAR = 2025

PART_IMAGES = {
    "Engine": "images/parts/engine.jpg",
    "Brakes": "images/parts/brakes.jpg",
    "Suspension": "images/parts/suspension.jpg",
    "Transmission": "images/parts/transmission.jpg",
    "Battery": "images/parts/battery.jpg",
}
DEFAULT_IMAGE = "images/default.png"

MIN_PRICE = 3500
MAX_PRICE = 33499


def load_taxonomy(path: str) -> Taxonomy:
    """Reads a brand -> model -> [parts] mapping from a JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return {
        str(brand): {str(model): tuple(map(str, parts)) for model, parts in models.items()}
        for brand, models in data.items()
    }


def build_catalog(
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
    years: Iterable[int] = range(FIRST_YEAR, LAST_YEAR + 1),
    rng: Optional[random.Random] = None,
) -> Tuple[Product, ...]:
    """
    One product per brand/model/part/year, ids assigned from 1 in that order.
    Prices are drawn from rng; pass a seeded Random for a reproducible catalog.
    """
    rng = rng or random.Random()
    years = tuple(years)

    def make(pid: int, brand: str, model: str, part: str, year: int) -> Product:
        return Product(
            id=pid,
            brand=brand,
            model=model,
            part=part,
            year=year,
            name=f"{brand} {model} - {part} ({year})",
            price=rng.randint(MIN_PRICE, MAX_PRICE),
            image=PART_IMAGES.get(part, DEFAULT_IMAGE),
        )

    combos = (
        (brand, model, part, year)
        for brand, models in taxonomy.items()
        for model, parts in models.items()
        for part in parts
        for year in years
    )
    products = tuple(make(pid, *combo) for pid, combo in enumerate(combos, start=1))
    logger.debug(f"Catalog built: {len(products)} products")
    return products


# ============ Filters (closures) ============


def by_brand(brand: str) -> Callable[[Product], bool]:
    return lambda p: p.brand == brand


def by_model(model: str) -> Callable[[Product], bool]:
    return lambda p: p.model == model


def by_part(part: str) -> Callable[[Product], bool]:
    return lambda p: p.part == part


def by_year(year) -> Callable[[Product], bool]:
    """Year as typed in a dropdown; compared as text"""
    return lambda p: str(p.year) == str(year)


def by_query(query: str) -> Callable[[Product], bool]:
    """Case-insensitive substring over name, brand, model and part"""
    q = query.lower()
    return lambda p: any(
        q in field.lower() for field in (p.name, p.brand, p.model, p.part)
    )


def iter_matching(
    products: Iterable[Product], predicates: Tuple[Callable[[Product], bool], ...]
) -> Iterator[Product]:
    for product in products:
        if all(pred(product) for pred in predicates):
            yield product


class Catalog:
    """Read-only product catalog with dropdown helpers"""

    def __init__(
        self,
        products: Tuple[Product, ...],
        taxonomy: Taxonomy = DEFAULT_TAXONOMY,
        years: Iterable[int] = range(FIRST_YEAR, LAST_YEAR + 1),
    ):
        self.products = tuple(products)
        self.taxonomy = taxonomy
        self._years = tuple(years)
        self._by_id = {p.id: p for p in self.products}

    @classmethod
    def generate(
        cls,
        taxonomy: Taxonomy = DEFAULT_TAXONOMY,
        first_year: int = FIRST_YEAR,
        last_year: int = LAST_YEAR,
        seed: Optional[int] = None,
    ) -> "Catalog":
        years = range(first_year, last_year + 1)
        products = build_catalog(taxonomy, years, random.Random(seed))
        return cls(products, taxonomy, years)

    def __len__(self) -> int:
        return len(self.products)

    def lookup(self, product_id: int) -> Maybe[Product]:
        return Maybe.of(self._by_id.get(product_id))

    def get(self, product_id: int) -> Product:
        product = self._by_id.get(product_id)
        if product is None:
            raise MissingProductError(product_id)
        return product

    # dropdowns

    def brands(self) -> Tuple[str, ...]:
        return tuple(self.taxonomy)

    def models(self, brand: str) -> Tuple[str, ...]:
        if not brand or brand not in self.taxonomy:
            return ()
        return tuple(self.taxonomy[brand])

    def parts(self, brand: str, model: str) -> Tuple[str, ...]:
        if not brand or not model:
            return ()
        return tuple(self.taxonomy.get(brand, {}).get(model, ()))

    def years(self) -> Tuple[int, ...]:
        return self._years

    def search(
        self,
        brand: str = "",
        model: str = "",
        part: str = "",
        year="",
        query: str = "",
    ) -> Iterator[Product]:
        """Products matching every non-empty criterion, in catalog order"""
        query = (query or "").strip()
        predicates = tuple(
            make(value)
            for make, value in (
                (by_brand, brand),
                (by_model, model),
                (by_part, part),
                (by_year, year),
                (by_query, query),
            )
            if value not in (None, "")
        )
        return iter_matching(self.products, predicates)

    @staticmethod
    def describe(product: Product) -> str:
        return "\n".join(
            (
                product.name,
                f"Brand: {product.brand}",
                f"Model: {product.model}",
                f"Part: {product.part}",
                f"Year: {product.year}",
                f"Price: JMD {product.price:,}",
            )
        )


def paginate(items: Tuple, page: int, size: int) -> Tuple[Tuple, int]:
    """Items on a 1-based page and the page count; out-of-range pages are clamped"""
    pages = max(1, -(-len(items) // size))
    page = min(max(1, page), pages)
    start = (page - 1) * size
    return items[start:start + size], pages
