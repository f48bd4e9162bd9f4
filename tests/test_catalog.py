import sys
import os
import json
import random

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from storefront.catalog import (
    Catalog,
    DEFAULT_IMAGE,
    build_catalog,
    load_taxonomy,
    paginate,
)
from storefront.errors import MissingProductError


@pytest.fixture(scope="module")
def catalog():
    return Catalog.generate(seed=7)


def test_catalog_size_and_ids(catalog):
    """39 brand/model/part combinations x 14 years, ids 1..N"""
    assert len(catalog) == 39 * 14
    assert [p.id for p in catalog.products] == list(range(1, 547))


def test_build_order_and_names(catalog):
    first = catalog.products[0]
    assert (first.brand, first.model, first.part, first.year) == ("Honda", "Civic", "Engine", 2012)
    assert first.name == "Honda Civic - Engine (2012)"
    assert catalog.products[13].year == 2025
    assert catalog.products[14].part == "Brakes"
    last = catalog.products[-1]
    assert last.name == "BMW X5 - Transmission (2025)"
    assert first.image == "images/parts/engine.jpg"


def test_prices_in_range_and_reproducible(catalog):
    assert all(3500 <= p.price <= 33499 for p in catalog.products)
    again = Catalog.generate(seed=7)
    assert [p.price for p in again.products] == [p.price for p in catalog.products]


def test_unknown_part_gets_default_image():
    products = build_catalog({"Kia": {"Rio": ("Radiator",)}}, years=[2020], rng=random.Random(1))
    assert len(products) == 1
    assert products[0].image == DEFAULT_IMAGE


def test_lookup_and_get(catalog):
    assert catalog.lookup(1).get_or_else(None).name == "Honda Civic - Engine (2012)"
    assert catalog.lookup(0).is_none()
    with pytest.raises(MissingProductError):
        catalog.get(9999)


def test_dropdowns(catalog):
    assert catalog.brands()[0] == "Honda"
    assert "BMW" in catalog.brands()
    assert catalog.models("Mazda") == ("3", "6")
    assert catalog.models("") == ()
    assert catalog.models("Ford") == ()
    assert catalog.parts("Honda", "Accord") == ("Engine", "Brakes", "Transmission")
    assert catalog.parts("Honda", "") == ()
    assert catalog.years() == tuple(range(2012, 2026))


def test_search_filters(catalog):
    civic = tuple(catalog.search(brand="Honda", model="Civic"))
    assert len(civic) == 5 * 14
    brakes_2015 = tuple(catalog.search(brand="Honda", model="Civic", part="Brakes", year="2015"))
    assert [p.name for p in brakes_2015] == ["Honda Civic - Brakes (2015)"]
    assert tuple(catalog.search(year=2015)) == tuple(catalog.search(year="2015"))
    assert len(tuple(catalog.search())) == len(catalog)


def test_search_query(catalog):
    hits = tuple(catalog.search(query="  x5 "))
    assert hits and all(p.model == "X5" for p in hits)
    assert tuple(catalog.search(query="BATTERY", brand="Toyota")) == tuple(
        catalog.search(brand="Toyota", model="Camry", part="Battery")
    )
    assert tuple(catalog.search(query="hovercraft")) == ()


def test_describe(catalog):
    text = Catalog.describe(catalog.get(1))
    assert text.splitlines()[0] == "Honda Civic - Engine (2012)"
    assert "Year: 2012" in text
    assert text.splitlines()[-1].startswith("Price: JMD ")


def test_load_taxonomy(tmp_path):
    path = tmp_path / "taxonomy.json"
    path.write_text(json.dumps({"Kia": {"Rio": ["Engine", "Brakes"]}}), encoding="utf-8")
    taxonomy = load_taxonomy(str(path))
    assert taxonomy == {"Kia": {"Rio": ("Engine", "Brakes")}}
    small = Catalog.generate(taxonomy, first_year=2020, last_year=2021, seed=1)
    assert len(small) == 4


def test_paginate_reaches_every_product(catalog):
    """All 546 products are reachable page by page"""
    first, pages = paginate(catalog.products, 1, 60)
    assert pages == 10
    assert first == catalog.products[:60]
    last, _ = paginate(catalog.products, 10, 60)
    assert last == catalog.products[540:]
    seen = tuple(p for n in range(1, pages + 1) for p in paginate(catalog.products, n, 60)[0])
    assert seen == catalog.products


def test_paginate_clamps_pages():
    assert paginate((), 3, 60) == ((), 1)
    assert paginate((1, 2, 3), 0, 2) == ((1, 2), 2)
    assert paginate((1, 2, 3), 9, 2) == ((3,), 2)
