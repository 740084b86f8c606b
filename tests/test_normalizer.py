import pytest

from overpass_fakes import element
from poi_discovery.services.normalizer import (
    element_to_suggestion,
    infer_category,
    normalize_elements,
    popularity_score,
)


# ──────────────────────────────────────────────────────────────
# Category table
# ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "tags, expected",
    [
        ({"tourism": "viewpoint"}, "viewpoint"),
        ({"tourism": "gallery"}, "museum"),
        ({"tourism": "zoo"}, "attraction"),
        ({"tourism": "picnic_site"}, "attraction"),
        ({"tourism": "artwork"}, "landmark"),
        ({"tourism": "motel"}, "hotel"),
        ({"historic": "castle"}, "landmark"),
        ({"natural": "waterfall"}, "waterfall"),
        ({"waterfall": "yes"}, "waterfall"),
        ({"natural": "cave_entrance"}, "waterfall"),
        ({"leisure": "nature_reserve"}, "park"),
        ({"leisure": "bowling_alley"}, "entertainment"),
        ({"boundary": "national_park"}, "park"),
        ({"amenity": "fuel"}, "gas"),
        ({"amenity": "cinema"}, "entertainment"),
        ({"shop": "supermarket"}, "shopping"),
    ],
)
def test_infer_category(tags, expected):
    assert infer_category(tags) == expected


def test_tourism_outranks_historic_and_amenity():
    assert infer_category({"tourism": "attraction", "historic": "castle"}) == "attraction"
    assert infer_category({"historic": "memorial", "amenity": "restaurant"}) == "landmark"
    assert infer_category({"amenity": "cafe", "shop": "bakery"}) == "cafe"


def test_unrecognised_tags_have_no_category():
    assert infer_category({}) is None
    assert infer_category({"amenity": "bench"}) is None
    assert infer_category({"natural": "tree"}) is None
    assert infer_category({"historic": ""}) is None


# ──────────────────────────────────────────────────────────────
# Popularity
# ──────────────────────────────────────────────────────────────

def test_popularity_base_score():
    assert popularity_score({}) == 50


def test_popularity_bonuses_add_up_and_clamp():
    tags = {"tourism": "attraction", "wikipedia": "en:Somewhere"}
    assert popularity_score(tags) == 80

    everything = {
        "tourism": "attraction",
        "heritage": "2",
        "wikipedia": "en:Somewhere",
        "website": "https://example.org",
        "phone": "+1 555 0100",
        "opening_hours": "24/7",
        "description": "A place",
        "stars": "4",
    }
    assert popularity_score(everything) == 100


def test_popularity_attraction_bonus_only_for_attraction():
    assert popularity_score({"tourism": "viewpoint"}) == 50


@pytest.mark.parametrize(
    "tags",
    [
        {},
        {"heritage": "1", "stars": "5"},
        {"website": "x", "phone": "y", "opening_hours": "z", "description": "w"},
    ],
)
def test_popularity_in_range(tags):
    assert 0 <= popularity_score(tags) <= 100


# ──────────────────────────────────────────────────────────────
# Element → suggestion
# ──────────────────────────────────────────────────────────────

def test_node_element_becomes_suggestion():
    raw = element("node", 42, -16.9, 145.7, {
        "name": "Lookout Point",
        "tourism": "viewpoint",
        "addr:street": "Range Road",
    })
    it = element_to_suggestion(raw)

    assert it is not None
    assert it.id == "osm-node-42"
    assert it.osm_type == "node"
    assert it.osm_id == "42"
    assert it.category == "viewpoint"
    assert (it.lat, it.lng) == (-16.9, 145.7)
    assert it.address == "Range Road"
    assert it.popularity_score == 50
    assert it.tags["tourism"] == "viewpoint"


def test_way_element_uses_center_and_full_address():
    raw = element("way", 7, 10.0, 20.0, {
        "name": "City Park",
        "leisure": "park",
        "addr:full": "1 Park Ave",
        "addr:street": "Park Ave",
    })
    it = element_to_suggestion(raw)

    assert it is not None
    assert it.id == "osm-way-7"
    assert (it.lat, it.lng) == (10.0, 20.0)
    assert it.address == "1 Park Ave"


def test_english_name_fallback():
    it = element_to_suggestion(element("node", 1, 0.0, 0.0, {"name:en": "Falls", "natural": "waterfall"}))
    assert it is not None
    assert it.name == "Falls"


@pytest.mark.parametrize(
    "raw",
    [
        element("node", 1, 0.0, 0.0, {"tourism": "viewpoint"}),  # unnamed
        element("node", 2, 0.0, 0.0, {"name": "Bench", "amenity": "bench"}),  # no category
        {"type": "way", "id": 3, "tags": {"name": "Nowhere", "leisure": "park"}},  # no coords
        {"type": "node", "tags": {"name": "No id", "tourism": "viewpoint"}},  # invalid
        {"type": "area", "id": 4, "lat": 0.0, "lon": 0.0, "tags": {"name": "x", "shop": "y"}},
    ],
)
def test_unusable_elements_are_dropped(raw):
    assert element_to_suggestion(raw) is None


def test_same_element_maps_to_same_id():
    raw = element("relation", 99, 1.0, 2.0, {"name": "Reserve", "boundary": "protected_area"})
    assert element_to_suggestion(raw).id == element_to_suggestion(raw).id == "osm-relation-99"


def test_normalize_elements_filters_in_order():
    elements = [
        element("node", 1, 0.0, 1.0, {"name": "A", "tourism": "viewpoint"}),
        element("node", 2, 0.0, 2.0, {"tourism": "viewpoint"}),
        element("node", 3, 0.0, 3.0, {"name": "C", "amenity": "cafe"}),
    ]
    assert [it.id for it in normalize_elements(elements)] == ["osm-node-1", "osm-node-3"]
