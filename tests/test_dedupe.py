from overpass_fakes import element
from poi_discovery.services.dedupe import dedupe_suggestions
from poi_discovery.services.normalizer import normalize_elements


def _viewpoint(osm_type, osm_id, name):
    return element(osm_type, osm_id, 0.0, float(osm_id), {"name": name, "tourism": "viewpoint"})


def test_duplicates_collapse_to_first_occurrence():
    items = normalize_elements([
        _viewpoint("node", 1, "first"),
        _viewpoint("node", 2, "two"),
        _viewpoint("node", 1, "second copy"),
        _viewpoint("way", 3, "three"),
        _viewpoint("node", 2, "two again"),
        _viewpoint("way", 3, "three again"),
    ])
    out = dedupe_suggestions(items)

    assert len(out) == 3
    assert [it.id for it in out] == ["osm-node-1", "osm-node-2", "osm-way-3"]
    assert out[0].name == "first"


def test_same_numeric_id_different_type_are_distinct():
    items = normalize_elements([_viewpoint("node", 1, "node"), _viewpoint("way", 1, "way")])
    assert len(dedupe_suggestions(items)) == 2


def test_empty_input():
    assert dedupe_suggestions([]) == []
