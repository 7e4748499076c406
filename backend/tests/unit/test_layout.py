import math

import pytest

from backend.src.models.concept_map import LayoutSettings
from backend.src.models.note import ConceptNote
from backend.src.services.bubble_sizing import bubble_size
from backend.src.services.collision import Body, max_overlap
from backend.src.services.grouping import derive_groups
from backend.src.services.layout import (
    cluster_radius,
    compute_layout,
    expanded_positions,
    grid_shape,
    layout_expanded,
    layout_overview,
    overview_positions,
)

SETTINGS = LayoutSettings()


def _notes(group_count: int, concept_count: int, prefix: str = "Concept") -> tuple:
    return tuple(
        ConceptNote(
            id=f"note-{g}.md",
            title=f"Note {g}",
            concepts=[f"{prefix}{g}-{c}" for c in range(concept_count)],
        )
        for g in range(group_count)
    )


def _bodies(nodes) -> list:
    return [Body(x=node.x, y=node.y, size=node.size) for node in nodes]


def _angle(node, cx: float, cy: float) -> float:
    return math.degrees(math.atan2(node.y - cy, node.x - cx))


@pytest.mark.parametrize(
    "count,expected",
    [(0, (0, 0)), (1, (1, 1)), (2, (2, 1)), (4, (2, 2)), (5, (3, 2)), (12, (3, 4))],
)
def test_grid_shape(count, expected):
    assert grid_shape(count) == expected


def test_cluster_radius_grows_with_concepts():
    assert cluster_radius(3, 1200, 900) == pytest.approx(60 + math.sqrt(3) * 30)
    assert cluster_radius(1, 1200, 900) == 90.0


def test_cluster_radius_floor_wins_in_small_cells():
    assert cluster_radius(20, 400, 225) == 80.0


def test_overview_two_rings_for_many_concepts():
    points = overview_positions(0.0, 0.0, 7, 100.0)

    inner, outer = points[:3], points[3:]
    assert [math.hypot(x, y) for x, y in inner] == pytest.approx([40.0] * 3)
    assert [math.hypot(x, y) for x, y in outer] == pytest.approx([75.0] * 4)
    assert math.degrees(math.atan2(inner[0][1], inner[0][0])) == pytest.approx(-90.0)
    assert math.degrees(math.atan2(outer[0][1], outer[0][0])) == pytest.approx(-45.0)


def test_expanded_two_rings_for_many_concepts():
    points = expanded_positions(0.0, 0.0, 10, 900.0)

    assert [math.hypot(x, y) for x, y in points[:4]] == pytest.approx([162.0] * 4)
    assert [math.hypot(x, y) for x, y in points[4:]] == pytest.approx([315.0] * 6)


def test_single_note_scenario_places_one_ring():
    notes = (
        ConceptNote(
            id="photo.md",
            title="Photosynthesis",
            concepts=["Photosynthesis", "Chlorophyll", "Sunlight"],
        ),
    )

    result = compute_layout(notes, None, SETTINGS)

    assert len(result.groups) == 1
    bounds = result.groups[0].bounds
    assert (bounds.x, bounds.y) == (600.0, 450.0)
    assert [node.label for node in result.nodes] == ["Photosynthesis", "Chlorophyll", "Sunlight"]
    assert [node.size for node in result.nodes] == [90.0, 90.0, 80.0]
    angles = [_angle(node, bounds.x, bounds.y) for node in result.nodes]
    assert angles == pytest.approx([-90.0, 30.0, 150.0])


@pytest.mark.parametrize("group_count", [1, 2, 4, 5, 9, 12])
@pytest.mark.parametrize("concept_count", [1, 2, 6, 7, 20])
def test_overview_nodes_stay_inside_their_cluster(group_count, concept_count):
    result = layout_overview(derive_groups(_notes(group_count, concept_count)), SETTINGS)

    assert len(result.groups) == group_count
    assert len(result.nodes) == group_count * concept_count
    bounds = {group.id: group.bounds for group in result.groups}
    for node in result.nodes:
        cluster = bounds[node.group_id]
        distance = math.hypot(node.x - cluster.x, node.y - cluster.y)
        assert distance <= cluster.radius - node.size / 2 + 1e-6


@pytest.mark.parametrize("group_count", [1, 2, 3, 4])
@pytest.mark.parametrize("concept_count", [1, 2, 3, 4])
def test_overview_small_maps_have_no_overlap(group_count, concept_count):
    result = layout_overview(
        derive_groups(_notes(group_count, concept_count, prefix="C")), SETTINGS
    )

    assert max_overlap(_bodies(result.nodes), margin=SETTINGS.overview_margin) <= 1e-6


@pytest.mark.parametrize("concept_count", range(1, 9))
def test_expanded_single_ring_geometry(concept_count):
    (group,) = derive_groups(_notes(1, concept_count))

    result = layout_expanded(group, SETTINGS)

    assert len(result.nodes) == concept_count
    if concept_count == 1:
        assert (result.nodes[0].x, result.nodes[0].y) == (600.0, 450.0)
    else:
        for node in result.nodes:
            assert math.hypot(node.x - 600.0, node.y - 450.0) == pytest.approx(270.0)


@pytest.mark.parametrize("concept_count", range(1, 31))
def test_expanded_layout_has_no_overlap(concept_count):
    (group,) = derive_groups(_notes(1, concept_count))

    result = layout_expanded(group, SETTINGS)

    assert len(result.nodes) == concept_count
    assert max_overlap(_bodies(result.nodes), margin=SETTINGS.expanded_margin) <= 0.05


@pytest.mark.parametrize("concept_count", [25, 30])
def test_expanded_resolver_reduces_crowding(concept_count):
    (group,) = derive_groups(_notes(1, concept_count))
    start = [
        Body(x=x, y=y, size=bubble_size(label, index, expanded=True))
        for index, (label, (x, y)) in enumerate(
            zip(group.concepts, expanded_positions(600.0, 450.0, concept_count, 900.0))
        )
    ]

    result = layout_expanded(group, SETTINGS)

    margin = SETTINGS.expanded_margin
    assert max_overlap(_bodies(result.nodes), margin=margin) < max_overlap(start, margin=margin)


def test_layout_is_deterministic():
    groups = derive_groups(_notes(5, 7))

    assert layout_overview(groups, SETTINGS) == layout_overview(groups, SETTINGS)


def test_empty_snapshot_lays_out_nothing():
    result = compute_layout((), None, SETTINGS)

    assert result.groups == ()
    assert result.nodes == ()


def test_notes_without_concepts_lay_out_nothing():
    notes = (ConceptNote(id="a.md", title="A"), ConceptNote(id="b.md", title="B", concepts=[]))

    assert compute_layout(notes, None, SETTINGS).nodes == ()


def test_compute_layout_expanded_group_only():
    notes = _notes(3, 4)

    result = compute_layout(notes, "note-1.md", SETTINGS)

    assert [group.key for group in result.groups] == ["note-1.md"]
    assert {node.note_id for node in result.nodes} == {"note-1.md"}
    assert [node.id for node in result.nodes] == [0, 1, 2, 3]
    assert all(70.0 <= node.size <= 120.0 for node in result.nodes)


def test_compute_layout_unknown_expanded_group_falls_back_to_overview():
    notes = _notes(2, 2)

    result = compute_layout(notes, "missing.md", SETTINGS)

    assert len(result.groups) == 2
    assert all(group.bounds is not None for group in result.groups)


def test_node_keys_use_note_and_label():
    notes = (
        ConceptNote(id="a.md", title="A", concepts=["Memory"]),
        ConceptNote(id="b.md", title="B", concepts=["Memory"]),
    )

    result = compute_layout(notes, None, SETTINGS)

    assert [node.key for node in result.nodes] == ["a.md::Memory", "b.md::Memory"]
    assert [node.id for node in result.nodes] == [0, 1]
