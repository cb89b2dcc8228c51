import json

from conftest import make_note

from notemap.graph.builder import build_graph
from notemap.models import Position
from notemap.render import edge_path, tag_badges, to_json, to_markdown, to_svg, wrap_html
from notemap.view.interaction import InteractionState
from notemap.view.viewport import ViewportController


def _graph(sample_notes):
    return build_graph(sample_notes)


def test_tag_badges() -> None:
    assert tag_badges(()) == []
    assert tag_badges(("a", "b")) == ["a", "b"]
    assert tag_badges(("a", "b", "c", "d")) == ["a", "b", "+2"]


def test_edge_path_bows_away_from_line() -> None:
    d = edge_path(Position(0, 0), Position(100, 0))
    assert d == "M 0.0,0.0 C 25.0,-30.0 75.0,30.0 100.0,0.0"


def test_svg_contains_nodes_edges_and_transform(sample_notes) -> None:
    vp = ViewportController()
    vp.zoom_in()
    svg = to_svg(_graph(sample_notes), vp.state)

    assert 'transform="translate(0,0) scale(1.1)"' in svg
    assert svg.count('class="node"') == 3
    assert 'data-source="a" data-target="b"' in svg
    assert 'data-source="c" data-target="a"' in svg
    assert 'marker-end="url(#arrowhead)"' in svg


def test_svg_escapes_titles_and_marks_selection() -> None:
    graph = build_graph([make_note("x", "<b>&co</b>", tags=["one", "two", "three"])])
    svg = to_svg(graph, ViewportController().state, InteractionState(selected_node="x"))

    assert "&lt;b&gt;&amp;co&lt;/b&gt;" in svg
    assert "<b>&co" not in svg
    assert "+1" in svg
    assert 'stroke="#6366f1"' in svg


def test_html_has_controls(sample_notes) -> None:
    page = wrap_html(to_svg(_graph(sample_notes), ViewportController().state), title="Map")
    for element_id in ("zoomInBtn", "zoomOutBtn", "resetBtn", "zoomLabel"):
        assert f'id="{element_id}"' in page
    assert "<svg" in page


def test_json_payload(sample_notes) -> None:
    payload = json.loads(to_json(_graph(sample_notes), ViewportController().state, title="T"))
    assert payload["title"] == "T"
    assert payload["layout"] == "radial"
    assert payload["node_count"] == 3
    assert payload["edges"] == [{"source": "a", "target": "b"}, {"source": "c", "target": "a"}]
    assert payload["viewport"] == {"scale": 1.0, "offset": {"x": 0.0, "y": 0.0}}
    assert [n["color_index"] for n in payload["nodes"]] == [0, 1, 2]


def test_markdown_table(sample_notes) -> None:
    md = to_markdown(_graph(sample_notes), title="Notes")
    assert md.startswith("## Notes\n")
    assert "- Links: 2" in md
    assert "| `a` | Alpha | work | 1 | 1 |" in md
    assert "- `c` -> `a`" in md
