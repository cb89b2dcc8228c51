"""Render surface: draws a session's graph through its viewport transform.

Rendering is a pure function of graph, viewport and interaction state.
"""

from __future__ import annotations

import html
import json
import math

from rich.console import Console
from rich.table import Table

from .graph.builder import MindMapGraph
from .models import Node, Position
from .view.interaction import InteractionState
from .view.viewport import MAX_SCALE, MIN_SCALE, ZOOM_STEP, ViewportState

PALETTE = [
    ("#8b5cf6", "#d946ef"),  # violet -> fuchsia
    ("#06b6d4", "#3b82f6"),  # cyan -> blue
    ("#10b981", "#14b8a6"),  # emerald -> teal
    ("#f43f5e", "#ec4899"),  # rose -> pink
    ("#f59e0b", "#f97316"),  # amber -> orange
    ("#6366f1", "#a855f7"),  # indigo -> purple
]

NODE_W = 160
NODE_H = 80
CURVATURE = 0.3
MAX_TAGS = 2

BG = "#0f1117"
TEXT = "#e6e6e6"
EDGE = "#4f46e5"
BORDER = "#374151"
BORDER_SELECTED = "#6366f1"
BORDER_SOURCE = "#f59e0b"


def edge_path(a: Position, b: Position) -> str:
    """Cubic curve from ``a`` to ``b`` bowing away from the straight line."""
    dx = b.x - a.x
    dy = b.y - a.y
    distance = math.hypot(dx, dy)
    c1 = Position(a.x + dx * 0.25, a.y + dy * 0.25 - distance * CURVATURE)
    c2 = Position(a.x + dx * 0.75, a.y + dy * 0.75 + distance * CURVATURE)
    return f"M {a.x:.1f},{a.y:.1f} C {c1.x:.1f},{c1.y:.1f} {c2.x:.1f},{c2.y:.1f} {b.x:.1f},{b.y:.1f}"


def tag_badges(tags: tuple[str, ...]) -> list[str]:
    badges = list(tags[:MAX_TAGS])
    if len(tags) > MAX_TAGS:
        badges.append(f"+{len(tags) - MAX_TAGS}")
    return badges


def _node_svg(node: Node, *, selected: bool, source: bool) -> list[str]:
    def esc(s: str) -> str:
        return html.escape(s, quote=True)

    x, y = node.position.x, node.position.y
    stroke = BORDER_SOURCE if source else BORDER_SELECTED if selected else BORDER
    parts = [
        f'<g class="node" data-id="{esc(node.id)}" transform="translate({x:.1f},{y:.1f})">',
        f'<circle r="45" fill="url(#grad-{node.color_index})" opacity="0.2"/>',
        f'<rect x="{-NODE_W / 2:g}" y="{-NODE_H / 2:g}" width="{NODE_W}" height="{NODE_H}" rx="16" '
        f'fill="#111827" fill-opacity="0.8" stroke="{stroke}" stroke-width="2"/>',
        f'<text y="-6" fill="{TEXT}" font-family="Helvetica" font-size="13" text-anchor="middle">{esc(node.title)}</text>',
    ]
    badges = tag_badges(node.tags)
    if badges:
        parts.append(
            f'<text y="18" fill="#a5b4fc" font-family="Helvetica" font-size="10" text-anchor="middle">'
            f"{esc('  '.join(badges))}</text>"
        )
    parts.append("</g>")
    return parts


def to_svg(
    graph: MindMapGraph,
    viewport: ViewportState,
    interaction: InteractionState | None = None,
    *,
    title: str = "Mind map",
) -> str:
    """Render the graph as a standalone SVG document."""
    interaction = interaction or InteractionState()
    w, h = graph.bounds.width, graph.bounds.height

    parts: list[str] = []
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w:.0f}" height="{h:.0f}" '
        f'viewBox="0 0 {w:.0f} {h:.0f}" style="background:{BG}">'
    )
    parts.append(f"<title>{html.escape(title)}</title>")
    parts.append("<defs>")
    for i, (start, stop) in enumerate(PALETTE):
        parts.append(
            f'<linearGradient id="grad-{i}" x1="0%" y1="0%" x2="100%" y2="0%">'
            f'<stop offset="0%" stop-color="{start}"/><stop offset="100%" stop-color="{stop}"/></linearGradient>'
        )
    parts.append(
        '<marker id="arrowhead" markerWidth="20" markerHeight="16" refX="18" refY="8" orient="auto">'
        f'<path d="M0,0 L20,8 L0,16" fill="none" stroke="{EDGE}" stroke-width="2" stroke-linecap="round"/></marker>'
    )
    parts.append("</defs>")
    parts.append(f'<rect id="background" width="100%" height="100%" fill="{BG}"/>')

    parts.append(f'<g id="world" transform="{viewport.svg_transform}">')

    # Edges first (under nodes)
    parts.append('<g id="edges" fill="none">')
    for edge in graph.edges:
        src = graph.get(edge.source)
        dst = graph.get(edge.target)
        if src is None or dst is None:
            continue
        parts.append(
            f'<path data-source="{html.escape(edge.source)}" data-target="{html.escape(edge.target)}" '
            f'd="{edge_path(src.position, dst.position)}" stroke="{EDGE}" stroke-opacity="0.6" '
            'stroke-width="3" marker-end="url(#arrowhead)"/>'
        )
    parts.append("</g>")

    parts.append('<g id="nodes">')
    for node in graph.nodes:
        parts.extend(
            _node_svg(
                node,
                selected=interaction.selected_node == node.id,
                source=interaction.connect_source == node.id,
            )
        )
    parts.append("</g>")

    parts.append("</g>")
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def wrap_html(svg: str, *, title: str) -> str:
    """Wrap SVG in a standalone page with zoom buttons, background pan and node drag."""
    t = html.escape(title, quote=True)
    return (
        "<!doctype html>\n"
        "<html>\n"
        "<head>\n"
        f"  <meta charset=\"utf-8\" />\n  <title>{t}</title>\n"
        "  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        "  <style>\n"
        "    html, body { height: 100%; }\n"
        f"    body {{ margin: 0; background: {BG}; color: {TEXT}; font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial; }}\n"
        "    .wrap { padding: 12px; height: 100vh; box-sizing: border-box; display: flex; flex-direction: column; }\n"
        "    .toolbar { display: flex; gap: 8px; align-items: center; margin: 0 0 10px 0; }\n"
        "    .btn { background: #1b1f2a; color: #e6e6e6; border: 1px solid #3a4154; border-radius: 8px; padding: 6px 10px; cursor: pointer; }\n"
        "    .btn:hover { border-color: #5b6782; }\n"
        "    .hint { color: #9aa4b2; font-size: 12px; }\n"
        "    .viewport { border: 1px solid #3a4154; border-radius: 10px; overflow: hidden; flex: 1; min-height: 0; }\n"
        "    svg { width: 100%; height: 100%; display: block; touch-action: none; user-select: none; }\n"
        "    .node { cursor: grab; }\n"
        "  </style>\n"
        "</head>\n"
        "<body>\n"
        "  <div class=\"wrap\">\n"
        "    <div class=\"toolbar\">\n"
        "      <button class=\"btn\" id=\"zoomOutBtn\" type=\"button\">Zoom -</button>\n"
        "      <span class=\"hint\" id=\"zoomLabel\"></span>\n"
        "      <button class=\"btn\" id=\"zoomInBtn\" type=\"button\">Zoom +</button>\n"
        "      <button class=\"btn\" id=\"resetBtn\" type=\"button\">Reset</button>\n"
        "      <span class=\"hint\">Drag background to pan • Drag notes to move them</span>\n"
        "    </div>\n"
        "    <div class=\"viewport\" id=\"viewport\">\n"
        f"{svg}\n"
        "    </div>\n"
        "  </div>\n"
        "  <script>\n"
        "    (function () {\n"
        "      const svg = document.querySelector('#viewport svg');\n"
        "      const world = svg && svg.querySelector('#world');\n"
        "      if (!world) return;\n"
        f"      const MIN = {MIN_SCALE}, MAX = {MAX_SCALE}, STEP = {ZOOM_STEP};\n"
        "      const m = /translate\\(([-\\d.e]+),([-\\d.e]+)\\) scale\\(([-\\d.e]+)\\)/.exec(world.getAttribute('transform') || '');\n"
        "      const view = m ? { x: +m[1], y: +m[2], scale: +m[3] } : { x: 0, y: 0, scale: 1 };\n"
        "      const label = document.getElementById('zoomLabel');\n"
        "      const apply = () => {\n"
        "        world.setAttribute('transform', `translate(${view.x},${view.y}) scale(${view.scale})`);\n"
        "        label.textContent = `${Math.round(view.scale * 100)}%`;\n"
        "      };\n"
        "      const clamp = (v) => Math.round(Math.max(MIN, Math.min(MAX, v)) * 1e6) / 1e6;\n"
        "      const toSvg = (e) => {\n"
        "        const p = svg.createSVGPoint();\n"
        "        p.x = e.clientX; p.y = e.clientY;\n"
        "        return p.matrixTransform(svg.getScreenCTM().inverse());\n"
        "      };\n"
        "\n"
        "      let pan = null;\n"
        "      let drag = null;\n"
        "      svg.addEventListener('pointerdown', (e) => {\n"
        "        const node = e.target.closest('.node');\n"
        "        const p = toSvg(e);\n"
        "        svg.setPointerCapture(e.pointerId);\n"
        "        if (node) {\n"
        "          const t = /translate\\(([-\\d.e]+),([-\\d.e]+)\\)/.exec(node.getAttribute('transform'));\n"
        "          const wx = (p.x - view.x) / view.scale, wy = (p.y - view.y) / view.scale;\n"
        "          drag = { node, gx: wx - +t[1], gy: wy - +t[2], id: node.dataset.id };\n"
        "        } else {\n"
        "          pan = { x: p.x - view.x, y: p.y - view.y };\n"
        "        }\n"
        "      });\n"
        "      svg.addEventListener('pointermove', (e) => {\n"
        "        const p = toSvg(e);\n"
        "        if (drag) {\n"
        "          const nx = (p.x - view.x) / view.scale - drag.gx;\n"
        "          const ny = (p.y - view.y) / view.scale - drag.gy;\n"
        "          drag.node.setAttribute('transform', `translate(${nx},${ny})`);\n"
        "          redrawEdges(drag.id, nx, ny);\n"
        "        } else if (pan) {\n"
        "          view.x = p.x - pan.x;\n"
        "          view.y = p.y - pan.y;\n"
        "          apply();\n"
        "        }\n"
        "      });\n"
        "      const stop = () => { pan = null; drag = null; };\n"
        "      svg.addEventListener('pointerup', stop);\n"
        "      svg.addEventListener('pointercancel', stop);\n"
        "\n"
        "      const positions = {};\n"
        "      svg.querySelectorAll('.node').forEach((n) => {\n"
        "        const t = /translate\\(([-\\d.e]+),([-\\d.e]+)\\)/.exec(n.getAttribute('transform'));\n"
        "        positions[n.dataset.id] = { x: +t[1], y: +t[2] };\n"
        "      });\n"
        "      const curve = (a, b) => {\n"
        "        const dx = b.x - a.x, dy = b.y - a.y, d = Math.hypot(dx, dy);\n"
        f"        const k = {CURVATURE};\n"
        "        return `M ${a.x},${a.y} C ${a.x + dx * 0.25},${a.y + dy * 0.25 - d * k} ${a.x + dx * 0.75},${a.y + dy * 0.75 + d * k} ${b.x},${b.y}`;\n"
        "      };\n"
        "      const redrawEdges = (id, x, y) => {\n"
        "        positions[id] = { x, y };\n"
        "        svg.querySelectorAll('#edges path').forEach((path) => {\n"
        "          const s = path.dataset.source, t = path.dataset.target;\n"
        "          if (s === id || t === id) path.setAttribute('d', curve(positions[s], positions[t]));\n"
        "        });\n"
        "      };\n"
        "\n"
        "      document.getElementById('zoomInBtn').addEventListener('click', () => { view.scale = clamp(view.scale + STEP); apply(); });\n"
        "      document.getElementById('zoomOutBtn').addEventListener('click', () => { view.scale = clamp(view.scale - STEP); apply(); });\n"
        "      document.getElementById('resetBtn').addEventListener('click', () => { view.x = 0; view.y = 0; view.scale = 1; apply(); });\n"
        "      apply();\n"
        "    })();\n"
        "  </script>\n"
        "</body>\n"
        "</html>\n"
    )


def to_payload(graph: MindMapGraph, viewport: ViewportState, *, title: str = "Mind map") -> dict:
    return {
        "title": title,
        "layout": graph.strategy.value if graph.strategy is not None else None,
        "bounds": {"width": graph.bounds.width, "height": graph.bounds.height},
        "viewport": {
            "scale": viewport.scale,
            "offset": {"x": viewport.offset.x, "y": viewport.offset.y},
        },
        "node_count": len(graph.nodes),
        "edge_count": len(graph.edges),
        "nodes": [
            {
                "id": n.id,
                "title": n.title,
                "x": round(n.position.x, 3),
                "y": round(n.position.y, 3),
                "tags": list(n.tags),
                "color_index": n.color_index,
            }
            for n in graph.nodes
        ],
        "edges": [{"source": e.source, "target": e.target} for e in graph.edges],
    }


def to_json(graph: MindMapGraph, viewport: ViewportState, *, title: str = "Mind map") -> str:
    return json.dumps(to_payload(graph, viewport, title=title), indent=2) + "\n"


def to_markdown(graph: MindMapGraph, *, title: str = "Mind map") -> str:
    lines: list[str] = []
    lines.append(f"## {title}")
    lines.append("")
    lines.append(f"- Layout: {graph.strategy.value if graph.strategy is not None else 'none'}")
    lines.append(f"- Notes: {len(graph.nodes)}")
    lines.append(f"- Links: {len(graph.edges)}")
    lines.append("")
    lines.append("| Note | Title | Tags | In | Out | x | y |")
    lines.append("|---|---|---|---:|---:|---:|---:|")
    for n in graph.nodes:
        tags = ", ".join(tag_badges(n.tags))
        lines.append(
            f"| `{n.id}` | {n.title} | {tags} | {graph.in_degree(n.id)} | {graph.out_degree(n.id)} "
            f"| {n.position.x:.1f} | {n.position.y:.1f} |"
        )
    lines.append("")
    if graph.edges:
        lines.append("### Links")
        lines.append("")
        for e in graph.edges:
            lines.append(f"- `{e.source}` -> `{e.target}`")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def print_rich(graph: MindMapGraph, *, console: Console, title: str = "Mind map") -> None:
    console.print(f"[bold]{title}[/bold]")
    console.print(f"Notes: {len(graph.nodes)}  Links: {len(graph.edges)}")
    console.print()

    t = Table(show_header=True, header_style="bold")
    t.add_column("Note", style="cyan", no_wrap=True)
    t.add_column("Title")
    t.add_column("Tags")
    t.add_column("In", justify="right")
    t.add_column("Out", justify="right")
    t.add_column("Position", justify="right")
    for n in graph.nodes:
        t.add_row(
            n.id,
            n.title,
            ", ".join(tag_badges(n.tags)),
            str(graph.in_degree(n.id)),
            str(graph.out_degree(n.id)),
            f"({n.position.x:.0f}, {n.position.y:.0f})",
        )
    console.print(t)
