"""
closure_visualization.py

Plotly-based visualization for posets of closed sets.

This module converts the NetworkX DiGraph of a ClosedSetPoset to an
interactive Plotly figure (usually of its transitive reduction, i.e. the
Hasse diagram), with hover information and several layout options.
"""

import networkx as nx
import plotly.graph_objects as go
from plotly.subplots import make_subplots


LAYOUTS = ('hierarchical', 'force', 'circular')
COLORINGS = ('size', 'order', 'uniform')


def create_plotly_graph(poset,
                        layout='hierarchical',
                        color_by='size',
                        show_edges=True,
                        node_size=10,
                        title=None):
    """
    Create an interactive Plotly visualization of a closed-set poset.

    Args:
        poset: ClosedSetPoset object
        layout: Layout algorithm - 'hierarchical', 'force', or 'circular'
        color_by: How to color nodes - 'size' (cardinality), 'order'
                  (position in lectic enumeration), or 'uniform'
        show_edges: Whether to display edges
        node_size: Base size for nodes (will be scaled by degree)
        title: Optional title for the graph

    Returns:
        plotly.graph_objects.Figure
    """
    if color_by not in COLORINGS:
        raise ValueError(f"Unknown color scheme: {color_by}")

    G = poset.graph
    pos = compute_layout(G, layout)

    node_trace = create_node_trace(poset, pos, color_by, node_size)
    if show_edges:
        edge_trace = create_edge_trace(G, pos)
    else:
        edge_trace = go.Scatter(x=[], y=[], mode='lines')

    fig = go.Figure(data=[edge_trace, node_trace])

    fig.update_layout(
        title=dict(text=title or f"Closed Sets ({len(poset)} sets)", font=dict(size=16)),
        showlegend=False,
        hovermode='closest',
        margin=dict(b=20, l=5, r=5, t=40),
        xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        yaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        plot_bgcolor='white',
        width=1000,
        height=800
    )

    return fig


def compute_layout(G, layout_type):
    """
    Compute node positions based on layout algorithm.

    Args:
        G: NetworkX DiGraph
        layout_type: 'hierarchical', 'force', or 'circular'

    Returns:
        dict mapping node_id -> (x, y) position
    """
    if layout_type == 'hierarchical':
        return hierarchical_layout(G)
    elif layout_type == 'force':
        return nx.spring_layout(G, k=0.5, iterations=50, seed=0)
    elif layout_type == 'circular':
        return nx.circular_layout(G)
    else:
        raise ValueError(f"Unknown layout type: {layout_type}")


def hierarchical_layout(G):
    """
    Layer a DAG by longest path from its sources.

    Every node is placed above all of its predecessors, so smaller closed sets
    end up at the bottom.

    Args:
        G: NetworkX DiGraph

    Returns:
        dict mapping node_id -> (x, y) position
    """
    if G.number_of_nodes() == 0:
        return {}

    levels = {}
    for node in nx.topological_sort(G):
        pred_levels = [levels[pred] for pred in G.predecessors(node)]
        levels[node] = max(pred_levels) + 1 if pred_levels else 0

    level_groups = {}
    for node, level in levels.items():
        level_groups.setdefault(level, []).append(node)

    pos = {}
    max_level = max(levels.values())
    for level, nodes in level_groups.items():
        y = level / max(max_level, 1)
        n_nodes = len(nodes)
        # Node IDs follow lectic order
        for i, node in enumerate(sorted(nodes)):
            x = i / (n_nodes - 1) if n_nodes > 1 else 0.5
            pos[node] = (x, y)

    return pos


def create_edge_trace(G, pos):
    """
    Create Plotly trace for edges.

    Args:
        G: NetworkX DiGraph
        pos: dict mapping node_id -> (x, y) position

    Returns:
        plotly.graph_objects.Scatter trace
    """
    edge_x = []
    edge_y = []

    for source, target in G.edges():
        x0, y0 = pos[source]
        x1, y1 = pos[target]
        edge_x.extend([x0, x1, None])
        edge_y.extend([y0, y1, None])

    return go.Scatter(
        x=edge_x,
        y=edge_y,
        line=dict(width=0.5, color='#888'),
        hoverinfo='none',
        mode='lines'
    )


def create_node_trace(poset, pos, color_by, base_size):
    """
    Create Plotly trace for nodes with hover information.

    Args:
        poset: ClosedSetPoset
        pos: dict mapping node_id -> (x, y) position
        color_by: Coloring scheme
        base_size: Base node size

    Returns:
        plotly.graph_objects.Scatter trace
    """
    G = poset.graph
    node_x = []
    node_y = []
    node_text = []
    node_color = []
    node_size = []

    for node in G.nodes():
        x, y = pos[node]
        node_x.append(x)
        node_y.append(y)
        node_text.append(create_hover_text(poset, node))
        node_color.append(get_node_color(poset, node, color_by))

        degree = G.in_degree(node) + G.out_degree(node)
        node_size.append(base_size + degree * 2)

    return go.Scatter(
        x=node_x,
        y=node_y,
        mode='markers',
        hoverinfo='text',
        text=node_text,
        marker=dict(
            size=node_size,
            color=node_color,
            colorscale='Viridis',
            line=dict(width=1, color='white')
        )
    )


def create_hover_text(poset, node_id):
    """HTML hover text for a node."""
    G = poset.graph
    lines = [
        f"<b>Node {node_id}</b>",
        poset.label(node_id),
        "",
        f"Size: {len(poset.get_closed_set(node_id))}",
        f"Lower covers: {G.in_degree(node_id)}",
        f"Upper covers: {G.out_degree(node_id)}",
    ]
    return "<br>".join(lines)


def get_node_color(poset, node_id, color_by):
    """
    Determine node color based on coloring scheme.

    Returns:
        number on the Viridis scale
    """
    if color_by == 'size':
        return len(poset.get_closed_set(node_id))
    elif color_by == 'order':
        return node_id
    return 0


def create_comparison_figure(posets, titles=None, layout='hierarchical'):
    """
    Create a side-by-side comparison of multiple posets.

    Args:
        posets: list of ClosedSetPoset objects
        titles: list of titles for each poset
        layout: Layout algorithm to use

    Returns:
        plotly.graph_objects.Figure with subplots
    """
    n_posets = len(posets)
    if titles is None:
        titles = [f"Poset {i+1}" for i in range(n_posets)]

    fig = make_subplots(
        rows=1,
        cols=n_posets,
        subplot_titles=titles,
        horizontal_spacing=0.05
    )

    for i, poset in enumerate(posets):
        pos = compute_layout(poset.graph, layout)
        fig.add_trace(create_edge_trace(poset.graph, pos), row=1, col=i + 1)
        fig.add_trace(create_node_trace(poset, pos, 'size', 10), row=1, col=i + 1)

    fig.update_layout(
        showlegend=False,
        hovermode='closest',
        height=600,
        width=400 * n_posets
    )
    fig.update_xaxes(showgrid=False, zeroline=False, showticklabels=False)
    fig.update_yaxes(showgrid=False, zeroline=False, showticklabels=False)

    return fig
