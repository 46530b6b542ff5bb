"""Offline rendering and clustering for runs without a Cytoscape desktop."""
import logging
from pathlib import Path

import community as community_louvain
import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
import pandas as pd
import seaborn as sns

from network import build_graph
from settings import CLUSTER_PALETTE, NODE_COLOR

logger = logging.getLogger(__name__)

sns.set_style("white")


def detect_clusters(G):
    if len(G) == 0:
        return {}

    node_to_cluster = {}
    global_cluster_id = 0

    # Isolated nodes get -1; Louvain runs per connected component so ids stay unique
    for component in sorted(nx.connected_components(G), key=len, reverse=True):
        if len(component) == 1:
            node = next(iter(component))
            node_to_cluster[node] = -1
            continue

        partition = community_louvain.best_partition(G.subgraph(component), random_state=42)
        local_to_global = {}
        for node, local_label in partition.items():
            if local_label not in local_to_global:
                local_to_global[local_label] = global_cluster_id
                global_cluster_id += 1
            node_to_cluster[node] = local_to_global[local_label]

    return node_to_cluster


def plot_network(G, title, output_path, clusters=None, pos=None, palette=CLUSTER_PALETTE):
    if pos is None:
        pos = nx.spring_layout(G, k=0.8 / np.sqrt(len(G.nodes()) + 1), iterations=100, seed=42)

    fig, ax = plt.subplots(figsize=(14, 10))

    edge_weights = [G[u][v].get('weight', 1.0) for u, v in G.edges()]
    edge_widths = [1 + 3 * (w / (max(edge_weights) + 1e-6)) for w in edge_weights] if edge_weights else 1
    nx.draw_networkx_edges(G, pos, width=edge_widths, alpha=0.25, ax=ax)

    degrees = dict(G.degree())
    node_sizes = [100 + degrees[n] * 50 for n in G.nodes()]

    if clusters:
        cluster_ids = sorted(set(c for c in clusters.values() if c >= 0))
        colors_palette = sns.color_palette(palette, max(len(cluster_ids), 1))
        cluster_to_color = {c: colors_palette[i] for i, c in enumerate(cluster_ids)}
        node_colors = [cluster_to_color.get(clusters.get(n, -1), (0.7, 0.7, 0.7)) for n in G.nodes()]
    else:
        node_colors = NODE_COLOR

    nx.draw_networkx_nodes(G, pos, node_size=node_sizes, node_color=node_colors, alpha=0.85, ax=ax)

    labels = {n: G.nodes[n].get('symbol', n) for n in G.nodes()}
    nx.draw_networkx_labels(G, pos, labels=labels, font_size=7, ax=ax,
                            bbox=dict(boxstyle='round,pad=0.2', fc='white', ec='none', alpha=0.7))

    ax.set_title(title, fontsize=18, fontweight='bold')
    ax.axis('off')
    plt.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Saved: {output_path}")

    return pos


def render_and_cluster(nodes, edges, figures_dir):
    """Same snapshots as the Cytoscape backend, drawn with networkx and Louvain."""
    figures_dir = Path(figures_dir)
    G = build_graph(nodes, edges)

    pos = plot_network(G, 'STRING Network', figures_dir / 'network_before_clustering.png')
    clusters = detect_clusters(G)
    plot_network(G, 'STRING Network Clusters', figures_dir / 'network_clusters.png',
                 clusters=clusters, pos=pos)

    assignments = pd.Series(clusters, name='cluster', dtype=int)
    assignments.index.name = 'id'
    logger.info(f"{len(set(c for c in clusters.values() if c >= 0))} Louvain clusters "
                f"over {len(assignments)} nodes")
    return assignments
