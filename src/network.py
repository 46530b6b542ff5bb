import logging

import community as community_louvain
import networkx as nx
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def canonical_edges(interactions):
    """Store each undirected pair once as (from < to), keeping its highest score."""
    if interactions.empty:
        return interactions.reset_index(drop=True)

    df = interactions.copy()
    a = df['from'].astype(str)
    b = df['to'].astype(str)
    df['from'] = np.where(a <= b, a, b)
    df['to'] = np.where(a <= b, b, a)
    df = df[df['from'] != df['to']]

    if 'score' in df.columns:
        df = df.sort_values('score', ascending=False)
    df = df.drop_duplicates(subset=['from', 'to'], keep='first')
    return df.sort_values(['from', 'to']).reset_index(drop=True)


def build_node_table(mapping, annotations=None):
    # Several queries can hit the same STRING ID; the first one labels the node
    nodes = mapping.drop_duplicates(subset='string_id', keep='first')
    nodes = nodes.rename(columns={'string_id': 'id', 'query': 'symbol'})
    nodes = nodes[['id', 'symbol', 'preferred_name']].reset_index(drop=True)
    if annotations:
        nodes['description'] = nodes['symbol'].map(annotations).fillna('')
    return nodes


def build_edge_table(interactions, nodes):
    """Edge table for Cytoscape. Edges with an endpoint outside `nodes` are dropped."""
    edges = canonical_edges(interactions)
    if not edges.empty:
        node_ids = set(nodes['id'].astype(str))
        known = edges['from'].isin(node_ids) & edges['to'].isin(node_ids)
        if not known.all():
            logger.warning(f"Dropped {int((~known).sum())} edges with endpoints outside the node table")
        edges = edges[known]
    return pd.DataFrame({
        'source': edges['from'].values,
        'target': edges['to'].values,
        'interaction': 'pp',
        'weight': edges['score'].values if 'score' in edges.columns else 1.0,
    })


def build_graph(nodes, edges):
    G = nx.Graph()
    for row in nodes.itertuples(index=False):
        G.add_node(row.id, symbol=row.symbol)
    for row in edges.itertuples(index=False):
        if row.source not in G or row.target not in G:
            logger.debug(f"Skipping edge with unknown endpoint: {row.source} - {row.target}")
            continue
        G.add_edge(row.source, row.target, weight=float(row.weight))
    return G


def compute_network_stats(G):
    n_nodes = G.number_of_nodes()
    n_edges = G.number_of_edges()
    degrees = [d for _, d in G.degree()]

    return {
        'n_nodes': n_nodes,
        'n_edges': n_edges,
        'density': nx.density(G) if n_nodes > 1 else 0.0,
        'avg_degree': float(np.mean(degrees)) if degrees else 0.0,
        'n_components': nx.number_connected_components(G) if n_nodes else 0,
        'n_isolates': nx.number_of_isolates(G),
    }


def summarize_clusters(G, assignments, nodes):
    """One row per cluster label: size, internal edges, density and member symbols."""
    symbols = nodes.set_index('id')['symbol']
    rows = []
    for label, members in assignments.groupby(assignments).groups.items():
        members = list(members)
        sub = G.subgraph(members)
        rows.append({
            'cluster': int(label),
            'size': len(members),
            'internal_edges': sub.number_of_edges(),
            'density': nx.density(sub) if len(members) > 1 else 0.0,
            'members': ', '.join(sorted(symbols.reindex(members).fillna('').astype(str))),
        })

    summary = pd.DataFrame(rows, columns=['cluster', 'size', 'internal_edges', 'density', 'members'])
    return summary.sort_values(['size', 'cluster'], ascending=[False, True]).reset_index(drop=True)


def cluster_modularity(G, assignments):
    # Unclustered nodes (label -1) are left out of the partition
    partition = {node: int(label) for node, label in assignments.items()
                 if label >= 0 and node in G}
    sub = G.subgraph(partition)
    if sub.number_of_edges() == 0:
        return 0.0
    return community_louvain.modularity(partition, sub)
