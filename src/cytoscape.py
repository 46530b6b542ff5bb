"""
Remote control of a running Cytoscape desktop through CyREST (py4cytoscape).

Clustering commands need the clusterMaker2 app installed in Cytoscape.
"""
import logging
from pathlib import Path

import pandas as pd
import py4cytoscape as p4c
import seaborn as sns

from settings import (
    CLUSTER_ALGORITHM, CLUSTER_COLUMN, CLUSTER_FLAGS, CLUSTER_PALETTE, CYTOSCAPE_BASE_URL,
    LAYOUT_PARAMS, NETWORK_COLLECTION, NETWORK_TITLE, NODE_COLOR, NODE_SHAPE, STYLE_NAME,
)

logger = logging.getLogger(__name__)


def _format_value(value):
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _format_args(params):
    return ' '.join(f"{key}={_format_value(value)}" for key, value in params.items())


def check_connection(base_url=CYTOSCAPE_BASE_URL):
    info = p4c.cytoscape_ping(base_url=base_url)
    logger.info(f"Connected to Cytoscape at {base_url}")
    return info


def create_network(nodes, edges, title=NETWORK_TITLE, collection=NETWORK_COLLECTION,
                   base_url=CYTOSCAPE_BASE_URL):
    suid = p4c.create_network_from_data_frames(nodes=nodes, edges=edges, title=title,
                                               collection=collection, base_url=base_url)
    logger.info(f"Created network '{title}' (SUID {suid}): {len(nodes)} nodes, {len(edges)} edges")
    return suid


def style_network(network, label_column='symbol', shape=NODE_SHAPE, color=NODE_COLOR,
                  style_name=STYLE_NAME, base_url=CYTOSCAPE_BASE_URL):
    p4c.set_node_label_mapping(label_column, style_name=style_name, network=network,
                               base_url=base_url)
    p4c.set_node_shape_default(shape, style_name=style_name, base_url=base_url)
    p4c.set_node_color_default(color, style_name=style_name, base_url=base_url)


def apply_layout(network, params=None, base_url=CYTOSCAPE_BASE_URL):
    params = LAYOUT_PARAMS if params is None else params
    layout = ' '.join(['force-directed', _format_args(params)]).strip()
    logger.info(f"Layout: {layout}")
    return p4c.layout_network(layout, network=network, base_url=base_url)


def cluster_command(network, algorithm=CLUSTER_ALGORITHM, flags=None):
    flags = CLUSTER_FLAGS if flags is None else flags
    args = _format_args(flags)
    return f"cluster {algorithm} {args} network=SUID:{network}".replace('  ', ' ')


def run_clustering(network, algorithm=CLUSTER_ALGORITHM, flags=None, base_url=CYTOSCAPE_BASE_URL):
    command = cluster_command(network, algorithm, flags)
    logger.info(f"Running: {command}")
    return p4c.commands_run(command, base_url=base_url)


def get_cluster_assignments(network, column=CLUSTER_COLUMN, base_url=CYTOSCAPE_BASE_URL):
    """Read the node table back and return cluster labels indexed by node name."""
    table = p4c.get_table_columns(table='node', columns=['name', column], network=network,
                                  base_url=base_url)
    table = table.dropna(subset=[column])
    assignments = pd.Series(table[column].astype(int).values, index=table['name'].astype(str),
                            name='cluster')
    assignments.index.name = 'id'
    logger.info(f"{assignments.nunique()} clusters over {len(assignments)} nodes")
    return assignments


def color_by_cluster(network, labels, column=CLUSTER_COLUMN, palette=CLUSTER_PALETTE,
                     style_name=STYLE_NAME, base_url=CYTOSCAPE_BASE_URL):
    values = sorted(set(int(label) for label in labels))
    if not values:
        return
    colors = sns.color_palette(palette, len(values)).as_hex()
    p4c.set_node_color_mapping(column, table_column_values=values,
                               colors=list(colors), mapping_type='d', default_color=NODE_COLOR,
                               style_name=style_name, network=network, base_url=base_url)


def export_snapshot(network, path, base_url=CYTOSCAPE_BASE_URL):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    p4c.fit_content(network=network, base_url=base_url)
    p4c.export_image(str(path.resolve()), type='PNG', network=network, base_url=base_url,
                     overwrite_file=True)
    logger.info(f"Saved: {path}")
    return path


def render_and_cluster(nodes, edges, figures_dir, algorithm=CLUSTER_ALGORITHM,
                       column=CLUSTER_COLUMN, base_url=CYTOSCAPE_BASE_URL):
    """Push the network to Cytoscape, snapshot it before and after clustering."""
    figures_dir = Path(figures_dir)
    check_connection(base_url)

    suid = create_network(nodes, edges, base_url=base_url)
    style_network(suid, base_url=base_url)
    apply_layout(suid, base_url=base_url)
    export_snapshot(suid, figures_dir / 'network_before_clustering.png', base_url=base_url)

    run_clustering(suid, algorithm=algorithm, base_url=base_url)
    assignments = get_cluster_assignments(suid, column=column, base_url=base_url)
    color_by_cluster(suid, assignments.values, column=column, base_url=base_url)
    export_snapshot(suid, figures_dir / 'network_clusters.png', base_url=base_url)
    return assignments
