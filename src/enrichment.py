"""
GO over-representation analysis per network cluster.

Enrichr (through gseapy) runs once per ontology aspect for every cluster
above the size threshold; each result gets a table and a dot-plot.
"""
import logging
from pathlib import Path

import gseapy as gp
import matplotlib.pyplot as plt
import pandas as pd

from settings import (
    DOTPLOT_TOP_TERMS, ENRICHMENT_CUTOFF, ENRICHR_ORGANISM, ENRICHR_ORGANISMS, GO_ASPECTS,
    MIN_CLUSTER_SIZE,
)

logger = logging.getLogger(__name__)


def enrichr_organism(species):
    """Enrichr organism for an NCBI taxonomy ID, or None when no GO library covers it."""
    organism = ENRICHR_ORGANISMS.get(species)
    if organism is None:
        logger.warning(f"No Enrichr GO libraries for species {species}; "
                       f"supported: {', '.join(map(str, ENRICHR_ORGANISMS))}")
    return organism


def clusters_to_enrich(assignments, min_size=MIN_CLUSTER_SIZE):
    """Cluster labels with more than `min_size` members, largest first. Label -1 is never enriched."""
    sizes = assignments[assignments >= 0].value_counts()
    sizes = sizes[sizes > min_size]
    return sorted(sizes.index, key=lambda label: (-sizes[label], label))


def enrich_genes(genes, library, organism=ENRICHR_ORGANISM, cutoff=ENRICHMENT_CUTOFF):
    enr = gp.enrichr(gene_list=list(genes), gene_sets=library, organism=organism,
                     outdir=None, no_plot=True, cutoff=cutoff)
    return enr.results.copy()


def plot_dotplot(results, title, output_path, cutoff=ENRICHMENT_CUTOFF, top_term=DOTPLOT_TOP_TERMS):
    """Dot-plot of the significant terms; returns None when no term passes `cutoff`."""
    if results.empty or not (results['Adjusted P-value'] <= cutoff).any():
        logger.info(f"No terms below adjusted p {cutoff} for {title}, skipping dot-plot")
        return None

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    gp.dotplot(results, column='Adjusted P-value', title=title, cutoff=cutoff,
               top_term=top_term, figsize=(6, 8), ofname=str(output_path))
    plt.close('all')
    logger.info(f"Saved: {output_path}")
    return output_path


def enrich_clusters(assignments, nodes, tables_dir, figures_dir, min_size=MIN_CLUSTER_SIZE,
                    aspects=None, organism=ENRICHR_ORGANISM, cutoff=ENRICHMENT_CUTOFF):
    """
    Run GO enrichment for every cluster larger than `min_size`.

    Args:
        assignments: cluster label per node id
        nodes: node table; its 'symbol' column supplies the gene names sent to Enrichr
        tables_dir: directory for per-cluster/per-aspect result tables
        figures_dir: directory for the dot-plots

    Returns:
        All result rows concatenated, with 'cluster' and 'aspect' columns.
    """
    aspects = GO_ASPECTS if aspects is None else aspects
    tables_dir = Path(tables_dir)
    figures_dir = Path(figures_dir)
    tables_dir.mkdir(parents=True, exist_ok=True)

    symbols = nodes.set_index('id')['symbol']
    labels = clusters_to_enrich(assignments, min_size)
    logger.info(f"{len(labels)} clusters with more than {min_size} members")

    frames = []
    for label in labels:
        members = assignments.index[assignments == label]
        genes = sorted(symbols.reindex(members).dropna().unique())
        for aspect, library in aspects.items():
            logger.info(f"Cluster {label} ({len(genes)} genes): {library}")
            results = enrich_genes(genes, library, organism=organism, cutoff=cutoff)
            results.insert(0, 'aspect', aspect)
            results.insert(0, 'cluster', int(label))

            stem = f"cluster_{label}_{aspect}"
            results.to_csv(tables_dir / f"{stem}.csv", index=False)
            plot_dotplot(results, f"Cluster {label} GO {aspect}", figures_dir / f"{stem}.png",
                         cutoff=cutoff)
            frames.append(results)

    if not frames:
        return pd.DataFrame(columns=['cluster', 'aspect'])

    combined = pd.concat(frames, ignore_index=True)
    combined.to_csv(tables_dir / 'enrichment_all.csv', index=False)
    return combined
