#!/usr/bin/env python3

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent / 'src'))

import settings
from data import annotate_genes, cached_table, load_gene_list
from enrichment import enrich_clusters, enrichr_organism
from network import (
    build_edge_table, build_graph, build_node_table, cluster_modularity, compute_network_stats,
    summarize_clusters,
)
from string_db import fetch_interactions, map_identifiers


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Map genes to STRING, cluster the PPI network and run GO enrichment per cluster.")
    parser.add_argument("--genes", type=Path, default=settings.GENE_LIST_PATH,
                        help="Gene symbol list, one per line")
    parser.add_argument("--results-dir", type=Path, default=settings.RESULTS_DIR)
    parser.add_argument("--species", type=int, default=settings.SPECIES, help="NCBI taxonomy ID")
    parser.add_argument("--required-score", type=int, default=settings.REQUIRED_SCORE,
                        help="STRING combined score threshold (0-1000)")
    parser.add_argument("--backend", choices=["cytoscape", "networkx"], default="cytoscape",
                        help="Render and cluster in Cytoscape, or offline with networkx/Louvain")
    parser.add_argument("--cytoscape-url", default=settings.CYTOSCAPE_BASE_URL)
    parser.add_argument("--cluster-algorithm", default=settings.CLUSTER_ALGORITHM,
                        help="clusterMaker2 algorithm, e.g. glay or mcl")
    parser.add_argument("--min-cluster-size", type=int, default=settings.MIN_CLUSTER_SIZE,
                        help="Enrich clusters with more members than this")
    parser.add_argument("--no-annotate", action="store_true", help="Skip MyGene.info gene names")
    parser.add_argument("--refresh", action="store_true", help="Ignore cached STRING tables")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s - %(levelname)s - %(message)s")

    results_dir = args.results_dir
    cache_dir = results_dir / 'cache'
    tables_dir = results_dir / 'tables'
    figures_dir = results_dir / 'figures'
    tables_dir.mkdir(parents=True, exist_ok=True)

    print("STRING Network Clustering and GO Enrichment\n")

    print("Step 1: Loading gene list...")
    symbols = load_gene_list(args.genes)
    print(f"  {len(symbols)} symbols from {args.genes}")

    print("\nStep 2: Mapping symbols to STRING identifiers...")
    mapping = cached_table(cache_dir / 'string_mapping.csv',
                           lambda: map_identifiers(symbols, species=args.species),
                           refresh=args.refresh)

    print("\nStep 3: Fetching interactions...")
    interactions = cached_table(cache_dir / 'string_interactions.csv',
                                lambda: fetch_interactions(mapping['string_id'], species=args.species,
                                                           required_score=args.required_score),
                                refresh=args.refresh)

    print("\nStep 4: Building node and edge tables...")
    annotations = None if args.no_annotate else annotate_genes(mapping['query'].unique(), args.species)
    nodes = build_node_table(mapping, annotations)
    edges = build_edge_table(interactions, nodes)
    nodes.to_csv(tables_dir / 'nodes.csv', index=False)
    edges.to_csv(tables_dir / 'edges.csv', index=False)

    G = build_graph(nodes, edges)
    stats = compute_network_stats(G)
    print(f"  {stats['n_nodes']} nodes, {stats['n_edges']} edges, {stats['n_isolates']} isolated")

    print(f"\nStep 5: Rendering and clustering ({args.backend})...")
    if args.backend == 'cytoscape':
        import cytoscape
        assignments = cytoscape.render_and_cluster(
            nodes, edges, figures_dir, algorithm=args.cluster_algorithm,
            column=f"__{args.cluster_algorithm}Cluster", base_url=args.cytoscape_url)
    else:
        import visualize
        assignments = visualize.render_and_cluster(nodes, edges, figures_dir)

    assignments.rename('cluster').to_frame().join(nodes.set_index('id')['symbol']) \
        .reset_index().to_csv(tables_dir / 'cluster_assignments.csv', index=False)
    cluster_summary = summarize_clusters(G, assignments, nodes)
    cluster_summary.to_csv(tables_dir / 'cluster_summary.csv', index=False)

    stats['n_clusters'] = int((cluster_summary['cluster'] >= 0).sum())
    stats['modularity'] = cluster_modularity(G, assignments)
    pd.DataFrame({'Metric': list(stats), 'Value': list(stats.values())}) \
        .to_csv(tables_dir / 'network_summary.csv', index=False)
    print(f"  {stats['n_clusters']} clusters, modularity {stats['modularity']:.3f}")

    print("\nStep 6: GO enrichment per cluster...")
    organism = enrichr_organism(args.species)
    if organism is None:
        print(f"  Skipped: no GO libraries for species {args.species}")
    else:
        enrichment = enrich_clusters(assignments, nodes, tables_dir / 'enrichment',
                                     figures_dir / 'enrichment', min_size=args.min_cluster_size,
                                     organism=organism)
        print(f"  {enrichment['cluster'].nunique()} clusters enriched, {len(enrichment)} term rows")

    print("\nAnalysis complete")


if __name__ == '__main__':
    main()
