import logging
from pathlib import Path

import mygene
import pandas as pd

logger = logging.getLogger(__name__)


def load_gene_list(path):
    """Read gene symbols, one per line. Blank lines and '#' comments are skipped."""
    symbols = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            symbol = line.strip()
            if not symbol or symbol.startswith('#'):
                continue
            symbols.append(symbol)

    unique = list(dict.fromkeys(symbols))
    if len(unique) < len(symbols):
        logger.info(f"Dropped {len(symbols) - len(unique)} duplicate symbols")
    return unique


def cached_table(path, fetch, refresh=False):
    """
    Return the CSV at `path` if it exists, otherwise call `fetch()`
    and write its result there first.
    """
    path = Path(path)
    if path.exists() and not refresh:
        logger.info(f"Using cached table {path}")
        return pd.read_csv(path)

    df = fetch()
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info(f"Saved: {path} ({len(df)} rows)")
    return df


def _mygene_species(species):
    return 'human' if int(species) == 9606 else str(species)


def annotate_genes(gene_symbols, species=9606):
    mg = mygene.MyGeneInfo()
    # Query MyGene for gene names; return mapping symbol -> full name
    try:
        results = mg.querymany(list(gene_symbols), scopes='symbol', fields='name',
                               species=_mygene_species(species), verbose=False)
    except Exception as e:
        logger.warning(f"MyGene annotation failed, continuing without names: {e}")
        results = []

    annotations = {}
    for r in results:
        q = r.get('query')
        name = r.get('name')
        if q and name and q not in annotations:
            annotations[q] = name

    return annotations
