"""
STRING REST API client.

Maps gene symbols to STRING identifiers and retrieves the interactions
among them. See https://string-db.org/help/api/ for the endpoints.
"""
import io
import logging
import time

import pandas as pd
import requests

from network import canonical_edges
from settings import (
    NETWORK_TYPE, REQUIRED_SCORE, SPECIES, STRING_API_URL, STRING_CALLER_IDENTITY,
)

logger = logging.getLogger(__name__)

MAPPING_COLUMNS = ['query', 'string_id', 'preferred_name']
INTERACTION_COLUMNS = ['from', 'to', 'score']

# STRING asks clients to wait one second between calls
REQUEST_PAUSE = 1.0
_last_request = None


def _wait_for_turn():
    if _last_request is None:
        return
    wait = REQUEST_PAUSE - (time.monotonic() - _last_request)
    if wait > 0:
        time.sleep(wait)


def _string_request(method, params, output_format='tsv', timeout=60):
    global _last_request
    url = f"{STRING_API_URL}/{output_format}/{method}"
    data = dict(params, caller_identity=STRING_CALLER_IDENTITY)
    _wait_for_turn()
    try:
        response = requests.post(url, data=data, timeout=timeout)
    finally:
        _last_request = time.monotonic()
    response.raise_for_status()
    return response


def _read_tsv(text):
    if not text.strip():
        return pd.DataFrame()
    return pd.read_csv(io.StringIO(text), sep='\t')


def map_identifiers(symbols, species=SPECIES, limit=1, chunk_size=2000):
    """
    Map gene symbols to STRING identifiers.

    Returns a DataFrame with columns query, string_id, preferred_name.
    Symbols STRING cannot resolve are dropped.
    """
    symbols = list(symbols)
    frames = []
    for start in range(0, len(symbols), chunk_size):
        chunk = symbols[start:start + chunk_size]
        params = {
            'identifiers': '\r'.join(chunk),
            'species': species,
            'limit': limit,
            'echo_query': 1,
        }
        df = _read_tsv(_string_request('get_string_ids', params).text)
        if not df.empty:
            frames.append(df)

    if not frames:
        raise ValueError(f"None of the {len(symbols)} symbols mapped to STRING (species {species})")

    df = pd.concat(frames, ignore_index=True)
    mapping = df.rename(columns={
        'queryItem': 'query',
        'stringId': 'string_id',
        'preferredName': 'preferred_name',
    })[MAPPING_COLUMNS].drop_duplicates().reset_index(drop=True)

    unmapped = [s for s in symbols if s not in set(mapping['query'])]
    if unmapped:
        logger.warning(f"{len(unmapped)} symbols not found in STRING: {', '.join(unmapped[:20])}"
                       f"{'...' if len(unmapped) > 20 else ''}")
    logger.info(f"Mapped {mapping['query'].nunique()}/{len(symbols)} symbols to "
                f"{mapping['string_id'].nunique()} STRING IDs")
    return mapping


def fetch_interactions(string_ids, species=SPECIES, required_score=REQUIRED_SCORE,
                       network_type=NETWORK_TYPE):
    """Fetch the STRING interactions among `string_ids` as an undirected edge table."""
    string_ids = list(dict.fromkeys(string_ids))
    params = {
        'identifiers': '\r'.join(string_ids),
        'species': species,
        'required_score': required_score,
        'network_type': network_type,
    }
    df = _read_tsv(_string_request('network', params).text)
    if df.empty:
        logger.warning("STRING returned no interactions")
        return pd.DataFrame(columns=INTERACTION_COLUMNS)

    edges = df.rename(columns={'stringId_A': 'from', 'stringId_B': 'to'})[INTERACTION_COLUMNS]
    edges = canonical_edges(edges)
    logger.info(f"Retrieved {len(edges)} interactions among {len(string_ids)} proteins "
                f"(required_score={required_score})")
    return edges
