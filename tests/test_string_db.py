"""Tests for the STRING API client."""

import pytest
import requests

import string_db

IDS_TSV = (
    "queryIndex\tqueryItem\tstringId\tncbiTaxonId\ttaxonName\tpreferredName\tannotation\n"
    "0\tTP53\t9606.ENSP00000269305\t9606\tHomo sapiens\tTP53\tCellular tumor antigen p53\n"
    "1\tMDM2\t9606.ENSP00000258149\t9606\tHomo sapiens\tMDM2\tE3 ubiquitin-protein ligase Mdm2\n"
)

NETWORK_TSV = (
    "stringId_A\tstringId_B\tpreferredName_A\tpreferredName_B\tncbiTaxonId\tscore\n"
    "9606.ENSP00000269305\t9606.ENSP00000258149\tTP53\tMDM2\t9606\t0.999\n"
    "9606.ENSP00000258149\t9606.ENSP00000269305\tMDM2\tTP53\t9606\t0.999\n"
)


@pytest.fixture(autouse=True)
def fresh_request_clock(monkeypatch):
    monkeypatch.setattr(string_db, "_last_request", None)


@pytest.fixture
def posts(monkeypatch, fake_response):
    calls = []
    replies = {"get_string_ids": IDS_TSV, "network": NETWORK_TSV}

    def fake_post(url, data=None, timeout=None):
        calls.append((url, data))
        return fake_response(replies[url.rsplit("/", 1)[-1]])

    monkeypatch.setattr(string_db.requests, "post", fake_post)
    monkeypatch.setattr(string_db.time, "sleep", lambda seconds: None)
    return calls


def test_map_identifiers_drops_unmapped_symbols(posts) -> None:
    got = string_db.map_identifiers(["TP53", "MDM2", "NOTAGENE"], species=9606)

    assert got.columns.tolist() == ["query", "string_id", "preferred_name"]
    assert got["query"].tolist() == ["TP53", "MDM2"]
    url, params = posts[0]
    assert url.endswith("/tsv/get_string_ids")
    assert params["identifiers"] == "TP53\rMDM2\rNOTAGENE"
    assert params["echo_query"] == 1
    assert params["caller_identity"] == string_db.STRING_CALLER_IDENTITY


def test_map_identifiers_chunks_large_inputs(posts) -> None:
    string_db.map_identifiers(["TP53", "MDM2", "ATM"], chunk_size=2)

    assert len(posts) == 2
    assert posts[1][1]["identifiers"] == "ATM"


def test_map_identifiers_raises_when_nothing_maps(monkeypatch, fake_response) -> None:
    monkeypatch.setattr(string_db.requests, "post", lambda url, data=None, timeout=None: fake_response(""))

    with pytest.raises(ValueError):
        string_db.map_identifiers(["NOTAGENE"])


def test_fetch_interactions_returns_undirected_unique_edges(posts) -> None:
    got = string_db.fetch_interactions(["9606.ENSP00000269305", "9606.ENSP00000258149"],
                                       required_score=700)

    assert got.to_dict("records") == [
        {"from": "9606.ENSP00000258149", "to": "9606.ENSP00000269305", "score": 0.999},
    ]
    assert posts[0][1]["required_score"] == 700


def test_fetch_interactions_empty_response(monkeypatch, fake_response) -> None:
    monkeypatch.setattr(string_db.requests, "post", lambda url, data=None, timeout=None: fake_response(""))

    got = string_db.fetch_interactions(["9606.P1"])

    assert got.empty
    assert got.columns.tolist() == ["from", "to", "score"]


def test_http_errors_propagate(monkeypatch, fake_response) -> None:
    monkeypatch.setattr(string_db.requests, "post",
                        lambda url, data=None, timeout=None: fake_response("", status_code=500))

    with pytest.raises(requests.HTTPError):
        string_db.map_identifiers(["TP53"])


def test_successive_calls_are_paused(monkeypatch, fake_response) -> None:
    events = []
    replies = {"get_string_ids": IDS_TSV, "network": NETWORK_TSV}

    def fake_post(url, data=None, timeout=None):
        method = url.rsplit("/", 1)[-1]
        events.append(method)
        return fake_response(replies[method])

    monkeypatch.setattr(string_db.requests, "post", fake_post)
    monkeypatch.setattr(string_db.time, "monotonic", lambda: 100.0)
    monkeypatch.setattr(string_db.time, "sleep", lambda seconds: events.append(("sleep", seconds)))

    mapping = string_db.map_identifiers(["TP53", "MDM2"])
    string_db.fetch_interactions(mapping["string_id"])

    assert events == ["get_string_ids", ("sleep", string_db.REQUEST_PAUSE), "network"]
