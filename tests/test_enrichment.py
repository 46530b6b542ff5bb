"""Tests for per-cluster GO enrichment, with Enrichr replaced by a stub."""

from types import SimpleNamespace

import pandas as pd
import pytest

import enrichment


def _results(adjusted):
    return pd.DataFrame({
        "Gene_set": ["lib"] * len(adjusted),
        "Term": [f"term {i}" for i in range(len(adjusted))],
        "Overlap": ["3/50"] * len(adjusted),
        "P-value": adjusted,
        "Adjusted P-value": adjusted,
        "Combined Score": [10.0] * len(adjusted),
        "Genes": ["A;B;C"] * len(adjusted),
    })


@pytest.fixture
def fake_gp(monkeypatch):
    calls = SimpleNamespace(enrichr=[], dotplot=[])

    def enrichr(gene_list, gene_sets, **kwargs):
        calls.enrichr.append((gene_list, gene_sets))
        return SimpleNamespace(results=_results([0.001, 0.2]))

    def dotplot(df, **kwargs):
        calls.dotplot.append(kwargs)
        open(kwargs["ofname"], "wb").close()

    monkeypatch.setattr(enrichment, "gp", SimpleNamespace(enrichr=enrichr, dotplot=dotplot))
    return calls


@pytest.fixture
def clustered():
    ids = [f"n{i}" for i in range(12)]
    labels = [1] * 6 + [2] * 5 + [-1]
    assignments = pd.Series(labels, index=ids)
    nodes = pd.DataFrame({"id": ids, "symbol": [f"G{i}" for i in range(12)]})
    return assignments, nodes


def test_enrichr_organism_known_and_unsupported_species(caplog) -> None:
    assert enrichment.enrichr_organism(9606) == "human"
    assert enrichment.enrichr_organism(10090) == "mouse"

    with caplog.at_level("WARNING", logger="enrichment"):
        assert enrichment.enrichr_organism(7227) is None
    assert "7227" in caplog.text


def test_clusters_to_enrich_requires_more_than_min_size() -> None:
    assignments = pd.Series([3] * 7 + [1] * 6 + [2] * 5 + [-1] * 9)

    assert enrichment.clusters_to_enrich(assignments, min_size=5) == [3, 1]


def test_enrich_clusters_calls_each_aspect_once(fake_gp, clustered, tmp_path) -> None:
    assignments, nodes = clustered

    got = enrichment.enrich_clusters(assignments, nodes, tmp_path / "tables", tmp_path / "figures")

    assert [library for _, library in fake_gp.enrichr] == list(enrichment.GO_ASPECTS.values())
    assert fake_gp.enrichr[0][0] == ["G0", "G1", "G2", "G3", "G4", "G5"]
    assert set(got["aspect"]) == {"BP", "CC", "MF"}
    assert set(got["cluster"]) == {1}
    assert (tmp_path / "tables" / "cluster_1_BP.csv").exists()
    assert (tmp_path / "tables" / "enrichment_all.csv").exists()
    assert (tmp_path / "figures" / "cluster_1_MF.png").exists()
    assert len(fake_gp.dotplot) == 3


def test_enrich_clusters_with_no_eligible_cluster(fake_gp, clustered, tmp_path) -> None:
    assignments, nodes = clustered

    got = enrichment.enrich_clusters(assignments, nodes, tmp_path, tmp_path, min_size=10)

    assert got.empty
    assert fake_gp.enrichr == []


def test_plot_dotplot_skips_when_nothing_is_significant(fake_gp, tmp_path) -> None:
    got = enrichment.plot_dotplot(_results([0.3, 0.6]), "Cluster 1 GO BP", tmp_path / "x.png")

    assert got is None
    assert fake_gp.dotplot == []
