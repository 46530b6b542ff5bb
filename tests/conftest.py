import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


@pytest.fixture
def mapping():
    return pd.DataFrame({
        'query': ['TP53', 'MDM2', 'CDKN1A', 'P53', 'ATM'],
        'string_id': ['9606.P1', '9606.P2', '9606.P3', '9606.P1', '9606.P4'],
        'preferred_name': ['TP53', 'MDM2', 'CDKN1A', 'TP53', 'ATM'],
    })


@pytest.fixture
def interactions():
    return pd.DataFrame({
        'from': ['9606.P2', '9606.P1', '9606.P1', '9606.P3'],
        'to': ['9606.P1', '9606.P2', '9606.P3', '9606.P3'],
        'score': [0.9, 0.95, 0.7, 0.5],
    })


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests
            raise requests.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def fake_response():
    return FakeResponse
