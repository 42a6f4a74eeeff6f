import pytest
import requests

from solar_calculator import api_calls
from solar_calculator.api_calls import get_nrel_production_factor, suggest_production_factor


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(response=None, exc=None):
        def _get(url, params=None, timeout=None):
            calls.append({'url': url, 'params': params, 'timeout': timeout})
            if exc is not None:
                raise exc
            return response
        monkeypatch.setattr(api_calls.requests, 'get', _get)
        return calls

    return install


def test_production_factor_from_pvwatts(fake_get):
    calls = fake_get(FakeResponse({'outputs': {'ac_annual': 1612.4}}))

    assert get_nrel_production_factor(39.74, -104.99, 'KEY') == pytest.approx(1612.4)
    assert calls[0]['url'] == api_calls.PVWATTS_URL
    assert calls[0]['params']['system_capacity'] == 1
    assert calls[0]['params']['api_key'] == 'KEY'


def test_timeout_returns_none(fake_get):
    fake_get(exc=requests.exceptions.Timeout())
    assert get_nrel_production_factor(39.74, -104.99) is None


def test_http_error_returns_none(fake_get):
    fake_get(FakeResponse({}, status_code=403))
    assert get_nrel_production_factor(39.74, -104.99) is None


def test_missing_outputs_returns_none(fake_get):
    fake_get(FakeResponse({'errors': ['bad request']}))
    assert get_nrel_production_factor(39.74, -104.99) is None


def test_suggestion_is_rounded(fake_get):
    fake_get(FakeResponse({'outputs': {'ac_annual': 1612.4}}))
    assert suggest_production_factor(39.74, -104.99) == 1612


@pytest.mark.parametrize("ac_annual, expected", [(950.0, 1200), (2150.0, 1900)])
def test_suggestion_clamped_to_valid_range(fake_get, ac_annual, expected):
    fake_get(FakeResponse({'outputs': {'ac_annual': ac_annual}}))
    assert suggest_production_factor(47.6, -122.3) == expected


def test_suggestion_none_when_lookup_fails(fake_get):
    fake_get(exc=requests.exceptions.ConnectionError())
    assert suggest_production_factor(39.74, -104.99) is None
