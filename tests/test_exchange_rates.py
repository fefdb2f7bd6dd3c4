"""Tests for the exchange-rate client and background fetcher."""

import threading
from concurrent.futures import Executor, Future
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from finledger.domain.exchange_rates import (
    DEFAULT_RATE_API_URL,
    UNAVAILABLE,
    ExchangeRateClient,
    RateFetcher,
    create_exchange_rate_client,
)


def _response(status_code=200, payload=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def _client(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return ExchangeRateClient(base_url="https://rates.test/latest/", timeout=3, session=session), session


class ManualExecutor(Executor):
    """Executor that runs submitted jobs only when asked, in any order."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run(self, index):
        future, fn, args, kwargs = self.jobs[index]
        future.set_result(fn(*args, **kwargs))
        return future


class TestExchangeRateClient:
    def test_returns_rate_from_payload(self):
        client, session = _client(_response(payload={"base": "USD", "rates": {"TRY": 32.45}}))

        assert client.get_rate("usd", "try") == Decimal("32.45")
        session.get.assert_called_once_with("https://rates.test/latest/USD", timeout=3)

    def test_same_currency_skips_network(self):
        client, session = _client(_response(payload={}))

        assert client.get_rate("EUR", "EUR") == Decimal("1")
        session.get.assert_not_called()

    def test_network_error_is_unavailable(self):
        client, _ = _client(error=requests.ConnectionError("boom"))

        assert client.get_rate("USD", "TRY") is UNAVAILABLE

    def test_timeout_is_unavailable(self):
        client, _ = _client(error=requests.Timeout("slow"))

        assert client.get_rate("USD", "TRY") is UNAVAILABLE

    def test_non_200_is_unavailable(self):
        client, _ = _client(_response(status_code=503, payload={"rates": {"TRY": 30}}))

        assert client.get_rate("USD", "TRY") is UNAVAILABLE

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"rates": {}},
            {"rates": {"EUR": 0.9}},
            {"rates": {"TRY": None}},
            {"rates": {"TRY": "n/a"}},
            {"rates": {"TRY": 0}},
            {"rates": {"TRY": -2}},
            {"rates": {"TRY": True}},
            {"rates": None},
            [],
        ],
    )
    def test_unusable_payload_is_unavailable(self, payload):
        client, _ = _client(_response(payload=payload))

        assert client.get_rate("USD", "TRY") is UNAVAILABLE

    def test_invalid_json_is_unavailable(self):
        client, _ = _client(_response(json_error=ValueError("not json")))

        assert client.get_rate("USD", "TRY") is UNAVAILABLE

    def test_unavailable_is_falsy(self):
        assert not UNAVAILABLE


class TestRateFetcher:
    def test_delivers_latest_result(self):
        client, _ = _client(_response(payload={"rates": {"TRY": 35.2}}))
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        results = []

        future = fetcher.request("record-1", "EUR", "TRY", results.append)
        executor.run(0)

        assert future.result() is True
        assert results == [Decimal("35.2")]

    def test_stale_result_is_dropped(self):
        client = MagicMock()
        rates = {"USD": Decimal("30"), "EUR": Decimal("35")}
        client.get_rate.side_effect = lambda from_currency, to_currency: rates[from_currency]
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        results = []

        first = fetcher.request("record-1", "USD", "TRY", results.append)
        second = fetcher.request("record-1", "EUR", "TRY", results.append)
        # the newer request finishes first; the older must not overwrite it
        executor.run(1)
        executor.run(0)

        assert second.result() is True
        assert first.result() is False
        assert results == [Decimal("35")]

    def test_newer_result_wins_while_older_callback_runs(self):
        client = MagicMock()
        rates = {"USD": Decimal("30"), "EUR": Decimal("35")}
        client.get_rate.side_effect = lambda from_currency, to_currency: rates[from_currency]
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        committed = []
        entered = threading.Event()
        release = threading.Event()

        def slow_commit(rate):
            entered.set()
            release.wait(timeout=5)
            committed.append(("old", rate))

        fetcher.request("record-1", "USD", "TRY", slow_commit)
        old = threading.Thread(target=executor.run, args=(0,))
        old.start()
        assert entered.wait(timeout=5)

        def newer():
            fetcher.request("record-1", "EUR", "TRY", lambda rate: committed.append(("new", rate)))
            executor.run(1)

        new = threading.Thread(target=newer)
        new.start()
        new.join(timeout=0.2)
        release.set()
        old.join(timeout=5)
        new.join(timeout=5)

        assert committed == [("old", Decimal("30")), ("new", Decimal("35"))]

    def test_settled_keys_are_forgotten(self):
        client = MagicMock()
        client.get_rate.return_value = Decimal("2")
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)

        fetcher.request("a", "USD", "TRY", lambda rate: None)
        fetcher.request("b", "USD", "TRY", lambda rate: None)
        assert sorted(fetcher.pending_keys()) == ["a", "b"]

        executor.run(0)
        fetcher.cancel("b")

        assert fetcher.pending_keys() == []

    def test_stale_result_dropped_after_key_is_reused(self):
        client = MagicMock()
        client.get_rate.return_value = Decimal("2")
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        results = []

        fetcher.request("a", "USD", "TRY", lambda rate: results.append("first"))
        fetcher.request("a", "USD", "TRY", lambda rate: results.append("second"))
        executor.run(1)
        fetcher.request("a", "USD", "TRY", lambda rate: results.append("third"))

        assert executor.run(0).result() is False
        assert executor.run(2).result() is True
        assert results == ["second", "third"]

    def test_keys_are_independent(self):
        client = MagicMock()
        client.get_rate.return_value = Decimal("2")
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        results = []

        fetcher.request("a", "USD", "TRY", lambda rate: results.append(("a", rate)))
        fetcher.request("b", "USD", "TRY", lambda rate: results.append(("b", rate)))
        executor.run(0)
        executor.run(1)

        assert sorted(results) == [("a", Decimal("2")), ("b", Decimal("2"))]

    def test_cancel_drops_pending_result(self):
        client = MagicMock()
        client.get_rate.return_value = Decimal("2")
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        results = []

        fetcher.request("a", "USD", "TRY", results.append)
        fetcher.cancel("a")

        assert executor.run(0).result() is False
        assert results == []

    def test_unavailable_result_is_delivered(self):
        client = MagicMock()
        client.get_rate.return_value = UNAVAILABLE
        executor = ManualExecutor()
        fetcher = RateFetcher(client, executor=executor)
        results = []

        fetcher.request("a", "USD", "TRY", results.append)
        executor.run(0)

        assert results == [UNAVAILABLE]

    def test_default_thread_pool(self):
        client = MagicMock()
        client.get_rate.return_value = Decimal("3")
        fetcher = RateFetcher(client)
        results = []
        try:
            assert fetcher.request("a", "USD", "TRY", results.append).result(timeout=5) is True
        finally:
            fetcher.shutdown()

        assert results == [Decimal("3")]


def test_factory_reads_environment(monkeypatch):
    monkeypatch.setenv("FINLEDGER_RATE_API_URL", "https://example.test/rates")
    monkeypatch.setenv("FINLEDGER_RATE_TIMEOUT", "2.5")

    client = create_exchange_rate_client()

    assert client.base_url == "https://example.test/rates"
    assert client.timeout == 2.5


def test_factory_defaults(monkeypatch):
    monkeypatch.delenv("FINLEDGER_RATE_API_URL", raising=False)
    monkeypatch.setenv("FINLEDGER_RATE_TIMEOUT", "soon")

    client = create_exchange_rate_client()

    assert client.base_url == DEFAULT_RATE_API_URL
    assert client.timeout == 10.0
