"""Tests for proxy result parsing and the PAC interpreters."""

import logging
import threading
import time
import types
from datetime import datetime, timezone

import pytest

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pacproxy import (
    ConnectionType,
    FixedClock,
    InvalidProxyResultError,
    PacInterpreter,
    PacInterpreterError,
    PacUsageError,
    ProxyDirective,
    ProxyResult,
    ReloadablePacInterpreter,
    StaticResolver,
)


def websense_sample(pac, url, host):
    """Route by the subnet of the machine running the script."""
    js = pac.bindings()
    if js["isInNet"](js["myIpAddress"](), "1.1.0.0", "255.0.0.0"):
        return "PROXY wcg1.example.com:8080; PROXY wcg2.example.com:8080"
    if js["isInNet"](js["myIpAddress"](), "1.3.0.0", "255.0.0.0"):
        return "PROXY wcg2.example.com:8080; PROXY wcg1.example.com:8080"
    return "DIRECT"


def corporate(pac, url, host):
    if pac.is_plain_host_name(host) or pac.dns_domain_is(host, ".corp"):
        return "DIRECT"
    if pac.sh_exp_match(url, "https://*.example.com/*"):
        return "PROXY 4.5.6.7:8080; PROXY 7.8.9.10:8080"
    return "SOCKS5 socks.corp:1080; DIRECT"


# =============================================================================
# ConnectionType / ProxyDirective
# =============================================================================


class TestProxyDirective:
    """Tests for single-directive parsing."""

    def test_connection_type_lookup(self):
        """Connection types are looked up case-insensitively."""
        assert ConnectionType.from_value("socks5") is ConnectionType.SOCKS5
        with pytest.raises(ValueError):
            ConnectionType.from_value("FTP")

    def test_parse_direct(self):
        """DIRECT has no proxy."""
        directive = ProxyDirective.parse(" DIRECT ")
        assert directive.is_direct
        assert directive.proxy_host_and_port is None
        assert directive.proxy_host is None
        assert directive.proxy_port is None
        assert str(directive) == "DIRECT"

    def test_parse_none_is_direct(self):
        """None parses as DIRECT."""
        assert ProxyDirective.parse(None) == ProxyDirective(ConnectionType.DIRECT)

    def test_parse_proxy(self):
        """Proxy directives carry host and port."""
        directive = ProxyDirective.parse("PROXY 10.1.1.1:8080")
        assert directive.is_proxy
        assert directive.connection_type is ConnectionType.PROXY
        assert directive.proxy_host == "10.1.1.1"
        assert directive.proxy_port == 8080
        assert str(directive) == "PROXY 10.1.1.1:8080"

    def test_parse_case_insensitive(self):
        """Connection type names are case-insensitive."""
        assert ProxyDirective.parse("socks5 h:1080").connection_type is ConnectionType.SOCKS5

    def test_parse_invalid(self):
        """Unknown types and missing proxies are rejected."""
        for value in ["", "FTP host:21", "PROXY", "PROXY a:1 b:2"]:
            with pytest.raises(InvalidProxyResultError):
                ProxyDirective.parse(value)

    def test_proxy_required(self):
        """Non-DIRECT directives cannot be built without a proxy."""
        with pytest.raises(ValueError):
            ProxyDirective(ConnectionType.PROXY)


# =============================================================================
# ProxyResult
# =============================================================================


class TestProxyResult:
    """Tests for whole-result parsing."""

    def test_parse_list(self):
        """Directives are split on semicolons in order."""
        result = ProxyResult.parse("PROXY 4.5.6.7:8080; PROXY 7.8.9.10:8080")
        assert len(result) == 2
        assert result.first().proxy_host_and_port == "4.5.6.7:8080"
        assert result.get(1).proxy_host_and_port == "7.8.9.10:8080"
        assert result.random() in set(result)
        assert str(result) == "PROXY 4.5.6.7:8080; PROXY 7.8.9.10:8080"

    def test_parse_none(self):
        """None is a single DIRECT."""
        result = ProxyResult.parse(None)
        assert len(result) == 1
        assert result.first().is_direct

    def test_trailing_separator(self):
        """A terminating semicolon does not add a directive."""
        assert len(ProxyResult.parse("PROXY a:1;")) == 1

    def test_empty_middle_directive(self):
        """An empty directive between separators is invalid."""
        with pytest.raises(InvalidProxyResultError):
            ProxyResult.parse("PROXY a:1; ; DIRECT")

    def test_first_proxy(self):
        """first_proxy skips DIRECT entries."""
        result = ProxyResult.parse("DIRECT; SOCKS s:1080")
        assert result.first_proxy() == ProxyDirective(ConnectionType.SOCKS, "s:1080")
        assert ProxyResult.parse("DIRECT").first_proxy() is None

    def test_normalize(self):
        """normalize drops duplicates and keeps order."""
        result = ProxyResult.parse("PROXY a:1; DIRECT; PROXY a:1; PROXY b:2; DIRECT")
        assert str(result.normalize()) == "PROXY a:1; DIRECT; PROXY b:2"
        assert len(result) == 5


# =============================================================================
# PacInterpreter
# =============================================================================


class TestPacInterpreter:
    """Tests for evaluating PAC scripts."""

    def test_sample_script_proxy(self):
        """A machine in 1.x gets the wcg proxies."""
        interpreter = PacInterpreter(
            websense_sample, resolver=StaticResolver(local_address="1.1.5.5")
        )
        result = interpreter.find_proxy_for_url("https://example.com")
        assert [d.proxy_host for d in result] == ["wcg1.example.com", "wcg2.example.com"]

    def test_sample_script_direct(self):
        """Other machines go direct."""
        interpreter = PacInterpreter(
            websense_sample, resolver=StaticResolver(local_address="10.0.0.1")
        )
        result = interpreter.find_proxy_for_url("https://example.com")
        assert len(result) == 1
        assert result.first().is_direct

    def test_host_parsed_from_url(self):
        """The host passed to the script comes from the URL."""
        seen = []

        def script(pac, url, host):
            seen.append((url, host))
            return "DIRECT"

        interpreter = PacInterpreter(script, resolver=StaticResolver())
        interpreter.find_proxy_for_url("https://www.Example.com:8443/path?q=1")
        interpreter.find_proxy_for_url("https://ignored.example/", "given.host")

        assert seen == [
            ("https://www.Example.com:8443/path?q=1", "www.example.com"),
            ("https://ignored.example/", "given.host"),
        ]

    def test_corporate_rules(self):
        """Predicates compose into routing rules."""
        interpreter = PacInterpreter(corporate, resolver=StaticResolver())

        assert interpreter.find_proxy_for_url("http://intranet/").first().is_direct
        assert interpreter.find_proxy_for_url("http://wiki.corp/").first().is_direct

        result = interpreter.find_proxy_for_url("https://www.example.com/index.html")
        assert result.first() == ProxyDirective(ConnectionType.PROXY, "4.5.6.7:8080")

        result = interpreter.find_proxy_for_url("https://github.com/")
        assert result.first().connection_type is ConnectionType.SOCKS5
        assert result.get(1).is_direct

    def test_none_maps_to_direct(self):
        """A script returning None means DIRECT."""
        interpreter = PacInterpreter(lambda pac, url, host: None, resolver=StaticResolver())
        result = interpreter.find_proxy_for_url("https://example.com")
        assert len(result) == 1
        assert result.first().is_direct

    def test_time_based_script(self):
        """Time predicates use the injected clock."""

        def office_hours(pac, url, host):
            if pac.weekday_range("MON", "FRI") and pac.time_range(9, 17):
                return "PROXY office:3128"
            return "DIRECT"

        # 2024-01-03 is a Wednesday
        wednesday = FixedClock(datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc))
        sunday = FixedClock(datetime(2024, 1, 7, 10, 0, tzinfo=timezone.utc))

        assert PacInterpreter(office_hours, clock=wednesday).find_proxy_for_url(
            "http://a.example/"
        ).first().is_proxy
        assert PacInterpreter(office_hours, clock=sunday).find_proxy_for_url(
            "http://a.example/"
        ).first().is_direct

    def test_usage_error_propagates(self):
        """A timeRange arity error aborts evaluation unchanged."""
        interpreter = PacInterpreter(
            lambda pac, url, host: pac.time_range(1, 2, 3),
            resolver=StaticResolver(),
        )
        with pytest.raises(PacUsageError):
            interpreter.find_proxy_for_url("https://example.com")

    def test_script_error_wrapped(self):
        """Other script failures become PacInterpreterError."""

        def broken(pac, url, host):
            raise RuntimeError("boom")

        interpreter = PacInterpreter(broken, resolver=StaticResolver())
        with pytest.raises(PacInterpreterError) as excinfo:
            interpreter.find_proxy_for_url("https://example.com")
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_invalid_return_value(self):
        """Non-string and unparseable results are rejected."""
        for value in [42, "BOGUS"]:
            interpreter = PacInterpreter(lambda pac, url, host: value, resolver=StaticResolver())
            with pytest.raises(PacInterpreterError):
                interpreter.find_proxy_for_url("https://example.com")

    def test_url_without_host(self):
        """A URL without a host cannot be evaluated without an explicit host."""
        interpreter = PacInterpreter(lambda pac, url, host: "DIRECT", resolver=StaticResolver())
        with pytest.raises(PacInterpreterError):
            interpreter.find_proxy_for_url("not a url")

    def test_script_must_be_callable(self):
        """Only callables are accepted as scripts."""
        with pytest.raises(PacInterpreterError):
            PacInterpreter("function FindProxyForURL(url, host) {}")


class TestFromReference:
    """Tests for loading scripts by module:function reference."""

    def test_load(self, monkeypatch):
        """A reference resolves to the named function."""
        module = types.ModuleType("fake_pac_scripts")
        module.corporate = corporate
        monkeypatch.setitem(sys.modules, "fake_pac_scripts", module)

        interpreter = PacInterpreter.from_reference(
            "fake_pac_scripts:corporate", resolver=StaticResolver()
        )
        assert interpreter.find_proxy_for_url("http://intranet/").first().is_direct

    def test_bad_references(self, monkeypatch):
        """Malformed, missing module and missing attribute all fail."""
        monkeypatch.setitem(sys.modules, "fake_pac_scripts", types.ModuleType("fake_pac_scripts"))
        for reference in ["no_colon", ":func", "no_such_module_for_pac_tests:f", "fake_pac_scripts:missing"]:
            with pytest.raises(PacInterpreterError):
                PacInterpreter.from_reference(reference)


# =============================================================================
# ReloadablePacInterpreter
# =============================================================================


class CountingLoader:
    """Loader returning a script that reports how many loads happened."""

    def __init__(self):
        self.loads = 0
        self.fail = False
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            if self.fail:
                raise OSError("PAC source unavailable")
            self.loads += 1
            generation = self.loads
        return PacInterpreter(
            lambda pac, url, host: f"PROXY gen{generation}:8080",
            resolver=StaticResolver(),
        )


class TestReloadablePacInterpreter:
    """Tests for explicit and timed reloads."""

    def test_initial_load(self):
        """The loader runs once at construction."""
        loader = CountingLoader()
        interpreter = ReloadablePacInterpreter(loader)
        assert loader.loads == 1
        assert interpreter.find_proxy_for_url("http://a/").first().proxy_host == "gen1"

    def test_initial_load_failure(self):
        """A failing first load raises PacInterpreterError."""
        loader = CountingLoader()
        loader.fail = True
        with pytest.raises(PacInterpreterError):
            ReloadablePacInterpreter(loader)

    def test_reload(self):
        """reload swaps in a freshly loaded script."""
        loader = CountingLoader()
        interpreter = ReloadablePacInterpreter(loader)
        interpreter.reload()
        assert interpreter.find_proxy_for_url("http://a/").first().proxy_host == "gen2"

    def test_reload_failure_raises(self):
        """An explicit reload surfaces loader errors."""
        loader = CountingLoader()
        interpreter = ReloadablePacInterpreter(loader)
        loader.fail = True
        with pytest.raises(PacInterpreterError):
            interpreter.reload()
        assert interpreter.find_proxy_for_url("http://a/").first().proxy_host == "gen1"

    def test_timed_reloads(self):
        """start reloads periodically until stop."""
        loader = CountingLoader()
        interpreter = ReloadablePacInterpreter(loader)

        interpreter.start(0.01)
        interpreter.start(0.01)  # second start is a no-op
        assert interpreter.running
        try:
            deadline = time.monotonic() + 5
            while loader.loads < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            interpreter.stop()
        interpreter.stop()

        assert loader.loads >= 3
        assert not interpreter.running

    def test_stop_waits_for_running_reload(self):
        """No reload lands after stop returns."""
        loader = CountingLoader()
        interpreter = ReloadablePacInterpreter(loader)
        started = threading.Event()

        def slow_loader():
            started.set()
            time.sleep(0.2)
            return loader()

        interpreter._loader = slow_loader
        interpreter.start(0.01)
        assert started.wait(5)
        interpreter.stop()

        loads_at_stop = loader.loads
        served = interpreter.find_proxy_for_url("http://a/").first().proxy_host
        time.sleep(0.3)
        assert loader.loads == loads_at_stop
        assert interpreter.find_proxy_for_url("http://a/").first().proxy_host == served

    def test_timed_reload_failure_keeps_previous(self, caplog):
        """A failed background reload is logged and the old script stays."""
        loader = CountingLoader()
        interpreter = ReloadablePacInterpreter(loader)
        loader.fail = True

        with caplog.at_level(logging.ERROR, logger="pacproxy.interpreter"):
            interpreter._reload_safe()

        assert "Failed to reload PAC" in caplog.text
        assert interpreter.find_proxy_for_url("http://a/").first().proxy_host == "gen1"
