"""Run a PAC script against a URL.

A PAC script here is a Python callable ``script(pac, url, host)`` that
returns a proxy result string (or None for DIRECT); ``pac`` is a
:class:`~pacproxy.functions.PacFunctions`.

Example:
    def find_proxy(pac, url, host):
        if pac.is_in_net(host, "10.0.0.0", "255.0.0.0"):
            return "DIRECT"
        return "PROXY proxy.example.com:8080; DIRECT"

    interpreter = PacInterpreter(find_proxy)
    interpreter.find_proxy_for_url("https://example.com/").first()
"""

import importlib
import logging
import threading
from typing import Callable
from urllib.parse import urlsplit

from .clock import Clock
from .errors import PacInterpreterError, PacUsageError
from .functions import PacFunctions
from .resolver import DnsResolver
from .result import ProxyResult

logger = logging.getLogger(__name__)

# Seconds ReloadablePacInterpreter.stop() waits for the reload thread
STOP_TIMEOUT = 5.0

PacScript = Callable[[PacFunctions, str, str], "str | None"]


class PacInterpreter:
    """Evaluates one PAC script with a fixed set of PAC functions."""

    def __init__(
        self,
        script: PacScript,
        resolver: DnsResolver | None = None,
        clock: Clock | None = None,
    ):
        if not callable(script):
            raise PacInterpreterError(f"PAC script must be callable, got {type(script).__name__}")
        self.script = script
        self.functions = PacFunctions(resolver=resolver, clock=clock)

    @classmethod
    def from_reference(
        cls,
        reference: str,
        resolver: DnsResolver | None = None,
        clock: Clock | None = None,
    ) -> "PacInterpreter":
        """Load a script given as ``"package.module:function"``.

        Raises:
            PacInterpreterError: If the module or attribute cannot be loaded
        """
        module_name, sep, attr = reference.partition(":")
        if not sep or not module_name or not attr:
            raise PacInterpreterError(
                f"PAC script reference must look like 'module:function', got {reference!r}"
            )
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise PacInterpreterError(f"Cannot import PAC script module {module_name!r}") from e
        try:
            script = getattr(module, attr)
        except AttributeError as e:
            raise PacInterpreterError(f"Module {module_name!r} has no PAC script {attr!r}") from e
        return cls(script, resolver=resolver, clock=clock)

    def find_proxy_for_url(self, url: str, host: str | None = None) -> ProxyResult:
        """Evaluate the script for url.

        Args:
            url: Full request URL
            host: Host part of the URL; parsed from url when omitted

        Raises:
            PacUsageError: The script misused a predicate (e.g. timeRange arity)
            PacInterpreterError: The script failed or returned an invalid result
        """
        if host is None:
            try:
                host = urlsplit(url or "").hostname
            except ValueError as e:
                raise PacInterpreterError(f"Malformed URL: {url!r}") from e
            if host is None:
                raise PacInterpreterError(f"URL has no host: {url!r}")

        try:
            result = self.script(self.functions, url or "", host or "")
        except PacUsageError:
            raise
        except Exception as e:
            raise PacInterpreterError(f"Error executing PAC script for {url!r}") from e

        if result is not None and not isinstance(result, str):
            raise PacInterpreterError(
                f"PAC script returned {type(result).__name__}, expected a string"
            )
        return ProxyResult.parse(result)


class ReloadablePacInterpreter:
    """A PAC interpreter whose script can be reloaded, by hand or on a timer.

    ``loader`` builds a fresh :class:`PacInterpreter`; it is called once at
    construction and again on every reload. A failed timer reload is logged
    and the previous interpreter stays active.
    """

    def __init__(self, loader: Callable[[], PacInterpreter]):
        if loader is None:
            raise ValueError("PAC interpreter loader cannot be None")
        self._loader = loader
        self._interpreter = self._load()
        self._lock = threading.Lock()  # guards the timer fields
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    def _load(self) -> PacInterpreter:
        try:
            return self._loader()
        except PacInterpreterError:
            raise
        except Exception as e:
            raise PacInterpreterError(f"Failed to load PAC script: {e}") from e

    @property
    def interpreter(self) -> PacInterpreter:
        return self._interpreter

    def reload(self) -> None:
        """Reload the script now. Does not affect the timer."""
        logger.debug("Reloading PAC")
        self._interpreter = self._load()
        logger.debug("PAC reloaded successfully")

    def _reload_safe(self) -> None:
        try:
            self.reload()
        except PacInterpreterError as e:
            logger.error(f"Failed to reload PAC: {e}", exc_info=True)

    def _run(self, period: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(period):
            self._reload_safe()

    def start(self, period: float) -> None:
        """Reload every ``period`` seconds until :meth:`stop`. No-op if running."""
        with self._lock:
            if self._thread is not None:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(period, self._stop_event),
                name="ReloadablePacInterpreter Reload Timer",
                daemon=True,
            )
            self._thread.start()

    def stop(self, timeout: float = STOP_TIMEOUT) -> None:
        """Stop periodic reloads. No-op if not running.

        Waits up to ``timeout`` seconds for an in-progress reload to finish,
        so no reload lands after this returns unless the loader is stuck.
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            self._thread = None
            self._stop_event = None
        if thread is not threading.current_thread():
            thread.join(timeout)

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None

    def find_proxy_for_url(self, url: str, host: str | None = None) -> ProxyResult:
        return self._interpreter.find_proxy_for_url(url, host)
