#!/usr/bin/env python3
"""
mitmproxy addon that logs the PAC routing decision for each request.

Usage:
    mitmdump -s src/pacproxy/addon.py --set pac_script=mypac:find_proxy

For every HTTP(S) request the configured PAC script is evaluated with
the request URL and host. The decision is logged and stored in
``flow.metadata["pac"]``. Upstream connections are not changed.

Scripts may resolve names (isInNet, isResolvable, dnsResolve), so
evaluation runs in a worker thread and lookups are bounded by the
``pac_dns_timeout`` option.
"""

import asyncio
import logging
import sys
from typing import Optional

from mitmproxy import ctx, http

from pacproxy.errors import PacError
from pacproxy.interpreter import PacInterpreter
from pacproxy.resolver import SocketResolver

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

METADATA_KEY = "pac"

# Default seconds to wait for a DNS lookup made by the PAC script
DEFAULT_DNS_TIMEOUT = 5.0


class PacDecisionLogger:
    """Addon that evaluates a PAC script per request and logs the result."""

    def __init__(self, interpreter: PacInterpreter | None = None):
        self.interpreter = interpreter

    def load(self, loader) -> None:
        loader.add_option(
            name="pac_script",
            typespec=Optional[str],
            default=None,
            help="PAC script to evaluate, as 'module:function'",
        )
        loader.add_option(
            name="pac_dns_timeout",
            typespec=float,
            default=DEFAULT_DNS_TIMEOUT,
            help="Seconds to wait for a DNS lookup made by the PAC script; a timeout counts as unresolvable",
        )

    def configure(self, updates) -> None:
        """Rebuild the interpreter when the PAC options change."""
        if "pac_script" not in updates and "pac_dns_timeout" not in updates:
            return
        reference = ctx.options.pac_script
        if not reference:
            self.interpreter = None
            return
        resolver = SocketResolver(timeout=ctx.options.pac_dns_timeout)
        try:
            self.interpreter = PacInterpreter.from_reference(reference, resolver=resolver)
        except PacError as e:
            logger.error(f"PAC_LOAD_FAILED: {reference}: {e}")
            self.interpreter = None
            return
        logger.info(f"PAC_LOADED: {reference}")

    async def request(self, flow: http.HTTPFlow) -> None:
        """Log the PAC decision for an HTTP/HTTPS request."""
        interpreter = self.interpreter
        if interpreter is None:
            return
        url = flow.request.pretty_url
        method = flow.request.method
        try:
            # Off the event loop: the script may block on name resolution
            result = await asyncio.to_thread(
                interpreter.find_proxy_for_url, url, flow.request.host
            )
        except PacError as e:
            logger.error(f"PAC_ERROR: {method} {url}: {e}")
            return
        flow.metadata[METADATA_KEY] = str(result)
        logger.info(f"PAC_DECISION: {method} {url} -> {result}")


addons = [PacDecisionLogger()]
