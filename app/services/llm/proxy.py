"""
LLM proxy helper.

Set LLM_PROXY_URL to route outbound model calls through a proxy:
    LLM_PROXY_URL=socks5://127.0.0.1:3128
    LLM_PROXY_URL=http://127.0.0.1:3128

SOCKS5 requires 'httpx[socks]'.
"""
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


def build_async_client(proxy_url: Optional[str], timeout: float = 30.0) -> httpx.AsyncClient:
    if proxy_url:
        logger.debug(f"Using proxy for LLM request: {proxy_url}")
        return httpx.AsyncClient(timeout=timeout, proxy=proxy_url)
    return httpx.AsyncClient(timeout=timeout)
