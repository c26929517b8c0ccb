import httpx


def build_async_httpx_client(timeout: float, **kwargs) -> httpx.AsyncClient:
    """Create a configured httpx.AsyncClient.

    Tests pass ``transport=httpx.MockTransport(...)`` through ``kwargs``.
    """
    return httpx.AsyncClient(timeout=timeout, follow_redirects=False, **kwargs)
