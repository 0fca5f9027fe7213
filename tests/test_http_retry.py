try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from dns_editor.utils.http import RetryConfig, send_with_retry

pytestmark = pytest.mark.anyio

_REQUEST = httpx.Request("GET", "https://cf.test/zones")


async def test_transport_errors_are_retried_until_success() -> None:
    calls: list[int] = []

    async def flaky() -> httpx.Response:
        calls.append(1)
        if len(calls) < 3:
            raise httpx.ReadTimeout("slow", request=_REQUEST)
        return httpx.Response(200, request=_REQUEST)

    response = await send_with_retry(
        flaky, retry_config=RetryConfig(attempts=3, backoff_seconds=0)
    )

    assert response.status_code == 200
    assert len(calls) == 3


async def test_error_statuses_are_returned_without_retry() -> None:
    calls: list[int] = []

    async def forbidden() -> httpx.Response:
        calls.append(1)
        return httpx.Response(403, request=_REQUEST)

    response = await send_with_retry(
        forbidden, retry_config=RetryConfig(attempts=3, backoff_seconds=0)
    )

    assert response.status_code == 403
    assert len(calls) == 1


async def test_last_transport_error_is_raised_when_attempts_run_out() -> None:
    async def down() -> httpx.Response:
        raise httpx.ConnectError("refused", request=_REQUEST)

    with pytest.raises(httpx.ConnectError):
        await send_with_retry(down, retry_config=RetryConfig(attempts=2, backoff_seconds=0))
