from dataclasses import dataclass

import httpx

from task_resolver.logging.logger import Log
from task_resolver.resolution.exceptions import ExternalResourceError

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "task-resolver/1.0"


@dataclass(frozen=True)
class FetchResult:
    """Status and body of an HTTP GET."""

    url: str
    status_code: int
    body: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class HttpFetchAdapter:
    """httpx client wrapper with a bounded timeout and no retries."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )

    def get(self, url: str) -> FetchResult:
        response = self._send("GET", url)
        return FetchResult(url=url, status_code=response.status_code, body=response.text)

    def head(self, url: str) -> int:
        """Status of a HEAD request; redirects are reported, not followed."""
        return self._send("HEAD", url, follow_redirects=False).status_code

    def _send(self, method: str, url: str, follow_redirects: bool = True) -> httpx.Response:
        try:
            return self._client.request(method, url, follow_redirects=follow_redirects)
        except httpx.TimeoutException as exc:
            Log.warning(f"Timeout on {method} {url}")
            raise ExternalResourceError(f"timed out requesting {url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            Log.warning(f"HTTP error on {method} {url}: {exc}")
            raise ExternalResourceError(f"request to {url} failed: {exc}") from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpFetchAdapter":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
