import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import Settings
from .languages import Language, resolve_language_id
from .schemas import ExecutionRequest, ExecutionToken, ExecutionVerdict

logger = logging.getLogger(__name__)


class Judge0Error(Exception):
    """Base class for failures talking to Judge0."""


class Judge0DispatchError(Judge0Error):
    """The batch submit call failed; nothing was queued that we can track."""


class Judge0PollError(Judge0Error):
    """A batch status query failed or returned an unusable payload."""


class Judge0TimeoutError(Judge0Error):
    """Tokens were still queued/processing when the poll budget ran out."""

    def __init__(self, attempts: int, pending: int) -> None:
        super().__init__(f"{pending} submission(s) still running after {attempts} polls")
        self.attempts = attempts
        self.pending = pending


def _mask_headers(h: dict) -> dict:
    masked = {}
    for k, v in (h or {}).items():
        if k.lower() in ("x-rapidapi-key",):
            masked[k] = "[REDACTED]"
        else:
            masked[k] = v
    return masked


def build_execution_requests(
    source_code: str,
    language: Language,
    cases: Iterable[Any],
) -> List[ExecutionRequest]:
    """One request per test case, in case order. Cases need ``input`` and ``output``."""
    language_id = resolve_language_id(language)
    return [
        ExecutionRequest(
            language_id=language_id,
            source_code=source_code,
            stdin=case.input,
            expected_output=case.output,
        )
        for case in cases
    ]


class Judge0Client:
    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        host: str = "",
        timeout_s: float = 15.0,
        poll_interval: float = 1.0,
        max_poll_attempts: Optional[int] = 120,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        base = (base_url or "").strip()
        if base and not base.startswith("http://") and not base.startswith("https://"):
            # assume http if scheme omitted
            base = "http://" + base
        self.base_url = base.rstrip("/")
        self.headers = {"Content-Type": "application/json"}
        if api_key and host:
            self.headers.update({
                "X-RapidAPI-Key": api_key,
                "X-RapidAPI-Host": host,
            })
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        timeout = httpx.Timeout(connect=3.0, read=timeout_s, write=5.0, pool=5.0)
        limits = httpx.Limits(max_connections=20, max_keepalive_connections=10)
        self._client = httpx.AsyncClient(
            headers=self.headers,
            timeout=timeout,
            limits=limits,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Judge0Client":
        return cls(
            settings.judge0_api_url,
            api_key=settings.judge0_api_key,
            host=settings.judge0_host,
            timeout_s=settings.judge0_timeout_s,
            poll_interval=settings.judge0_poll_interval_s,
            max_poll_attempts=settings.judge0_max_poll_attempts,
            **kwargs,
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self.base_url:
            raise Judge0Error("Judge0 base URL is not configured (JUDGE0_BASE_URL).")
        url = self.base_url + path
        logger.debug("Judge0 request: %s %s headers=%s", method, url, _mask_headers(self.headers))
        return await self._client.request(method, url, **kwargs)

    # -------- Batch operations --------
    async def submit_batch(self, requests: List[ExecutionRequest]) -> List[str]:
        """Submit every request in one call; tokens come back in request order."""
        payload = {"submissions": [r.model_dump(exclude_none=True) for r in requests]}
        try:
            resp = await self._request(
                "POST",
                "/submissions/batch",
                params={"base64_encoded": "false"},
                json=payload,
            )
        except httpx.HTTPError as exc:
            raise Judge0DispatchError(f"Failed to reach Judge0 at {self.base_url}: {exc}") from exc
        if resp.status_code not in (200, 201):
            raise Judge0DispatchError(f"Batch submit failed: {resp.status_code} {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise Judge0DispatchError(f"Batch submit returned invalid JSON: {resp.text[:200]}") from exc
        if isinstance(data, dict):
            # some deployments wrap the list
            data = data.get("submissions") or data.get("submission_tokens") or []
        try:
            tokens = [ExecutionToken.model_validate(item).token for item in data]
        except ValidationError as exc:
            raise Judge0DispatchError(f"Malformed batch submit response: {exc}") from exc
        if len(tokens) != len(requests):
            raise Judge0DispatchError(
                f"Token count mismatch in batch response: sent {len(requests)}, got {len(tokens)}"
            )
        return tokens

    async def dispatch(self, source_code: str, language: Language, cases: Iterable[Any]) -> List[str]:
        requests = build_execution_requests(source_code, language, cases)
        tokens = await self.submit_batch(requests)
        logger.info("judge0.dispatch cases=%d language=%s", len(tokens), Language(language).value)
        return tokens

    async def get_batch(self, tokens: List[str]) -> List[ExecutionVerdict]:
        """Fetch the current verdict of every token, aligned with ``tokens``."""
        if not tokens:
            return []
        try:
            resp = await self._request(
                "GET",
                "/submissions/batch",
                params={"tokens": ",".join(tokens), "base64_encoded": "false", "fields": "*"},
            )
        except httpx.HTTPError as exc:
            raise Judge0PollError(f"Failed to reach Judge0 at {self.base_url}: {exc}") from exc
        if resp.status_code != 200:
            raise Judge0PollError(f"Batch get failed: {resp.status_code} {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise Judge0PollError(f"Batch get returned invalid JSON: {resp.text[:200]}") from exc
        # Judge0 batch GET returns {"submissions": [...]}
        arr = data.get("submissions", []) if isinstance(data, dict) else data
        try:
            verdicts = [ExecutionVerdict.model_validate(item) for item in arr or []]
        except ValidationError as exc:
            raise Judge0PollError(f"Malformed batch status response: {exc}") from exc
        if len(verdicts) != len(tokens):
            raise Judge0PollError(
                f"Verdict count mismatch in batch response: asked {len(tokens)}, got {len(verdicts)}"
            )
        by_token: Dict[str, ExecutionVerdict] = {v.token: v for v in verdicts if v.token}
        if len(by_token) == len(tokens) and set(by_token) == set(tokens):
            return [by_token[tok] for tok in tokens]
        return verdicts

    async def wait_for_results(self, tokens: List[str]) -> List[ExecutionVerdict]:
        """Re-query the whole batch until every verdict is terminal.

        Sleeps ``poll_interval`` between queries. With ``max_poll_attempts`` set to
        None the loop has no upper bound.
        """
        attempt = 0
        while True:
            verdicts = await self.get_batch(tokens)
            attempt += 1
            pending = sum(1 for v in verdicts if not v.is_terminal)
            if pending == 0:
                logger.info("judge0.poll_done tokens=%d attempts=%d", len(tokens), attempt)
                return verdicts
            if self.max_poll_attempts is not None and attempt >= self.max_poll_attempts:
                logger.warning("judge0.poll_exhausted tokens=%d pending=%d attempts=%d", len(tokens), pending, attempt)
                raise Judge0TimeoutError(attempt, pending)
            await asyncio.sleep(self.poll_interval)

    async def evaluate(self, source_code: str, language: Language, cases: Iterable[Any]) -> List[ExecutionVerdict]:
        """Dispatch ``cases`` as one batch and wait for every verdict."""
        cases = list(cases)
        if not cases:
            return []
        tokens = await self.dispatch(source_code, language, cases)
        return await self.wait_for_results(tokens)


__all__ = [
    "Judge0Client",
    "Judge0Error",
    "Judge0DispatchError",
    "Judge0PollError",
    "Judge0TimeoutError",
    "build_execution_requests",
]
