import sys
import os
import json
import time
from typing import Callable, Dict, List, Optional

import httpx
import pytest

# Ensure repo root on sys.path for imports like `app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.common.cache import RedisStore  # noqa: E402
from app.db.session import Database  # noqa: E402
from app.features.judge0.service import Judge0Client  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls RedisStore makes."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, float] = {}
        self.closed = False

    def _alive(self, key):
        exp = self.expiry.get(key)
        if exp is not None and exp <= time.time():
            self.data.pop(key, None)
            self.expiry.pop(key, None)
        return key in self.data

    async def set(self, key, value, ex=None, nx=False, exat=None):
        if nx and self._alive(key):
            return None
        self.data[key] = value
        if ex is not None:
            self.expiry[key] = time.time() + ex
        elif exat is not None:
            self.expiry[key] = float(exat)
        else:
            self.expiry.pop(key, None)
        return True

    async def exists(self, key):
        return 1 if self._alive(key) else 0

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


def verdict(status_id: int, *, stdout="", stderr=None, time_s="0.01", memory=1024, token=None):
    return {
        "token": token,
        "status_id": status_id,
        "status": {"id": status_id, "description": ""},
        "stdout": stdout,
        "stderr": stderr,
        "time": time_s,
        "memory": memory,
    }


def echo_judge(submission: dict) -> dict:
    """Accept when the source contains the expected output, otherwise wrong answer."""
    if submission.get("expected_output") and submission["expected_output"] in submission["source_code"]:
        return verdict(3)
    return verdict(4, stderr="mismatch")


class FakeJudge0:
    """Judge0 batch API served through httpx.MockTransport.

    ``pending_polls`` GETs answer "Processing" before the decided verdicts show up.
    """

    def __init__(self, decide: Callable[[dict], dict] = echo_judge, pending_polls: int = 0):
        self.decide = decide
        self.pending_polls = pending_polls
        self.submissions: Dict[str, dict] = {}
        self.batches: List[List[dict]] = []
        self.get_calls: List[httpx.Request] = []
        self.fail_submit: Optional[int] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/submissions/batch":
            if self.fail_submit is not None:
                return httpx.Response(self.fail_submit, text="boom")
            batch = json.loads(request.content)["submissions"]
            self.batches.append(batch)
            tokens = []
            for sub in batch:
                tok = f"tok-{len(self.submissions)}"
                self.submissions[tok] = sub
                tokens.append({"token": tok})
            return httpx.Response(201, json=tokens)
        if request.method == "GET" and request.url.path == "/submissions/batch":
            self.get_calls.append(request)
            tokens = request.url.params["tokens"].split(",")
            if self.pending_polls > 0:
                self.pending_polls -= 1
                return httpx.Response(200, json={"submissions": [verdict(2, token=t) for t in tokens]})
            out = []
            for tok in tokens:
                result = dict(self.decide(self.submissions[tok]))
                result["token"] = tok
                out.append(result)
            return httpx.Response(200, json={"submissions": out})
        return httpx.Response(404)

    def client(self, **kwargs) -> Judge0Client:
        kwargs.setdefault("poll_interval", 0)
        return Judge0Client("http://judge0.test", transport=httpx.MockTransport(self.handler), **kwargs)


@pytest.fixture
def fake_judge0():
    return FakeJudge0()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    return RedisStore(fake_redis, cooldown_seconds=10)


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    gen = database.session()
    session = next(gen)
    yield session
    gen.close()


def problem_payload(**overrides) -> dict:
    payload = {
        "title": "Add two numbers",
        "description": "Read a and b, print a + b.",
        "difficulty": "easy",
        "tags": ["math"],
        "visibleTestCases": [
            {"input": "1 2", "output": "3", "explanation": "1 + 2"},
        ],
        "HiddenTestCases": [
            {"input": "10 20", "output": "30"},
            {"input": "7 8", "output": "15"},
        ],
        "startCode": [{"language": "python", "initialCode": "a, b = map(int, input().split())"}],
        "referenceSolution": [{"language": "python", "solution": "# prints 3\nprint(sum(map(int, input().split())))"}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_user(db_session):
    from app.auth.service import hash_password
    from app.features.users.models import UserRole
    from app.features.users.repository import user_repository

    def _make(email="ada@example.com", role=UserRole.user, password="Str0ng!pass"):
        return user_repository.create(
            db_session,
            name="Ada Lovelace",
            email_id=email,
            password_hash=hash_password(password),
            role=role,
            age=30,
        )

    return _make


@pytest.fixture
def make_problem(db_session):
    from app.features.problems.repository import problem_repository
    from app.features.problems.schemas import ProblemCreate

    def _make(creator_id=None, **overrides):
        return problem_repository.create(
            db_session, ProblemCreate.model_validate(problem_payload(**overrides)), creator_id=creator_id
        )

    return _make
