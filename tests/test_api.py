import asyncio
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from app.auth.service import hash_password
from app.common.cache import COOLDOWN_PREFIX
from app.features.users.models import UserRole
from app.features.users.repository import user_repository
from app.main import create_app
from tests.conftest import FakeJudge0, problem_payload

PASSWORD = "Str0ng!pass"


@pytest.fixture
def judge(fake_judge0):
    return fake_judge0


@pytest.fixture
def app(database, store, judge):
    application = create_app()
    application.state.db = database
    application.state.store = store
    application.state.judge0 = judge.client()
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


def _add_user(database, email, role=UserRole.user):
    gen = database.session()
    db = next(gen)
    try:
        user_repository.create(db, name="Seeded", email_id=email, password_hash=hash_password(PASSWORD), role=role)
    finally:
        gen.close()


def _login(client, email):
    resp = client.post("/user/login", json={"emailId": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp


def _register(client, email="grace@mail.com"):
    return client.post(
        "/user/register",
        json={"name": "Grace", "emailId": email, "password": PASSWORD, "age": 25},
    )


@pytest.fixture
def admin_client(client, database):
    _add_user(database, "admin@mail.com", role=UserRole.admin)
    _login(client, "admin@mail.com")
    return client


def _create_problem(client, **overrides):
    resp = client.post("/problem/create", json=problem_payload(**overrides))
    assert resp.status_code == 200, resp.text
    return resp.json()["problemId"]


def _clear_cooldowns(fake_redis):
    for key in [k for k in fake_redis.data if k.startswith(COOLDOWN_PREFIX)]:
        fake_redis.data.pop(key)
        fake_redis.expiry.pop(key, None)


# ---- meta ------------------------------------------------------------------------
def test_healthz_reports_components(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["components"]["judge0"] == "configured"
    assert body["components"]["database"]["status"] == "ok"
    assert resp.headers["X-Request-Id"]


# ---- auth ------------------------------------------------------------------------
def test_register_sets_cookie_and_check_auth(client):
    resp = _register(client)
    assert resp.status_code == 201, resp.text
    assert resp.json()["user"]["emailId"] == "grace@mail.com"
    assert resp.json()["user"]["role"] == "user"
    assert client.cookies.get("token")

    me = client.get("/user/checkAuth")
    assert me.status_code == 200
    assert me.json()["user"]["name"] == "Grace"


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    resp = _register(client)
    assert resp.status_code == 400


def test_register_rejects_weak_password(client):
    resp = client.post("/user/register", json={"name": "Grace", "emailId": "g@mail.com", "password": "weak"})
    assert resp.status_code == 422


def test_login_bad_credentials(client, database):
    _add_user(database, "ada@mail.com")
    resp = client.post("/user/login", json={"emailId": "ada@mail.com", "password": "Wr0ng!pass"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid Credentials"


def test_logout_blocks_the_token(client):
    _register(client)
    token = client.cookies.get("token")
    assert client.post("/user/logout").status_code == 200

    client.cookies.clear()
    resp = client.get("/user/checkAuth", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_protected_routes_need_a_token(client):
    assert client.get("/user/profile").status_code == 401
    assert client.post("/submission/run/1", json={"code": "x", "language": "python"}).status_code == 401


def test_admin_register_requires_admin(client):
    _register(client)
    resp = client.post(
        "/user/admin/register",
        json={"name": "Mallory", "emailId": "m@mail.com", "password": PASSWORD, "role": "admin"},
    )
    assert resp.status_code == 403


def test_delete_profile(client):
    _register(client)
    assert client.delete("/user/deleteProfile").status_code == 200
    assert client.get("/user/checkAuth").status_code == 401


# ---- problems --------------------------------------------------------------------
def test_problem_lifecycle(admin_client):
    problem_id = _create_problem(admin_client)

    listed = admin_client.get("/problem/getAllProblem").json()
    assert [p["id"] for p in listed] == [problem_id]
    assert set(listed[0]) == {"id", "title", "difficulty", "tags"}

    detail = admin_client.get(f"/problem/problemById/{problem_id}").json()
    assert "HiddenTestCases" not in detail
    assert detail["visibleTestCases"][0]["output"] == "3"
    assert detail["startCode"][0]["initialCode"].startswith("a, b")

    updated = problem_payload(title="Sum of two")
    assert admin_client.put(f"/problem/{problem_id}", json=updated).status_code == 200
    assert admin_client.get(f"/problem/problemById/{problem_id}").json()["title"] == "Sum of two"

    assert admin_client.delete(f"/problem/delete/{problem_id}").status_code == 200
    assert admin_client.get(f"/problem/problemById/{problem_id}").status_code == 404
    assert admin_client.get("/problem/getAllProblem").status_code == 404


def test_problem_create_rejects_failing_reference(admin_client):
    resp = admin_client.post(
        "/problem/create",
        json=problem_payload(referenceSolution=[{"language": "java", "solution": "class Main {}"}]),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Reference solution for java failed to pass visible test cases"
    assert admin_client.get("/problem/getAllProblem").status_code == 404


def test_problem_create_rejects_unknown_tag(admin_client):
    resp = admin_client.post("/problem/create", json=problem_payload(tags=["astrology"]))
    assert resp.status_code == 422


def test_problem_create_requires_admin(client):
    _register(client)
    resp = client.post("/problem/create", json=problem_payload())
    assert resp.status_code == 403


# ---- submissions -----------------------------------------------------------------
def test_run_then_cooldown(admin_client, fake_redis):
    problem_id = _create_problem(admin_client)
    _clear_cooldowns(fake_redis)

    resp = admin_client.post(f"/submission/run/{problem_id}", json={"code": "print(3)", "language": "python"})
    assert resp.status_code == 200, resp.text
    results = resp.json()["testResult"]
    assert [r["status_id"] for r in results] == [3]

    again = admin_client.post(f"/submission/run/{problem_id}", json={"code": "print(3)", "language": "python"})
    assert again.status_code == 429
    assert again.json()["detail"] == "You are submitting too frequently. Please wait before trying again."


def test_submit_records_history_and_solved_list(admin_client, fake_redis):
    problem_id = _create_problem(admin_client)
    _clear_cooldowns(fake_redis)

    assert admin_client.get(f"/submission/submittedProblem/{problem_id}").status_code == 404

    resp = admin_client.post(
        f"/submission/submit/{problem_id}",
        json={"code": "print(30 or 15)", "language": "python"},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"message": "Code submitted successfully"}

    history = admin_client.get(f"/submission/submittedProblem/{problem_id}").json()["ans"]
    assert len(history) == 1
    assert history[0]["status"] == "accepted"
    assert history[0]["testCasesPassed"] == 2

    solved = admin_client.get("/problem/user").json()["problemSolved"]
    assert [p["id"] for p in solved] == [problem_id]

    profile = admin_client.get("/user/profile").json()["data"]
    assert profile["problemSolved"] == [problem_id]


def test_submit_unknown_problem(admin_client, fake_redis):
    _clear_cooldowns(fake_redis)
    resp = admin_client.post("/submission/submit/999", json={"code": "x", "language": "python"})
    assert resp.status_code == 404


def test_submit_rejects_unsupported_language(admin_client, fake_redis):
    _clear_cooldowns(fake_redis)
    resp = admin_client.post("/submission/submit/1", json={"code": "x", "language": "rust"})
    assert resp.status_code == 422


def test_submit_rejects_oversized_code(admin_client, fake_redis):
    problem_id = _create_problem(admin_client)
    _clear_cooldowns(fake_redis)
    resp = admin_client.post(
        f"/submission/submit/{problem_id}",
        json={"code": "x" * (128 * 1024 + 1), "language": "python"},
    )
    assert resp.status_code == 413


def test_run_maps_poll_timeout_to_504(admin_client, app, fake_redis):
    problem_id = _create_problem(admin_client)
    _clear_cooldowns(fake_redis)
    app.state.judge0 = FakeJudge0(pending_polls=50).client(max_poll_attempts=2)

    resp = admin_client.post(f"/submission/run/{problem_id}", json={"code": "print(3)", "language": "python"})
    assert resp.status_code == 504


def test_submit_maps_dispatch_failure_to_502(admin_client, app, fake_redis):
    problem_id = _create_problem(admin_client)
    _clear_cooldowns(fake_redis)
    broken = FakeJudge0()
    broken.fail_submit = 500
    app.state.judge0 = broken.client()

    resp = admin_client.post(f"/submission/submit/{problem_id}", json={"code": "print(3)", "language": "python"})
    assert resp.status_code == 502


def test_problem_create_rejects_oversized_case_input(admin_client, judge):
    big = {"input": "9" * (32 * 1024 + 1), "output": "1"}
    resp = admin_client.post("/problem/create", json=problem_payload(HiddenTestCases=[big]))
    assert resp.status_code == 413
    # rejected before any reference solution reached Judge0
    assert judge.batches == []


def test_problem_create_caps_tags_at_five(admin_client):
    tags = ["array", "string", "math", "greedy", "sorting", "recursion"]
    resp = admin_client.post("/problem/create", json=problem_payload(tags=tags))
    assert resp.status_code == 422
    assert _create_problem(admin_client, tags=tags[:5])


@pytest.mark.anyio("asyncio")
async def test_login_keeps_event_loop_responsive(app, database):
    _add_user(database, "ada@mail.com")
    gaps = []
    done = asyncio.Event()

    async def ticker():
        last = time.perf_counter()
        while not done.is_set():
            await asyncio.sleep(0.005)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        task = asyncio.create_task(ticker())
        resp = await http.post("/user/login", json={"emailId": "ada@mail.com", "password": PASSWORD})
        done.set()
        await task

    assert resp.status_code == 200
    # password hashing and db work run off the event loop
    assert gaps and max(gaps) < 0.05
