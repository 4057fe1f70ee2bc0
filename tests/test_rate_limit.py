import pytest
from fakeredis.aioredis import FakeRedis
from fastapi import status
from fastapi_limiter import FastAPILimiter

import main
from app import auth
from app.auth import start_rate_limiter, stop_rate_limiter


def login(client, username="example@example.com", password="password"):
    return client.post(
        "/api/auth/login",
        json={"username": username, "password": password},
    )


@pytest.fixture()
def limiter(session_loop):
    redis_client = FakeRedis(decode_responses=True)
    session_loop.run_until_complete(redis_client.flushall())
    assert session_loop.run_until_complete(start_rate_limiter(redis_client))
    yield redis_client
    stop_rate_limiter()
    session_loop.run_until_complete(redis_client.aclose())


def test_login_works_when_redis_is_down(client, session_loop, make_user, monkeypatch):
    make_user()
    monkeypatch.setattr(main.settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(main.settings, "REDIS_URL", "redis://127.0.0.1:1")

    lifespan = main.lifespan(main.app)
    session_loop.run_until_complete(lifespan.__aenter__())
    try:
        assert FastAPILimiter.redis is None
        response = login(client)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["token"]
    finally:
        session_loop.run_until_complete(lifespan.__aexit__(None, None, None))


def test_current_user_works_when_redis_is_down(
    client, session_loop, make_user, monkeypatch
):
    make_user(token="exampleToken")
    monkeypatch.setattr(main.settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(main.settings, "REDIS_URL", "redis://127.0.0.1:1")

    lifespan = main.lifespan(main.app)
    session_loop.run_until_complete(lifespan.__aenter__())
    try:
        response = client.get(
            "/api/users/current", headers={"X-API-TOKEN": "exampleToken"}
        )
        assert response.status_code == status.HTTP_200_OK
    finally:
        session_loop.run_until_complete(lifespan.__aexit__(None, None, None))


def test_login_is_rate_limited(client, make_user, limiter):
    make_user()
    for _ in range(auth._limiter.times):
        assert login(client).status_code == status.HTTP_200_OK

    response = login(client)
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert response.json() == {"data": None, "errors": "Too Many Requests"}
    assert "retry-after" in response.headers


def test_rate_limit_counts_paths_separately(client, make_user, limiter):
    make_user()
    make_user(username="other@example.com", token="exampleToken")
    for _ in range(auth._limiter.times):
        login(client)
    assert login(client).status_code == status.HTTP_429_TOO_MANY_REQUESTS

    response = client.get("/api/users/current", headers={"X-API-TOKEN": "exampleToken"})
    assert response.status_code == status.HTTP_200_OK


def test_rate_limit_is_skipped_without_limiter(client, make_user):
    make_user()
    assert FastAPILimiter.redis is None
    for _ in range(auth._limiter.times + 1):
        assert login(client).status_code == status.HTTP_200_OK
