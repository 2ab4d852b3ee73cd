# Shared pytest fixtures
from __future__ import annotations

import asyncio
import json
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pandas as pd
import pytest

from admin_console.api.client import ENV_BASE_URL, AdminApiClient
from admin_console.auth.session_gate import StaticTokenProvider
from admin_console.logging.init import LOGGER_NAME, reset_logging
from admin_console.models.import_row import EXPECTED_COLUMNS
from admin_console.models.session import CurrentUser

BASE_URL = "http://admin.test"
TEST_TOKEN = "test-token"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # 実行環境の設定値がテストに漏れないようにする
    monkeypatch.delenv(ENV_BASE_URL, raising=False)
    monkeypatch.delenv("ADMIN_API_TOKEN", raising=False)


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    yield
    # capsys のストリームは各テスト終了時に閉じられるため外しておく
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return f"""api:
  base_url: {BASE_URL}
  timeout_seconds: 5
import:
  max_rows: 1000
  max_reported_errors: 100
  resolve_users: false
session:
  ttl_seconds: 60
payouts:
  poll_interval_seconds: 0.01
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "admin.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_csv(temp_workdir: Path) -> Callable[..., Path]:
    """Write a CSV upload under data/ and return its path."""

    def _make(name: str, rows: list[list[Any]], header: list[str] | None = None) -> Path:
        path = temp_workdir / "data" / name
        cols = header if header is not None else list(EXPECTED_COLUMNS)
        pd.DataFrame(rows, columns=cols).to_csv(path, index=False)
        return path

    return _make


@pytest.fixture()
def make_xlsx(temp_workdir: Path) -> Callable[..., Path]:
    """Write a single-sheet workbook upload under data/ and return its path."""

    def _make(name: str, rows: list[list[Any]], header: list[str] | None = None, sheet: str = "Transactions") -> Path:
        path = temp_workdir / "data" / name
        cols = header if header is not None else list(EXPECTED_COLUMNS)
        pd.DataFrame(rows, columns=cols).to_excel(path, sheet_name=sheet, index=False, engine="openpyxl")
        return path

    return _make


class FakeUserStore:
    """In-memory UserStore recording every lookup."""

    def __init__(self, users: dict[str, str] | None = None, delay: float = 0.0, fail: Exception | None = None) -> None:
        self.users = dict(users or {})
        self.delay = delay
        self.fail = fail
        self.calls: list[str] = []

    async def find_user_id_by_email(self, email: str) -> str | None:
        self.calls.append(email)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        return self.users.get(email)


class FakeAuthSource:
    """AuthorizationSource with a fixed admin set."""

    def __init__(self, admins: set[str] | None = None, delay: float = 0.0, fail: Exception | None = None) -> None:
        self.admins = set(admins or ())
        self.delay = delay
        self.fail = fail
        self.calls: list[str] = []

    async def is_admin(self, user_id: str) -> bool:
        self.calls.append(user_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        return user_id in self.admins

    async def issue_token(self, user: CurrentUser) -> str:
        return f"token-{user.uid}"


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def user_store() -> FakeUserStore:
    return FakeUserStore({"john@example.com": "u-john", "jane@example.com": "u-jane"})


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


class RecordingHandler:
    """httpx.MockTransport handler returning canned responses and keeping requests."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture()
def make_client() -> Callable[..., tuple[AdminApiClient, RecordingHandler]]:
    """Build an AdminApiClient whose transport is an httpx.MockTransport."""

    def _make(
        responder: Callable[[httpx.Request], httpx.Response],
        *,
        base_url: str | None = BASE_URL,
        token: str | None = TEST_TOKEN,
    ) -> tuple[AdminApiClient, RecordingHandler]:
        handler = RecordingHandler(responder)
        client = AdminApiClient(
            StaticTokenProvider(token),
            base_url=base_url,
            transport=httpx.MockTransport(handler),
        )
        return client, handler

    return _make
