import json
import sys
import logging
from pathlib import Path

import pytest

from tienda.application.container import build_container
from tienda.config import Settings, get_app_paths, load_settings
from tienda.logging_config import JsonFormatter
from tienda.repositories.rest_repo import RestRepository
from tienda.repositories.sqlite_repo import SqliteRepository


def test_settings_defaults():
    s = load_settings({})
    assert s == Settings()
    assert s.backend == "sqlite"
    assert s.duplicate_window_seconds == 3.0
    assert not s.enforce_credit_limit


def test_settings_from_environment():
    s = load_settings({
        "TIENDA_BACKEND": "REST",
        "TIENDA_REST_URL": "https://db.example.test/",
        "TIENDA_REST_KEY": " secret ",
        "TIENDA_REST_TIMEOUT": "4.5",
        "TIENDA_LOG_LEVEL": "debug",
        "TIENDA_ENFORCE_CREDIT_LIMIT": "si",
        "TIENDA_DUPLICATE_WINDOW": "not-a-number",
        "TIENDA_STORE_NAME": "Abarrotes El Güero",
    })
    assert s.backend == "rest"
    assert s.rest_url == "https://db.example.test"
    assert s.rest_key == "secret"
    assert s.rest_timeout == 4.5
    assert s.log_level == logging.DEBUG
    assert s.enforce_credit_limit
    assert s.duplicate_window_seconds == 3.0
    assert s.store_name == "Abarrotes El Güero"


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        load_settings({"TIENDA_BACKEND": "mongo"})


def test_app_paths_honor_override(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TIENDA_HOME", str(tmp_path / "home"))
    paths = get_app_paths()
    assert paths.db_path == tmp_path / "home" / "tienda.db"
    assert paths.logs_dir.is_dir()


def test_container_builds_sqlite_backend(tmp_path: Path):
    c = build_container(tmp_path / "wired.db", Settings(enforce_credit_limit=True, duplicate_window_seconds=0))
    assert isinstance(c.repo, SqliteRepository)
    assert c.sales.enforce_credit_limit
    assert c.inventory.list_products() == []
    assert c.repo.integrity_check() == "ok"


def test_container_builds_rest_backend():
    c = build_container(settings=Settings(backend="rest", rest_url="https://db.example.test", rest_key="k"))
    assert isinstance(c.repo, RestRepository)

    with pytest.raises(ValueError, match="TIENDA_REST_URL"):
        build_container(settings=Settings(backend="rest"))


def test_migrations_are_idempotent(tmp_path: Path):
    db = tmp_path / "twice.db"
    SqliteRepository(db).init_db()
    repo = SqliteRepository(db)
    repo.init_db()
    versions = [r["version"] for r in repo._fetch_all("SELECT version FROM schema_migrations ORDER BY version")]
    assert versions == [1, 2]


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("kaput")
    except RuntimeError:
        record = logging.getLogger("tienda.test").makeRecord(
            "tienda.test", logging.ERROR, __file__, 1, "checkout failed %s", ("V-1",), exc_info=sys.exc_info()
        )
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "checkout failed V-1"
    assert payload["logger"] == "tienda.test"
    assert "kaput" in payload["exception"]
