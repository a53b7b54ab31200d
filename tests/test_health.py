"""Tests for health endpoint."""

from unittest.mock import MagicMock, patch

from httpx import ASGITransport, AsyncClient

from thingslog.main import app


def _mock_settings(vault_path, data_path, things_db_path):
    mock_s = MagicMock()
    mock_s.vault_path = vault_path
    mock_s.data_path = data_path
    mock_s.things_db_path = things_db_path
    return mock_s


async def test_health_returns_ok(tmp_path):
    """Test that /health returns status ok when vault and database exist."""
    db = tmp_path / "main.sqlite"
    db.touch()
    with patch("thingslog.main.get_settings", return_value=_mock_settings(tmp_path, tmp_path, db)):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["vault"] == "ok"
    assert data["things_db"] == "ok"
    assert "free_disk_gb" in data
    assert data["last_sync_hours_ago"] is None


async def test_health_missing_vault(tmp_path):
    mock_s = _mock_settings(None, tmp_path, tmp_path / "main.sqlite")
    with patch("thingslog.main.get_settings", return_value=mock_s):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            data = (await client.get("/health")).json()

    assert data["status"] == "error"
    assert data["vault"] == "not configured or missing"


async def test_health_warns_on_missing_database(tmp_path):
    mock_s = _mock_settings(tmp_path, tmp_path, tmp_path / "missing.sqlite")
    with patch("thingslog.main.get_settings", return_value=mock_s):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            data = (await client.get("/health")).json()

    assert data["status"] == "warning"
    assert data["things_db"] == "missing"


async def test_health_reports_last_sync(tmp_path):
    db = tmp_path / "main.sqlite"
    db.touch()
    (tmp_path / ".sync_completed").write_text("2026-02-05T10:00:00")
    with patch("thingslog.main.get_settings", return_value=_mock_settings(tmp_path, tmp_path, db)):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            data = (await client.get("/api/v1/health")).json()

    assert data["last_sync_hours_ago"] == 0.0
    assert "sync" not in data


async def test_root_returns_project_info():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "thingslog"
    assert "version" in data
