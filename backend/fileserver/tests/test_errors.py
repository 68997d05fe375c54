import os
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from fileserver.errors import (
    STATUS_BY_KIND,
    ConflictError,
    ErrorKind,
    FileServiceError,
    InvalidArgumentError,
    NotFoundError,
    os_errors_mapped,
    translate_os_error,
)
from fileserver.config.config import settings
from fileserver.main import app


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestStatusMapping:
    def test_fixed_status_per_kind(self) -> None:
        assert STATUS_BY_KIND == {
            ErrorKind.not_found: 404,
            ErrorKind.conflict: 409,
            ErrorKind.invalid_argument: 400,
            ErrorKind.internal: 500,
        }

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (NotFoundError("x"), 404),
            (ConflictError("x"), 409),
            (InvalidArgumentError("x"), 400),
            (FileServiceError("x"), 500),
            (FileServiceError("x", kind=ErrorKind.conflict), 409),
        ],
    )
    def test_error_status_code(self, error: FileServiceError, status_code: int) -> None:
        assert error.status_code == status_code


class TestTranslateOsError:
    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (FileNotFoundError(), NotFoundError),
            (FileExistsError(), ConflictError),
            (IsADirectoryError(), InvalidArgumentError),
            (NotADirectoryError(), InvalidArgumentError),
        ],
    )
    def test_anticipated_errors_are_tagged(self, exc: OSError, expected: type) -> None:
        mapped = translate_os_error(exc, "/some/path")
        assert isinstance(mapped, expected)
        assert "/some/path" in mapped.message

    def test_other_errors_are_not_translated(self) -> None:
        assert translate_os_error(PermissionError(), "/p") is None

    def test_context_manager_reraises_tagged_error(self) -> None:
        with pytest.raises(NotFoundError) as info:
            with os_errors_mapped("/p"):
                raise FileNotFoundError("gone")
        assert isinstance(info.value.__cause__, FileNotFoundError)

    def test_context_manager_lets_unexpected_errors_through(self) -> None:
        with pytest.raises(PermissionError):
            with os_errors_mapped("/p"):
                raise PermissionError("denied")


class TestTopLevelTranslator:
    async def test_tagged_error_body(self, client: AsyncClient, tmp_path: Path) -> None:
        response = await client.get("/file", params={"path": str(tmp_path / "nope")})
        assert response.status_code == 404
        assert set(response.json()) == {"error"}

    async def test_unexpected_error_reports_internal_with_raw_message(
        self, client: AsyncClient, tmp_path: Path, monkeypatch
    ) -> None:
        def _denied(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr(os, "listdir", _denied)
        response = await client.get("/files", params={"path": str(tmp_path)})
        assert response.status_code == 500
        assert "Permission denied" in response.json()["error"]

    async def test_unexpected_error_during_walk(
        self, client: AsyncClient, tmp_path: Path, monkeypatch
    ) -> None:
        (tmp_path / "sub").mkdir()
        real_listdir = os.listdir

        def _listdir(path):
            if path.endswith("sub"):
                raise PermissionError(13, "Permission denied", path)
            return real_listdir(path)

        monkeypatch.setattr(os, "listdir", _listdir)
        response = await client.get("/files/walk", params={"path": str(tmp_path)})
        assert response.status_code == 500
        assert "Permission denied" in response.json()["error"]

    async def test_internal_error_carries_cors_headers(self, client: AsyncClient, tmp_path: Path, monkeypatch) -> None:
        origin = settings.cors_origins[0]

        def _denied(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr(os, "listdir", _denied)
        response = await client.get("/files", params={"path": str(tmp_path)}, headers={"Origin": origin})
        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == origin
        assert "Permission denied" in response.json()["error"]

    async def test_not_found_carries_cors_headers(self, client: AsyncClient, tmp_path: Path) -> None:
        origin = settings.cors_origins[0]
        response = await client.get("/file", params={"path": str(tmp_path / "nope")}, headers={"Origin": origin})
        assert response.status_code == 404
        assert response.headers["access-control-allow-origin"] == origin


class TestErrorSchemaDocumented:
    async def test_error_responses_reference_error_model(self, client: AsyncClient) -> None:
        schema = (await client.get("/openapi.json")).json()
        responses = schema["paths"]["/file"]["get"]["responses"]
        for code in ("400", "404", "500"):
            ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/ErrorResponse")
        assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {"error"}
