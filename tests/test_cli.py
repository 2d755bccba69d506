"""Tests for the ``vismatch`` command-line entry point."""

from __future__ import annotations

import functools
from pathlib import Path

import httpx
import pytest

from vismatch_client import cli
from vismatch_client.services.api_client import ApiClient

from conftest import FakeVismatchServer, refuse_connection


@pytest.fixture()
def use_fake_server(monkeypatch: pytest.MonkeyPatch, fake_server: FakeVismatchServer) -> FakeVismatchServer:
    """Route every ApiClient the CLI builds to the fake server."""
    monkeypatch.setattr(
        cli, "ApiClient", functools.partial(ApiClient, transport=fake_server.transport())
    )
    return fake_server


def test_upload_reports_each_file(
    use_fake_server: FakeVismatchServer, image_files: list[str], capsys
) -> None:
    assert cli.main(["upload", "demo", *image_files]) == 0

    out = capsys.readouterr().out
    assert "[+] a.png: a.png uploaded" in out
    assert "Uploaded 3 images: 3 succeeded" in out
    assert len(use_fake_server.uploads) == 3


def test_upload_exit_status_on_failure(
    use_fake_server: FakeVismatchServer, image_files: list[str], capsys
) -> None:
    use_fake_server.reject["c.png"] = "duplicate image_name"
    assert cli.main(["upload", "demo", *image_files]) == 1
    out = capsys.readouterr().out
    assert "[x] c.png: duplicate image_name" in out
    assert "2 succeeded, 1 failed" in out


def test_upload_rejects_non_images(
    use_fake_server: FakeVismatchServer, tmp_path: Path, capsys
) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("hello")
    assert cli.main(["upload", "demo", str(notes)]) == 1
    assert "notes.txt is not an image" in capsys.readouterr().err
    assert use_fake_server.uploads == []


def test_compare_rejects_non_images(
    use_fake_server: FakeVismatchServer, tmp_path: Path, capsys
) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("hello")
    assert cli.main(["compare", "demo", str(notes)]) == 1
    assert "notes.txt is not an image" in capsys.readouterr().err
    assert use_fake_server.compares == []


@pytest.mark.parametrize("top", ["0", "-2", "many"])
def test_top_must_be_positive(
    use_fake_server: FakeVismatchServer, image_files: list[str], top: str
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["compare", "demo", image_files[0], f"--top={top}"])
    assert exc_info.value.code == 2
    assert use_fake_server.compares == []


def test_compare_prints_ranked_matches(
    use_fake_server: FakeVismatchServer, image_files: list[str], capsys
) -> None:
    use_fake_server.compare_result = [
        {"image_name": "x.png", "distance": 1.5},
        {"image_name": "y.png", "distance": 4.0},
    ]
    assert cli.main(["compare", "demo", image_files[0], "--no-image", "--top", "1"]) == 0

    out = capsys.readouterr().out
    assert "Found 2 similar images" in out
    assert "x.png" in out
    assert "y.png" not in out
    assert use_fake_server.compares[0]["with_image"] is False


def test_delete_project(use_fake_server: FakeVismatchServer, capsys) -> None:
    use_fake_server.projects.add("Proj A")
    assert cli.main(["delete-project", "Proj A"]) == 0
    assert "project <Proj A> deleted" in capsys.readouterr().out


def test_delete_missing_project(use_fake_server: FakeVismatchServer, capsys) -> None:
    assert cli.main(["delete-project", "ghost"]) == 1
    assert "project <ghost> does not exist" in capsys.readouterr().err


def test_unreachable_server(
    monkeypatch: pytest.MonkeyPatch, image_files: list[str], capsys
) -> None:
    monkeypatch.setattr(
        cli,
        "ApiClient",
        functools.partial(ApiClient, transport=httpx.MockTransport(refuse_connection)),
    )
    assert cli.main(["--api-url", "http://down:9", "compare", "demo", image_files[0]]) == 1
    assert "Unable to reach the image matching server at http://down:9" in capsys.readouterr().err


def test_command_is_required() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 2
