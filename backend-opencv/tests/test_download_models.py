"""Tests for the age/gender model downloader (network faked)."""

from __future__ import annotations

from kidtoon import download_models


def test_downloads_missing_files(monkeypatch, tmp_path):
    fetched = []

    def fake_download(url, filename):
        fetched.append(url)
        open(filename, "wb").close()

    monkeypatch.setattr(download_models, "download_file", fake_download)
    (tmp_path / "age_deploy.prototxt").write_text("already here")

    assert download_models.main(tmp_path) is True
    assert len(fetched) == 3
    assert all((tmp_path / name).exists() for name in download_models.MODEL_FILES)


def test_reports_failure(monkeypatch, tmp_path):
    def failing_download(url, filename):
        raise OSError("no network")

    monkeypatch.setattr(download_models, "download_file", failing_download)
    assert download_models.main(tmp_path / "models") is False
