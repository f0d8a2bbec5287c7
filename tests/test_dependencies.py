from playwright.sync_api import Error as PlaywrightError

from md_render import dependencies


def test_installed_chromium_passes(monkeypatch, tmp_path, log) -> None:
    monkeypatch.setattr(dependencies, "chromium_executable", lambda: tmp_path / "chrome")

    assert dependencies.check_dependencies(log) is True


def test_missing_chromium_only_warns(monkeypatch, log, capsys) -> None:
    monkeypatch.setattr(dependencies, "chromium_executable", lambda: None)

    assert dependencies.check_dependencies(log) is False
    assert "playwright install chromium" in capsys.readouterr().out


def test_playwright_error_only_warns(monkeypatch, log, capsys) -> None:
    def broken():
        raise PlaywrightError("driver crashed")

    monkeypatch.setattr(dependencies, "chromium_executable", broken)

    assert dependencies.check_dependencies(log) is False
    assert "driver crashed" in capsys.readouterr().out
