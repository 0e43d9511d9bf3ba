from __future__ import annotations

import asyncio

import pytest
from conftest import make_record

from personal_assistant.__main__ import main
from personal_assistant.app import AssistantApp
from personal_assistant.config import load_config


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"identity: alice\n"
        f"storage:\n  db_path: {tmp_path / 'data' / 'chat_history.db'}\n"
        "use_cases:\n"
        "  - id: use-case-5\n"
        "    title: Performance Testing\n"
        "    objective: Generate load test scenarios\n",
        encoding="utf-8",
    )
    return path


def test_use_cases_lists_builtin_and_configured(config_path, tmp_path, capsys) -> None:
    main(["use-cases", "-c", str(config_path), "-e", str(tmp_path / "missing.env")])

    out = capsys.readouterr().out
    assert "use-case-1" in out
    assert "use-case-5" in out
    assert "Performance Testing" in out


def test_config_check_summarizes(config_path, tmp_path, capsys) -> None:
    main(["config-check", "-c", str(config_path), "-e", str(tmp_path / "missing.env")])

    out = capsys.readouterr().out
    assert "Configuration valid" in out
    assert "best-effort" in out
    assert "5 configured" in out


def test_history_prints_newest_first(config_path, tmp_path, capsys) -> None:
    async def _seed() -> None:
        async with AssistantApp(load_config(config_path, tmp_path / "missing.env")) as app:
            await app.store.put(make_record("alice", "2024-05-01T10:00:00.000Z", question="older question"))
            await app.store.put(make_record("alice", "2024-05-02T10:00:00.000Z", question="newer question"))

    asyncio.run(_seed())

    main(["history", "-c", str(config_path), "-e", str(tmp_path / "missing.env")])

    out = capsys.readouterr().out
    assert out.index("newer question") < out.index("older question")
    assert "Generate API test cases and automate them" in out


def test_missing_config_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["config-check", "-c", str(tmp_path / "nope.yaml")])

    assert excinfo.value.code == 1


def test_chat_without_backend_credentials_reports_configuration_error(tmp_path, capsys) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        f"identity: alice\nstorage:\n  db_path: {tmp_path / 'data' / 'chat_history.db'}\n",
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["chat", "-c", str(path), "-e", str(tmp_path / "missing.env")])

    assert excinfo.value.code == 1
    assert "Configuration error" in capsys.readouterr().err
