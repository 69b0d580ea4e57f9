import os

import pytest

from settings import DEFAULT_MAX_LISTED, DEFAULT_TOOL_TIMEOUT, load_settings

ENV_NAMES = ("MEX_ADDR2LINE", "MEX_OBJDUMP", "MEX_TOOL_TIMEOUT", "MEX_MAX_LISTED")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_NAMES:
        os.environ.pop(name, None)


def test_defaults():
    settings = load_settings()
    assert settings == {
        "addr2line": "addr2line",
        "objdump": "objdump",
        "tool_timeout": DEFAULT_TOOL_TIMEOUT,
        "max_listed": DEFAULT_MAX_LISTED,
    }


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MEX_ADDR2LINE", "aarch64-linux-gnu-addr2line")
    monkeypatch.setenv("MEX_TOOL_TIMEOUT", "2.5")
    monkeypatch.setenv("MEX_MAX_LISTED", "10")

    settings = load_settings()
    assert settings["addr2line"] == "aarch64-linux-gnu-addr2line"
    assert settings["tool_timeout"] == 2.5
    assert settings["max_listed"] == 10


def test_dotenv_file_is_loaded(tmp_path):
    (tmp_path / ".env").write_text("MEX_OBJDUMP=llvm-objdump\n")

    assert load_settings()["objdump"] == "llvm-objdump"


def test_invalid_numbers_fall_back(monkeypatch, capsys):
    monkeypatch.setenv("MEX_MAX_LISTED", "many")
    monkeypatch.setenv("MEX_TOOL_TIMEOUT", "-1")

    settings = load_settings()
    assert settings["max_listed"] == DEFAULT_MAX_LISTED
    assert settings["tool_timeout"] == DEFAULT_TOOL_TIMEOUT
    assert "MEX_MAX_LISTED" in capsys.readouterr().err


def test_non_finite_timeout_falls_back(monkeypatch):
    monkeypatch.setenv("MEX_TOOL_TIMEOUT", "nan")
    assert load_settings()["tool_timeout"] == DEFAULT_TOOL_TIMEOUT

    monkeypatch.setenv("MEX_TOOL_TIMEOUT", "inf")
    assert load_settings()["tool_timeout"] == DEFAULT_TOOL_TIMEOUT
