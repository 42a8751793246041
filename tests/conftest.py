import pytest

PROVIDER_ENV_VARS = [
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "COPILOT_TOKEN",
    "GITHUB_TOKEN",
    "CODESPACES",
    "AI_COMMIT_PROVIDER",
    "AI_COMMIT_MODEL",
]


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path_factory, monkeypatch):
    """Keep tests away from the real HOME, config files and API keys."""
    home = tmp_path_factory.mktemp("home")
    work = tmp_path_factory.mktemp("work")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    monkeypatch.chdir(work)
    for var in PROVIDER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home
