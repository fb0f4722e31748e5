import pytest


@pytest.fixture(autouse=True)
def isolate_user_config(tmp_path, monkeypatch):
    """Point the config loader at an empty directory and clear env overrides.

    Tests must not pick up a developer's ``~/.pr_automation/config.json``,
    a project ``.env`` file or a ``GITHUB_TOKEN`` exported in their shell.
    """
    monkeypatch.setattr(
        "pr_automation.config.loader._get_config_directory",
        lambda: tmp_path / ".pr_automation",
    )
    monkeypatch.setattr("pr_automation.config.loader.find_dotenv", lambda usecwd=False: "")
    for name in ("GITHUB_TOKEN", "GITHUB_API_URL", "APP_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    yield
