import pytest


ACTIONS_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "GITHUB_EVENT_PATH",
    "GITHUB_OUTPUT",
    "GITHUB_API_URL",
    "INPUT_FILE_GROUPS",
    "INPUT_DEFAULT_GROUP_LABEL",
    "INPUT_IGNORE_WHITESPACE",
    "INPUT_COMMENT_HEADER",
)


@pytest.fixture(autouse=True)
def isolate_actions_environment(monkeypatch):
    """Remove GitHub Actions variables inherited from the surrounding CI run.

    The CLI reads its defaults from these variables, so a test run inside a
    workflow would otherwise pick up the real repository and token.
    """
    for name in ACTIONS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
