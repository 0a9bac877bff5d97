import pytest


@pytest.fixture(autouse=True)
def clean_bigcalc_env(monkeypatch):
    # Settings are read from the environment; keep the developer's shell out of the tests.
    for name in ("LOG_LEVEL", "SHOW_TREE", "PROMPT", "MAX_BATCH_SIZE"):
        monkeypatch.delenv(f"BIGCALC_{name}", raising=False)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
