from src.dispatcher.utils import DEFAULTS
from src.tasks.clean import clean_tree


def _settings():
    return dict(DEFAULTS["clean"], exclude=[DEFAULTS["clean"]["exclude"]])


def _make_tree(root):
    for d in [
        "dist",
        "build/lib",
        "test-reports",
        "htmlcov",
        ".pytest_cache",
        "src/pkg/__pycache__",
        "src/pkg.egg-info",
        "lib/pkg-0.1.dist-info",
        ".venv/lib/site-packages/__pycache__",
        ".venv/lib/site-packages/other.dist-info",
    ]:
        (root / d).mkdir(parents=True)
    (root / "coverage.xml").write_text("<coverage/>")
    (root / "src/pkg/__init__.py").write_text("")
    (root / "src/pkg/mod.pyc").write_bytes(b"\0")
    (root / ".venv/lib/site-packages/x.pyc").write_bytes(b"\0")


def test_clean_removes_artifacts_and_keeps_sources(tmp_path):
    _make_tree(tmp_path)

    clean_tree(tmp_path, **_settings())

    for gone in [
        "dist",
        "build",
        "test-reports",
        "coverage.xml",
        "htmlcov",
        ".pytest_cache",
        "src/pkg/__pycache__",
        "src/pkg.egg-info",
        "lib/pkg-0.1.dist-info",
        "src/pkg/mod.pyc",
    ]:
        assert not (tmp_path / gone).exists(), gone
    assert (tmp_path / "src/pkg/__init__.py").exists()


def test_clean_leaves_virtualenv_alone(tmp_path):
    _make_tree(tmp_path)

    clean_tree(tmp_path, **_settings())

    assert (tmp_path / ".venv/lib/site-packages/__pycache__").is_dir()
    assert (tmp_path / ".venv/lib/site-packages/other.dist-info").is_dir()
    assert (tmp_path / ".venv/lib/site-packages/x.pyc").is_file()


def test_clean_twice_is_fine(tmp_path):
    _make_tree(tmp_path)

    first = clean_tree(tmp_path, **_settings())
    second = clean_tree(tmp_path, **_settings())

    assert first
    assert second == []


def test_clean_task_runs_on_empty_tree(dispatcher, ctx, recorder):
    dispatcher.run("clean", ctx)
    dispatcher.run("clean", ctx)

    assert recorder.calls == []
