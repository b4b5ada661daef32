import pytest

from src.dispatcher.tools import COMMAND_NOT_FOUND, ToolFailure, format_cmd, run_tool


def test_success_passes_cwd_and_env(recorder, tmp_path):
    run_tool("build", ["python", "-m", "build"], cwd=tmp_path, env={"X": "1"})

    assert recorder.argvs == [["python", "-m", "build"]]
    assert recorder.calls[0].cwd == str(tmp_path)
    assert recorder.calls[0].env == {"X": "1"}


def test_nonzero_exit_code_is_propagated(recorder, tmp_path):
    recorder.fail_on("upload", code=5)

    with pytest.raises(ToolFailure) as exc:
        run_tool("publish:test", ["twine", "upload", "dist/*"], cwd=tmp_path, env={})

    assert exc.value.exit_code == 5
    assert exc.value.cmd == "twine upload 'dist/*'"
    assert "publish:test" in str(exc.value)


def test_missing_executable_maps_to_127_with_hint(recorder, tmp_path):
    recorder.missing.add("pre-commit")

    with pytest.raises(ToolFailure) as exc:
        run_tool("lint", ["pre-commit", "run"], cwd=tmp_path, env={})

    assert exc.value.exit_code == COMMAND_NOT_FOUND
    assert "pre-commit" in exc.value.hint


def test_format_cmd_quotes_arguments():
    assert format_cmd(["echo", "a b", "c"]) == "echo 'a b' c"
