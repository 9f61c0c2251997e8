"""Tests for redirection of the standard streams."""

from __future__ import annotations

import os

import pytest

from cmdexec.errors import RedirectionError, StreamError
from cmdexec.executor import SavedStreams, apply_redirections, run_simple
from cmdexec.tree import SimpleCommand, Word, command

from conftest import needs_proc_fd, open_fds, read, std_stream_ids


def test_output_truncates_existing_file(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old content that is longer\n")
    status = run_simple(command("printf", "abc", output=str(target)))
    assert status == 0
    assert read(target) == "abc"


def test_output_append(tmp_path):
    target = tmp_path / "log.txt"
    run_simple(command("echo", "one", output=str(target), append_output=True))
    run_simple(command("echo", "two", output=str(target), append_output=True))
    assert read(target) == "one\ntwo\n"


def test_error_redirect(tmp_path):
    target = tmp_path / "err.txt"
    status = run_simple(command("sh", "-c", "echo oops >&2; exit 2", error=str(target)))
    assert status == 2
    assert read(target) == "oops\n"


def test_error_append(tmp_path):
    target = tmp_path / "err.txt"
    target.write_text("first\n")
    run_simple(command("sh", "-c", "echo second >&2", error=str(target), append_error=True))
    assert read(target) == "first\nsecond\n"


def test_shared_target_merges_streams(tmp_path):
    target = tmp_path / "all.txt"
    target.write_text("stale stale stale stale\n")
    status = run_simple(command("sh", "-c", "echo out; echo err >&2; echo out2", both=str(target)))
    assert status == 0
    assert read(target) == "out\nerr\nout2\n"


def test_merged_target_ignores_append_flags(tmp_path):
    target = tmp_path / "all.txt"
    target.write_text("previous\n")
    run_simple(command("echo", "fresh", both=str(target), append_output=True, append_error=True))
    assert read(target) == "fresh\n"


def test_equal_words_are_not_merged(tmp_path):
    path = str(tmp_path / "f.txt")
    simple = SimpleCommand(verb=Word.literal("true"), output=Word.literal(path), error=Word.literal(path))
    assert not simple.merges_error
    shared = Word.literal(path)
    assert SimpleCommand(verb=Word.literal("true"), output=shared, error=shared).merges_error


def test_input_redirect(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("hi\n")
    target = tmp_path / "out.txt"
    status = run_simple(command("cat", input=str(source), output=str(target)))
    assert status == 0
    assert read(target) == "hi\n"


def test_missing_input_short_circuits(tmp_path, capfd):
    target = tmp_path / "out.txt"
    status = run_simple(command("cat", input=str(tmp_path / "missing.txt"), output=str(target)))
    assert status == 1
    assert not target.exists()
    assert "missing.txt" in capfd.readouterr().err


def test_unwritable_output_reports_on_shell_stderr(tmp_path, capfd):
    err_file = tmp_path / "err.txt"
    bad = tmp_path / "no-such-dir" / "out.txt"
    status = run_simple(command("echo", "x", output=str(bad), error=str(err_file)))
    assert status == 1
    # stderr had already been redirected when stdout failed; the message
    # still goes to the shell's own stderr.
    assert "no-such-dir" in capfd.readouterr().err
    assert read(err_file) == ""


def test_streams_identical_after_redirected_command(tmp_path):
    before = std_stream_ids()
    source = tmp_path / "in.txt"
    source.write_text("data\n")
    run_simple(command("cat", input=str(source), output=str(tmp_path / "o"), error=str(tmp_path / "e")))
    run_simple(command("cat", input=str(tmp_path / "absent")))
    assert std_stream_ids() == before


@needs_proc_fd
def test_no_descriptor_leak(tmp_path):
    before = open_fds()
    for _ in range(5):
        run_simple(command("echo", "x", output=str(tmp_path / "o"), error=str(tmp_path / "e")))
        run_simple(command("cat", input=str(tmp_path / "absent")))
    assert open_fds() == before


def test_saved_streams_restore_on_exception(tmp_path):
    before = std_stream_ids()
    with pytest.raises(RuntimeError):
        with SavedStreams():
            apply_redirections(command("true", output=str(tmp_path / "o")))
            assert std_stream_ids() != before
            raise RuntimeError("boom")
    assert std_stream_ids() == before


def test_apply_redirections_error_carries_target(tmp_path):
    missing = str(tmp_path / "nope.txt")
    with SavedStreams():
        with pytest.raises(RedirectionError) as info:
            apply_redirections(command("cat", input=missing))
    assert info.value.target == missing
    assert info.value.operation == "open"
    assert isinstance(info.value.cause, FileNotFoundError)


def test_created_files_use_default_mode(tmp_path):
    target = tmp_path / "new.txt"
    old_umask = os.umask(0o022)
    try:
        run_simple(command("true", output=str(target)))
    finally:
        os.umask(old_umask)
    assert target.stat().st_mode & 0o777 == 0o644


def _failing_dup2(fd, fd2, inheritable=True):
    raise OSError(9, "Bad file descriptor")


def test_failed_restore_keeps_exit_in_flight(monkeypatch):
    with pytest.raises(SystemExit) as info:
        with SavedStreams():
            monkeypatch.setattr(os, "dup2", _failing_dup2)
            raise SystemExit(3)
    monkeypatch.undo()
    assert info.value.code == 3


def test_failed_restore_raises_stream_error(monkeypatch):
    with pytest.raises(StreamError) as info:
        with SavedStreams():
            monkeypatch.setattr(os, "dup2", _failing_dup2)
    monkeypatch.undo()
    assert info.value.operation == "dup2"
