"""Tests for the git adapter, command runner and commit log reader."""

import os
import shutil
import subprocess

import pytest
from unittest.mock import Mock, patch

from patchtracker.adapters.git import GitAdapter, GitCommandRunner, GitCommitLogReader
from patchtracker.application.sync import SyncOrchestrator
from patchtracker.core.domain import encode_patch
from patchtracker.core.exceptions import BackendCommandError
from patchtracker.core.ports import AppConfig, PatchTrackerPort, SyncConfig, TrackerConfig


HASH_A = "a" * 40
HASH_B = "b" * 40
TREE = "f" * 40
RANGE = "origin/master..HEAD"


def metadata_record(commit_hash, parents=""):
    fields = [
        commit_hash, TREE, parents,
        "2024-01-02 10:00:00 +0100", "Jane Doe", "jane@example.com",
        "2024-01-03 11:00:00 +0100", "Joe Bloggs", "joe@example.com",
    ]
    return "\x1f".join(fields) + "\x1e\n"


def message_record(commit_hash, subject, body):
    return f"{commit_hash}\x1f{subject}\x1f{body}\x1e\n"


METADATA_OUTPUT = metadata_record(HASH_A, "c" * 40) + metadata_record(HASH_B, HASH_A)
MESSAGE_OUTPUT = (
    message_record(HASH_A, "First change", "First change\n\nTrackedAt: http://t/patch/x\n")
    + message_record(HASH_B, "Second change", "Second change\n")
)


def fake_git(metadata=METADATA_OUTPUT, messages=MESSAGE_OUTPUT):
    """Runner double answering the two log queries."""
    def run(args, directory=None):
        fmt = next(a for a in args if a.startswith("--format="))
        return messages if "%B" in fmt else metadata

    runner = Mock(spec=GitCommandRunner)
    runner.run.side_effect = run
    return runner


class TestGitCommandRunner:
    """Tests for GitCommandRunner."""

    @pytest.fixture
    def runner(self):
        return GitCommandRunner()

    def test_runs_in_directory(self, runner, tmp_path):
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"out\n", stderr=b"")
        cwd_before = os.getcwd()

        with patch("patchtracker.adapters.git.runner.subprocess.run", return_value=completed) as run:
            output = runner.run(["status"], tmp_path)

        assert output == "out\n"
        assert run.call_args.args[0] == ["git", "status"]
        assert run.call_args.kwargs["cwd"] == str(tmp_path)
        assert os.getcwd() == cwd_before

    def test_output_keeps_bytes_and_line_endings(self, runner, tmp_path):
        raw = b"+echo hi\r\n+/* caf\xe9 */\n"
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=raw, stderr=b"")

        with patch("patchtracker.adapters.git.runner.subprocess.run", return_value=completed) as run:
            output = runner.run(["format-patch", "--stdout"], tmp_path)

        assert "text" not in run.call_args.kwargs
        assert output.startswith("+echo hi\r\n")
        assert encode_patch(output) == raw

    def test_non_zero_exit(self, runner, tmp_path):
        completed = subprocess.CompletedProcess(
            args=[], returncode=128, stdout=b"", stderr=b"fatal: not a git repository\n"
        )

        with patch("patchtracker.adapters.git.runner.subprocess.run", return_value=completed):
            with pytest.raises(BackendCommandError) as exc_info:
                runner.run(["log"], tmp_path)

        assert exc_info.value.returncode == 128
        assert exc_info.value.stderr == "fatal: not a git repository"
        assert exc_info.value.command == ["git", "log"]

    def test_missing_directory(self, runner, tmp_path):
        cwd_before = os.getcwd()

        with patch(
            "patchtracker.adapters.git.runner.subprocess.run",
            side_effect=FileNotFoundError("no such directory"),
        ):
            with pytest.raises(BackendCommandError) as exc_info:
                runner.run(["log"], tmp_path / "missing")

        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert os.getcwd() == cwd_before


class TestGitCommitLogReader:
    """Tests for GitCommitLogReader."""

    def test_reads_commits_oldest_first(self):
        reader = GitCommitLogReader(fake_git())

        log = reader.read(RANGE, "/repo")

        assert log.hashes == [HASH_A, HASH_B]
        assert log.commits[1].parent_hashes == HASH_A
        assert log.commits[0].author.name == "Jane Doe"
        assert log.commits[0].committer.email == "joe@example.com"

    def test_messages_keyed_by_hash(self):
        reader = GitCommitLogReader(fake_git())

        log = reader.read(RANGE, "/repo")

        assert list(log.messages) == log.hashes
        assert log.messages[HASH_A].short_message == "First change"
        assert log.messages[HASH_A].full_message == "First change\n\nTrackedAt: http://t/patch/x\n"

    def test_both_queries_share_range_directory_and_order(self):
        runner = fake_git()
        GitCommitLogReader(runner).read(RANGE, "/repo")

        assert runner.run.call_count == 2
        for call in runner.run.call_args_list:
            args, directory = call.args
            assert directory == "/repo"
            assert "--reverse" in args
            assert RANGE in args

    def test_empty_range(self):
        reader = GitCommitLogReader(fake_git(metadata="", messages=""))

        log = reader.read(RANGE, "/repo")

        assert len(log) == 0
        assert log.messages == {}

    def test_disagreeing_queries(self):
        reader = GitCommitLogReader(fake_git(messages=message_record(HASH_A, "x", "x\n")))

        with pytest.raises(BackendCommandError):
            reader.read(RANGE, "/repo")

    def test_malformed_metadata(self):
        reader = GitCommitLogReader(fake_git(metadata="garbage\x1e\n"))

        with pytest.raises(BackendCommandError):
            reader.read(RANGE, "/repo")

    def test_backend_failure_propagates(self):
        runner = Mock(spec=GitCommandRunner)
        runner.run.side_effect = BackendCommandError("bad revision")

        with pytest.raises(BackendCommandError):
            GitCommitLogReader(runner).read("nope..HEAD", "/repo")


class TestGitAdapter:
    """Tests for GitAdapter."""

    @pytest.fixture
    def runner(self):
        runner = Mock(spec=GitCommandRunner)
        runner.run.return_value = "output\n"
        return runner

    def test_format_patches(self, runner):
        adapter = GitAdapter(runner)

        assert adapter.format_patches(RANGE, "/repo") == "output\n"
        runner.run.assert_called_once_with(["format-patch", "--stdout", RANGE, "--"], "/repo")

    def test_create_branch(self, runner):
        GitAdapter(runner).create_branch("review-42", "/repo")

        runner.run.assert_called_once_with(["checkout", "-b", "review-42"], "/repo")

    def test_apply_patch(self, runner):
        GitAdapter(runner).apply_patch("/tmp/0-x.patch", "/repo")

        runner.run.assert_called_once_with(["am", "/tmp/0-x.patch"], "/repo")

    def test_read_commits_uses_log_reader(self):
        adapter = GitAdapter(fake_git())

        assert adapter.read_commits(RANGE, "/repo").hashes == [HASH_A, HASH_B]
        assert adapter.name == "Git"


def git(repo, *args):
    subprocess.run(
        ["git", "-c", "user.name=Jane Doe", "-c", "user.email=jane@example.com",
         "-c", "commit.gpgsign=false", *args],
        cwd=repo, check=True, capture_output=True,
    )


@pytest.fixture
def legacy_repo(tmp_path):
    """Repository whose last commit adds a Latin-1 file and a CRLF file."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "core.autocrlf", "false")
    (repo / "README").write_bytes(b"base\n")
    git(repo, "add", "README")
    git(repo, "commit", "-q", "-m", "Base")
    (repo / "legacy.c").write_bytes(b"/* caf\xe9 */\n")
    (repo / "win.bat").write_bytes(b"echo hi\r\n")
    git(repo, "add", "legacy.c", "win.bat")
    git(repo, "commit", "-q", "-m", "Add legacy files")
    return repo


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestFormatPatchesOnRepository:
    """Patch streams from a real repository reach the tracker byte for byte."""

    def test_format_patches_preserves_bytes(self, legacy_repo):
        stream = GitAdapter().format_patches("HEAD~1..HEAD", legacy_repo)

        raw = encode_patch(stream)
        assert b"+/* caf\xe9 */\n" in raw
        assert b"+echo hi\r\n" in raw

    def test_upload_sends_diff_unchanged(self, legacy_repo):
        tracker = Mock(spec=PatchTrackerPort)
        config = AppConfig(
            tracker=TrackerConfig(url="http://tracker.example.com:9292"),
            sync=SyncConfig(base_ref="HEAD~1"),
        )
        orchestrator = SyncOrchestrator(tracker=tracker, vcs=GitAdapter(), config=config)

        result = orchestrator.upload(legacy_repo)

        assert result.success
        assert result.succeeded == 1
        commit, body = tracker.upload_patch_body.call_args.args
        assert "+echo hi\r\n" in body
        assert b"+/* caf\xe9 */\n" in encode_patch(body)
        assert f"TrackedAt: http://tracker.example.com:9292/patch/{commit}\n" in body
