# Repofleet Sync Engine Tests
# Per-source orchestration of sync, pull and diff

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from repofleet.config.loader import load_config
from repofleet.config.schema import RepofleetConfig, Source, SSHOptions
from repofleet.connectors.base import ConnectorType
from repofleet.connectors.credentials import Credentials
from repofleet.errors import NotFoundError
from repofleet.git.operations import GitError
from repofleet.sync.engine import SyncEngine
from repofleet.sync.executor import ExecutionJob, Operation
from repofleet.sync.orphans import OrphanAction
from repofleet.sync.reconcile import StatusType
from repofleet.sync.resolver import StrategyResolver


class RecordingRunner:
    """Job runner that records jobs and fakes successful clones."""

    def __init__(self, fail: tuple[str, ...] = ()):
        self.jobs: list[ExecutionJob] = []
        self.fail = fail

    def __call__(self, job: ExecutionJob) -> None:
        self.jobs.append(job)
        if job.name in self.fail:
            raise GitError(f"git {job.operation.value} failed (exit 128)")
        if job.operation == Operation.CLONE:
            (job.path / ".git").mkdir(parents=True)


@pytest.fixture
def console() -> MagicMock:
    console = MagicMock()
    console.confirm_prune.return_value = True
    console.confirm_create_dir.return_value = True
    console.choose_orphan_action.return_value = OrphanAction.SKIP
    return console


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


def messages(mock_method: MagicMock) -> list[str]:
    return [c.args[0] for c in mock_method.call_args_list]


def make_engine(config: RepofleetConfig, console: MagicMock, runner: RecordingRunner, **kwargs) -> SyncEngine:
    return SyncEngine(config, Credentials(), console, runner=runner, **kwargs)


class TestSync:
    """Tests for SyncEngine.sync()."""

    def test_clones_missing_and_prunes_orphans(
        self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path], console, runner
    ):
        make_git_repo(workspace / "x")
        make_git_repo(workspace / "z")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync(prune=True, force=True)

        assert result.cloned == 1
        assert result.pruned == 1
        assert result.failed == 0
        assert [j.name for j in runner.jobs] == ["a/y"]
        assert runner.jobs[0].url == "git@github.com:a/y.git"
        assert runner.jobs[0].path == workspace / "y"
        assert not (workspace / "z").exists()
        console.confirm_prune.assert_not_called()
        console.print_diff.assert_called_once()

    def test_dry_run_changes_nothing(
        self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path], console, runner
    ):
        make_git_repo(workspace / "z")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync(prune=True, dry_run=True)

        assert runner.jobs == []
        assert (workspace / "z").exists()
        assert result.cloned == 0 and result.pruned == 0
        info = messages(console.print_info)
        assert any(m.startswith("would clone repo=a/x") for m in info)
        assert any(m.startswith("would prune repo=z") for m in info)

    def test_dry_run_reports_missing_root(self, manual_source: Source, temp_dir: Path, console, runner):
        manual_source.local_path = str(temp_dir / "new-root")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        engine.sync(dry_run=True)

        assert not (temp_dir / "new-root").exists()
        console.confirm_create_dir.assert_not_called()
        assert any(m.startswith("would create directory") for m in messages(console.print_info))

    def test_declined_root_creation_skips_source(self, manual_source: Source, temp_dir: Path, console, runner):
        manual_source.local_path = str(temp_dir / "new-root")
        console.confirm_create_dir.return_value = False
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync()

        assert runner.jobs == []
        assert not (temp_dir / "new-root").exists()
        assert result.skipped == 1

    def test_forced_root_creation(self, manual_source: Source, temp_dir: Path, console, runner):
        manual_source.local_path = str(temp_dir / "new-root")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync(force=True)

        assert (temp_dir / "new-root").is_dir()
        assert result.cloned == 2
        console.confirm_create_dir.assert_not_called()

    def test_up_to_date(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "x")
        make_git_repo(workspace / "y")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync()

        assert runner.jobs == []
        assert result.cloned == 0
        assert "source is up to date source=GitHub" in messages(console.print_info)
        console.print_diff.assert_not_called()

    def test_interactive_skip(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "x")
        make_git_repo(workspace / "y")
        make_git_repo(workspace / "z")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync()

        console.choose_orphan_action.assert_called_once()
        assert result.skipped == 1
        assert (workspace / "z").exists()

    def test_prune_declined(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "z")
        console.confirm_prune.return_value = False
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync(prune=True)

        console.confirm_prune.assert_called_once_with(["z"])
        assert (workspace / "z").exists()
        assert result.pruned == 0
        assert "prune cancelled" in messages(console.print_info)
        # Cloning still happens
        assert result.cloned == 2

    def test_add_persists_config(self, config_file: Path, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "hello-world")
        make_git_repo(workspace / "extra")
        config = load_config(config_file)
        engine = make_engine(config, console, runner, config_path=str(config_file))

        result = engine.sync(add=True)

        assert result.added == 1
        # Platform has no token and is skipped, but stays in the file
        assert [e.source for e in result.source_errors] == ["Platform"]
        saved = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        assert [s["name"] for s in saved["sources"]] == ["GitHub", "Platform"]
        assert "octocat/extra" in saved["sources"][0]["repos"]
        # The override entry was cloned, the adopted orphan was not
        assert [j.name for j in runner.jobs] == ["octocat/spoon-knife"]

    def test_add_to_remote_config_not_saved(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "z")
        engine = make_engine(
            RepofleetConfig(sources=[manual_source]), console, runner, config_path="https://example.com/c.yaml"
        )

        result = engine.sync(add=True)

        assert result.added == 1
        assert any("remote config not saved" in m for m in messages(console.print_warning))

    def test_failed_clone_isolated(self, manual_source: Source, workspace: Path, console):
        runner = RecordingRunner(fail=("a/x",))
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.sync()

        assert result.cloned == 1
        assert [o.name for o in result.failures] == ["a/x"]
        assert any(m.startswith("failed to clone repo=a/x") for m in messages(console.print_error))

    def test_source_error_skips_only_that_source(self, manual_source: Source, temp_dir: Path, console, runner):
        connector = MagicMock()
        connector.list_repos.side_effect = NotFoundError.owner("ghost")
        resolver = StrategyResolver(Credentials(tokens={ConnectorType.GITHUB: "t"}), MagicMock(return_value=connector))
        broken = Source(name="Ghost", source="github.com/ghost", strategy="all", local_path=str(temp_dir / "ghost"))
        engine = make_engine(RepofleetConfig(sources=[broken, manual_source]), console, runner, resolver=resolver)

        result = engine.sync(force=True)

        assert [e.source for e in result.source_errors] == ["Ghost"]
        assert "user or organization not found: ghost" in result.source_errors[0].error
        assert result.cloned == 2
        assert any("source=Ghost" in m for m in messages(console.print_warning))

    def test_stop_before_next_source(self, manual_source: Source, console, runner):
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)
        engine.stop.set()

        result = engine.sync(force=True)

        assert runner.jobs == []
        assert result.cloned == 0


class TestPull:
    """Tests for SyncEngine.pull()."""

    def test_pulls_every_working_copy(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "x")
        make_git_repo(workspace / "z")
        manual_source.ssh_options = SSHOptions(private_key="/k")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.pull(jobs=2)

        assert result.updated == 2
        assert sorted(j.name for j in runner.jobs) == ["x", "z"]
        assert all(j.operation == Operation.PULL for j in runner.jobs)
        assert all(j.private_key == "/k" for j in runner.jobs)

    def test_missing_root_skipped(self, manual_source: Source, temp_dir: Path, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "x")
        missing = Source(name="Missing", source="github.com/b", strategy="all", local_path=str(temp_dir / "nope"))
        engine = make_engine(RepofleetConfig(sources=[missing, manual_source]), console, runner)

        result = engine.pull()

        assert [e.source for e in result.source_errors] == ["Missing"]
        assert result.updated == 1

    def test_failures_reported(self, manual_source: Source, workspace: Path, make_git_repo, console):
        make_git_repo(workspace / "x")
        make_git_repo(workspace / "y")
        runner = RecordingRunner(fail=("y",))
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.pull()

        assert result.updated == 1
        assert [o.name for o in result.failures] == ["y"]

    def test_confirm_declined(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "x")
        confirm = MagicMock(return_value=False)
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.pull(confirm=confirm)

        confirm.assert_called_once_with(1)
        assert runner.jobs == []
        assert result.updated == 0

    def test_nothing_to_pull(self, manual_source: Source, console, runner):
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        result = engine.pull()

        assert result.updated == 0
        assert "no repos to pull" in messages(console.print_info)


class TestDiff:
    """Tests for SyncEngine.diff()."""

    def test_classifies_each_source(self, manual_source: Source, workspace: Path, make_git_repo, console, runner):
        make_git_repo(workspace / "x")
        make_git_repo(workspace / "z")
        engine = make_engine(RepofleetConfig(sources=[manual_source]), console, runner)

        sources = engine.diff()

        assert [s.name for s in sources] == ["GitHub"]
        assert [(s.name, s.status) for s in sources[0].statuses] == [
            ("x", StatusType.UNCHANGED),
            ("y", StatusType.TO_CREATE),
            ("z", StatusType.ORPHANED),
        ]
        assert runner.jobs == []

    def test_failing_source_skipped(self, manual_source: Source, temp_dir: Path, console, runner):
        unsupported = Source(
            name="File",
            source="github.com/a",
            strategy="file",
            local_path=str(temp_dir),
            file_strategy={"filename": "repos.txt"},
        )
        engine = make_engine(RepofleetConfig(sources=[unsupported, manual_source]), console, runner)

        sources = engine.diff()

        assert [s.name for s in sources] == ["GitHub"]
        assert any("source=File" in m for m in messages(console.print_warning))
