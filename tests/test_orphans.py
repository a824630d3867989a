# Repofleet Orphan Handling Tests
# Prune, add and skip of undeclared working copies

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

from repofleet.config.schema import Source
from repofleet.sync.orphans import OrphanAction, OrphanHandler, guess_full_name
from repofleet.sync.reconcile import RepoStatus, StatusType


def orphan(root: Path, name: str) -> RepoStatus:
    return RepoStatus(
        name=name,
        full_name=None,
        local_path=root / name,
        status=StatusType.ORPHANED,
        in_config=False,
        exists_local=True,
    )


class TestGuessFullName:
    """Tests for guess_full_name()."""

    def test_uses_last_owner_segment(self):
        assert guess_full_name("github.com/arch-err", "dotfiles") == "arch-err/dotfiles"
        assert guess_full_name("git.example.com/group/sub", "tool") == "sub/tool"

    def test_without_owner(self):
        assert guess_full_name("github.com", "dotfiles") == "dotfiles"


class TestPrune:
    """Tests for OrphanHandler.prune()."""

    def test_forced_prune_removes(self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path]):
        make_git_repo(workspace / "z")
        confirm = MagicMock()

        result = OrphanHandler(manual_source).prune([orphan(workspace, "z")], force=True, confirm=confirm)

        assert result.action == OrphanAction.PRUNE
        assert result.succeeded == 1
        assert not (workspace / "z").exists()
        confirm.assert_not_called()

    def test_missing_path_reported_without_stopping(
        self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path]
    ):
        make_git_repo(workspace / "z")

        result = OrphanHandler(manual_source).prune(
            [orphan(workspace, "gone"), orphan(workspace, "z")],
            force=True,
        )

        assert [o.success for o in result.outcomes] == [False, True]
        assert "does not exist" in result.failed[0].error
        assert not (workspace / "z").exists()

    def test_confirm_declined(self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path]):
        make_git_repo(workspace / "z")
        confirm = MagicMock(return_value=False)

        result = OrphanHandler(manual_source).prune([orphan(workspace, "z")], confirm=confirm)

        assert result.cancelled
        assert result.outcomes == []
        assert (workspace / "z").exists()
        confirm.assert_called_once_with(["z"])

    def test_confirm_accepted(self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path]):
        make_git_repo(workspace / "z")

        result = OrphanHandler(manual_source).prune([orphan(workspace, "z")], confirm=lambda names: True)

        assert result.succeeded == 1
        assert not (workspace / "z").exists()

    def test_no_confirm_callback_means_no_removal(self, manual_source: Source, workspace: Path, make_git_repo):
        make_git_repo(workspace / "z")

        result = OrphanHandler(manual_source).prune([orphan(workspace, "z")])

        assert result.cancelled
        assert (workspace / "z").exists()

    def test_dry_run(self, manual_source: Source, workspace: Path, make_git_repo: Callable[[Path], Path]):
        make_git_repo(workspace / "z")

        result = OrphanHandler(manual_source).prune([orphan(workspace, "z")], force=True, dry_run=True)

        assert result.dry_run
        assert [o.name for o in result.outcomes] == ["z"]
        assert (workspace / "z").exists()


class TestAdd:
    """Tests for OrphanHandler.add()."""

    def test_appends_guessed_entries(self, manual_source: Source, workspace: Path):
        result = OrphanHandler(manual_source).add([orphan(workspace, "z")])

        assert [e.name for e in manual_source.repos] == ["a/x", "a/y", "a/z"]
        assert result.outcomes[0].full_name == "a/z"
        assert result.config_changed

    def test_dry_run_leaves_source(self, manual_source: Source, workspace: Path):
        result = OrphanHandler(manual_source).add([orphan(workspace, "z")], dry_run=True)

        assert [e.name for e in manual_source.repos] == ["a/x", "a/y"]
        assert result.outcomes[0].full_name == "a/z"
        assert not result.config_changed


class TestHandle:
    """Tests for OrphanHandler.handle() dispatch."""

    def test_skip_mutates_nothing(self, manual_source: Source, workspace: Path, make_git_repo):
        make_git_repo(workspace / "z")

        result = OrphanHandler(manual_source).handle(OrphanAction.SKIP, [orphan(workspace, "z")], force=True)

        assert result.action == OrphanAction.SKIP
        assert len(result.outcomes) == 1
        assert (workspace / "z").exists()
        assert len(manual_source.repos) == 2

    def test_dispatches_prune(self, manual_source: Source, workspace: Path, make_git_repo):
        make_git_repo(workspace / "z")

        result = OrphanHandler(manual_source).handle(OrphanAction.PRUNE, [orphan(workspace, "z")], force=True)

        assert result.action == OrphanAction.PRUNE
        assert not (workspace / "z").exists()

    def test_dispatches_add(self, manual_source: Source, workspace: Path):
        result = OrphanHandler(manual_source).handle(OrphanAction.ADD, [orphan(workspace, "z")])

        assert result.action == OrphanAction.ADD
        assert manual_source.repos[-1].name == "a/z"
