from __future__ import annotations

from pathlib import Path

import pytest

from gitpromote.core.exceptions import BranchNotFoundError, GitOperationError, InvalidArgumentError
from gitpromote.core.git import Branch, GitService, RemoteRef, parse_remote_refs, select_remote_ref
from helpers.git_helpers import create_remote, git, rev_parse, upstream_of


class TestRemoteRefSelection:
    """Pure selection rule over ``git for-each-ref`` listings."""

    REMOTES = ("origin", "upstream")

    def test_exact_name_after_remote_prefix_matches(self):
        refs = [RemoteRef("refs/remotes/origin/release-1", "a" * 40)]
        match = select_remote_ref(refs, "release-1", remotes=self.REMOTES)
        assert match is refs[0]
        assert match.short_name == "origin/release-1"

    def test_suffix_match_is_not_enough(self):
        refs = [RemoteRef("refs/remotes/origin/old/release-1", "a" * 40)]
        assert select_remote_ref(refs, "release-1", remotes=self.REMOTES) is None
        assert select_remote_ref(refs, "old/release-1", remotes=self.REMOTES) is refs[0]

    def test_symbolic_refs_are_skipped(self):
        refs = [RemoteRef("refs/remotes/origin/HEAD", "a" * 40, symref="refs/remotes/origin/main")]
        assert select_remote_ref(refs, "HEAD", remotes=self.REMOTES) is None

    def test_preferred_remote_wins_over_listing_order(self):
        refs = [
            RemoteRef("refs/remotes/origin/feature", "a" * 40),
            RemoteRef("refs/remotes/upstream/feature", "b" * 40),
        ]
        match = select_remote_ref(refs, "feature", remotes=self.REMOTES, preferred_remote="upstream")
        assert match is refs[1]

    def test_listing_order_decides_without_preferred_remote(self):
        refs = [
            RemoteRef("refs/remotes/upstream/feature", "b" * 40),
            RemoteRef("refs/remotes/mirror/feature", "c" * 40),
        ]
        match = select_remote_ref(
            refs, "feature", remotes=("origin", "upstream", "mirror"), preferred_remote="origin"
        )
        assert match is refs[0]

    def test_longest_remote_name_is_stripped(self):
        refs = [RemoteRef("refs/remotes/origin/mirror/feature", "a" * 40)]
        match = select_remote_ref(refs, "feature", remotes=("origin", "origin/mirror"))
        assert match is refs[0]

    def test_parse_remote_refs_reads_nul_separated_fields(self):
        output = (
            "refs/remotes/origin/HEAD\0" + "a" * 40 + "\0refs/remotes/origin/main\n"
            "refs/remotes/origin/main\0" + "a" * 40 + "\0\n"
            "\n"
        )
        refs = parse_remote_refs(output)
        assert [r.refname for r in refs] == ["refs/remotes/origin/HEAD", "refs/remotes/origin/main"]
        assert refs[0].symref == "refs/remotes/origin/main"
        assert refs[1].symref == ""


@pytest.mark.requires_git
class TestResolveBranch:
    def test_resolves_remote_branch_to_current_commit(self, service: GitService, session, remote):
        branch = service.resolve_branch(session, "release-1")

        assert isinstance(branch, Branch)
        assert branch.name == "origin/release-1"
        assert branch.ref == "refs/remotes/origin/release-1"
        assert branch.commit_id == remote.branch_tip("release-1")

    def test_missing_branch_raises_branch_not_found(self, service: GitService, session):
        with pytest.raises(BranchNotFoundError) as excinfo:
            service.resolve_branch(session, "does-not-exist")

        err = excinfo.value
        assert isinstance(err, GitOperationError)
        assert isinstance(err, LookupError)
        assert err.branch == "does-not-exist"
        assert err.context["remote"] == "origin"
        assert str(err) == "Branch 'does-not-exist' not found on remote 'origin'"

    def test_nested_branch_does_not_match_its_suffix(self, service: GitService, remote, tmp_path: Path):
        remote.commit_on("old/release-2", {"old.txt": "old\n"}, "Old release")

        with service.clone(tmp_path / "nested") as session:
            with pytest.raises(BranchNotFoundError):
                service.resolve_branch(session, "release-2")
            branch = service.resolve_branch(session, "old/release-2")

        assert branch.name == "origin/old/release-2"
        assert branch.commit_id == remote.tips["old/release-2"]

    def test_remote_head_symref_is_not_a_branch(self, service: GitService, session):
        with pytest.raises(BranchNotFoundError):
            service.resolve_branch(session, "HEAD")

    def test_session_remote_is_preferred(self, service: GitService, session, remote, tmp_path: Path):
        other = create_remote(tmp_path / "other")
        other.commit_on("feature", {"other.txt": "other\n"}, "Other feature")
        other.commit_on("hotfix", {"hotfix.txt": "fix\n"}, "Hotfix")
        git(session.workdir, "remote", "add", "upstream", str(other.bare))
        git(session.workdir, "fetch", "-q", "upstream")

        feature = service.resolve_branch(session, "feature")
        hotfix = service.resolve_branch(session, "hotfix")

        assert feature.name == "origin/feature"
        assert feature.commit_id == remote.tips["feature"]
        assert hotfix.name == "upstream/hotfix"
        assert hotfix.commit_id == other.tips["hotfix"]

    @pytest.mark.parametrize("name", ["", "   ", None, "-feature", "--all"])
    def test_invalid_names_are_rejected(self, service: GitService, session, name):
        with pytest.raises(InvalidArgumentError):
            service.resolve_branch(session, name)

    def test_resolution_reflects_fetch_time_state(self, service: GitService, session, remote):
        before = service.resolve_branch(session, "feature")
        remote.commit_on("feature", {"feature.txt": "feature v2\n"}, "Feature v2")

        after = service.resolve_branch(session, "feature")

        assert after == before
        assert after.commit_id != remote.branch_tip("feature")


@pytest.mark.requires_git
class TestMaterializeBranch:
    def test_creates_local_tracking_branch(self, service: GitService, session, remote):
        service.materialize_branch(session, "feature")

        assert rev_parse(session.workdir, "refs/heads/feature") == remote.tips["feature"]
        assert upstream_of(session.workdir, "feature") == "origin/feature"

    def test_rerun_overwrites_existing_local_branch(self, service: GitService, session, remote):
        service.materialize_branch(session, "feature")
        # Move the local branch away; materializing again resets it.
        git(session.workdir, "branch", "-f", "feature", "main")
        assert rev_parse(session.workdir, "refs/heads/feature") == remote.tips["main"]

        service.materialize_branch(session, "feature")

        assert rev_parse(session.workdir, "refs/heads/feature") == remote.tips["feature"]
        assert upstream_of(session.workdir, "feature") == "origin/feature"

    def test_materialize_does_not_switch_branches(self, service: GitService, session):
        service.materialize_branch(session, "release-1")
        assert service.current_branch(session) == "main"

    def test_missing_remote_branch_fails(self, service: GitService, session):
        with pytest.raises(GitOperationError) as excinfo:
            service.materialize_branch(session, "nope")

        assert excinfo.value.operation == "materialize_branch"
        assert excinfo.value.context["start_point"] == "origin/nope"

    def test_checkout_after_materialize(self, service: GitService, session, remote):
        service.materialize_branch(session, "feature")
        service.checkout(session, "feature")

        assert service.current_branch(session) == "feature"
        assert service.head(session) == remote.tips["feature"]

    def test_checkout_unknown_branch_fails(self, service: GitService, session):
        with pytest.raises(GitOperationError) as excinfo:
            service.checkout(session, "nowhere")
        assert excinfo.value.operation == "checkout"

    def test_checkout_of_a_file_name_fails_and_keeps_head(self, service: GitService, session, remote):
        (session.workdir / "README.md").write_text("local edit\n", encoding="utf-8")

        with pytest.raises(GitOperationError) as excinfo:
            service.checkout(session, "README.md")

        assert excinfo.value.operation == "checkout"
        assert service.current_branch(session) == "main"
        assert service.head(session) == remote.tips["main"]
        assert (session.workdir / "README.md").read_text(encoding="utf-8") == "local edit\n"

    def test_checkout_creates_tracking_branch_for_remote_only_name(self, service: GitService, session, remote):
        service.checkout(session, "release-1")

        assert service.current_branch(session) == "release-1"
        assert service.head(session) == remote.tips["release-1"]
        assert upstream_of(session.workdir, "release-1") == "origin/release-1"

    def test_legacy_method_names(self, service: GitService, session, remote):
        branch = service.get_branch(session, "feature")
        service.clone_branch_from_repo(session, "feature")

        assert branch.commit_id == rev_parse(session.workdir, "refs/heads/feature")
