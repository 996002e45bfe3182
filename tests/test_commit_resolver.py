"""
Tests for the commit resolver.
"""

from gitcsemver.domain import Version, FIRST_POSSIBLE_VERSIONS, get_direct_successors
from gitcsemver.services import TagRegistry, CommitResolver


def make_resolver(repo, **kwargs):
    errors = []
    registry = TagRegistry(repo, errors, starting_version=kwargs.pop('starting_version', None))
    assert errors == []
    return CommitResolver(repo, registry, **kwargs)


def versions(*texts):
    return [Version.parse(t) for t in texts]


class TestBasicCommitInfo:
    """Tests for the best tags below a commit."""

    def test_tagged_commit(self, repo):
        """Test a commit carrying a tag."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        basic = make_resolver(repo).get_basic_info(c1)
        assert basic.this_commit.commit_sha == c1
        assert basic.best_commit.commit_sha == c1
        assert basic.best_commit_below is None
        assert basic.below_depth == 0
        assert not basic.is_best_commit_redirected

    def test_depth(self, repo):
        """Test the distance to the last release."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2, c3 = repo.chain(c1, 2)
        resolver = make_resolver(repo)
        basic = resolver.get_basic_info(c3)
        assert basic.this_commit is None
        assert basic.best_commit is None
        assert basic.max_commit.commit_sha == c1
        assert basic.below_depth == 2
        assert resolver.get_basic_info(c2).below_depth == 1

    def test_no_tag(self, repo):
        """Test a history without tags."""
        c1 = repo.add_commit()
        c2 = repo.add_commit(c1)
        assert make_resolver(repo).get_basic_info(c2) is None

    def test_lower_tag_on_top(self, repo):
        """Test a tag lower than the best one below it."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1, tags=["v0.1.0"])
        basic = make_resolver(repo).get_basic_info(c2)
        assert basic.best_commit.commit_sha == c2
        assert basic.best_commit_below.commit_sha == c1
        assert basic.max_commit.commit_sha == c1
        assert basic.below_depth == 1

    def test_merge_prefers_higher_version(self, repo):
        """Test that the parent with the higher version wins."""
        root = repo.add_commit(tags=["v1.0.0"])
        left = repo.chain(root, 3)[-1]
        right = repo.add_commit(root, tags=["v1.0.1"])
        merge = repo.add_commit(left, right)
        basic = make_resolver(repo).get_basic_info(merge)
        assert basic.max_commit.commit_sha == right
        assert basic.below_depth == 1

    def test_merge_tie_prefers_deeper_path(self, repo):
        """Test that on equal versions the longer path wins."""
        root = repo.add_commit(tags=["v1.0.0"])
        left = repo.chain(root, 2)[-1]
        right = repo.add_commit(root)
        for parents in ((right, left), (left, right)):
            merge = repo.add_commit(*parents)
            basic = make_resolver(repo).get_basic_info(merge)
            assert basic.max_commit.commit_sha == root
            assert basic.below_depth == 3

    def test_content_redirect(self, repo):
        """Test that an untagged commit inherits the tag of identical content."""
        a = repo.add_commit(tree="T", tags=["v1.0.0"])
        b = repo.add_commit(tree="T")
        basic = make_resolver(repo).get_basic_info(b)
        assert basic.this_commit is None
        assert basic.best_commit.commit_sha == a
        assert basic.is_best_commit_redirected
        assert basic.below_depth == 0

    def test_exclusion(self, repo):
        """Test that the excluded version is skipped."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1, tags=["v1.0.1"])
        resolver = make_resolver(repo)
        assert resolver.get_basic_info(c2).max_commit.commit_sha == c2
        below = resolver.get_basic_info(c2, Version.parse("1.0.1"))
        assert below.max_commit.commit_sha == c1
        assert below.this_commit.commit_sha == c2

    def test_long_history(self, repo):
        """Test that deep histories do not hit the recursion limit."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        last = repo.chain(c1, 5000)[-1]
        basic = make_resolver(repo).get_basic_info(last)
        assert basic.below_depth == 5000

    def test_missing_parent(self, repo):
        """Test a shallow history whose parent is unknown."""
        c1 = repo.add_commit("f" * 40, tags=["v1.0.0"])
        basic = make_resolver(repo).get_basic_info(c1)
        assert basic.best_commit.commit_sha == c1


class TestPossibleVersions:
    """Tests for CommitResolver.get_commit_info()."""

    def test_empty_repository(self, repo):
        """Test an untagged commit of an untagged repository."""
        c1 = repo.add_commit()
        info = make_resolver(repo).get_commit_info(c1)
        assert info.basic_info is None
        assert info.possible_versions == list(FIRST_POSSIBLE_VERSIONS)
        assert info.next_possible_versions == list(FIRST_POSSIBLE_VERSIONS)

    def test_untagged_on_top_of_release(self, repo):
        """Test an untagged commit above a release."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1)
        info = make_resolver(repo).get_commit_info(c2)
        assert info.possible_versions == get_direct_successors(False, Version.parse("1.0.0"))

    def test_tagged_commit_validates_itself(self, repo):
        """Test that the commit's own version is among its possible versions."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1, tags=["v1.0.1"])
        info = make_resolver(repo).get_commit_info(c2)
        assert Version.parse("1.0.1") in info.possible_versions
        assert info.possible_versions == get_direct_successors(False, Version.parse("1.0.0"))
        assert info.next_possible_versions == get_direct_successors(False, Version.parse("1.0.1"))

    def test_bounded_by_higher_version(self, repo):
        """Test that a released higher version bounds the possible versions."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        repo.add_commit(c1, tags=["v1.1.0"])
        fix = repo.add_commit(c1)
        info = make_resolver(repo).get_commit_info(fix)
        assert len(info.possible_versions) == 17
        assert all(v < Version.parse("1.1.0") for v in info.possible_versions)
        assert Version.parse("1.0.1") in info.possible_versions
        assert Version.parse("1.1.0") in info.possible_versions_all
        assert Version.parse("2.0.0") in info.possible_versions_all

    def test_content_propagation(self, repo):
        """Test that a lower tag on identical content resolves above the best tag."""
        repo.add_commit(tree="T", tags=["v1.0.0"])
        b = repo.add_commit(tree="T", tags=["v0.1.0"])
        info = make_resolver(repo).get_commit_info(b)
        assert info.possible_versions == get_direct_successors(False, Version.parse("1.0.0"))
        assert Version.parse("0.1.0") not in info.possible_versions

    def test_single_major(self, repo):
        """Test the single_major filter."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1)
        info = make_resolver(repo, single_major=1).get_commit_info(c2)
        assert info.possible_versions
        assert all(v.major == 1 for v in info.possible_versions)
        assert Version.parse("2.0.0") not in info.possible_versions

    def test_only_patch(self, repo):
        """Test the only_patch filter."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1)
        info = make_resolver(repo, only_patch=True).get_commit_info(c2)
        assert info.possible_versions == versions(
            "1.0.1-alpha", "1.0.1-beta", "1.0.1-delta", "1.0.1-epsilon", "1.0.1-gamma",
            "1.0.1-kappa", "1.0.1-prerelease", "1.0.1-rc", "1.0.1"
        )


class TestVersionFloor:
    """Tests for possible versions with a version floor."""

    def test_floor_only_version(self, repo):
        """Test that the floor is the only possible version of its commit."""
        c1 = repo.add_commit(tags=["v5.0.0"])
        info = make_resolver(repo, starting_version="v5.0.0").get_commit_info(c1)
        assert info.possible_versions == versions("5.0.0")

    def test_floor_without_versions(self, repo):
        """Test a floor whose tag is marked invalid."""
        c1 = repo.add_commit(tags=["v5.0.0+invalid"])
        c2 = repo.add_commit(c1)
        info = make_resolver(repo, starting_version="v5.0.0").get_commit_info(c2)
        assert info.possible_versions == versions("5.0.0")
        assert info.next_possible_versions == versions("5.0.0")

    def test_successors_above_floor(self, repo):
        """Test possible versions above the floor."""
        c1 = repo.add_commit(tags=["v5.0.0"])
        c2 = repo.add_commit(c1)
        info = make_resolver(repo, starting_version="v5.0.0").get_commit_info(c2)
        assert info.possible_versions == get_direct_successors(False, Version.parse("5.0.0"))
