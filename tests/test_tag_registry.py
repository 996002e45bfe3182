"""
Tests for the tag registry.
"""

from gitcsemver.domain import Version
from gitcsemver.services import TagRegistry, TagParsingMode


def has_line(errors, *fragments):
    return any(all(f in line for f in fragments) for line in errors)


class TestTagCollection:
    """Tests for tag parsing and per-commit resolution."""

    def test_simple_history(self, repo):
        """Test a compact history."""
        c1 = repo.add_commit(tags=["v0.1.0"])
        c2 = repo.add_commit(c1, tags=["v1.0.0"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert [str(v) for v in registry.repository_versions.versions] == ["v0.1.0", "v1.0.0"]
        assert registry.get_tag_commit(c2).version == Version.parse("1.0.0")
        assert registry.get_tag_commit("nope") is None
        assert len(registry.content_index) == 2

    def test_non_version_tags_are_ignored(self, repo):
        """Test that tags which are not versions are skipped."""
        repo.add_commit(tags=["v1.0.0", "latest", "release-candidate"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert len(registry.repository_versions) == 1

    def test_same_version_twice_on_a_commit(self, repo):
        """Test that two texts of one version merge."""
        c1 = repo.add_commit(tags=["v1.0.0", "1.0.0"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert registry.get_tag_commit(c1).version == Version.parse("1.0.0")

    def test_ambiguous_commit(self, repo):
        """Test a commit with two different versions."""
        c1 = repo.add_commit(tags=["v1.0.0", "v1.1.0"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert has_line(errors, f"Commit '{c1}' has 2 different released version tags.")
        assert registry.get_tag_commit(c1) is None
        assert len(registry.content_index) == 0

    def test_invalid_marker_removes_version(self, repo):
        """Test that '+invalid' cancels a version on the same commit."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1, tags=["v2.0.0", "v2.0.0+invalid", "v1.1.0"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert registry.get_tag_commit(c2).version == Version.parse("1.1.0")

    def test_only_invalid_marker(self, repo):
        """Test a commit whose only version is marked invalid."""
        c1 = repo.add_commit(tags=["v1.0.0+invalid"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert registry.get_tag_commit(c1) is None
        assert len(registry.repository_versions) == 0

    def test_tags_on_unknown_commits_are_ignored(self, repo):
        """Test a tag pointing outside the graph."""
        repo.add_commit()
        repo.tag("f" * 40, "v1.0.0")
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert len(registry.repository_versions) == 0


class TestParsingModes:
    """Tests for the parsing modes."""

    def test_malformed_ignored_by_default(self, repo):
        """Test that malformed tags are silently skipped."""
        repo.add_commit(tags=["v1.0"])
        errors = []
        TagRegistry(repo, errors)
        assert errors == []

    def test_malformed_reported(self, repo):
        """Test that malformed tags are reported on selected commits."""
        c1 = repo.add_commit(tags=["v1.0"])
        errors = []
        TagRegistry(repo, errors, parsing_mode=lambda sha: TagParsingMode.RAISE_ERROR_ON_MALFORMED)
        assert errors == [
            f"Malformed Tag 'v1.0': There must be at least 3 numbers (Major.Minor.Patch). on commit '{c1}'."
        ]

    def test_malformed_only_on_selected_commit(self, repo):
        """Test that the mode is chosen per commit."""
        c1 = repo.add_commit(tags=["v1.0"])
        c2 = repo.add_commit(c1, tags=["v2.0"])
        errors = []
        TagRegistry(
            repo, errors,
            parsing_mode=lambda sha: (TagParsingMode.RAISE_ERROR_ON_MALFORMED if sha == c2
                                      else TagParsingMode.IGNORE_MALFORMED)
        )
        assert len(errors) == 1
        assert c2 in errors[0]

    def test_non_standard_name(self, repo):
        """Test that non standard names can be refused."""
        c1 = repo.add_commit(tags=["v1.0.0-pre"])
        errors = []
        TagRegistry(
            repo, errors,
            parsing_mode=lambda sha: TagParsingMode.RAISE_ERROR_ON_MALFORMED_AND_NON_STANDARD_NAME
        )
        assert errors == [f"Invalid PreRelease name in 'v1.0.0-pre' on commit '{c1}'."]

    def test_non_standard_name_accepted(self, repo):
        """Test that non standard names are accepted otherwise."""
        c1 = repo.add_commit(tags=["v0.0.0-pre"])
        errors = []
        registry = TagRegistry(repo, errors, parsing_mode=lambda sha: TagParsingMode.RAISE_ERROR_ON_MALFORMED)
        assert errors == []
        assert registry.get_tag_commit(c1).version.pre_release_name == "prerelease"


class TestRepositoryVersionsChecks:
    """Tests for the compactness checks."""

    def test_duplicate_version(self, repo):
        """Test a version defined on two commits."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        c2 = repo.add_commit(c1)
        c3 = repo.add_commit(c2, tags=["v2.0.0"])
        c4 = repo.add_commit(c3, tags=["v2.0.0"])
        errors = []
        TagRegistry(repo, errors)
        assert has_line(errors, "Version 'v2.0.0' is defined on", c3, c4)

    def test_duplicate_reported_without_checks(self, repo):
        """Test that duplicates are reported even without the compactness check."""
        c1 = repo.add_commit(tags=["v5.0.0"])
        c2 = repo.add_commit(c1, tags=["v5.0.0"])
        errors = []
        TagRegistry(repo, errors, check_existing_versions=False)
        assert errors == [f"Version 'v5.0.0' is defined on '{c1}' and '{c2}'."]

    def test_gap(self, repo):
        """Test a missing minor version."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        repo.add_commit(c1, tags=["v1.2.0"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == ["Missing one or more version(s) between 'v1.0.0' and 'v1.2.0'."]
        assert len(registry.content_index) == 0

    def test_first_version_missing(self, repo):
        """Test a history that does not start at a first possible version."""
        c1 = repo.add_commit(tags=["v2.0.0"])
        errors = []
        TagRegistry(repo, errors)
        assert errors == [
            f"First existing version is 'v2.0.0' (on '{c1}'). One or more previous versions are missing."
        ]

    def test_checks_disabled(self, repo):
        """Test check_existing_versions=False."""
        c1 = repo.add_commit(tags=["v3.0.0"])
        repo.add_commit(c1, tags=["v3.5.0"])
        errors = []
        registry = TagRegistry(repo, errors, check_existing_versions=False)
        assert errors == []
        assert len(registry.content_index) == 2

    def test_order_does_not_depend_on_history(self, repo):
        """Test that versions are checked in version order."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        repo.add_commit(c1, tags=["v0.1.0"])
        errors = []
        registry = TagRegistry(repo, errors)
        assert errors == []
        assert [str(v) for v in registry.repository_versions.versions] == ["v0.1.0", "v1.0.0"]


class TestVersionFloor:
    """Tests for the StartingVersionForCSemVer floor."""

    def test_floor_skips_older_tags(self, repo):
        """Test that tags below the floor are ignored."""
        c1 = repo.add_commit(tags=["v0.0.1"])
        c2 = repo.add_commit(c1, tags=["v3.0.0"])
        c3 = repo.add_commit(c2, tags=["v3.1.0"])
        errors = []
        registry = TagRegistry(repo, errors, starting_version="v3.0.0")
        assert errors == []
        assert registry.floor == Version.parse("3.0.0")
        assert registry.get_tag_commit(c1) is None
        assert [tc.commit_sha for tc in registry.existing_versions] == [c2, c3]

    def test_floor_not_found(self, repo):
        """Test that the floor must be tagged."""
        repo.add_commit(tags=["v1.0.0"])
        errors = []
        TagRegistry(repo, errors, starting_version="3.0.0")
        assert errors == ["Unable to find StartingVersionForCSemVer = 'v3.0.0'. A commit must be tagged with it."]

    def test_invalid_floor(self, repo):
        """Test an unparseable floor."""
        repo.add_commit(tags=["v1.0.0"])
        errors = []
        registry = TagRegistry(repo, errors, starting_version="three")
        assert errors == ["Invalid StartingVersionForCSemVer. Not a release tag."]
        assert len(registry.repository_versions) == 0


class TestOverriddenTags:
    """Tests for overridden tags."""

    def test_override_head(self, repo):
        """Test a tag applied on the head."""
        c1 = repo.add_commit()
        errors = []
        registry = TagRegistry(repo, errors, overridden_tags={"head": ["v1.0.0"]})
        assert errors == []
        assert registry.get_tag_commit(c1).version == Version.parse("1.0.0")

    def test_override_by_sha(self, repo):
        """Test tags applied on a commit that already has one."""
        c1 = repo.add_commit(tags=["v1.0.0"])
        repo.add_commit(c1)
        errors = []
        registry = TagRegistry(repo, errors, overridden_tags={c1: ["v1.0.0+invalid", "v0.1.0"]})
        assert errors == []
        assert registry.get_tag_commit(c1).version == Version.parse("0.1.0")

    def test_override_errors(self, repo):
        """Test empty and unknown override keys."""
        repo.add_commit()
        errors = []
        TagRegistry(repo, errors, overridden_tags={"": ["v1.0.0"], "deadbeef": ["v1.0.0"]})
        assert errors == [
            "Invalid overriden commit: the key is null or empty.",
            "Overriden commit 'deadbeef' does not exist.",
        ]
