"""Unit tests for the tag index."""

from gitbuildnumber.extraction import TagIndex


def test_annotated_tag_is_peeled(history_repo):
    """Test that annotated tags are keyed by the commit, not the tag object."""
    index = TagIndex.build(history_repo.repo)
    tag_object = history_repo.repo.tags["v1.0"].tag

    assert tag_object is not None
    assert tag_object.hexsha not in index
    assert index.tags_for(history_repo.c3.hexsha) == ("v1.0",)


def test_lightweight_tag(history_repo):
    """Test that lightweight tags point straight at their commit."""
    index = TagIndex.build(history_repo.repo)

    assert index.render(history_repo.c1.hexsha) == "v0.1"


def test_tags_not_reachable_from_head_are_indexed(history_repo):
    """Test that the index covers every tag of the repository."""
    index = TagIndex.build(history_repo.repo)

    assert index.render(history_repo.side.hexsha) == "side-tag"
    assert len(index) == 3


def test_untagged_commit(history_repo):
    """Test rendering a commit without tags."""
    index = TagIndex.build(history_repo.repo)

    assert history_repo.c4.hexsha not in index
    assert index.tags_for(history_repo.c4.hexsha) == ()
    assert index.render(history_repo.c4.hexsha) == ""


def test_multiple_tags_sorted(history_repo):
    """Test that two tags on one commit render sorted and joined by ';'."""
    repo = history_repo.repo
    repo.create_tag("release-b", ref=history_repo.c2)
    repo.create_tag("release-a", ref=history_repo.c2, message="annotated")

    index = TagIndex.build(repo)

    assert index.render(history_repo.c2.hexsha) == "release-a;release-b"


def test_order_independent_of_enumeration():
    """Test that the index sorts names regardless of input order."""
    forward = TagIndex({"abc": ["v2", "v10", "v1"]})
    backward = TagIndex({"abc": ["v1", "v10", "v2"]})

    assert forward.render("abc") == backward.render("abc") == "v1;v10;v2"


def test_tag_on_tree_is_ignored(history_repo):
    """Test that tags which do not point at a commit are skipped."""
    repo = history_repo.repo
    repo.create_tag("tree-tag", ref=history_repo.c1.tree.hexsha)

    index = TagIndex.build(repo)

    assert len(index) == 3
    assert "tree-tag" not in index.render(history_repo.c1.hexsha)


def test_fingerprint():
    """Test that the fingerprint follows tag names and targets, not mapping order."""
    base = TagIndex({"abc": ["v1"], "def": ["v2"]})

    assert base.fingerprint() == TagIndex({"def": ["v2"], "abc": ["v1"]}).fingerprint()
    assert base.fingerprint() != TagIndex({"abc": ["v1"], "def": ["v2", "v3"]}).fingerprint()
    assert base.fingerprint() != TagIndex({"abc": ["v1"], "fed": ["v2"]}).fingerprint()
    assert base.fingerprint() != TagIndex({"abc": ["v1"]}).fingerprint()
