"""Branch names derived from commit messages."""

from pt_core.branches import MAX_BRANCH_LENGTH, branch_from_message, slug_from_message


class TestBranchFromMessage:
    def test_example(self):
        assert branch_from_message("alice", "Fix Bug: edge case!!") == "alice/fix-bug-edge-case"

    def test_no_prefix(self):
        assert branch_from_message(None, "Add thing") == "add-thing"
        assert branch_from_message("", "Add thing") == "add-thing"

    def test_runs_collapse_to_single_hyphen(self):
        name = branch_from_message("bob", "a  --  b__c...d")
        assert name == "bob/a-b-c-d"
        assert "--" not in name

    def test_lowercases(self):
        assert branch_from_message("x", "README Update") == "x/readme-update"

    def test_leading_punctuation_stripped(self):
        assert branch_from_message("x", "[ci] bump deps") == "x/ci-bump-deps"

    def test_non_ascii_is_separator(self):
        assert branch_from_message("x", "café au lait") == "x/caf-au-lait"

    def test_deterministic(self):
        msg = "Refactor: split parser (part 2/3)"
        assert branch_from_message("alice", msg) == branch_from_message("alice", msg)

    def test_length_capped(self):
        name = branch_from_message("alice", "word " * 200)
        assert len(name) <= MAX_BRANCH_LENGTH
        assert name.startswith("alice/word-word")
        assert not name.endswith("-")

    def test_length_capped_without_prefix(self):
        name = branch_from_message(None, "x" * 400)
        assert name == "x" * MAX_BRANCH_LENGTH

    def test_empty_message_keeps_prefix_only(self):
        assert branch_from_message("alice", "!!!") == "alice"


class TestSlugFromMessage:
    def test_no_ascii_alphanumerics(self):
        assert slug_from_message("修正バグ") == ""
        assert slug_from_message("!!!") == ""

    def test_mixed(self):
        assert slug_from_message("修正 bug 2") == "bug-2"
