"""Tests for the generic structured-text parser (plain text, Markdown, outlines)."""

from dosekit.core.text_parser import parse_structured_text


ECON_MD = """# Econ
## Supply
Prices rise when supply falls.

## Demand
* more buyers
* less buyers
"""


class TestHeadingOutline:
    """Markdown headings drive the breadcrumb."""

    def test_econ_example(self):
        """Each section body becomes one breadcrumb-prefixed dose."""
        assert parse_structured_text(ECON_MD) == [
            "Econ > Supply\n\nPrices rise when supply falls.",
            "Econ > Demand\n\n* more buyers\n* less buyers",
        ]

    def test_same_or_shallower_heading_replaces_open_ones(self):
        """A new level-1 heading closes both the old level-1 and level-2 headings."""
        text = "# A\n## B\ntext1\n# C\ntext2"
        assert parse_structured_text(text) == ["A > B\n\ntext1", "C\n\ntext2"]

    def test_blank_lines_split_blocks(self):
        """Paragraphs separated by blank lines become separate doses."""
        text = "# H\npara one\n\npara two"
        assert parse_structured_text(text) == ["H\n\npara one", "H\n\npara two"]

    def test_content_before_first_heading_has_no_breadcrumb(self):
        """Text above any heading is emitted without a prefix."""
        text = "Intro line\n# Title\nBody"
        assert parse_structured_text(text) == ["Intro line", "Title\n\nBody"]

    def test_split_list_items_option(self):
        """With split_list_items a pure list block yields one dose per item."""
        text = "# A\n- x\n- y"
        assert parse_structured_text(text, split_list_items=True) == ["A\n\n- x", "A\n\n- y"]

    def test_mixed_block_is_not_split_even_with_option(self):
        """Only blocks where every line is a list item are split."""
        text = "# A\nIntro:\n- x\n- y"
        assert parse_structured_text(text, split_list_items=True) == ["A\n\nIntro:\n- x\n- y"]

    def test_crlf_line_endings(self):
        """Windows line endings behave like plain newlines."""
        assert parse_structured_text("# A\r\ntext") == ["A\n\ntext"]

    def test_whitespace_only_lines_do_not_switch_to_outline_mode(self):
        """A blank line holding spaces is still a blank line."""
        text = "# A\ntext\n   \nmore"
        assert parse_structured_text(text) == ["A\n\ntext", "A\n\nmore"]


class TestIndentedOutline:
    """Indentation switches the parser into branch mode."""

    def test_root_example(self):
        """Each first-level branch is prefixed with its ancestors."""
        assert parse_structured_text("Root\n  ChildA\n  ChildB") == [
            "Root\n  ChildA",
            "Root\n  ChildB",
        ]

    def test_branch_keeps_its_descendants(self):
        """Deeper lines stay inside the branch that precedes them."""
        text = "Root\n  A\n    A1\n  B"
        assert parse_structured_text(text) == ["Root\n  A\n    A1", "Root\n  B"]

    def test_text_is_kept_verbatim(self):
        """Indentation and wording of the source lines survive untouched."""
        text = "Top\n  Mid\n    Leaf1\n    Leaf2"
        assert parse_structured_text(text) == [text]

    def test_multiple_ancestor_levels(self):
        """Ancestors are collected with strictly decreasing indentation."""
        text = "Root\n    Deep\n  Shallow\n    Deeper"
        # Branch indent is 2: only "  Shallow" starts a branch.
        assert parse_structured_text(text) == ["Root\n  Shallow\n    Deeper"]

    def test_blank_line_becomes_ancestor_of_next_branch(self):
        """A blank separator sits at depth 0, so the branch after it loses the root."""
        assert parse_structured_text("Root\n  A\n\n  B") == ["Root\n  A\n", "\n  B"]


class TestNeverEmpty:
    """Non-empty input always yields at least one dose."""

    def test_empty_input(self):
        assert parse_structured_text("") == []
        assert parse_structured_text("   \n  ") == []

    def test_heading_only_falls_back_to_whole_text(self):
        """A document made only of headings comes back as one dose."""
        assert parse_structured_text("# Only a heading") == ["# Only a heading"]

    def test_plain_sentence(self):
        assert parse_structured_text("  just one line  ") == ["just one line"]

    def test_many_shapes_never_empty(self):
        samples = ["x", "#", "# a\n# b", "- a\n- b", "a\n\n\nb", "\tindented", "## deep\n\n"]
        for s in samples:
            assert len(parse_structured_text(s)) >= 1, s


class TestIdempotence:
    """Re-decomposing a dose body does not fragment it further."""

    def test_paragraph_body(self):
        body = "Prices rise when supply falls."
        assert parse_structured_text(body) == [body]

    def test_list_body(self):
        body = "* more buyers\n* less buyers"
        assert parse_structured_text(body) == [body]

    def test_multiline_prose_body(self):
        body = "line one\nline two"
        assert parse_structured_text(body) == [body]

    def test_outline_branch_body(self):
        body = "Root\n  ChildA"
        assert parse_structured_text(body) == [body]
