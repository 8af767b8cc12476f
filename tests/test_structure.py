"""Tests for the structural classifier and block finalizer on positioned elements."""

from dosekit.core.classify import is_likely_heading, is_list_item, starts_new_block
from dosekit.core.models import DecomposeConfig, ImageElement, TextElement
from dosekit.core.structure import PageStructureBuilder, decompose_pages, fold_block_text


CFG = DecomposeConfig()


def _line(text, x=100.0, y=700.0, height=11.0, font=None):
    return TextElement(text=text, x=x, y=y, height=height, font_name=font)


class TestFoldBlockText:
    def test_hyphenation_repair(self):
        """A trailing hyphen glues the next line on without a space."""
        assert fold_block_text(["exam-", "ple text"]) == "example text"

    def test_prose_joins_with_single_space(self):
        assert fold_block_text(["  first line ", "second line"]) == "first line second line"

    def test_en_dash_is_not_treated_as_hyphen(self):
        assert fold_block_text(["pages 3–", "5 only"]) == "pages 3– 5 only"

    def test_three_of_four_bullets_is_a_list(self):
        """List items at half or more of the block keep one line each."""
        lines = ["• one", "• two", "• three", "not a bullet"]
        assert fold_block_text(lines) == "• one\n• two\n• three\nnot a bullet"

    def test_exactly_half_bullets_is_a_list(self):
        lines = ["- one", "plain", "- two", "plain again"]
        assert fold_block_text(lines) == "- one\nplain\n- two\nplain again"

    def test_one_of_three_bullets_is_prose(self):
        assert fold_block_text(["• one", "two", "three"]) == "• one two three"

    def test_empty_block(self):
        assert fold_block_text([]) == ""
        assert fold_block_text(["   "]) == ""


class TestClassifier:
    def test_list_item_patterns(self):
        for s in ["• bullet", "* star", "- dash", "1. numbered", "a) lettered", "  ▪ square"]:
            assert is_list_item(s), s
        for s in ["plain text", "1.5 million", "-dash glued", "Section 2."]:
            assert not is_list_item(s), s

    def test_heading_by_left_margin(self):
        assert is_likely_heading(_line("Introduction", x=72), CFG)

    def test_heading_by_bold_font(self):
        assert is_likely_heading(_line("Introduction", x=200, font="Arial-BoldMT"), CFG)
        assert is_likely_heading(_line("Introduction", x=200, font="Roboto-Black"), CFG)

    def test_indented_regular_text_is_not_heading(self):
        assert not is_likely_heading(_line("Introduction", x=200, font="ArialMT"), CFG)

    def test_sentences_and_lists_are_not_headings(self):
        assert not is_likely_heading(_line("This is a sentence.", x=72), CFG)
        assert not is_likely_heading(_line("Really?", x=72), CFG)
        assert not is_likely_heading(_line("1. Intro", x=72), CFG)
        assert not is_likely_heading(_line("ab", x=72), CFG)

    def test_long_lines_are_not_headings(self):
        words = " ".join(["word"] * 15)
        assert not is_likely_heading(_line(words, x=72), CFG)
        assert not is_likely_heading(_line("x" * 100, x=72), CFG)
        assert is_likely_heading(_line(" ".join(["word"] * 14), x=72), CFG)

    def test_thresholds_come_from_config(self):
        cfg = DecomposeConfig(left_margin=50.0)
        assert not is_likely_heading(_line("Introduction", x=72), cfg)

    def test_new_block_gap(self):
        assert starts_new_block(_line("a", y=686, height=12), None, CFG)
        # (700 - 12) - 686 = 2 <= 9.6
        assert not starts_new_block(_line("a", y=686, height=12), (700.0, 12.0), CFG)
        # (700 - 12) - 660 = 28 > 9.6
        assert starts_new_block(_line("a", y=660, height=12), (700.0, 12.0), CFG)


class TestPageStructureBuilder:
    def test_headings_images_and_paragraphs(self):
        page = [
            _line("Chapter One", x=72, y=760, height=20, font="Times-Bold"),
            _line("Section A", x=72, y=720, height=14, font="Times-Bold"),
            _line("This is body text that con-", y=690),
            _line("tinues here.", y=677),
            ImageElement(data_uri="data:image/png;base64,AAA", y=600, width=10, height=10),
            _line("Section B", x=72, y=560, height=14, font="Times-Bold"),
            _line("Final words here.", y=530),
        ]
        assert decompose_pages([page]) == [
            "Chapter One > Section A\n\nThis is body text that continues here.",
            "Chapter One > Section A\n\n![PDF image](data:image/png;base64,AAA)",
            "Chapter One > Section B\n\nFinal words here.",
        ]

    def test_heading_stack_survives_page_breaks(self):
        page1 = [_line("Overview", x=72, y=760, height=18), _line("First page body.", y=720)]
        page2 = [_line("Second page body.", y=760)]
        assert decompose_pages([page1, page2]) == [
            "Overview\n\nFirst page body.",
            "Overview\n\nSecond page body.",
        ]

    def test_heading_like_line_inside_a_block_is_body(self):
        """Only lines that open a new block can become headings."""
        page = [
            _line("Some paragraph text that runs long.", x=72, y=700),
            _line("and more", x=72, y=687),
        ]
        assert decompose_pages([page]) == ["Some paragraph text that runs long. and more"]

    def test_vertical_gap_splits_paragraphs(self):
        page = [
            _line("First paragraph ends.", y=700),
            _line("Second paragraph starts.", y=660),
        ]
        assert decompose_pages([page]) == ["First paragraph ends.", "Second paragraph starts."]

    def test_image_without_headings(self):
        builder = PageStructureBuilder()
        builder.feed_page([ImageElement(data_uri="data:image/png;base64,QQ", y=100, width=1, height=1)])
        assert builder.doses == ["![PDF image](data:image/png;base64,QQ)"]

    def test_image_resets_gap_tracking(self):
        """The line after an image always starts a fresh block."""
        page = [
            _line("Before the figure", y=700),
            ImageElement(data_uri="data:image/png;base64,QQ", y=699, width=1, height=1),
            _line("after the figure", y=698),
        ]
        assert decompose_pages([page]) == [
            "Before the figure",
            "![PDF image](data:image/png;base64,QQ)",
            "after the figure",
        ]
