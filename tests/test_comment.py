import unittest

from svdoc.comment import comment_body, fold, parse_annotation, parse_comment, parse_line, parse_lines
from svdoc.errors import UnparsableComment
from svdoc.model import (
    Author,
    CrossRef,
    Example,
    Note,
    ParamDoc,
    Plain,
    PortDoc,
    Return,
    Revision,
    SeeAlso,
    StateDoc,
    StateMachineStart,
    Summary,
    Transition,
    Waveform,
)


class TestParseComment(unittest.TestCase):
    """Complete comments, delimiters included."""

    def test_line_comment_brief(self):
        self.assertEqual(parse_comment("//* @brief test"), [Summary("test")])

    def test_line_comment_without_tag_is_summary(self):
        self.assertEqual(parse_comment("//* test"), [Summary("test")])

    def test_block_comment_single_line(self):
        self.assertEqual(parse_comment("/** test */"), [Summary("test")])

    def test_block_comment_with_markers(self):
        text = """/**
    * @brief test
    * @note noooooote
    */"""
        self.assertEqual(parse_comment(text), [Summary("test"), Note("noooooote")])

    def test_continuation_lines_and_params(self):
        text = """/**
    * @brief test
    * second line
    * @param a:aaa
      @param b bbb
    */"""
        self.assertEqual(
            parse_comment(text),
            [Summary("test\nsecond line"), ParamDoc("a", "aaa"), ParamDoc("b", "bbb")],
        )

    def test_state_machine_transitions(self):
        text = """/**
    * @fsm test
    * @a-> b transit1
    * @b ->c:transit2
    */"""
        self.assertEqual(
            parse_comment(text),
            [
                StateMachineStart("test"),
                Transition("a", "b", "transit1"),
                Transition("b", "c", "transit2"),
            ],
        )

    def test_regular_comments_are_ignored(self):
        self.assertEqual(parse_comment("// @brief not an annotation"), [])
        self.assertEqual(parse_comment("/* @brief not an annotation */"), [])

    def test_unterminated_block_comment_is_ignored(self):
        self.assertEqual(parse_comment("/** @brief never closed"), [])

    def test_line_comment_stops_at_end_of_line(self):
        self.assertEqual(parse_comment("//* @brief one\n@note two"), [Summary("one")])

    def test_empty_annotation(self):
        self.assertEqual(parse_comment("//*"), [])
        self.assertEqual(parse_comment("/***/"), [])


class TestCommentBody(unittest.TestCase):
    def test_line_body(self):
        self.assertEqual(comment_body("//* @brief x"), " @brief x")

    def test_block_body(self):
        self.assertEqual(comment_body("/** a\n b */"), " a\n b ")

    def test_block_end_not_taken_from_opening(self):
        # "/**/" must not close on the asterisk of its own opening
        with self.assertRaises(UnparsableComment):
            comment_body("/**/")

    def test_not_annotation(self):
        with self.assertRaises(UnparsableComment) as ctx:
            comment_body("// plain")
        self.assertIn("not an annotation comment", str(ctx.exception))


class TestParseLine(unittest.TestCase):
    """Ordered choice between the line alternatives."""

    def test_simple_tags(self):
        cases = {
            "@brief b": Summary("b"),
            "@note n": Note("n"),
            "@ref r": CrossRef("r"),
            "@see s": SeeAlso("s"),
            "@example e": Example("e"),
            "@wave {signal: []}": Waveform("{signal: []}"),
            "@author Jane Doe": Author("Jane Doe"),
            "@return sum of a and b": Return("sum of a and b"),
            "@fsm ctrl": StateMachineStart("ctrl"),
        }
        for line, expected in cases.items():
            with self.subTest(line=line):
                self.assertEqual(parse_line(line), expected)

    def test_named_tags(self):
        cases = {
            "@rev v1 initial release": Revision("v1", "initial release"),
            "@port clk Clock input": PortDoc("clk", "Clock input"),
            "@param WIDTH:Data width": ParamDoc("WIDTH", "Data width"),
            "@state IDLE waiting for start": StateDoc("IDLE", "waiting for start"),
        }
        for line, expected in cases.items():
            with self.subTest(line=line):
                self.assertEqual(parse_line(line), expected)

    def test_colon_separator(self):
        self.assertEqual(parse_line("@brief:colon"), Summary("colon"))

    def test_tag_without_separator_is_plain(self):
        self.assertEqual(parse_line("@note"), Plain("@note"))
        self.assertEqual(parse_line("@briefly said"), Plain("@briefly said"))

    def test_named_tag_without_name_separator_is_plain(self):
        self.assertEqual(parse_line("@port clk"), Plain("@port clk"))

    def test_named_tag_requires_identifier(self):
        self.assertEqual(parse_line("@rev 1.0 first"), Plain("@rev 1.0 first"))

    def test_identifier_allows_dollar(self):
        self.assertEqual(parse_line("@port a$b x"), PortDoc("a$b", "x"))

    def test_empty_payload(self):
        self.assertEqual(parse_line("@brief "), Summary(""))
        self.assertEqual(parse_line("@port clk:"), PortDoc("clk", ""))

    def test_marker_removed(self):
        self.assertEqual(parse_line("   *  @note hi"), Note("hi"))

    def test_payload_trailing_whitespace_trimmed(self):
        self.assertEqual(parse_line("@note spaced   "), Note("spaced"))

    def test_blank_line(self):
        self.assertIsNone(parse_line("   *   "))
        self.assertIsNone(parse_line(""))

    def test_transition_with_spaces(self):
        self.assertEqual(parse_line("@IDLE  ->  RUN go"), Transition("IDLE", "RUN", "go"))

    def test_tag_name_is_case_sensitive(self):
        self.assertEqual(parse_line("@Brief x"), Plain("@Brief x"))


class TestFold(unittest.TestCase):
    """Plain lines are merged into the preceding item."""

    def test_plain_only(self):
        self.assertEqual(parse_annotation("  hello world  "), [Summary("hello world")])

    def test_leading_plain_lines_join_into_summary(self):
        self.assertEqual(parse_annotation("first\nsecond"), [Summary("first\nsecond")])

    def test_plain_appends_to_pair(self):
        self.assertEqual(
            parse_annotation("@port clk main clock\nrising edge"),
            [PortDoc("clk", "main clock\nrising edge")],
        )

    def test_fold_is_idempotent(self):
        raw = parse_lines("text\n@brief b\nmore\n@port p d\n@note n\ntail")
        once = fold(raw)
        self.assertEqual(fold(once), once)

    def test_fold_result_has_no_plain(self):
        folded = fold(parse_lines("a\n@note n\nb\nc"))
        self.assertFalse(any(isinstance(i, Plain) for i in folded))

    def test_fold_does_not_mutate_input(self):
        raw = [Note("n"), Plain("more")]
        fold(raw)
        self.assertEqual(raw, [Note("n"), Plain("more")])

    def test_empty(self):
        self.assertEqual(fold([]), [])


if __name__ == '__main__':
    unittest.main()
