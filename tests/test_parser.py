import pytest

from QuizRender import content_parser
from QuizRender.model import (
    Bold,
    BulletItem,
    BulletList,
    Chunk,
    Heading,
    MathBlock,
    Paragraph,
    ParserState,
    PlainText,
)


def test_heading():
    document = content_parser.parse_content("# Hello")
    assert document.blocks == [Heading(level=1, text="Hello")]


def test_heading_levels_and_trailing_colon():
    document = content_parser.parse_content("#### Deep***## **Step 1**:")
    assert document.blocks == [Heading(level=4, text="Deep"), Heading(level=2, text="Step 1")]


def test_hash_without_space_is_text():
    document = content_parser.parse_content("#Hash")
    assert document.blocks == [Paragraph(runs=[PlainText("#Hash")])]


def test_bullet_list():
    document = content_parser.parse_content("- Item one\n- Item two")
    assert document.blocks == [
        BulletList(
            items=[
                BulletItem(indent_level=0, runs=[PlainText("Item one")]),
                BulletItem(indent_level=0, runs=[PlainText("Item two")]),
            ]
        )
    ]


def test_bullets_mixed_with_paragraph_lines():
    document = content_parser.parse_content("Steps\n- first\n  - nested **key**\nDone")
    assert document.blocks == [
        Paragraph(runs=[PlainText("Steps")]),
        BulletList(
            items=[
                BulletItem(indent_level=0, runs=[PlainText("first")]),
                BulletItem(indent_level=1, runs=[PlainText("nested "), Bold("key")]),
            ]
        ),
        Paragraph(runs=[PlainText("Done")]),
    ]


def test_bold_runs():
    document = content_parser.parse_content("This is **bold** text")
    assert document.blocks == [Paragraph(runs=[PlainText("This is "), Bold("bold"), PlainText(" text")])]


def test_single_asterisks_stay_literal():
    assert content_parser.parse_inline("an *important* note") == [PlainText("an *important* note")]
    assert content_parser.parse_inline("2 * 3 * 4") == [PlainText("2 * 3 * 4")]


def test_separator_splits_blocks():
    document = content_parser.parse_content("# Title***Body text***- a\n- b")
    assert document.blocks == [
        Heading(level=1, text="Title"),
        Paragraph(runs=[PlainText("Body text")]),
        BulletList(
            items=[
                BulletItem(indent_level=0, runs=[PlainText("a")]),
                BulletItem(indent_level=0, runs=[PlainText("b")]),
            ]
        ),
    ]


def test_inline_math_becomes_math_block():
    document = content_parser.parse_content("Area: $\\pi r^2$ units")
    assert document.blocks == [
        Paragraph(runs=[PlainText("Area")]),
        MathBlock(latex="\\pi r^2"),
        Paragraph(runs=[PlainText("units")]),
    ]


def test_dangling_delimiters_round_trip():
    document, state = content_parser.parse_chunks(["$", "x^2+1", "$"], ParserState())
    assert document.blocks == [MathBlock(latex="x^2+1")]
    assert state == ParserState()


def test_state_is_threaded_between_chunks():
    blocks, state = content_parser.parse_chunk(Chunk("$"), ParserState())
    assert blocks == []
    assert state == ParserState(pending_math_open=True)

    blocks, state = content_parser.parse_chunk(Chunk("a+b"), state)
    assert blocks == [MathBlock(latex="a+b")]
    assert state == ParserState(pending_math_close=True)

    blocks, state = content_parser.parse_chunk(Chunk(" $ "), state)
    assert blocks == []
    assert state.is_idle


def test_stray_colon_is_dropped():
    document, _ = content_parser.parse_chunks([":", "text"])
    assert document.blocks == [Paragraph(runs=[PlainText("text")])]


def test_math_chunk_heading_and_cleanup():
    document, _ = content_parser.parse_chunks(["## Result: $x\\newlineeq 5$", "**$y$**"])
    assert document.blocks == [
        Heading(level=2, text="Result"),
        MathBlock(latex="x= 5"),
        MathBlock(latex="y"),
    ]


def test_unmatched_dollar_is_plain_text():
    document = content_parser.parse_content("costs $5 today")
    assert document.blocks == [Paragraph(runs=[PlainText("costs $5 today")])]


def test_no_state_leaks_between_documents():
    assert content_parser.parse_content("$").blocks == []
    assert content_parser.parse_content("x^2").blocks == [Paragraph(runs=[PlainText("x^2")])]


def test_reparse_is_identical():
    text = "# Intro***Use $a^2+b^2$ here***- **one**\n- two"
    assert content_parser.parse_content(text) == content_parser.parse_content(text)


def test_parser_state_rejects_both_flags():
    with pytest.raises(ValueError):
        ParserState(pending_math_open=True, pending_math_close=True)


def test_bold_before_text_without_space():
    assert content_parser.parse_inline("**Note:**text") == [Bold("Note:"), PlainText("text")]
    assert content_parser.parse_inline("**Answer:**42") == [Bold("Answer:"), PlainText("42")]
    assert content_parser.parse_inline("Total **(R500)**, done") == [
        PlainText("Total "),
        Bold("(R500)"),
        PlainText(", done"),
    ]


def test_bold_in_bullet_after_punctuation():
    document = content_parser.parse_content("- **Step 1:**Calculate")
    assert document.blocks == [
        BulletList(items=[BulletItem(indent_level=0, runs=[Bold("Step 1:"), PlainText("Calculate")])])
    ]


def test_math_chunk_text_trims_trailing_colon():
    document, _ = content_parser.parse_chunks(["Area: $x$"])
    assert document.blocks == [Paragraph(runs=[PlainText("Area")]), MathBlock(latex="x")]
    assert content_parser.parse_content("Total costs $5:").blocks == [
        Paragraph(runs=[PlainText("Total costs $5")])
    ]


def test_bullet_list_collects_items_across_paragraph_lines():
    document = content_parser.parse_content("Intro\n- a\nMiddle\n- b")
    assert document.blocks == [
        Paragraph(runs=[PlainText("Intro")]),
        BulletList(
            items=[
                BulletItem(indent_level=0, runs=[PlainText("a")]),
                BulletItem(indent_level=0, runs=[PlainText("b")]),
            ]
        ),
        Paragraph(runs=[PlainText("Middle")]),
    ]
