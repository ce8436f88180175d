import pytest

from style_scanner.models import TokenKind
from style_scanner.tokenizer import DEFAULT_LEXICON, Lexicon, tokenize


ROUND_TRIP_SAMPLES = [
    "",
    "if (x) doThing();",
    "int main(void) {\r\n  return 0x1F;\r\n}\r\n",
    "/* unterminated block",
    "\"unterminated string\nnext line",
    "'a\\'b' \"c\\\\\" // trailing\n",
    "café = naïve + 1; \t\x0b\x00@#`",
    "a\rb\n\nc\r\n",
    "x = .5 + 1.e + 3.14f - 42UL * 0x",
    "\\",
    "\"ends with backslash\\",
    "   \t  ",
]


def test_tokens_reconstruct_original_text():
    for sample in ROUND_TRIP_SAMPLES:
        stream = tokenize(sample)
        assert stream.reconstruct() == sample
        assert "".join(token.text for token in stream) == sample


def test_significant_skips_trivia():
    stream = tokenize("if (x) /* why */\n  go();")

    assert [token.text for token in stream.significant()] == ["if", "(", "x", ")", "go", "(", ")", ";"]
    assert list(tokenize(" \n// only trivia\n").significant()) == []


def test_empty_input_gives_empty_stream():
    stream = tokenize("")
    assert len(stream) == 0
    assert stream.tokens == ()
    assert stream.end_position == (1, 1)


def test_classifies_simple_statement():
    stream = tokenize("if (x) doThing();")

    assert [token.kind for token in stream] == [
        TokenKind.KEYWORD,
        TokenKind.WHITESPACE,
        TokenKind.PUNCTUATION,
        TokenKind.IDENTIFIER,
        TokenKind.PUNCTUATION,
        TokenKind.WHITESPACE,
        TokenKind.IDENTIFIER,
        TokenKind.PUNCTUATION,
        TokenKind.PUNCTUATION,
        TokenKind.PUNCTUATION,
    ]
    assert [(token.line, token.column) for token in stream][:4] == [(1, 1), (1, 3), (1, 4), (1, 5)]
    assert stream[6].text == "doThing"
    assert stream[6].column == 8


def test_numeric_literals():
    stream = tokenize("0x1F 3.14f .5 1e10 42UL")
    numbers = [token.text for token in stream if token.kind is TokenKind.NUMBER_LITERAL]
    assert numbers == ["0x1F", "3.14f", ".5", "1e10", "42UL"]


def test_member_access_dot_is_punctuation():
    stream = tokenize("a.b")
    assert [token.kind for token in stream] == [
        TokenKind.IDENTIFIER,
        TokenKind.PUNCTUATION,
        TokenKind.IDENTIFIER,
    ]


def test_string_literals_and_escapes():
    stream = tokenize("\"a\\\"b\" 'c'")
    assert [token.text for token in stream] == ["\"a\\\"b\"", " ", "'c'"]
    assert stream[0].kind is TokenKind.STRING_LITERAL
    assert stream[2].kind is TokenKind.STRING_LITERAL


def test_unterminated_string_stops_at_line_break():
    stream = tokenize("\"abc\nx")
    assert [(token.kind, token.text) for token in stream] == [
        (TokenKind.STRING_LITERAL, "\"abc"),
        (TokenKind.NEWLINE, "\n"),
        (TokenKind.IDENTIFIER, "x"),
    ]
    assert (stream[2].line, stream[2].column) == (2, 1)


def test_comments_take_precedence_over_punctuation():
    stream = tokenize("a // note\n/* b */c")
    comments = [token.text for token in stream if token.kind is TokenKind.COMMENT]
    assert comments == ["// note", "/* b */"]
    assert stream[-1].text == "c"


def test_quoted_comment_marker_is_a_string():
    stream = tokenize("s = \"// not a comment\";")
    assert not any(token.kind is TokenKind.COMMENT for token in stream)


def test_block_comment_spanning_lines_updates_positions():
    stream = tokenize("/* a\r\nb */x")
    comment, ident = stream.tokens
    assert comment.kind is TokenKind.COMMENT
    assert (comment.end_line, comment.end_column) == (2, 5)
    assert (ident.line, ident.column) == (2, 5)


def test_unterminated_block_comment_runs_to_end():
    stream = tokenize("x /* open\nstill open")
    assert stream[-1].kind is TokenKind.COMMENT
    assert stream[-1].text == "/* open\nstill open"


def test_newline_variants():
    stream = tokenize("a\r\nb\rc\nd")
    newlines = [token.text for token in stream if token.kind is TokenKind.NEWLINE]
    assert newlines == ["\r\n", "\r", "\n"]
    assert [(token.text, token.line) for token in stream if token.kind is TokenKind.IDENTIFIER] == [
        ("a", 1),
        ("b", 2),
        ("c", 3),
        ("d", 4),
    ]


def test_unknown_characters_become_single_punctuation_tokens():
    stream = tokenize("@#`\x00")
    assert [token.kind for token in stream] == [TokenKind.PUNCTUATION] * 4
    assert [token.text for token in stream] == ["@", "#", "`", "\x00"]


def test_unicode_identifiers_and_whitespace():
    stream = tokenize("café x")
    assert stream[0].kind is TokenKind.IDENTIFIER
    assert stream[0].text == "café"
    assert stream[1].kind is TokenKind.WHITESPACE


def test_custom_keyword_set():
    lexicon = DEFAULT_LEXICON.with_keywords({"foo"})
    stream = tokenize("foo if", lexicon)
    assert stream[0].kind is TokenKind.KEYWORD
    assert stream[2].kind is TokenKind.IDENTIFIER


def test_custom_comment_markers():
    lexicon = Lexicon(line_comments=("#",), block_comments=())
    stream = tokenize("x # note\n/* y */", lexicon)
    assert [token.text for token in stream if token.kind is TokenKind.COMMENT] == ["# note"]


def test_empty_comment_marker_is_rejected():
    with pytest.raises(ValueError):
        Lexicon(line_comments=("",))


def test_offsets_are_contiguous():
    sample = ROUND_TRIP_SAMPLES[2]
    stream = tokenize(sample)
    offset = 0
    for token in stream:
        assert token.offset == offset
        offset = token.end_offset
    assert offset == len(sample)
