from portal.core.markup import extract_hashtags, tokenize, tokenize_inline, visible_text
from portal.core.models.token import (
    BlockquoteToken,
    BoldToken,
    BulletToken,
    CodeBlockToken,
    CodeToken,
    HashtagToken,
    ItalicToken,
    LinkToken,
    NewlineToken,
    TextToken,
)


def test_tokenize_is_deterministic() -> None:
    source = "Hi **there**\n- item\n> quote #tag\n```py\nx = 1\n```\n*end* [a](b)"
    assert tokenize(source) == tokenize(source)


def test_empty_source_yields_no_tokens() -> None:
    assert tokenize("") == []


def test_bold_wins_over_inner_italic() -> None:
    tokens = tokenize("**a*b*c**")
    assert tokens == [BoldToken(content="a*b*c")]
    assert not any(isinstance(t, ItalicToken) for t in tokens)


def test_bold_and_italic_side_by_side() -> None:
    assert tokenize("**b** *i*") == [
        BoldToken(content="b"),
        TextToken(content=" "),
        ItalicToken(content="i"),
    ]


def test_italic_inside_sentence() -> None:
    assert tokenize("an *important* note") == [
        TextToken(content="an "),
        ItalicToken(content="important"),
        TextToken(content=" note"),
    ]


def test_hashtag_requires_non_word_boundary() -> None:
    tokens = tokenize("email#1 and #tag")
    assert tokens == [TextToken(content="email#1 and "), HashtagToken(raw="#tag")]
    assert extract_hashtags(tokens) == ["#tag"]


def test_hashtag_after_non_ascii_letter() -> None:
    assert tokenize("café#tag") == [TextToken(content="café"), HashtagToken(raw="#tag")]


def test_hashtag_after_punctuation_and_with_namespace() -> None:
    assert tokenize("(#x) #priority/high-1") == [
        TextToken(content="("),
        HashtagToken(raw="#x"),
        TextToken(content=") "),
        HashtagToken(raw="#priority/high-1"),
    ]


def test_heading_marker_is_not_a_hashtag() -> None:
    assert tokenize("# heading") == [TextToken(content="# heading")]


def test_code_fence_is_opaque() -> None:
    assert tokenize("```js\n**bold**\n```") == [CodeBlockToken(content="**bold**", lang="js")]


def test_code_fence_without_language() -> None:
    assert tokenize("```\nx\n```\nafter") == [
        CodeBlockToken(content="x", lang=None),
        NewlineToken(),
        TextToken(content="after"),
    ]


def test_unterminated_fence_consumes_rest_of_document() -> None:
    assert tokenize("intro\n```\ncode #x\nmore") == [
        TextToken(content="intro"),
        NewlineToken(),
        CodeBlockToken(content="code #x\nmore"),
    ]


def test_bullets_keep_raw_content() -> None:
    assert tokenize("- item **x**\n  * second") == [
        BulletToken(content="item **x**"),
        NewlineToken(),
        BulletToken(content="second"),
    ]


def test_blockquote_strips_marker_and_whitespace() -> None:
    assert tokenize("  >   quoted *text*") == [BlockquoteToken(content="quoted *text*")]


def test_blank_lines_keep_newlines() -> None:
    assert tokenize("a\n\nb") == [
        TextToken(content="a"),
        NewlineToken(),
        NewlineToken(),
        TextToken(content="b"),
    ]


def test_link_and_code_shadow_hashtags() -> None:
    line = "Hello **world**, see [docs](https://x.io/#top) and `#notag` #team/core"
    assert tokenize_inline(line) == [
        TextToken(content="Hello "),
        BoldToken(content="world"),
        TextToken(content=", see "),
        LinkToken(text="docs", url="https://x.io/#top"),
        TextToken(content=" and "),
        CodeToken(content="#notag"),
        TextToken(content=" "),
        HashtagToken(raw="#team/core"),
    ]


def test_code_wins_over_overlapping_bold() -> None:
    assert tokenize("**a `b** c`") == [
        TextToken(content="**a "),
        CodeToken(content="b** c"),
    ]


def test_malformed_markup_degrades_to_text() -> None:
    assert tokenize("2 * 3 = 6") == [TextToken(content="2 * 3 = 6")]
    assert tokenize("[broken](nope") == [TextToken(content="[broken](nope")]
    assert tokenize("**open") == [TextToken(content="**open")]


def test_visible_text_strips_markers() -> None:
    tokens = tokenize("Hi **there** and *you*, `x` [l](u) #t\n- b\n> q")
    assert visible_text(tokens) == "Hi there and you, x l #t\nb\nq"


def test_extract_hashtags_keeps_every_occurrence() -> None:
    assert extract_hashtags(tokenize("#a #b\n#a")) == ["#a", "#b", "#a"]


def test_source_ceiling_leaves_remainder_as_text() -> None:
    assert tokenize("abc **b**", max_length=3) == [
        TextToken(content="abc"),
        TextToken(content=" **b**"),
    ]


def test_line_ceiling_skips_inline_parsing() -> None:
    assert tokenize("**x**", max_line_length=3) == [TextToken(content="**x**")]
