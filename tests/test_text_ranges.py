from __future__ import annotations

from core.models import BodyRange, Formatting, HydratedMention, Style
from core.text_ranges import apply_ranges_for_text

# Mentions occupy a single placeholder character in the body.
OBJ = "￼"


def _mention(start: int, name: str) -> BodyRange:
    return BodyRange(start, 1, HydratedMention(participant_id=name.lower(), display_name=name, conversation_id=name))


def _spoiler(start: int, length: int) -> BodyRange:
    return BodyRange(start, length, Formatting(style=Style.SPOILER))


def test_mention_is_spelled_out() -> None:
    assert apply_ranges_for_text(f"a {OBJ} d", [_mention(2, "Bob")], []) == "a @Bob d"


def test_multiple_mentions_keep_positions() -> None:
    text = f"{OBJ} and {OBJ}"
    assert apply_ranges_for_text(text, [_mention(0, "Ann"), _mention(6, "Bob")], []) == "@Ann and @Bob"


def test_spoiler_is_masked_and_later_mentions_shift() -> None:
    text = f"hi SECRET {OBJ}"

    result = apply_ranges_for_text(text, [_mention(10, "Ann")], [_spoiler(3, 6)])

    assert result == "hi ■■■■ @Ann"


def test_mention_inside_spoiler_is_dropped() -> None:
    text = f"a {OBJ} b"
    assert apply_ranges_for_text(text, [_mention(2, "Bob")], [_spoiler(0, 5)]) == "■■■■"


def test_mentions_before_spoiler_are_untouched() -> None:
    text = f"{OBJ} said secret things"

    result = apply_ranges_for_text(text, [_mention(0, "Ann")], [_spoiler(7, 6)])

    assert result == "@Ann said ■■■■ things"


def test_several_spoilers_apply_back_to_front() -> None:
    assert apply_ranges_for_text("ab cd ef", [], [_spoiler(6, 2), _spoiler(0, 2)]) == "■■■■ cd ■■■■"


def test_custom_replacement() -> None:
    assert apply_ranges_for_text("abc", [], [_spoiler(0, 3)], replacement="*") == "*"


def test_empty_text_is_returned_as_is() -> None:
    assert apply_ranges_for_text("", [_mention(0, "Bob")], []) == ""
    assert apply_ranges_for_text(None, [], []) is None
