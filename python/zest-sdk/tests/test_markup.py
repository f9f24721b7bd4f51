"""Tests for zest.markup and zest.result rendering/serialization."""

from __future__ import annotations

import pytest

from zest.lifecycle import ZestTest
from zest.markup import ANSI_MARKUP, HORIZON_MARKUP, HTML_MARKUP, PLAIN_MARKUP, render_lines
from zest.result import ZestResult
from zest.status import Line, LineColor


class TestRenderLines:

    def test_same_color_lines_share_a_span(self) -> None:
        lines = [
            Line("TEST STATUS: PASS", LineColor.GREEN),
            Line("--- FRAME 0 ---", LineColor.GREY),
            Line('start_test("t")'),
            Line('detect_event("A") | OK: expect_event("A")', LineColor.GREEN),
            Line('detect_event("B") | OK: expect_event("B")', LineColor.GREEN),
        ]

        text = render_lines(lines, HORIZON_MARKUP)

        assert text == (
            "<color=#6f6>TEST STATUS: PASS</color>"
            "<color=#ccc><br>--- FRAME 0 ---</color>"
            '<br>start_test("t")'
            '<color=#6f6><br>detect_event("A") | OK: expect_event("A")'
            '<br>detect_event("B") | OK: expect_event("B")</color>'
        )

    def test_plain_markup_has_no_tags(self) -> None:
        lines = [Line("a", LineColor.RED), Line("b"), Line("c", LineColor.YELLOW)]

        assert render_lines(lines, PLAIN_MARKUP) == "a\nb\nc"

    def test_html_and_ansi_tags(self) -> None:
        lines = [Line("bad", LineColor.RED)]

        assert render_lines(lines, HTML_MARKUP) == '<span style="color:#f66">bad</span>'
        assert render_lines(lines, ANSI_MARKUP) == "\033[31mbad\033[0m"

    def test_empty_transcript(self) -> None:
        assert render_lines([], HORIZON_MARKUP) == ""


class TestZestResult:

    def test_text_uses_test_markup(self) -> None:
        test = ZestTest("plain", markup=PLAIN_MARKUP)

        result = test.get_test_result()

        assert result.text == 'TEST STATUS: RUNNING\n--- FRAME 0 ---\nstart_test("plain")'
        assert result.render(HORIZON_MARKUP).startswith("<color=#ccc>TEST STATUS: RUNNING")

    def test_json_round_trip(self) -> None:
        test = ZestTest("json")
        test.expect_event("A")
        test.detect_event("A")
        result = test.finish_test()

        restored = ZestResult.from_json(result.to_json())

        assert restored == result
        assert restored.done

    def test_from_json_invalid_raises(self) -> None:
        with pytest.raises(ValueError, match="invalid result JSON"):
            ZestResult.from_json("not valid json")

    def test_from_json_missing_status_raises(self) -> None:
        with pytest.raises(ValueError, match="status"):
            ZestResult.from_json('{"test_name": "x"}')
