"""
Tests for Command Parser

Tests trigger recognition and argument extraction.
"""

import pytest


class TestParse:
    """Tests for parse()"""

    @pytest.mark.parametrize("trigger", ["!j", "!jass"])
    def test_native_triggers(self, trigger):
        from jassbot.bot.command_parser import parse, NativeQuery

        assert parse(f"{trigger} CreateUnit") == NativeQuery("CreateUnit")

    @pytest.mark.parametrize("trigger", ["!d", "!doc"])
    def test_doc_triggers(self, trigger):
        from jassbot.bot.command_parser import parse, DocQuery

        assert parse(f"{trigger} CreateUnit") == DocQuery("CreateUnit")

    def test_extra_words_ignored(self):
        from jassbot.bot.command_parser import parse, DocQuery

        assert parse("!d CreateUnit please and thanks") == DocQuery("CreateUnit")

    def test_argument_taken_verbatim(self):
        from jassbot.bot.command_parser import parse, NativeQuery

        assert parse("!j Create*Unit?") == NativeQuery("Create*Unit?")

    def test_surrounding_whitespace(self):
        from jassbot.bot.command_parser import parse, NativeQuery

        assert parse("  !j   CreateUnit \n") == NativeQuery("CreateUnit")

    @pytest.mark.parametrize("text", ["", "   ", "hello", "!j", "!doc", "\n"])
    def test_missing_argument(self, text):
        from jassbot.bot.command_parser import parse
        from jassbot.common.errors import MissingArgument

        with pytest.raises(MissingArgument):
            parse(text)

    @pytest.mark.parametrize("text", ["!x foo", "hello world", "j CreateUnit", "!J CreateUnit", "!docs CreateUnit"])
    def test_not_a_trigger(self, text):
        from jassbot.bot.command_parser import parse
        from jassbot.common.errors import NotATrigger

        with pytest.raises(NotATrigger):
            parse(text)

    def test_failures_share_base_class(self):
        from jassbot.bot.command_parser import parse
        from jassbot.common.errors import ParseFailure

        for text in ("hello", "!x foo"):
            with pytest.raises(ParseFailure):
                parse(text)
