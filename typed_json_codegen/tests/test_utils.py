import ast
import unittest
from unittest import TestCase

from typed_json_codegen.errors import PipelineInvariantViolation
from typed_json_codegen.utils import camel_case, pascal_case, snake_case, string_escape


class TestIdentifierStyles(TestCase):
    """Test identifier casing and legalizing"""

    def test_pascal_case(self):
        self.assertEqual(pascal_case("first_name"), "FirstName")
        self.assertEqual(pascal_case("actionTemplate"), "ActionTemplate")
        self.assertEqual(pascal_case("HTTPServer"), "HttpServer")
        self.assertEqual(pascal_case("top-level value"), "TopLevelValue")
        self.assertEqual(pascal_case("welcome"), "Welcome")

    def test_camel_case(self):
        self.assertEqual(camel_case("first_name"), "firstName")
        self.assertEqual(camel_case("FirstName"), "firstName")
        self.assertEqual(camel_case("get_optional"), "getOptional")
        self.assertEqual(camel_case("a\"b\\c"), "aBC")

    def test_snake_case(self):
        self.assertEqual(snake_case("firstName"), "first_name")
        self.assertEqual(snake_case("HTTPServer"), "http_server")
        self.assertEqual(snake_case("on_sale"), "on_sale")

    def test_leading_digits_get_a_prefix(self):
        self.assertEqual(pascal_case("3d model"), "The3DModel")
        self.assertEqual(camel_case("1st"), "the1St")
        self.assertEqual(snake_case("42"), "the_42")

    def test_nothing_usable_becomes_empty(self):
        self.assertEqual(pascal_case(""), "Empty")
        self.assertEqual(camel_case("$$$"), "empty")
        self.assertEqual(snake_case("é"), "empty")

    def test_styled_names_are_identifiers(self):
        for raw in ["", "123", "a b", "x-y.z", "über", "__init__", "\U0001f600"]:
            for style in (pascal_case, camel_case, snake_case):
                self.assertTrue(style(raw).isidentifier(), f"{style.__name__}({raw!r})")


class TestStringEscape(TestCase):
    """Test escaping for double-quoted string literals"""

    def test_named_escapes(self):
        self.assertEqual(string_escape('say "hi"'), 'say \\"hi\\"')
        self.assertEqual(string_escape("back\\slash"), "back\\\\slash")
        self.assertEqual(string_escape("a\nb\rc\td"), "a\\nb\\rc\\td")

    def test_control_characters_use_octal(self):
        self.assertEqual(string_escape("\x00"), "\\000")
        self.assertEqual(string_escape("\x1f1"), "\\0371")
        self.assertEqual(string_escape("\x7f"), "\\177")

    def test_non_ascii_uses_unicode_escapes(self):
        self.assertEqual(string_escape("café"), "caf\\u00e9")
        self.assertEqual(string_escape("\U0001f600"), "\\U0001f600")

    def test_lone_surrogates_are_rejected(self):
        # json.loads('"\\ud800"') yields one of these
        for text in ["\ud800", "key\udfff", "\udc00tail"]:
            with self.assertRaises(PipelineInvariantViolation):
                string_escape(text)

    def test_printable_ascii_is_unchanged(self):
        printable = "".join(chr(c) for c in range(0x20, 0x7F) if chr(c) not in '"\\')
        self.assertEqual(string_escape(printable), printable)

    def test_round_trip_through_literal_syntax(self):
        for text in ["", "plain", 'q"uote', "\\", "\x01\x02\x7f", "é中", "\U0001f600", "tab\tend\n"]:
            escaped = string_escape(text)
            self.assertEqual(ast.literal_eval('"' + escaped + '"'), text)


if __name__ == "__main__":
    unittest.main()
