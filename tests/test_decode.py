"""Tests for TOON decoder."""

import pytest

from toon_codec import DecodeOptions, ParseError, StructuralError, decode


class TestScalars:
    """Test decoding of a single root value."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("null", None),
            ("true", True),
            ("false", False),
            ("12", 12),
            ("-40", -40),
            ("0", 0),
            ("6.5", 6.5),
            ("-0.125", -0.125),
            ("word", "word"),
            ('"two words"', "two words"),
            ('""', ""),
        ],
    )
    def test_scalar(self, text, expected):
        result = decode(text)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_blank_document_is_empty_object(self, text):
        assert decode(text) == {}


class TestObjects:
    """Test decoding of objects."""

    def test_flat(self):
        assert decode("city: Oslo\npop: 709000") == {"city": "Oslo", "pop": 709000}

    def test_nested(self):
        result = decode("server:\n  host: db1\n  port: 5432")
        assert result == {"server": {"host": "db1", "port": 5432}}

    def test_key_without_value_is_empty_object(self):
        assert decode("cache:") == {"cache": {}}

    def test_three_levels(self):
        assert decode("x:\n  y:\n    z: end") == {"x": {"y": {"z": "end"}}}

    def test_quoted_key(self):
        assert decode('"full name": Ada') == {"full name": "Ada"}

    def test_mixed_children(self):
        toon = "app:\n  meta:\n    name: demo\n    ports[2]: 80,443\n  debug: true"
        assert decode(toon) == {
            "app": {"meta": {"name": "demo", "ports": [80, 443]}, "debug": True}
        }


class TestArrayShapes:
    """Test the inline, tabular and list array forms."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("ids[3]: 4,5,6", {"ids": [4, 5, 6]}),
            ("names[2]: x,y", {"names": ["x", "y"]}),
            ("mix[4]: 0,a,false,null", {"mix": [0, "a", False, None]}),
            ("none[0]:", {"none": []}),
            ("one[1]: solo", {"one": ["solo"]}),
            ("[2]: 9,8", [9, 8]),
            ("ids[3\t]: 4\t5\t6", {"ids": [4, 5, 6]}),
            ("ids[3|]: 4|5|6", {"ids": [4, 5, 6]}),
        ],
    )
    def test_inline(self, text, expected):
        assert decode(text) == expected

    def test_table(self):
        result = decode("pets[2]{id,kind}:\n  1,cat\n  2,dog")
        assert result == {"pets": [{"id": 1, "kind": "cat"}, {"id": 2, "kind": "dog"}]}

    def test_table_with_quoted_cells(self):
        assert decode('pairs[2]{v}:\n  "x,y"\n  z') == {"pairs": [{"v": "x,y"}, {"v": "z"}]}

    def test_tab_table(self):
        result = decode("pets[1\t]{id\tkind}:\n  1\tcat")
        assert result == {"pets": [{"id": 1, "kind": "cat"}]}

    def test_root_table(self):
        assert decode("[2]{n}:\n  1\n  2") == [{"n": 1}, {"n": 2}]

    def test_list_of_mixed_items(self):
        result = decode("stuff[4]:\n  - 3\n  - k: v\n  - word\n  -")
        assert result == {"stuff": [3, {"k": "v"}, "word", {}]}

    def test_list_item_with_nested_object(self):
        result = decode("nodes[2]:\n  - p:\n      q: 1\n  - p:\n      q: 2")
        assert result == {"nodes": [{"p": {"q": 1}}, {"p": {"q": 2}}]}

    def test_root_list(self):
        assert decode("[2]:\n  - k: 1\n  - k: 2") == [{"k": 1}, {"k": 2}]

    def test_list_of_inline_arrays(self):
        assert decode("grid[2]:\n  - [2]: 1,2\n  - [1]: 3") == {"grid": [[1, 2], [3]]}


class TestEscapes:
    """Test escape sequences in quoted values."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('v: "a\\nb"', "a\nb"),
            ('v: "a\\tb"', "a\tb"),
            ('v: "a\\rb"', "a\rb"),
            ('v: "D:\\\\tmp"', "D:\\tmp"),
            ('v: "say \\"hi\\""', 'say "hi"'),
            ('v: "if x:\\n    return 1\\n"', "if x:\n    return 1\n"),
        ],
    )
    def test_unescape(self, text, expected):
        assert decode(text) == {"v": expected}

    @pytest.mark.parametrize(
        "text,message",
        [
            ('v: "open', "Unterminated string"),
            ('v: "bad\\q"', "Invalid escape sequence"),
            ('v: "ends\\"', "Unterminated string"),
        ],
    )
    def test_malformed(self, text, message):
        with pytest.raises(ParseError, match=message):
            decode(text)


class TestPathExpansion:
    """Test expanding dotted keys into nested objects."""

    EXPAND = DecodeOptions(expand_paths="safe")

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("a.b.c: 1", {"a": {"b": {"c": 1}}}),
            ("a.b: 1\na.c: 2", {"a": {"b": 1, "c": 2}}),
            ("a.b: 1\nd: 2", {"a": {"b": 1}, "d": 2}),
            ('"a.b.c": 1', {"a.b.c": 1}),
        ],
    )
    def test_expand(self, text, expected):
        assert decode(text, self.EXPAND) == expected

    def test_off_by_default(self):
        assert decode("a.b.c: 1") == {"a.b.c": 1}


class TestCounts:
    """Test declared lengths against the actual data."""

    @pytest.mark.parametrize(
        "text",
        ["ids[4]: 1,2", "ids[2]:\n  - 1", "rows[3]{a}:\n  1\n  2"],
    )
    def test_length_mismatch(self, text):
        with pytest.raises(StructuralError, match="length mismatch"):
            decode(text)

    def test_row_width(self):
        with pytest.raises(ValueError, match="Expected"):
            decode("rows[2]{a,b}:\n  1\n  2")


class TestNumbersAsStrings:
    """Test tokens that look numeric but stay strings."""

    def test_leading_zero(self):
        assert decode("zip: 0042") == {"zip": "0042"}

    def test_quoted_number(self):
        assert decode('zip: "42"') == {"zip": "42"}

    def test_negative_zero_is_zero(self):
        assert decode("t: -0") == {"t": 0}

class TestListItemLayout:
    """Test objects and arrays that start on a list item line."""

    def test_tabular_first_field(self):
        toon = """items[1]:
  - users[2]{id,name}:
      1,Ada
      2,Bob
    status: ok"""
        assert decode(toon) == {
            "items": [
                {"users": [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Bob"}], "status": "ok"}
            ]
        }

    def test_list_first_field(self):
        toon = """items[1]:
  - tags[2]:
      - a
      - b
    count: 2"""
        assert decode(toon) == {"items": [{"tags": ["a", "b"], "count": 2}]}

    def test_empty_array_first_field(self):
        toon = "items[1]:\n  - tags[0]:\n    count: 0"
        assert decode(toon) == {"items": [{"tags": [], "count": 0}]}

    def test_bare_array_body_one_level_down(self):
        toon = """outer[2]:
  - [2]:
    - a
    - b
  - [1]{x}:
    1"""
        assert decode(toon) == {"outer": [["a", "b"], [{"x": 1}]]}

    def test_bare_hyphen_with_nested_object(self):
        toon = "items[1]:\n  -\n    a: 1\n    b: 2"
        assert decode(toon) == {"items": [{"a": 1, "b": 2}]}


class TestDelimiterInference:
    """Test delimiter detection when the header omits the marker."""

    def test_inline_pipe_inferred(self):
        assert decode("items[3]: a|b|c") == {"items": ["a", "b", "c"]}

    def test_inline_comma_preferred(self):
        assert decode("items[2]: a|b,c") == {"items": ["a|b", "c"]}

    def test_tabular_fields_infer_delimiter(self):
        result = decode("users[2]{id|name}:\n  1|Ada\n  2|Bob")
        assert result == {"users": [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Bob"}]}

    def test_tabular_rows_infer_delimiter(self):
        result = decode("users[1]{id,name}:\n  1|Ada")
        assert result == {"users": [{"id": 1, "name": "Ada"}]}


class TestRootForms:
    """Test root value detection."""

    def test_quoted_root_string_with_colon(self):
        assert decode('"a: b"') == "a: b"

    def test_root_primitive_negative(self):
        assert decode("-5") == -5

    def test_comment_lines_ignored(self):
        toon = "# settings\nname: x\n  # indented note\nitems[2]:\n  # between\n  - 1\n  - 2"
        assert decode(toon) == {"name": "x", "items": [1, 2]}

    def test_crlf_line_endings(self):
        assert decode("a: 1\r\nb:\r\n  c: 2\r\n") == {"a": 1, "b": {"c": 2}}

    def test_decode_lines(self):
        from toon_codec import decode_lines

        assert decode_lines(iter(["a:", "  b: 1"])) == {"a": {"b": 1}}


class TestNumbers:
    """Test numeric literal grammar."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("1e3", 1000.0),
            ("1E-2", 0.01),
            ("-0.0", 0),
            ("0.5", 0.5),
            ("1.", "1."),
            (".5", ".5"),
            ("01.5", "01.5"),
            ("-01", "-01"),
            ("1_000", "1_000"),
            ("+1", "+1"),
        ],
    )
    def test_tokens(self, token, expected):
        result = decode(f"v: {token}")["v"]
        assert result == expected
        assert type(result) is type(expected)


class TestCustomIndent:
    """Test non-default indentation sizes."""

    def test_four_space_indent(self):
        toon = "a:\n    b:\n        c: 1\n    items[2]:\n        - x\n        - y"
        result = decode(toon, DecodeOptions(indent=4))
        assert result == {"a": {"b": {"c": 1}, "items": ["x", "y"]}}
