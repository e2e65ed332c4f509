"""End-to-end behaviour of the codec on small documents."""

import pytest

from toon_codec import DecodeOptions, StructuralError, decode, encode


def test_flat_object():
    assert encode({"name": "Alice", "age": 30}) == "name: Alice\nage: 30"


def test_uniform_objects_become_table():
    data = {"items": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]}
    assert encode(data) == "items[2]{id,name}:\n  1,A\n  2,B"


def test_declared_length_checked():
    strict = DecodeOptions(strict=True)
    assert decode("items[3]: 1,2,3", strict) == {"items": [1, 2, 3]}
    with pytest.raises(StructuralError, match="length mismatch"):
        decode("items[4]: 1,2,3", strict)


def test_dotted_keys_expand_only_when_enabled():
    assert decode("a.b.c: 5", DecodeOptions(expand_paths="safe")) == {"a": {"b": {"c": 5}}}
    assert decode("a.b.c: 5", DecodeOptions(expand_paths="off")) == {"a.b.c": 5}


def test_negative_number_string_is_quoted():
    assert encode("-5") == '"-5"'
    assert encode({"v": "-5"}) == 'v: "-5"'
    assert decode("-5") == -5
    assert decode("v: -5") == {"v": -5}


def test_list_array_of_primitives():
    assert decode("tags[2]:\n  - x\n  - y") == {"tags": ["x", "y"]}


@pytest.mark.parametrize(
    "value",
    ["", "true", "false", "null", "123", "-5", "1e5", "a,b", "a|b", "a\tb",
     'say "hi"', "back\\slash", " pad ", "- item", "#tag", "[x]", "{y}", "k: v",
     "\x00bell\x07", "del\x7f", "ünïcødé"],
)
@pytest.mark.parametrize("delimiter", [",", "\t", "|"])
def test_string_values_survive_quoting(value, delimiter):
    from toon_codec import EncodeOptions

    options = EncodeOptions(delimiter=delimiter)
    assert decode(encode(value, options)) == value
    assert decode(encode({"k": value}, options)) == {"k": value}
    assert decode(encode({"k": [value, "x"]}, options)) == {"k": [value, "x"]}
