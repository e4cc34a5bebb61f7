from string import ascii_lowercase, ascii_uppercase

import pytest

import bacon_cipher
from bacon_cipher import CharCodec, CharCodecV2

V1_ALPHABET = (
    "aaaaaaaaabaaabaaaabbaabaaaababaabbaaabbbabaaaabaaaabaabababaababbabbaaabb"
    "ababbbaabbbbbaaaabaaabbaababaabbbaabbbabaabababbabbababbb"
)
V2_ALPHABET = (
    "aaaaaaaaabaaabaaaabbaabaaaababaabbaaabbbabaaaabaabababaababbabbaaabbababbb"
    "aabbbbbaaaabaaabbaababaabbbabaabababbabbababbbbbaaabbaab"
)
MY_SECRET = "ababbbabbabaaabaabaaaaababaaaaaabaabaaba"


def test_encode_my_secret() -> None:
    codec = CharCodec("a", "b")
    encoded = codec.encode("My secret")
    assert "".join(encoded) == MY_SECRET


def test_encode_my_to_two_groups() -> None:
    codec = CharCodec("a", "b")
    assert codec.encode("MY") == ["a", "b", "a", "b", "b", "b", "a", "b", "b", "a"]
    assert codec.decode(["a", "b", "a", "b", "b", "b", "a", "b", "b", "a"]) == ["M", "Y"]


def test_default_codec_uses_capital_a_b() -> None:
    codec = CharCodec()
    assert "".join(codec.encode("My secret")) == MY_SECRET.upper()


@pytest.mark.parametrize(
    "codec,expected",
    [(CharCodec("a", "b"), V1_ALPHABET), (CharCodecV2("a", "b"), V2_ALPHABET)],
)
@pytest.mark.parametrize("alphabet", [ascii_lowercase, ascii_uppercase])
def test_encode_whole_alphabet(codec, expected: str, alphabet: str) -> None:
    assert "".join(codec.encode(alphabet)) == expected


def test_decode_my_secret() -> None:
    codec = CharCodec("a", "b")
    assert "".join(codec.decode(MY_SECRET)) == "MYSECRET"


def test_v1_merges_i_j_and_u_v() -> None:
    codec = CharCodec("a", "b")
    decoded = codec.decode(codec.encode(ascii_uppercase))
    assert "".join(decoded) == "ABCDEFGHIIKLMNOPQRSTUUWXYZ"


def test_v2_round_trips_every_letter() -> None:
    codec = CharCodecV2("a", "b")
    assert "".join(codec.decode(codec.encode(ascii_lowercase))) == ascii_uppercase


@pytest.mark.parametrize("text", ["hello", "Bacon", "steganography", "MYSECRET"])
def test_v1_round_trip_without_j_and_v(text: str) -> None:
    codec = CharCodec()
    assert "".join(codec.decode(codec.encode(text))) == text.upper()


def test_bool_and_char_alphabets_share_patterns() -> None:
    chars = CharCodec("a", "b").encode("My secret")
    bools = CharCodec(False, True).encode("My secret")
    assert bools == [c == "b" for c in chars]
    assert "".join(CharCodec(False, True).decode(bools)) == "MYSECRET"


def test_non_letters_are_dropped() -> None:
    codec = CharCodecV2()
    assert codec.encode("a1 !é") == codec.encode("a")
    assert codec.encode_elem("?") == []


def test_unknown_group_decodes_to_space() -> None:
    codec = CharCodec("a", "b")
    # bbbbb is not in the v1 table; "x" is neither element
    assert codec.decode("bbbbbaaxaa") == [" ", " "]


def test_incomplete_final_group_decodes_to_space() -> None:
    codec = CharCodec("a", "b")
    assert codec.decode("ababbbab") == ["M", " "]
    assert codec.decode([]) == []


def test_element_accessors() -> None:
    codec = CharCodecV2(0, 1)
    assert codec.a() == 0
    assert codec.b() == 1
    assert codec.is_a(0) and not codec.is_a(1)
    assert codec.is_b(1) and not codec.is_b(0)
    assert codec.encoded_group_size() == 5


def test_registry_holds_default_codecs() -> None:
    assert isinstance(bacon_cipher.CODEC_REGISTRY["v1"], CharCodec)
    assert isinstance(bacon_cipher.CODEC_REGISTRY["v2"], CharCodecV2)
    assert bacon_cipher.CODEC_REGISTRY["v1"].a() == "A"


def test_build_codec_with_symbols() -> None:
    codec = bacon_cipher.build_codec("v2", "x", "y")
    assert isinstance(codec, CharCodecV2)
    assert "".join(codec.encode("z")) == "yyxxy"
    assert bacon_cipher.build_codec("v1") is bacon_cipher.CODEC_REGISTRY["v1"]


def test_build_codec_unknown_name() -> None:
    with pytest.raises(bacon_cipher.CodecError, match="Unknown codec"):
        bacon_cipher.build_codec("v3")
