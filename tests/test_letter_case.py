import pytest

from bacon_cipher import (
    STEGANOGRAPHER_REGISTRY,
    CharCodec,
    CharCodecV2,
    LetterCaseSteganographer,
    SteganographerError,
)

PUBLIC = "This is a public message that contains a secret one"
DISGUISED = "tHiS IS a PUbLic mEssAge thaT cOntains A seCreT one"


def test_disguise_a_secret() -> None:
    s = LetterCaseSteganographer()
    assert s.disguise("My secret", PUBLIC, CharCodec("a", "b")) == DISGUISED


def test_reveal_a_secret() -> None:
    s = LetterCaseSteganographer()
    assert s.reveal(DISGUISED, CharCodec("a", "b")).startswith("MYSECRET")


def test_reveal_with_fresh_codec_of_other_type() -> None:
    # Only the case matters on reveal, not the codec's elements
    s = LetterCaseSteganographer()
    assert s.reveal(DISGUISED, CharCodec(False, True)).startswith("MYSECRET")


@pytest.mark.parametrize("codec", [CharCodec(), CharCodecV2(), CharCodecV2(0, 1)])
def test_round_trip(codec) -> None:
    s = LetterCaseSteganographer()
    public = "The quick brown fox jumps over the lazy dog while a cat naps in the sun " * 2
    disguised = s.disguise("hide me", public, codec)
    assert disguised.lower() == public.lower()
    assert s.reveal(disguised, codec).startswith("HIDEME")


def test_non_alphabetic_public_characters_pass_through() -> None:
    s = LetterCaseSteganographer()
    disguised = s.disguise("a", "1, 2: abcde!", CharCodec())
    assert disguised == "1, 2: abcde!"


def test_disguise_fails_because_of_public_message_length() -> None:
    s = LetterCaseSteganographer()
    with pytest.raises(SteganographerError, match="at least 40 .* have 8"):
        s.disguise("My secret", "My secret", CharCodec("a", "b"))


def test_disguise_fails_because_of_no_alphabetic_secret() -> None:
    s = LetterCaseSteganographer()
    with pytest.raises(SteganographerError, match="only alphabetic"):
        s.disguise("My1secret", PUBLIC, CharCodec("a", "b"))


def test_capacity() -> None:
    s = LetterCaseSteganographer()
    assert s.capacity(PUBLIC, CharCodec()) == 8
    assert s.capacity("", CharCodec()) == 0


def test_registered_as_case() -> None:
    assert STEGANOGRAPHER_REGISTRY["case"] is LetterCaseSteganographer
