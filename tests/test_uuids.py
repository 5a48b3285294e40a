import io

import pytest

from threemf.uuids import InvalidUUIDError, new, set_rand, validate


@pytest.fixture(autouse=True)
def _restore_random_source():
    yield
    set_rand(None)


VALID = [
    "f47ac10b-58cc-0372-8567-0e02b2c3d479",
    "f47ac10b-58cc-1372-8567-0e02b2c3d479",
    "f47ac10b-58cc-2372-8567-0e02b2c3d479",
    "f47ac10b-58cc-3372-8567-0e02b2c3d479",
    "f47ac10b-58cc-4372-8567-0e02b2c3d479",
    "f47ac10b-58cc-5372-8567-0e02b2c3d479",
    "f47ac10b-58cc-6372-8567-0e02b2c3d479",
    "f47ac10b-58cc-7372-8567-0e02b2c3d479",
    "f47ac10b-58cc-8372-8567-0e02b2c3d479",
    "f47ac10b-58cc-9372-8567-0e02b2c3d479",
    "f47ac10b-58cc-a372-8567-0e02b2c3d479",
    "f47ac10b-58cc-b372-8567-0e02b2c3d479",
    "f47ac10b-58cc-c372-8567-0e02b2c3d479",
    "f47ac10b-58cc-d372-8567-0e02b2c3d479",
    "f47ac10b-58cc-e372-8567-0e02b2c3d479",
    "f47ac10b-58cc-f372-8567-0e02b2c3d479",
    "urn:uuid:f47ac10b-58cc-4372-0567-0e02b2c3d479",
    "URN:UUID:f47ac10b-58cc-4372-0567-0e02b2c3d479",
    "f47ac10b-58cc-4372-0567-0e02b2c3d479",
    "f47ac10b-58cc-4372-1567-0e02b2c3d479",
    "f47ac10b-58cc-4372-2567-0e02b2c3d479",
    "f47ac10b-58cc-4372-3567-0e02b2c3d479",
    "f47ac10b-58cc-4372-4567-0e02b2c3d479",
    "f47ac10b-58cc-4372-5567-0e02b2c3d479",
    "f47ac10b-58cc-4372-6567-0e02b2c3d479",
    "f47ac10b-58cc-4372-7567-0e02b2c3d479",
    "f47ac10b-58cc-4372-8567-0e02b2c3d479",
    "f47ac10b-58cc-4372-9567-0e02b2c3d479",
    "f47ac10b-58cc-4372-a567-0e02b2c3d479",
    "f47ac10b-58cc-4372-b567-0e02b2c3d479",
    "f47ac10b-58cc-4372-c567-0e02b2c3d479",
    "f47ac10b-58cc-4372-d567-0e02b2c3d479",
    "f47ac10b-58cc-4372-e567-0e02b2c3d479",
    "f47ac10b-58cc-4372-f567-0e02b2c3d479",
    "{f47ac10b-58cc-0372-8567-0e02b2c3d479}",
    "f47ac10b58cc037285670e02b2c3d479",
]

INVALID = [
    "UR1:UUID:f47ac10b-58cc-4372-0567-0e02b2c3d479",
    "f47ac10b158cc-5372-a567-0e02b2c3d479",
    "f47ac10b-58cc25372-a567-0e02b2c3d479",
    "f47ac10b-58cc-53723a567-0e02b2c3d479",
    "f47ac10b-58cc-5372-a56740e02b2c3d479",
    "f47ac10b-58cc-5372-a567-0e02-2c3d479",
    "g47ac10b-58cc-4372-a567-0e02b2c3d479",
    "{f47ac10b-58cc-0372-8567-0e02b2c3d479",
    "f47ac10b-58cc-0372-8567-0e02b2c3d479}",
    "f47ac10b58cc037285670e02b2c3d47Z",
    "f47ac10b58cc037285670e02b2c3d4790",
    "f47ac10b58cc037285670e02b2c3d47",
]


@pytest.mark.parametrize("text", VALID)
def test_validate_accepts(text):
    assert validate(text) is None


@pytest.mark.parametrize("text", INVALID)
def test_validate_rejects(text):
    with pytest.raises(InvalidUUIDError):
        validate(text)


def test_invalid_error_is_value_error():
    with pytest.raises(ValueError):
        validate("")


def test_length_error_mentions_length():
    with pytest.raises(InvalidUUIDError, match="31"):
        validate("f47ac10b58cc037285670e02b2c3d47")


def test_new_is_unique_and_valid():
    seen = set()
    for _ in range(31):
        value = new()
        assert value not in seen
        seen.add(value)
        assert validate(value) is None
        assert len(value) == 36


def test_new_sets_version_and_variant():
    for _ in range(20):
        value = new()
        assert value[14] == "4"
        assert value[19] in "89ab"


def test_set_rand_deterministic():
    set_rand(io.BytesIO(bytes(range(16))))
    assert new() == "00010203-0405-4607-8809-0a0b0c0d0e0f"


def test_set_rand_short_source_raises():
    set_rand(io.BytesIO(b"\x01\x02"))
    with pytest.raises(EOFError):
        new()


def test_set_rand_none_restores_default():
    set_rand(io.BytesIO(b""))
    set_rand(None)
    first = new()
    second = new()
    assert validate(first) is None
    assert validate(second) is None
    assert first != second