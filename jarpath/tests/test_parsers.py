import pytest

from jarpath.utils.java_version import parse_java_version
from jarpath.utils.quoting import quoted_string_to_list


@pytest.mark.parametrize(
    "version, expected",
    [
        ("11", 11),
        ("17", 17),
        ("1.8", 8),
        ("1.8.0_292", 8),
        ("11.0.2", 11),
        ("21-ea", 21),
        ("21+35", 21),
        ("17.0.9 (Eclipse Adoptium)", 17),
        ("", 0),
        (None, 0),
        ("unknown", 0),
    ],
)
def test_parse_java_version(version, expected) -> None:
    assert parse_java_version(version) == expected


def test_quoted_options_survive_as_single_tokens() -> None:
    assert quoted_string_to_list('-Xmx512m "-Dfoo=a b"') == ["-Xmx512m", "-Dfoo=a b"]
    assert quoted_string_to_list("-Da='x y' -ea") == ["-Da=x y", "-ea"]


def test_empty_option_string_is_empty_list() -> None:
    assert quoted_string_to_list("") == []
    assert quoted_string_to_list(None) == []
    assert quoted_string_to_list("   ") == []


def test_unbalanced_quotes_raise() -> None:
    with pytest.raises(ValueError):
        quoted_string_to_list('"-Dfoo=bar')


def test_backslashes_are_kept_literally() -> None:
    assert quoted_string_to_list(r"-Djava.library.path=C:\libs -ea") == [r"-Djava.library.path=C:\libs", "-ea"]
    assert quoted_string_to_list(r'"-Dhome=C:\Program Files\app"') == [r"-Dhome=C:\Program Files\app"]


def test_hash_is_not_a_comment() -> None:
    assert quoted_string_to_list("-Dcolor=#fff -ea") == ["-Dcolor=#fff", "-ea"]
