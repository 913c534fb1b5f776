"""Property-based tests using Hypothesis.

Covers invariants for glob matching, path rewriting, record normalisation,
duration parsing and request signatures.
"""

from __future__ import annotations

import string

from hypothesis import assume, given
from hypothesis import strategies as st

from drone_vault.core.config.loader import parse_duration
from drone_vault.core.secrets.base import normalize_record
from drone_vault.core.secrets.match import glob_match, matches, split_patterns
from drone_vault.core.secrets.paths import rewrite_path
from drone_vault.runner.signature import sign, verify

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

_segment = st.text(alphabet=string.ascii_letters + string.digits + "-_.", min_size=1, max_size=12).filter(
    lambda s: s not in (".", "..")
)
_path = st.lists(_segment, min_size=1, max_size=4).map("/".join)
_literal = st.text(alphabet=string.ascii_letters + string.digits + "-_/.", max_size=20)


def _v2_mount(mount: str) -> dict:
    return {"data": {"path": mount + "/", "options": {"version": "2"}}}


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


class TestMatchProperties:
    @given(_literal)
    def test_literal_matches_itself(self, name: str) -> None:
        assert glob_match(name, name)

    @given(_literal, _literal)
    def test_case_insensitive(self, pattern: str, name: str) -> None:
        assert matches(name, [pattern]) == matches(name.upper(), [pattern.swapcase()])

    @given(_literal)
    def test_empty_filter_allows(self, name: str) -> None:
        assert matches(name, [])

    @given(st.text(alphabet=string.ascii_letters + string.digits + "-_.", max_size=20))
    def test_star_matches_any_segment(self, name: str) -> None:
        assert glob_match("*", name)

    @given(_segment, _segment)
    def test_star_never_crosses_separator(self, left: str, right: str) -> None:
        assert not glob_match("*", f"{left}/{right}")

    @given(st.lists(_segment, max_size=5))
    def test_split_round_trip(self, parts: list[str]) -> None:
        assert split_patterns(", ".join(parts)) == parts


# ---------------------------------------------------------------------------
# Path rewriting
# ---------------------------------------------------------------------------


class TestRewriteProperties:
    @given(_path, _path)
    def test_v2_rewrite_is_idempotent(self, mount: str, rest: str) -> None:
        response = _v2_mount(mount)
        is_v2, once = rewrite_path(response, f"{mount}/{rest}")
        assert is_v2
        assert rewrite_path(response, once) == (True, once)

    @given(_path, _path)
    def test_v2_rewrite_inserts_data_after_mount(self, mount: str, rest: str) -> None:
        assume(rest != "data" and not rest.startswith("data/"))
        _, rewritten = rewrite_path(_v2_mount(mount), f"{mount}/{rest}")
        assert rewritten == f"{mount}/data/{rest}"

    @given(_path, st.booleans())
    def test_result_has_no_trailing_slash(self, path: str, slash: bool) -> None:
        original = path + "/" if slash else path
        _, rewritten = rewrite_path({"data": {"path": "x/", "options": {"version": "1"}}}, original)
        assert not rewritten.endswith("/")


# ---------------------------------------------------------------------------
# Records, durations and signatures
# ---------------------------------------------------------------------------


class TestMiscProperties:
    @given(
        st.dictionaries(
            st.text(max_size=8),
            st.one_of(st.none(), st.booleans(), st.integers(), st.text(), st.lists(st.integers())),
        )
    )
    def test_normalized_values_are_strings(self, data: dict) -> None:
        record = normalize_record(data)
        assert all(isinstance(v, str) for v in record.values())
        assert set(record) <= set(data)

    @given(st.integers(min_value=0, max_value=10**6))
    def test_duration_seconds(self, seconds: int) -> None:
        assert parse_duration(str(seconds)) == seconds
        assert parse_duration(f"{seconds}s") == seconds

    @given(st.integers(min_value=0, max_value=1000), st.integers(min_value=0, max_value=59))
    def test_duration_hours_minutes(self, hours: int, minutes: int) -> None:
        assert parse_duration(f"{hours}h{minutes}m") == hours * 3600 + minutes * 60

    @given(st.binary(max_size=256), st.text(min_size=1, max_size=32))
    def test_signed_requests_verify(self, body: bytes, secret: str) -> None:
        headers = sign(secret, "POST", "/", body)
        assert verify(secret, "POST", "/", headers, body).algorithm == "hmac-sha256"
