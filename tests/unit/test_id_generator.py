"""Tests for xp_common.id_generator, pagination and datetime_utils."""

from datetime import UTC, datetime, timezone

import pytest

from src.xp_common.datetime_utils import ensure_utc, month_start, utc_now
from src.xp_common.id_generator import SnowflakeIdGenerator, generate_id
from src.xp_common.pagination import cursor_decode, cursor_encode


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        assert isinstance(gen.next_id(), str)

    def test_prefix_and_fixed_width(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        result = gen.next_id("cv_")
        assert result.startswith("cv_")
        assert len(result) == len("cv_") + 19

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_lexically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = gen.next_id("tt_")
        for _ in range(100):
            current = gen.next_id("tt_")
            assert current > prev
            prev = current

    def test_invalid_machine_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_module_helper(self) -> None:
        assert generate_id("to_").startswith("to_")


class TestCursor:
    def test_decode_encoded(self) -> None:
        assert cursor_decode(cursor_encode("cv_0000000000000000042")) == "cv_0000000000000000042"

    def test_garbage_is_none(self) -> None:
        assert cursor_decode("not-a-cursor") is None

    def test_empty_is_none(self) -> None:
        assert cursor_decode(None) is None
        assert cursor_decode("") is None


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo == UTC

    def test_month_start(self) -> None:
        moment = datetime(2026, 3, 17, 15, 4, 5, tzinfo=UTC)
        assert month_start(moment) == datetime(2026, 3, 1, tzinfo=UTC)

    def test_ensure_utc_naive(self) -> None:
        assert ensure_utc(datetime(2026, 1, 1)).tzinfo == timezone.utc
