"""Tests for correlation ID generation and context management."""

import re
from concurrent.futures import ThreadPoolExecutor

from core.correlation import (
    accept_or_generate,
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_returns_8_hex_characters(self) -> None:
        correlation_id = generate_correlation_id()
        assert re.match(r"^[0-9a-f]{8}$", correlation_id)

    def test_generates_unique_ids(self) -> None:
        ids = {generate_correlation_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_set_and_get_correlation_id(self) -> None:
        set_correlation_id("abc12345")
        assert get_correlation_id() == "abc12345"

    def test_get_returns_empty_string_when_not_set(self) -> None:
        correlation_id_var.set("")
        assert get_correlation_id() == ""

    def test_worker_thread_does_not_leak_into_caller(self) -> None:
        set_correlation_id("mainthread")

        def worker() -> str:
            set_correlation_id("worker01")
            return get_correlation_id()

        with ThreadPoolExecutor(max_workers=1) as executor:
            seen = executor.submit(worker).result()

        assert seen == "worker01"
        assert get_correlation_id() == "mainthread"


class TestAcceptOrGenerate:
    """Tests for reuse of client supplied correlation IDs."""

    def test_reuses_well_formed_id(self) -> None:
        assert accept_or_generate("frontend-1234") == "frontend-1234"

    def test_generates_when_missing(self) -> None:
        assert re.match(r"^[0-9a-f]{8}$", accept_or_generate(None))

    def test_rejects_short_id(self) -> None:
        assert accept_or_generate("abc") != "abc"

    def test_rejects_unsafe_characters(self) -> None:
        value = "bad id\nInjected: header"
        result = accept_or_generate(value)
        assert result != value
        assert re.match(r"^[0-9a-f]{8}$", result)
