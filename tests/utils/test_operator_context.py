"""Tests for utils/operator_context.py - operator identity propagation via contextvars."""

from utils.operator_context import (
    get_current_operator,
    set_current_operator,
    clear_current_operator,
    operator_context,
)


class TestGetCurrentOperator:
    """Tests for get_current_operator()."""

    def test_none_without_set(self):
        """Anonymous callers are allowed; identity is simply absent."""
        assert get_current_operator() is None


class TestSetAndClear:
    """Tests for set_current_operator() and clear_current_operator()."""

    def test_set_then_get(self):
        set_current_operator("gate-1")
        assert get_current_operator() == "gate-1"

    def test_clear_then_get(self):
        set_current_operator("gate-1")
        clear_current_operator()
        assert get_current_operator() is None


class TestOperatorContextManager:
    """Tests for operator_context() context manager."""

    def test_sets_and_clears(self):
        with operator_context("gate-1"):
            assert get_current_operator() == "gate-1"
        assert get_current_operator() is None

    def test_nested_restores_outer(self):
        with operator_context("gate-1"):
            with operator_context("supervisor"):
                assert get_current_operator() == "supervisor"
            assert get_current_operator() == "gate-1"

    def test_restores_after_exception(self):
        try:
            with operator_context("gate-1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_current_operator() is None
