from __future__ import annotations

import pytest

from pyxrecord.exceptions import ContributionError, ListenerError
from pyxrecord.hooks.contributions import partial_record, query_rows
from pyxrecord.hooks.registry import Delivery, HookRegistry, handler_name
from pyxrecord.hooks.topics import RecordTopic
from pyxrecord.models.record import Record


def test_publish_calls_handlers_in_registration_order() -> None:
    hooks = HookRegistry()
    order: list[str] = []
    hooks.subscribe("t", lambda: order.append("a"))
    hooks.subscribe("t", lambda: order.append("b"))
    hooks.subscribe("other", lambda: order.append("x"))

    deliveries = hooks.publish("t")

    assert order == ["a", "b"]
    assert len(deliveries) == 2


def test_publish_passes_arguments_and_collects_results() -> None:
    hooks = HookRegistry()
    hooks.subscribe(RecordTopic.LOADED, lambda record_id: {"n": record_id * 2})

    (delivery,) = hooks.publish(RecordTopic.LOADED, 21)

    assert delivery.result == {"n": 42}
    assert not delivery.failed


def test_subscribing_twice_is_a_noop() -> None:
    hooks = HookRegistry()

    def handler() -> None:
        return None

    hooks.subscribe("t", handler)
    hooks.subscribe("t", handler)

    assert hooks.listeners("t") == (handler,)


def test_unsubscribe() -> None:
    hooks = HookRegistry()

    def handler() -> None:
        return None

    hooks.subscribe("t", handler)

    assert hooks.unsubscribe("t", handler) is True
    assert hooks.unsubscribe("t", handler) is False
    assert hooks.publish("t") == []


def test_on_decorator_registers_and_returns_handler() -> None:
    hooks = HookRegistry()

    @hooks.on(RecordTopic.QUERY)
    def handler(criteria: dict) -> list:
        return []

    assert hooks.listeners("record.query") == (handler,)
    assert handler({}) == []


def test_clear() -> None:
    hooks = HookRegistry()
    hooks.subscribe("a", lambda: None)
    hooks.subscribe("b", lambda: None)

    hooks.clear("a")
    assert hooks.listeners("a") == ()
    assert len(hooks.listeners("b")) == 1

    hooks.clear()
    assert hooks.listeners("b") == ()


def test_failing_handler_is_isolated_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    hooks = HookRegistry()

    def boom() -> None:
        raise RuntimeError("boom")

    hooks.subscribe("t", boom)
    hooks.subscribe("t", lambda: "after")

    with caplog.at_level("ERROR"):
        first, second = hooks.publish("t")

    assert first.failed
    assert isinstance(first.error, RuntimeError)
    assert second.result == "after"
    assert "boom" in caplog.text


def test_failing_handler_raises_without_isolation() -> None:
    hooks = HookRegistry()
    called: list[str] = []

    def boom() -> None:
        raise KeyError("missing")

    hooks.subscribe("t", boom)
    hooks.subscribe("t", lambda: called.append("later"))

    with pytest.raises(ListenerError) as excinfo:
        hooks.publish("t", isolate_errors=False)

    assert called == []
    assert excinfo.value.handler.endswith("boom")


def test_handler_can_unsubscribe_during_publish() -> None:
    hooks = HookRegistry()

    def once() -> str:
        hooks.unsubscribe("t", once)
        return "once"

    hooks.subscribe("t", once)

    assert [d.result for d in hooks.publish("t")] == ["once"]
    assert hooks.publish("t") == []


def test_handler_name_uses_qualname() -> None:
    def handler() -> None:
        return None

    assert handler_name(handler).endswith("test_handler_name_uses_qualname.<locals>.handler")


# ------------------------------------------------------------------
# Contribution validation
# ------------------------------------------------------------------


def _delivery(result: object) -> Delivery:
    return Delivery(handler=_delivery, result=result)


class TestPartialRecord:
    def test_none_and_empty_mean_no_change(self) -> None:
        assert partial_record(_delivery(None), RecordTopic.LOADED) is None
        assert partial_record(_delivery({}), RecordTopic.LOADED) is None

    def test_failed_delivery_contributes_nothing(self) -> None:
        delivery = Delivery(handler=_delivery, error=RuntimeError("x"))

        assert partial_record(delivery, RecordTopic.LOADED) is None

    def test_mapping_is_copied(self) -> None:
        source = {"title": "t"}

        partial = partial_record(_delivery(source), RecordTopic.LOADED)

        assert partial == source
        assert partial is not source

    def test_record_result_is_flattened(self) -> None:
        record = Record(id=1, type="post", data={"title": "t"})

        assert partial_record(_delivery(record), RecordTopic.UPDATED) == {"id": 1, "type": "post", "title": "t"}

    @pytest.mark.parametrize("result", [["a"], "text", 5, {1: "non-string key"}])
    def test_malformed_results_raise(self, result: object) -> None:
        with pytest.raises(ContributionError) as excinfo:
            partial_record(_delivery(result), RecordTopic.LOADED)
        assert excinfo.value.topic == "record.loaded"


class TestQueryRows:
    def test_none_is_no_rows(self) -> None:
        assert query_rows(_delivery(None), RecordTopic.QUERY) == []

    def test_iterables_of_rows(self) -> None:
        rows = query_rows(_delivery(({"id": 1}, {"id": 2, "a": 1})), RecordTopic.QUERY)

        assert rows == [{"id": 1}, {"id": 2, "a": 1}]

    def test_generator_rows(self) -> None:
        rows = query_rows(_delivery({"id": i} for i in range(3)), RecordTopic.QUERY)

        assert [row["id"] for row in rows] == [0, 1, 2]

    @pytest.mark.parametrize(
        "result",
        [
            [{"a": 1}],
            [{"id": "1"}],
            [{"id": True}],
            ["row"],
            42,
            "rows",
        ],
    )
    def test_malformed_rows_raise(self, result: object) -> None:
        with pytest.raises(ContributionError):
            query_rows(_delivery(result), RecordTopic.QUERY)
