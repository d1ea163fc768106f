from __future__ import annotations

from typing import Any, Dict, List

import pytest

from pyreducex import (
    Action,
    ActionTypes,
    InvalidActionError,
    InvalidArgumentError,
    ReducerManager,
    ReentrantDispatchError,
    Store,
    action_type,
    combine_reducers,
    create_action,
    create_reducer,
    create_store,
    on,
)

from .sample_reducers import counter, todos

INC = {"type": "INC"}


def test_constructor_runs_initial_dispatch() -> None:
    seen: List[Any] = []

    def reducer(state: Any = None, action: Any = None) -> Any:
        seen.append(action_type(action))
        return "ready"

    store = create_store(reducer)

    assert seen == [ActionTypes.INIT]
    assert store.get_state() == "ready"
    assert store.state == "ready"


def test_preloaded_state_reaches_reducer() -> None:
    store = create_store(counter, 10)
    store.dispatch(INC)

    assert store.get_state() == 11


def test_dispatch_returns_the_action() -> None:
    store = create_store(counter)
    action = Action("INC")

    assert store.dispatch(action) is action
    assert store.get_state() == 1


def test_create_reducer_handlers() -> None:
    increment_by = create_action("[Counter] IncrementBy", lambda amount: amount)
    reducer = create_reducer(
        {"count": 0},
        on(increment_by, lambda state, action: {**state, "count": state["count"] + action.payload}),
    )
    store = create_store(reducer)

    store.dispatch(increment_by(5))
    store.dispatch(Action("[Counter] Unknown"))

    assert store.get_state() == {"count": 5}


def test_get_state_reflects_each_completed_dispatch() -> None:
    store = create_store(counter)
    observed: List[int] = []
    store.subscribe(lambda: observed.append(store.get_state()))

    for _ in range(3):
        store.dispatch(INC)

    assert observed == [1, 2, 3]


@pytest.mark.parametrize("action", ["INC", 3, None, lambda: None, {"payload": 1}, {"type": None}, Action(None)])
def test_invalid_actions_are_rejected(action: Any) -> None:
    store = create_store(counter)

    with pytest.raises(InvalidActionError):
        store.dispatch(action)
    assert store.get_state() == 0


def test_rejects_non_callable_arguments() -> None:
    with pytest.raises(InvalidArgumentError):
        create_store("not a reducer")

    store = create_store(counter)
    with pytest.raises(InvalidArgumentError):
        store.subscribe(None)
    with pytest.raises(InvalidArgumentError):
        store.replace_reducer({"count": counter})
    with pytest.raises(InvalidArgumentError):
        create_store(counter, None, "not an enhancer")


def test_reducer_may_not_dispatch() -> None:
    holder: Dict[str, Store] = {}
    errors: List[Exception] = []

    def reducer(state: Any = None, action: Any = None) -> Any:
        if state is None:
            state = 0
        if action_type(action) == "NESTED":
            try:
                holder["store"].dispatch(INC)
            except ReentrantDispatchError as err:
                errors.append(err)
            return state + 1
        return state

    store = create_store(reducer)
    holder["store"] = store
    store.dispatch({"type": "NESTED"})

    assert len(errors) == 1
    assert errors[0].details["action_type"] == "INC"
    assert store.get_state() == 1


def test_failing_reducer_does_not_wedge_the_store() -> None:
    def reducer(state: Any = None, action: Any = None) -> Any:
        if action_type(action) == "BOOM":
            raise ValueError("boom")
        return counter(state, action)

    store = create_store(reducer)
    notified: List[int] = []
    store.subscribe(lambda: notified.append(store.get_state()))

    with pytest.raises(ValueError):
        store.dispatch({"type": "BOOM"})
    store.dispatch(INC)

    assert store.get_state() == 1
    assert notified == [1]


def test_listener_subscribed_during_notification_fires_next_time() -> None:
    store = create_store(counter)
    calls: List[str] = []

    def late() -> None:
        calls.append("late")

    def early() -> None:
        calls.append("early")
        if len(calls) == 1:
            store.subscribe(late)

    store.subscribe(early)
    store.dispatch(INC)
    assert calls == ["early"]

    store.dispatch(INC)
    assert calls == ["early", "early", "late"]


def test_unsubscribe_during_notification_affects_only_later_dispatches() -> None:
    store = create_store(counter)
    calls: List[str] = []
    unsubscribers: Dict[str, Any] = {}

    def first() -> None:
        calls.append("first")
        unsubscribers["second"]()

    def second() -> None:
        calls.append("second")

    store.subscribe(first)
    unsubscribers["second"] = store.subscribe(second)

    store.dispatch(INC)
    store.dispatch(INC)

    assert calls == ["first", "second", "first"]


def test_unsubscribe_is_idempotent() -> None:
    store = create_store(counter)
    calls: List[str] = []

    unsubscribe_a = store.subscribe(lambda: calls.append("a"))
    store.subscribe(lambda: calls.append("b"))

    unsubscribe_a()
    unsubscribe_a()
    store.dispatch(INC)

    assert calls == ["b"]


def test_listeners_run_in_registration_order() -> None:
    store = create_store(counter)
    calls: List[int] = []
    for index in range(4):
        store.subscribe(lambda index=index: calls.append(index))

    store.dispatch(INC)

    assert calls == [0, 1, 2, 3]


def test_listener_may_dispatch() -> None:
    store = create_store(counter)

    def top_up() -> None:
        if store.get_state() < 3:
            store.dispatch(INC)

    store.subscribe(top_up)
    store.dispatch(INC)

    assert store.get_state() == 3


def test_listeners_are_notified_even_when_state_is_unchanged() -> None:
    store = create_store(counter)
    calls: List[int] = []
    store.subscribe(lambda: calls.append(store.get_state()))

    store.dispatch({"type": "NOTHING"})

    assert calls == [0]


def test_replace_reducer_initialises_new_branches() -> None:
    store = create_store(combine_reducers({"count": counter}))
    store.dispatch(INC)
    notified: List[Any] = []
    store.subscribe(lambda: notified.append(store.get_state()))

    store.replace_reducer(combine_reducers({"count": counter, "todos": todos}))

    assert store.get_state() == {"count": 1, "todos": ()}
    assert notified == [{"count": 1, "todos": ()}]


def test_replace_reducer_runs_new_reducer_immediately() -> None:
    store = create_store(counter)

    store.replace_reducer(lambda state=None, action=None: f"{action_type(action)}:{state}")

    assert store.get_state() == f"{ActionTypes.INIT}:0"


def test_enhancer_can_be_passed_as_second_argument() -> None:
    received: List[Any] = []

    def enhancer(next_create_store):
        def create(reducer, preloaded_state=None):
            received.append(preloaded_state)
            return next_create_store(reducer, preloaded_state)
        return create

    store = create_store(counter, enhancer)

    assert received == [None]
    assert isinstance(store, Store)
    assert store.get_state() == 0


def test_enhancer_receives_preloaded_state() -> None:
    received: List[Any] = []

    def enhancer(next_create_store):
        def create(reducer, preloaded_state=None):
            received.append(preloaded_state)
            return next_create_store(reducer, preloaded_state)
        return create

    store = create_store(counter, 5, enhancer)

    assert received == [5]
    assert store.get_state() == 5


def test_observable_pushes_current_and_future_states() -> None:
    store = create_store(counter)
    values: List[int] = []

    subscription = store.observable().subscribe(on_next=values.append)
    store.dispatch(INC)
    subscription.dispose()
    store.dispatch(INC)

    assert values == [0, 1]


def test_select_emits_only_changes() -> None:
    store = create_store(combine_reducers({"count": counter, "todos": todos}))
    counts: List[int] = []

    store.select(lambda state: state["count"]).subscribe(on_next=counts.append)
    store.dispatch({"type": "ADD_TODO", "text": "a"})
    store.dispatch(INC)

    assert counts == [0, 1]


def test_select_compares_selected_values_by_identity() -> None:
    def snapshots(state: Any = None, action: Any = None) -> Any:
        if state is None:
            return [1]
        if action_type(action) == "COPY":
            return list(state)
        return state

    store = create_store(snapshots)
    values: List[Any] = []

    store.select(lambda state: state).subscribe(on_next=values.append)
    store.dispatch({"type": "COPY"})
    store.dispatch({"type": "NOOP"})

    assert len(values) == 2
    assert values[0] == values[1]
    assert values[0] is not values[1]


def test_register_and_unregister_feature() -> None:
    store = create_store(ReducerManager({"count": counter}))

    store.register_feature("todos", todos)
    assert store.get_state() == {"count": 0, "todos": ()}

    store.dispatch({"type": "ADD_TODO", "text": "ship"})
    store.unregister_feature("todos")
    assert store.get_state() == {"count": 0}

    store.dispatch({"type": "ADD_TODO", "text": "ignored"})
    assert store.get_state() == {"count": 0}


def test_register_feature_requires_reducer_manager() -> None:
    store = create_store(combine_reducers({"count": counter}))

    with pytest.raises(InvalidArgumentError):
        store.register_feature("todos", todos)


def test_subscripting_reducer_handles_internal_actions() -> None:
    def reducer(state: Any = None, action: Any = None) -> Any:
        if state is None:
            state = 0
        return state + 1 if action["type"] == "INC" else state

    store = create_store(reducer)
    store.dispatch(INC)
    store.replace_reducer(reducer)

    assert store.get_state() == 1
