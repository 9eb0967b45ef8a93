import pytest

from annotrack.core.barrier import JoinBarrier


def test_no_tokens_completes_immediately():
    barrier = JoinBarrier()
    calls = []
    barrier.on_complete(lambda: calls.append("done"))
    assert calls == ["done"]


def test_completes_once_after_last_token_in_any_order():
    barrier = JoinBarrier()
    tokens = [barrier.register() for _ in range(3)]
    calls = []
    barrier.on_complete(lambda: calls.append("done"))

    tokens[2]()
    tokens[0]()
    assert calls == []
    assert barrier.waiting == 1

    tokens[1]()
    assert calls == ["done"]
    assert barrier.waiting == 0


def test_tokens_fired_before_on_complete_are_counted():
    barrier = JoinBarrier()
    first = barrier.register()
    second = barrier.register()
    first()
    second()
    calls = []
    barrier.on_complete(lambda: calls.append("done"))
    assert calls == ["done"]


def test_token_fired_twice_raises():
    barrier = JoinBarrier()
    token = barrier.register()
    barrier.register()
    token()
    with pytest.raises(RuntimeError):
        token()
    assert barrier.waiting == 1
