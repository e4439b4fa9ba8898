from .cancellation import CancellationRegistry, CancellationToken


def test_token():
    token = CancellationToken()
    assert not token.is_requested()
    token.request()
    token.request()
    assert token.is_requested()


def test_registry_cancels_single_job():
    registry = CancellationRegistry()
    a = registry.create("a")
    b = registry.create("b")

    assert registry.request_cancel("a") is True
    assert a.is_requested()
    assert not b.is_requested()


def test_unknown_job():
    registry = CancellationRegistry()
    assert registry.request_cancel("missing") is False
    assert registry.get("missing") is None


def test_cancel_all_and_cleanup():
    registry = CancellationRegistry()
    tokens = [registry.create(job_id) for job_id in ("a", "b", "c")]
    registry.cleanup("c")

    assert sorted(registry.active_ids()) == ["a", "b"]
    assert registry.request_cancel_all() == 2
    assert [t.is_requested() for t in tokens] == [True, True, False]
