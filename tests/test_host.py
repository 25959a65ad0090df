from serviceweave.host import EventHost, Host


def test_event_host_satisfies_host_protocol(host: EventHost) -> None:
    assert isinstance(host, Host)


def test_fire_runs_callbacks_in_subscription_order(host: EventHost) -> None:
    calls: list[str] = []
    host.subscribe("init", lambda: calls.append("first"))
    host.subscribe("init", lambda: calls.append("second"))
    host.subscribe("other", lambda: calls.append("other"))

    host.fire("init")

    assert calls == ["first", "second"]


def test_has_fired(host: EventHost) -> None:
    assert not host.has_fired("init")

    host.fire("init")

    assert host.has_fired("init")


def test_event_is_marked_fired_before_callbacks_run(host: EventHost) -> None:
    seen: list[bool] = []
    host.subscribe("init", lambda: seen.append(host.has_fired("init")))

    host.fire("init")

    assert seen == [True]


def test_callbacks_subscribed_while_firing_wait_for_next_fire(host: EventHost) -> None:
    calls: list[str] = []

    def subscribe_more() -> None:
        calls.append("outer")
        host.subscribe("init", lambda: calls.append("inner"))

    host.subscribe("init", subscribe_more)

    host.fire("init")
    assert calls == ["outer"]

    host.fire("init")
    assert calls == ["outer", "outer", "inner"]


def test_apply_runs_filters_in_order(host: EventHost) -> None:
    host.add_filter("services", lambda services: {**services, "b": 2})
    host.add_filter("services", lambda services: {key: value * 10 for key, value in services.items()})

    assert host.apply("services", {"a": 1}) == {"a": 10, "b": 20}


def test_apply_without_filters_returns_value(host: EventHost) -> None:
    value = {"a": 1}

    assert host.apply("services", value) is value


def test_subscribers(host: EventHost) -> None:
    def callback() -> None:
        pass

    host.subscribe("init", callback)

    assert host.subscribers("init") == [callback]
    assert host.subscribers("other") == []
