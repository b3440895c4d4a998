from datagrid.services.event_bus import EventBus, GridEvent


def test_subscribe_and_publish_order():
    bus = EventBus()
    order = []
    bus.subscribe(GridEvent.COLUMNS_CHANGED, lambda e: order.append(("h1", e.name)))
    bus.subscribe(GridEvent.COLUMNS_CHANGED, lambda e: order.append(("h2", e.name)))
    bus.publish(GridEvent.COLUMNS_CHANGED, {"reason": "toggle"})
    assert order == [
        ("h1", GridEvent.COLUMNS_CHANGED.value),
        ("h2", GridEvent.COLUMNS_CHANGED.value),
    ]


def test_once_subscription():
    bus = EventBus()
    calls = []
    bus.subscribe(GridEvent.REFRESH_REQUESTED, lambda e: calls.append(e.name), once=True)
    bus.publish(GridEvent.REFRESH_REQUESTED)
    bus.publish(GridEvent.REFRESH_REQUESTED)
    assert calls == [GridEvent.REFRESH_REQUESTED.value]
    assert bus.subscriber_count(GridEvent.REFRESH_REQUESTED) == 0


def test_unsubscribe():
    bus = EventBus()
    calls = []
    sub = bus.subscribe("custom", lambda e: calls.append(e.payload))
    bus.publish("custom", 1)
    bus.unsubscribe(sub)
    bus.publish("custom", 2)
    assert calls == [1]
    assert sub.active is False


def test_failing_handler_is_isolated():
    bus = EventBus()
    calls = []

    def boom(_):
        raise RuntimeError("handler failed")

    bus.subscribe(GridEvent.PAGE_CHANGED, boom)
    bus.subscribe(GridEvent.PAGE_CHANGED, lambda e: calls.append(e.payload))
    bus.publish(GridEvent.PAGE_CHANGED, 3)
    assert calls == [3]
    assert len(bus.errors) == 1
    assert isinstance(bus.errors[0][1], RuntimeError)


def test_separate_buses_do_not_share_subscribers():
    a, b = EventBus(), EventBus()
    calls = []
    a.subscribe(GridEvent.REFRESH_REQUESTED, lambda e: calls.append("a"))
    b.publish(GridEvent.REFRESH_REQUESTED)
    assert calls == []
