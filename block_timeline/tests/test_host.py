from block_timeline.host import NullHostLink, QueuedHostLink


def test_queued_link_delivers_in_order_despite_sink_errors() -> None:
    delivered = []

    def sink(message, payload) -> None:
        if message == "bad":
            raise RuntimeError("sink failure")
        delivered.append((message, payload))

    link = QueuedHostLink(sink)
    link.notify("timelineReady", True)
    link.notify("bad", None)
    link.notify("setTimelineFrame", 3)
    link.close()
    assert delivered == [("timelineReady", True), ("setTimelineFrame", 3)]


def test_null_link_accepts_anything() -> None:
    NullHostLink().notify("initTimeline", [{"title": "a"}])
