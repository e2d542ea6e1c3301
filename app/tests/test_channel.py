import pytest
from chip8.channel import ChannelDisconnected, Draw, Pause, duplex


def test_messages_flow_both_ways():
    host, scheduler = duplex()
    host.send(Pause())
    scheduler.send(Draw())
    assert scheduler.try_recv() == Pause()
    assert host.try_recv() == Draw()
    assert host.try_recv() is None


def test_drain_returns_all_pending():
    host, scheduler = duplex()
    for _ in range(3):
        scheduler.send(Draw())
    assert host.drain() == [Draw(), Draw(), Draw()]
    assert host.drain() == []


def test_disconnect_after_pending_messages_consumed():
    host, scheduler = duplex()
    host.send(Pause())
    host.close()
    assert scheduler.try_recv() == Pause()
    with pytest.raises(ChannelDisconnected):
        scheduler.try_recv()
    with pytest.raises(ChannelDisconnected):
        host.send(Pause())
