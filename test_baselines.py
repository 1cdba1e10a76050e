"""
Tests des routeurs de référence (Spray-and-Wait binaire et PRoPHET).
"""

import functools

import pytest

from protocols.errors import ProtocolMismatchError
from protocols.prophet import ProphetRouter
from protocols.spray_and_wait import SprayAndWaitRouter


@pytest.fixture
def spray_host(make_host):
    return functools.partial(make_host, router_cls=SprayAndWaitRouter,
                             namespace='SprayAndWaitRouter')


@pytest.fixture
def prophet_host(make_host):
    return functools.partial(make_host, router_cls=ProphetRouter, namespace='ProphetRouter')


class TestSprayAndWait:

    def test_first_contact_halves_copies(self, spray_host, make_world, make_message):
        a, b, d = spray_host(0, x=0.0), spray_host(1, x=10.0), spray_host(9, x=500.0)
        world = make_world([a, b, d])
        a.create_new_message(make_message('M1', a, d))

        for _ in range(4):
            world.step()

        assert a.router.replicas.copies(a.router.get_message('M1')) == 4
        assert b.router.replicas.copies(b.router.get_message('M1')) == 4

    def test_wait_phase_only_delivers(self, spray_host, make_world, make_message, router_config):
        router_config['SprayAndWaitRouter']['nrofCopies'] = 1
        a, b, d = spray_host(0, x=0.0), spray_host(1, x=10.0), spray_host(9, x=500.0)
        world = make_world([a, b, d])
        a.create_new_message(make_message('M1', a, d))

        for _ in range(4):
            world.step()

        assert not b.router.has_message('M1')


class TestProphet:

    def test_forwards_to_better_carrier(self, prophet_host, make_world, make_message):
        a, b, d = prophet_host(0), prophet_host(1, x=10.0), prophet_host(9, x=500.0)
        world = make_world([a, b, d])
        world.disconnect(world.connect(b, d))
        world.connect(a, b)
        assert b.router.store.get(d) > a.router.store.get(d)

        a.create_new_message(make_message('M1', a, d))
        a.router.update()
        assert 'M1' in b.router.incoming

    def test_keeps_message_from_worse_carrier(self, prophet_host, make_world, make_message):
        a, b, d = prophet_host(0), prophet_host(1, x=10.0), prophet_host(9, x=500.0)
        world = make_world([a, b, d])
        world.disconnect(world.connect(b, d))
        world.connect(a, b)

        b.create_new_message(make_message('M1', b, d))
        b.router.update()
        assert 'M1' not in a.router.incoming

    def test_protocol_mismatch(self, prophet_host, make_host, make_world):
        a, b = prophet_host(0), make_host(1)
        world = make_world([a, b])
        with pytest.raises(ProtocolMismatchError):
            world.connect(a, b)
