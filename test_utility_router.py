"""
Tests du routeur à utilité sur de petits mondes construits à la main.
"""

import pytest

from models.message import Message
from protocols.errors import MissingCopiesError, ProtocolMismatchError
from protocols.spray_and_wait import SprayAndWaitRouter
from simulation.metrics import MessageStatsReport


def copies_at(host, msg_id):
    return host.router.replicas.copies(host.router.get_message(msg_id))


class TestEncounters:
    """Mise à jour des probabilités à l'établissement des connexions"""

    def test_encounter_scenario(self, clock, make_host, make_world):
        a = make_host(0, energy=100.0)
        b = make_host(1, x=10.0, energy=50.0)
        world = make_world([a, b])

        con = world.connect(a, b)
        assert a.router.get_pred_for(b) == pytest.approx(0.75)
        assert b.router.get_pred_for(a) == pytest.approx(0.75)

        clock.set_time(900)
        world.disconnect(con)
        assert a.router.get_pred_for(b) == pytest.approx(0.75)
        world.connect(a, b)
        assert a.router.get_pred_for(b) == pytest.approx(0.84375)

    def test_transitive_update_on_connection(self, make_host, make_world):
        a, b, c = make_host(0), make_host(1), make_host(2)
        world = make_world([a, b, c])
        world.connect(b, c)
        world.connect(a, b)
        assert a.router.get_pred_for(c) == pytest.approx(0.75 * 0.75 * 0.25)

    def test_protocol_mismatch_is_fatal(self, make_host, make_world):
        a = make_host(0)
        b = make_host(1, router_cls=SprayAndWaitRouter, namespace='SprayAndWaitRouter')
        world = make_world([a, b])
        with pytest.raises(ProtocolMismatchError):
            world.connect(a, b)


class TestCandidates:
    """Filtrage des couples (message, connexion)"""

    @pytest.fixture
    def pair(self, make_host, make_world, make_message):
        a = make_host(0, energy=100.0)
        b = make_host(1, x=10.0, energy=100.0)
        d = make_host(9, x=500.0)
        world = make_world([a, b, d])
        world.connect(a, b)
        message = make_message('M1', a, d)
        a.create_new_message(message)
        return a, b, d, world, message

    def test_equal_energy_peer_is_candidate(self, pair):
        a, b, d, world, message = pair
        candidates = a.router.collect_candidates([message], a.connections)
        assert [c.message for c in candidates] == [message]
        assert a.router.snapshot.get(b, 'M1') == pytest.approx(0.75)

    def test_weaker_peer_needs_mobility_credit(self, pair):
        a, b, d, world, message = pair
        b.energy = 50.0
        assert a.router.collect_candidates([message], a.connections) == []

        # b connaît la destination: 0.1 + 0.55 + 0.25 * 0.75
        world.connect(b, d)
        candidates = a.router.collect_candidates([message], a.connections)
        assert len(candidates) == 1
        assert a.router.snapshot.get(b, 'M1') == pytest.approx(0.8375)

    @pytest.mark.parametrize("condition", [
        "has_message", "blacklisted", "too_big", "no_energy", "transferring"
    ])
    def test_filters(self, pair, monkeypatch, condition):
        a, b, d, world, message = pair
        if condition == "has_message":
            b.router.add_to_messages(message.replicate(b, 0.0), False)
        elif condition == "blacklisted":
            b.router.blacklist.add(message.id)
        elif condition == "too_big":
            b.router.buffer_size = message.size - 1
        elif condition == "no_energy":
            b.energy = 0.0
        elif condition == "transferring":
            monkeypatch.setattr(b.router, 'is_transferring', lambda: True)
        assert a.router.collect_candidates([message], a.connections) == []

    def test_redundant_peer_is_skipped(self, make_host, make_world, make_message):
        a, b = make_host(0), make_host(1)
        others = [make_host(i) for i in (2, 3, 4)]
        d = make_host(9)
        world = make_world([a, b, d] + others)
        world.connect(a, b)
        for c in others:
            world.connect(a, c)
            world.connect(b, c)
        message = make_message('M1', a, d)
        a.create_new_message(message)

        assert a.router.check_overlap(a.router.peer(b)) == pytest.approx(0.75)
        assert a.router.collect_candidates([message], a.connections) == []

    def test_missing_copies_property_is_fatal(self, make_host, make_message):
        a, d = make_host(0), make_host(9)
        a.router.add_to_messages(make_message('M1', a, d), False)
        with pytest.raises(MissingCopiesError):
            a.router.get_messages_with_copies_left()


class TestRanking:
    """Classement GRTRMax des candidats"""

    def test_each_candidate_uses_its_own_connection(self, make_host, make_world, make_message):
        a, b, c = make_host(0), make_host(1, x=10.0), make_host(2, x=-10.0)
        d = make_host(9, x=500.0)
        world = make_world([a, b, c, d])
        world.connect(b, d)
        con_ab = world.connect(a, b)
        con_ac = world.connect(a, c)
        message = make_message('M1', a, d)
        a.create_new_message(message)

        candidates = a.router.collect_candidates([message], a.connections)
        assert len(candidates) == 2
        for order in (candidates, candidates[::-1]):
            ranked = a.router.rank_candidates(order)
            assert [cand.connection for cand in ranked] == [con_ab, con_ac]

    def test_ties_follow_queue_mode(self, make_host, make_world, make_message):
        a, b, d = make_host(0), make_host(1, x=10.0), make_host(9, x=500.0)
        world = make_world([a, b, d])
        world.connect(a, b)
        big = make_message('M1', a, d, size=200)
        small = make_message('M2', a, d, size=100)
        a.create_new_message(big)
        a.create_new_message(small)
        big.receive_time, small.receive_time = 1.0, 5.0

        candidates = a.router.collect_candidates([big, small], a.connections)
        assert [cand.message for cand in a.router.rank_candidates(candidates)] == [big, small]

        a.router.send_queue_mode = 'size'
        assert [cand.message for cand in a.router.rank_candidates(candidates)] == [small, big]


class TestForwarding:
    """Pas de simulation complets: spray, livraison directe, éviction"""

    def test_binary_spray_over_two_hops(self, make_host, make_world, make_message):
        a, b, c = make_host(0, x=0.0), make_host(1, x=10.0), make_host(2, x=20.0)
        d = make_host(3, x=500.0)
        world = make_world([a, b, c, d])
        a.create_new_message(make_message('M1', a, d))

        for _ in range(6):
            world.step()

        assert copies_at(a, 'M1') == 4
        assert copies_at(b, 'M1') == 2
        assert copies_at(c, 'M1') == 2
        assert not d.router.has_message('M1')

    def test_one_link_per_message_per_tick(self, make_host, make_world, make_message):
        a, b, c = make_host(0), make_host(1, x=10.0), make_host(2, x=-10.0)
        d = make_host(9, x=500.0)
        world = make_world([a, b, c, d])
        world.connect(a, b)
        world.connect(a, c)
        a.create_new_message(make_message('M1', a, d))

        a.router.update()
        assert sum(con.is_transferring() for con in a.connections) == 1

    def test_distinct_messages_use_distinct_links(self, make_host, make_world, make_message):
        a, b, c = make_host(0), make_host(1, x=10.0), make_host(2, x=-10.0)
        d = make_host(9, x=500.0)
        world = make_world([a, b, c, d])
        con_ab = world.connect(a, b)
        con_ac = world.connect(a, c)
        a.create_new_message(make_message('M1', a, d))
        a.create_new_message(make_message('M2', a, d))

        a.router.update()
        assert con_ab.message.id == 'M1'
        assert con_ac.message.id == 'M2'

    def test_copies_conserved_with_two_peers(self, make_host, make_world, make_message):
        a, b, c = make_host(0, x=0.0), make_host(1, x=10.0), make_host(2, x=-10.0)
        d = make_host(9, x=500.0)
        world = make_world([a, b, c, d])
        a.create_new_message(make_message('M1', a, d))

        for _ in range(6):
            world.step()

        counts = [copies_at(host, 'M1') for host in (a, b, c)]
        assert sum(counts) == 8
        assert sorted(counts) == [2, 2, 4]

    def test_direct_delivery(self, make_host, make_world, make_message, clock):
        a, b = make_host(0, x=0.0), make_host(1, x=10.0)
        report = MessageStatsReport(clock, 'Utility')
        a.router.add_listener(report)
        b.router.add_listener(report)
        world = make_world([a, b])
        a.create_new_message(make_message('M1', a, b))

        for _ in range(3):
            world.step()

        assert 'M1' in b.router.delivered
        assert not a.router.has_message('M1')
        assert not b.router.has_message('M1')
        assert report.delivery_prob() == 1.0
        assert report.latency_avg() == pytest.approx(2.0)
        assert report.hopcount_avg() == 1.0

    def test_sender_copy_dropped_during_transfer(self, make_host, make_world, make_message):
        a, b, d = make_host(0, x=0.0), make_host(1, x=10.0), make_host(9, x=500.0)
        world = make_world([a, b, d])
        a.create_new_message(make_message('M1', a, d))
        world.step()
        assert a.router.is_sending('M1')

        a.router.delete_message('M1', True)
        world.step()

        assert copies_at(b, 'M1') == 4
        assert not a.router.has_message('M1')

    def test_new_message_evicts_highest_priority(self, make_host, make_message):
        a, s, d = make_host(0, buffer_size=100), make_host(1), make_host(2, x=50.0)
        a.create_new_message(make_message('M1', s, d, size=60))
        a.create_new_message(make_message('M2', s, d, size=30))

        assert a.create_new_message(make_message('M3', s, d, size=50))
        assert not a.router.has_message('M1')
        assert a.router.has_message('M2')
        assert a.router.has_message('M3')

    def test_messages_in_flight_are_not_evicted(self, make_host, make_message, monkeypatch):
        a, s, d = make_host(0, buffer_size=100), make_host(1), make_host(2, x=50.0)
        a.create_new_message(make_message('M1', s, d, size=60))
        a.create_new_message(make_message('M2', s, d, size=30))
        monkeypatch.setattr(a.router, 'is_sending', lambda msg_id: msg_id == 'M1')

        assert not a.create_new_message(make_message('M3', s, d, size=50))
        assert a.router.has_message('M1')

    def test_receiver_refuses_known_message(self, make_host, make_world, make_message):
        a, b, d = make_host(0), make_host(1, x=10.0), make_host(9, x=500.0)
        world = make_world([a, b, d])
        con = world.connect(a, b)
        message = make_message('M1', a, d)
        a.create_new_message(message)
        b.router.add_to_messages(Message('M1', a, d, 100), False)
        assert a.router.start_transfer(message, con) != 0
