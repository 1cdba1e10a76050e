"""
Tests de l'hôte de simulation: traces, configuration, scénarios complets,
rapports et graphiques.
"""

import math

import pandas as pd
import pytest

import main
from config import CONFIG, Settings, SettingsError
from protocols.utility_router import MSG_COUNT_PROPERTY, UtilityRouter
from protocols.spray_and_wait import SprayAndWaitRouter
from simulation.metrics import comparison_table, summaries_to_dataframe, MessageStatsReport
from simulation.scenario import build_world, run_scenario
from simulation.visualize import plot_comparison, plot_contact_snapshot, plot_predictabilities
from traces.loader import TracePlayer, generate_random_trace, load_trace


@pytest.fixture
def trace():
    return generate_random_trace(8, 300, world_size=(300, 300), max_step=5.0, seed=3)


@pytest.fixture
def isolated_config(monkeypatch):
    """Les sections modifiées par main() sont restaurées après le test"""
    for section in ('Scenario', 'Group', 'UtilityRouter', 'SprayAndWaitRouter'):
        monkeypatch.setitem(CONFIG, section, dict(CONFIG[section]))


class TestTraces:

    def test_load_trace(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("time,host,x,y,speed\n"
                        "1,1,5,5,0\n"
                        "0,1,0,0,0\n"
                        "0,0,10,0,0\n")
        df = load_trace(path)
        assert list(df.columns) == ['time', 'host', 'x', 'y']
        assert list(df['time']) == [0.0, 0.0, 1.0]
        assert list(df['host']) == [0, 1, 1]

    def test_missing_column(self, tmp_path):
        path = tmp_path / "trace.csv"
        path.write_text("time,host,x\n0,0,1\n")
        with pytest.raises(ValueError):
            load_trace(path)

    def test_random_trace_stays_in_bounds(self, trace):
        assert set(trace['host']) == set(range(8))
        assert trace['x'].between(0, 300).all()
        assert trace['y'].between(0, 300).all()
        assert trace['time'].max() >= 300

    def test_player_holds_last_position(self):
        df = pd.DataFrame({'time': [0.0, 0.0, 10.0], 'host': [0, 1, 0],
                           'x': [0.0, 5.0, 2.0], 'y': [0.0, 5.0, 2.0]})
        player = TracePlayer(df)
        assert player.hosts == [0, 1]
        assert player.positions_at(-1.0) == {}
        assert player.positions_at(5.0)[0] == (0.0, 0.0)
        assert player.positions_at(10.0)[0] == (2.0, 2.0)


class TestSettings:

    def test_typed_access(self):
        settings = Settings('UtilityRouter', {'UtilityRouter': {'nrofCopies': '6'}})
        assert settings.get_int('nrofCopies') == 6
        assert settings.get_float('beta', 0.25) == 0.25
        assert settings.contains('nrofCopies')
        assert not settings.contains('beta')

    def test_missing_required_setting(self):
        with pytest.raises(SettingsError):
            Settings('UtilityRouter', {}).get_int('secondsInTimeUnit')

    def test_router_requires_time_unit(self, clock):
        with pytest.raises(SettingsError):
            UtilityRouter(Settings('UtilityRouter', {'UtilityRouter': {'nrofCopies': 4}}),
                          clock, 1000)


class TestScenario:

    def test_unknown_router(self, trace, small_config):
        with pytest.raises(ValueError):
            build_world('epidemic', trace, small_config)

    def test_same_conditions_for_every_router(self, trace, small_config):
        utility_world, _ = build_world('utility', trace, small_config)
        spray_world, _ = build_world('spray', trace, small_config)
        assert [h.energy for h in utility_world.hosts] == [h.energy for h in spray_world.hosts]
        assert isinstance(spray_world.hosts[0].router, SprayAndWaitRouter)

    @pytest.mark.parametrize("router_name", ['utility', 'spray', 'prophet'])
    def test_full_run(self, trace, small_config, router_name):
        report = run_scenario(router_name, trace, small_config)
        summary = report.summary()
        assert summary['created'] > 0
        assert 0.0 <= summary['delivery_prob'] <= 1.0
        assert summary['delivered'] <= summary['created']

    def test_copies_are_never_created(self, trace, small_config):
        world, report = build_world('utility', trace, small_config)
        world.run(small_config['Scenario']['end_time'])
        totals = {}
        for host in world.hosts:
            for message in host.router.get_message_collection():
                totals[message.id] = totals.get(message.id, 0) \
                    + message.get_property(MSG_COUNT_PROPERTY)
        assert max(totals.values(), default=0) <= small_config['UtilityRouter']['nrofCopies']


class TestReports:

    def test_empty_report(self, clock):
        report = MessageStatsReport(clock, 'Vide')
        assert report.delivery_prob() == 0.0
        assert report.overhead_ratio() == math.inf
        assert math.isnan(report.latency_avg())
        assert report.to_dataframe().empty

    def test_comparison_outputs(self, trace, small_config, tmp_path):
        reports = [run_scenario(name, trace, small_config) for name in ('utility', 'spray')]
        table = comparison_table(reports)
        assert 'Utility' in table
        assert 'Spray-and-Wait' in table

        summary_df = summaries_to_dataframe(reports)
        assert list(summary_df['protocol']) == ['Utility', 'Spray-and-Wait']
        assert (tmp_path / "comparison.png").samefile(plot_comparison(summary_df, outdir=tmp_path))

    def test_world_plots(self, trace, small_config, tmp_path):
        world, _ = build_world('utility', trace, small_config)
        world.run(60)
        for path in (plot_predictabilities(world.hosts, outdir=tmp_path),
                     plot_contact_snapshot(world, outdir=tmp_path)):
            assert (tmp_path / path).exists()


class TestMain:

    def test_smoke(self, tmp_path, isolated_config):
        output = tmp_path / "summary.csv"
        assert main.main(['--hosts', '5', '--end-time', '60', '--seed', '2',
                          '--routers', 'utility', 'spray', '--copies', '4',
                          '--output-csv', str(output)]) == 0
        summary = pd.read_csv(output)
        assert list(summary['protocol']) == ['Utility', 'Spray-and-Wait']
        assert CONFIG['UtilityRouter']['nrofCopies'] == 4
