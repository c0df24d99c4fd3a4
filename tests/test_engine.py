"""Tests for the engine facade: CRUD, simulation cycles and consumption."""

import random

import pytest

from asset_twin import (
    AlertType,
    MachineUpdate,
    MaintenanceLogCreate,
    MaintenanceType,
    NotFoundError,
    ResolvedConfig,
    Severity,
)
from asset_twin.engine import AUTO_CONSUMPTION_NOTES, AUTO_CONSUMPTION_PERFORMER

from conftest import FailingChannel


def _config(**engine_overrides) -> ResolvedConfig:
    config = ResolvedConfig()
    config.notifications.synchronous = True
    config.seed.csv_path = None
    config.seed.auto_seed = False
    for key, value in engine_overrides.items():
        setattr(config.engine, key, value)
    return config


class TestMachines:
    """Tests for machine operations."""

    def test_create_below_threshold_alerts_once(self, engine, channel, machine_payload):
        machine = engine.create_machine(machine_payload(initial_life=15))

        alerts = engine.list_alerts()
        assert machine.remaining_life == 15
        assert len(alerts) == 1
        assert alerts[0].machine_id == machine.id
        assert alerts[0].severity == Severity.CRITICAL
        assert alerts[0].alert_type == AlertType.WEAR
        assert alerts[0].sent_via_whatsapp is True
        assert len(channel.sent) == 1

    def test_create_healthy_machine_is_quiet(self, engine, channel, machine_payload):
        engine.create_machine(machine_payload(initial_life=80))

        assert engine.list_alerts() == []
        assert channel.sent == []

    def test_failing_channel_keeps_alert(self, make_engine, machine_payload):
        engine = make_engine(_config(), channel_override=FailingChannel())

        machine = engine.create_machine(machine_payload(initial_life=15))

        alerts = engine.list_alerts()
        assert len(alerts) == 1
        assert alerts[0].machine_id == machine.id
        assert alerts[0].sent_via_whatsapp is False

    def test_unknown_ids_raise_not_found(self, engine):
        with pytest.raises(NotFoundError):
            engine.get_machine("missing")
        with pytest.raises(NotFoundError):
            engine.update_machine("missing", MachineUpdate(name="x"))
        with pytest.raises(NotFoundError):
            engine.delete_machine("missing")

    def test_not_found_is_a_key_error(self, engine):
        with pytest.raises(KeyError):
            engine.get_spare("missing")

    def test_delete_then_get_fails(self, engine, machine_payload):
        machine = engine.create_machine(machine_payload())

        engine.delete_machine(machine.id)

        with pytest.raises(NotFoundError):
            engine.get_machine(machine.id)
        assert engine.list_machines() == []

    def test_simulate_machines_alerts_on_crossing(self, engine, machine_payload):
        # 22 - (40 * 0.5 * 0.05) = 21 -> 20 -> 19
        engine.create_machine(machine_payload(initial_life=22))

        engine.simulate_machines()
        engine.simulate_machines()
        assert engine.list_alerts() == []

        machines = engine.simulate_machines()
        assert machines[0].remaining_life == pytest.approx(19.0)
        assert len(engine.list_alerts()) == 1


class TestSparesAndMaintenance:
    """Tests for spare operations and maintenance logging."""

    def test_record_replacement_renews_spare(self, engine, spare_payload, clock):
        spare = engine.create_spare(
            spare_payload(quantity_in_hand=5, wear_percentage=90.0)
        )

        log = engine.record_maintenance(
            MaintenanceLogCreate(
                spare_id=spare.id,
                maintenance_type=MaintenanceType.REPLACEMENT,
                quantity_used=2,
                performed_by="Shift A",
            )
        )

        renewed = engine.get_spare(spare.id)
        assert renewed.quantity_in_hand == 3
        assert renewed.wear_percentage == 0
        assert renewed.operating_hours == 0
        assert renewed.last_maintenance_date == clock.now
        assert engine.list_maintenance_logs(spare.id) == [log]

    def test_simulate_spares_alerts_worn_spare(self, engine, spare_payload):
        engine.create_spare(
            spare_payload(wear_percentage=95.0, expected_life_hours=100)
        )

        engine.simulate_spares()

        alerts = engine.list_alerts()
        assert len(alerts) == 1
        assert alerts[0].severity == Severity.CRITICAL

    def test_delete_spare(self, engine, spare_payload):
        spare = engine.create_spare(spare_payload())

        engine.delete_spare(spare.id)

        with pytest.raises(NotFoundError):
            engine.delete_spare(spare.id)


class TestConsumption:
    """Tests for randomized inventory consumption."""

    def test_every_stocked_spare_consumed(self, make_engine, spare_payload):
        engine = make_engine(_config(consumption_spare_probability=1.0))
        stocked = engine.create_spare(
            spare_payload(item_code="A", quantity_in_hand=5, replacement_cost_inr=20000)
        )
        empty = engine.create_spare(spare_payload(item_code="B", quantity_in_hand=0))

        logs = engine.consume_inventory()

        assert len(logs) == 1
        log = logs[0]
        assert log.spare_id == stocked.id
        assert log.maintenance_type == MaintenanceType.REPAIR
        assert log.quantity_used in (1, 2)
        assert log.cost == pytest.approx(2000.0)
        assert log.notes == AUTO_CONSUMPTION_NOTES
        assert log.performed_by == AUTO_CONSUMPTION_PERFORMER
        assert engine.get_spare(stocked.id).quantity_in_hand == 5 - log.quantity_used
        assert engine.get_spare(empty.id).quantity_in_hand == 0

    def test_consumption_never_goes_negative(self, make_engine, spare_payload):
        engine = make_engine(_config(consumption_spare_probability=1.0))
        spare = engine.create_spare(spare_payload(quantity_in_hand=1))

        for _ in range(5):
            engine.consume_inventory()

        assert engine.get_spare(spare.id).quantity_in_hand == 0
        assert sum(log.quantity_used for log in engine.list_maintenance_logs()) == 1

    def test_zero_probability_consumes_nothing(self, make_engine, spare_payload):
        engine = make_engine(_config(consumption_spare_probability=0.0))
        engine.create_spare(spare_payload(quantity_in_hand=5))

        assert engine.consume_inventory() == []


class TestCycles:
    """Tests for full scheduler passes."""

    def test_run_cycle_report(self, make_engine, machine_payload, spare_payload):
        engine = make_engine(
            _config(consumption_probability=1.0, consumption_spare_probability=1.0)
        )
        engine.create_machine(machine_payload(name="ok", initial_life=90))
        engine.create_machine(machine_payload(name="bad", initial_life=5))
        engine.create_spare(spare_payload(quantity_in_hand=5, wear_percentage=10.0))

        report = engine.run_cycle()

        assert report.machines == 2
        assert report.spares == 1
        assert report.machine_alerts == 1
        assert len(report.consumption_logs) == 1

    def test_cycles_are_reproducible(self, make_engine):
        def _run(seed):
            engine = make_engine(_config(), rng=random.Random(seed))
            engine.seed_spares(
                [
                    {"Item Code": f"CS-{i}", "Item Description": "Bearing"}
                    for i in range(5)
                ]
            )
            for _ in range(5):
                engine.run_cycle()
            return sorted(
                (s.item_code, s.wear_percentage, s.quantity_in_hand)
                for s in engine.list_spares()
            )

        assert _run(11) == _run(11)

    def test_fleet_summary(self, engine, machine_payload, spare_payload):
        engine.create_machine(machine_payload(name="a", initial_life=90))
        engine.create_machine(machine_payload(name="b", initial_life=50))
        engine.create_machine(
            machine_payload(name="c", initial_life=10, replacement_cost=1000)
        )
        engine.create_spare(
            spare_payload(item_code="s1", wear_percentage=10.0, quantity_in_hand=5)
        )
        engine.create_spare(
            spare_payload(item_code="s2", wear_percentage=70.0, quantity_in_hand=5)
        )
        engine.create_spare(
            spare_payload(item_code="s3", wear_percentage=10.0, quantity_in_hand=0)
        )

        summary = engine.fleet_summary()

        assert summary["machines"]["total"] == 3
        assert summary["machines"]["healthy"] == 1
        assert summary["machines"]["warning"] == 1
        assert summary["machines"]["critical"] == 1
        assert summary["machines"]["cost_at_risk"] == pytest.approx(1000)
        assert summary["spares"]["green"] == 1
        assert summary["spares"]["yellow"] == 1
        assert summary["spares"]["red"] == 1
        assert summary["spares"]["low_stock"] == 1
        assert summary["alerts"]["total"] == 1
