"""DataFrame views and health summaries of the current fleet state."""

from typing import Any, Dict, List, Sequence

import pandas as pd

from asset_twin.models import Alert, CriticalSpare, Machine, MaintenanceLog

# Machine remaining-life bands
MACHINE_WARNING_MAX = 60.0
# Spare remaining-life band shown as "yellow"
SPARE_WATCH_MAX = 40.0


def _frame(rows: Sequence, columns: List[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([r.model_dump(mode="json") for r in rows])


def machines_frame(machines: Sequence[Machine]) -> pd.DataFrame:
    return _frame(machines, list(Machine.model_fields))


def spares_frame(spares: Sequence[CriticalSpare]) -> pd.DataFrame:
    df = _frame(spares, list(CriticalSpare.model_fields))
    df["remaining_life"] = [s.remaining_life for s in spares]
    return df


def alerts_frame(alerts: Sequence[Alert]) -> pd.DataFrame:
    return _frame(alerts, list(Alert.model_fields))


def maintenance_frame(logs: Sequence[MaintenanceLog]) -> pd.DataFrame:
    return _frame(logs, list(MaintenanceLog.model_fields))


def machine_status(machine: Machine, threshold: float = 20.0) -> str:
    """'critical' below threshold, 'warning' up to 60%, else 'healthy'."""
    if machine.remaining_life < threshold:
        return "critical"
    if machine.remaining_life <= MACHINE_WARNING_MAX:
        return "warning"
    return "healthy"


def spare_status(spare: CriticalSpare, threshold: float = 20.0) -> str:
    """Traffic-light status: red (worn or low stock), yellow, green."""
    if spare.remaining_life < threshold or spare.is_low_stock:
        return "red"
    if spare.remaining_life <= SPARE_WATCH_MAX:
        return "yellow"
    return "green"


def fleet_summary(
    machines: Sequence[Machine],
    spares: Sequence[CriticalSpare],
    alerts: Sequence[Alert],
    threshold: float = 20.0,
) -> Dict[str, Any]:
    """Counts and averages for an overview of the fleet."""
    machine_counts = {"healthy": 0, "warning": 0, "critical": 0}
    for m in machines:
        machine_counts[machine_status(m, threshold)] += 1

    spare_counts = {"green": 0, "yellow": 0, "red": 0}
    for s in spares:
        spare_counts[spare_status(s, threshold)] += 1

    summary: Dict[str, Any] = {
        "machines": {"total": len(machines), **machine_counts},
        "spares": {
            "total": len(spares),
            **spare_counts,
            "low_stock": sum(1 for s in spares if s.is_low_stock),
        },
        "alerts": {
            "total": len(alerts),
            "critical": sum(1 for a in alerts if a.severity.value == "critical"),
            "sent_via_whatsapp": sum(1 for a in alerts if a.sent_via_whatsapp),
        },
    }

    if machines:
        df = machines_frame(machines)
        summary["machines"].update(
            {
                "avg_remaining_life": round(df["remaining_life"].mean(), 1),
                "avg_operating_hours": round(df["operating_hours"].mean(), 1),
                "avg_load_factor": round(df["load_factor"].mean(), 2),
                "cost_at_risk": round(
                    df.loc[df["remaining_life"] < threshold, "replacement_cost"].sum(),
                    2,
                ),
            }
        )
    if spares:
        df = spares_frame(spares)
        summary["spares"].update(
            {
                "avg_wear_percentage": round(df["wear_percentage"].mean(), 1),
                "cost_at_risk": round(
                    df.loc[
                        df["remaining_life"] < threshold, "replacement_cost_inr"
                    ].sum(),
                    2,
                ),
            }
        )
    return summary
