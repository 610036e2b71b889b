"""Functions exposed to notification templates."""

from typing import Callable, Dict, Iterable

from .extended import ExtendedAlert, ExtendedAlerts

NO_VALUE = "[no value]"


def format_number(value: float) -> str:
    """Shortest readable form of a metric value."""
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def value_list(alert: ExtendedAlert) -> str:
    """Render an alert's values as `A=1, B=2`, or a placeholder when absent."""
    if not alert.values:
        return NO_VALUE
    return ", ".join(
        f"{ref_id}={format_number(value)}"
        for ref_id, value in sorted(alert.values.items())
    )


def alert_details(alerts: Iterable[ExtendedAlert]) -> str:
    """Human-readable block for each alert, separated by blank lines."""
    lines = []
    for alert in alerts:
        lines.append("")
        lines.append(f"Value: {value_list(alert)}")
        lines.append("Labels:")
        lines.extend(f" - {k} = {v}" for k, v in alert.labels.sorted_pairs())
        lines.append("Annotations:")
        lines.extend(f" - {k} = {v}" for k, v in alert.annotations.sorted_pairs())
        if alert.generator_url:
            lines.append(f"Source: {alert.generator_url}")
        if alert.silence_url:
            lines.append(f"Silence: {alert.silence_url}")
        if alert.dashboard_url:
            lines.append(f"Dashboard: {alert.dashboard_url}")
        if alert.panel_url:
            lines.append(f"Panel: {alert.panel_url}")
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def firing(alerts: Iterable[ExtendedAlert]) -> ExtendedAlerts:
    return ExtendedAlerts(a for a in alerts if a.is_firing)


def resolved(alerts: Iterable[ExtendedAlert]) -> ExtendedAlerts:
    return ExtendedAlerts(a for a in alerts if not a.is_firing)


def num_firing(alerts: Iterable[ExtendedAlert]) -> int:
    return len(firing(alerts))


def num_resolved(alerts: Iterable[ExtendedAlert]) -> int:
    return len(resolved(alerts))


TEMPLATE_GLOBALS: Dict[str, Callable] = {
    "alert_details": alert_details,
    "value_list": value_list,
    "num_firing": num_firing,
    "num_resolved": num_resolved,
}

TEMPLATE_FILTERS: Dict[str, Callable] = {
    "firing": firing,
    "resolved": resolved,
}
