"""Default notification templates.

The defaults are registered under well-known names so that receiver settings
and user templates can embed them with `{% include %}`.
"""

DEFAULT_TITLE_NAME = "default.title"
DEFAULT_MESSAGE_NAME = "default.message"

DEFAULT_TITLE = (
    '[{{ Status | upper }}'
    '{% if Status == "firing" %}'
    ':{{ Alerts.firing() | length }}'
    '{% if Alerts.resolved() %}, RESOLVED:{{ Alerts.resolved() | length }}{% endif %}'
    '{% else %}'
    ':{{ Alerts.resolved() | length }}'
    '{% endif %}] '
    '{{ GroupLabels.sorted_values() | join(" ") }} '
    '{% if CommonLabels | length > GroupLabels | length %}'
    '({{ CommonLabels.remove(GroupLabels.names()).sorted_values() | join(" ") }})'
    '{% endif %}'
)

DEFAULT_MESSAGE = (
    '{% if Alerts.firing() %}**Firing**\n'
    '{{ alert_details(Alerts.firing()) }}'
    '{% if Alerts.resolved() %}\n\n{% endif %}'
    '{% endif %}'
    '{% if Alerts.resolved() %}**Resolved**\n'
    '{{ alert_details(Alerts.resolved()) }}'
    '{% endif %}'
)

# Embeds used as the default value of title/message settings
DEFAULT_MESSAGE_TITLE_EMBED = '{% include "' + DEFAULT_TITLE_NAME + '" %}'
DEFAULT_MESSAGE_EMBED = '{% include "' + DEFAULT_MESSAGE_NAME + '" %}'

DEFAULT_TEMPLATES = {
    DEFAULT_TITLE_NAME: DEFAULT_TITLE,
    DEFAULT_MESSAGE_NAME: DEFAULT_MESSAGE,
}
