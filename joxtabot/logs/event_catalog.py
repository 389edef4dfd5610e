"""Event template catalog.

Templates live in ``event_templates.json`` next to this module, grouped as
``{domain: {action: template}}``. They are flattened into
:data:`EVENT_TEMPLATES` keyed by ``(domain, action)``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}


def _flatten(raw: Any) -> dict[tuple[str, str], str]:
    if not isinstance(raw, dict):
        raise ValueError("top level must be an object of domains")
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


def load_event_templates(path: Path = TEMPLATES_PATH) -> dict[tuple[str, str], str]:
    """Read and flatten a catalog file.

    An unreadable catalog yields a single ``("app", "load_error")`` entry so
    that logging keeps working with derived texts.
    """
    try:
        return _flatten(json.loads(path.read_text(encoding="utf-8")))
    except FileNotFoundError:
        return {("app", "load_error"): f"Event templates file missing: {path.name}"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}


def reload_event_templates(path: Path | None = None) -> None:
    # In place: BotLogger looks the dict up through this module.
    templates = load_event_templates(path or TEMPLATES_PATH)
    EVENT_TEMPLATES.clear()
    EVENT_TEMPLATES.update(templates)


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "TEMPLATES_PATH", "load_event_templates", "reload_event_templates"]
