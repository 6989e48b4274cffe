"""Summary report of all collections, rendered to HTML and e-mailed."""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from aura.core.config import Settings, get_settings
from aura.core.mailer import send_email
from aura.repositories.base import COLLECTIONS, ResourceStore

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
WEEK_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
RECENT_LIMIT = 10


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )


def _day_order(day: str) -> tuple[int, str]:
    key = str(day).strip().lower()
    return (WEEK_DAYS.index(key) if key in WEEK_DAYS else len(WEEK_DAYS), key)


def weekly_slots(schedule: Any) -> list[tuple[str, dict]]:
    """Flatten a schedule into (day, slot) pairs, skipping entries that are not slot lists."""
    if not isinstance(schedule, dict):
        return []
    pairs = []
    for day in sorted(schedule, key=_day_order):
        slots = schedule[day]
        if not isinstance(slots, list):
            continue
        pairs.extend((str(day), slot) for slot in slots if isinstance(slot, dict))
    return pairs


class ReportService:
    """Builds the periodic summary from the store's bulk listing."""

    def __init__(
        self,
        store: ResourceStore,
        settings: Settings | None = None,
        sender: Callable[..., bool] = send_email,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.sender = sender
        self._env = _environment()

    def collect(self) -> dict:
        data = {name: self.store.list(name) for name in COLLECTIONS}
        coaches = {str(c.get("id")): f"{c.get('name', '')} {c.get('surname', '')}".strip() for c in data["coaches"]}
        slots_per_day: Counter = Counter()
        students = []
        for student in data["students"]:
            entries = []
            for day, slot in weekly_slots(student.get("schedule")):
                slots_per_day[day.lower()] += 1
                entries.append({
                    "day": day,
                    "time": slot.get("time"),
                    "duration": slot.get("duration"),
                    "coach": coaches.get(str(slot.get("coachId"))),
                })
            students.append({**student, "slots": entries})
        return {
            "generated_at": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
            "totals": {name: len(records) for name, records in data.items()},
            "unread_applications": [a for a in data["applications"] if not a.get("read")],
            "recent_applications": data["applications"][:RECENT_LIMIT],
            "students": students[:RECENT_LIMIT],
            "lessons": data["lessons"][:RECENT_LIMIT],
            "schedule_overview": sorted(slots_per_day.items(), key=lambda item: _day_order(item[0])),
        }

    def render(self, context: dict | None = None) -> str:
        template = self._env.get_template("report.html")
        return template.render(**(context if context is not None else self.collect()))

    def send(self) -> bool:
        recipient = self.settings.report_recipient
        if not recipient:
            logger.warning("REPORT_RECIPIENT not configured; skipping report")
            return False
        context = self.collect()
        html_body = self.render(context)
        totals = context["totals"]
        text_body = "\n".join(f"{name}: {totals[name]}" for name in COLLECTIONS)
        subject = f"AURA Coaching report - {context['generated_at']}"
        sent = self.sender(subject, recipient, html_body, text_body, settings=self.settings)
        if sent:
            logger.info("Report sent to %s", recipient)
        return sent
