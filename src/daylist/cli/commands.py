# src/daylist/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date, timedelta
from typing import cast

from ..core.errors import PolicyViolation
from ..core.state import AppState
from ..tasks import analytics, task_api
from ..tasks.task_models import Frequency, GroupKind, ListKind, RecurringTaskDefinition, TaskInstance

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /today, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValueError as e:
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing helpers ----


def parse_day(raw: str, current: date) -> date:
    s = raw.strip().lower()
    if s == "today":
        return date.today()
    if s in ("next", "tomorrow"):
        return current + timedelta(days=1)
    if s in ("prev", "yesterday"):
        return current - timedelta(days=1)
    if s[:1] in "+-" and s[1:].isdigit():
        return current + timedelta(days=int(s))
    return date.fromisoformat(s)


def parse_weekdays(raw: str) -> list[int]:
    """'mon,wed' or '1,3' -> [1, 3] (0 = Sunday)."""
    out: list[int] = []
    for part in raw.replace(" ", "").lower().split(","):
        if not part:
            continue
        if part.isdigit():
            out.append(int(part))
        elif part[:3] in WEEKDAY_NAMES:
            out.append(WEEKDAY_NAMES.index(part[:3]))
        else:
            raise ValueError(f"unknown day of week: {part}")
    return out


def _parse_position(raw: str, size: int) -> int:
    """1-based position from the user -> 0-based index."""
    try:
        pos = int(raw)
    except ValueError:
        raise ValueError(f"not a task number: {raw}") from None
    if not 1 <= pos <= size:
        raise ValueError(f"no task #{pos} (list has {size})")
    return pos - 1


def _split_list_kind(args: list[str]) -> tuple[ListKind | None, list[str]]:
    if args and args[0].lower() in (ListKind.TASKS.value, ListKind.IDEAS.value):
        return ListKind(args[0].lower()), args[1:]
    return None, args


# ---- rendering ----


def _checkbox(done: bool) -> str:
    return "[x]" if done else "[ ]"


def _task_line(pos: int, task: TaskInstance) -> str:
    mark = "↻ " if task.is_recurring else ""
    emoji = f"{task.emoji} " if task.emoji else ""
    return f"  {pos}. {_checkbox(task.completed)} {mark}{emoji}{task.title}"


def _frequency_text(d: RecurringTaskDefinition) -> str:
    if d.frequency == Frequency.DAILY:
        return "daily"
    days = ", ".join(WEEKDAY_NAMES[i] for i in sorted(d.days_of_week))
    return f"weekly ({days})" if days else "weekly"


def render_day(state: AppState, day: date | None = None) -> str:
    day = day or state.current_date
    recurring, manual = task_api.day_groups(state, day)
    progress = analytics.day_progress(state.snapshot, day)

    header = f"{day.isoformat()} ({day.strftime('%a')})"
    if day == date.today():
        header += " - today"
    lines = [header]
    if progress.total:
        lines[0] += f" - {progress.completed}/{progress.total} done ({progress.percentage}%)"

    if not recurring and not manual:
        lines.append("  No tasks for this day. Type a line (or /add <title>) to add one.")
        return "\n".join(lines)

    pos = 1
    for task in recurring:
        lines.append(_task_line(pos, task))
        pos += 1
    if recurring and manual:
        lines.append("  --")
    for task in manual:
        lines.append(_task_line(pos, task))
        pos += 1
    return "\n".join(lines)


def render_list(state: AppState, list_kind: ListKind) -> str:
    items = task_api.list_view(state, list_kind)
    title = "Ideas" if list_kind == ListKind.IDEAS else "Tasks (no deadline)"
    if not items:
        return f"{title}: empty."
    lines = [f"{title}:"]
    lines.extend(_task_line(i, t) for i, t in enumerate(items, start=1))
    return "\n".join(lines)


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    saver = state.saver
    pending = bool(getattr(saver, "has_pending", False))
    last_error = getattr(saver, "last_error", None)
    lines = [
        "Status:",
        f"  User token: {state.user_token}",
        f"  Store: {state.store.describe()}",
        f"  Loaded from store: {'yes' if state.loaded else 'no (working locally)'}",
        f"  Current date: {state.current_date.isoformat()}",
        f"  Unsaved changes: {'yes' if pending else 'no'}",
    ]
    if last_error is not None:
        lines.append("  Last save failed; unsaved changes are kept and retried on the next change or /sync.")
    return "\n".join(lines)


def cmd_day(state: AppState, args: list[str]) -> str:
    """
    /day              -> show current day
    /day next|prev    -> move one day
    /day +3 | -2      -> move N days
    /day YYYY-MM-DD   -> jump to date
    """
    if args:
        task_api.set_current_date(state, parse_day(args[0], state.current_date))
    return render_day(state)


def cmd_today(state: AppState, args: list[str]) -> str:
    task_api.set_current_date(state, date.today())
    return render_day(state)


def _add_to(state: AppState, args: list[str], where: date | ListKind | None) -> str:
    title = " ".join(args).strip()
    if not title:
        return "Usage: give a title, e.g. /add Buy milk"
    task_api.add_task(state, title, where)
    if isinstance(where, ListKind):
        return render_list(state, where)
    return render_day(state)


def cmd_add(state: AppState, args: list[str]) -> str:
    return _add_to(state, args, None)


def cmd_task(state: AppState, args: list[str]) -> str:
    return _add_to(state, args, ListKind.TASKS)


def cmd_idea(state: AppState, args: list[str]) -> str:
    return _add_to(state, args, ListKind.IDEAS)


def cmd_tasks(state: AppState, args: list[str]) -> str:
    return render_list(state, ListKind.TASKS)


def cmd_ideas(state: AppState, args: list[str]) -> str:
    return render_list(state, ListKind.IDEAS)


def cmd_done(state: AppState, args: list[str]) -> str:
    """/done <n>  |  /done tasks <n>  |  /done ideas <n>"""
    list_kind, rest = _split_list_kind(args)
    if not rest:
        return "Usage: /done <n> | /done tasks <n> | /done ideas <n>"

    if list_kind is not None:
        items = task_api.list_view(state, list_kind)
        item = items[_parse_position(rest[0], len(items))]
        task_api.toggle_task(state, list_kind, item.id)
        return render_list(state, list_kind)

    view = task_api.day_view(state)
    task = view[_parse_position(rest[0], len(view))]
    task_api.toggle_task(state, None, task.id, is_recurring=task.is_recurring)
    return render_day(state)


def cmd_del(state: AppState, args: list[str]) -> str:
    """/del <n>  |  /del tasks <n>  |  /del ideas <n>"""
    list_kind, rest = _split_list_kind(args)
    if not rest:
        return "Usage: /del <n> | /del tasks <n> | /del ideas <n>"

    if list_kind is not None:
        items = task_api.list_view(state, list_kind)
        item = items[_parse_position(rest[0], len(items))]
        task_api.delete_task(state, list_kind, item.id)
        return render_list(state, list_kind)

    view = task_api.day_view(state)
    task = view[_parse_position(rest[0], len(view))]
    try:
        task_api.delete_task(state, None, task.id, is_recurring=task.is_recurring)
    except PolicyViolation as e:
        return f"Not allowed: {e}. Use /rec del."
    return render_day(state)


def cmd_mv(state: AppState, args: list[str]) -> str:
    """/mv <from> <to>  |  /mv tasks <from> <to>  |  /mv ideas <from> <to>"""
    list_kind, rest = _split_list_kind(args)
    if len(rest) < 2:
        return "Usage: /mv <from> <to> | /mv tasks <from> <to> | /mv ideas <from> <to>"

    if list_kind is not None:
        size = len(task_api.list_view(state, list_kind))
        src, dst = _parse_position(rest[0], size), _parse_position(rest[1], size)
        task_api.move_task_in_list(state, list_kind, src, dst)
        return render_list(state, list_kind)

    recurring, manual = task_api.day_groups(state)
    size = len(recurring) + len(manual)
    src, dst = _parse_position(rest[0], size), _parse_position(rest[1], size)

    def locate(i: int) -> tuple[GroupKind, int]:
        if i < len(recurring):
            return GroupKind.RECURRING, i
        return GroupKind.MANUAL, i - len(recurring)

    src_group, src_idx = locate(src)
    dst_group, dst_idx = locate(dst)
    if src_group != dst_group:
        task_api.move_task_in_day(state, src_group, src_idx, dst_idx, target_group=dst_group)
        return "Recurring and regular tasks are ordered separately; move within the same group."

    task_api.move_task_in_day(state, src_group, src_idx, dst_idx)
    return render_day(state)


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <n> <title>  |  /edit tasks <n> <title>  |  /edit ideas <n> <title>"""
    list_kind, rest = _split_list_kind(args)
    if len(rest) < 2:
        return "Usage: /edit <n> <new title>"

    title = " ".join(rest[1:])
    if list_kind is not None:
        items = task_api.list_view(state, list_kind)
        item = items[_parse_position(rest[0], len(items))]
        task_api.rename_task(state, list_kind, item.id, title)
        return render_list(state, list_kind)

    view = task_api.day_view(state)
    task = view[_parse_position(rest[0], len(view))]
    if task.is_recurring:
        return "Recurring tasks cannot be renamed; delete and re-create them with /rec."
    task_api.rename_task(state, None, task.id, title)
    return render_day(state)


def _render_recurring(state: AppState) -> str:
    defs = task_api.list_recurring_tasks(state)
    if not defs:
        return "No recurring tasks. Add one: /rec add daily <title> | /rec add weekly mon,wed <title>"
    lines = ["Recurring tasks:"]
    for i, d in enumerate(defs, start=1):
        emoji = f"{d.emoji} " if d.emoji else ""
        lines.append(f"  {i}. {emoji}{d.title} - {_frequency_text(d)}")
    return "\n".join(lines)


def cmd_rec(state: AppState, args: list[str]) -> str:
    """
    /rec                              -> list recurring tasks
    /rec add daily <title>            -> every day
    /rec add weekly <days> <title>    -> e.g. /rec add weekly mon,thu Gym
    /rec del <n>                      -> delete recurring task #n
    """
    if not args:
        return _render_recurring(state)

    sub = args[0].lower()

    if sub == "add":
        if len(args) < 3:
            return "Usage: /rec add daily <title> | /rec add weekly <days> <title>"
        freq = Frequency.from_raw(args[1])
        if args[1].lower() != freq.value:
            return "Frequency must be 'daily' or 'weekly'."
        if freq == Frequency.WEEKLY:
            if len(args) < 4:
                return "Usage: /rec add weekly <days> <title>, e.g. /rec add weekly mon,wed Gym"
            days = parse_weekdays(args[2])
            title = " ".join(args[3:])
        else:
            days = []
            title = " ".join(args[2:])
        task_api.add_recurring_task(state, title, freq, days)
        return _render_recurring(state)

    if sub in ("del", "rm"):
        if len(args) < 2:
            return "Usage: /rec del <n>"
        defs = task_api.list_recurring_tasks(state)
        d = defs[_parse_position(args[1], len(defs))]
        task_api.delete_recurring_task(state, d.id)
        return _render_recurring(state)

    return "Unknown /rec subcommand. Use /rec, /rec add ..., /rec del <n>."


def cmd_stats(state: AppState, args: list[str]) -> str:
    snap = state.snapshot
    day = state.current_date
    progress = analytics.day_progress(snap, day)
    overall = analytics.overall_completion(snap)

    lines = [
        "Statistics:",
        f"  Day {day.isoformat()}: {progress.completed}/{progress.total} ({progress.percentage}%)",
        f"  All tasks: {overall.completed}/{overall.total} done ({overall.percentage}%)",
    ]

    counts = analytics.category_counts(snap)
    if counts:
        lines.append("  By list: " + ", ".join(f"{k}={v}" for k, v in counts.items()))

    lines.append("  This week:")
    for d in analytics.week_days_stats(snap, day):
        lines.append(f"    {d.day.strftime('%a %d %b')}: {d.completed}/{d.total}")

    lines.append("  Last 4 weeks:")
    for w in analytics.weekly_trend(snap, day, weeks=4):
        lines.append(
            f"    {w.start.strftime('%d %b')} - {w.end.strftime('%d %b')}: "
            f"{w.completed}/{w.total} ({w.percentage}%)"
        )
    return "\n".join(lines)


def cmd_sync(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    saver = state.saver
    if saver is None or not hasattr(saver, "flush_blocking"):
        return "Saving is disabled in this session."
    if emit:
        emit("Saving...")
    ok = saver.flush_blocking()
    return "Saved." if ok else "Save failed; your changes are kept locally. See the log for details."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show token, store and sync status.")
registry.register("day", cmd_day, help_text="Show day: /day [next|prev|+N|-N|YYYY-MM-DD].", aliases=["d"])
registry.register("today", cmd_today, help_text="Jump to today and show it.", aliases=["t"])
registry.register("add", cmd_add, help_text="Add a task to the current day: /add <title>.", aliases=["a"])
registry.register("task", cmd_task, help_text="Add a task without a deadline: /task <title>.")
registry.register("idea", cmd_idea, help_text="Add an idea: /idea <title>.")
registry.register("tasks", cmd_tasks, help_text="List tasks without a deadline.")
registry.register("ideas", cmd_ideas, help_text="List ideas.")
registry.register("done", cmd_done, help_text="Toggle done: /done [tasks|ideas] <n>.", aliases=["x"])
registry.register("del", cmd_del, help_text="Delete: /del [tasks|ideas] <n>.", aliases=["rm"])
registry.register("mv", cmd_mv, help_text="Reorder: /mv [tasks|ideas] <from> <to>.")
registry.register("edit", cmd_edit, help_text="Rename: /edit [tasks|ideas] <n> <title>.")
registry.register("rec", cmd_rec, help_text="Recurring tasks: /rec | /rec add ... | /rec del <n>.")
registry.register("stats", cmd_stats, help_text="Progress and completion statistics.")
registry.register("sync", cmd_sync, help_text="Save pending changes now.")
