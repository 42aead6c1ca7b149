"""
Inner — Command Line
Drive the time engine and nudges from a terminal, mostly for debugging.

Usage:
    innerfield tick                         # one app open, right now
    innerfield tick --now 2025-03-04T09:30  # one app open at a given local time
    innerfield state                        # show persisted time state
    innerfield reset                        # forget all time history
    innerfield force streak.7               # print the copy for an id
    innerfield intentions set calm clarity
    innerfield nudge --seed 3
    innerfield nudge-shown                  # start the nudge cooldown
"""
import argparse
import json
import logging
import sys
from datetime import datetime

from innerfield import config as cfg
from innerfield.dates import now_ms, to_ms
from innerfield.intentions import IntentionStore, format_intentions
from innerfield.storage import JsonFileStore
from innerfield.time_engine import TimeEngine
from innerfield.time_state import THRESHOLD_IDS

logger = logging.getLogger("innerfield.cli")


def setup_logging(config: dict) -> None:
    cfg.ensure_dirs()
    handlers = [logging.FileHandler(cfg.LOGS_DIR / "innerfield.log")]
    if sys.stderr is not None:
        handlers.append(logging.StreamHandler())
    logging.basicConfig(
        level=getattr(logging, str(config.get("log_level", "INFO")).upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def _parse_now(value, tz) -> int:
    if not value:
        return now_ms()
    try:
        return to_ms(datetime.fromisoformat(value), tz)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {value!r}")


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


# ── Commands ────────────────────────────────────────────────

def cmd_tick(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    result = engine.tick(_parse_now(args.now, engine.tz))
    state = result.state
    print(f"streak: {state.streak}  week: {state.week_count} (since {state.week_start})")
    if result.message:
        print(f"[{result.threshold_id}] {result.message}")
    else:
        print("(silence)")
    return 0


def cmd_state(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    _print_json(engine.get_state().to_dict())
    return 0


def cmd_reset(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    engine.reset()
    print("Time state cleared.")
    return 0


def cmd_force(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    print(engine.dev_force(args.threshold_id))
    return 0


def cmd_intentions(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    if args.action == "set":
        chosen = intentions.set_intentions(args.keys)
        print(f"Intentions: {format_intentions(chosen) or '(none)'}")
    elif args.action == "clear":
        intentions.clear_intentions()
        print("Intentions cleared.")
    else:
        current = intentions.get_intentions()
        print(f"Intentions: {format_intentions(current) or '(none)'}")
        set_at = intentions.get_intention_set_at()
        if set_at is not None:
            print(f"Since: {datetime.fromtimestamp(set_at / 1000, engine.tz).isoformat(timespec='minutes')}")
    return 0


def cmd_nudge(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    nudge = intentions.current_nudge(
        now=_parse_now(args.now, engine.tz),
        seed=args.seed,
        cooldown_days=args.cooldown,
    )
    if nudge is None:
        print("(no nudge)")
        return 0
    print(f"[{nudge.category}/{nudge.stage}] {nudge.text}")
    print(f"key: {nudge.key}")
    return 0


def cmd_nudge_shown(args, engine: TimeEngine, intentions: IntentionStore) -> int:
    stamp = intentions.mark_nudge_shown(_parse_now(args.now, engine.tz))
    print(f"Nudge cooldown started at {stamp}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="innerfield", description="Inner time engine and nudges")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("tick", help="Record an app open and maybe surface a time line")
    p.add_argument("--now", help="ISO datetime (local time if no offset)")
    p.set_defaults(func=cmd_tick)

    p = sub.add_parser("state", help="Show persisted time state")
    p.set_defaults(func=cmd_state)

    p = sub.add_parser("reset", help="Clear persisted time state")
    p.set_defaults(func=cmd_reset)

    p = sub.add_parser("force", help="Print the line for a threshold id")
    p.add_argument("threshold_id", choices=THRESHOLD_IDS)
    p.set_defaults(func=cmd_force)

    p = sub.add_parser("intentions", help="Show, set or clear intentions")
    p.add_argument("action", choices=["show", "set", "clear"], nargs="?", default="show")
    p.add_argument("keys", nargs="*")
    p.set_defaults(func=cmd_intentions)

    p = sub.add_parser("nudge", help="Pick a reflective nudge for the current intentions")
    p.add_argument("--now", help="ISO datetime (local time if no offset)")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cooldown", type=int, default=None, help="Cooldown in days")
    p.set_defaults(func=cmd_nudge)

    p = sub.add_parser("nudge-shown", help="Record that a nudge was displayed")
    p.add_argument("--now", help="ISO datetime (local time if no offset)")
    p.set_defaults(func=cmd_nudge_shown)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = cfg.load_config()
    setup_logging(config)
    if args.command == "nudge" and args.cooldown is None:
        args.cooldown = cfg.get_nudge_cooldown_days(config)

    store = JsonFileStore(cfg.STATE_FILE)
    engine = TimeEngine.from_config(store, config)
    intentions = IntentionStore(store)

    try:
        return args.func(args, engine, intentions)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))


if __name__ == "__main__":
    sys.exit(main())
