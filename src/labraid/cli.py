from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Callable, Iterable, List, TextIO

from . import __version__
from .config import EngineConfig
from .core.events import LogEvent
from .engine.game import GameEngine, GamePhase
from .exceptions import InvalidActionError, LabRaidError
from .logging_config import configure_logging
from .player.inventory import ItemSource

logger = logging.getLogger(__name__)

HIDEOUT_HELP = "HIDEOUT: RAID, SHOP, REST, QUIT | SHOP: STOCK, BUY <ID>, SELL <N> [SECURE], LEAVE | DEAD: RESPAWN"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="labraid", description="Lab Raid - text console")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible session")
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML config file")
    parser.add_argument("--auto-delay", type=float, default=None, help="Seconds between auto-combat attacks")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig.from_sources(
        file_path=args.config,
        seed=args.seed,
        auto_combat_delay=args.auto_delay,
    )


class Console:
    """Line-oriented driver: routes hideout/shop verbs and raid commands to the engine."""

    def __init__(self, engine: GameEngine, out: TextIO = sys.stdout,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.engine = engine
        self.out = out
        self.sleep = sleep
        self.done = False

    def _print_events(self, events: Iterable[LogEvent]) -> None:
        for ev in events:
            print(f"[{ev.kind.value.upper():12}] {ev.message}", file=self.out)

    def _print_view(self) -> None:
        eng = self.engine
        if eng.phase is GamePhase.RAID:
            for line in eng.render_room():
                print(line, file=self.out)
        p = eng.player
        print(
            f"-- {eng.phase.value.upper()} | HP {p.hp}/{p.max_hp} | SAN {p.sanity}/{p.max_sanity} "
            f"| ${p.credits} | PACK {len(p.inventory)}/{p.max_inventory_size}",
            file=self.out,
        )

    def feed(self, line: str) -> None:
        text = line.strip()
        if not text:
            return
        try:
            self._print_events(self._route(text))
        except InvalidActionError as exc:
            print(f"!! {exc}", file=self.out)
        if not self.done:
            self._print_view()

    def _route(self, text: str) -> List[LogEvent]:
        eng = self.engine
        parts = text.split()
        verb, args = parts[0].lower(), parts[1:]

        if verb in ("quit", "q"):
            self.done = True
            return []
        if eng.phase is GamePhase.RAID:
            events = eng.handle(text)
            if eng.auto_combat.running:
                events += eng.run_auto_combat(sleep=self.sleep)
            return events
        if verb == "raid":
            return eng.start_raid()
        if verb == "shop":
            return eng.open_shop()
        if verb == "leave":
            return eng.leave_shop()
        if verb == "rest":
            return eng.rest()
        if verb == "respawn":
            return eng.respawn()
        if verb == "buy" and args:
            return eng.buy(args[0])
        if verb == "sell" and args and args[0].isdigit():
            source = ItemSource.SECURE if args[1:2] == ["secure"] else ItemSource.INVENTORY
            return eng.sell(int(args[0]), source)
        if verb == "stock" and eng.phase is GamePhase.SHOP:
            for item in eng.catalog.shop_items():
                print(f"  {item.id:16} {item.name:18} ${item.value}", file=self.out)
            return []
        print(HIDEOUT_HELP, file=self.out)
        return []

    def run(self, lines: Iterable[str]) -> None:
        self._print_events(self.engine.log.events())
        self._print_view()
        for line in lines:
            self.feed(line)
            if self.done:
                break


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.WARNING, seed=args.seed)
    try:
        config = build_config(args)
        engine = GameEngine(config)
    except LabRaidError as exc:
        logger.error("Startup failed: %s", exc)
        return 2
    Console(engine).run(sys.stdin)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
