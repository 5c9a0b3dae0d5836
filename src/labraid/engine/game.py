from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..ai.entity_ai import ActionKind, EnemyAction, EntityAI
from ..combat.auto import AutoCombat, StopReason
from ..combat.resolver import AttackOutcome, CombatResolver
from ..config import EngineConfig
from ..core.events import EventKind, EventLog, LogEvent
from ..core.rng import RNG
from ..data.catalog import Catalog, ItemType, default_catalog
from ..dungeon.graph import DungeonGraph, DungeonState
from ..dungeon.room import RoomSnapshot
from ..dungeon.tiles import Coord, DoorTarget, TileKind
from ..exceptions import InvalidActionError, LabRaidError
from ..fov.los import has_line_of_sight
from ..fov.visibility import VisibilityCalculator
from ..player.inventory import InventoryManager, ItemSource
from ..player.state import PlayerSnapshot, PlayerState
from .commands import HELP_TEXT, Command, Verb, parse_command

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    HIDEOUT = "hideout"
    SHOP = "shop"
    RAID = "raid"
    GAME_OVER = "game_over"


BOOT_SEQUENCE = [
    ("SYSTEM BOOT SEQUENCE COMPLETE...", EventKind.INFO),
    ("DATE: OCT 31. DEADLINE: T-MINUS 72 HOURS.", EventKind.DANGER),
    ("STATUS: LOCAL STORAGE CORRUPTED.", EventKind.DANGER),
    (
        'MESSAGE: "You wake up at your desk. The coffee is cold. You need that backup '
        'data from the Server Room. Prepare yourself."',
        EventKind.STORY,
    ),
]

RAID_INTRO = [
    ("ENTERING LAB COMPLEX SECTOR 7...", EventKind.INFO),
    ("ENVIRONMENTAL WARNING: HIGH STRESS LEVELS DETECTED.", EventKind.DANGER),
    (
        'MISSION BRIEF: The Faculty have succumbed to "The Burnout". They are hostile. '
        "Locate the SERVER ROOM (E) and extract the data.",
        EventKind.STORY,
    ),
    ("REMEMBER: Publish... or Perish.", EventKind.STORY),
]


class GameEngine:
    """
    Owns the player and the current raid and is the only mutation authority.

    Every public operation is request/response: state changes synchronously
    and the operation returns the log events it produced. Raid commands go
    through ``handle``; hideout and shop actions have dedicated methods that
    raise InvalidActionError when called in the wrong phase.

    One RNG instance is shared by dungeon generation, enemy AI and loot rolls,
    so seeding the config makes a whole session reproducible.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        catalog: Optional[Catalog] = None,
        rng: Optional[RNG] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.config.validate()
        self.catalog = catalog or default_catalog()
        self.rng = rng or RNG(self.config.seed)
        self.log = EventLog(self.config.log_capacity)

        self.player = PlayerState.from_config(self.config)
        self.inventory = InventoryManager(self.player, self.catalog)
        self.visibility = VisibilityCalculator(self.config.vision_radius)
        self.ai = EntityAI(self.catalog, self.config, self.rng)
        self.combat = CombatResolver(self.catalog, self.config, self.rng, self.ai)
        self.graph = DungeonGraph(self.catalog, self.config, self.rng)
        self.auto_combat = AutoCombat(self._auto_combat_round, self.config.auto_combat_delay)

        self.phase = GamePhase.HIDEOUT
        self.dungeon: Optional[DungeonState] = None
        self._symbols: Dict[str, str] = {e.id: e.symbol for e in self.catalog.enemies()}

        for message, kind in BOOT_SEQUENCE:
            self.log.add(message, kind)
        logger.info("Engine ready (seed=%s)", self.config.seed)

    # ---- Read-only views -------------------------------------------------
    @property
    def position(self) -> Optional[Coord]:
        return self.dungeon.player if self.dungeon else None

    def room_snapshot(self) -> Optional[RoomSnapshot]:
        if self.dungeon is None:
            return None
        return self.dungeon.current_room.snapshot()

    def player_snapshot(self) -> PlayerSnapshot:
        return self.player.snapshot()

    def render_room(self, fog: bool = True) -> List[str]:
        """ASCII view of the current room, empty outside a raid."""
        if self.dungeon is None:
            return []
        return self.dungeon.current_room.to_str_lines(self.dungeon.player, fog=fog, symbols=self._symbols)

    # ---- Helpers ---------------------------------------------------------
    def _emit(self, message: str, kind: EventKind = EventKind.INFO) -> LogEvent:
        return self.log.add(message, kind)

    def _require(self, phase: GamePhase, action: str) -> None:
        if self.phase is not phase:
            raise InvalidActionError(f"Cannot {action} during {self.phase.value}; requires {phase.value}")

    def _reject(self, exc: LabRaidError) -> None:
        logger.debug("Rejected: %s", exc)
        self._emit(str(exc).upper(), EventKind.DANGER)

    def _collect(self, fn: Callable[[], None]) -> List[LogEvent]:
        mark = self.log.last_seq
        fn()
        return self.log.since(mark)

    # ---- Hideout / shop --------------------------------------------------
    def start_raid(self) -> List[LogEvent]:
        self._require(GamePhase.HIDEOUT, "start a raid")
        return self._collect(self._start_raid)

    def _start_raid(self) -> None:
        self.auto_combat.cancel()
        self.dungeon = self.graph.build()
        self.phase = GamePhase.RAID
        self._refresh_visibility()
        for message, kind in RAID_INTRO:
            self._emit(message, kind)
        logger.info("Raid started in %s at %s", self.dungeon.current_room_id, self.dungeon.player)

    def open_shop(self) -> List[LogEvent]:
        self._require(GamePhase.HIDEOUT, "open the shop")

        def _open() -> None:
            self.phase = GamePhase.SHOP
            self._emit(f"SUPPLY CLOSET OPEN. CREDITS: ${self.player.credits}", EventKind.INFO)

        return self._collect(_open)

    def leave_shop(self) -> List[LogEvent]:
        self._require(GamePhase.SHOP, "leave the shop")

        def _leave() -> None:
            self.phase = GamePhase.HIDEOUT
            self._emit("BACK AT YOUR DESK.", EventKind.INFO)

        return self._collect(_leave)

    def buy(self, item_id: str) -> List[LogEvent]:
        self._require(GamePhase.SHOP, "buy")

        def _buy() -> None:
            if not self.catalog.in_shop(item_id):
                self._emit(f'"{item_id}" IS NOT SOLD HERE.', EventKind.DANGER)
                return
            try:
                item = self.inventory.buy(item_id)
            except LabRaidError as exc:
                self._reject(exc)
                return
            self._emit(f"BOUGHT {item.name} FOR ${item.value}.", EventKind.LOOT)

        return self._collect(_buy)

    def sell(self, index: int, source: ItemSource = ItemSource.INVENTORY) -> List[LogEvent]:
        self._require(GamePhase.SHOP, "sell")

        def _sell() -> None:
            try:
                item, refund = self.inventory.sell(index, source)
            except LabRaidError as exc:
                self._reject(exc)
                return
            self._emit(f"SOLD {item.name} FOR ${refund}.", EventKind.LOOT)

        return self._collect(_sell)

    def rest(self) -> List[LogEvent]:
        self._require(GamePhase.HIDEOUT, "rest")

        def _rest() -> None:
            cost = self.config.rest_cost
            if self.player.credits < cost:
                self._emit("NOT ENOUGH CREDITS TO REST.", EventKind.DANGER)
                return
            self.player.credits -= cost
            self.player.sanity = self.player.max_sanity
            self._emit(f"RESTED AT DESK. +SANITY ONLY. -{cost} CREDITS", EventKind.INFO)

        return self._collect(_rest)

    def respawn(self) -> List[LogEvent]:
        self._require(GamePhase.GAME_OVER, "respawn")

        def _respawn() -> None:
            self.player.hp = self.config.respawn_hp
            self.player.sanity = self.config.respawn_sanity
            self.player.inventory.clear()
            self.player.equipped_weapon = None
            self.phase = GamePhase.HIDEOUT
            self._emit("REVIVED IN MEDICAL WING. EQUIPMENT LOST.", EventKind.INFO)
            self._emit("THE NIGHTMARE CONTINUES.", EventKind.STORY)
            for item in self.player.secure_container:
                self._emit(f"SECURE CONTAINER CONTENTS SAVED: {item.name}", EventKind.LOOT)
            logger.info("Player respawned in hideout")

        return self._collect(_respawn)

    # ---- Raid commands ---------------------------------------------------
    def handle(self, text: str) -> List[LogEvent]:
        """Process one raid command and return the events it produced."""
        command = parse_command(text)
        if command is None:
            return []
        return self._collect(lambda: self._handle(command))

    def _handle(self, command: Command) -> None:
        self.auto_combat.cancel()
        self._emit(f"> {command.raw}", EventKind.COMMAND)
        if self.phase is not GamePhase.RAID:
            self._emit("NO ACTIVE RAID.", EventKind.DANGER)
            return
        try:
            self._dispatch(command)
        except LabRaidError as exc:
            self._reject(exc)
        self._check_fatal()

    def _dispatch(self, command: Command) -> None:
        verb = command.verb
        arg = command.arg
        if command.is_move:
            self._move(*command.delta)
        elif verb is Verb.SEARCH:
            self._search()
        elif verb is Verb.ATTACK:
            if self._attack() is None:
                self._emit("NOTHING TO ATTACK.", EventKind.INFO)
        elif verb is Verb.FIGHT:
            self._emit("ENGAGING AUTO-COMBAT...", EventKind.COMBAT)
            self.auto_combat.start()
        elif verb is Verb.CONSUME:
            self._consume(arg)
        elif verb is Verb.DROP:
            self._drop(arg)
        elif verb is Verb.SECURE:
            self._secure(arg)
        elif verb is Verb.UNSECURE:
            item = self.inventory.unsecure(arg or None)
            self._emit(f"RETRIEVED {item.name}.", EventKind.INFO)
        elif verb is Verb.EQUIP:
            self._equip(arg)
        elif verb is Verb.SCAN:
            self._scan()
        elif verb is Verb.STATUS:
            self._status()
        elif verb is Verb.EXTRACT:
            self._extract()
        elif verb is Verb.HELP:
            self._emit(HELP_TEXT, EventKind.INFO)
        else:
            self._emit('UNKNOWN COMMAND. TRY "HELP".', EventKind.DANGER)

    def _usage(self, verb: str) -> None:
        self._emit(f"USAGE: {verb} [ITEM NAME]", EventKind.INFO)

    # ---- Movement --------------------------------------------------------
    def _move(self, dx: int, dy: int) -> None:
        assert self.dungeon is not None
        room = self.dungeon.current_room
        dest = self.dungeon.player.offset(dx, dy)

        if not room.in_bounds(dest.x, dest.y):
            self._emit("BLOCKED.", EventKind.DANGER)
            return
        tile = room.tile_at(dest)
        if tile.kind is TileKind.WALL:
            self._emit("WALL.", EventKind.DANGER)
            return
        occupant = room.entity_at(dest)
        if occupant is not None:
            self._emit(f"BLOCKED BY {self.catalog.enemy(occupant.template_id).name}.", EventKind.DANGER)
            return

        if tile.kind is TileKind.DOOR:
            self._traverse_door(tile.door_target)
            return

        self.dungeon.player = dest
        if tile.kind is TileKind.EXIT:
            self._emit('EXIT REACHED. TYPE "EXTRACT".', EventKind.LOOT)
        if tile.loot is not None:
            self._emit("ITEM SPOTTED.", EventKind.LOOT)
        self._enemy_turn()
        self._refresh_visibility()

    def _traverse_door(self, target: DoorTarget) -> None:
        assert self.dungeon is not None
        next_room = self.dungeon.rooms[target.room_id]
        blocker = next_room.entity_at(target.coord)
        if blocker is not None:
            self._emit(
                f"DOORWAY BLOCKED BY {self.catalog.enemy(blocker.template_id).name}.", EventKind.DANGER
            )
            return
        self._emit("MOVING TO NEXT ROOM...", EventKind.INFO)
        self.dungeon.current_room_id = target.room_id
        self.dungeon.player = target.coord
        self._refresh_visibility()
        logger.debug("Entered %s at %s", target.room_id, target.coord)

    def _refresh_visibility(self) -> None:
        assert self.dungeon is not None
        rid = self.dungeon.current_room_id
        self.dungeon.rooms[rid] = self.visibility.recompute(self.dungeon.rooms[rid], self.dungeon.player)

    # ---- Enemy turn ------------------------------------------------------
    def _enemy_turn(self) -> None:
        assert self.dungeon is not None
        actions = self.ai.resolve_turn(self.dungeon.current_room, self.dungeon.player, self.player)
        self._report_enemy_actions(actions)

    def _report_enemy_actions(self, actions: List[EnemyAction]) -> None:
        for action in actions:
            name = action.template.name
            if action.spotted:
                self._emit(f"{name} HAS SPOTTED YOU!", EventKind.DANGER)
            if action.kind is ActionKind.ATTACK:
                message = f"{name} ATTACKS YOU! -{action.damage} HP."
                if action.sanity_damage:
                    message += f" -{action.sanity_damage} SANITY."
                self._emit(message, EventKind.DANGER)

    # ---- Combat ----------------------------------------------------------
    def _attack(self) -> Optional[AttackOutcome]:
        assert self.dungeon is not None
        outcome = self.combat.attack(self.dungeon.current_room, self.dungeon.player, self.player)
        if outcome is None:
            return None
        name = outcome.template.name
        self._emit(f"HIT {name} FOR {outcome.damage} DMG.", EventKind.COMBAT)
        if outcome.killed:
            self._emit(f"{name} ELIMINATED.", EventKind.LOOT)
            if outcome.loot is not None:
                self._emit(f"{name} DROPPED {outcome.loot.name}.", EventKind.LOOT)
        else:
            self._report_enemy_actions(outcome.enemy_actions)
        return outcome

    def _auto_combat_round(self) -> Optional[StopReason]:
        if self.phase is not GamePhase.RAID or self.dungeon is None:
            return StopReason.RAID_OVER
        if self.combat.find_target(self.dungeon.current_room, self.dungeon.player) is None:
            self._emit("NO TARGETS IN RANGE. STOPPING AUTO-COMBAT.", EventKind.INFO)
            return StopReason.NO_TARGET
        if self.player.hp < self.config.auto_combat_min_hp:
            self._emit("HP CRITICAL! STOPPING AUTO-COMBAT.", EventKind.DANGER)
            return StopReason.LOW_HP

        outcome = self._attack()
        self._check_fatal()
        if self.phase is not GamePhase.RAID:
            return StopReason.RAID_OVER
        if outcome is not None and outcome.killed and self.config.auto_combat_stop_on_kill:
            self._emit("TARGET DESTROYED.", EventKind.INFO)
            return StopReason.KILL
        return None

    def step_auto_combat(self) -> List[LogEvent]:
        """Run one auto-combat round, if auto-combat is engaged."""
        return self._collect(self.auto_combat.step)

    def run_auto_combat(self, sleep: Callable[[float], None] = time.sleep) -> List[LogEvent]:
        """Block until auto-combat stops. No-op when it is not engaged."""
        if not self.auto_combat.running:
            return []
        return self._collect(lambda: self.auto_combat.run(sleep=sleep))

    # ---- Items -----------------------------------------------------------
    def _search(self) -> None:
        assert self.dungeon is not None
        room = self.dungeon.current_room
        tile = room.tile_at(self.dungeon.player)
        if tile.loot is None:
            self._emit("NOTHING FOUND.", EventKind.INFO)
            return
        self.inventory.pick_up(tile.loot)
        room.set_tile(tile.with_loot(None))
        self._emit(f"PICKED UP: {tile.loot.name}", EventKind.LOOT)

    def _consume(self, arg: str) -> None:
        if not arg and not any(i.type is ItemType.CONSUMABLE for i in self.player.inventory):
            self._usage("EAT")
            return
        result = self.inventory.consume(arg or None)
        effect = result.item.effect
        message = f"CONSUMED {result.item.name}."
        if effect is not None and effect.hp_delta:
            message += f" +{effect.hp_delta} HP."
        if effect is not None and effect.sanity_delta:
            message += f" +{effect.sanity_delta} SANITY."
        self._emit(message, EventKind.LOOT)
        self._enemy_turn()

    def _drop(self, arg: str) -> None:
        assert self.dungeon is not None
        if not arg:
            self._usage("DROP")
            return
        room = self.dungeon.current_room
        tile = room.tile_at(self.dungeon.player)
        if tile.loot is not None:
            self._emit("NO ROOM TO DROP HERE.", EventKind.DANGER)
            return
        item = self.inventory.drop(arg)
        room.set_tile(tile.with_loot(item))
        self._emit(f"DROPPED {item.name}.", EventKind.INFO)

    def _secure(self, arg: str) -> None:
        if not arg:
            self._usage("SECURE")
            return
        item = self.inventory.secure(arg)
        self._emit(f"SECURED {item.name}.", EventKind.LOOT)

    def _equip(self, arg: str) -> None:
        if not arg:
            self._usage("EQUIP")
            return
        item = self.inventory.equip(arg)
        self._emit(f"EQUIPPED: {item.name}", EventKind.LOOT)

    # ---- Information -----------------------------------------------------
    def _scan(self) -> None:
        assert self.dungeon is not None
        room = self.dungeon.current_room
        pos = self.dungeon.player
        found = False
        for entity in room.entities:
            dist = entity.coord.manhattan(pos)
            if dist <= self.config.vision_radius and has_line_of_sight(room, pos, entity.coord):
                name = self.catalog.enemy(entity.template_id).name
                self._emit(f"TARGET: {name} [HP: {entity.hp}/{entity.max_hp}] DIST: {dist}", EventKind.DANGER)
                found = True
        if not found:
            self._emit("NO VISIBLE HOSTILES.", EventKind.INFO)

    def _status(self) -> None:
        p = self.player
        weapon = p.equipped_weapon.name if p.equipped_weapon else "Fists"
        self._emit(f"HP: {p.hp}/{p.max_hp} | SANITY: {p.sanity}/{p.max_sanity}", EventKind.INFO)
        self._emit(f"ATK: {p.attack_damage(self.config.base_damage)} (WPN: {weapon})", EventKind.COMBAT)
        self._emit(
            f"PACK: {len(p.inventory)}/{p.max_inventory_size} | CREDITS: ${p.credits}", EventKind.INFO
        )

    # ---- Raid end --------------------------------------------------------
    def _extract(self) -> None:
        assert self.dungeon is not None
        tile = self.dungeon.current_room.tile_at(self.dungeon.player)
        if tile.kind is not TileKind.EXIT:
            self._emit("MUST BE AT EXIT TO EXTRACT.", EventKind.DANGER)
            return
        self._emit("EXTRACTION SUCCESSFUL.", EventKind.LOOT)
        self.dungeon = None
        self.phase = GamePhase.HIDEOUT
        logger.info("Extraction successful (%d items carried)", len(self.player.inventory))

    def _check_fatal(self) -> None:
        if self.phase is not GamePhase.RAID:
            return
        if self.player.is_dead:
            self._game_over("PHYSICAL TRAUMA (HP DEPLETED)")
        elif self.player.is_broken:
            self._game_over("MENTAL BREAKDOWN (SANITY DEPLETED)")

    def _game_over(self, reason: str) -> None:
        self._emit(f"CRITICAL FAILURE: {reason}", EventKind.DANGER)
        self._emit("ACADEMIC CAREER TERMINATED.", EventKind.DANGER)
        self.player.inventory.clear()
        self.player.equipped_weapon = None
        self.dungeon = None
        self.phase = GamePhase.GAME_OVER
        logger.info("Game over: %s", reason)
