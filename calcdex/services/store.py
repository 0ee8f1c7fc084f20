# calcdex/services/store.py
"""Almacén único de estado por batalla.

Único escritor: las reconciliaciones se serializan por (batalla, combatiente);
combatientes distintos se reconcilian en paralelo. Las lecturas devuelven copias.
"""
from __future__ import annotations
import copy
import logging
import threading
from dataclasses import dataclass, field as dc_field, replace
from typing import Dict, List, Optional, Tuple

from ..models.pokemon import Combatant, Field
from ..models.snapshot import BattleSnapshot, PokemonSnapshot
from .overrides import clear_override, set_override
from .reconciler import snapshot_calcdex_id, sync_field, sync_pokemon

log = logging.getLogger(__name__)


@dataclass
class BattleState:
    battle_id: str
    format: Optional[str] = None
    field: Field = dc_field(default_factory=Field)
    combatants: Dict[str, Combatant] = dc_field(default_factory=dict)


class BattleStore:
    def __init__(self, dex=None):
        self.dex = dex
        self._battles: Dict[str, BattleState] = {}
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[str, str], threading.Lock] = {}

    def _lock_for(self, battle_id: str, calcdex_id: str) -> threading.Lock:
        with self._guard:
            key = (battle_id, calcdex_id)
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _state(self, battle_id: str) -> BattleState:
        with self._guard:
            if battle_id not in self._battles:
                self._battles[battle_id] = BattleState(battle_id=battle_id)
            return self._battles[battle_id]

    # ---------- lectura ----------
    def battle(self, battle_id: str) -> Optional[BattleState]:
        with self._guard:
            state = self._battles.get(battle_id)
            return copy.deepcopy(state) if state is not None else None

    def combatant(self, battle_id: str, calcdex_id: str) -> Optional[Combatant]:
        with self._lock_for(battle_id, calcdex_id):
            state = self._battles.get(battle_id)
            if state is None:
                return None
            c = state.combatants.get(calcdex_id)
            return copy.deepcopy(c) if c is not None else None

    def combatants(self, battle_id: str, player_key: Optional[str] = None) -> List[Combatant]:
        state = self.battle(battle_id)
        if state is None:
            return []
        return [c for c in state.combatants.values() if player_key is None or c.player_key == player_key]

    # ---------- escritura ----------
    def _commit(self, state: BattleState, calcdex_id: str, combatant: Combatant) -> None:
        # las lecturas copian bajo _guard; toda escritura al estado pasa por aquí
        with self._guard:
            state.combatants[calcdex_id] = combatant

    def reconcile(self, battle_id: str, snapshot: Optional[PokemonSnapshot],
                  format: Optional[str] = None, game_type: Optional[str] = None) -> Optional[Combatant]:
        if snapshot is None:
            return None
        cid = snapshot_calcdex_id(snapshot)
        if not cid:
            return None
        state = self._state(battle_id)
        with self._lock_for(battle_id, cid):
            prev = state.combatants.get(cid)
            updated = sync_pokemon(
                prev, snapshot,
                format=format or state.format,
                dex=self.dex,
                game_type=game_type or state.field.game_type,
            )
            if updated is not None:
                self._commit(state, cid, updated)
            return copy.deepcopy(updated)

    def sync_battle(self, snapshot: Optional[BattleSnapshot]) -> Optional[BattleState]:
        if snapshot is None or not snapshot.battle_id:
            return None
        state = self._state(snapshot.battle_id)
        with self._lock_for(snapshot.battle_id, "__field__"):
            field = sync_field(state.field, snapshot)
            with self._guard:
                if snapshot.format:
                    state.format = snapshot.format
                state.field = field
        for side in snapshot.sides:
            for poke in side.pokemon:
                if not poke.player_key:
                    poke = replace(poke, player_key=side.player_key)
                self.reconcile(snapshot.battle_id, poke)
        log.debug("Batalla %s sincronizada (%d combatientes)", snapshot.battle_id, len(state.combatants))
        return self.battle(snapshot.battle_id)

    def edit(self, battle_id: str, calcdex_id: str, name: str, value) -> Optional[Combatant]:
        """Override del usuario; value=None lo resetea (CLEARED)."""
        state = self._state(battle_id)
        with self._lock_for(battle_id, calcdex_id):
            c = state.combatants.get(calcdex_id)
            if c is None:
                return None
            c = clear_override(c, name) if value is None else set_override(c, name, value)
            self._commit(state, calcdex_id, c)
            return copy.deepcopy(c)

    def toggle_ability(self, battle_id: str, calcdex_id: str, on: bool) -> Optional[Combatant]:
        state = self._state(battle_id)
        with self._lock_for(battle_id, calcdex_id):
            c = state.combatants.get(calcdex_id)
            if c is None or not c.ability_toggleable:
                return None
            c = copy.deepcopy(c)
            c.ability_toggled = bool(on)
            self._commit(state, calcdex_id, c)
            return copy.deepcopy(c)

    def destroy(self, battle_id: str) -> bool:
        with self._guard:
            existed = self._battles.pop(battle_id, None) is not None
            for key in [k for k in self._locks if k[0] == battle_id]:
                del self._locks[key]
        return existed
