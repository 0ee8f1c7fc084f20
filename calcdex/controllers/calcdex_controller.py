from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session, sessionmaker

from ..db.base import session_scope
from ..db.repository import list_presets, save_preset
from ..models.pokemon import Combatant, Preset
from ..models.snapshot import BattleSnapshot
from ..parsing.dehydrators import dehydrate_field, dehydrate_pokemon
from ..parsing.showdown_parser import parse_showdown_team
from ..services.matchup import CalcPokemonInput, create_matchup
from ..services.move_options import MoveOptionGroup, build_move_options
from ..services.presets import find_applied_preset
from ..services.store import BattleState, BattleStore

log = logging.getLogger(__name__)


class CalcdexController:
    """Orquesta store, dex y repositorio de presets para la capa de presentación."""

    def __init__(self, dex=None, session_factory: sessionmaker | None = None):
        self.dex = dex
        self.store = BattleStore(dex=dex)
        self.session_factory = session_factory

    # ---------- estado ----------
    def sync(self, battle: Mapping[str, Any]) -> Optional[BattleState]:
        snapshot = BattleSnapshot.from_client(battle)
        if snapshot is None:
            log.debug("Batalla ignorada: no es un objeto")
            return None
        return self.store.sync_battle(snapshot)

    def edit(self, battle_id: str, calcdex_id: str, name: str, value) -> Optional[Combatant]:
        return self.store.edit(battle_id, calcdex_id, name, value)

    def toggle_ability(self, battle_id: str, calcdex_id: str, on: bool) -> Optional[Combatant]:
        return self.store.toggle_ability(battle_id, calcdex_id, on)

    # ---------- matchup ----------
    def matchup(
        self,
        battle_id: str,
        attacker_id: str,
        defender_id: str,
        move_name: Optional[str] = None,
    ) -> Optional[Tuple[CalcPokemonInput, CalcPokemonInput]]:
        state = self.store.battle(battle_id)
        if state is None:
            return None
        return create_matchup(
            state.format,
            state.combatants.get(attacker_id),
            state.combatants.get(defender_id),
            move_name,
            state.field,
        )

    def move_options(self, battle_id: str, calcdex_id: str) -> List[MoveOptionGroup]:
        state = self.store.battle(battle_id)
        if state is None:
            return []
        return build_move_options(state.format, state.combatants.get(calcdex_id), self.dex)

    # ---------- presets ----------
    def _session(self):
        return session_scope(self.session_factory)

    def import_presets(self, text: str, format: Optional[str] = None, source: str = "import") -> List[Preset]:
        """Importa texto de Showdown; lanza ValueError si no se puede interpretar."""
        presets = parse_showdown_team(text, format=format, source=source)
        if not presets:
            raise ValueError("No hay sets para importar.")
        if self.session_factory is not None:
            with self._session() as s:
                for p in presets:
                    save_preset(s, p, raw_text=text)
        return presets

    def presets_for(self, species: Optional[str], format: Optional[str] = None,
                    session: Session | None = None) -> List[Preset]:
        if not species:
            return []
        if session is not None:
            return list_presets(session, species=species, format=format)
        if self.session_factory is None:
            return []
        with self._session() as s:
            return list_presets(s, species=species, format=format)

    def applied_preset(self, battle_id: str, calcdex_id: str,
                       presets: Optional[List[Preset]] = None) -> Optional[Preset]:
        state = self.store.battle(battle_id)
        if state is None:
            return None
        c = state.combatants.get(calcdex_id)
        if c is None:
            return None
        if presets is None:
            presets = self.presets_for(c.species_forme, state.format)
        return find_applied_preset(state.format, c, presets)

    # ---------- hidratación ----------
    def dehydrate(self, battle_id: str) -> Dict[str, str]:
        """{'field': ..., '<calcdex_id>': ...} listo para guardar como clave-valor."""
        state = self.store.battle(battle_id)
        if state is None:
            return {}
        out = {"field": dehydrate_field(state.field)}
        for cid, c in state.combatants.items():
            encoded = dehydrate_pokemon(c)
            if encoded:
                out[cid] = encoded
        return out
