"""
Event emitter for recording game events to files and notifying listeners.
"""

from contextlib import contextmanager
from typing import Callable, Dict, Any, Optional, List, Iterator
from threading import Lock, local

from .run_recorder import RunRecorder


EventListener = Callable[[str, Dict[str, Any]], None]


class EventEmitter:
    """Event emitter that records game events to files and forwards them to listeners."""

    def __init__(self, run_recorder: Optional[RunRecorder] = None):
        self.run_recorder = run_recorder
        self._listeners: List[EventListener] = []
        self._lock = Lock()
        self._local = local()  # Per-thread deferral depth and held events

    def register_listener(self, listener: EventListener) -> None:
        """Register a callback receiving (event_type, data) for every event."""
        with self._lock:
            self._listeners.append(listener)

    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit an event by recording it to file and calling listeners."""
        if self.run_recorder:
            try:
                self.run_recorder.record_event(event_type, data)
            except (OSError, TypeError, ValueError) as e:
                # Don't let recording errors break the game
                print(f"Error recording event: {e}")

        if getattr(self._local, "depth", 0):
            self._local.pending.append((event_type, data))
            return
        self._notify(event_type, data)

    @contextmanager
    def deferred(self) -> Iterator[None]:
        """
        Hold listener calls made by this thread until the block exits.

        Events are still recorded immediately, in order. Listeners run after
        the outermost block ends, so they may call back into whatever the
        block was holding locked. Events held by a block that raises are dropped.
        """
        depth = getattr(self._local, "depth", 0)
        if depth == 0:
            self._local.pending = []
        self._local.depth = depth + 1
        try:
            yield
        finally:
            self._local.depth = depth

        if depth == 0:
            pending, self._local.pending = self._local.pending, []
            for event_type, data in pending:
                self._notify(event_type, data)

    def _notify(self, event_type: str, data: Dict[str, Any]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event_type, data)

    def emit_game_start(self, players: List[str], variant: str, impostor_count: int,
                        jester_enabled: bool) -> None:
        """Emit game start event (roles stay hidden)."""
        self._emit("game_start", {
            "players": players,
            "variant": variant,
            "impostor_count": impostor_count,
            "jester_enabled": jester_enabled
        })

    def emit_roles_assigned(self, roles: Dict[str, str], jester_clue_players: List[str]) -> None:
        """Emit the hidden role assignment (for recordings and the reveal)."""
        self._emit("roles_assigned", {
            "roles": roles,
            "jester_clue_players": jester_clue_players
        })

    def emit_phase_change(self, phase: str, round_number: int) -> None:
        """Emit phase change event."""
        self._emit("phase_change", {
            "phase": phase,
            "round_number": round_number
        })

    def emit_turn_change(self, player_id: str, turn_order: List[str], round_number: int) -> None:
        """Emit words game speaking turn event."""
        self._emit("turn_change", {
            "player": player_id,
            "turn_order": turn_order,
            "round_number": round_number
        })

    def emit_vote(self, voter: str, targets: List[str], round_number: int, subround: int = 0) -> None:
        """Emit individual vote event. Subround 0 is the normal vote."""
        self._emit("vote", {
            "voter": voter,
            "targets": targets,
            "round_number": round_number,
            "subround": subround
        })

    def emit_vote_results(self, vote_counts: Dict[str, int], voters: Dict[str, List[str]],
                          round_number: int, subround: int = 0) -> None:
        """Emit voting results event."""
        self._emit("vote_results", {
            "vote_counts": vote_counts,
            "voters": voters,
            "round_number": round_number,
            "subround": subround
        })

    def emit_tie_break_started(self, contenders: List[str], remaining_slots: int,
                               round_number: int, subround: int) -> None:
        """Emit tie-break start event."""
        self._emit("tie_break_started", {
            "contenders": contenders,
            "remaining_slots": remaining_slots,
            "round_number": round_number,
            "subround": subround
        })

    def emit_elimination_batch(self, player_ids: List[str], reason: str, round_number: int,
                               version: int) -> None:
        """Emit elimination batch event."""
        self._emit("elimination_batch", {
            "players": player_ids,
            "reason": reason,
            "round_number": round_number,
            "version": version
        })

    def emit_winner_determined(self, winner_type: str, winners: List[str], reason: Optional[str],
                               round_number: int) -> None:
        """Emit game over event."""
        self._emit("winner_determined", {
            "winner_type": winner_type,
            "winners": winners,
            "reason": reason,
            "round_number": round_number
        })

    def emit_announcement(self, message: str, phase: str, round_number: int) -> None:
        """Emit judge announcement event."""
        self._emit("announcement", {
            "message": message,
            "phase": phase,
            "round_number": round_number
        })

    def emit_game_state_update(self, game_state: Dict[str, Any]) -> None:
        """Emit game state update event."""
        self._emit("game_state_update", {
            "game_state": game_state
        })
