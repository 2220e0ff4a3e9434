"""
Tests for the round controller state machine.
"""

import threading

from impasta.core import GamePhase, GameVariant, Role, WinnerType
from conftest import vote_all


def test_start_game_needs_three_players(make_controller):
    controller = make_controller(player_count=2, start=False)
    assert not controller.start_game()
    assert controller.phase == GamePhase.LOBBY


def test_start_game_assigns_roles(make_controller, recorded_events):
    emitter, events = recorded_events
    controller = make_controller(player_count=6, impostor_count=2, event_emitter=emitter)
    state = controller.game_state

    assert controller.phase == GamePhase.DISCUSSION
    assert state.round_number == 1
    assert state.impostor_count == 2
    assert len(state.assignment.players_with(Role.IMPOSTOR)) == 2

    event_types = [event_type for event_type, _ in events]
    assert "game_start" in event_types
    assert "roles_assigned" in event_types
    phases = [data["phase"] for event_type, data in events if event_type == "phase_change"]
    assert phases == ["role_assignment", "discussion"]


def test_single_elimination_ends_standard_game(make_controller):
    """5 players, one impostor; p2 takes three votes."""
    controller = make_controller(player_count=5, roles={"p2": Role.IMPOSTOR})
    assert controller.start_voting()

    vote_all(controller, {"p1": ["p2"], "p3": ["p2"], "p4": ["p2"], "p5": ["p3"]})
    assert controller.phase == GamePhase.VOTING  # p2 has not voted yet
    assert controller.force_submit()

    state = controller.game_state
    assert list(state.elimination) == ["p2"]
    assert state.get_player("p2").is_eliminated
    assert state.get_player("p2").role == Role.IMPOSTOR  # Kept for the reveal
    assert controller.phase == GamePhase.RESULTS
    assert state.winner.winner_type == WinnerType.INNOCENT
    assert state.winner.winner_ids == ["p1", "p3", "p4", "p5"]


def test_boundary_tie_then_resolution(make_controller, recorded_events):
    """6 players, two impostors: p1 goes outright, p2/p3 tie for the last slot."""
    emitter, events = recorded_events
    controller = make_controller(
        player_count=6, impostor_count=2,
        roles={"p1": Role.IMPOSTOR, "p5": Role.IMPOSTOR}, event_emitter=emitter,
    )
    state = controller.game_state
    controller.start_voting()
    assert controller.judge.votes_required() == 2

    vote_all(controller, {
        "p1": ["p2", "p3"],
        "p2": ["p1", "p3"],
        "p3": ["p1", "p2"],
        "p4": ["p1"],
        "p5": ["p4"],
        "p6": [],
    })

    assert state.last_tally == {"p1": 3, "p2": 2, "p3": 2, "p4": 1, "p5": 0, "p6": 0}
    assert controller.phase == GamePhase.TIE_BREAK
    assert list(state.elimination) == ["p1"]
    assert state.tie.contenders == ("p2", "p3")
    assert state.tie.remaining_slots == 1
    assert state.votes == {}
    assert controller.judge.votes_required() == 1

    # Eliminated players cannot vote, and only one target fits the slot
    assert not controller.submit_vote("p1", ["p2"])
    assert not controller.submit_vote("p4", ["p2", "p3"])

    vote_all(controller, {"p2": [], "p3": ["p2"], "p4": ["p2"], "p5": [], "p6": ["p3"]})

    assert list(state.elimination) == ["p1", "p2"]
    assert not state.tie.active
    assert controller.phase == GamePhase.RESULTS
    assert state.winner.winner_type == WinnerType.IMPOSTOR
    assert state.winner.winner_ids == ["p1", "p5"]

    tie_events = [data for event_type, data in events if event_type == "tie_break_started"]
    assert tie_events == [{"contenders": ["p2", "p3"], "remaining_slots": 1, "round_number": 1, "subround": 1}]
    reasons = [data["reason"] for event_type, data in events if event_type == "elimination_batch"]
    assert reasons == ["voting", "tie-break vote"]
    winners = [data for event_type, data in events if event_type == "winner_determined"]
    assert winners[0]["winner_type"] == "impostor"


def test_votes_for_non_contenders_are_dropped(make_controller):
    controller = make_controller(player_count=5, roles={"p5": Role.IMPOSTOR})
    controller.start_voting()
    vote_all(controller, {"p1": ["p2"], "p2": ["p3"], "p3": ["p2"], "p4": ["p3"], "p5": ["p1"]})
    assert controller.phase == GamePhase.TIE_BREAK

    # p1 is not a contender; the vote is kept but never counted
    vote_all(controller, {"p1": ["p1"], "p2": ["p3"], "p3": ["p1"], "p4": ["p3"], "p5": ["p2"]})

    assert list(controller.game_state.elimination) == ["p3"]
    assert controller.game_state.last_tally == {"p2": 1, "p3": 2}


def test_empty_tie_subround_forces_pick(make_controller, recorded_events):
    emitter, events = recorded_events
    controller = make_controller(player_count=5, roles={"p3": Role.IMPOSTOR}, event_emitter=emitter)
    controller.start_voting()
    vote_all(controller, {"p1": ["p3"], "p2": ["p3"], "p3": ["p2"], "p4": ["p2"], "p5": ["p1"]})
    assert controller.phase == GamePhase.TIE_BREAK

    # Time runs out with no re-votes at all
    assert controller.force_submit()

    state = controller.game_state
    assert list(state.elimination) == ["p2"]  # Seat order breaks the 2-2 total
    reasons = [data["reason"] for event_type, data in events if event_type == "elimination_batch"]
    assert reasons == ["tie-break pick"]
    assert state.winner.winner_type == WinnerType.IMPOSTOR


def test_jester_win(make_controller):
    controller = make_controller(
        player_count=5, jester_enabled=True, roles={"p1": Role.IMPOSTOR, "p3": Role.JESTER},
    )
    controller.start_voting()
    vote_all(controller, {"p1": ["p3"], "p2": ["p3"], "p3": ["p1"], "p4": ["p3"], "p5": ["p3"]})

    winner = controller.game_state.winner
    assert winner.winner_type == WinnerType.JESTER
    assert winner.winner_ids == ["p3"]


def test_abandon_tie_break_standard(make_controller):
    controller = make_controller(player_count=5, roles={"p5": Role.IMPOSTOR})
    controller.start_voting()
    vote_all(controller, {"p1": ["p2"], "p2": ["p3"], "p3": ["p2"], "p4": ["p3"], "p5": ["p1"]})
    controller.submit_vote("p1", ["p2"])

    assert controller.abandon_tie_break()

    state = controller.game_state
    assert not state.tie.active
    assert state.votes == {}
    assert controller.phase == GamePhase.RESULTS
    assert state.winner.winner_type == WinnerType.TIE
    assert state.winner.winners == []


def test_randomize_tie_and_host_flow(make_controller):
    """7 players in randomize: shared top count goes to a one-slot re-vote."""
    controller = make_controller(player_count=7, variant=GameVariant.RANDOMIZE, roles={"p7": Role.IMPOSTOR})
    state = controller.game_state
    controller.start_voting()

    vote_all(controller, {
        "p1": ["p2"], "p2": ["p3"], "p3": ["p1"], "p4": ["p1"],
        "p5": ["p1"], "p6": ["p2"], "p7": ["p2"],
    })
    assert controller.phase == GamePhase.TIE_BREAK
    assert state.tie.contenders == ("p1", "p2")
    assert state.tie.remaining_slots == 1

    vote_all(controller, {
        "p1": ["p2"], "p2": ["p1"], "p3": ["p1"], "p4": ["p1"],
        "p5": ["p2"], "p6": ["p1"], "p7": ["p1"],
    })

    assert list(state.elimination) == ["p1"]
    assert state.get_player("p1").role == Role.SPECTATOR
    assert state.assigned_role("p1") == Role.INNOCENT
    # Host decides what happens next
    assert controller.phase == GamePhase.VOTE_RESULTS
    assert state.winner is None

    assert controller.host_continue_game()
    assert controller.phase == GamePhase.DISCUSSION
    assert state.round_number == 2
    assert state.elimination.previous == ("p1",)

    assert controller.host_finish_game()
    assert controller.phase == GamePhase.RESULTS
    assert state.winner.winner_type == WinnerType.IMPOSTOR
    assert state.winner.reason == "host_ended"


def test_randomize_population_rule(make_controller):
    """Eliminations down to two active players hand the impostors the win."""
    controller = make_controller(player_count=5, variant=GameVariant.RANDOMIZE, roles={"p5": Role.IMPOSTOR})
    state = controller.game_state

    for target in ["p1", "p2", "p3"]:
        assert controller.start_voting()
        voters = [p.player_id for p in state.get_active_players()]
        vote_all(controller, {voter: [target] for voter in voters})
        if state.winner is None:
            assert controller.host_continue_game()

    assert len(state.get_active_players()) == 2
    assert state.winner.winner_type == WinnerType.IMPOSTOR
    assert state.winner.reason == "population"


def test_randomize_abandon_returns_to_results(make_controller):
    controller = make_controller(player_count=5, variant=GameVariant.RANDOMIZE, roles={"p5": Role.IMPOSTOR})
    controller.start_voting()
    vote_all(controller, {"p1": ["p2"], "p2": ["p1"], "p3": ["p4"], "p4": ["p3"], "p5": ["p5"]})
    assert controller.phase == GamePhase.TIE_BREAK

    assert controller.abandon_tie_break()
    assert controller.phase == GamePhase.VOTE_RESULTS
    assert controller.game_state.winner is None
    assert controller.host_continue_game()


def test_stalled_vote_stays_in_voting(make_controller):
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR})
    controller.start_voting()
    controller.game_state.impostor_count = 9  # More eliminations owed than targets

    assert controller.force_submit()

    assert controller.phase == GamePhase.VOTING
    assert list(controller.game_state.elimination) == []


def test_last_vote_wins(make_controller):
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR})
    controller.start_voting()
    controller.submit_vote("p2", ["p3"])
    controller.submit_vote("p2", ["p1"])
    assert controller.game_state.votes["p2"] == ["p1"]


def test_wrong_phase_operations_change_nothing(make_controller):
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR})

    assert not controller.submit_vote("p1", ["p2"])
    assert not controller.force_submit()
    assert not controller.abandon_tie_break()
    assert not controller.host_continue_game()
    assert not controller.host_finish_game()  # Standard games end on their own
    assert not controller.start_game()
    assert controller.phase == GamePhase.DISCUSSION
    assert controller.game_state.votes == {}


def test_return_to_lobby(make_controller):
    controller = make_controller(player_count=5, variant=GameVariant.RANDOMIZE, roles={"p5": Role.IMPOSTOR},
                                 start=False)
    controller.add_player("s1", "Watcher", spectator=True)
    assert controller.start_game()
    controller.start_voting()
    vote_all(controller, {f"p{i}": ["p1"] for i in range(1, 6)})
    assert controller.game_state.get_player("p1").role == Role.SPECTATOR

    assert controller.return_to_lobby()

    state = controller.game_state
    assert controller.phase == GamePhase.LOBBY
    assert len(state.players) == 6
    assert state.get_player("p1").role == Role.INNOCENT
    assert not state.get_player("p1").is_eliminated
    assert state.get_player("s1").role == Role.SPECTATOR
    assert list(state.elimination) == []
    assert state.round_number == 0
    assert state.winner is None
    assert controller.start_game()


def test_concurrent_votes_resolve_once(make_controller, recorded_events):
    emitter, events = recorded_events
    controller = make_controller(player_count=8, roles={"p8": Role.IMPOSTOR}, event_emitter=emitter)
    controller.start_voting()

    threads = [
        threading.Thread(target=controller.submit_vote, args=(f"p{i}", ["p8"]))
        for i in range(1, 9)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    batches = [data for event_type, data in events if event_type == "elimination_batch"]
    assert len(batches) == 1
    assert batches[0]["players"] == ["p8"]
    assert controller.game_state.winner.winner_type == WinnerType.INNOCENT


def test_get_state(make_controller):
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR})
    controller.start_voting()
    controller.submit_vote("p2", ["p1"])

    snapshot = controller.get_state()
    assert snapshot["phase"] == "voting"
    assert snapshot["votes"] == {"p2": ["p1"]}
    assert snapshot["eliminated_players"] == []


def test_retied_revote_opens_another_subround(make_controller, recorded_events):
    emitter, events = recorded_events
    controller = make_controller(player_count=5, roles={"p5": Role.IMPOSTOR}, event_emitter=emitter)
    state = controller.game_state
    controller.start_voting()
    vote_all(controller, {"p1": ["p2"], "p2": ["p3"], "p3": ["p2"], "p4": ["p3"], "p5": ["p1"]})
    assert state.tie.contenders == ("p2", "p3")

    # 2-2 again: nobody is picked, the contenders vote once more
    vote_all(controller, {"p1": ["p2"], "p2": ["p3"], "p3": ["p2"], "p4": ["p3"], "p5": ["p1"]})

    assert controller.phase == GamePhase.TIE_BREAK
    assert state.tie.contenders == ("p2", "p3")
    assert state.tie.subround == 2
    assert list(state.elimination) == []

    vote_all(controller, {"p1": ["p3"], "p2": ["p3"], "p3": ["p2"], "p4": ["p3"], "p5": ["p2"]})

    assert list(state.elimination) == ["p3"]
    assert controller.phase == GamePhase.RESULTS
    subrounds = [data["subround"] for event_type, data in events if event_type == "tie_break_started"]
    assert subrounds == [1, 2]
    reasons = [data["reason"] for event_type, data in events if event_type == "elimination_batch"]
    assert reasons == ["tie-break vote"]


def test_listener_can_read_state(make_controller, recorded_events):
    emitter, _ = recorded_events
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR}, event_emitter=emitter)
    seen = []

    def on_event(event_type, data):
        if event_type == "phase_change":
            seen.append(controller.get_state()["phase"])

    emitter.register_listener(on_event)

    worker = threading.Thread(target=controller.start_voting)
    worker.start()
    worker.join(timeout=3)

    assert not worker.is_alive()
    assert seen == ["voting"]
    assert controller.phase == GamePhase.VOTING


def test_listener_can_call_back_into_controller(make_controller, recorded_events):
    emitter, _ = recorded_events
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR}, event_emitter=emitter)

    def open_vote_right_away(event_type, data):
        if event_type == "phase_change" and data["phase"] == "discussion":
            controller.start_voting()

    emitter.register_listener(open_vote_right_away)
    controller.start_voting()
    vote_all(controller, {f"p{i}": ["p2"] for i in range(1, 6)})

    assert controller.phase == GamePhase.RESULTS
    assert controller.return_to_lobby()
    assert controller.start_game()
    assert controller.phase == GamePhase.VOTING


def test_words_discussion_turn_order(make_controller, recorded_events):
    emitter, events = recorded_events
    controller = make_controller(
        player_count=5, variant=GameVariant.WORDS, roles={"p1": Role.IMPOSTOR}, event_emitter=emitter,
    )
    state = controller.game_state
    turns = state.turns

    assert len(turns.order) == 5
    assert set(turns.order) == {"p1", "p2", "p3", "p4", "p5"}
    assert turns.current_player == turns.starting_player == turns.order[0]
    # Clockwise: seat order rotated to the starting player
    start = int(turns.starting_player[1:])
    assert list(turns.order) == [f"p{(start - 1 + i) % 5 + 1}" for i in range(5)]

    for expected in list(turns.order[1:]) + [turns.order[0]]:
        assert controller.advance_turn()
        assert state.turns.current_player == expected

    snapshot = controller.get_state()
    assert snapshot["turn_order"] == list(turns.order)
    assert snapshot["current_turn_player"] == turns.order[0]
    turn_events = [data["player"] for event_type, data in events if event_type == "turn_change"]
    assert turn_events == [turns.order[0]] + list(turns.order[1:]) + [turns.order[0]]

    controller.start_voting()
    assert not controller.advance_turn()


def test_standard_discussion_has_no_turns(make_controller):
    controller = make_controller(player_count=5, roles={"p1": Role.IMPOSTOR})
    assert not controller.game_state.turns.is_set
    assert controller.get_state()["current_turn_player"] is None
    assert not controller.advance_turn()
