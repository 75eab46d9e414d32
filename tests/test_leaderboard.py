"""
Tests for the leaderboard projector and the change feed driving it
"""
import asyncio
import threading

from debug_contest.core.feed import updates_only
from debug_contest.core.leaderboard import LeaderboardProjector
from debug_contest.models import ChangeEvent


def _register(store, names):
    teams = []
    for name in names:
        team, _ = store.find_or_create_team(name)
        teams.append(team)
    return teams


def _add_points(store, team, points):
    """Award points without moving the team's pointer"""
    return store.advance_team(team.id, team.current_qid, team.current_qid, points)


def _event(team_id, score):
    return ChangeEvent(table="teams", type="UPDATE", row={"id": team_id, "score": score})


def _scores(projector):
    return [entry["score"] for entry in projector.entries()]


def test_seed_orders_by_score_desc(store, make_question):
    make_question()
    teams = _register(store, ["A", "B", "C"])
    _add_points(store, teams[1], 30)
    _add_points(store, teams[2], 10)

    projector = LeaderboardProjector(store, size=10)
    seeded = projector.seed()

    assert [e.team_name for e in seeded] == ["B", "C", "A"]
    assert [e["rank"] for e in projector.entries()] == [1, 2, 3]


def test_seed_is_bounded_and_ties_keep_registration_order(store, make_question):
    make_question()
    names = [f"Team{i:02d}" for i in range(12)]
    _register(store, names)

    projector = LeaderboardProjector(store, size=10)
    seeded = projector.seed()

    assert len(seeded) == 10
    assert [e.team_name for e in seeded] == names[:10]


def test_update_for_tracked_team_resorts(store, make_question):
    make_question()
    teams = _register(store, ["A", "B", "C"])

    projector = LeaderboardProjector(store)
    projector.seed()

    assert projector.apply_update(_event(teams[2].id, 50))
    assert projector.entries()[0]["team_name"] == "C"
    assert _scores(projector) == [50, 0, 0]


def test_update_for_untracked_team_ignored(store, make_question):
    """Scenario 6: a team outside the seeded top 10 does not enter the view"""
    make_question()
    teams = _register(store, [f"Team{i:02d}" for i in range(11)])
    for idx, team in enumerate(teams[:10]):
        _add_points(store, team, 100 - idx)

    projector = LeaderboardProjector(store, size=10)
    projector.seed()
    before = projector.entries()
    assert teams[10].id not in projector.team_ids()

    assert not projector.apply_update(_event(teams[10].id, 1000))
    assert projector.entries() == before


def test_malformed_event_ignored(store, make_question):
    make_question()
    store.find_or_create_team("A")
    projector = LeaderboardProjector(store)
    projector.seed()
    assert not projector.apply_update(ChangeEvent(table="teams", type="UPDATE", row={}))


def test_sorted_after_every_update(store, make_question):
    make_question()
    teams = _register(store, ["A", "B", "C", "D", "E"])

    projector = LeaderboardProjector(store)
    projector.seed()

    for team_idx, score in [(0, 5), (3, 40), (1, 40), (0, 60), (4, 10), (3, 45), (2, 1)]:
        projector.apply_update(_event(teams[team_idx].id, score))
        scores = _scores(projector)
        assert scores == sorted(scores, reverse=True)


def test_tie_after_update_matches_fresh_seed(store, feed, make_question):
    """Re-sorted ties follow the same order a reconnecting viewer is seeded with"""
    make_question()
    teams = _register(store, ["A", "B", "C"])

    projector = LeaderboardProjector(store)
    projector.seed()
    feed.subscribe("teams", predicate=updates_only, callback=projector.apply_update)

    _add_points(store, teams[1], 5)
    _add_points(store, teams[0], 5)

    fresh = LeaderboardProjector(store)
    fresh.seed()
    assert projector.team_ids() == fresh.team_ids()
    assert projector.entries() == fresh.entries()


def test_feed_delivers_committed_updates(store, feed, make_question):
    """Projector subscribed to the feed follows score changes"""
    make_question()
    teams = _register(store, ["A", "B"])

    projector = LeaderboardProjector(store)
    projector.seed()
    feed.subscribe("teams", predicate=updates_only, callback=projector.apply_update)

    _add_points(store, teams[1], 25)

    assert projector.entries()[0]["team_name"] == "B"
    assert projector.entries()[0]["score"] == 25


def test_feed_predicate_filters_inserts(store, feed):
    subscription = feed.subscribe("teams", predicate=updates_only)
    store.find_or_create_team("A")
    assert subscription.pending() == []

    everything = feed.subscribe("teams")
    store.find_or_create_team("B")
    events = everything.pending()
    assert [e.type for e in events] == ["INSERT"]
    assert events[0].row["team_name"] == "B"


def test_feed_unsubscribe_and_failing_callback(store, feed, make_question):
    make_question()
    team, _ = store.find_or_create_team("A")
    received = []

    def broken(event):
        raise RuntimeError("boom")

    feed.subscribe("teams", callback=broken)
    subscription = feed.subscribe("teams", callback=received.append)

    _add_points(store, team, 5)
    assert len(received) == 1

    subscription.close()
    _add_points(store, store.get_team(team.id), 5)
    assert len(received) == 1
    assert feed.subscriber_count == 1


def test_feed_ignores_other_tables(feed):
    subscription = feed.subscribe("teams")
    feed.publish(ChangeEvent(table="questions", type="INSERT", row={"id": 1}))
    assert subscription.pending() == []


def test_publish_from_worker_thread_reaches_loop_queue(feed):
    """Sync handlers commit on a threadpool worker; the event lands on the subscriber's loop"""
    event = _event("team-1", 7)

    async def consume():
        subscription = feed.subscribe("teams", predicate=updates_only)
        worker = threading.Thread(target=feed.publish, args=(event,))
        worker.start()
        try:
            return await asyncio.wait_for(subscription.get(), timeout=1)
        finally:
            worker.join()
            subscription.close()

    received = asyncio.run(consume())
    assert received.row == {"id": "team-1", "score": 7}
