import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.fixtures.services.fixture_service import FixtureService
from app.standings.services.standing_service import (
    StandingService,
    apply_result,
    new_standing,
    parse_score,
    revert_result,
)
from app.tournaments.services.tournament_service import TournamentService


def assert_consistent(row):
    assert row.played == row.won + row.drawn + row.lost
    assert row.gd == row.gf - row.ga
    assert row.points == row.won * 3 + row.drawn


def stats(row):
    return {
        "played": row.played, "won": row.won, "drawn": row.drawn, "lost": row.lost,
        "gf": row.gf, "ga": row.ga, "gd": row.gd, "points": row.points,
    }


def test_win_and_loss():
    home, away = new_standing("A"), new_standing("B")
    apply_result(home, 3, 1)
    apply_result(away, 1, 3)

    assert stats(home) == {"played": 1, "won": 1, "drawn": 0, "lost": 0, "gf": 3, "ga": 1, "gd": 2, "points": 3}
    assert stats(away) == {"played": 1, "won": 0, "drawn": 0, "lost": 1, "gf": 1, "ga": 3, "gd": -2, "points": 0}


def test_draw():
    home, away = new_standing("A"), new_standing("B")
    apply_result(home, 2, 2)
    apply_result(away, 2, 2)

    for row in (home, away):
        assert (row.played, row.drawn, row.points, row.gd) == (1, 1, 1, 0)


def test_derived_columns_are_recomputed_from_totals():
    row = new_standing("A")
    # Out-of-band corruption is healed by the next update
    row.points = 99
    row.gd = -50
    apply_result(row, 1, 0)
    assert row.points == 3
    assert row.gd == 1


def test_revert_is_inverse_of_apply():
    row = new_standing("A")
    apply_result(row, 4, 0)
    apply_result(row, 1, 1)
    before = stats(row)

    apply_result(row, 0, 2)
    revert_result(row, 0, 2)
    assert stats(row) == before


@pytest.mark.parametrize("value, expected", [(0, 0), (7, 7), ("3", 3), (" 12 ", 12)])
def test_parse_score_accepts_non_negative_integers(value, expected):
    assert parse_score(value) == expected


@pytest.mark.parametrize("value", [-1, "-1", "", None, "abc", "2.5", True, 2**31, "99999999999999999999"])
def test_parse_score_rejects_bad_input(value):
    with pytest.raises(ValidationError):
        parse_score(value)


@pytest.fixture
def league(db, make_identity):
    """A tournament with players A, B and C and a generated schedule."""
    a = make_identity("A")
    b = make_identity("B")
    c = make_identity("C")
    service = TournamentService(db)
    tournament = service.create_tournament("Cup", a)
    service.join(tournament.tournament_id, b)
    service.join(tournament.tournament_id, c)
    service.generate_fixtures(tournament.tournament_id)
    return tournament.tournament_id


def by_player(db, tournament_id):
    return {row.player: row for row in StandingService(db).get_standings(tournament_id)}


def test_record_result_updates_both_rows(db, league):
    # fixture 0 is A (home) v B (away)
    home, away = StandingService(db).record_result(league, 0, "3", "1")

    assert (home.player, away.player) == ("A", "B")
    assert stats(home) == {"played": 1, "won": 1, "drawn": 0, "lost": 0, "gf": 3, "ga": 1, "gd": 2, "points": 3}
    assert stats(away) == {"played": 1, "won": 0, "drawn": 0, "lost": 1, "gf": 1, "ga": 3, "gd": -2, "points": 0}

    fixture = FixtureService(db).list_fixtures(league)[0]
    assert (fixture.home_score, fixture.away_score, fixture.played) == (3, 1, True)


def test_rerecording_a_fixture_replaces_the_previous_result(db, league):
    service = StandingService(db)
    service.record_result(league, 0, 3, 1)
    service.record_result(league, 0, 0, 2)

    rows = by_player(db, league)
    assert stats(rows["A"]) == {"played": 1, "won": 0, "drawn": 0, "lost": 1, "gf": 0, "ga": 2, "gd": -2, "points": 0}
    assert stats(rows["B"]) == {"played": 1, "won": 1, "drawn": 0, "lost": 0, "gf": 2, "ga": 0, "gd": 2, "points": 3}


def test_unknown_fixture_index(db, league):
    with pytest.raises(NotFoundError):
        StandingService(db).record_result(league, 6, 1, 0)


def test_unknown_tournament(db):
    with pytest.raises(NotFoundError):
        StandingService(db).record_result("TR404", 0, 1, 0)


def test_invalid_score_changes_nothing(db, league):
    with pytest.raises(ValidationError):
        StandingService(db).record_result(league, 0, "-1", "2")

    assert all(row.played == 0 for row in by_player(db, league).values())
    assert not FixtureService(db).list_fixtures(league)[0].played


def test_invariants_and_order_hold_after_a_full_season(db, league):
    service = StandingService(db)
    scores = [(2, 0), (1, 1), (0, 3), (4, 4), (1, 2), (5, 1)]
    for index, (home_goals, away_goals) in enumerate(scores):
        service.record_result(league, index, home_goals, away_goals)

    standings = service.get_standings(league)
    for row in standings:
        assert_consistent(row)
        assert row.played == 4
    keys = [(row.points, row.gd) for row in standings]
    assert keys == sorted(keys, reverse=True)
    assert sum(row.gf for row in standings) == sum(row.ga for row in standings)


def test_updates_for_one_tournament_share_a_lock():
    from app.core.locks import tournament_lock

    assert tournament_lock("TR1") is tournament_lock("TR1")
    assert tournament_lock("TR1") is not tournament_lock("TR2")


def test_standings_rank_by_points_then_goal_difference(db, league):
    service = StandingService(db)
    service.record_result(league, 2, 1, 0)  # A v C
    service.record_result(league, 4, 3, 0)  # B v C
    service.record_result(league, 0, 1, 1)  # A v B

    standings = service.get_standings(league)
    assert [(row.player, row.points, row.gd) for row in standings] == [
        ("B", 4, 3),
        ("A", 4, 1),
        ("C", 0, -4),
    ]


def test_returned_rows_do_not_keep_the_session_busy(db, league):
    service = StandingService(db)
    home, away = service.record_result(league, 0, 2, 0)

    assert not db.in_transaction()
    assert (home.points, away.points) == (3, 0)
    # the same session can go straight on to the next result
    service.record_result(league, 1, 0, 0)
    assert {row.player: row.points for row in service.get_standings(league)} == {"A": 4, "B": 1, "C": 0}
