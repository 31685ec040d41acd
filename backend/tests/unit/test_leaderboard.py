from drivescore.services.leaderboard import LeaderboardEntry, display_name, rank_entries


def _entry(uid: str, avg: float, trips: int, name: str | None = None) -> LeaderboardEntry:
    return LeaderboardEntry(
        uid=uid,
        display_name=name or uid,
        trip_count=trips,
        total_score=avg * trips,
    )


def test_ties_share_rank_and_break_on_trip_count():
    ranked = rank_entries(
        [
            _entry("c", 3.0, 20),
            _entry("b", 4.5, 5),
            _entry("a", 4.5, 10),
        ]
    )

    assert [r.entry.uid for r in ranked] == ["a", "b", "c"]
    assert [r.rank for r in ranked] == [1, 1, 3]


def test_name_breaks_remaining_ties_case_insensitively():
    ranked = rank_entries(
        [
            _entry("1", 4.0, 3, name="zoe"),
            _entry("2", 4.0, 3, name="Adam"),
            _entry("3", 4.0, 3, name="bob"),
        ]
    )

    assert [r.entry.display_name for r in ranked] == ["Adam", "bob", "zoe"]
    assert {r.rank for r in ranked} == {1}


def test_users_without_trips_rank_last_with_zero_average():
    ranked = rank_entries([_entry("new", 0.0, 0), _entry("old", 2.0, 4)])

    assert ranked[0].entry.uid == "old"
    assert ranked[1].entry.avg_score == 0.0
    assert ranked[1].rank == 2


def test_display_name_from_email():
    assert display_name("jane.doe@example.com") == "jane.doe"
    assert display_name(None) == "User"
    assert display_name("") == "User"


def test_float_noise_in_averages_does_not_split_a_tie():
    noisy = LeaderboardEntry(uid="a", display_name="zed", trip_count=1, total_score=0.1 + 0.2)
    exact = LeaderboardEntry(uid="b", display_name="amy", trip_count=1, total_score=0.3)
    assert noisy.avg_score != exact.avg_score

    ranked = rank_entries([noisy, exact])

    assert [r.entry.display_name for r in ranked] == ["amy", "zed"]
    assert [r.rank for r in ranked] == [1, 1]
