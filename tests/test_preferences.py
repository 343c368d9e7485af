from __future__ import annotations

from datetime import date

from pycriticalmaps.preferences import InMemoryKeyValueStore, Preferences


def _prefs(**initial: object) -> Preferences:
    return Preferences(InMemoryKeyValueStore(dict(initial)))


def test_next_ride_radius_defaults_to_20() -> None:
    assert _prefs().next_ride_radius == 20
    assert _prefs(nextRideRadius=0).next_ride_radius == 20
    assert _prefs(nextRideRadius="garbage").next_ride_radius == 20


def test_next_ride_radius_round_trip() -> None:
    prefs = _prefs()
    prefs.next_ride_radius = 35
    assert prefs.next_ride_radius == 35


def test_observation_mode_notifies_observers() -> None:
    prefs = _prefs()
    seen: list[bool] = []
    unsubscribe = prefs.on_observation_mode_changed(seen.append)

    prefs.observation_mode = True
    unsubscribe()
    prefs.observation_mode = False

    assert seen == [True]
    assert prefs.observation_mode is False


def test_username_and_theme_can_be_cleared() -> None:
    store = InMemoryKeyValueStore()
    prefs = Preferences(store)
    prefs.username = "rider"
    prefs.theme = "dark"
    assert (prefs.username, prefs.theme) == ("rider", "dark")

    prefs.username = None
    assert prefs.username is None
    assert store.get("username") is None


def test_record_usage_counts_days_once() -> None:
    prefs = _prefs()

    prefs.record_usage(date(2026, 3, 1))
    prefs.record_usage(date(2026, 3, 1))
    prefs.record_usage(date(2026, 3, 2))

    assert prefs.uses_counter == 3
    assert prefs.days_counter == 2
    assert prefs.last_day_used == date(2026, 3, 2)


def test_last_message_read_time_tolerates_garbage() -> None:
    assert _prefs(lastMessageReadTimeInterval="nope").last_message_read_time == 0.0
    assert _prefs().last_rated_version is None
