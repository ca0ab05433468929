"""
Unit tests for PlayerDirectory class.
Tests: resolve_or_create, register, find, list_players
"""
import pytest

from shared.errors import DuplicatePlayerName, PersistenceFailure
from sportmanager.models import Player


class TestResolveOrCreate:

    def test_creates_unseen_name(self, directory):
        player = directory.resolve_or_create("Alice")

        assert player.id is not None
        assert player.name == "Alice"
        assert player.external_id is None

    def test_returns_existing(self, directory):
        first = directory.resolve_or_create("Alice")
        second = directory.resolve_or_create("Alice")

        assert first is second
        assert len(directory.list_players()) == 1

    def test_name_is_case_sensitive(self, directory):
        alice = directory.resolve_or_create("Alice")
        lower = directory.resolve_or_create("alice")

        assert alice is not lower
        assert len(directory.list_players()) == 2

    def test_empty_name_rejected(self, directory):
        with pytest.raises(ValueError):
            directory.resolve_or_create("")

    def test_existing_external_id_not_overwritten(self, directory):
        directory.register("Alice", external_id=1)
        player = directory.resolve_or_create("Alice", external_id=2)
        assert player.external_id == 1

    def test_lost_creation_race_returns_winner(self, directory, store, mocker):
        """A concurrent creator inserted the name between our lookup and insert."""
        winner = Player(name="Alice", external_id=None)
        winner.id = 77
        mocker.patch.object(store, 'find_player', side_effect=[None, winner])
        mocker.patch.object(store, 'add_player', side_effect=DuplicatePlayerName("Alice"))

        player = directory.resolve_or_create("Alice")

        assert player is winner
        assert store.add_player.call_count == 1

    def test_race_without_visible_winner_fails(self, directory, store, mocker):
        mocker.patch.object(store, 'find_player', return_value=None)
        mocker.patch.object(store, 'add_player', side_effect=DuplicatePlayerName("Alice"))

        with pytest.raises(PersistenceFailure) as exc_info:
            directory.resolve_or_create("Alice")

        assert not isinstance(exc_info.value, DuplicatePlayerName)


class TestRegister:

    def test_register(self, directory):
        player = directory.register("Bob", external_id=123456789)

        assert player.name == "Bob"
        assert player.external_id == 123456789
        assert directory.find("Bob") is player

    def test_register_duplicate(self, directory):
        directory.register("Bob")

        with pytest.raises(DuplicatePlayerName) as exc_info:
            directory.register("Bob")

        assert exc_info.value.status_code == 409
        assert isinstance(exc_info.value, PersistenceFailure)

    def test_register_empty_name(self, directory):
        with pytest.raises(ValueError):
            directory.register("")


class TestListPlayers:

    def test_empty(self, directory):
        assert directory.list_players() == []

    def test_creation_order(self, directory):
        for name in ["Carol", "Alice", "Bob"]:
            directory.resolve_or_create(name)

        assert [p.name for p in directory.list_players()] == ["Carol", "Alice", "Bob"]

    def test_find_missing(self, directory):
        assert directory.find("Nobody") is None
