import pytest

from turnlist.admin import registrants_csv
from turnlist.errors import UnauthorizedError
from turnlist.models import Registrant
from turnlist.registration import register


def test_toggle_registrations(controls, token, store):
    assert controls.toggle_registrations(token) is True
    assert store.read_document().settings.registrations_closed is True
    assert controls.toggle_registrations(token) is False
    assert store.read_document().settings.registrations_closed is False


@pytest.mark.parametrize("game", [0, 6, -1, 100])
def test_set_active_game_ignores_out_of_range(controls, token, store, game):
    assert controls.set_active_game(token, game) is False
    assert store.read_document().settings.active_game == 1


def test_set_active_game(controls, token, store):
    assert controls.set_active_game(token, 3) is True
    assert store.read_document().settings.active_game == 3
    assert controls.set_active_game(token, 5) is True
    assert store.read_document().settings.active_game == 5


def test_list_registrants_sorted_by_created_at(controls, token, store):
    with store.transaction() as doc:
        doc.students.extend([
            Registrant("b", "Bo", "5559876543", 1, 2, "2024-01-01T10:00:00.000Z"),
            Registrant("a", "Ann", "5551234567", 1, 1, "2024-01-01T09:00:00.000Z"),
        ])
    assert [s.id for s in controls.list_registrants(token)] == ["a", "b"]


def test_export_csv_quotes_fields():
    rows = [
        Registrant("1", "Ann", "5551234567", 1, 1, "2024-01-01T09:00:00.000Z"),
        Registrant("2", 'Bo,"Jr"', "5559876543", 1, 2, "2024-01-01T10:00:00.000Z"),
    ]
    assert registrants_csv(rows) == (
        '"name","phone","game","turnNumber","createdAt"\n'
        '"Ann","5551234567","1","1","2024-01-01T09:00:00.000Z"\n'
        '"Bo,""Jr""","5559876543","1","2","2024-01-01T10:00:00.000Z"'
    )


def test_export_csv_missing_fields_render_empty():
    rows = [Registrant("1", "Old", None, None, None, None)]
    assert registrants_csv(rows).splitlines()[1] == '"Old","","","",""'


def test_export_csv_header_only():
    assert registrants_csv([]) == '"name","phone","game","turnNumber","createdAt"'


def test_export_through_controls(controls, token, store):
    register(store, "Ann", "555-123-4567")
    lines = controls.export_csv(token).split("\n")
    assert len(lines) == 2
    assert lines[1].startswith('"Ann","5551234567","1","1","')


@pytest.mark.parametrize("call", [
    lambda c, t: c.toggle_registrations(t),
    lambda c, t: c.set_active_game(t, 3),
    lambda c, t: c.list_registrants(t),
    lambda c, t: c.overview(t),
    lambda c, t: c.export_csv(t),
    lambda c, t: c.logout(t),
])
@pytest.mark.parametrize("token", [None, "", "forged.token"])
def test_operations_require_trust(controls, store, call, token):
    with pytest.raises(UnauthorizedError):
        call(controls, token)
    assert store.read_document().settings.registrations_closed is False
    assert store.read_document().settings.active_game == 1


def test_logout_revokes(controls, guard, token):
    controls.logout(token)
    assert not guard.is_trusted(token)
    with pytest.raises(UnauthorizedError):
        controls.toggle_registrations(token)
