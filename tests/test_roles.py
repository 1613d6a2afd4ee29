import pytest

from timber_store.auth.roles import Identity, Role


def test_roles_are_ordered():
    assert Role.CLIENT < Role.EMPLOYEE < Role.MANAGER < Role.ADMIN < Role.CEO


@pytest.mark.parametrize(
    "raw, role",
    [("Client", Role.CLIENT), ("employee", Role.EMPLOYEE), (" Manager ", Role.MANAGER), ("CEO", Role.CEO)],
)
def test_parse(raw, role):
    assert Role.parse(raw) is role


def test_parse_unknown():
    with pytest.raises(ValueError):
        Role.parse("Owner")
    with pytest.raises(ValueError):
        Role.parse(None)


def test_labels_round_trip():
    for role in Role:
        assert Role.parse(role.label) is role
    assert Role.CEO.label == "CEO"
    assert Role.ADMIN.label == "Admin"


def test_elevation_starts_at_manager():
    assert not Identity(1, Role.CLIENT).is_elevated
    assert not Identity(1, Role.EMPLOYEE).is_elevated
    assert Identity(1, Role.MANAGER).is_elevated
    assert Identity(1, Role.CEO).has(Role.ADMIN)
    assert not Identity(1, Role.EMPLOYEE).has(Role.MANAGER)
