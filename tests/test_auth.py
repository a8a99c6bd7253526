import pytest

from turnlist.auth import AdminGuard
from turnlist.errors import UnauthorizedError


def test_check_pin(guard):
    assert guard.check_pin("4321")
    assert guard.check_pin("  4321\n")
    assert not guard.check_pin("wrong")
    assert not guard.check_pin("")
    assert not guard.check_pin(None)


def test_issued_token_is_trusted(guard):
    token = guard.issue_trust()
    assert guard.is_trusted(token)
    assert guard.issue_trust() != token


@pytest.mark.parametrize("token", [None, "", "1", "abc", "abc.", ".abc", "abc.def"])
def test_untrusted_tokens(guard, token):
    assert not guard.is_trusted(token)
    with pytest.raises(UnauthorizedError):
        guard.require(token)


def test_tampered_token(guard):
    nonce, issued, sig = guard.issue_trust().split(".")
    flipped = "1" if sig[-1] == "0" else "0"
    assert not guard.is_trusted(f"{nonce}x.{issued}.{sig}")
    assert not guard.is_trusted(f"{nonce}.{int(issued) + 1}.{sig}")
    assert not guard.is_trusted(f"{nonce}.{issued}.{sig[:-1]}{flipped}")


@pytest.mark.parametrize("token", ["abc.\u00e9", "abc.1.\u00e9", "\u00e9.1.abc", "abc.1.\udcff"])
def test_non_ascii_token_is_untrusted(guard, token):
    assert not guard.is_trusted(token)
    guard.revoke_trust(token)


def test_token_from_other_secret(guard):
    other = AdminGuard("4321", "another-secret")
    assert not guard.is_trusted(other.issue_trust())


def test_revoke(guard):
    token = guard.issue_trust()
    other = guard.issue_trust()
    guard.revoke_trust(token)
    assert not guard.is_trusted(token)
    assert guard.is_trusted(other)
    # Повторный отзыв и отзыв мусора ничего не ломают
    guard.revoke_trust(token)
    guard.revoke_trust("junk")


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_token_expires():
    clock = FakeClock()
    guard = AdminGuard("4321", "test-secret", max_age=60, clock=clock)
    token = guard.issue_trust()
    clock.now += 59
    assert guard.is_trusted(token)
    clock.now += 1
    assert not guard.is_trusted(token)


def test_revoked_nonces_are_pruned_after_expiry():
    clock = FakeClock()
    guard = AdminGuard("4321", "test-secret", max_age=60, clock=clock)
    old = guard.issue_trust()
    guard.revoke_trust(old)
    assert len(guard._revoked) == 1

    clock.now += 61
    fresh = guard.issue_trust()
    guard.revoke_trust(fresh)
    assert len(guard._revoked) == 1
    assert not guard.is_trusted(old)
    assert not guard.is_trusted(fresh)
