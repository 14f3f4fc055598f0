"""
Tests for reqmods.policy — deny rule store and abort switches.
"""

import pytest

from reqmods.policy import (
    DEFAULT_DENY_REASON,
    DEFAULT_POLICY,
    DeniedModuleRule,
    PolicyConfig,
    PolicyStore,
    parse_yes_no,
)


# ── PolicyStore ──────────────────────────────────────────────

class TestPolicyStore:
    def test_add_and_find(self):
        store = PolicyStore()
        store.add_deny_rule("chanfilter", "banned")

        rule = store.find_deny_rule("chanfilter")
        assert rule is not None
        assert rule.reason == "banned"

    def test_lookup_is_case_insensitive(self):
        store = PolicyStore()
        store.add_deny_rule("ChanFilter", "banned")

        assert store.find_deny_rule("CHANFILTER") is not None
        assert "chanfilter" in store

    def test_empty_reason_gets_default(self):
        store = PolicyStore()
        store.add_deny_rule("floodbot", "")
        store.add_deny_rule("spambot")

        assert store.find_deny_rule("floodbot").reason == DEFAULT_DENY_REASON
        assert store.find_deny_rule("spambot").reason == DEFAULT_DENY_REASON
        assert DEFAULT_DENY_REASON == "A forbidden module is being used"

    def test_same_name_overwrites(self):
        store = PolicyStore()
        store.add_deny_rule("floodbot", "first")
        store.add_deny_rule("FLOODBOT", "second")

        assert len(store) == 1
        assert store.find_deny_rule("floodbot").reason == "second"

    def test_unknown_name_returns_none(self):
        store = PolicyStore()
        assert store.find_deny_rule("nothing") is None
        assert 42 not in store

    def test_clear_drops_everything(self):
        store = PolicyStore()
        store.add_deny_rule("a", "x")
        store.add_deny_rule("b", "y")
        store.clear()

        assert len(store) == 0
        assert store.find_deny_rule("a") is None

    def test_rules_sorted_by_key(self):
        store = PolicyStore()
        store.add_deny_rule("zeta")
        store.add_deny_rule("Alpha")

        assert [r.name for r in store.rules()] == ["Alpha", "zeta"]


class TestDeniedModuleRule:
    def test_frozen(self):
        rule = DeniedModuleRule(name="x", reason="y")
        with pytest.raises(AttributeError):
            rule.reason = "z"

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError, match="name"):
            DeniedModuleRule(name="", reason="y")


# ── PolicyConfig ─────────────────────────────────────────────

class TestPolicyConfig:
    def test_defaults_all_off(self):
        assert DEFAULT_POLICY == PolicyConfig(
            squit_on_deny=False,
            squit_on_missing=False,
            squit_on_mismatch=False,
        )

    def test_with_switches_only_touches_named(self):
        policy = PolicyConfig(squit_on_missing=True).with_switches(
            {"squit-on-deny": "yes"}
        )
        assert policy.squit_on_deny is True
        assert policy.squit_on_missing is True
        assert policy.squit_on_mismatch is False

    def test_with_switches_unknown_rejected(self):
        with pytest.raises(ValueError, match="Unknown policy switch"):
            DEFAULT_POLICY.with_switches({"squit-on-everything": "yes"})

    def test_to_dict(self):
        assert PolicyConfig(squit_on_mismatch=True).to_dict() == {
            "squit-on-deny": False,
            "squit-on-missing": False,
            "squit-on-mismatch": True,
        }

    @pytest.mark.parametrize("raw", ["yes", "YES", "true", "on", "1"])
    def test_yes_values(self, raw):
        assert parse_yes_no(raw) is True

    @pytest.mark.parametrize("raw", ["no", "off", "0", "maybe", ""])
    def test_anything_else_is_no(self, raw):
        assert parse_yes_no(raw) is False
