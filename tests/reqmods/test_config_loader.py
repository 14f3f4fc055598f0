"""
Tests for reqmods.config — two-phase validate/apply of
deny, require and policy blocks.
"""

import logging

import pytest

from reqmods.catalog import InMemoryModuleCatalog, ModuleCatalogEntry, ModuleScope
from reqmods.config import (
    BlockKind,
    ConfigEntry,
    ConfigLoader,
    classify_blocks,
    parse_config,
)
from reqmods.exceptions import (
    ConfigRejectedError,
    ConfigurationNotValidatedError,
)
from reqmods.policy import DEFAULT_POLICY, PolicyConfig, PolicyStore


def _catalog() -> InMemoryModuleCatalog:
    return InMemoryModuleCatalog([
        ModuleCatalogEntry(name="require-modules", version="5.0"),
        ModuleCatalogEntry(name="bar", version="3.0.0"),
        ModuleCatalogEntry(name="halfway", version="1.0", loaded=False),
    ])


class VanishingCatalog:
    """Finds modules while validating, loses them before apply."""

    def __init__(self, inner: InMemoryModuleCatalog):
        self._inner = inner

    def entries(self):
        return self._inner.entries()

    def lookup(self, name):
        return self._inner.lookup(name)

    def lookup_strict(self, name):
        return self._inner.lookup_strict(name)

    def promote_to_global(self, name):
        return False


def _loader(catalog=None):
    catalog = catalog or _catalog()
    store = PolicyStore()
    return ConfigLoader(catalog=catalog, store=store), store, catalog


def _messages(report):
    return [e.message for e in report.errors]


# ── Block classification ─────────────────────────────────────

class TestClassifyBlocks:
    def test_only_our_blocks(self):
        entries = parse_config(
            """
            deny module { name x; };
            deny channel { name "#bad"; };
            require module { name bar; };
            require sasl { server x; };
            policy require-modules { squit-on-deny yes; };
            set { network-name "x"; require-modules { squit-on-missing yes; }; };
            """
        )
        kinds = [kind for kind, _ in classify_blocks(entries)]
        assert kinds == [
            BlockKind.DENY,
            BlockKind.REQUIRE,
            BlockKind.POLICY,
            BlockKind.POLICY,
        ]


# ── deny module { } ──────────────────────────────────────────

class TestDenyValidation:
    def test_valid_block(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config('deny module { name "floodbot"; reason "nope"; };')
        )
        assert report.ok

    def test_reason_optional(self):
        loader, _, _ = _loader()
        assert loader.validate(parse_config("deny module { name floodbot; };")).ok

    def test_missing_name(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("deny module { reason x; };"))
        assert _messages(report) == [
            "missing required 'name' directive for deny module { } block"
        ]

    def test_denying_a_module_we_load(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("deny module { name BAR; };"))
        assert report.error_count == 1
        assert "specified as denied but we've actually loaded it" in (
            report.errors[0].message
        )

    def test_denying_a_half_loaded_module_is_also_rejected(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("deny module { name halfway; };"))
        assert report.error_count == 1

    def test_blank_value_counts_and_name_still_missing(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("deny module { name; };"))
        assert _messages(report) == [
            "blank name without value for deny module { } block",
            "missing required 'name' directive for deny module { } block",
        ]

    def test_unknown_directive(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config("deny module { name x; colour red; };")
        )
        assert _messages(report) == [
            "unknown directive colour for deny module { } block"
        ]

    def test_blank_directive(self):
        loader, _, _ = _loader()
        block = ConfigEntry(
            name="deny",
            value="module",
            filename="ircd.conf",
            line=7,
            children=(
                ConfigEntry(name="name", value="x", filename="ircd.conf", line=8),
                ConfigEntry(name="", value="y", filename="ircd.conf", line=9),
            ),
        )
        report = loader.validate([block])
        assert str(report.errors[0]) == (
            "ircd.conf:9: blank directive for deny module { } block"
        )

    def test_errors_carry_file_and_line(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config("\n\ndeny module {\n reason x;\n};", filename="a.conf")
        )
        assert report.errors[0].filename == "a.conf"
        assert report.errors[0].line == 3


# ── require module { } ───────────────────────────────────────

class TestRequireValidation:
    def test_valid_block(self):
        loader, _, _ = _loader()
        assert loader.validate(parse_config("require module { name bar; };")).ok

    def test_loose_match_accepts_half_loaded(self):
        loader, _, _ = _loader()
        assert loader.validate(
            parse_config("require module { name HALFWAY; };")
        ).ok

    def test_module_not_loaded_here(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("require module { name foo; };"))
        assert report.error_count == 1
        assert "specified as required but we didn't even load it" in (
            report.errors[0].message
        )

    def test_reason_not_permitted(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config("require module { name bar; reason x; };")
        )
        assert _messages(report) == [
            "unknown directive reason for require module { } block"
        ]

    def test_missing_name(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("require module { };"))
        assert _messages(report) == [
            "missing required 'name' directive for require module { } block"
        ]


# ── policy require-modules { } ───────────────────────────────

class TestPolicyValidation:
    def test_known_switches(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config(
                "policy require-modules { squit-on-deny yes; "
                "squit-on-missing no; squit-on-mismatch yes; };"
            )
        )
        assert report.ok

    def test_unknown_switch(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config("policy require-modules { squit-on-anything yes; };")
        )
        assert _messages(report) == [
            "unknown directive squit-on-anything for "
            "policy require-modules { } block"
        ]

    def test_blank_value(self):
        loader, _, _ = _loader()
        report = loader.validate(
            parse_config("policy require-modules { squit-on-deny; };")
        )
        assert report.error_count == 1


# ── Apply ────────────────────────────────────────────────────

FULL_CONFIG = """
deny module { name floodbot; reason "Flood bots are not allowed"; };
deny module { name spambot; };
require module { name bar; };
policy require-modules { squit-on-deny yes; squit-on-mismatch yes; };
"""


class TestApply:
    def test_load_applies_everything(self):
        loader, store, catalog = _loader()
        report = loader.load(parse_config(FULL_CONFIG))

        assert report.applied
        assert report.policy == PolicyConfig(
            squit_on_deny=True, squit_on_mismatch=True
        )
        assert loader.policy == report.policy
        assert store.find_deny_rule("floodbot").reason == (
            "Flood bots are not allowed"
        )
        assert store.find_deny_rule("spambot").reason == (
            "A forbidden module is being used"
        )
        assert catalog.lookup("bar").scope == ModuleScope.GLOBAL

    def test_set_form_policy_block(self):
        loader, _, _ = _loader()
        loader.load(
            parse_config("set { require-modules { squit-on-missing yes; }; };")
        )
        assert loader.policy == PolicyConfig(squit_on_missing=True)

    def test_rejected_pass_applies_nothing(self):
        loader, store, catalog = _loader()
        report = loader.load(
            parse_config(
                "deny module { name floodbot; };\n"
                "require module { name bar; };\n"
                "require module { name nosuchmodule; };\n"
                "policy require-modules { squit-on-deny yes; };\n"
            )
        )

        assert not report.applied
        assert report.error_count == 1
        assert len(store) == 0
        assert loader.policy == DEFAULT_POLICY
        assert catalog.lookup("bar").scope == ModuleScope.LOCAL

    def test_rejected_pass_keeps_previous_state(self):
        loader, store, _ = _loader()
        loader.load(parse_config(FULL_CONFIG))

        loader.load(parse_config("deny module { name bar; };"))

        assert store.find_deny_rule("floodbot") is not None
        assert loader.policy.squit_on_deny is True

    def test_strict_load_raises(self):
        loader, _, _ = _loader()
        with pytest.raises(ConfigRejectedError) as exc_info:
            loader.load(parse_config("deny module { };"), strict=True)
        assert len(exc_info.value.errors) == 1

    def test_apply_refuses_unvalidated_report(self):
        loader, _, _ = _loader()
        report = loader.validate(parse_config("deny module { };"))
        with pytest.raises(ConfigurationNotValidatedError):
            loader.apply(report)

    def test_reload_without_policy_block_resets_switches(self):
        loader, _, _ = _loader()
        loader.load(parse_config(FULL_CONFIG))
        loader.load(parse_config("deny module { name floodbot; };"))
        assert loader.policy == DEFAULT_POLICY

    def test_reload_drops_removed_deny_rules(self):
        loader, store, _ = _loader()
        loader.load(parse_config(FULL_CONFIG))
        loader.load(parse_config("deny module { name spambot; };"))
        assert [r.name for r in store.rules()] == ["spambot"]

    def test_reload_is_idempotent(self):
        loader, store, catalog = _loader()
        entries = parse_config(FULL_CONFIG)

        loader.load(entries)
        once = (store.rules(), loader.policy, catalog.entries())
        loader.load(entries)
        twice = (store.rules(), loader.policy, catalog.entries())

        assert once == twice

    def test_global_promotion_survives_reload(self):
        loader, _, catalog = _loader()
        loader.load(parse_config("require module { name bar; };"))
        loader.load(parse_config(""))
        assert catalog.lookup("bar").scope == ModuleScope.GLOBAL

    def test_missing_catalog_entry_at_apply_is_logged_not_fatal(
        self, caplog
    ):
        loader, store, _ = _loader(VanishingCatalog(_catalog()))
        report = loader.validate(
            parse_config(
                "require module { name bar; };\n"
                "deny module { name floodbot; };\n"
            )
        )

        with caplog.at_level(logging.ERROR, logger="reqmods.config"):
            applied = loader.apply(report)

        assert applied.applied
        assert store.find_deny_rule("floodbot") is not None
        assert "[BUG?]" in caplog.text

    def test_validation_errors_are_logged(self, caplog):
        loader, _, _ = _loader()
        with caplog.at_level(logging.ERROR, logger="reqmods.config"):
            loader.load(parse_config("deny module { };", filename="x.conf"))
        assert "x.conf:1: missing required 'name' directive" in caplog.text
