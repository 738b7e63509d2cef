"""
Unit tests for the MetadataRegistry.

Tests tracked-field resolution, configuration toggles, inheritance merging
and self-healing of corrupted records.
"""

import pytest

from fieldaudit.diagnostics import LogLevel
from fieldaudit.metadata.registry import AuditMetadata, MetadataRegistry

pytestmark = pytest.mark.unit

ATTRIBUTE = "__test_audit_metadata__"


class Person:
    def __init__(self):
        self.name = "Ann"
        self.email = "ann@example.com"
        self.secret = "hunter2"


class Slotted:
    __slots__ = ("name", "age")

    def __init__(self):
        self.name = "Ann"


# =============================================================================
# get_tracked_fields
# =============================================================================


class TestGetTrackedFields:
    """Tests for tracked-field resolution."""

    def test_unconfigured_class_tracks_nothing(self, isolated_registry):
        assert isolated_registry.get_tracked_fields(Person()) == set()

    def test_explicit_fields(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_field_tracking(Account, "email", True)
        assert isolated_registry.get_tracked_fields(Account()) == {"email"}

    def test_class_level_tracks_all_own_fields(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_class_level_audit(Account, True)
        assert isolated_registry.get_tracked_fields(Account()) == {"name", "email", "secret"}

    def test_ignored_wins_over_class_level(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_class_level_audit(Account, True)
        isolated_registry.set_field_ignored(Account, "secret", True)
        assert isolated_registry.get_tracked_fields(Account()) == {"name", "email"}

    def test_ignored_wins_over_explicit_tracking(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_field_tracking(Account, "secret", True)
        isolated_registry.set_field_ignored(Account, "secret", True)
        assert isolated_registry.get_tracked_fields(Account()) == set()

    def test_class_level_includes_explicit_fields_not_yet_set(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_class_level_audit(Account, True)
        isolated_registry.set_field_tracking(Account, "nickname", True)
        assert "nickname" in isolated_registry.get_tracked_fields(Account())

    def test_class_level_enumerates_populated_slots(self, isolated_registry):
        isolated_registry.set_class_level_audit(Slotted, True)
        assert isolated_registry.get_tracked_fields(Slotted()) == {"name"}

    def test_none_instance_degrades_to_empty(self, isolated_registry, diagnostics):
        assert isolated_registry.get_tracked_fields(None) == set()
        assert diagnostics.messages(LogLevel.WARNING) == ["Invalid target provided to get_tracked_fields"]

    def test_enumeration_failure_falls_back_to_explicit_fields(self, isolated_registry, diagnostics):
        class Hostile:
            @property
            def __dict__(self):
                raise RuntimeError("no introspection")

        isolated_registry.set_class_level_audit(Hostile, True)
        isolated_registry.set_field_tracking(Hostile, "status", True)

        assert isolated_registry.get_tracked_fields(Hostile()) == {"status"}
        assert "Failed to enumerate instance fields" in diagnostics.messages(LogLevel.ERROR)

    def test_configuration_changes_are_visible_to_existing_instances(self, isolated_registry):
        class Account(Person):
            pass

        existing = Account()
        isolated_registry.set_field_tracking(Account, "name", True)
        assert isolated_registry.is_field_tracked(existing, "name")

        isolated_registry.set_field_tracking(Account, "name", False)
        assert not isolated_registry.is_field_tracked(existing, "name")


class TestIsFieldTracked:
    """Tests for is_field_tracked."""

    def test_tracked_and_untracked(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_field_tracking(Account, "email", True)
        account = Account()

        assert isolated_registry.is_field_tracked(account, "email")
        assert not isolated_registry.is_field_tracked(account, "name")

    def test_non_string_field_is_not_tracked(self, isolated_registry):
        class Account(Person):
            pass

        isolated_registry.set_class_level_audit(Account, True)
        assert not isolated_registry.is_field_tracked(Account(), 42)


# =============================================================================
# Configuration toggles
# =============================================================================


class TestConfiguration:
    """Tests for the idempotent configuration setters."""

    def test_set_field_tracking_is_idempotent(self, isolated_registry):
        class Account:
            pass

        isolated_registry.set_field_tracking(Account, "email", True)
        isolated_registry.set_field_tracking(Account, "email", True)
        assert isolated_registry.get_metadata(Account).tracked_fields == {"email"}

        isolated_registry.set_field_tracking(Account, "email", False)
        isolated_registry.set_field_tracking(Account, "email", False)
        assert isolated_registry.get_metadata(Account).tracked_fields == set()

    def test_set_field_ignored_toggles(self, isolated_registry):
        class Account:
            pass

        isolated_registry.set_field_ignored(Account, "secret", True)
        assert isolated_registry.get_metadata(Account).ignored_fields == {"secret"}

        isolated_registry.set_field_ignored(Account, "secret", False)
        assert isolated_registry.get_metadata(Account).ignored_fields == set()

    def test_set_class_level_audit_toggles(self, isolated_registry):
        class Account:
            pass

        isolated_registry.set_class_level_audit(Account, True)
        assert isolated_registry.get_metadata(Account).class_level_audit is True

        isolated_registry.set_class_level_audit(Account, False)
        assert isolated_registry.get_metadata(Account).class_level_audit is False

    def test_invalid_class_is_a_logged_no_op(self, isolated_registry, diagnostics):
        isolated_registry.set_field_tracking("not a class", "email", True)
        isolated_registry.set_class_level_audit(None, True)
        isolated_registry.set_field_ignored(42, "secret", True)

        assert diagnostics.messages(LogLevel.ERROR) == [
            "Invalid class for set_field_tracking",
            "Invalid class for set_class_level_audit",
            "Invalid class for set_field_ignored",
        ]

    @pytest.mark.parametrize("field", ["", None, 3])
    def test_invalid_field_is_a_logged_no_op(self, field, isolated_registry, diagnostics):
        class Account:
            pass

        isolated_registry.set_field_tracking(Account, field, True)
        isolated_registry.set_field_ignored(Account, field, True)

        metadata = isolated_registry.get_metadata(Account)
        assert metadata.tracked_fields == set()
        assert metadata.ignored_fields == set()
        assert len(diagnostics.messages(LogLevel.ERROR)) == 2

    def test_builtin_class_storage_failure_is_logged(self, isolated_registry, diagnostics):
        isolated_registry.set_field_tracking(dict, "anything", True)

        assert "Failed to store audit metadata on class" in diagnostics.messages(LogLevel.ERROR)
        assert isolated_registry.get_metadata(dict) == AuditMetadata()

    def test_get_metadata_returns_a_copy(self, isolated_registry):
        class Account:
            pass

        isolated_registry.set_field_tracking(Account, "email", True)
        isolated_registry.get_metadata(Account).tracked_fields.add("hacked")

        assert isolated_registry.get_metadata(Account).tracked_fields == {"email"}

    def test_records_are_stored_on_the_class(self, isolated_registry):
        class Account:
            pass

        isolated_registry.set_field_tracking(Account, "email", True)
        assert isinstance(Account.__dict__[ATTRIBUTE], AuditMetadata)

    def test_separate_registries_do_not_share_records(self, isolated_registry):
        class Account(Person):
            pass

        other = MetadataRegistry(attribute="__other_audit_metadata__")
        isolated_registry.set_field_tracking(Account, "email", True)

        assert other.get_tracked_fields(Account()) == set()


# =============================================================================
# Inheritance
# =============================================================================


class TestInheritance:
    """Configuration merges along the MRO."""

    def test_base_and_derived_fields_merge(self, isolated_registry):
        class Base:
            pass

        class Derived(Base):
            pass

        isolated_registry.set_field_tracking(Base, "base_field", True)
        isolated_registry.set_field_tracking(Derived, "derived_field", True)

        assert isolated_registry.get_metadata(Derived).tracked_fields == {"base_field", "derived_field"}
        assert isolated_registry.get_metadata(Base).tracked_fields == {"base_field"}

    def test_class_level_audit_is_inherited(self, isolated_registry):
        class Base:
            pass

        class Derived(Base):
            pass

        isolated_registry.set_class_level_audit(Base, True)
        assert isolated_registry.get_metadata(Derived).class_level_audit is True

    def test_ignoring_in_subclass_does_not_affect_base(self, isolated_registry):
        class Base:
            def __init__(self):
                self.token = "t"

        class Derived(Base):
            pass

        isolated_registry.set_class_level_audit(Base, True)
        isolated_registry.set_field_ignored(Derived, "token", True)

        assert isolated_registry.is_field_tracked(Base(), "token")
        assert not isolated_registry.is_field_tracked(Derived(), "token")


# =============================================================================
# Corrupted records
# =============================================================================


class TestCorruptedMetadata:
    """Invalid stored records are replaced, never trusted."""

    @pytest.mark.parametrize(
        "corrupted",
        [
            "corrupted",
            {"tracked_fields": {"email"}},
            AuditMetadata(tracked_fields=["email"]),
            AuditMetadata(tracked_fields={1, 2}),
            AuditMetadata(class_level_audit="yes"),
        ],
    )
    def test_corrupted_record_is_replaced_with_default(self, corrupted, isolated_registry, diagnostics):
        class Account(Person):
            pass

        setattr(Account, ATTRIBUTE, corrupted)

        assert isolated_registry.get_tracked_fields(Account()) == set()
        assert Account.__dict__[ATTRIBUTE] == AuditMetadata()
        assert "Corrupted audit metadata detected, recreating" in diagnostics.messages(LogLevel.WARNING)

    def test_configuration_after_corruption_works(self, isolated_registry):
        class Account(Person):
            pass

        setattr(Account, ATTRIBUTE, "corrupted")
        isolated_registry.set_field_tracking(Account, "email", True)

        assert isolated_registry.get_tracked_fields(Account()) == {"email"}
