"""Tests for the Composer and PIP update checkers."""
from unittest.mock import MagicMock

import pytest

from checkers import ComposerUpdatesChecker, PipUpdatesChecker, Update
from common.errors import RegistryError
from manifests import Constraint, Requirement
from registry.packagist import VersionMeta
from registry.pypi import PipPackage


def _packagist(releases):
    """Build a mocked Packagist client serving ``{name: [versions newest first]}``."""
    client = MagicMock()

    def meta(vendor, package):
        name = f"{vendor}/{package}"
        if name not in releases:
            raise RegistryError("packagist responded with HTTP error '404: Not Found'", 404)
        return {name: [
            VersionMeta(
                name=name,
                version=v,
                authors=[{"name": "Jane Doe"}],
                source={"url": f"https://github.com/{name}.git"},
            )
            for v in releases[name]
        ]}

    client.meta.side_effect = meta
    return client


def _pypi(releases):
    """Build a mocked PyPI client serving ``{name: [versions oldest first]}``."""
    client = MagicMock()

    def package(name):
        if name not in releases:
            raise RegistryError("pypi responded with HTTP error '404: Not Found'", 404)
        return PipPackage.from_dict({
            "info": {"name": name, "author": "", "release_url": f"https://pypi.org/project/{name}/"},
            "releases": {v: [{"yanked": v.endswith("9")}] for v in releases[name]},
        })

    client.package.side_effect = package
    return client


class TestComposerLastUpdates:
    """Test newest-release reporting for Composer."""

    RELEASES = {
        "monolog/monolog": ["dev-main", "3.5.0", "3.4.0", "2.9.1"],
        "psr/log": ["3.0.0", "2.0.0"],
    }

    def test_reports_newest_parsable_release(self):
        """The newest release is reported with its author and source."""
        checker = ComposerUpdatesChecker(client=_packagist(self.RELEASES))
        updates = checker.last_updates([Constraint("monolog/monolog", "^2.0")])
        assert updates == [Update(
            name="monolog/monolog",
            version="3.5.0",
            author="Jane Doe",
            url="https://github.com/monolog/monolog.git",
            current_constraint="^2.0",
        )]

    def test_incompatible_only(self):
        """Packages already satisfied by their newest release are left out."""
        checker = ComposerUpdatesChecker(client=_packagist(self.RELEASES))
        updates = checker.last_updates(
            [Constraint("monolog/monolog", "^2.0"), Constraint("psr/log", "^3.0")],
            incompatible_only=True,
        )
        assert [u.name for u in updates] == ["monolog/monolog"]

    def test_registry_order_is_not_trusted(self):
        """Releases are ordered by version, not by registry order."""
        checker = ComposerUpdatesChecker(client=_packagist({"a/b": ["1.0.0", "1.2.0", "1.1.0"]}))
        assert checker.last_updates([Constraint("a/b", "*")])[0].version == "1.2.0"

    def test_failed_lookups_and_platform_packages_are_skipped(self):
        """Platform packages and failed lookups produce no update."""
        client = _packagist(self.RELEASES)
        checker = ComposerUpdatesChecker(client=client)
        updates = checker.last_updates([
            Constraint("php", ">=8.1"),
            Constraint("ghost/pkg", "^1.0"),
            Constraint("psr/log", "^2.0"),
        ])
        assert [u.name for u in updates] == ["psr/log"]
        called = [c[0] for c in client.meta.call_args_list]
        assert ("php",) not in called

    def test_invalid_constraint_skipped_when_incompatible_only(self):
        """An unparsable constraint is skipped in incompatible-only mode."""
        checker = ComposerUpdatesChecker(client=_packagist(self.RELEASES))
        assert checker.last_updates([Constraint("psr/log", "not a constraint")], incompatible_only=True) == []

    def test_invalid_constraint_always_skipped(self):
        """An unparsable constraint is skipped before any registry lookup."""
        client = _packagist(self.RELEASES)
        checker = ComposerUpdatesChecker(client=client)
        updates = checker.last_updates([
            Constraint("psr/log", "not a constraint"),
            Constraint("monolog/monolog", "^2.0"),
        ])
        assert [u.name for u in updates] == ["monolog/monolog"]
        assert [c[0] for c in client.meta.call_args_list] == [("monolog", "monolog")]

    def test_empty_input(self):
        """An empty package list is rejected."""
        with pytest.raises(ValueError, match="no packages provided"):
            ComposerUpdatesChecker(client=MagicMock()).last_updates([])


class TestComposerCompatibleUpdates:
    """Test constraint-compatible upgrades of locked versions."""

    def test_newest_matching_release_above_lock(self):
        """The newest release above the lock inside the constraint is reported."""
        checker = ComposerUpdatesChecker(client=_packagist({
            "monolog/monolog": ["3.5.0", "2.9.2", "2.9.1", "2.8.0"],
        }))
        updates = checker.compatible_updates(
            [Constraint("monolog/monolog", "^2.9")],
            [Requirement("monolog/monolog", "2.9.1", base=True)],
        )
        assert len(updates) == 1
        assert updates[0].version == "2.9.2"
        assert updates[0].current_version == "2.9.1"
        assert updates[0].current_constraint == "^2.9"

    def test_up_to_date_package_omitted(self):
        """Nothing is reported when the lock is already newest."""
        checker = ComposerUpdatesChecker(client=_packagist({"psr/log": ["3.0.0", "2.0.0"]}))
        updates = checker.compatible_updates(
            [Constraint("psr/log", "^2.0")],
            [Requirement("psr/log", "2.0.0")],
        )
        assert updates == []

    def test_v_prefixed_lock(self):
        """'v' prefixed locks and releases are compared by segment."""
        checker = ComposerUpdatesChecker(client=_packagist({"a/b": ["v1.3.0", "v1.2.0"]}))
        updates = checker.compatible_updates([Constraint("a/b", "~1.2")], [Requirement("a/b", "v1.2.0")])
        assert [u.version for u in updates] == ["v1.3.0"]

    def test_unlocked_package_ignored(self):
        """Packages missing from the lock are not looked up."""
        client = _packagist({"a/b": ["1.0.0"]})
        checker = ComposerUpdatesChecker(client=client)
        assert checker.compatible_updates([Constraint("a/b", "*")], [Requirement("c/d", "1.0.0")]) == []
        client.meta.assert_not_called()

    def test_unsupported_lock_version_skipped(self):
        """Branch locks such as dev-main are skipped."""
        checker = ComposerUpdatesChecker(client=_packagist({"a/b": ["1.0.0"]}))
        assert checker.compatible_updates([Constraint("a/b", "*")], [Requirement("a/b", "dev-main")]) == []

    @pytest.mark.parametrize("constraints, requirements", [
        ([], [Requirement("a/b", "1.0")]),
        ([Constraint("a/b", "*")], []),
    ])
    def test_empty_input(self, constraints, requirements):
        """An empty package list is rejected."""
        with pytest.raises(ValueError, match="no packages provided"):
            ComposerUpdatesChecker(client=MagicMock()).compatible_updates(constraints, requirements)


class TestPipUpdates:
    """Test PyPI backed update checks."""

    RELEASES = {"requests": ["2.28.0", "2.29", "2.30.0", "2.31.0", "3.0.0rc1"]}

    def test_last_update_skips_unparsable_and_uses_package_name(self):
        """Unparsable releases are ignored and the package name stands in for the author."""
        checker = PipUpdatesChecker(client=_pypi(self.RELEASES))
        updates = checker.last_updates([Constraint("requests", ">=2.0")])
        assert updates[0].version == "2.31.0"
        assert updates[0].author == "requests"
        assert updates[0].url == "https://pypi.org/project/requests/"

    def test_last_update_incompatible_only(self):
        """Only newest releases outside the constraint are reported."""
        checker = PipUpdatesChecker(client=_pypi(self.RELEASES))
        assert checker.last_updates([Constraint("requests", ">=2.0")], incompatible_only=True) == []
        updates = checker.last_updates([Constraint("requests", "<2.30")], incompatible_only=True)
        assert [u.version for u in updates] == ["2.31.0"]

    def test_compatible_update_skips_yanked(self):
        """Yanked releases are never suggested."""
        checker = PipUpdatesChecker(client=_pypi(self.RELEASES))
        updates = checker.compatible_updates(
            [Constraint("requests", "<2.31")],
            [Requirement("requests", "2.28.0")],
        )
        assert [u.version for u in updates] == ["2.30.0"]
        # 2.29 is yanked in the fixture and is the only candidate here.
        assert checker.compatible_updates(
            [Constraint("requests", "<2.30")],
            [Requirement("requests", "2.28.0")],
        ) == []

    def test_lookup_failure_skipped(self):
        """Packages unknown to the registry produce no update."""
        checker = PipUpdatesChecker(client=_pypi({}))
        assert checker.last_updates([Constraint("missing", "*")]) == []

    def test_update_to_dict(self):
        """Updates serialize every field."""
        update = Update("a", "1.0", "me", "https://x", "0.9", "^0.9")
        assert update.to_dict() == {
            "name": "a",
            "version": "1.0",
            "author": "me",
            "url": "https://x",
            "current_version": "0.9",
            "current_constraint": "^0.9",
        }
