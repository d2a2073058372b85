"""Tests for lectern.core.config: YAML cascading, overrides and secrets."""

from __future__ import annotations

import pydantic as p
import pytest

import lectern
from lectern.core.config import Secrets, Settings
from lectern.core.config.storage import PersistentSettings
from lectern.model import DeploymentEnvironment

ConfigRoot = p.FileUrl(f"file://{lectern.root}/config")


class TestSettings(object):
    def test_environment_file_replaces_root_file(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Test, root=ConfigRoot, override=())

        assert settings.storage.persistent.postgresql is None
        assert settings.storage.persistent.sqlite is not None

    def test_root_files_without_environment_directory(self) -> None:
        settings = Settings(env=DeploymentEnvironment.Local, root=ConfigRoot, override=())

        assert settings.storage.persistent.sqlite is None
        assert settings.storage.persistent.postgresql is not None
        assert settings.storage.persistent.postgresql.database == "lectern"
        assert settings.identity.allowed_email_domains == ["champlain.edu", "mymail.champlain.edu"]

    def test_override_wins_over_yaml(self) -> None:
        settings = Settings(
            env=DeploymentEnvironment.Test,
            root=ConfigRoot,
            override=("identity.min_password_length=12", "storage.persistent.sqlite.path=/tmp/other.sqlite3"),
        )

        assert settings.identity.min_password_length == 12
        assert settings.storage.persistent.sqlite is not None
        assert str(settings.storage.persistent.sqlite.path) == "/tmp/other.sqlite3"
        # siblings of an overridden key still come from YAML
        assert settings.identity.allowed_email_domains == ["champlain.edu", "mymail.champlain.edu"]

    def test_override_values_are_yaml(self) -> None:
        settings = Settings(
            env=DeploymentEnvironment.Test,
            root=ConfigRoot,
            override=("identity.allowed_email_domains=[example.edu]",),
        )

        assert settings.identity.allowed_email_domains == ["example.edu"]


class TestPersistentSettings(object):
    def test_exactly_one_backend(self) -> None:
        with pytest.raises(p.ValidationError):
            PersistentSettings()
        with pytest.raises(p.ValidationError):
            PersistentSettings(postgresql={"database": "lectern"}, sqlite={"path": "/tmp/x.sqlite3"})

        assert PersistentSettings(sqlite={"path": "/tmp/x.sqlite3"}).sqlite is not None


class TestSecrets(object):
    def test_secrets_come_from_environment_directory(self) -> None:
        secrets = Secrets(env=DeploymentEnvironment.Test, root=ConfigRoot)

        assert secrets.auth is not None
        assert secrets.auth.jwt.get_secret_value() == "test-signing-key-not-for-production"
        assert secrets.postgresql.username is None
