import pytest

from talentflow.db_config import LOCAL_FALLBACK_URL, get_database_config, normalize_environment


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FLASK_ENV", "ENVIRONMENT", "LOCAL_DATABASE_URL", "SANDBOX_DATABASE_URL",
                 "PRODUCTION_DATABASE_URL", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


class TestDatabaseConfig:

    @pytest.mark.parametrize("name,expected", [
        ("dev", "local"), ("STAGING", "sandbox"), ("prod", "production"), ("unknown", "local"),
    ])
    def test_environment_aliases(self, name, expected):
        assert normalize_environment(name) == expected

    def test_local_falls_back_to_sqlite(self):
        assert get_database_config("local") == (LOCAL_FALLBACK_URL, None)

    def test_production_accepts_database_url_and_fixes_scheme(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db/talentflow")

        uri, options = get_database_config("production")

        assert uri == "postgresql://user:pw@db/talentflow"
        assert options["isolation_level"] == "READ COMMITTED"

    def test_sandbox_requires_a_url(self):
        with pytest.raises(ValueError):
            get_database_config("sandbox")
