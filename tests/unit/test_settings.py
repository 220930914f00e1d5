import pytest

from scalemodel_kpis.config.settings import AppSettings
from scalemodel_kpis.config.validators import validate_settings
from scalemodel_kpis.core.errors import ConfigurationError


def test_settings_default_values() -> None:
    settings = AppSettings(DB_URL="sqlite:///stores.db")
    assert settings.db_url == "sqlite:///stores.db"
    assert settings.low_stock_limit == 10
    assert settings.performance_limit == 10
    assert settings.priority_limit == 10
    assert settings.customer_limit == 5
    assert settings.projection_new_customers == 10
    assert settings.integrity_policy == "exclude"
    assert settings.abort_on_integrity_violation is False


def test_integrity_policy_is_normalized() -> None:
    settings = AppSettings(INTEGRITY_POLICY=" ABORT ")
    assert settings.integrity_policy == "abort"
    assert settings.abort_on_integrity_violation is True


def test_validate_settings_rejects_unknown_timezone() -> None:
    settings = AppSettings(TZ="Mars/Olympus_Mons")
    with pytest.raises(ConfigurationError):
        validate_settings(settings)


def test_validate_settings_accepts_defaults() -> None:
    validate_settings(AppSettings(TZ="UTC"))
