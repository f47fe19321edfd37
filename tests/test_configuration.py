from __future__ import annotations

import pytest
from pydantic import ValidationError

from projection_app.errors import ConfigurationError
from projection_app.models.parameters import ModelConfiguration
from projection_app.settings import Settings


def test_year_range_must_be_ordered():
    with pytest.raises(ValidationError):
        ModelConfiguration(anio_inicio=2030, anio_fin=2026)


@pytest.mark.parametrize("field", ["mix_pago_digital", "tasa_churn_mensual", "marketing_pct"])
def test_fractions_must_be_in_unit_interval(field):
    with pytest.raises(ValidationError):
        ModelConfiguration(anio_inicio=2026, anio_fin=2027, **{field: 1.5})


def test_configuration_accepts_wire_names(config):
    wire = config.to_wire()

    assert wire["anioInicio"] == 2026
    assert wire["mixPagoDigital"] == 0.7
    assert ModelConfiguration.model_validate(wire) == config
    assert config.years() == [2026, 2027, 2028, 2029, 2030, 2031]


def test_macro_table_lookup(macro):
    assert macro.get(2026).inflacion == pytest.approx(0.045)
    assert macro.find(2040) is None
    assert [row.anio for row in macro.rows()] == list(range(2026, 2032))
    with pytest.raises(ConfigurationError):
        macro.get(2040)
    with pytest.raises(ConfigurationError):
        macro.require_range(2030, 2033)
    macro.require_range(2026, 2031)


def test_fiscal_constants_are_versioned(constants):
    assert constants.version == "CO-2026.1"
    assert constants.factor_prestacional == pytest.approx(1.52)
    assert constants.tasa_reserva_legal == pytest.approx(0.10)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("PROJECTION_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PROJECTION_MAX_PROJECTION_YEARS", "4")

    settings = Settings()

    assert settings.log_level == "DEBUG"
    assert settings.max_projection_years == 4
    assert settings.api_title == "Financial Projection Engine"
