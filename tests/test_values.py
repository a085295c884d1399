# tests/test_values.py
import pytest

from dcsim_core.units import ureg, Quantity, OHM, format_compact, parse_value, parse_quantity
from dcsim_core.validation import ValidationError, ValueFormatError


@pytest.mark.parametrize("text, expected", [
    ("10", 10.0),
    ("4.7k", 4700.0),
    ("4.7K", 4700.0),
    ("2.2M", 2.2e6),
    ("10m", 0.01),
    ("3u", 3e-6),
    ("3U", 3e-6),
    ("10mA", 0.01),
    ("5V", 5.0),
    ("100ohm", 100.0),
    ("1.5 kohm", 1500.0),
    ("  12  ", 12.0),
])
def test_parse_value_accepts_grammar(text, expected):
    assert parse_value(text) == pytest.approx(expected)


def test_prefix_case_distinguishes_milli_from_mega():
    assert parse_value("1m") == pytest.approx(1e-3)
    assert parse_value("1M") == pytest.approx(1e6)


@pytest.mark.parametrize("text", ["", "abc", "-5", "1e3", ".5", "5.", "4.7k!", "k4"])
def test_parse_value_rejects_invalid_format(text):
    with pytest.raises(ValueFormatError, match="Invalid value format") as excinfo:
        parse_value(text)
    assert excinfo.value.text == text
    assert excinfo.value.codes == ["VALUE_FORMAT"]


def test_value_format_error_is_a_validation_error():
    with pytest.raises(ValidationError):
        parse_value("twelve")


def test_value_format_error_rejects_non_strings():
    with pytest.raises(ValueFormatError):
        parse_value(None)


def test_value_format_error_report_carries_user_input():
    with pytest.raises(ValueFormatError) as excinfo:
        parse_value("4,7k")
    report = excinfo.value.get_diagnostic_report()
    assert "Invalid Value Format" in report
    assert "'4,7k'" in report


def test_parse_quantity_attaches_unit():
    qty = parse_quantity("4.7k", ureg.ohm)
    assert qty.check("[resistance]")
    assert qty.to(ureg.ohm).magnitude == pytest.approx(4700.0)


def test_format_compact_picks_si_prefix():
    text = format_compact(Quantity(4700.0, OHM))
    assert text.startswith("4.7 k")
