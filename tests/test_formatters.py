from folio_assistant.output.formatters import (
    confidence_bar,
    confidence_color,
    fmt_money,
    fmt_pct,
    fmt_price,
)


class TestFmtPct:
    def test_fraction(self):
        assert fmt_pct(0.7) == "70.00%"

    def test_decimals(self):
        assert fmt_pct(0.35, 1) == "35.0%"

    def test_none(self):
        assert fmt_pct(None) == "N/A"


class TestFmtMoney:
    def test_grouping(self):
        assert fmt_money(7000) == "7,000.00 USD"

    def test_currency(self):
        assert fmt_money(1234.5, "EUR") == "1,234.50 EUR"

    def test_none(self):
        assert fmt_money(None) == "N/A"


class TestFmtPrice:
    def test_basic(self):
        assert fmt_price(210.123) == "210.12 USD"

    def test_none(self):
        assert fmt_price(None, "EUR") == "N/A"


class TestConfidence:
    def test_colors(self):
        assert confidence_color(1.0) == "bold green"
        assert confidence_color(0.9) == "green"
        assert confidence_color(0.8) == "yellow"
        assert confidence_color(0.5) == "orange3"

    def test_bar(self):
        assert confidence_bar(0.8) == "████████░░"
        assert confidence_bar(0.0, width=4) == "░░░░"
