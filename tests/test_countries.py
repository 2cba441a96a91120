"""Tests for the country lookup."""

import json

from kinoparse.countries import DEFAULT_COUNTRY_IDS, CountryLookup


class TestCountryLookup:
    """Tests for CountryLookup."""

    def test_known_country(self):
        lookup = CountryLookup()
        assert lookup.id_of("США") == 1
        assert lookup.id_of("Россия") == 2
        assert lookup.id_of("СССР") == 13

    def test_case_and_whitespace_insensitive(self):
        lookup = CountryLookup()
        assert lookup.id_of("  франция ") == 8
        assert lookup.id_of("ВЕЛИКОБРИТАНИЯ") == 11

    def test_english_alias(self):
        lookup = CountryLookup()
        assert lookup.id_of("USA") == 1
        assert lookup.id_of("United Kingdom") == 11

    def test_unknown_or_empty(self):
        lookup = CountryLookup()
        assert lookup.id_of("Атлантида") is None
        assert lookup.id_of("") is None
        assert lookup.id_of(None) is None

    def test_override_table(self):
        lookup = CountryLookup({"Австралия": 25, "США": 100})
        assert lookup.id_of("австралия") == 25
        assert lookup.id_of("сша") == 100
        assert len(lookup) == len(DEFAULT_COUNTRY_IDS) + 1

    def test_from_file(self, tmp_path):
        path = tmp_path / "countries.json"
        path.write_text(json.dumps({"Австралия": 25}, ensure_ascii=False), encoding="utf-8")

        lookup = CountryLookup.from_file(str(path))

        assert lookup.id_of("Австралия") == 25
        assert lookup.id_of("США") == 1

    def test_missing_file_uses_defaults(self, tmp_path):
        lookup = CountryLookup.from_file(str(tmp_path / "absent.json"))
        assert len(lookup) == len(DEFAULT_COUNTRY_IDS)
