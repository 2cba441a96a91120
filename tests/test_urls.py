"""Tests for kinopoisk URL construction."""

import pytest

from kinoparse.urls import HOST, build_search_url, cast_url, encode, film_url, studio_url


class TestEncode:
    """Tests for cp1251 query encoding."""

    def test_cyrillic(self):
        assert encode("Матрица") == "%CC%E0%F2%F0%E8%F6%E0"

    def test_lowercase_yo_and_space(self):
        assert encode("ёж и") == "%B8%E6+%E8"

    @pytest.mark.parametrize("value,expected", [
        ("abc-XYZ_09.*", "abc-XYZ_09.*"),
        ("a b", "a+b"),
        ("~", "%7E"),
        ("m_act[find]", "m_act%5Bfind%5D"),
        ("a/b&c=d", "a%2Fb%26c%3Dd"),
        ("Amélie", "Am%3Flie"),
    ])
    def test_reserved_characters(self, value, expected):
        assert encode(value) == expected

    def test_unencodable_becomes_question_mark(self):
        assert encode("千と千尋") == "%3F%3F%3F%3F"


class TestSearchUrl:
    """Tests for build_search_url."""

    def test_with_country(self):
        url = build_search_url("Матрица", "1999", 1)
        assert url == (
            "https://www.kinopoisk.ru/index.php?level=7&from=forma&result=adv"
            "&m_act%5Bfrom%5D=forma&m_act%5Bwhat%5D=content"
            "&m_act%5Bfind%5D=%CC%E0%F2%F0%E8%F6%E0"
            "&m_act%5Byear%5D=1999"
            "&m_act%5Bcountry%5D=1"
        )

    def test_without_country(self):
        url = build_search_url("Матрица", "1999")
        assert url.endswith("&m_act%5Byear%5D=1999")
        assert "country" not in url

    def test_custom_host(self):
        url = build_search_url("x", "2000", host="http://localhost:8080")
        assert url.startswith("http://localhost:8080/index.php?level=7")


class TestPageUrls:
    """Tests for film/studio/cast URLs."""

    def test_film_url(self):
        assert film_url("/film/301/") == HOST + "/film/301/"

    def test_sub_pages(self):
        link = "https://www.kinopoisk.ru/film/301/"
        assert studio_url(link) == link + "studio/"
        assert cast_url(link) == link + "cast/"

    def test_sub_page_adds_separator(self):
        assert cast_url("https://www.kinopoisk.ru/film/301") == "https://www.kinopoisk.ru/film/301/cast/"
