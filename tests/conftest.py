"""Shared fixtures: minimal kinopoisk page markup for each page type."""

from types import SimpleNamespace

import pytest


def search_page(data_url="/film/301/", title="Матрица"):
    """Search results with a best match block."""
    return f"""
    <html><body>
    <div class="search_results">
      <div class="element most_wanted">
        <div class="info">
          <p class="name"><a href="/level/1{data_url}sr/1/" data-url="{data_url}">{title}</a> <span class="year">1999</span></p>
        </div>
      </div>
      <div class="element">
        <p class="name"><a data-url="/film/999/">Матрица: Перезагрузка</a></p>
      </div>
    </div>
    </body></html>
    """


def empty_search_page():
    return """
    <html><body>
    <div class="search_results"><h2 class="textorangebig">К сожалению, ничего не найдено</h2></div>
    </body></html>
    """


def film_page(
    title="Матрица",
    original_name="The Matrix",
    countries=("США", "Австралия"),
    studio_disabled=False,
):
    """Film page; the studio entry is the 8th item of the sub-menu."""
    alternative = ""
    if original_name is not None:
        alternative = f'<span itemprop="alternativeHeadline">{original_name}</span>'

    country_links = ", ".join(f'<a href="/lists/country/">{c}</a>' for c in countries)

    items = []
    for i in range(10):
        css = "off" if (i == 7 and studio_disabled) else "item"
        items.append(f'\n<li class="{css}"><a href="/film/301/menu{i}/">item {i}</a></li>')
    menu = '<ul id="newMenuSub">' + "".join(items) + "\n</ul>"

    return f"""
    <html><body>
    <div id="headerFilm">
      <h1 class="moviename-big" itemprop="name">{title} <span>1999</span></h1>
      {alternative}
    </div>
    {menu}
    <table id="infoTable">
      <tr><td class="type">год</td><td><a href="/lists/year/1999/">1999</a></td></tr>
      <tr><td class="type">страна</td><td><div>{country_links}</div></td></tr>
      <tr><td class="type">слоган</td><td>«Добро пожаловать в реальный мир»</td></tr>
    </table>
    </body></html>
    """


def studio_page(studios=("Warner Bros.", "Village Roadshow Pictures")):
    """Studio page with the production table nested inside the left column."""
    rows = "".join(
        f'<tr><td>{i}</td><td><a href="/lists/studio/{i}/">{name}</a></td></tr>'
        for i, name in enumerate(studios, 1)
    )
    return f"""
    <html><body>
    <div id="block_left"><div class="wrap">
      <table class="outer">
        <tr><td>
          <table class="inner">
            <tr><td>header 0</td></tr>
            <tr><td>header 1</td></tr>
            <tr><td>header 2</td></tr>
            <tr><td>
              <div class="studios">
                <table>
                  <tr><td colspan="2">Производство:</td></tr>
                  <tr><td>№</td><td>Компания</td></tr>
                  {rows}
                  <tr><td colspan="2">footer</td></tr>
                </table>
              </div>
            </td></tr>
          </table>
        </td></tr>
      </table>
    </div></div>
    </body></html>
    """


def _cast_entries(people):
    entries = []
    for primary, secondary in people:
        span = f' <span class="gray">{secondary}</span>' if secondary is not None else ""
        entries.append(
            '<div class="dub"><div class="actorInfo">'
            f'<div class="name"><a href="/name/1/">{primary}</a>{span}</div>'
            '<div class="role">...</div>'
            '</div></div>'
        )
    return "\n".join(entries)


def cast_page(directors=None, composers=None):
    """Cast page; a role passed as None has no section at all."""
    sections = []
    if directors is not None:
        sections.append(
            '<a name="director"></a>\n<div class="dubbing_title">Режиссер</div>\n'
            + _cast_entries(directors)
            + '\n<div style="padding-left: 20px">Наверх</div>'
        )
    if composers is not None:
        sections.append(
            '<a name="composer"></a>\n<div class="dubbing_title">Композитор</div>\n'
            + _cast_entries(composers)
            + '\n<div style="padding-left: 20px">Наверх</div>'
        )
    return '<html><body><div id="block_left">' + "\n".join(sections) + "</div></body></html>"


def captcha_page():
    return "<html><body><form action='/checkcaptcha'>Подтвердите, что запросы отправляли вы</form></body></html>"


@pytest.fixture
def pages():
    """Builders for kinopoisk page markup."""
    return SimpleNamespace(
        search=search_page,
        empty_search=empty_search_page,
        film=film_page,
        studio=studio_page,
        cast=cast_page,
        captcha=captcha_page,
    )
