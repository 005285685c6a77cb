"""Static soccer league catalog: region -> country -> leagues.

League keys are the feed's league codes, sent back by clients as
``leagueKey`` when listing games.
"""

SOCCER_CATALOG = {
    'Europe': {
        'England': [
            {'name': 'Premier League', 'key': 'eng.1'},
            {'name': 'Championship', 'key': 'eng.2'},
            {'name': 'FA Cup', 'key': 'eng.fa'},
            {'name': 'EFL Cup', 'key': 'eng.league_cup'},
        ],
        'Spain': [
            {'name': 'LaLiga', 'key': 'esp.1'},
            {'name': 'LaLiga 2', 'key': 'esp.2'},
            {'name': 'Copa del Rey', 'key': 'esp.copa_del_rey'},
            {'name': 'Supercopa', 'key': 'esp.super_cup'},
        ],
        'Italy': [
            {'name': 'Serie A', 'key': 'ita.1'},
            {'name': 'Serie B', 'key': 'ita.2'},
            {'name': 'Coppa Italia', 'key': 'ita.coppa_italia'},
            {'name': 'Supercoppa', 'key': 'ita.super_cup'},
        ],
        'Germany': [
            {'name': 'Bundesliga', 'key': 'ger.1'},
            {'name': '2. Bundesliga', 'key': 'ger.2'},
            {'name': 'DFB-Pokal', 'key': 'ger.dfb_pokal'},
        ],
        'France': [
            {'name': 'Ligue 1', 'key': 'fra.1'},
            {'name': 'Ligue 2', 'key': 'fra.2'},
            {'name': 'Coupe de France', 'key': 'fra.coupe_de_france'},
        ],
        'Netherlands': [{'name': 'Eredivisie', 'key': 'ned.1'}],
        'Portugal': [{'name': 'Primeira Liga', 'key': 'por.1'}],
        'Turkey': [{'name': 'Süper Lig', 'key': 'tur.1'}],
        'Greece': [{'name': 'Super League', 'key': 'gre.1'}],
        'Scotland': [{'name': 'Premiership', 'key': 'sco.1'}],
        'Belgium': [{'name': 'Pro League', 'key': 'bel.1'}],
        'Switzerland': [{'name': 'Super League', 'key': 'sui.1'}],
    },
    'Americas': {
        'USA': [{'name': 'MLS', 'key': 'usa.1'}],
        'Brazil': [{'name': 'Brasileirão', 'key': 'bra.1'}],
        'Argentina': [{'name': 'Primera División', 'key': 'arg.1'}],
        'Mexico': [{'name': 'Liga MX', 'key': 'mex.1'}],
    },
    'International': {
        'UEFA': [
            {'name': 'Champions League', 'key': 'uefa.champions'},
            {'name': 'Europa League', 'key': 'uefa.europa'},
        ],
    },
}


def build_catalog(sport: str) -> dict:
    if sport != 'soccer':
        return {'sport': sport, 'regions': [], 'countriesByRegion': {}, 'leaguesByCountry': {}}
    countries_by_region = {}
    leagues_by_country = {}
    for region, countries in SOCCER_CATALOG.items():
        countries_by_region[region] = list(countries)
        for country, leagues in countries.items():
            leagues_by_country[country] = leagues
    return {
        'sport': sport,
        'regions': list(SOCCER_CATALOG),
        'countriesByRegion': countries_by_region,
        'leaguesByCountry': leagues_by_country,
    }
