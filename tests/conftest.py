import pytest

from data_loader import Dataset

COMMUNES = [
    {'nom': 'Ajaccio', 'lat': 41.92, 'lng': 8.74, 'population_15_29': 12000.4,
     'nb_equipements': 193, 'consototale': 400000, 'part_residentiel': 50,
     'part_tertiaire': 40, 'part_industrie': 8, 'part_agriculture': 2},
    {'nom': 'Bastia', 'lat': 42.70, 'lng': 9.45, 'population_15_29': 7000,
     'nb_equipements': 120, 'consototale': 300000, 'part_residentiel': 40,
     'part_tertiaire': 50, 'part_industrie': 9, 'part_agriculture': 1},
    {'nom': 'Corte', 'lat': 42.30, 'lng': 9.15, 'population_15_29': 2500,
     'nb_equipements': 12, 'consototale': 30000, 'part_residentiel': 60,
     'part_tertiaire': 30, 'part_industrie': 5, 'part_agriculture': 5},
    {'nom': 'Zonza', 'lat': 41.75, 'lng': 9.17, 'population_15_29': None,
     'nb_equipements': 4, 'consototale': None, 'part_residentiel': 80,
     'part_tertiaire': 10, 'part_industrie': 0, 'part_agriculture': 10},
    {'nom': 'Sans Position', 'lat': None, 'lng': 9.0, 'population_15_29': 100,
     'nb_equipements': 50, 'consototale': 1000},
]

FIRES = [
    {'commune': 'Corte', 'annee': 2003, 'date': '2003-08-01', 'surface_ha': 100, 'lat': 42.30, 'lng': 9.15},
    {'commune': 'Corte', 'annee': '2003', 'date': '2003-08-15', 'surface_ha': 50, 'lat': 42.30, 'lng': 9.15},
    {'commune': 'Zonza', 'annee': 2017, 'date': '2017-07-24', 'surface_ha': 10, 'lat': 41.75, 'lng': 9.17},
    {'commune': 'Bastia', 'annee': 2017.0, 'date': '2017-08-02', 'surface_ha': 30.6, 'lat': 42.70, 'lng': 9.45},
    {'commune': 'Ajaccio', 'annee': 2009, 'date': '2009-07-10', 'surface_ha': 25, 'lat': 41.92, 'lng': 8.74},
    {'commune': 'Calvi', 'annee': 2009, 'date': '2009-07-11', 'surface_ha': 5, 'lat': 42.57, 'lng': 8.76},
    {'commune': 'Porto', 'annee': 2012, 'date': '2012-09-01', 'surface_ha': 2.4, 'lat': 42.27, 'lng': 8.70},
]


@pytest.fixture
def commune_records():
    return [dict(record) for record in COMMUNES]


@pytest.fixture
def fire_records():
    return [dict(record) for record in FIRES]


@pytest.fixture
def dataset(commune_records, fire_records):
    return Dataset.from_records(commune_records, fire_records)
