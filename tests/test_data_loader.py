import json

import pytest
import requests

import data_loader
from json_loader import DataSourceError, load_json_records, records_from_payload


@pytest.fixture
def data_files(tmp_path, commune_records, fire_records):
    communes_path = tmp_path / 'communes.json'
    fires_path = tmp_path / 'fires.json'
    communes_path.write_text(json.dumps(commune_records), encoding='utf-8')
    fires_path.write_text(json.dumps(fire_records), encoding='utf-8')
    return str(communes_path), str(fires_path)


@pytest.fixture(autouse=True)
def clean_cache():
    data_loader.reset_dataset_cache()
    yield
    data_loader.reset_dataset_cache()


def test_load_json_records_from_file(data_files):
    records = load_json_records(data_files[0])
    assert len(records) == 5
    assert records[0]['nom'] == 'Ajaccio'


def test_load_json_records_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json_records(str(tmp_path / 'absent.json'))


def test_load_json_records_invalid_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('[{"nom": ', encoding='utf-8')
    with pytest.raises(DataSourceError):
        load_json_records(str(path))


def test_records_from_feature_collection():
    payload = {
        'type': 'FeatureCollection',
        'features': [
            {'type': 'Feature', 'properties': {'nom': 'Corte'},
             'geometry': {'type': 'Point', 'coordinates': [9.15, 42.30]}},
            {'type': 'Feature', 'properties': {'nom': 'Sans geometrie'}, 'geometry': None},
        ]
    }
    records = records_from_payload(payload)

    assert records[0] == {'nom': 'Corte', 'lng': 9.15, 'lat': 42.30}
    assert records[1] == {'nom': 'Sans geometrie'}


def test_records_from_payload_rejects_other_shapes():
    with pytest.raises(DataSourceError):
        records_from_payload({'nom': 'Corte'})
    with pytest.raises(DataSourceError):
        records_from_payload([1, 2, 3])


class _FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status
        self.headers = {'content-length': '2048'}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def test_load_json_records_from_url(monkeypatch, fire_records):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(fire_records)

    monkeypatch.setattr(requests, 'get', fake_get)
    records = load_json_records('https://example.org/fires.json', timeout=5)

    assert len(records) == len(fire_records)
    assert calls == [('https://example.org/fires.json', 5)]


def test_load_json_records_http_error(monkeypatch):
    monkeypatch.setattr(requests, 'get', lambda url, timeout: _FakeResponse([], status=404))
    with pytest.raises(DataSourceError):
        load_json_records('https://example.org/missing.json')


def test_load_json_records_timeout(monkeypatch):
    def fake_get(url, timeout):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(requests, 'get', fake_get)
    with pytest.raises(DataSourceError):
        load_json_records('https://example.org/slow.json', timeout=1)


def test_load_dataset_normalizes_both_sources(data_files):
    dataset = data_loader.load_dataset(*data_files)

    assert len(dataset.communes) == 4
    assert len(dataset.fires) == 7


def test_get_dataset_caches_first_load(data_files, monkeypatch):
    first = data_loader.get_dataset(*data_files)
    assert data_loader.is_dataset_cached()

    def fail(*args, **kwargs):
        raise AssertionError("dataset should not be reloaded")

    monkeypatch.setattr(data_loader, 'load_dataset', fail)
    assert data_loader.get_dataset(*data_files) is first


def test_get_dataset_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        data_loader.get_dataset(str(tmp_path / 'a.json'), str(tmp_path / 'b.json'))
    assert not data_loader.is_dataset_cached()


def test_set_dataset_installs_instance(dataset):
    data_loader.set_dataset(dataset)
    assert data_loader.get_dataset() is dataset
