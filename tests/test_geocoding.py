"""
Tests for the geocoding client (HTTP session mocked).
"""
from unittest.mock import Mock

import pytest
import requests

from expose_builder.api.client import Coordinates, GeocodingClient, GeocodingError


def make_session(payload=None, status_code=200, exc=None):
    session = Mock()
    session.headers = {}
    if exc is not None:
        session.get.side_effect = exc
        return session
    response = Mock(ok=200 <= status_code < 400, status_code=status_code)
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    session.get.return_value = response
    return session


class TestGeocodingClient:

    def test_headers_identify_the_client(self):
        session = make_session([])
        GeocodingClient(session=session)
        assert 'User-Agent' in session.headers
        assert session.headers['Accept'] == 'application/json'

    def test_geocode(self):
        session = make_session([{'lat': '52.52', 'lon': '13.405'}])
        client = GeocodingClient(base_url='https://geo.example/search/', timeout=5, session=session)

        coordinates = client.geocode(' Hauptstr. 5, Berlin ')

        assert coordinates == Coordinates(lat=52.52, lon=13.405)
        session.get.assert_called_once_with(
            'https://geo.example/search',
            params={'format': 'json', 'limit': 1, 'q': 'Hauptstr. 5, Berlin'},
            timeout=5,
        )

    def test_no_match(self):
        assert GeocodingClient(session=make_session([])).geocode('Nirgendwo') is None
        assert GeocodingClient(session=make_session({'error': 'x'})).geocode('Nirgendwo') is None

    def test_empty_address_does_not_call_the_service(self):
        session = make_session([])
        assert GeocodingClient(session=session).geocode('  ') is None
        session.get.assert_not_called()

    def test_http_error(self):
        client = GeocodingClient(session=make_session(status_code=503))
        with pytest.raises(GeocodingError) as exc:
            client.geocode('Hauptstr. 5')
        assert exc.value.status_code == 503

    def test_transport_error(self):
        client = GeocodingClient(session=make_session(exc=requests.ConnectionError('down')))
        with pytest.raises(GeocodingError):
            client.geocode('Hauptstr. 5')

    def test_invalid_payloads(self):
        with pytest.raises(GeocodingError):
            GeocodingClient(session=make_session(ValueError('no json'))).geocode('Hauptstr. 5')
        with pytest.raises(GeocodingError):
            GeocodingClient(session=make_session([{'name': 'x'}])).geocode('Hauptstr. 5')

    def test_geocode_or_none_degrades(self):
        client = GeocodingClient(session=make_session(status_code=500))
        assert client.geocode_or_none('Hauptstr. 5') is None

    def test_coordinates_to_dict(self):
        assert Coordinates(1.5, 2.5).to_dict() == {'lat': 1.5, 'lon': 2.5}
