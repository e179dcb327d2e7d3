"""Shared fixtures: a fake requests session standing in for the Tuya cloud."""

import logging
import threading

import pytest

from climate_config import ClimateConfig
from climate_service import ClimateService
from reading_cache import ReadingCache
from tuya_api import TuyaClient

logging.getLogger('tuya_api').setLevel(logging.WARNING)

BASE_URL = 'https://openapi.example.test'
TOKEN_URL = BASE_URL + '/v1.0/token?grant_type=1'


def shadow_url(device_id):
    return f'{BASE_URL}/v2.0/cloud/thing/{device_id}/shadow/properties'


def token_ok(token='T1'):
    return {'success': True, 'result': {'access_token': token, 'expire_time': 7200}}


def shadow_ok(temperature=235, humidity=70, temp_code='temp_current', hum_code='humidity_value'):
    return {'success': True, 'result': {'properties': [
        {'code': temp_code, 'value': temperature},
        {'code': hum_code, 'value': humidity},
    ]}}


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def text(self):
        return self._body if isinstance(self._body, str) else repr(self._body)

    def json(self):
        if isinstance(self._body, str):
            raise ValueError('not JSON')
        return self._body


class FakeSession:
    """Maps URL -> FakeResponse (or exception) and records every GET."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, headers=None, timeout=None):
        with self._lock:
            self.calls.append({'url': url, 'headers': headers, 'timeout': timeout})
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route()
        return route

    def urls(self):
        return [call['url'] for call in self.calls]


@pytest.fixture()
def config():
    return ClimateConfig(
        access_id='test_id',
        access_secret='test_secret',
        device_id='D1',
        wine_device_id='D2',
        endpoint=BASE_URL,
    )


@pytest.fixture()
def single_config():
    return ClimateConfig(access_id='test_id', access_secret='test_secret', device_id='D1', endpoint=BASE_URL)


@pytest.fixture()
def session():
    return FakeSession({
        TOKEN_URL: FakeResponse(token_ok()),
        shadow_url('D1'): FakeResponse(shadow_ok(235, 70)),
        shadow_url('D2'): FakeResponse(shadow_ok(128, 55, 'va_temperature', 'va_humidity')),
    })


@pytest.fixture()
def clock():
    class Clock:
        now = 1000.0

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture()
def service(config, session, clock):
    client = TuyaClient.from_config(config, session=session, clock=lambda: '1700000000000')
    return ClimateService(config, client, ReadingCache(ttl=config.cache_ttl, clock=clock))


