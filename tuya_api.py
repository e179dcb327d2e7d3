"""Tuya OpenAPI signing, token exchange and shadow-property queries."""

import hashlib
import hmac
import logging
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List

import requests

from errors import UpstreamAuthError, UpstreamDeviceError

LOGGER = logging.getLogger(__name__)

TOKEN_PATH = '/v1.0/token?grant_type=1'
SHADOW_PATH = '/v2.0/cloud/thing/{device_id}/shadow/properties'
SIGN_METHOD = 'HMAC-SHA256'
# Tuya accepts an empty nonce; the signature must match what the platform computes.
NONCE = ''


# ------------- Signing -------------
def now_ms():
    return str(int(time.time() * 1000))


def content_hash(body=''):
    return hashlib.sha256(body.encode('utf-8')).hexdigest()


def string_to_sign(method: str, path: str, body: str = '') -> str:
    # HTTPMethod \n Content-SHA256 \n Headers \n URL (headers segment unused)
    return f"{method}\n{content_hash(body)}\n\n{path}"


def calc_sign(client_id: str, secret: str, t: str, to_sign: str,
              access_token: str = '', nonce: str = NONCE) -> str:
    """Uppercase hex HMAC-SHA256 over client_id + access_token + t + nonce + stringToSign.

    ``access_token`` is empty for the token call and set for business calls.
    """
    msg = client_id + (access_token or '') + t + nonce + to_sign
    return hmac.new(secret.encode('utf-8'), msg.encode('utf-8'), hashlib.sha256).hexdigest().upper()


@dataclass(frozen=True)
class AccessToken:
    value: str
    obtained_at: float = field(default_factory=time.time)


class TuyaClient:
    """Minimal Tuya cloud client: one token fetch, then signed shadow reads."""

    def __init__(self, access_id: str, access_secret: str, base_url: str, *,
                 session=None, timeout: float = 10, clock=now_ms, logger=None):
        self.access_id = access_id
        self.access_secret = access_secret
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session or requests.Session()
        self._clock = clock
        self._log = logger or LOGGER

    @classmethod
    def from_config(cls, config, **kwargs) -> 'TuyaClient':
        return cls(config.access_id, config.access_secret, config.base_url,
                   timeout=config.request_timeout, **kwargs)

    def headers(self, method: str, path: str, t: str, access_token: str = '', body: str = '') -> Dict[str, str]:
        sig = calc_sign(self.access_id, self.access_secret, t,
                        string_to_sign(method, path, body), access_token)
        headers = {'client_id': self.access_id}
        if access_token:
            headers['access_token'] = access_token
        headers.update({
            'sign': sig,
            'sign_method': SIGN_METHOD,
            't': t,
            'nonce': NONCE,
            'Content-Type': 'application/json',
        })
        return headers

    # ------------- Token -------------
    def get_token(self) -> AccessToken:
        headers = self.headers('GET', TOKEN_PATH, self._clock())
        try:
            r = self._session.get(self.base_url + TOKEN_PATH, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            self._log.error('[TOKEN] Request failed: %s', e)
            raise UpstreamAuthError(None, str(e)) from e

        data = _decode(r)
        if not r.ok or not isinstance(data, dict) or not data.get('success'):
            self._log.error('[TOKEN] Tuya API error (HTTP %s): %s', r.status_code, data)
            raise UpstreamAuthError(r.status_code, data)

        result = data.get('result')
        token = result.get('access_token') if isinstance(result, dict) else None
        if not token or not isinstance(token, str):
            self._log.error('[TOKEN] Token API response missing result: %s', data)
            raise UpstreamAuthError(r.status_code, data)
        return AccessToken(token)

    # ------------- Devices -------------
    def get_device_properties(self, device_id: str, token: AccessToken, t: str = None) -> Dict[str, Any]:
        """Raw shadow-properties response for one device."""
        path = SHADOW_PATH.format(device_id=device_id)
        headers = self.headers('GET', path, t or self._clock(), token.value)
        try:
            r = self._session.get(self.base_url + path, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            self._log.error('[DEVICE] Request for %s failed: %s', device_id, e)
            raise UpstreamDeviceError(device_id, None, str(e)) from e

        data = _decode(r)
        if not r.ok or not isinstance(data, dict) or not data.get('success'):
            self._log.error('[DEVICE] Tuya API error for %s (HTTP %s): %s', device_id, r.status_code, data)
            raise UpstreamDeviceError(device_id, r.status_code, data)
        return data

    def get_properties_for_devices(self, device_ids: List[str], token: AccessToken) -> List[Dict[str, Any]]:
        """Query all devices in parallel. Results follow ``device_ids`` order.

        The first failure aborts the batch and is raised; nothing partial is returned.
        """
        if not device_ids:
            return []
        t = self._clock()
        if len(device_ids) == 1:
            return [self.get_device_properties(device_ids[0], token, t)]

        executor = ThreadPoolExecutor(max_workers=len(device_ids), thread_name_prefix='tuya-device')
        try:
            futures = [executor.submit(self.get_device_properties, device_id, token, t)
                       for device_id in device_ids]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


def _decode(response):
    try:
        return response.json()
    except ValueError:
        return response.text
