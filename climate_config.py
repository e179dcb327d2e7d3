import os
from dataclasses import dataclass
from typing import Dict, Optional

from errors import ConfigError

DEFAULT_ENDPOINT = 'https://openapi.tuyaus.com'
DEFAULT_CACHE_TTL = 5 * 60
DEFAULT_HUMIDITY_CEILING = 65
DEFAULT_REQUEST_TIMEOUT = 10


@dataclass(frozen=True)
class ClimateConfig:
    """Resolved settings for one process. Validated once at startup."""

    access_id: str
    access_secret: str
    device_id: str
    wine_device_id: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT
    cache_ttl: float = DEFAULT_CACHE_TTL
    humidity_ceiling: int = DEFAULT_HUMIDITY_CEILING
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, environ=None) -> 'ClimateConfig':
        env = os.environ if environ is None else environ
        config = cls(
            access_id=(env.get('CLIENT_KEY') or '').strip(),
            access_secret=(env.get('CLIENT_SECRET') or '').strip(),
            device_id=(env.get('DEVICE_ID') or '').strip(),
            wine_device_id=(env.get('WINE_DEVICE_ID') or '').strip() or None,
            endpoint=(env.get('TUYA_API_ENDPOINT') or DEFAULT_ENDPOINT).strip(),
            cache_ttl=_number(env, 'CACHE_DURATION', DEFAULT_CACHE_TTL, float),
            humidity_ceiling=_number(env, 'HUMIDITY_CEILING', DEFAULT_HUMIDITY_CEILING, int),
            request_timeout=_number(env, 'REQUEST_TIMEOUT', DEFAULT_REQUEST_TIMEOUT, float),
        )
        config.validate()
        return config

    def validate(self):
        missing = [name for name, value in (
            ('CLIENT_KEY', self.access_id),
            ('CLIENT_SECRET', self.access_secret),
            ('DEVICE_ID', self.device_id),
        ) if not value]
        if missing:
            raise ConfigError(missing)
        if not self.endpoint.startswith(('http://', 'https://')):
            raise ConfigError(message=f"TUYA_API_ENDPOINT must be an http(s) URL, got {self.endpoint!r}")
        if self.cache_ttl < 0 or self.humidity_ceiling < 0:
            raise ConfigError(message='CACHE_DURATION and HUMIDITY_CEILING must not be negative')
        if self.request_timeout <= 0:
            raise ConfigError(message='REQUEST_TIMEOUT must be positive')

    @property
    def base_url(self) -> str:
        return self.endpoint.rstrip('/')

    def devices(self) -> Dict[str, str]:
        """Ordered {label: device_id}; ``wine_device`` only when configured."""
        devices = {'device': self.device_id}
        if self.wine_device_id:
            devices['wine_device'] = self.wine_device_id
        return devices


def _number(env, name, default, kind):
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(message=f"{name} must be a number, got {raw!r}") from None
