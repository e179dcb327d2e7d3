import logging
from dataclasses import dataclass
from typing import Any, Dict

from climate_config import ClimateConfig
from errors import IncompleteReadingError
from reading_cache import ReadingCache
from sensor_readings import build_incomplete_payload, build_payload, extract_reading
from tuya_api import TuyaClient

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadingsResult:
    payload: Dict[str, Any]
    cached: bool


class ClimateService:
    """Cache check, token, parallel device reads, extraction, cache store.

    Upstream errors propagate untouched and never write the cache; an
    incomplete reading raises IncompleteReadingError, also without a write.
    """

    def __init__(self, config: ClimateConfig, client: TuyaClient, cache: ReadingCache, logger=None):
        self.config = config
        self.client = client
        self.cache = cache
        self._log = logger or LOGGER

    @classmethod
    def from_config(cls, config: ClimateConfig, session=None, logger=None) -> 'ClimateService':
        client = TuyaClient.from_config(config, session=session, logger=logger)
        return cls(config, client, ReadingCache(ttl=config.cache_ttl, logger=logger), logger=logger)

    def get_readings(self) -> ReadingsResult:
        entry = self.cache.get()
        if entry is not None:
            self._log.info('[CACHE] Returning data from cache.')
            return ReadingsResult(entry.payload, cached=True)

        self._log.info('[API] Cache is stale or empty. Fetching new data from Tuya API.')
        devices = self.config.devices()
        token = self.client.get_token()
        raw = dict(zip(devices, self.client.get_properties_for_devices(list(devices.values()), token)))

        readings = {
            label: extract_reading(raw[label], device_id, self.config.humidity_ceiling, logger=self._log)
            for label, device_id in devices.items()
        }
        incomplete = [devices[label] for label, reading in readings.items() if reading is None]
        if incomplete:
            raise IncompleteReadingError(incomplete, build_incomplete_payload(readings, raw))

        payload = build_payload(devices, readings)
        self.cache.put(payload)
        return ReadingsResult(payload, cached=False)
