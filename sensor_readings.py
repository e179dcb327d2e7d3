import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)

# Priority order: the first listed code wins when a device reports both.
TEMPERATURE_CODES = ('temp_current', 'va_temperature')
HUMIDITY_CODES = ('humidity_value', 'va_humidity')
UNIT = 'celsius'
HUMIDITY_CEILING = 65


@dataclass(frozen=True)
class NormalizedReading:
    temperature: int
    humidity: float
    unit: str = UNIT

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def find_property(properties, codes):
    values = {}
    for prop in properties:
        if isinstance(prop, dict) and 'code' in prop and prop['code'] not in values:
            values[prop['code']] = prop.get('value')
    return next((values[code] for code in codes if values.get(code) is not None), None)


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_celsius(raw) -> int:
    # Tuya reports tenths of a degree
    return int(raw // 10)


def cap_humidity(raw, ceiling=HUMIDITY_CEILING):
    # Some sensors glitch high; clamp instead of reporting nonsense.
    return min(raw, ceiling)


def extract_reading(raw_response: dict, device_id: str, humidity_ceiling: int = HUMIDITY_CEILING,
                    logger=None) -> Optional[NormalizedReading]:
    """Normalized reading for one device, or None if either value is missing."""
    log = logger or LOGGER
    result = raw_response.get('result') if isinstance(raw_response, dict) else None
    properties = result.get('properties') if isinstance(result, dict) else None
    if not isinstance(properties, list):
        log.warning('[DEVICE] No properties in response for %s: %s', device_id, raw_response)
        return None

    temperature = find_property(properties, TEMPERATURE_CODES)
    humidity = find_property(properties, HUMIDITY_CODES)
    if temperature is None or humidity is None:
        log.warning('[DEVICE] Temperature or humidity data not found for %s: %s', device_id, raw_response)
        return None
    if not is_number(temperature) or not is_number(humidity):
        log.warning('[DEVICE] Non-numeric temperature or humidity for %s: %s', device_id, raw_response)
        return None

    return NormalizedReading(
        temperature=to_celsius(temperature),
        humidity=cap_humidity(humidity, humidity_ceiling),
    )


# ------------- Response payloads -------------
def build_payload(devices: Dict[str, str], readings: Dict[str, NormalizedReading]) -> Dict[str, Any]:
    """Single device -> {deviceId, temperature, humidity, unit}; several -> keyed by label."""
    if len(devices) == 1:
        label, device_id = next(iter(devices.items()))
        return {'deviceId': device_id, **readings[label].as_dict()}
    return {label: readings[label].as_dict() for label in devices}


def build_incomplete_payload(readings: Dict[str, Optional[NormalizedReading]],
                             raw_responses: Dict[str, Any]) -> Dict[str, Any]:
    plural = 'one or more devices' if len(readings) > 1 else 'the device'
    return {
        'message': f'Temperature or humidity data not found for {plural}. Check device status codes.',
        'readings': {label: reading.as_dict() if reading else None for label, reading in readings.items()},
        'fullResponse': raw_responses,
    }
