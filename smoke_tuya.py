"""Quick check against the live Tuya cloud using the environment config.

    CLIENT_KEY=... CLIENT_SECRET=... DEVICE_ID=... python smoke_tuya.py
"""
import json
import sys

from climate_config import ClimateConfig
from climate_service import ClimateService
from errors import ConfigError, IncompleteReadingError, TuyaError


def main(environ=None, session=None):
    try:
        config = ClimateConfig.from_env(environ)
    except ConfigError as e:
        print(f"Config error: {e}")
        return 1

    service = ClimateService.from_config(config, session=session)
    print(f"Endpoint: {config.base_url}")
    print(f"Devices: {config.devices()}")
    print("Fetching token and device properties...")

    try:
        result = service.get_readings()
    except IncompleteReadingError as e:
        print("Readings incomplete:", json.dumps(e.payload, indent=2))
        return 1
    except TuyaError as e:
        print(f"Tuya error: {e}")
        return 1

    print("Readings:", json.dumps(result.payload, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
