"""Error kinds raised by the Tuya climate readings service."""


class TuyaError(Exception):
    """Base class for everything the service raises on purpose."""


class ConfigError(TuyaError):
    """Required configuration is missing or malformed."""

    def __init__(self, missing=None, message=None):
        self.missing = list(missing or [])
        if message is None:
            message = f"Missing required configuration: {', '.join(self.missing)}"
        super().__init__(message)


class UpstreamAuthError(TuyaError):
    """The token call failed (bad status, bad body or success=false)."""

    def __init__(self, status_code, details):
        self.status_code = status_code
        self.details = details
        super().__init__(f"Failed to fetch access token (HTTP {status_code}): {details}")


class UpstreamDeviceError(TuyaError):
    def __init__(self, device_id, status_code, details):
        self.device_id = device_id
        self.status_code = status_code
        self.details = details
        super().__init__(f"Failed to fetch data for device {device_id}: {details}")


class IncompleteReadingError(TuyaError):
    """Upstream answered, but temperature or humidity is missing for a device.

    Not a server failure: ``payload`` carries the partial readings and the raw
    upstream responses so the caller can report them.
    """

    def __init__(self, device_ids, payload):
        self.device_ids = list(device_ids)
        self.payload = payload
        super().__init__(f"Temperature or humidity data not found for {', '.join(self.device_ids)}")
