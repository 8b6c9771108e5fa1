"""
NIN Lookup Service

Proxies National Identification Number lookups to the configured identity
API (level-4 lookup). Credentials come from NIN_API_BASE_URL / NIN_API_KEY.
"""

import logging
import re
from typing import Any, Dict

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

NIN_PATTERN = re.compile(r'^\d{11}$')


class NINLookupError(Exception):
    """Base exception for NIN lookup failures"""
    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or 'NIN_LOOKUP_ERROR'


class NINNotFoundError(NINLookupError):
    """The identity API has no record for this NIN"""
    def __init__(self, message: str = 'NIN not found'):
        super().__init__(message, code='NIN_NOT_FOUND')


class NINServiceUnavailable(NINLookupError):
    """The identity API is not configured"""
    def __init__(self, message: str = 'NIN verification service unavailable'):
        super().__init__(message, code='NIN_SERVICE_UNAVAILABLE')


def is_valid_nin(nin: str) -> bool:
    return bool(nin and NIN_PATTERN.match(nin))


def mask_nin(nin: str) -> str:
    return f"****{nin[-4:]}" if nin else ''


class NINLookupService:
    """
    Usage:
        service = NINLookupService()
        record = service.lookup('12345678901')
    """

    LOOKUP_PATH = '/api/lookup/nin'

    def __init__(self):
        self.base_url = (getattr(settings, 'NIN_API_BASE_URL', '') or '').rstrip('/')
        self.api_key = getattr(settings, 'NIN_API_KEY', '') or ''
        self.timeout = getattr(settings, 'NIN_API_TIMEOUT', 15)

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def lookup(self, nin: str) -> Dict[str, Any]:
        """
        Look up a NIN and return the identity record.

        Raises:
            NINServiceUnavailable: credentials are not configured
            NINNotFoundError: the API has no record for the NIN
            NINLookupError: any other upstream failure
        """
        if not self.is_configured:
            logger.warning("NIN API not configured")
            raise NINServiceUnavailable()

        logger.debug(f"Making NIN API request for NIN: {mask_nin(nin)}")

        try:
            response = requests.get(
                f"{self.base_url}{self.LOOKUP_PATH}",
                params={'op': 'level-4', 'nin': nin},
                headers={
                    'Content-Type': 'application/json',
                    'api-key': self.api_key,
                },
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as exc:
            logger.error(f"NIN API timeout for {mask_nin(nin)}")
            raise NINLookupError('NIN lookup timed out', code='TIMEOUT') from exc
        except requests.exceptions.RequestException as exc:
            logger.error(f"NIN API network error: {exc}")
            raise NINLookupError(f'Network error: {exc}', code='NETWORK_ERROR') from exc

        if response.status_code == 404:
            raise NINNotFoundError()

        if not response.ok:
            logger.error(f"NIN API request failed: {response.status_code} {response.reason}")
            raise NINLookupError(
                f"API request failed: {response.status_code} {response.reason}",
                code='UPSTREAM_ERROR'
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise NINLookupError('Invalid response from NIN API', code='INVALID_RESPONSE') from exc

        logger.debug(f"NIN verification response status: {data.get('status')}")

        if data.get('status') == 200 and data.get('data'):
            return data['data']

        if data.get('message') == 'norecord' or data.get('status') == 404:
            raise NINNotFoundError()

        raise NINLookupError(data.get('message') or 'NIN not found or invalid')
