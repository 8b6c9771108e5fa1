"""
Termii SMS Service for Nigeria.
Handles SMS sending and one-time-password phone verification.

Official Termii API Documentation:
https://developers.termii.com/messaging-api

Verification codes are kept in the Django cache (Redis in production) so every
worker process sees the same codes.
"""
import logging
import re
import secrets
import time
from typing import Dict, Optional

import requests
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

NIGERIAN_PHONE_PATTERN = re.compile(r'^\+234[789][01]\d{8}$')

VERIFICATION_ID_PREFIX = 'termii_'


class SMSDeliveryError(Exception):
    """Raised when the SMS gateway rejects or fails to deliver a message."""


def format_nigerian_phone_number(phone_number: str) -> str:
    """
    Normalize a Nigerian phone number to E.164 format.

    Examples:
        08031234567 -> +2348031234567
        2348031234567 -> +2348031234567
        +2348031234567 -> +2348031234567
    """
    cleaned = re.sub(r'\D', '', phone_number)

    if cleaned.startswith('0'):
        return f'+234{cleaned[1:]}'

    if cleaned.startswith('234'):
        return f'+{cleaned}'

    return f'+234{cleaned}'


def is_valid_nigerian_phone_number(phone_number: str) -> bool:
    """+234 followed by 10 digits, network prefix 70/71/80/81/90/91."""
    return bool(NIGERIAN_PHONE_PATTERN.match(phone_number))


def mask_phone(phone_number: str) -> str:
    return f"****{phone_number[-4:]}" if phone_number else ''


class TermiiSMSService:
    """
    Service for sending SMS and OTP codes via the Termii API.
    """

    SEND_PATH = '/api/sms/send'
    CODE_LENGTH = 6

    def __init__(self):
        """Initialize Termii SMS service with credentials from settings."""
        self.api_key = getattr(settings, 'TERMII_API_KEY', '')
        self.sender_id = getattr(settings, 'TERMII_SENDER_ID', 'CCSA')
        self.base_url = getattr(settings, 'TERMII_BASE_URL', 'https://v3.api.termii.com').rstrip('/')
        self.enabled = getattr(settings, 'SMS_ENABLED', False)
        self.code_ttl = getattr(settings, 'SMS_OTP_TTL_SECONDS', 600)

        if not self.api_key:
            logger.warning("Termii API key not configured. SMS sending will be simulated.")

    def send_sms(self, phone_number: str, message: str) -> Dict:
        """
        Send a plain SMS via Termii.

        Args:
            phone_number: Recipient phone number (E.164 format: +234XXXXXXXXXX)
            message: SMS message content

        Returns:
            dict: Response with success flag, message_id and provider status

        Raises:
            SMSDeliveryError: If Termii rejects the message or is unreachable
        """
        if not self.enabled or not self.api_key:
            return self._simulate_sms(phone_number, message)

        payload = {
            'to': phone_number,
            'from': self.sender_id,
            'sms': message,
            'type': 'plain',
            'api_key': self.api_key,
            'channel': 'generic',
        }

        try:
            response = requests.post(
                f"{self.base_url}{self.SEND_PATH}",
                json=payload,
                timeout=10
            )
        except requests.exceptions.Timeout as exc:
            logger.error(f"Timeout sending SMS to {mask_phone(phone_number)}")
            raise SMSDeliveryError('Request timeout') from exc
        except requests.exceptions.RequestException as exc:
            logger.error(f"Network error sending SMS to {mask_phone(phone_number)}: {exc}")
            raise SMSDeliveryError(f'Network error: {exc}') from exc

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            logger.error(
                f"Termii SMS error for {mask_phone(phone_number)}. "
                f"Status: {response.status_code}, Error: {error_data}"
            )
            raise SMSDeliveryError(f"Termii API error: {response.status_code}")

        data = response.json()
        if data.get('code') != 'ok':
            logger.error(f"Termii SMS failed for {mask_phone(phone_number)}: {data}")
            raise SMSDeliveryError(data.get('message') or 'Failed to send SMS via Termii')

        logger.info(
            f"SMS sent successfully to {mask_phone(phone_number)}. "
            f"MessageId: {data.get('message_id')}"
        )

        return {
            'success': True,
            'message_id': data.get('message_id'),
            'status': data.get('message', 'sent'),
            'phone_number': phone_number,
            'timestamp': timezone.now().isoformat(),
        }

    def send_verification_code(self, phone_number: str) -> Dict:
        """
        Generate a 6-digit OTP, send it and remember it for verification.

        Returns:
            dict: verification_id and status ('pending')
        """
        code = self._generate_code()
        message = (
            f"Your CCSA verification code is: {code}. "
            f"Valid for {self.code_ttl // 60} minutes. Do not share this code."
        )

        self.send_sms(phone_number, message)

        verification_id = f"{VERIFICATION_ID_PREFIX}{int(time.time() * 1000)}_{secrets.token_hex(5)}"
        cache.set(
            self._cache_key(verification_id),
            {'code': code, 'phone_number': phone_number},
            timeout=self.code_ttl
        )

        logger.info(f"Verification code issued for {mask_phone(phone_number)}")

        return {
            'success': True,
            'service': 'termii',
            'verification_id': verification_id,
            'status': 'pending',
        }

    def verify_code(self, verification_id: str, code: str, phone_number: Optional[str] = None) -> bool:
        """
        Check a submitted code. Successful codes are consumed.

        Expired codes have already been evicted by the cache timeout.
        """
        key = self._cache_key(verification_id)
        data = cache.get(key)

        if not data:
            logger.warning(f"Verification ID not found or expired: {verification_id[:18]}...")
            return False

        if phone_number and data['phone_number'] != phone_number:
            logger.warning(f"Verification phone mismatch for {verification_id[:18]}...")
            return False

        if not secrets.compare_digest(str(data['code']), str(code).strip()):
            logger.warning(f"Invalid verification code for {mask_phone(data['phone_number'])}")
            return False

        cache.delete(key)
        logger.info(f"Phone verified: {mask_phone(data['phone_number'])}")
        return True

    def _generate_code(self) -> str:
        return f"{secrets.randbelow(900000) + 100000}"

    @staticmethod
    def _cache_key(verification_id: str) -> str:
        return f"sms_otp:{verification_id}"

    def _simulate_sms(self, phone_number: str, message: str) -> Dict:
        """Simulate SMS sending for development/testing."""
        logger.info(
            f"\n{'='*60}\n"
            f"SIMULATED SMS\n"
            f"To: {phone_number}\n"
            f"Message: {message}\n"
            f"{'='*60}\n"
        )

        return {
            'success': True,
            'message_id': f'SIM-{timezone.now().timestamp():.0f}',
            'status': 'simulated',
            'phone_number': phone_number,
            'timestamp': timezone.now().isoformat(),
            'simulated': True,
        }


# Singleton instance
_termii_service = None


def get_sms_service() -> TermiiSMSService:
    """Get or create singleton SMS service instance."""
    global _termii_service
    if _termii_service is None:
        _termii_service = TermiiSMSService()
    return _termii_service
