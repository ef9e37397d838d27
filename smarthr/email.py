import logging

import httpx

logger = logging.getLogger(__name__)

RESEND_API_URL = 'https://api.resend.com/emails'
DEFAULT_SENDER = 'SmartHR <noreply@smarthr.com>'


class EmailClient:

    def __init__(self, api_key=None, sender=DEFAULT_SENDER, suppress=False, timeout=10.0, http=None):
        self.api_key = api_key
        self.sender = sender or DEFAULT_SENDER
        # Suppressed messages are kept in outbox
        self.suppress = suppress
        self.timeout = timeout
        self.http = http
        self.outbox = []

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('RESEND_API_KEY'),
            sender=config.get('RESEND_FROM_EMAIL'),
            suppress=bool(config.get('MAIL_SUPPRESS_SEND') or config.get('TESTING')),
        )

    def send_email(self, to, subject, html):
        message = {'from': self.sender, 'to': to, 'subject': subject, 'html': html}

        if self.suppress:
            logger.info('Email suppressed: %r to %s', subject, to)
            self.outbox.append(message)
            return True, None

        if not self.api_key:
            logger.warning('RESEND_API_KEY not set, email %r to %s not sent', subject, to)
            return False, 'Email API key is not configured'

        try:
            response = self._post(message)
        except httpx.HTTPError as e:
            logger.error('Email send exception: %s', e)
            return False, str(e)

        if response.status_code >= 400:
            logger.error('Email send error (%s): %s', response.status_code, response.text)
            return False, response.text

        logger.info('Email sent: %r to %s', subject, to)
        return True, None

    def _post(self, message):
        headers = {'Authorization': f'Bearer {self.api_key}'}
        if self.http is not None:
            return self.http.post(RESEND_API_URL, json=message, headers=headers)
        with httpx.Client(timeout=self.timeout) as http:
            return http.post(RESEND_API_URL, json=message, headers=headers)
