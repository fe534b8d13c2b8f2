"""
Name/email correlation policies for customers.

The check is a teaching heuristic, not a general email validator, so it is
pluggable: RECORDS['NAME_EMAIL_POLICY'] names the class to use.
"""

import re

from django.conf import settings
from django.utils.module_loading import import_string


class NameEmailCorrelation:
    """Decides whether an email address plausibly belongs to a named customer."""

    message = 'Email domain should relate to the customer name'

    def matches(self, name, email):
        raise NotImplementedError


class SubstringNameEmailCorrelation(NameEmailCorrelation):
    """
    Accept an email when its domain

    - is, or is a subdomain of, one of the test domains, or
    - contains any `min_overlap`-character run of the name's letters and digits.

    'Acme Corporation' matches 'acmecorporation.com' and 'acme.io', but not
    'wrongdomain.com'.
    """

    def __init__(self, min_overlap=None, test_domains=None):
        records = settings.RECORDS
        self.min_overlap = min_overlap or records['NAME_EMAIL_MIN_OVERLAP']
        self.test_domains = [
            d.lower() for d in (test_domains if test_domains is not None else records['NAME_EMAIL_TEST_DOMAINS'])
        ]

    def matches(self, name, email):
        if not name or not email or '@' not in email:
            return False
        domain = email.rsplit('@', 1)[1].lower()

        for test_domain in self.test_domains:
            if domain == test_domain or domain.endswith('.' + test_domain):
                return True

        key = re.sub(r'[^a-z0-9]', '', name.lower())
        return any(
            key[i:i + self.min_overlap] in domain
            for i in range(len(key) - self.min_overlap + 1)
        )


def get_name_email_policy():
    return import_string(settings.RECORDS['NAME_EMAIL_POLICY'])()
