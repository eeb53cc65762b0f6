"""
Client IP detection tests.

Forwarding headers are trusted only from configured proxies, so a caller
cannot write an arbitrary address into security logs or webhook records.
"""

from django.http import HttpRequest
from django.test import SimpleTestCase, override_settings

from apps.common.validators import get_client_ip


class ClientIPDetectionTests(SimpleTestCase):

    def setUp(self):
        self.request = HttpRequest()
        self.request.META = {}

    def test_direct_connection_uses_remote_addr(self):
        self.request.META = {'REMOTE_ADDR': '203.0.113.10'}

        self.assertEqual(get_client_ip(self.request), '203.0.113.10')

    @override_settings(IPWARE_TRUSTED_PROXY_LIST=[])
    def test_forwarded_header_ignored_without_trusted_proxies(self):
        self.request.META = {'REMOTE_ADDR': '10.0.0.9', 'HTTP_X_FORWARDED_FOR': '1.2.3.4'}

        self.assertEqual(get_client_ip(self.request), '10.0.0.9')

    @override_settings(IPWARE_TRUSTED_PROXY_LIST=['10.0.0.0/8'])
    def test_forwarded_header_honoured_from_trusted_proxy(self):
        self.request.META = {'REMOTE_ADDR': '10.0.0.9', 'HTTP_X_FORWARDED_FOR': '203.0.113.7'}

        self.assertEqual(get_client_ip(self.request), '203.0.113.7')

    @override_settings(IPWARE_TRUSTED_PROXY_LIST=['10.0.0.0/8'])
    def test_forwarded_header_ignored_from_untrusted_peer(self):
        self.request.META = {'REMOTE_ADDR': '198.51.100.20', 'HTTP_X_FORWARDED_FOR': '203.0.113.7'}

        self.assertEqual(get_client_ip(self.request), '198.51.100.20')

    @override_settings(IPWARE_TRUSTED_PROXY_LIST=['not-an-ip', '10.0.0.9'])
    def test_malformed_proxy_entries_are_skipped(self):
        self.request.META = {'REMOTE_ADDR': '10.0.0.9', 'HTTP_X_FORWARDED_FOR': '203.0.113.7'}

        self.assertEqual(get_client_ip(self.request), '203.0.113.7')

    def test_missing_remote_addr_falls_back_to_loopback(self):
        self.assertEqual(get_client_ip(self.request), '127.0.0.1')
