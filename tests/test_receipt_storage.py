"""
Test Suite for receipt delivery (local save and R2 upload)

Run with: python -m pytest tests/test_receipt_storage.py
"""

import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

from pdf_receipt_renderer import ReceiptArtifact
from receipt_storage import (
    R2Settings,
    ReceiptStorageService,
    content_disposition,
    link_lifetime_days,
    receipt_object_key,
    save_receipt,
)

R2_ENV = {
    'R2_ACCOUNT_ID': 'acct123',
    'R2_ACCESS_KEY_ID': 'key',
    'R2_SECRET_ACCESS_KEY': 'secret',
    'R2_BUCKET': 'receipts-test',
}


def _artifact(filename: str = 'yoga_receipt_Asha_Rao.pdf') -> ReceiptArtifact:
    return ReceiptArtifact(content=b'%PDF-1.4 test', filename=filename)


def _settings(**overrides) -> R2Settings:
    values = dict(account_id='acct123', access_key='key', secret_key='secret', bucket='receipts-test')
    values.update(overrides)
    return R2Settings(**values)


class TestSaveReceipt(unittest.TestCase):
    """Local persistence under the suggested file name"""

    def test_writes_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_receipt(_artifact(), tmp)
            self.assertEqual(path, Path(tmp) / 'yoga_receipt_Asha_Rao.pdf')
            self.assertEqual(path.read_bytes(), b'%PDF-1.4 test')

    def test_creates_missing_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / 'nested' / 'receipts'
            path = save_receipt(_artifact(), target)
            self.assertTrue(path.exists())

    def test_writes_accented_file_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_receipt(_artifact('yoga_receipt_José_García.pdf'), tmp)
            self.assertEqual(path.name, 'yoga_receipt_José_García.pdf')
            self.assertTrue(path.exists())


# =============================================================================
# KEYS, HEADERS AND LINK LIFETIME
# =============================================================================

class TestReceiptObjectKey(unittest.TestCase):
    """Receipts are filed by issue month under a random token"""

    def test_filed_by_issue_month(self):
        key = receipt_object_key(_artifact(), date(2025, 1, 15))
        parts = key.split('/')
        self.assertEqual(parts[:3], ['receipts', '2025', '01'])
        self.assertEqual(len(parts[3]), 32)
        self.assertEqual(parts[4], 'yoga_receipt_Asha_Rao.pdf')

    def test_same_receipt_gets_distinct_keys(self):
        first = receipt_object_key(_artifact(), date(2025, 1, 15))
        second = receipt_object_key(_artifact(), date(2025, 1, 15))
        self.assertNotEqual(first, second)


class TestContentDisposition(unittest.TestCase):

    def test_ascii_name(self):
        self.assertEqual(content_disposition('yoga_receipt_Asha_Rao.pdf'),
                         'attachment; filename="yoga_receipt_Asha_Rao.pdf"')

    def test_accented_name_has_utf8_variant(self):
        header = content_disposition('yoga_receipt_José_García.pdf')
        self.assertIn('filename="yoga_receipt_Jose_Garcia.pdf"', header)
        self.assertIn("filename*=UTF-8''yoga_receipt_Jos%C3%A9_Garc%C3%ADa.pdf", header)
        header.encode('ascii')

    def test_non_latin_name_is_ascii_safe(self):
        header = content_disposition('yoga_receipt_राम.pdf')
        header.encode('ascii')
        self.assertIn("filename*=UTF-8''yoga_receipt_", header)


class TestLinkLifetime(unittest.TestCase):

    def test_default_used_when_not_requested(self):
        self.assertEqual(link_lifetime_days(None, 3), 3)

    def test_capped_at_seven_days(self):
        self.assertEqual(link_lifetime_days(30, 3), 7)
        self.assertEqual(link_lifetime_days(None, 30), 7)

    def test_at_least_one_day(self):
        self.assertEqual(link_lifetime_days(0, 3), 1)
        self.assertEqual(link_lifetime_days(-2, 3), 1)


# =============================================================================
# SETTINGS
# =============================================================================

class TestR2Settings(unittest.TestCase):

    def test_from_environment(self):
        env = dict(R2_ENV, RECEIPT_LINK_EXPIRY_DAYS='3')
        with patch.dict('os.environ', env, clear=True):
            settings = R2Settings.from_environment()
        self.assertEqual(settings.endpoint, 'https://acct123.r2.cloudflarestorage.com')
        self.assertEqual(settings.bucket, 'receipts-test')
        self.assertEqual(settings.link_days, 3)
        self.assertEqual(settings.validate(), (True, ""))

    def test_defaults_when_unset(self):
        with patch.dict('os.environ', {}, clear=True):
            settings = R2Settings.from_environment()
        self.assertIsNone(settings.endpoint)
        self.assertEqual(settings.bucket, 'yoga-receipts')
        is_valid, error = settings.validate()
        self.assertFalse(is_valid)
        self.assertIn('R2_ACCOUNT_ID', error)

    def test_missing_secret_reported(self):
        is_valid, error = _settings(secret_key='').validate()
        self.assertFalse(is_valid)
        self.assertIn('R2_SECRET_ACCESS_KEY', error)


# =============================================================================
# UPLOAD
# =============================================================================

class TestReceiptStorageService(unittest.TestCase):
    """R2 upload with presigned download URL"""

    def test_not_configured(self):
        with patch.dict('os.environ', {}, clear=True):
            service = ReceiptStorageService()
            is_configured, error = service.is_configured()
            self.assertFalse(is_configured)
            self.assertIn('R2_ACCOUNT_ID', error)
            self.assertIsNone(service.upload_pdf(_artifact()))

    @patch('receipt_storage._r2_client')
    def test_not_configured_never_builds_client(self, mock_client):
        self.assertIsNone(ReceiptStorageService(_settings(access_key='')).upload_pdf(_artifact()))
        mock_client.assert_not_called()

    @patch('receipt_storage._r2_client')
    def test_upload_pdf(self, mock_client):
        client = MagicMock()
        client.generate_presigned_url.return_value = 'https://signed.example/receipt'
        mock_client.return_value = client

        url = ReceiptStorageService(_settings()).upload_pdf(
            _artifact(), expiry_days=30, issued_on=date(2025, 1, 15))

        self.assertEqual(url, 'https://signed.example/receipt')
        put_kwargs = client.put_object.call_args.kwargs
        self.assertEqual(put_kwargs['Bucket'], 'receipts-test')
        self.assertEqual(put_kwargs['ContentType'], 'application/pdf')
        self.assertEqual(put_kwargs['Body'], b'%PDF-1.4 test')
        self.assertTrue(put_kwargs['Key'].startswith('receipts/2025/01/'))
        self.assertTrue(put_kwargs['Key'].endswith('/yoga_receipt_Asha_Rao.pdf'))
        # Expiry is capped at 7 days
        presign_kwargs = client.generate_presigned_url.call_args.kwargs
        self.assertEqual(presign_kwargs['ExpiresIn'], 7 * 24 * 3600)
        self.assertEqual(presign_kwargs['Params'], {'Bucket': 'receipts-test', 'Key': put_kwargs['Key']})

    @patch('receipt_storage._r2_client')
    def test_upload_uses_settings_link_days(self, mock_client):
        client = MagicMock()
        mock_client.return_value = client

        ReceiptStorageService(_settings(link_days=2)).upload_pdf(_artifact())

        self.assertEqual(client.generate_presigned_url.call_args.kwargs['ExpiresIn'], 2 * 24 * 3600)

    @patch('receipt_storage._r2_client')
    def test_upload_accented_file_name(self, mock_client):
        client = MagicMock()
        mock_client.return_value = client

        ReceiptStorageService(_settings()).upload_pdf(_artifact('yoga_receipt_José_García.pdf'))

        put_kwargs = client.put_object.call_args.kwargs
        self.assertTrue(put_kwargs['Key'].endswith('/yoga_receipt_José_García.pdf'))
        put_kwargs['ContentDisposition'].encode('ascii')

    @patch('receipt_storage._r2_client')
    def test_upload_failure_returns_none(self, mock_client):
        client = MagicMock()
        client.put_object.side_effect = Exception("bucket unavailable")
        mock_client.return_value = client

        self.assertIsNone(ReceiptStorageService(_settings()).upload_pdf(_artifact()))
        client.generate_presigned_url.assert_not_called()


if __name__ == '__main__':
    unittest.main()
