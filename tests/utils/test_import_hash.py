"""
Unit tests for import fingerprints.

The expected digests are the ones already persisted for existing ledger
entries; they must never change.
"""
import re
import unittest

from statement_import.utils.import_hash import (
    compute_balance_hash,
    compute_import_hash,
    fingerprint,
)


class TestImportHash(unittest.TestCase):
    def test_known_digests(self):
        test_cases = [
            (('2024-03-01', 'Supermercado', 15000), 'f476a7c13ef2f9fa'),
            (('2024-03-01', 'Supermercado', 15001), '7fbef2d1daad0db5'),
            (('2024-01-15', 'Pão de Açúcar 😀', 999), 'dbe0c407965d564a'),
        ]
        for args, expected in test_cases:
            with self.subTest(args=args):
                self.assertEqual(compute_import_hash(*args), expected)

    def test_empty_raw_string(self):
        self.assertEqual(fingerprint('||'), '8b7bf2ea80bc97ed')

    def test_balance_hash_uses_saldo_marker(self):
        self.assertEqual(compute_balance_hash('2024-03-01', 123456), 'dbc84e91b515bbba')
        self.assertEqual(
            compute_balance_hash('2024-03-01', 123456),
            compute_import_hash('2024-03-01', 'SALDO', 123456)
        )

    def test_format_and_determinism(self):
        digest = compute_import_hash('2024-03-01', 'Padaria', 1250)
        self.assertRegex(digest, re.compile(r'^[0-9a-f]{16}$'))
        self.assertEqual(digest, compute_import_hash('2024-03-01', 'Padaria', 1250))

    def test_each_component_changes_digest(self):
        base = compute_import_hash('2024-03-01', 'Padaria', 1250)
        self.assertNotEqual(base, compute_import_hash('2024-03-02', 'Padaria', 1250))
        self.assertNotEqual(base, compute_import_hash('2024-03-01', 'padaria', 1250))
        self.assertNotEqual(base, compute_import_hash('2024-03-01', 'Padaria', 1251))


if __name__ == '__main__':
    unittest.main()
