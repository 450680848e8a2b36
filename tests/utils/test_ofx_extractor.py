"""
Unit tests for OFX transaction extraction.
"""
import unittest
from datetime import datetime

from statement_import.models.statement import EntryType
from statement_import.utils.import_hash import compute_import_hash
from statement_import.utils.ofx_extractor import (
    extract_closed_blocks,
    extract_fields,
    extract_flat_blocks,
    extract_ofx_transactions,
    is_balance_marker,
    transaction_from_fields,
)

CLOSED_OFX = """<?xml version="1.0" encoding="UTF-8"?>
<?OFX OFXHEADER="200" VERSION="220"?>
<OFX>
<BANKMSGSRSV1><STMTTRNRS><STMTRS>
<BANKTRANLIST>
<STMTTRN>
<TRNTYPE>DEBIT</TRNTYPE>
<DTPOSTED>20240301120000[-3:BRT]</DTPOSTED>
<TRNAMT>-150.00</TRNAMT>
<FITID>202403010001</FITID>
<NAME>Compra cartao</NAME>
<MEMO>Supermercado</MEMO>
</STMTTRN>
<STMTTRN>
<TRNTYPE>CREDIT</TRNTYPE>
<DTPOSTED>20240305</DTPOSTED>
<TRNAMT>2500.00</TRNAMT>
<FITID>202403050001</FITID>
<NAME>Salario</NAME>
</STMTTRN>
</BANKTRANLIST>
</STMTRS></STMTTRNRS></BANKMSGSRSV1>
</OFX>
"""

FLAT_OFX = """OFXHEADER:100
DATA:OFXSGML
VERSION:102

<OFX>
<BANKMSGSRSV1><STMTTRNRS><STMTRS>
<BANKTRANLIST>
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20240301120000[-3:BRT]
<TRNAMT>-150,00
<FITID>202403010001
<NAME>Compra cartao
<MEMO>Supermercado
<STMTTRN>
<TRNTYPE>CREDIT
<DTPOSTED>20240305
<TRNAMT>2500.00
<FITID>202403050001
<NAME>Salario
</BANKTRANLIST>
<LEDGERBAL><BALAMT>1000.00
</STMTRS></STMTTRNRS></BANKMSGSRSV1>
</OFX>
"""


class TestBlockSplitters(unittest.TestCase):
    def test_closed_blocks(self):
        self.assertEqual(len(extract_closed_blocks(CLOSED_OFX)), 2)
        self.assertEqual(extract_closed_blocks(FLAT_OFX), [])

    def test_flat_blocks_stop_at_list_end(self):
        blocks = extract_flat_blocks(FLAT_OFX)
        self.assertEqual(len(blocks), 2)
        self.assertNotIn('LEDGERBAL', blocks[1])

    def test_flat_block_runs_to_end_of_text(self):
        blocks = extract_flat_blocks("<STMTTRN>\n<DTPOSTED>20240301\n<TRNAMT>1.00")
        self.assertEqual(len(blocks), 1)
        self.assertIn('TRNAMT', blocks[0])


class TestExtractFields(unittest.TestCase):
    def test_tags_are_case_insensitive(self):
        fields = extract_fields("<dtposted>20240301\n<TrnAmt> -1.00 \n<memo></memo>")
        self.assertEqual(fields, {'DTPOSTED': '20240301', 'TRNAMT': '-1.00', 'MEMO': ''})


class TestTransactionFromFields(unittest.TestCase):
    def test_description_preference(self):
        base = {'DTPOSTED': '20240301', 'TRNAMT': '-1.00'}
        self.assertEqual(
            transaction_from_fields({**base, 'MEMO': 'm', 'NAME': 'n', 'FITID': 'f'}).description, 'm'
        )
        self.assertEqual(transaction_from_fields({**base, 'NAME': 'n', 'FITID': 'f'}).description, 'n')
        self.assertEqual(transaction_from_fields({**base, 'FITID': 'f'}).description, 'f')
        self.assertEqual(transaction_from_fields(base).description, '')

    def test_balance_markers_are_skipped(self):
        for name in ['SALDO ANTERIOR', 'Saldo do Dia', 'S A L D O']:
            with self.subTest(name=name):
                fields = {'DTPOSTED': '20240301', 'TRNAMT': '10.00', 'NAME': name}
                self.assertTrue(is_balance_marker(fields))
                self.assertIsNone(transaction_from_fields(fields))

    def test_block_without_complete_date_is_skipped(self):
        self.assertIsNone(transaction_from_fields({'DTPOSTED': '202403', 'TRNAMT': '1.00'}))
        self.assertIsNone(transaction_from_fields({'TRNAMT': '1.00'}))


class TestExtractOfxTransactions(unittest.TestCase):
    def test_closed_dialect(self):
        transactions = extract_ofx_transactions(CLOSED_OFX)
        self.assertEqual(len(transactions), 2)

        purchase = transactions[0]
        self.assertEqual(purchase.date, datetime(2024, 3, 1, 12, 0, 0))
        self.assertEqual(purchase.description, 'Supermercado')
        self.assertEqual(purchase.amount_cents, 15000)
        self.assertEqual(purchase.type, EntryType.EXPENSE)
        self.assertEqual(purchase.external_document_id, '202403010001')
        self.assertEqual(purchase.import_hash, compute_import_hash('2024-03-01', 'Supermercado', 15000))

        salary = transactions[1]
        self.assertEqual(salary.description, 'Salario')
        self.assertEqual(salary.type, EntryType.INCOME)
        self.assertEqual(salary.amount_cents, 250000)

    def test_both_dialects_yield_the_same_transactions(self):
        self.assertEqual(extract_ofx_transactions(CLOSED_OFX), extract_ofx_transactions(FLAT_OFX))

    def test_no_blocks(self):
        self.assertEqual(extract_ofx_transactions("<OFX></OFX>"), [])
        self.assertEqual(extract_ofx_transactions(""), [])


if __name__ == '__main__':
    unittest.main()
