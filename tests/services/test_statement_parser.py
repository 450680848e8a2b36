"""
Unit tests for bank statement parsing.
"""
import unittest
from datetime import datetime

from statement_import.models.statement import EntryType, ParsedBalance, ParsedTransaction
from statement_import.services.import_errors import UnreadableFileError
from statement_import.services.statement_parser import (
    classify_row,
    parse_bank_statement,
    parse_bank_statement_file,
    parse_csv,
    resolve_entry_type,
)
from statement_import.utils.header_classifier import classify_headers
from statement_import.utils.import_hash import compute_balance_hash, compute_import_hash

BANCO_DO_BRASIL_CSV = """Data;Lançamento;Detalhes;N° documento;Valor;Tipo Lançamento
29/02/2024;Saldo Anterior;;;1.000,00;
01/03/2024;Pix - Recebido;Fulano de Tal;123;200,00;Entrada
01/03/2024;Compra com Cartão;Padaria;456;-12,50;Saída
01/03/2024;Estorno;;;-5,00;Entrada
01/03/2024;S A L D O;;;1.192,50;
01/03/2024;Saldo do dia;;;1.192,50;
00/00/0000;Saldo Atual;;;1.192,50;
"""

OFX_TEXT = """OFXHEADER:100
<OFX>
<BANKTRANLIST>
<STMTTRN>
<DTPOSTED>20240301
<TRNAMT>-150.00
<FITID>1
<MEMO>Supermercado
</BANKTRANLIST>
</OFX>
"""


class TestParseCsv(unittest.TestCase):
    def test_single_expense_row(self):
        statement = parse_csv("Data;Lançamento;Valor\n01/03/2024;Supermercado;-150,00")

        self.assertEqual(len(statement.transactions), 1)
        self.assertEqual(statement.balances, [])
        transaction = statement.transactions[0]
        self.assertEqual(transaction.date, datetime(2024, 3, 1, 12, 0, 0))
        self.assertEqual(transaction.description, 'Supermercado')
        self.assertEqual(transaction.amount_cents, 15000)
        self.assertEqual(transaction.type, EntryType.EXPENSE)
        self.assertEqual(transaction.import_hash, 'f476a7c13ef2f9fa')

    def test_quoted_amount_with_comma_delimiter(self):
        statement = parse_csv('Data,Descrição,Valor\n01/03/2024,Aluguel,"1.112,00"')

        self.assertEqual(len(statement.transactions), 1)
        self.assertEqual(statement.transactions[0].amount_cents, 111200)
        self.assertEqual(statement.transactions[0].type, EntryType.INCOME)

    def test_invalid_dates_drop_rows(self):
        statement = parse_csv(
            "Data;Lançamento;Valor\n00/00/0000;Placeholder;10,00\n31/02/2024;Impossible;10,00\n"
        )
        self.assertTrue(statement.is_empty)

    def test_banco_do_brasil_export(self):
        statement = parse_csv(BANCO_DO_BRASIL_CSV)

        self.assertEqual([t.description for t in statement.transactions],
                         ['Pix - Recebido', 'Compra com Cartão', 'Estorno'])

        pix, purchase, refund = statement.transactions
        self.assertEqual(pix.type, EntryType.INCOME)
        self.assertEqual(pix.amount_cents, 20000)
        self.assertEqual(pix.details, 'Fulano de Tal')
        self.assertEqual(pix.external_document_id, '123')

        self.assertEqual(purchase.type, EntryType.EXPENSE)
        self.assertEqual(purchase.amount_cents, 1250)
        self.assertEqual(purchase.import_hash, compute_import_hash('2024-03-01', 'Compra com Cartão', 1250))

        # The type column wins over the amount sign
        self.assertEqual(refund.type, EntryType.INCOME)
        self.assertEqual(refund.amount_cents, 500)
        self.assertIsNone(refund.details)
        self.assertIsNone(refund.external_document_id)

        self.assertEqual(len(statement.balances), 1)
        balance = statement.balances[0]
        self.assertEqual(balance.balance_cents, 119250)
        self.assertEqual(balance.import_hash, compute_balance_hash('2024-03-01', 119250))

    def test_debit_and_credit_columns(self):
        statement = parse_csv(
            "Data;Histórico;Débito;Crédito\n"
            "01/03/2024;Tarifa;10,00;\n"
            "02/03/2024;Deposito;;50,00\n"
            "03/03/2024;S A L D O;;1.040,00\n"
        )

        tariff, deposit = statement.transactions
        self.assertEqual((tariff.type, tariff.amount_cents), (EntryType.EXPENSE, 1000))
        self.assertEqual((deposit.type, deposit.amount_cents), (EntryType.INCOME, 5000))
        self.assertEqual(statement.balances[0].balance_cents, 104000)

    def test_debit_column_alone(self):
        statement = parse_csv("Data;Histórico;Débito\n01/03/2024;Tarifa;10,00\n")

        tariff = statement.transactions[0]
        self.assertEqual((tariff.type, tariff.amount_cents), (EntryType.EXPENSE, 1000))

    def test_noise_rows(self):
        statement = parse_csv(
            "Data;Lançamento;Valor\n"
            "01/03/2024;;0,00\n"
            "01/03/2024;;25,00\n"
            "01/03/2024;Ajuste;0,00\n"
        )
        self.assertEqual([(t.description, t.amount_cents) for t in statement.transactions],
                         [('', 2500), ('Ajuste', 0)])

    def test_not_a_statement(self):
        self.assertTrue(parse_csv("Nome;Valor\nFulano;10,00").is_empty)
        self.assertTrue(parse_csv("").is_empty)
        self.assertTrue(parse_csv("Data;Lançamento;Valor").is_empty)

    def test_short_rows_do_not_fail(self):
        statement = parse_csv("Data;Lançamento;Valor\n01/03/2024;Cafe")
        self.assertEqual(statement.transactions[0].description, 'Cafe')
        self.assertEqual(statement.transactions[0].amount_cents, 0)


class TestClassifyRow(unittest.TestCase):
    def setUp(self):
        self.layout = classify_headers(['Data', 'Lançamento', 'Valor'])

    def test_row_kinds(self):
        self.assertIsInstance(classify_row(['01/03/2024', 'Cafe', '-5,00'], self.layout), ParsedTransaction)
        self.assertIsInstance(classify_row(['01/03/2024', 'S  A  L  D  O', '5,00'], self.layout), ParsedBalance)
        self.assertIsNone(classify_row(['01/03/2024', 'SALDO ANTERIOR', '5,00'], self.layout))
        self.assertIsNone(classify_row(['not a date', 'Cafe', '-5,00'], self.layout))


class TestResolveEntryType(unittest.TestCase):
    def test_labels(self):
        test_cases = [
            ('Entrada', -100, EntryType.INCOME),
            ('Crédito', -100, EntryType.INCOME),
            ('credit', -100, EntryType.INCOME),
            ('Saída', 100, EntryType.EXPENSE),
            ('DÉBITO', 100, EntryType.EXPENSE),
            ('debit', 100, EntryType.EXPENSE),
            ('Transferência', -100, EntryType.EXPENSE),
            ('', 0, EntryType.INCOME),
        ]
        for label, amount, expected in test_cases:
            with self.subTest(label=label, amount=amount):
                self.assertEqual(resolve_entry_type(label, amount), expected)


class TestParseBankStatement(unittest.TestCase):
    def test_dispatch_by_extension(self):
        for filename in ['extrato.ofx', 'extrato.QFX']:
            with self.subTest(filename=filename):
                statement = parse_bank_statement(OFX_TEXT, filename)
                self.assertEqual(len(statement.transactions), 1)
                self.assertEqual(statement.transactions[0].import_hash, 'f476a7c13ef2f9fa')

    def test_ofx_content_with_csv_extension(self):
        with self.assertLogs('statement_import.services.statement_parser', level='WARNING'):
            statement = parse_bank_statement(OFX_TEXT, 'extrato.csv')
        self.assertTrue(statement.is_empty)

    def test_csv_and_ofx_share_fingerprints(self):
        csv_statement = parse_bank_statement("Data;Lançamento;Valor\n01/03/2024;Supermercado;-150,00", 'a.csv')
        ofx_statement = parse_bank_statement(OFX_TEXT, 'a.ofx')
        self.assertEqual(csv_statement.transactions[0].import_hash, ofx_statement.transactions[0].import_hash)

    def test_file_bytes(self):
        content = "Data;Lançamento;Valor\n01/03/2024;Padaria São João;-12,50".encode('cp1252')
        statement = parse_bank_statement_file(content, 'extrato.csv')
        self.assertEqual(statement.transactions[0].description, 'Padaria São João')

    def test_stray_undefined_byte_keeps_other_rows(self):
        content = ("Data;Lançamento;Valor\n"
                   "01/03/2024;Padaria;-12,50\n").encode('cp1252') + b"01/03/2024;Caf\x81;-3,00\n"

        statement = parse_bank_statement_file(content, 'extrato.csv')

        self.assertEqual([t.description for t in statement.transactions], ['Padaria', 'Caf\x81'])

    def test_unreadable_file(self):
        with self.assertRaises(UnreadableFileError):
            parse_bank_statement_file(b'%PDF-1.7\n', 'extrato.pdf')


if __name__ == '__main__':
    unittest.main()
