"""
Unit tests for Lambda request/response helpers.
"""
import base64
import json
import unittest
import uuid
from decimal import Decimal

from statement_import.utils.auth import get_user_from_event
from statement_import.utils.lambda_utils import (
    create_response,
    decode_file_content,
    handle_error,
    mandatory_body_parameter,
    mandatory_path_parameter,
    parse_json_body,
)


class TestResponses(unittest.TestCase):
    def test_create_response_encodes_decimal_and_uuid(self):
        entry_id = uuid.uuid4()
        response = create_response(200, {'amount': Decimal('1.50'), 'entryId': entry_id})

        self.assertEqual(response['statusCode'], 200)
        self.assertEqual(response['headers']['Content-Type'], 'application/json')
        self.assertEqual(json.loads(response['body']), {'amount': '1.50', 'entryId': str(entry_id)})

    def test_handle_error(self):
        response = handle_error(422, 'Could not read file')
        self.assertEqual(response['statusCode'], 422)
        self.assertEqual(json.loads(response['body']), {'message': 'Could not read file'})


class TestRequestParameters(unittest.TestCase):
    def test_mandatory_path_parameter(self):
        self.assertEqual(mandatory_path_parameter({'pathParameters': {'accountId': 'a'}}, 'accountId'), 'a')
        with self.assertRaises(ValueError):
            mandatory_path_parameter({'pathParameters': None}, 'accountId')

    def test_parse_json_body(self):
        self.assertEqual(parse_json_body({'body': '{"fileName": "x.csv"}'}), {'fileName': 'x.csv'})
        self.assertEqual(parse_json_body({}), {})
        with self.assertRaises(ValueError):
            parse_json_body({'body': '[1, 2]'})

    def test_mandatory_body_parameter(self):
        self.assertEqual(mandatory_body_parameter({'fileName': 'x.csv'}, 'fileName'), 'x.csv')
        with self.assertRaises(KeyError):
            mandatory_body_parameter({'fileName': ''}, 'fileName')

    def test_decode_file_content(self):
        self.assertEqual(decode_file_content(base64.b64encode(b'Data;Valor').decode()), b'Data;Valor')
        with self.assertRaises(ValueError):
            decode_file_content('***')


class TestGetUserFromEvent(unittest.TestCase):
    def test_claims(self):
        event = {'requestContext': {'authorizer': {'jwt': {'claims': {'sub': 'user-1', 'auth_time': 1}}}}}
        self.assertEqual(get_user_from_event(event), {'id': 'user-1', 'email': 'unknown', 'auth_time': 1})

    def test_missing_claims(self):
        self.assertIsNone(get_user_from_event({}))
        self.assertIsNone(get_user_from_event({'requestContext': {'authorizer': None}}))


if __name__ == '__main__':
    unittest.main()
