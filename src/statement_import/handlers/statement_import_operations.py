"""
Lambda handler for statement import operations.
"""
import logging
from typing import Dict, Any, Tuple

from statement_import.services.import_service import StatementImportService
from statement_import.utils.handler_decorators import api_handler
from statement_import.utils.lambda_utils import (
    decode_file_content,
    mandatory_body_parameter,
    mandatory_path_parameter,
    parse_json_body,
)
from statement_import.utils.logging_config import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

NO_TRANSACTIONS_MESSAGE = "No transactions found, check the file format (CSV or OFX)"


def _uploaded_file(event: Dict[str, Any]) -> Tuple[str, bytes]:
    """Return (file name, file bytes) from a {fileName, content} JSON body."""
    body = parse_json_body(event)
    file_name = mandatory_body_parameter(body, "fileName")
    content = decode_file_content(mandatory_body_parameter(body, "content"))
    return file_name, content


def preview_statement_handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Parse a statement without importing it.

    Args:
        event: Lambda event with a {fileName, content} body, content base64 encoded
        user_id: Authenticated user ID

    Returns:
        Parsed transactions and balances
    """
    file_name, content = _uploaded_file(event)
    statement = StatementImportService().parse_statement(content, file_name)
    logger.info(f"Previewed {file_name} for user {user_id}: "
                f"{len(statement.transactions)} transactions, {len(statement.balances)} balances")

    result = statement.model_dump(by_alias=True, mode='json')
    if statement.is_empty:
        result["message"] = NO_TRANSACTIONS_MESSAGE
    return result


def import_statement_handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """
    Parse a statement and import it into an account.

    Re-importing the same file imports nothing and reports every record as skipped.
    """
    account_id = mandatory_path_parameter(event, "accountId")
    file_name, content = _uploaded_file(event)

    summary = StatementImportService().import_statement(user_id, account_id, content, file_name)

    result = summary.model_dump(by_alias=True, mode='json')
    if summary.transactions.total == 0 and summary.balances.total == 0:
        result["message"] = NO_TRANSACTIONS_MESSAGE
    return result


@api_handler()
def handler(event: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """Main handler for statement import operations."""
    route = event.get("routeKey")
    if not route:
        raise ValueError("Route not specified")

    route_map = {
        "POST /accounts/{accountId}/statement-imports": import_statement_handler,
        "POST /statement-imports/preview": preview_statement_handler,
    }

    handler_func = route_map.get(route)
    if not handler_func:
        raise ValueError(f"Unsupported route: {route}")

    return handler_func(event, user_id)
