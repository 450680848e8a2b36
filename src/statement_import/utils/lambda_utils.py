from typing import Dict, Any, Optional
import base64
import binascii
import json
from decimal import Decimal
import uuid


class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            # Always return as string to preserve precision and ensure consistent type
            return str(obj)
        if isinstance(obj, uuid.UUID):
            return str(obj)
        return super(DecimalEncoder, self).default(obj)


def create_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Create a standardized API response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type,Authorization",
            "Access-Control-Allow-Methods": "POST,OPTIONS"
        },
        "body": json.dumps(body, cls=DecimalEncoder)
    }


def handle_error(status_code: int, message: str) -> Dict[str, Any]:
    """Create a standardized error response."""
    return create_response(status_code, {"message": message})


# extract path parameters from the event
def optional_path_parameter(event: Dict[str, Any], parameter_name: str) -> Optional[str]:
    """Extract a path parameter from the event."""
    return (event.get('pathParameters') or {}).get(parameter_name)


def mandatory_path_parameter(event: Dict[str, Any], parameter_name: str) -> str:
    """Extract a mandatory path parameter from the event.
    Raises ValueError if the parameter is not found.
    """
    if not parameter_name:
        raise KeyError("Parameter name is required")
    parameter = optional_path_parameter(event, parameter_name)
    if not parameter:
        raise ValueError(f"Path parameter {parameter_name} not found")
    return parameter


# extract parameters from json payload body
def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the JSON body of the event, honoring API Gateway base64 encoding."""
    body = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in request body: {str(e)}")
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object")
    return parsed


def mandatory_body_parameter(body: Dict[str, Any], parameter_name: str) -> Any:
    """Extract a mandatory parameter from a decoded body."""
    parameter_value = body.get(parameter_name)
    if not parameter_value:
        raise KeyError(f"Body parameter {parameter_name} is required")
    return parameter_value


def decode_file_content(encoded: str) -> bytes:
    """Decode base64 file content sent in a JSON body."""
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"File content is not valid base64: {str(e)}")
