"""
Utils package.

Conventions:
- Parsing helpers are pure functions and never raise on malformed input;
  they degrade to "no value" (None, 0, or an empty list) instead.
- All persisted dates are epoch timestamps (milliseconds since 1970-01-01T00:00:00Z).
- Models persisted to DynamoDB implement `to_dynamodb_item()`.
"""
