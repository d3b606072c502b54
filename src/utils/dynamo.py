"""
DynamoDB utility functions for data access.
"""
import os
from typing import Dict, Optional, Any
import boto3

# Singleton instance
_dynamo_instance = None

def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    This is the only way to access DynamoDB in this project. Never instantiate
    DynamoDBClient directly outside of tests.

    Example:
        dynamo = get_dynamo()
        item = dynamo.get_item({"PK": "USER#123", "SK": "METRICS#overview"})

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If TRACKER_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['TRACKER_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "TRACKER_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance

class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str):
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes

        Returns:
            Response from DynamoDB
        """
        return self.table.put_item(Item=item)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        """
        Delete an item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Response from DynamoDB
        """
        return self.table.delete_item(Key=key)

def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"

def create_metrics_sk(metric_set: str = "overview") -> str:
    """
    Create sort key for cached derived cycle metrics.

    Args:
        metric_set: Name of the cached metric set

    Returns:
        Sort key in format "METRICS#{metric_set}"
    """
    return f"METRICS#{metric_set}"
