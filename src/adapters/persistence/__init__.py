from .dynamodb_route_catalog import DynamoDbRouteCatalog
from .local_route_catalog import LocalRouteCatalog

__all__ = [
    "DynamoDbRouteCatalog",
    "LocalRouteCatalog",
]
