from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

from src.adapters.aws import dynamodb_client
from src.adapters.persistence.catalog_records import (
    position_from_record,
    route_from_record,
)
from src.app.ports.output import IRouteCatalog
from src.domain.models import City, Route


@dataclass(slots=True)
class DynamoDbRouteCatalog(IRouteCatalog):
    """Reads the route catalog from DynamoDB.

    One item per city:
      city_id (S, hash key), name (S), center (S, JSON {lat, lng}),
      routes (S, JSON list of route records, same shape as the JSON catalog)

    Env vars:
      - ROUTE_CATALOG_TABLE (default: livetrack-route-catalog)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None
    client: Any | None = None

    def _table(self) -> str:
        return (
            self.table_name
            or os.getenv("ROUTE_CATALOG_TABLE")
            or "livetrack-route-catalog"
        )

    def _client(self) -> Any:
        return self.client if self.client is not None else dynamodb_client()

    def list_cities(self) -> tuple[City, ...]:
        ddb = self._client()
        cities: list[City] = []

        kwargs: dict[str, Any] = {
            "TableName": self._table(),
            "ProjectionExpression": "city_id, #n, center",
            "ExpressionAttributeNames": {"#n": "name"},
        }
        while True:
            resp = ddb.scan(**kwargs)
            for item in resp.get("Items", []):
                city_id = item["city_id"]["S"]
                cities.append(
                    City(
                        id=city_id,
                        name=item.get("name", {}).get("S") or city_id,
                        center=position_from_record(json.loads(item["center"]["S"])),
                    )
                )
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key

        return tuple(cities)

    def list_routes(self, city_id: str) -> tuple[Route, ...]:
        ddb = self._client()
        resp = ddb.get_item(
            TableName=self._table(),
            Key={"city_id": {"S": city_id}},
            ConsistentRead=True,
        )
        item = resp.get("Item")
        if not item or "routes" not in item:
            return ()

        records = json.loads(item["routes"]["S"])
        return tuple(route_from_record(r, city_id=city_id) for r in records)
