"""MongoDB Resource - Data Resource catalog operations."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import cached_property
from typing import ClassVar, Dict
import logging

from dagster import ConfigurableResource
from pydantic import Field
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from libs.errors import PersistenceError
from libs.models import DataResource

__all__ = ["MongoDBResource"]

logger = logging.getLogger(__name__)


class MongoDBResource(ConfigurableResource):
    """
    Resource for the Data Resource catalog.

    Inspected resources are stored one document per ``dataId``; writing a
    resource again replaces its document, so re-delivered jobs do not create
    duplicates.
    """

    connection_string: str = Field(..., description="MongoDB connection URI")
    database: str = Field("ingest", description="MongoDB database name")

    DATA_RESOURCES: ClassVar[str] = "data_resources"

    @cached_property
    def _client(self) -> MongoClient:
        return MongoClient(self.connection_string)

    def _get_db(self) -> Database:
        return self._client[self.database]

    def _get_collection(self, name: str) -> Collection:
        return self._get_db()[name]

    @staticmethod
    def _strip_catalog_fields(doc: Dict) -> Dict:
        stripped = dict(doc)
        stripped.pop("_id", None)
        stripped.pop("updatedAt", None)
        return stripped

    def ensure_indexes(self) -> None:
        """Create the unique ``dataId`` index (idempotent)."""
        try:
            self._get_collection(self.DATA_RESOURCES).create_index(
                [("dataId", ASCENDING)], unique=True, name="dataId_unique"
            )
        except PyMongoError as exc:
            raise PersistenceError(f"Failed to create catalog indexes: {exc}") from exc

    def upsert_data_resource(self, resource: DataResource) -> None:
        """
        Insert or replace the catalog document of a Data Resource.

        Raises:
            PersistenceError: If the resource has no id or the write fails
        """
        if not resource.data_id:
            raise PersistenceError("Cannot register a Data Resource without a dataId")

        document = resource.model_dump(mode="json", by_alias=True, exclude_none=True)
        document["updatedAt"] = datetime.now(timezone.utc)

        try:
            self._get_collection(self.DATA_RESOURCES).replace_one(
                {"dataId": resource.data_id}, document, upsert=True
            )
        except PyMongoError as exc:
            raise PersistenceError(
                f"Failed to register data {resource.data_id} in the catalog: {exc}"
            ) from exc

        logger.info(f"Registered data {resource.data_id} in the catalog")

    def get_data_resource(self, data_id: str) -> DataResource | None:
        """
        Load a Data Resource by id.

        Raises:
            PersistenceError: If the catalog cannot be queried
        """
        try:
            document = self._get_collection(self.DATA_RESOURCES).find_one({"dataId": data_id})
        except PyMongoError as exc:
            raise PersistenceError(f"Failed to load data {data_id} from the catalog: {exc}") from exc
        if not document:
            return None
        return DataResource.model_validate(self._strip_catalog_fields(document))
