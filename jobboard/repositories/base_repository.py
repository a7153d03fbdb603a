"""Base repository with common CRUD operations for all repositories."""

from typing import Dict, List, Optional, Any

from supabase import Client

from jobboard.exceptions import NotFound, StorePersistenceError


class BaseRepository:
    """Base repository providing common CRUD operations.

    Encapsulates the Supabase calls shared by the job, promotion request and
    notification repositories. Every storage failure is re-raised as
    StorePersistenceError so services see a single infrastructure error type.

    Attributes:
        db_client: Supabase client instance for database operations.
        table_name: Name of the database table this repository manages.
        entity_name: Human readable entity name used in error messages.
    """

    def __init__(self, db_client: Client, table_name: str, entity_name: str):
        """Initialize the base repository.

        Args:
            db_client: Supabase client instance.
            table_name: Name of the database table (e.g., "jobs").
            entity_name: Entity name for error messages (e.g., "Job").
        """
        self.db_client = db_client
        self.table_name = table_name
        self.entity_name = entity_name

    def get_row(self, record_id: str, columns: str = "*") -> Optional[Dict[str, Any]]:
        """Retrieve a single row by its ID.

        Args:
            record_id: The unique identifier of the record.
            columns: PostgREST select expression.

        Returns:
            Row as dictionary if found, None otherwise.

        Raises:
            StorePersistenceError: If database query fails.
        """
        try:
            response = (
                self.db_client.table(self.table_name)
                .select(columns)
                .eq("id", record_id)
                .limit(1)
                .execute()
            )
            return response.data[0] if response.data else None
        except Exception as error:
            raise StorePersistenceError(
                f"Failed to get {self.table_name} by ID: {str(error)}", error
            ) from error

    def update_row(self, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update a single row with new data.

        Args:
            record_id: The unique identifier of the record to update.
            updates: Dictionary of columns to update.

        Returns:
            Updated row as dictionary.

        Raises:
            NotFound: If no row has this ID.
            StorePersistenceError: If the update fails.
        """
        try:
            response = (
                self.db_client.table(self.table_name)
                .update(updates)
                .eq("id", record_id)
                .execute()
            )
        except Exception as error:
            raise StorePersistenceError(
                f"Failed to update {self.table_name}: {str(error)}", error
            ) from error

        if not response.data:
            raise NotFound(self.entity_name, record_id)
        return response.data[0]

    def delete_row(self, record_id: str) -> bool:
        """Delete a row from the table.

        Args:
            record_id: The unique identifier of the record to delete.

        Returns:
            True if deletion was successful.

        Raises:
            NotFound: If no row has this ID.
            StorePersistenceError: If deletion fails.
        """
        try:
            response = (
                self.db_client.table(self.table_name)
                .delete()
                .eq("id", record_id)
                .execute()
            )
        except Exception as error:
            raise StorePersistenceError(
                f"Failed to delete {self.table_name}: {str(error)}", error
            ) from error

        if not response.data:
            raise NotFound(self.entity_name, record_id)
        return True

    def run_query(self, query) -> List[Dict[str, Any]]:
        """Execute a prepared select query.

        Args:
            query: PostgREST request builder produced by select().

        Returns:
            List of rows.

        Raises:
            StorePersistenceError: If the query fails.
        """
        try:
            response = query.execute()
            return response.data or []
        except Exception as error:
            raise StorePersistenceError(
                f"Failed to query {self.table_name}: {str(error)}", error
            ) from error
