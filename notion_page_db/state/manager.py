"""
Local state store for notion-page-db.

Keeps the image task ledger and the AI call log in a DuckDB file so that
repeated sync runs reuse archived images instead of generating them again.
"""

import duckdb
import logging
from datetime import datetime
from typing import Dict, List, Optional

from ..models import ImageTask

TASK_COLUMNS = (
    "page_id, page_title, task_id, status, source_url, storage_url, "
    "attempts, error, created_at, updated_at"
)


class StateManager:
    """
    Manages the DuckDB database holding image tasks and AI call records.
    """

    def __init__(self, db_path: str = "notion_page_db.duckdb"):
        """
        Initialize the state manager.

        Args:
            db_path: Path to the DuckDB database file (":memory:" for a throwaway store)
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """Establish connection to the database."""
        self.connection = duckdb.connect(self.db_path)

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        self.initialize_database()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection

    def initialize_database(self):
        """
        Create all necessary tables if they don't exist.
        """
        connection = self._require_connection()

        connection.execute("""
            CREATE TABLE IF NOT EXISTS image_tasks (
                page_id VARCHAR PRIMARY KEY,
                page_title VARCHAR,
                task_id VARCHAR,
                status VARCHAR NOT NULL,
                source_url VARCHAR,
                storage_url VARCHAR,
                attempts INTEGER DEFAULT 0,
                error TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        connection.execute("CREATE SEQUENCE IF NOT EXISTS ai_call_id_seq;")
        connection.execute("""
            CREATE TABLE IF NOT EXISTS ai_calls (
                call_id BIGINT PRIMARY KEY DEFAULT nextval('ai_call_id_seq'),
                task_name VARCHAR NOT NULL,
                model_name VARCHAR NOT NULL,
                prompt TEXT NOT NULL,
                response TEXT,
                success BOOLEAN NOT NULL,
                error_message TEXT,
                execution_time_ms INTEGER,
                page_id VARCHAR,
                called_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    # Image tasks

    def _row_to_task(self, row) -> ImageTask:
        return ImageTask(
            page_id=row[0],
            page_title=row[1] or "",
            task_id=row[2],
            status=row[3],
            source_url=row[4],
            storage_url=row[5],
            attempts=row[6] or 0,
            error=row[7],
            created_at=row[8],
            updated_at=row[9]
        )

    def get_task(self, page_id: str) -> Optional[ImageTask]:
        """
        Retrieve the image task for a page.

        Args:
            page_id: Id of the content page

        Returns:
            The task if found, None otherwise
        """
        connection = self._require_connection()
        row = connection.execute(
            f"SELECT {TASK_COLUMNS} FROM image_tasks WHERE page_id = ?",
            [page_id]
        ).fetchone()
        return self._row_to_task(row) if row else None

    def create_or_update_task(self, page_id: str, page_title: str = "",
                              source_url: Optional[str] = None) -> ImageTask:
        """
        Register image work for a page, moving it to "processing".

        A page whose task already completed with a storage URL is left alone.

        Args:
            page_id: Id of the content page
            page_title: Page title, for log output
            source_url: Image URL being archived, if known

        Returns:
            The current task
        """
        connection = self._require_connection()
        existing = self.get_task(page_id)

        if existing and existing.status == "completed" and existing.storage_url:
            return existing

        now = datetime.now()
        if existing:
            connection.execute("""
                UPDATE image_tasks
                SET page_title = ?, status = 'processing', source_url = COALESCE(?, source_url),
                    updated_at = ?
                WHERE page_id = ?
            """, [page_title or existing.page_title, source_url, now, page_id])
        else:
            connection.execute(f"""
                INSERT INTO image_tasks ({TASK_COLUMNS})
                VALUES (?, ?, NULL, 'processing', ?, NULL, 0, NULL, ?, ?)
            """, [page_id, page_title, source_url, now, now])

        return self.get_task(page_id)

    def update_task_with_id(self, page_id: str, task_id: str) -> None:
        """Record the generation request id of a task."""
        self._require_connection().execute(
            "UPDATE image_tasks SET task_id = ?, updated_at = ? WHERE page_id = ?",
            [task_id, datetime.now(), page_id]
        )

    def complete_task(self, page_id: str, storage_url: str, source_url: Optional[str] = None) -> None:
        """
        Mark a task as completed.

        Args:
            page_id: Id of the content page
            storage_url: URL of the archived image
            source_url: Original or generated image URL
        """
        self._require_connection().execute("""
            UPDATE image_tasks
            SET status = 'completed', storage_url = ?, source_url = COALESCE(?, source_url),
                error = NULL, updated_at = ?
            WHERE page_id = ?
        """, [storage_url, source_url, datetime.now(), page_id])
        logging.info(f"Image task for page {page_id} completed: {storage_url}")

    def fail_task(self, page_id: str, error: str) -> None:
        """
        Mark a task as failed and count the attempt.

        Args:
            page_id: Id of the content page
            error: Error message
        """
        self._require_connection().execute("""
            UPDATE image_tasks
            SET status = 'failed', error = ?, attempts = attempts + 1, updated_at = ?
            WHERE page_id = ?
        """, [error, datetime.now(), page_id])
        logging.warning(f"Image task for page {page_id} failed: {error}")

    def has_completed_task(self, page_id: str) -> bool:
        """Whether the page already has an archived image."""
        task = self.get_task(page_id)
        return bool(task and task.status == "completed" and task.storage_url)

    def get_storage_url(self, page_id: str) -> Optional[str]:
        """Storage URL of a completed task, if any."""
        task = self.get_task(page_id)
        if task and task.status == "completed":
            return task.storage_url
        return None

    def get_tasks_by_status(self, status: str) -> List[ImageTask]:
        """
        List tasks in a given status.

        Args:
            status: pending, processing, completed or failed

        Returns:
            Matching tasks, oldest first
        """
        rows = self._require_connection().execute(
            f"SELECT {TASK_COLUMNS} FROM image_tasks WHERE status = ? ORDER BY created_at",
            [status]
        ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def get_all_tasks(self) -> List[ImageTask]:
        """List every task, oldest first."""
        rows = self._require_connection().execute(
            f"SELECT {TASK_COLUMNS} FROM image_tasks ORDER BY created_at"
        ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def clear_all_tasks(self) -> None:
        """Delete every image task."""
        self._require_connection().execute("DELETE FROM image_tasks")
        logging.info("Cleared all image tasks")

    # AI call log

    def log_ai_call(
        self,
        task_name: str,
        model_name: str,
        prompt: str,
        response: str = "",
        success: bool = True,
        error_message: Optional[str] = None,
        execution_time_ms: Optional[int] = None,
        page_id: Optional[str] = None
    ) -> Optional[int]:
        """
        Log an AI call.

        Returns:
            The call id
        """
        result = self._require_connection().execute("""
            INSERT INTO ai_calls (
                task_name, model_name, prompt, response, success,
                error_message, execution_time_ms, page_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING call_id
        """, [
            task_name, model_name, prompt, response, success,
            error_message, execution_time_ms, page_id
        ]).fetchone()
        return result[0] if result else None

    def get_ai_calls(
        self,
        task_name: Optional[str] = None,
        page_id: Optional[str] = None,
        success_only: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict]:
        """
        Retrieve logged AI calls, newest first.

        Args:
            task_name: Filter by task name (optional)
            page_id: Filter by content page (optional)
            success_only: Only return successful calls
            limit: Limit number of results

        Returns:
            List of call records
        """
        query = """
            SELECT call_id, task_name, model_name, prompt, response, success,
                   error_message, execution_time_ms, page_id, called_at
            FROM ai_calls
            WHERE 1=1
        """
        params = []

        if task_name:
            query += " AND task_name = ?"
            params.append(task_name)

        if page_id:
            query += " AND page_id = ?"
            params.append(page_id)

        if success_only:
            query += " AND success = true"

        query += " ORDER BY call_id DESC"

        if limit:
            query += f" LIMIT {int(limit)}"

        rows = self._require_connection().execute(query, params).fetchall()

        return [
            {
                "call_id": row[0],
                "task_name": row[1],
                "model_name": row[2],
                "prompt": row[3],
                "response": row[4],
                "success": row[5],
                "error_message": row[6],
                "execution_time_ms": row[7],
                "page_id": row[8],
                "called_at": row[9]
            }
            for row in rows
        ]
