"""Google Drive storage driver."""

from typing import List, Optional
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload
import io
import json
import os
import tempfile

from .base import StorageDriver, StorageError, FileInfo, FolderInfo
from utils.retry import (
    retry_on_transient_error,
    is_transient_network_error,
    TRANSIENT_HTTP_STATUS_CODES,
)


SCOPES = [
    'https://www.googleapis.com/auth/drive',
    'https://www.googleapis.com/auth/spreadsheets.readonly',
]
FOLDER_MIME = 'application/vnd.google-apps.folder'
SERVICE_ACCOUNT_FILE = "service_account_key.json"


def load_credentials(service_account_file: str = SERVICE_ACCOUNT_FILE):
    """Load service account credentials.

    GOOGLE_SERVICE_ACCOUNT_JSON (inline JSON, as written to docker.env) wins
    over the key file.
    """
    inline = os.environ.get('GOOGLE_SERVICE_ACCOUNT_JSON')
    if inline:
        return service_account.Credentials.from_service_account_info(
            json.loads(inline), scopes=SCOPES
        )
    return service_account.Credentials.from_service_account_file(
        service_account_file, scopes=SCOPES
    )


# ---------------------------------------------------------------------------
# Google API Retry Configuration
# ---------------------------------------------------------------------------

def _is_retryable_google_error(exc: Exception) -> bool:
    """Determine if a Google API error should be retried."""
    if isinstance(exc, HttpError):
        return exc.resp.status in TRANSIENT_HTTP_STATUS_CODES
    return is_transient_network_error(exc)


def _log_retry(exc: Exception, attempt: int, delay: float) -> None:
    """Log when a retry is about to happen."""
    if isinstance(exc, HttpError):
        error_desc = f"HTTP {exc.resp.status}"
    else:
        error_desc = type(exc).__name__
    print(f"  [Retry] {error_desc} on attempt {attempt}, retrying in {delay:.1f}s...")


def execute_with_retry(request):
    """Execute a Google API request with automatic retry."""
    @retry_on_transient_error(
        is_retryable=_is_retryable_google_error,
        on_retry=_log_retry,
    )
    def execute():
        return request.execute()
    return execute()


def _escape_query_value(value: str) -> str:
    """Escape a value for use in Google Drive API query strings."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GDriveDriver(StorageDriver):
    """Storage driver for Google Drive.

    Uses service account authentication. Identifiers are Drive file and
    folder IDs; shared drives are supported.
    """

    def __init__(self, service_account_file: str = SERVICE_ACCOUNT_FILE) -> None:
        """Initialize Google Drive storage driver.

        Raises:
            StorageError: If authentication fails
        """
        try:
            self.creds = load_credentials(service_account_file)
            self.service = build('drive', 'v3', credentials=self.creds)
        except Exception as e:
            raise StorageError(f"Failed to initialize Google Drive: {e}")

    @property
    def display_name(self) -> str:
        return "Google Drive"

    def _list(self, query: str, fields: str) -> List[dict]:
        """Run a paged files().list query and return all items."""
        items = []
        page_token = None
        while True:
            response = execute_with_retry(self.service.files().list(
                q=query,
                pageSize=100,
                fields=f"nextPageToken, files({fields})",
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            ))
            items.extend(response.get('files', []))
            page_token = response.get('nextPageToken')
            if not page_token:
                break
        return items

    def get_folder(self, folder_id: str) -> FolderInfo:
        try:
            result = execute_with_retry(self.service.files().get(
                fileId=folder_id,
                fields="id, name, mimeType",
                supportsAllDrives=True,
            ))
        except HttpError as e:
            raise StorageError(f"Folder not found: {folder_id} ({e.resp.status})")
        if result.get('mimeType') != FOLDER_MIME:
            raise StorageError(f"Not a folder: {folder_id}")
        return FolderInfo(id=result['id'], name=result['name'])

    def list_files(self, folder_id: str) -> List[FileInfo]:
        try:
            items = self._list(
                f"'{folder_id}' in parents and trashed=false and mimeType!='{FOLDER_MIME}'",
                "id, name, size",
            )
        except HttpError as e:
            raise StorageError(f"Failed to list files in {folder_id}: {e}")
        return [
            FileInfo(
                id=item['id'],
                name=item['name'],
                parent_id=folder_id,
                size=int(item['size']) if item.get('size') else None,
            )
            for item in items
        ]

    def list_folders(self, folder_id: str) -> List[FolderInfo]:
        try:
            items = self._list(
                f"'{folder_id}' in parents and trashed=false and mimeType='{FOLDER_MIME}'",
                "id, name",
            )
        except HttpError as e:
            raise StorageError(f"Failed to list folders in {folder_id}: {e}")
        return [FolderInfo(id=item['id'], name=item['name']) for item in items]

    def _find_child(self, folder_id: str, name: str,
                    folders_only: bool = False) -> Optional[dict]:
        escaped = _escape_query_value(name)
        query = f"name='{escaped}' and '{folder_id}' in parents and trashed=false"
        if folders_only:
            query += f" and mimeType='{FOLDER_MIME}'"
        items = self._list(query, "id, name, mimeType")
        return items[0] if items else None

    def file_exists(self, folder_id: str, name: str) -> bool:
        try:
            return self._find_child(folder_id, name) is not None
        except HttpError as e:
            raise StorageError(f"Failed to check {name} in {folder_id}: {e}")

    def download_to_temp(self, file: FileInfo) -> str:
        """Download a file to a temporary location."""
        try:
            _, ext = os.path.splitext(file.name)
            temp_fd, temp_path = tempfile.mkstemp(suffix=ext)
            os.close(temp_fd)

            request = self.service.files().get_media(fileId=file.id)
            with open(temp_path, 'wb') as f:
                downloader = MediaIoBaseDownload(f, request)
                done = False
                while not done:
                    _, done = execute_with_retry(_ChunkRequest(downloader))
            return temp_path
        except Exception as e:
            raise StorageError(f"Failed to download file {file.name}: {e}")

    def rename(self, file: FileInfo, new_name: str) -> FileInfo:
        try:
            execute_with_retry(self.service.files().update(
                fileId=file.id,
                body={'name': new_name},
                supportsAllDrives=True,
            ))
        except HttpError as e:
            raise StorageError(f"Failed to rename {file.name}: {e}")
        return FileInfo(id=file.id, name=new_name, parent_id=file.parent_id, size=file.size)

    def move(self, file: FileInfo, dest_folder_id: str) -> FileInfo:
        """Move a file so that ``dest_folder_id`` is its only parent."""
        try:
            current = execute_with_retry(self.service.files().get(
                fileId=file.id,
                fields="parents",
                supportsAllDrives=True,
            ))
            old_parents = [p for p in current.get('parents', []) if p != dest_folder_id]
            execute_with_retry(self.service.files().update(
                fileId=file.id,
                addParents=dest_folder_id,
                removeParents=",".join(old_parents),
                fields="id, parents",
                supportsAllDrives=True,
            ))
        except HttpError as e:
            raise StorageError(f"Failed to move {file.name}: {e}")
        return FileInfo(id=file.id, name=file.name, parent_id=dest_folder_id, size=file.size)

    def ensure_folder(self, parent_id: str, name: str) -> FolderInfo:
        try:
            existing = self._find_child(parent_id, name, folders_only=True)
            if existing:
                return FolderInfo(id=existing['id'], name=existing['name'])
            folder = execute_with_retry(self.service.files().create(
                body={'name': name, 'mimeType': FOLDER_MIME, 'parents': [parent_id]},
                fields='id',
                supportsAllDrives=True,
            ))
        except HttpError as e:
            raise StorageError(f"Failed to create folder {name}: {e}")
        return FolderInfo(id=folder['id'], name=name)

    def append_text(self, folder_id: str, name: str, text: str) -> None:
        """Append via read-append-upload; Drive has no append primitive."""
        try:
            existing = self._find_child(folder_id, name)
            if existing:
                content = execute_with_retry(
                    self.service.files().get_media(fileId=existing['id'])
                )
                if isinstance(content, bytes):
                    content = content.decode('utf-8')
                media = MediaIoBaseUpload(
                    io.BytesIO((content + text).encode('utf-8')), mimetype='text/plain'
                )
                execute_with_retry(self.service.files().update(
                    fileId=existing['id'],
                    media_body=media,
                    supportsAllDrives=True,
                ))
            else:
                media = MediaIoBaseUpload(io.BytesIO(text.encode('utf-8')), mimetype='text/plain')
                execute_with_retry(self.service.files().create(
                    body={'name': name, 'parents': [folder_id]},
                    media_body=media,
                    supportsAllDrives=True,
                ))
        except HttpError as e:
            raise StorageError(f"Failed to write {name}: {e}")


class _ChunkRequest:
    """Adapts MediaIoBaseDownload.next_chunk to execute_with_retry."""

    def __init__(self, downloader: MediaIoBaseDownload) -> None:
        self.downloader = downloader

    def execute(self):
        return self.downloader.next_chunk()
