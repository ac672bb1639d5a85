"""
Business logic for home document uploads.
"""

import logging
from typing import List, Dict
from datetime import datetime
from shared.supabase_client import SupabaseService
from shared.uploads import safe_directory, safe_file_name

logger = logging.getLogger(__name__)


class HomeDocumentService(SupabaseService):
    """Service class for documents attached to a twin's homes."""

    TABLE = "home_documents"

    async def upload_insurance_document(
        self,
        twin_id: str,
        home_id: str,
        directory: str,
        file_name: str,
        file_data: bytes
    ) -> Dict:
        """
        Store a home insurance PDF and record it against the home.

        Args:
            twin_id: Owner twin ID
            home_id: Home the document belongs to
            directory: Folder inside the twin's storage area
            file_name: Name of the PDF
            file_data: PDF bytes

        Returns:
            Created document record with a signed document_url

        Raises:
            ValidationError: If the folder contains ".." or the name is unusable
        """
        directory = safe_directory(directory)
        file_name = safe_file_name(file_name)
        storage_path = f"{twin_id}/{directory}/{file_name}" if directory else f"{twin_id}/{file_name}"
        mime_type = "application/pdf"

        document_url = await self.upload_file(storage_path, file_data, mime_type)
        logger.info(f"Uploaded home insurance document {storage_path} ({len(file_data)} bytes)")

        record = {
            "twin_id": twin_id,
            "home_id": home_id,
            "document_type": "insurance",
            "directory": directory,
            "file_name": file_name,
            "file_path": storage_path,
            "file_size": len(file_data),
            "mime_type": mime_type,
            "uploaded_at": datetime.utcnow().isoformat() + "Z",
        }

        result = self.table(self.TABLE) \
            .insert(record) \
            .execute()

        if result.data:
            document = result.data[0]
            document["document_url"] = document_url
            return document

        raise Exception("Failed to store document metadata")

    async def list_documents(self, twin_id: str, home_id: str) -> List[Dict]:
        """List a home's documents, newest first, with signed URLs."""
        result = self.table(self.TABLE) \
            .select("*") \
            .eq("twin_id", twin_id) \
            .eq("home_id", home_id) \
            .order("uploaded_at", desc=True) \
            .execute()

        documents = result.data or []
        for document in documents:
            document["document_url"] = await self.try_signed_url(document.get("file_path"))
        return documents
