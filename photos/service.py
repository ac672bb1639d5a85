"""
Business logic for twin photo operations.
"""

import logging
import re
import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime
from shared.errors import NotFoundError
from shared.supabase_client import SupabaseService
from shared.uploads import safe_file_name

logger = logging.getLogger(__name__)

PHOTO_METADATA_FIELDS = [
    "description",
    "date_taken",
    "time_taken",
    "location",
    "country",
    "place",
    "people_in_photo",
    "category",
    "tags",
    "event_type",
]

DEFAULT_CATEGORY = "General"


def extract_country(location: Optional[str]) -> str:
    """Last component of "Place, XX" style locations when it looks like a country code."""
    if not location:
        return ""

    parts = [p.strip() for p in location.split(",")]
    if len(parts) > 1:
        last = parts[-1]
        if len(last) == 2 or last.upper() == "USA":
            return last
    return ""


def extract_place(location: Optional[str]) -> str:
    """First comma-separated component of a location."""
    if not location:
        return ""
    return location.split(",")[0].strip()


def split_tags(tags: Any) -> List[str]:
    """Accept tags as a list or a comma-separated string."""
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [str(t).strip() for t in tags if str(t).strip()]


class PhotoService(SupabaseService):
    """Service class for photo uploads and metadata CRUD."""

    TABLE = "photos"
    FOLDER = "photos"

    def _storage_path(self, twin_id: str, photo_id: str, file_name: str) -> str:
        return f"{twin_id}/{self.FOLDER}/{photo_id}/{file_name}"

    async def upload_photo(
        self,
        twin_id: str,
        file_name: str,
        file_data: bytes,
        mime_type: str,
        metadata: Optional[Dict] = None
    ) -> Dict:
        """
        Store a photo and its metadata.

        Args:
            twin_id: Owner twin ID
            file_name: Name to store the file under
            file_data: Image bytes
            mime_type: MIME type of the image
            metadata: Description, date, location and similar fields

        Returns:
            Created photo record with a signed photo_url

        Raises:
            ValidationError: If the file name has no usable last component
        """
        file_name = safe_file_name(file_name)
        metadata = {k: v for k, v in (metadata or {}).items() if k in PHOTO_METADATA_FIELDS}

        location = metadata.get("location") or ""
        place = metadata.get("place") or extract_place(location)
        country = metadata.get("country") or extract_country(location)
        if not location and place and country:
            location = f"{place}, {country}"

        # Each upload gets its own folder so equal file names never collide
        photo_id = str(uuid.uuid4())
        storage_path = self._storage_path(twin_id, photo_id, file_name)
        photo_url = await self.upload_file(storage_path, file_data, mime_type)
        logger.info(f"Uploaded photo {storage_path} ({len(file_data)} bytes)")

        record = {
            "id": photo_id,
            "twin_id": twin_id,
            "file_name": file_name,
            "file_path": storage_path,
            "file_size": len(file_data),
            "mime_type": mime_type,
            "description": metadata.get("description") or "",
            "date_taken": metadata.get("date_taken") or datetime.utcnow().strftime("%Y-%m-%d"),
            "time_taken": metadata.get("time_taken") or "",
            "location": location,
            "country": country,
            "place": place,
            "people_in_photo": metadata.get("people_in_photo") or "",
            "category": metadata.get("category") or DEFAULT_CATEGORY,
            "tags": split_tags(metadata.get("tags")),
            "event_type": metadata.get("event_type") or "",
            "uploaded_at": datetime.utcnow().isoformat() + "Z",
        }

        result = self.table(self.TABLE) \
            .insert(record) \
            .execute()

        if result.data:
            photo = result.data[0]
            photo["photo_url"] = photo_url
            return photo

        raise Exception("Failed to store photo metadata")

    async def list_photos(
        self,
        twin_id: str,
        category: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Dict]:
        """
        List a twin's photos, newest first, with signed URLs.

        Args:
            twin_id: Owner twin ID
            category: Only photos in this category
            search: Case-insensitive match on description, tags, location or people
        """
        query = self.table(self.TABLE) \
            .select("*") \
            .eq("twin_id", twin_id)

        if category:
            query = query.eq("category", category)

        if search:
            # PostgREST filter and array literal syntax
            term = re.sub(r'[,(){}"]', " ", search).strip()
            if term:
                query = query.or_(
                    f"description.ilike.%{term}%,"
                    f"location.ilike.%{term}%,"
                    f"people_in_photo.ilike.%{term}%,"
                    f"tags.cs.{{{term}}}"
                )

        result = query.order("uploaded_at", desc=True).execute()

        photos = result.data or []
        for photo in photos:
            photo["photo_url"] = await self.try_signed_url(photo.get("file_path"))
        return photos

    async def _get_record(self, twin_id: str, photo_id: str) -> Dict:
        result = self.table(self.TABLE) \
            .select("*") \
            .eq("id", photo_id) \
            .eq("twin_id", twin_id) \
            .execute()

        if not result.data:
            raise NotFoundError("Photo not found")
        return result.data[0]

    async def get_photo(self, twin_id: str, photo_id: str) -> Dict:
        """
        Get a single photo with a signed URL.

        Raises:
            NotFoundError: If the photo doesn't exist for this twin
        """
        photo = await self._get_record(twin_id, photo_id)
        photo["photo_url"] = await self.try_signed_url(photo.get("file_path"))
        return photo

    async def update_photo(self, twin_id: str, photo_id: str, data: Dict) -> Dict:
        """
        Update a photo's metadata. File fields are never changed.

        When no location is given but both place and country are, the
        location is rebuilt as "place, country".

        Raises:
            NotFoundError: If the photo doesn't exist for this twin
        """
        await self._get_record(twin_id, photo_id)

        update_data = {k: data[k] for k in PHOTO_METADATA_FIELDS if k in data}
        if "tags" in update_data:
            update_data["tags"] = split_tags(update_data["tags"])
        if not update_data.get("location") and data.get("place") and data.get("country"):
            update_data["location"] = f"{data['place']}, {data['country']}"
        update_data["updated_at"] = datetime.utcnow().isoformat() + "Z"

        result = self.table(self.TABLE) \
            .update(update_data) \
            .eq("id", photo_id) \
            .eq("twin_id", twin_id) \
            .execute()

        if result.data:
            photo = result.data[0]
            photo["photo_url"] = await self.try_signed_url(photo.get("file_path"))
            return photo

        raise Exception("Failed to update photo")

    async def delete_photo(self, twin_id: str, photo_id: str) -> bool:
        """
        Delete a photo's stored file and its metadata.

        Raises:
            NotFoundError: If the photo doesn't exist for this twin
        """
        photo = await self._get_record(twin_id, photo_id)

        storage_path = photo.get("file_path")
        if storage_path:
            try:
                await self.delete_file(storage_path)
            except Exception as e:
                logger.warning(f"Failed to delete photo from storage: {str(e)}")

        self.table(self.TABLE) \
            .delete() \
            .eq("id", photo_id) \
            .execute()

        return True
