"""
Extraction job definition.

A job asks for one document to be processed end to end. Jobs arrive from
the dispatcher as camelCase JSON:

    {"documentId", "ownerId", "pagePaths": [...], "mode",
     "providerId"?, "credentialRef"?, "fileName"?}
"""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from docrecord.utils.exceptions import ValidationError

MODE_HEURISTIC = "heuristic"
MODE_MODEL_ASSISTED = "model-assisted"
VALID_MODES = (MODE_HEURISTIC, MODE_MODEL_ASSISTED)


@dataclass
class ExtractionJob:
    """
    One document extraction request.

    Attributes:
        document_id: Document being processed
        owner_id: Owner of the document and its categories
        page_paths: Ordered page locations
        mode: "heuristic" or "model-assisted"
        provider_id: Model provider, present iff model-assisted
        credential_ref: Credential reference, present iff model-assisted
        file_name: Original filename; defaults to the first page's name
    """
    document_id: str
    owner_id: str
    page_paths: List[str] = field(default_factory=list)
    mode: str = MODE_HEURISTIC
    provider_id: Optional[str] = None
    credential_ref: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def is_model_assisted(self) -> bool:
        return self.mode == MODE_MODEL_ASSISTED

    @property
    def display_name(self) -> str:
        """Filename used for classification signal and title fallback."""
        if self.file_name:
            return self.file_name
        if self.page_paths:
            return PurePath(self.page_paths[0]).name
        return self.document_id

    def validate(self) -> None:
        """
        Check the job is well formed.

        Raises:
            ValidationError: On missing ids or pages, an unknown mode, or
                provider/credential presence not matching the mode.
        """
        if not self.document_id:
            raise ValidationError("Job is missing documentId")
        if not self.owner_id:
            raise ValidationError("Job is missing ownerId", {"documentId": self.document_id})
        if not self.page_paths or not all(isinstance(p, str) and p for p in self.page_paths):
            raise ValidationError("Job needs at least one page path", {"documentId": self.document_id})
        if self.mode not in VALID_MODES:
            raise ValidationError(f"Unknown extraction mode: {self.mode}", {"valid": list(VALID_MODES)})

        if self.is_model_assisted:
            if not self.provider_id:
                raise ValidationError("Model-assisted job is missing providerId", {"documentId": self.document_id})
            if not self.credential_ref:
                raise ValidationError("Model-assisted job is missing credentialRef", {"documentId": self.document_id})
        elif self.provider_id or self.credential_ref:
            raise ValidationError(
                "Heuristic job must not name a provider or credential",
                {"documentId": self.document_id}
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractionJob':
        """
        Build a job from the dispatcher's camelCase payload.

        Raises:
            ValidationError: If the payload is not an object or the
                resulting job is malformed.
        """
        if not isinstance(data, dict):
            raise ValidationError("Job payload must be an object")
        page_paths = data.get('pagePaths') or []
        if not isinstance(page_paths, list):
            raise ValidationError("pagePaths must be a list")

        job = cls(
            document_id=data.get('documentId') or "",
            owner_id=data.get('ownerId') or "",
            page_paths=list(page_paths),
            mode=data.get('mode') or MODE_HEURISTIC,
            provider_id=data.get('providerId'),
            credential_ref=data.get('credentialRef'),
            file_name=data.get('fileName'),
        )
        job.validate()
        return job
