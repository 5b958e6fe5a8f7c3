"""Document kinds and per-document review status

Replaces the two parallel per-document maps (admin review vs. client status)
with a single review status per document kind.
"""

from enum import Enum
from typing import FrozenSet


class DocumentKind(str, Enum):
    """Fixed vocabulary of document kinds accepted by the portal"""
    PASSPORT = "passport"
    PHOTO = "photo"
    CV = "cv"
    COVER_LETTER = "coverLetter"
    QUALIFICATIONS = "qualifications"
    EXPERIENCE = "experience"
    DOCUMENTS = "documents"
    JOB_OFFER = "jobOffer"
    CONTRACT = "contract"
    EDITED_CV = "edited_cv"
    EDITED_COVER = "edited_cover"


class ReviewStatus(str, Enum):
    """Review state of a single document kind"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Kinds an applicant uploads with the application form (reviewable)
APPLICANT_DOCUMENT_KINDS: FrozenSet[DocumentKind] = frozenset({
    DocumentKind.PASSPORT,
    DocumentKind.PHOTO,
    DocumentKind.CV,
    DocumentKind.COVER_LETTER,
    DocumentKind.QUALIFICATIONS,
    DocumentKind.EXPERIENCE,
    DocumentKind.DOCUMENTS,
})

# Must all be approved before an application is documents-approved
REQUIRED_DOCUMENT_KINDS: FrozenSet[DocumentKind] = frozenset({
    DocumentKind.PASSPORT,
    DocumentKind.PHOTO,
    DocumentKind.CV,
    DocumentKind.QUALIFICATIONS,
})

# Count toward approval only when uploaded
OPTIONAL_DOCUMENT_KINDS: FrozenSet[DocumentKind] = frozenset({
    DocumentKind.COVER_LETTER,
    DocumentKind.EXPERIENCE,
})

# Max files accepted per kind in one upload event
MAX_FILES_PER_KIND = {
    DocumentKind.PASSPORT: 1,
    DocumentKind.PHOTO: 1,
    DocumentKind.CV: 1,
    DocumentKind.COVER_LETTER: 1,
    DocumentKind.QUALIFICATIONS: 5,
    DocumentKind.EXPERIENCE: 5,
    DocumentKind.DOCUMENTS: 5,
}


def parse_document_kind(value: str) -> DocumentKind:
    """Convert a raw kind string to DocumentKind

    Args:
        value: Kind as sent by a client (e.g. 'coverLetter')

    Returns:
        Matching DocumentKind

    Raises:
        ValueError: If value is not in the vocabulary

    Example:
        >>> parse_document_kind('cv')
        <DocumentKind.CV: 'cv'>
    """
    try:
        return DocumentKind(value)
    except ValueError:
        raise ValueError(f"Unknown document kind: {value!r}")


def is_applicant_document(kind: str) -> bool:
    """Check whether kind is one of the reviewable applicant document kinds"""
    return kind in {k.value for k in APPLICANT_DOCUMENT_KINDS}
