"""Verification workflow for low-confidence extracted fields.

A product is either ``VERIFIED`` (``verification_required`` is false and
``fields_to_verify`` is empty) or ``NEEDS_VERIFICATION``. The only transition
is from needs-verification to verified, and it happens through a single
store update that carries the corrected values together with the cleared
flag, so the two never disagree.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

from .errors import ValidationError
from .schemas import UPDATABLE_FIELDS, ProductFields

# Control fields are cleared by the workflow itself, never corrected
VERIFIABLE_FIELDS = UPDATABLE_FIELDS - {"verification_required", "fields_to_verify"}


class VerificationState(str, Enum):
    VERIFIED = "verified"
    NEEDS_VERIFICATION = "needs_verification"


def state_of(product: ProductFields) -> VerificationState:
    if product.verification_required:
        return VerificationState.NEEDS_VERIFICATION
    return VerificationState.VERIFIED


def check_invariant(verification_required: bool, fields_to_verify: Iterable[str]) -> None:
    """Raise ``ValidationError`` unless the flag and field list agree."""
    fields = list(fields_to_verify)
    unknown = [name for name in fields if name not in VERIFIABLE_FIELDS]
    if unknown:
        raise ValidationError(f"fields_to_verify names unknown fields: {', '.join(unknown)}")
    if not verification_required and fields:
        raise ValidationError("fields_to_verify must be empty when verification_required is false")


def pending_fields(product: ProductFields) -> List[str]:
    if not product.verification_required:
        return []
    return list(product.fields_to_verify)


def resolution_payload(
    product: ProductFields,
    corrections: Mapping[str, Any],
    *,
    allow_extra: bool = False,
) -> Dict[str, Any]:
    """Build the single update that moves ``product`` to the verified state.

    ``corrections`` may cover all or some of the flagged fields. Corrections for
    fields that were not flagged are rejected unless ``allow_extra`` is set.
    """
    control = {"verification_required", "fields_to_verify"} & set(corrections)
    if control:
        raise ValidationError(f"Corrections cannot set {', '.join(sorted(control))}")

    unknown = sorted(set(corrections) - VERIFIABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown product fields: {', '.join(unknown)}")

    if not allow_extra:
        flagged = set(pending_fields(product))
        extra = sorted(set(corrections) - flagged)
        if extra:
            raise ValidationError(f"Fields were not flagged for verification: {', '.join(extra)}")

    payload = dict(corrections)
    payload["verification_required"] = False
    payload["fields_to_verify"] = []
    return payload
