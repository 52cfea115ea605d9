"""
Form field mapping.

Turns a raw form submission (opaque field ids -> values) into canonical CRM
field names. Explicit field mappings win; without them a fixed rule table of
synonyms is matched against the lower-cased field id.
"""

import logging
from typing import Dict, Mapping, Optional, Sequence, Tuple

from leadflow.integrations.contracts.interfaces import CanonicalContact, MappedFields

logger = logging.getLogger(__name__)


# Evaluated in order; the first rule whose synonym appears in the field id wins.
FIELD_RULES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("firstName", ("firstname", "first_name", "fname")),
    ("lastName", ("lastname", "last_name", "lname")),
    ("email", ("email",)),
    ("phone", ("phone",)),
    ("address", ("address",)),
    ("city", ("city",)),
    ("state", ("state",)),
    ("zip", ("zip",)),
)

# Keys consulted, in order, for each contact attribute.
CONTACT_FALLBACKS: Dict[str, Tuple[str, ...]] = {
    "first_name": ("firstName", "fname", "first_name"),
    "last_name": ("lastName", "lname", "last_name"),
    "email": ("email",),
    "phone": ("phone",),
    "address": ("address",),
    "city": ("city", "new_field"),
    "state": ("state",),
    "zip": ("zip", "zipcode"),
}


def match_canonical_field(field_id: str) -> Optional[str]:
    lowered = field_id.lower()
    for canonical, synonyms in FIELD_RULES:
        if any(synonym in lowered for synonym in synonyms):
            return canonical
    return None


def map_fields(form_data: Mapping[str, str], field_mappings: Optional[Mapping[str, str]] = None) -> MappedFields:
    canonical: Dict[str, str] = {}
    original: Dict[str, str] = dict(form_data)

    if field_mappings:
        for field_id, value in form_data.items():
            api_name = field_mappings.get(field_id)
            if api_name:
                canonical[api_name] = value
        logger.debug("Mapped %d of %d fields using explicit mappings", len(canonical), len(form_data))
        return MappedFields(canonical=canonical, original=original, explicit=True)

    for field_id, value in form_data.items():
        name = match_canonical_field(field_id)
        if name is not None:
            canonical[name] = value
    logger.debug("Mapped %d of %d fields by name heuristics", len(canonical), len(form_data))
    return MappedFields(canonical=canonical, original=original, explicit=False)


def build_contact(mapped: MappedFields) -> CanonicalContact:
    values = {
        attribute: mapped.contact_value(*keys)
        for attribute, keys in CONTACT_FALLBACKS.items()
    }
    return CanonicalContact(**values)
