"""
Classic microformats (vcard, hentry, ...) mapped onto their microformats2 names.

Each legacy root class maps to an ``h-*`` type and carries its own property
table: legacy class name -> (prefix, microformats2 property name).
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

PropertyTable = Dict[str, Tuple[str, str]]

_ADR_PROPERTIES: PropertyTable = {
    "post-office-box": ("p", "post-office-box"),
    "extended-address": ("p", "extended-address"),
    "street-address": ("p", "street-address"),
    "locality": ("p", "locality"),
    "region": ("p", "region"),
    "postal-code": ("p", "postal-code"),
    "country-name": ("p", "country-name"),
}

_GEO_PROPERTIES: PropertyTable = {
    "latitude": ("p", "latitude"),
    "longitude": ("p", "longitude"),
}

_VCARD_PROPERTIES: PropertyTable = {
    "fn": ("p", "name"),
    "honorific-prefix": ("p", "honorific-prefix"),
    "given-name": ("p", "given-name"),
    "additional-name": ("p", "additional-name"),
    "family-name": ("p", "family-name"),
    "honorific-suffix": ("p", "honorific-suffix"),
    "nickname": ("p", "nickname"),
    "email": ("u", "email"),
    "logo": ("u", "logo"),
    "photo": ("u", "photo"),
    "url": ("u", "url"),
    "uid": ("u", "uid"),
    "category": ("p", "category"),
    "adr": ("p", "adr"),
    "label": ("p", "label"),
    "geo": ("p", "geo"),
    "tel": ("p", "tel"),
    "note": ("p", "note"),
    "bday": ("dt", "bday"),
    "key": ("u", "key"),
    "org": ("p", "org"),
    "organization-name": ("p", "organization-name"),
    "organization-unit": ("p", "organization-unit"),
    "title": ("p", "job-title"),
    "role": ("p", "role"),
    "tz": ("p", "tz"),
    "rev": ("dt", "rev"),
    **_ADR_PROPERTIES,
    **_GEO_PROPERTIES,
}

_HENTRY_PROPERTIES: PropertyTable = {
    "entry-title": ("p", "name"),
    "entry-summary": ("p", "summary"),
    "entry-content": ("e", "content"),
    "published": ("dt", "published"),
    "updated": ("dt", "updated"),
    "author": ("p", "author"),
    "category": ("p", "category"),
    "geo": ("p", "geo"),
}

_HFEED_PROPERTIES: PropertyTable = {
    "author": ("p", "author"),
    "photo": ("u", "photo"),
    "url": ("u", "url"),
    "category": ("p", "category"),
}

_VEVENT_PROPERTIES: PropertyTable = {
    "summary": ("p", "name"),
    "dtstart": ("dt", "start"),
    "dtend": ("dt", "end"),
    "duration": ("dt", "duration"),
    "description": ("p", "description"),
    "url": ("u", "url"),
    "category": ("p", "category"),
    "location": ("p", "location"),
    "geo": ("p", "location"),
}

_HREVIEW_PROPERTIES: PropertyTable = {
    "summary": ("p", "name"),
    "item": ("p", "item"),
    "reviewer": ("p", "author"),
    "dtreviewed": ("dt", "published"),
    "rating": ("p", "rating"),
    "best": ("p", "best"),
    "worst": ("p", "worst"),
    "description": ("e", "content"),
    "url": ("u", "url"),
}

_HREVIEW_AGGREGATE_PROPERTIES: PropertyTable = {
    "summary": ("p", "name"),
    "item": ("p", "item"),
    "rating": ("p", "rating"),
    "average": ("p", "average"),
    "best": ("p", "best"),
    "worst": ("p", "worst"),
    "count": ("p", "count"),
    "votes": ("p", "votes"),
    "url": ("u", "url"),
}

_HRECIPE_PROPERTIES: PropertyTable = {
    "fn": ("p", "name"),
    "ingredient": ("p", "ingredient"),
    "yield": ("p", "yield"),
    "instructions": ("e", "instructions"),
    "duration": ("dt", "duration"),
    "photo": ("u", "photo"),
    "summary": ("p", "summary"),
    "author": ("p", "author"),
    "published": ("dt", "published"),
    "nutrition": ("p", "nutrition"),
    "category": ("p", "category"),
}

_HPRODUCT_PROPERTIES: PropertyTable = {
    "fn": ("p", "name"),
    "photo": ("u", "photo"),
    "brand": ("p", "brand"),
    "category": ("p", "category"),
    "description": ("p", "description"),
    "identifier": ("u", "identifier"),
    "url": ("u", "url"),
    "review": ("p", "review"),
    "price": ("p", "price"),
}

_HRESUME_PROPERTIES: PropertyTable = {
    "summary": ("p", "summary"),
    "contact": ("p", "contact"),
    "education": ("p", "education"),
    "experience": ("p", "experience"),
    "skill": ("p", "skill"),
    "affiliation": ("p", "affiliation"),
}

LEGACY_ROOTS: Dict[str, Tuple[str, PropertyTable]] = {
    "vcard": ("h-card", _VCARD_PROPERTIES),
    "hentry": ("h-entry", _HENTRY_PROPERTIES),
    "hfeed": ("h-feed", _HFEED_PROPERTIES),
    "vevent": ("h-event", _VEVENT_PROPERTIES),
    "hreview": ("h-review", _HREVIEW_PROPERTIES),
    "hreview-aggregate": ("h-review-aggregate", _HREVIEW_AGGREGATE_PROPERTIES),
    "hrecipe": ("h-recipe", _HRECIPE_PROPERTIES),
    "hproduct": ("h-product", _HPRODUCT_PROPERTIES),
    "adr": ("h-adr", _ADR_PROPERTIES),
    "geo": ("h-geo", _GEO_PROPERTIES),
    "hresume": ("h-resume", _HRESUME_PROPERTIES),
}


def legacy_types(classes: Iterable[str]) -> List[str]:
    """Legacy root classes among ``classes``, in class order."""
    return [name for name in classes if name in LEGACY_ROOTS]


def property_table(legacy_roots: Iterable[str]) -> PropertyTable:
    """Merged property table for an element carrying the given legacy roots."""
    table: PropertyTable = {}
    for name in legacy_roots:
        for legacy, mapped in LEGACY_ROOTS[name][1].items():
            table.setdefault(legacy, mapped)
    return table
