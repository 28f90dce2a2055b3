"""
Helpers for shaping tags and attributes into ELBv2 request parameters.
"""

from typing import Any, Dict, List, Optional


def to_tag_list(tags: Optional[Dict[str, Any]]) -> Optional[List[Dict[str, str]]]:
    """
    Convert a tag mapping into the Key/Value list the API expects.

    Args:
        tags: Tag mapping from the definition (may be empty or None)

    Returns:
        List of tag dicts, or None when there are no tags. The control plane
        rejects an empty tag array, so "no tags" is never sent as [].
    """
    if not tags:
        return None
    return [{"Key": str(key), "Value": str(value)} for key, value in tags.items()]


def _attribute_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_attribute_pairs(attributes: Dict[str, Any]) -> List[Dict[str, str]]:
    """
    Convert an attribute mapping into an ordered list of Key/Value pairs.

    YAML booleans are rendered the way ELBv2 spells them ("true"/"false").
    """
    return [{"Key": str(key), "Value": _attribute_value(value)} for key, value in attributes.items()]
